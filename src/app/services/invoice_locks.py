"""Per-invoice serialization of balance updates"""

import asyncio
import weakref


class InvoiceLockRegistry:
    """
    One ``asyncio.Lock`` per invoice id

    Payment application is a read-modify-write of amount_paid/amount_due.
    Holding the invoice's lock for the whole use case keeps two in-process
    payments from both passing the overpayment check on a stale read.
    SELECT FOR UPDATE covers the multi-process case on databases that
    support it.

    Locks are held weakly: an entry lives only while some coroutine holds
    or waits on it, so the registry does not grow with every invoice seen.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, invoice_id: str) -> asyncio.Lock:
        lock = self._locks.get(invoice_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[invoice_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
