"""Payment processor webhook

Verifies the signature, then applies completed checkouts. Redelivered
events are acknowledged without recording a second payment.
"""

import logging
from fastapi import APIRouter, Depends, Header, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from libs.result import Error
from src.api.error import ClientError
from src.app.services.payment_processor import WebhookVerificationError
from src.app.use_cases.billing.dtos import ConfirmProcessorPaymentCommandDTO
from src.app.use_cases.billing.confirm_processor_payment import ConfirmProcessorPayment
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPaymentRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_broadcaster, get_invoice_locks, get_payment_processor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

CHECKOUT_COMPLETED = "checkout.session.completed"


@router.post("/stripe", status_code=status.HTTP_200_OK)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(default="", alias="stripe-signature"),
    session: AsyncSession = Depends(get_session),
    processor=Depends(get_payment_processor),
    locks=Depends(get_invoice_locks),
    broadcaster=Depends(get_broadcaster),
):
    """
    Receive processor events.

    **Returns:**
    - 200: Event handled, ignored or already recorded
    - 400: Signature verification failed
    - 500: Payment could not be recorded (the processor retries)
    - 503: Card payments not configured
    """
    if processor is None:
        raise ClientError(
            Error(code="PAYMENTS_NOT_CONFIGURED", message="Online payments are not configured"),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    payload = await request.body()
    try:
        event = processor.verify_webhook(payload, stripe_signature)
    except WebhookVerificationError as e:
        raise ClientError(Error(code=e.code, message=str(e)))

    if event.type != CHECKOUT_COMPLETED:
        logger.debug(f"Ignoring processor event {event.type}")
        return {"received": True}

    use_case = ConfirmProcessorPayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        locks=locks,
        broadcaster=broadcaster,
    )
    result = await use_case.execute(
        ConfirmProcessorPaymentCommandDTO(
            session_id=event.session_id,
            invoice_id=event.invoice_id,
            payment_intent=event.payment_intent,
        )
    )

    if result.is_err():
        if result.error.code == "CONFIRM_PAYMENT_FAILED":
            raise ClientError(result.error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        # Not retryable; acknowledged so the processor stops redelivering
        logger.warning(
            f"Checkout {event.session_id} not applied: {result.error.code} {result.error.message}"
        )
        return {"received": True, "applied": False}

    return {"received": True, "applied": not result.value.duplicate}
