"""Payment API Routes

Manual payments, card checkout and refunds.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import optional_claims, require_staff, require_manager, customer_scope
from src.api.error import raise_for_error
from src.api.schemas.billing_request import (
    ApplyPaymentRequestSchema,
    CheckoutRequestSchema,
    RefundRequestSchema,
)
from src.app.services.authenticator import Claims
from src.app.use_cases.billing.dtos import (
    ApplyPaymentCommandDTO,
    CheckoutSessionResponseDTO,
    PaymentAppliedResponseDTO,
    RefundPaymentCommandDTO,
    RefundResponseDTO,
)
from src.app.use_cases.billing.apply_payment import ApplyPayment
from src.app.use_cases.billing.create_checkout_session import CreateCheckoutSession
from src.app.use_cases.billing.refund_payment import RefundPayment
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPaymentRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_broadcaster, get_invoice_locks, get_payment_processor

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "",
    response_model=PaymentAppliedResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Payment rejected",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "OVERPAYMENT",
                            "message": "Payment exceeds amount due. Amount: 150.00, Due: 100.00"
                        }
                    }
                }
            }
        }
    }
)
async def apply_payment(
    request: ApplyPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    locks=Depends(get_invoice_locks),
    broadcaster=Depends(get_broadcaster),
    claims: Claims = Depends(require_staff),
):
    """
    Record a cash, check or bank transfer payment (staff only).

    The amount must be positive and no more than the amount due; a
    partial amount leaves the invoice ``partial``.
    """
    use_case = ApplyPayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        locks=locks,
        broadcaster=broadcaster,
    )
    result = await use_case.execute(
        ApplyPaymentCommandDTO(
            invoice_id=request.invoice_id,
            amount=request.amount,
            method=request.method,
            reference_number=request.reference_number,
            notes=request.notes,
        )
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/checkout",
    response_model=CheckoutSessionResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        503: {
            "description": "Card payments not configured",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENTS_NOT_CONFIGURED",
                            "message": "Online payments are not configured"
                        }
                    }
                }
            }
        }
    }
)
async def create_checkout_session(
    request: CheckoutRequestSchema,
    session: AsyncSession = Depends(get_session),
    processor=Depends(get_payment_processor),
    claims: Optional[Claims] = Depends(optional_claims),
):
    """
    Start a hosted card checkout for the full amount due.

    Open to the pay link; a signed-in customer can only pay their own
    invoices.
    """
    use_case = CreateCheckoutSession(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        processor=processor,
    )
    result = await use_case.execute(request.invoice_id, customer_id=customer_scope(claims))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{payment_id}/refund",
    response_model=RefundResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def refund_payment(
    payment_id: str,
    request: RefundRequestSchema,
    session: AsyncSession = Depends(get_session),
    processor=Depends(get_payment_processor),
    locks=Depends(get_invoice_locks),
    broadcaster=Depends(get_broadcaster),
    claims: Claims = Depends(require_manager),
):
    """
    Refund a completed payment in full (manager or admin).

    Card payments are refunded through the processor first. The invoice
    balance is reopened and becomes ``refunded`` when nothing remains
    paid, ``partial`` otherwise.
    """
    use_case = RefundPayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        locks=locks,
        processor=processor,
        broadcaster=broadcaster,
    )
    result = await use_case.execute(
        RefundPaymentCommandDTO(payment_id=payment_id, reason=request.reason)
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
