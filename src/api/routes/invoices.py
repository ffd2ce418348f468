"""Invoice API Routes

FastAPI routes for creating, reading and sending invoices.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import get_claims, require_staff, customer_scope
from src.api.error import raise_for_error
from src.api.schemas.billing_request import CreateInvoiceRequestSchema
from src.app.services.authenticator import Claims
from src.app.use_cases.billing.dtos import (
    CreateInvoiceCommandDTO,
    InvoiceResponseDTO,
    SendInvoiceResponseDTO,
)
from src.app.use_cases.billing.create_invoice import CreateInvoice
from src.app.use_cases.billing.get_invoice import GetInvoice, ListInvoices
from src.app.use_cases.billing.send_invoice import SendInvoice
from src.adapter.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyCommunicationRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceItemRepository,
    SqlAlchemyInvoiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.invoice import InvoiceStatus
from src.depends import get_session, get_config, get_tax_rate, get_email_sender, get_broadcaster

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Booking already invoiced",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVOICE_ALREADY_EXISTS",
                            "message": "Booking 123 already has invoice INV-1001"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Customer not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CUSTOMER_NOT_FOUND",
                            "message": "Customer 123 not found"
                        }
                    }
                }
            }
        }
    }
)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
    tax_rate=Depends(get_tax_rate),
    broadcaster=Depends(get_broadcaster),
    claims: Claims = Depends(require_staff),
):
    """
    Create a draft invoice (staff only).

    Tax is charged on the discounted subtotal at the configured rate. The
    due date defaults to the issue date plus the configured due days.

    **Example request:**
    ```json
    {
      "customer_id": "0b8e6f8a-3c61-4b1c-9a53-6f0e2f1f8d11",
      "line_items": [{"description": "Deep Cleaning", "quantity": 1, "unit_price": "179.00"}],
      "discount_amount": "10.00"
    }
    ```
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = CreateInvoiceCommandDTO(
        customer_id=request.customer_id,
        booking_id=request.booking_id,
        line_items=request.line_items,
        discount_amount=request.discount_amount,
        due_date=request.due_date,
        notes=request.notes,
    )

    use_case = CreateInvoice(
        uow=uow,
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        item_repo=SqlAlchemyInvoiceItemRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        booking_repo=SqlAlchemyBookingRepository(session),
        tax_rate=tax_rate,
        due_days=config.INVOICE_DUE_DAYS,
        invoice_prefix=config.INVOICE_PREFIX,
        start_number=config.INVOICE_START_NUMBER,
        broadcaster=broadcaster,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "",
    response_model=List[InvoiceResponseDTO],
    status_code=status.HTTP_200_OK,
)
async def list_invoices(
    customer_id: Optional[str] = Query(default=None),
    status_filter: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
    claims: Claims = Depends(get_claims),
):
    """List invoices. Customers only see their own."""
    scope = customer_scope(claims)
    use_case = ListInvoices(SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(
        customer_id=scope or customer_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Invoice not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVOICE_NOT_FOUND",
                            "message": "Invoice 123 not found"
                        }
                    }
                }
            }
        }
    }
)
async def get_invoice(
    invoice_id: str,
    session: AsyncSession = Depends(get_session),
    claims: Claims = Depends(get_claims),
):
    """Get an invoice with its line items."""
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session), SqlAlchemyInvoiceItemRepository(session)
    )
    result = await use_case.execute(invoice_id, customer_id=customer_scope(claims))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{invoice_id}/send",
    response_model=SendInvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        502: {
            "description": "Email provider rejected the message",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "EMAIL_NOT_SENT",
                            "message": "Invoice INV-1001 could not be emailed"
                        }
                    }
                }
            }
        }
    }
)
async def send_invoice(
    invoice_id: str,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
    email_sender=Depends(get_email_sender),
    broadcaster=Depends(get_broadcaster),
    claims: Claims = Depends(require_staff),
):
    """
    Email an invoice to its customer (staff only).

    The invoice becomes ``sent`` only if the email was accepted; otherwise
    its status is unchanged and EMAIL_NOT_SENT is returned.
    """
    use_case = SendInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        communication_repo=SqlAlchemyCommunicationRepository(session),
        email_sender=email_sender,
        company_name=config.COMPANY_NAME,
        frontend_url=config.FRONTEND_URL,
        broadcaster=broadcaster,
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
