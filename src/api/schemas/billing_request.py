"""Request schemas for Invoice and Payment API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from src.app.use_cases.billing.dtos import InvoiceLineItemDTO
from src.domain.payment import PaymentMethod


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for creating an invoice

    Used for POST /invoices endpoint.
    """

    customer_id: str = Field(..., min_length=1)
    booking_id: Optional[str] = Field(default=None)
    line_items: List[InvoiceLineItemDTO] = Field(..., min_length=1)
    discount_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    due_date: Optional[date] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "0b8e6f8a-3c61-4b1c-9a53-6f0e2f1f8d11",
                "line_items": [
                    {"description": "Regular Cleaning", "quantity": 1, "unit_price": "99.00"}
                ],
                "discount_amount": "0.00",
            }
        }


class ApplyPaymentRequestSchema(BaseModel):
    """
    Request schema for recording a manual payment

    Used for POST /payments endpoint. A non-positive or excessive amount
    is rejected by the use case (INVALID_AMOUNT / OVERPAYMENT).
    """

    invoice_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., description="Amount received")
    method: PaymentMethod = Field(default=PaymentMethod.CASH)
    reference_number: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    @field_validator("method")
    @classmethod
    def validate_method(cls, v):
        if PaymentMethod(v) == PaymentMethod.CARD:
            raise ValueError("Card payments are recorded through checkout")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "5d7c2a8e-1f4b-4d0e-a3d1-0f6e9b2c7a10",
                "amount": "50.00",
                "method": "check",
                "reference_number": "1042",
            }
        }


class CheckoutRequestSchema(BaseModel):
    invoice_id: str = Field(..., min_length=1)


class RefundRequestSchema(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)
