from fastapi import status
from libs.result import Error


class ClientError(Exception):
    """Business error surfaced to the HTTP client as {"error": {...}}"""

    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code


NOT_FOUND_CODES = {
    "BOOKING_NOT_FOUND",
    "CUSTOMER_NOT_FOUND",
    "SERVICE_NOT_FOUND",
    "INVOICE_NOT_FOUND",
    "PAYMENT_NOT_FOUND",
    "JOB_NOT_FOUND",
}

CONFLICT_CODES = {
    "SLOT_UNAVAILABLE",
    "INVOICE_ALREADY_EXISTS",
    "INVOICE_ALREADY_PAID",
}

UPSTREAM_CODES = {
    "PROCESSOR_ERROR",
    "EMAIL_NOT_SENT",
}


def status_for(error: Error) -> int:
    """HTTP status for a use case error code"""
    if error.code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    if error.code in CONFLICT_CODES:
        return status.HTTP_409_CONFLICT
    if error.code in UPSTREAM_CODES:
        return status.HTTP_502_BAD_GATEWAY
    if error.code == "PAYMENTS_NOT_CONFIGURED":
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if error.code.endswith("_FAILED"):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def raise_for_error(error: Error):
    raise ClientError(error, status_code=status_for(error))
