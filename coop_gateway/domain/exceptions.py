"""Domain-specific exceptions

Each exception carries the HTTP status it is rendered with, so the API layer
can turn any of them into the standard error envelope.
"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error


class ValidationError(DomainException):
    """Required field missing or malformed"""

    status_code = 400


class InsufficientFundsError(ValidationError):
    """Source account balance is lower than the transfer amount"""


class AuthorizationError(DomainException):
    """Collection not whitelisted or KYC not verified"""

    status_code = 403


class NotFoundError(DomainException):
    """Account, member or document does not exist"""

    status_code = 404


class ConflictError(DomainException):
    """Duplicate member or application"""

    status_code = 409


class PayloadTooLargeError(DomainException):
    """Serialized document exceeds the size ceiling"""

    status_code = 413


class StoreOperationError(DomainException):
    """Document store rejected or failed an operation"""

    status_code = 500


class TransferFailedError(DomainException):
    """Unit of work aborted; no balance change is visible"""

    status_code = 500


class UnavailableError(DomainException):
    """Document store handle is not initialized"""

    status_code = 503


class GatewayTimeoutError(DomainException):
    """Store operation exceeded its deadline"""

    status_code = 504
