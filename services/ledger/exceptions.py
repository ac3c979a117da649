"""
Domain Exceptions for the Growth Ledger

Every failure a ledger or lifecycle operation can report derives from
BaseLedgerException, so callers can render it inline instead of crashing.

Author: Growth Ledger Team
"""


class BaseLedgerException(Exception):
    """Base exception for all growth ledger business errors"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Serialize for an API response"""
        return {
            "error": {
                "code": self.__class__.__name__,
                "message": self.message,
                "details": self.details
            }
        }


# =============================================================================
# Input / state validation
# =============================================================================

class ValidationError(BaseLedgerException):
    """Invalid input or a request the current state does not allow"""

    def __init__(self, message: str, field: str = None, **details):
        if field is not None:
            details["field"] = field
        super().__init__(message=message, details=details)


class NotFoundError(BaseLedgerException):
    """Operation on an unknown sprout, twig or origin"""

    def __init__(self, kind: str, identifier: str):
        super().__init__(
            message=f"{kind.capitalize()} does not exist",
            details={
                "kind": kind,
                "id": identifier
            }
        )


# =============================================================================
# Resource economy
# =============================================================================

class InsufficientResource(BaseLedgerException):
    """A soil or sun spend exceeds the available balance"""

    def __init__(self, resource: str, required: int, available: int):
        super().__init__(
            message=f"Not enough {resource}",
            details={
                "resource": resource,
                "required": required,
                "available": available
            }
        )


class WeeklyLimitReached(BaseLedgerException):
    """The twig already received its reflection this week"""

    def __init__(self, twig_id: str, week_start: str):
        super().__init__(
            message="Already reflected on this facet this week",
            details={
                "twig_id": twig_id,
                "week_start": week_start
            }
        )


class LedgerBusy(BaseLedgerException):
    """A ledger operation was re-entered before the previous one committed"""

    def __init__(self, operation: str):
        super().__init__(
            message="Another ledger operation is still in progress",
            details={"operation": operation}
        )


# =============================================================================
# Persistence
# =============================================================================

class PersistenceError(BaseLedgerException):
    """Storage failed; in-memory and persisted state may have diverged"""

    def __init__(self, operation: str, original_error: str):
        super().__init__(
            message="Failed to persist garden state",
            details={
                "operation": operation,
                "original_error": original_error
            }
        )


# =============================================================================
# HTTP Status Mapping
# =============================================================================

EXCEPTION_TO_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    InsufficientResource: 409,
    WeeklyLimitReached: 409,
    LedgerBusy: 409,
    PersistenceError: 503,
}
