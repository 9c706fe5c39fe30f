"""Domain Errors

Pure domain rules raise these; use cases catch them, roll back, and translate
them into ``libs.result.Error`` with the same code.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """How a caller should react to a domain error"""
    VALIDATION = "validation"    # Malformed input, never retried
    CONSISTENCY = "consistency"  # Well-formed but violates state, retry only with a new key


class ErrorCodes:
    # Credit ledger
    CREDIT_IDEMPOTENCY_KEY_REQUIRED = "CREDIT_IDEMPOTENCY_KEY_REQUIRED"
    CREDIT_DESCRIPTION_REQUIRED = "CREDIT_DESCRIPTION_REQUIRED"
    CREDIT_ENTRIES_REQUIRED = "CREDIT_ENTRIES_REQUIRED"
    CREDIT_INVALID_ENTITY = "CREDIT_INVALID_ENTITY"
    CREDIT_INVALID_AMOUNT = "CREDIT_INVALID_AMOUNT"
    CREDIT_DOUBLE_ENTRY_VIOLATION = "CREDIT_DOUBLE_ENTRY_VIOLATION"
    CREDIT_TRANSACTION_FAILED = "CREDIT_TRANSACTION_FAILED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"

    # Points
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Questionnaire definition
    DUPLICATE_QUESTION_ID = "DUPLICATE_QUESTION_ID"
    SELECT_OPTIONS_REQUIRED = "SELECT_OPTIONS_REQUIRED"
    DUPLICATE_OPTION_ID = "DUPLICATE_OPTION_ID"
    INVALID_NUMBER_BOUNDS = "INVALID_NUMBER_BOUNDS"
    NEGATIVE_FEE = "NEGATIVE_FEE"

    # Questionnaire answers
    QUESTION_REQUIRED_UNANSWERED = "QUESTION_REQUIRED_UNANSWERED"
    UNKNOWN_QUESTION = "UNKNOWN_QUESTION"
    DUPLICATE_ANSWER = "DUPLICATE_ANSWER"
    WRONG_ANSWER_TYPE = "WRONG_ANSWER_TYPE"
    CONSTRAINT_VIOLATED = "CONSTRAINT_VIOLATED"

    # Discount rules
    INVALID_DISCOUNT_RULE = "INVALID_DISCOUNT_RULE"

    # Bookings
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    CLASS_NOT_FOUND = "CLASS_NOT_FOUND"
    CLASS_NOT_BOOKABLE = "CLASS_NOT_BOOKABLE"
    CLASS_FULL = "CLASS_FULL"
    INVALID_PRICE = "INVALID_PRICE"

    # Subscriptions
    SUBSCRIPTION_NOT_FOUND = "SUBSCRIPTION_NOT_FOUND"
    SUBSCRIPTION_NOT_ACTIVE = "SUBSCRIPTION_NOT_ACTIVE"

    # Propagation
    PROPAGATION_DEPTH_EXCEEDED = "PROPAGATION_DEPTH_EXCEEDED"


class DomainError(Exception):
    """Base class for all rule violations raised by the domain layer"""

    category = ErrorCategory.VALIDATION

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class LedgerValidationError(DomainError):
    """Malformed credit transaction input"""


class LedgerConsistencyError(DomainError):
    """Insufficient balance or a previously failed idempotency key"""

    category = ErrorCategory.CONSISTENCY


class QuestionnaireError(DomainError):
    """Invalid questionnaire definition or answers"""


class DiscountRuleError(DomainError):
    """Invalid discount rule definition"""


class PricingError(DomainError):
    """Price could not be computed for a booking"""


class BookingError(DomainError):
    """Booking cannot be created or changed in its current state"""

    category = ErrorCategory.CONSISTENCY


class InvalidTransitionError(BookingError):
    """Requested booking status change is not a legal transition"""

    def __init__(self, current_status: str, target_status: str):
        super().__init__(
            ErrorCodes.INVALID_STATUS_TRANSITION,
            f"Cannot transition booking from {current_status} to {target_status}",
            {"current_status": current_status, "target_status": target_status},
        )


class PointsError(DomainError):
    """Loyalty points rule violation"""

    category = ErrorCategory.CONSISTENCY


class PropagationError(DomainError):
    """A synchronous change cascade could not complete"""

    category = ErrorCategory.CONSISTENCY
