"""Form validation package."""

from gastozen.validation.validator import (
    AccountFormResult,
    AccountFormValidator,
    TransactionFormValidator,
    ValidationIssue,
    ValidationResult,
    get_user_friendly_summary,
)

__all__ = [
    "AccountFormResult",
    "AccountFormValidator",
    "TransactionFormValidator",
    "ValidationIssue",
    "ValidationResult",
    "get_user_friendly_summary",
]
