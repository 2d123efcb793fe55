"""
Ledger Event Models

Every ledger mutation, rejection and external-service failure is
described by a LedgerEvent and written to the structured local log.
Events are not persisted: they exist for debugging and tracing only.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from gastozen.models.ledger import (
    Account,
    Category,
    LedgerErrorKind,
    Transaction,
    TransactionDraft,
)


class LedgerEventType(str, Enum):
    """Types of events we log."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Accounts and categories
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"

    # Rejections
    OPERATION_REJECTED = "operation_rejected"

    # Bulk operations
    STATE_LOADED = "state_loaded"
    STATE_RESET = "state_reset"
    STATE_VALUE_MALFORMED = "state_value_malformed"
    IMPORT_COMPLETED = "import_completed"
    IMPORT_FAILED = "import_failed"
    EXPORT_COMPLETED = "export_completed"

    # Drafting assistant
    DRAFT_REQUESTED = "draft_requested"
    DRAFT_PRODUCED = "draft_produced"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class LedgerEventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single structured log event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType
    severity: LedgerEventSeverity = LedgerEventSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'account')"
    )
    entity_id: Optional[str] = None

    # Correlation - for tracking related events of one user action
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


def _money(value: Decimal) -> str:
    return str(value)


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(transaction, account)
        event = LedgerEventBuilder.rejected("add_transaction", kind, message)
    """

    @staticmethod
    def transaction_added(
        transaction: Transaction,
        account: Account,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction.id,
            correlation_id=correlation_id,
            description=f"Transaction added: {transaction.type.value} {transaction.amount}",
            details={
                "account_id": account.id,
                "amount": _money(transaction.amount),
                "type": transaction.type.value,
                "new_balance": _money(account.balance),
            },
        )

    @staticmethod
    def transaction_updated(
        original: Transaction,
        updated: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=updated.id,
            correlation_id=correlation_id,
            description="Transaction updated",
            details={
                "from_account_id": original.account_id,
                "to_account_id": updated.account_id,
                "from_amount": _money(original.signed_amount),
                "to_amount": _money(updated.signed_amount),
            },
        )

    @staticmethod
    def transaction_deleted(
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction.id,
            correlation_id=correlation_id,
            description="Transaction deleted",
            details={
                "account_id": transaction.account_id,
                "reversed_amount": _money(-transaction.signed_amount),
            },
        )

    @staticmethod
    def entity_changed(
        event_type: LedgerEventType,
        entity: Account | Category,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        entity_type = "account" if isinstance(entity, Account) else "category"
        return LedgerEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity.id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} {event_type.value.split('_')[-1]}: {entity.name}",
        )

    @staticmethod
    def rejected(
        operation: str,
        error: LedgerErrorKind,
        message: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.OPERATION_REJECTED,
            severity=LedgerEventSeverity.WARNING,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {error.value}",
            details={
                "operation": operation,
                "error": error.value,
                "message": message,
            },
        )

    @staticmethod
    def state_loaded(
        accounts: int,
        categories: int,
        transactions: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_LOADED,
            severity=LedgerEventSeverity.DEBUG,
            description="Ledger state loaded",
            details={
                "accounts": accounts,
                "categories": categories,
                "transactions": transactions,
            },
        )

    @staticmethod
    def state_reset(correlation_id: Optional[UUID] = None) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_RESET,
            severity=LedgerEventSeverity.WARNING,
            correlation_id=correlation_id,
            description="Ledger state cleared; defaults restored",
        )

    @staticmethod
    def malformed_state_value(key: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_VALUE_MALFORMED,
            severity=LedgerEventSeverity.WARNING,
            entity_type="state",
            entity_id=key,
            description=f"Stored value for '{key}' is malformed; using defaults",
            error_message=error_message[:500],
        )

    @staticmethod
    def export_completed(
        transactions: int,
        filename: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPORT_COMPLETED,
            correlation_id=correlation_id,
            description=f"Ledger exported to {filename}",
            details={"transactions": transactions, "filename": filename},
        )

    @staticmethod
    def draft_requested(
        text_length: int,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.DRAFT_REQUESTED,
            severity=LedgerEventSeverity.DEBUG,
            correlation_id=correlation_id,
            description="Transaction draft requested",
            details={"text_length": text_length},
        )

    @staticmethod
    def draft_produced(
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.DRAFT_PRODUCED,
            correlation_id=correlation_id,
            description="Transaction draft produced",
            details={
                "type": draft.type.value,
                "amount": _money(draft.amount),
                "category_name": draft.category_name,
            },
        )

    @staticmethod
    def import_completed(
        accounts: int,
        categories: int,
        transactions: int,
        dropped_rows: int,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.IMPORT_COMPLETED,
            correlation_id=correlation_id,
            description=(
                f"Import replaced the ledger with {accounts} accounts, "
                f"{categories} categories and {transactions} transactions"
            ),
            details={
                "accounts": accounts,
                "categories": categories,
                "transactions": transactions,
                "dropped_rows": dropped_rows,
            },
            severity=(
                LedgerEventSeverity.WARNING if dropped_rows else LedgerEventSeverity.INFO
            ),
        )

    @staticmethod
    def import_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.IMPORT_FAILED,
            severity=LedgerEventSeverity.WARNING,
            correlation_id=correlation_id,
            description="Spreadsheet import aborted",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SYSTEM_ERROR,
            severity=LedgerEventSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXTERNAL_SERVICE_ERROR,
            severity=LedgerEventSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
