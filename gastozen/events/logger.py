"""
Ledger Event Logger

Every ledger mutation and rejection is logged as a structured event.
This provides:
1. Traceability of balance changes while debugging
2. A correlation ID that ties together the events of one user action

Events go to the local structured log only. The logger never raises:
a failure while logging must not break a ledger operation.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from gastozen.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
)
from gastozen.models.ledger import LedgerErrorKind


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_log_level(debug: bool = False) -> None:
    """Route stdlib logging (and thus structlog) to stderr at the right level."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


class EventLogger:
    """Central ledger event logging service."""

    def __init__(self, logger_name: str = "gastozen"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: LedgerEvent) -> bool:
        """
        Log a ledger event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity == LedgerEventSeverity.ERROR:
                self._logger.error("ledger_event", **log_dict)
            elif event.severity == LedgerEventSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity == LedgerEventSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception:
            return False
        return True

    def log_rejection(
        self,
        operation: str,
        error: LedgerErrorKind,
        message: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected ledger operation."""
        self.log(LedgerEventBuilder.rejected(
            operation=operation,
            error=error,
            message=message,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(LedgerEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(LedgerEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., a spreadsheet import)
    and pass it through all subsequent operations.
    """
    return uuid4()
