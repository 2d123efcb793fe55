"""Ledger event logging package."""

from gastozen.events.logger import EventLogger, configure_log_level, create_correlation_id

__all__ = ["EventLogger", "configure_log_level", "create_correlation_id"]
