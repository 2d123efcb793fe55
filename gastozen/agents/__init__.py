"""AI agents package."""

from gastozen.agents.drafting import TransactionDraftAgent, resolve_draft

__all__ = ["TransactionDraftAgent", "resolve_draft"]
