"""
Transaction Drafting Assistant

Turns a free-text description ("gasté 30mil en el super ayer") into a
TransactionDraft using Gemini.

CRITICAL BOUNDARIES:
- The model only PROPOSES a transaction. Its output is untrusted and
  goes back into the transaction form for the user to review.
- It NEVER writes to the ledger.
- Every failure (no API key, network error, malformed reply) resolves
  to None and is logged. Nothing is raised to the caller.
"""

import datetime as dt
import json
from typing import Any, Optional, Sequence
from uuid import UUID

import google.generativeai as genai
from pydantic import ValidationError

from gastozen.config import GeminiSettings, get_settings
from gastozen.events import EventLogger
from gastozen.models import (
    Account,
    Category,
    TransactionDraft,
    TransactionFormValues,
)


class TransactionDraftAgent:
    """
    Gemini-backed drafting assistant.

    `model` can be any object with an async `generate_content_async(prompt)`
    whose result has a `.text`; tests pass a fake.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        event_logger: Optional[EventLogger] = None,
        model: Any = None,
    ):
        self._settings = settings or get_settings().gemini
        self._event_logger = event_logger
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    def build_prompt(
        self,
        user_text: str,
        categories: Sequence[Category],
        today: Optional[dt.date] = None,
    ) -> str:
        today = today or dt.date.today()
        category_names = [c.name for c in categories]
        return f"""Eres un asistente contable para Paraguay.
Analiza esta frase del usuario: "{user_text}"
Categorías disponibles: {json.dumps(category_names, ensure_ascii=False)}.
Fecha de hoy: {today.isoformat()}.

REGLAS:
- Si el usuario dice "mil", conviértelo a número (ej: 30mil -> 30000).
- "amount" es siempre un número positivo.
- "type" es "income" (ingreso) o "expense" (gasto).
- "categoryName" debe ser una de las categorías disponibles. Si ninguna encaja, usa "Gasto Diverso" para gastos u "Otro Ingreso" para ingresos.
- "date" en formato YYYY-MM-DD. Si no se menciona una fecha, usa la de hoy.
- "accountName" solo si el usuario menciona una cuenta; si no, null.

Responde SOLAMENTE con un objeto JSON con: description, amount, type, categoryName, date, accountName."""

    @staticmethod
    def parse_response(text: str) -> Optional[TransactionDraft]:
        """Pull the JSON object out of the model's reply, or None."""
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            return None
        try:
            data = json.loads(text[start:end])
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

        try:
            return TransactionDraft(
                description=data.get("description"),
                amount=data.get("amount"),
                type=data.get("type"),
                category_name=data.get("categoryName") or None,
                date=data.get("date"),
                account_name=data.get("accountName") or None,
            )
        except ValidationError:
            return None

    async def parse_draft(
        self,
        user_text: str,
        categories: Sequence[Category],
        correlation_id: Optional[UUID] = None,
    ) -> Optional[TransactionDraft]:
        """
        Draft a transaction from free text.

        Returns None when the assistant is not configured or anything
        goes wrong.
        """
        if self._model is None:
            self._log_failure("GEMINI_API_KEY is not configured", correlation_id)
            return None

        prompt = self.build_prompt(user_text, categories)
        try:
            response = await self._model.generate_content_async(prompt)
            text = response.text.strip()
        except Exception as e:
            self._log_failure(f"Gemini request failed: {e}", correlation_id)
            return None

        draft = self.parse_response(text)
        if draft is None:
            self._log_failure(f"Malformed Gemini response: {text[:200]}", correlation_id)
        return draft

    def _log_failure(self, message: str, correlation_id: Optional[UUID]) -> None:
        if self._event_logger:
            self._event_logger.log_external_service_error(
                service="gemini",
                error_message=message,
                correlation_id=correlation_id,
            )


def resolve_draft(
    draft: TransactionDraft,
    categories: Sequence[Category],
    accounts: Sequence[Account],
) -> TransactionFormValues:
    """
    Map a draft's names onto real ids for the transaction form.

    Category: case-insensitive name match of the same type, else the first
    category of the draft's type, else empty. Account: case-insensitive
    name match, else the first account, else empty.
    """
    of_type = [c for c in categories if c.type == draft.type]
    category = None
    if draft.category_name:
        wanted = draft.category_name.casefold()
        category = next((c for c in of_type if c.name.casefold() == wanted), None)
    if category is None and of_type:
        category = of_type[0]

    account = None
    if draft.account_name:
        wanted = draft.account_name.casefold()
        account = next((a for a in accounts if a.name.casefold() == wanted), None)
    if account is None and accounts:
        account = accounts[0]

    return TransactionFormValues(
        description=draft.description,
        amount=draft.amount,
        type=draft.type,
        category_id=category.id if category else "",
        account_id=account.id if account else "",
        date=draft.date,
    )
