"""
Main Orchestrator for GastoZen

Ties the components together and defines the flows the UI calls:
1. Transaction form (validate → submit to the ledger)
2. Account form (validate → create/replace)
3. Drafting assistant (free text → draft → pre-filled form)
4. Backups (export, import, reset)

The orchestrator enforces the boundaries:
- The assistant only ever fills the form; the user submits
- Nothing reaches the ledger without passing form validation
- An import either replaces the whole state or changes nothing
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ValidationError

from gastozen.agents import TransactionDraftAgent, resolve_draft
from gastozen.config import Settings, StorageBackend, get_settings
from gastozen.events import EventLogger, configure_log_level, create_correlation_id
from gastozen.importer import reconcile
from gastozen.ledger import LedgerEngine, StateRepository
from gastozen.models import (
    Account,
    AccountInput,
    AccountType,
    LedgerEventBuilder,
    LedgerOutcome,
    Theme,
    Transaction,
    TransactionFormValues,
)
from gastozen.services.spreadsheet import (
    ACCOUNTS_SHEET,
    CATEGORIES_SHEET,
    TRANSACTIONS_SHEET,
    SpreadsheetFormatError,
    build_export_sheets,
    export_filename,
    read_workbook,
    write_workbook,
)
from gastozen.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsStore,
    InMemoryStore,
    JsonFileStore,
    KeyValueStoreInterface,
)
from gastozen.validation import (
    AccountFormResult,
    AccountFormValidator,
    TransactionFormValidator,
    ValidationResult,
)


class DraftOutcome(BaseModel):
    success: bool
    message: str = ""
    values: Optional[TransactionFormValues] = None


class ImportOutcome(BaseModel):
    success: bool
    message: str
    accounts: int = 0
    categories: int = 0
    transactions: int = 0
    dropped_rows: int = 0


class ExportFile(BaseModel):
    filename: str
    data: bytes

    mime_type: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class TransactionFlow:
    """
    Transaction form submission.

    Flow:
    1. Validate the form (errors block, warnings are shown)
    2. Add, or update when editing an existing transaction
    3. The ledger accepts or rejects; either way the outcome goes back to the UI
    """

    def __init__(
        self,
        engine: LedgerEngine,
        validator: Optional[TransactionFormValidator] = None,
    ):
        self._engine = engine
        self._validator = validator or TransactionFormValidator()

    def check(self, values: TransactionFormValues) -> ValidationResult:
        return self._validator.validate(
            values, self._engine.categories, self._engine.accounts
        )

    def submit(
        self,
        values: TransactionFormValues,
        transaction_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ValidationResult, Optional[LedgerOutcome]]:
        """
        Returns:
            (validation, outcome). `outcome` is None when validation blocked
            the submission.
        """
        validation = self.check(values)
        if not validation.can_submit:
            return validation, None

        correlation_id = correlation_id or create_correlation_id()
        transaction_input = values.to_input()
        if transaction_id:
            outcome = self._engine.update_transaction(
                Transaction(id=transaction_id, **transaction_input.model_dump()),
                correlation_id=correlation_id,
            )
        else:
            outcome = self._engine.add_transaction(
                transaction_input, correlation_id=correlation_id
            )
        return validation, outcome

    def delete(self, transaction_id: str) -> LedgerOutcome:
        return self._engine.delete_transaction(
            transaction_id, correlation_id=create_correlation_id()
        )


class AccountFlow:
    """Account form submission (create or edit)."""

    def __init__(
        self,
        engine: LedgerEngine,
        validator: Optional[AccountFormValidator] = None,
    ):
        self._engine = engine
        self._validator = validator or AccountFormValidator()

    def submit(
        self,
        name: str,
        raw_balance,
        account_type: AccountType = AccountType.CHECKING,
        color: str = "#3B82F6",
        icon: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> tuple[AccountFormResult, Optional[LedgerOutcome]]:
        validation = self._validator.validate(name, raw_balance, is_new=account_id is None)
        if not validation.can_submit:
            return validation, None

        correlation_id = create_correlation_id()
        balance: Decimal = validation.balance
        if account_id is None:
            outcome = self._engine.add_account(
                AccountInput(
                    name=name,
                    type=account_type,
                    initial_balance=balance,
                    color=color,
                    icon=icon or "🏛️",
                ),
                correlation_id=correlation_id,
            )
        else:
            outcome = self._engine.update_account(
                Account(
                    id=account_id,
                    name=name,
                    type=account_type,
                    balance=balance,
                    color=color,
                    icon=icon,
                ),
                correlation_id=correlation_id,
            )
        return validation, outcome

    def delete(self, account_id: str) -> LedgerOutcome:
        return self._engine.delete_account(
            account_id, correlation_id=create_correlation_id()
        )


class DraftFlow:
    """
    Drafting assistant flow.

    The draft is resolved against the current categories and accounts and
    handed back as form values. It is never submitted from here.
    """

    def __init__(
        self,
        engine: LedgerEngine,
        agent: Optional[TransactionDraftAgent] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self._engine = engine
        self._agent = agent or TransactionDraftAgent(event_logger=event_logger)
        self._event_logger = event_logger

    @property
    def is_available(self) -> bool:
        return self._agent.is_available

    async def draft(self, user_text: str) -> DraftOutcome:
        text = (user_text or "").strip()
        if not text:
            return DraftOutcome(
                success=False,
                message="Por favor, describe la transacción antes de usar el asistente.",
            )

        correlation_id = create_correlation_id()
        if self._event_logger:
            self._event_logger.log(LedgerEventBuilder.draft_requested(
                len(text), correlation_id=correlation_id
            ))

        draft = await self._agent.parse_draft(
            text, self._engine.categories, correlation_id=correlation_id
        )
        if draft is None:
            return DraftOutcome(
                success=False,
                message=(
                    "No se pudo interpretar la transacción. "
                    "Completa el formulario manualmente."
                ),
            )

        if self._event_logger:
            self._event_logger.log(LedgerEventBuilder.draft_produced(
                draft, correlation_id=correlation_id
            ))
        return DraftOutcome(
            success=True,
            message="Revisa los datos sugeridos antes de guardar.",
            values=resolve_draft(draft, self._engine.categories, self._engine.accounts),
        )


class BackupFlow:
    """
    Export, import and reset.

    Import flow:
    1. Decode the workbook in a worker thread
    2. Reconcile rows into a consistent dataset (pure)
    3. Replace transactions, accounts and categories in ONE write
    4. Reload the engine from the store
    A format error at step 1, or rows that cannot form valid entities at
    step 2, stop the import before anything is written.
    """

    def __init__(
        self,
        engine: LedgerEngine,
        repository: StateRepository,
        event_logger: Optional[EventLogger] = None,
    ):
        self._engine = engine
        self._repository = repository
        self._event_logger = event_logger

    def _log(self, event) -> None:
        if self._event_logger:
            self._event_logger.log(event)

    def export_backup(self) -> ExportFile:
        state = self._engine.snapshot()
        filename = export_filename()
        data = write_workbook(build_export_sheets(state))
        self._log(LedgerEventBuilder.export_completed(
            transactions=len(state.transactions), filename=filename
        ))
        return ExportFile(filename=filename, data=data)

    async def import_backup(self, data: bytes) -> ImportOutcome:
        correlation_id = create_correlation_id()
        try:
            sheets = await asyncio.to_thread(read_workbook, data)
        except SpreadsheetFormatError as e:
            self._log(LedgerEventBuilder.import_failed(str(e), correlation_id=correlation_id))
            return ImportOutcome(success=False, message=str(e))

        try:
            dataset = reconcile(
                account_rows=sheets[ACCOUNTS_SHEET],
                category_rows=sheets[CATEGORIES_SHEET],
                transaction_rows=sheets[TRANSACTIONS_SHEET],
            )
        except (ValidationError, ValueError) as e:
            self._log(LedgerEventBuilder.import_failed(str(e), correlation_id=correlation_id))
            return ImportOutcome(
                success=False,
                message=(
                    "El archivo contiene datos que no se pudieron interpretar. "
                    "No se modificó ningún dato."
                ),
            )

        self._repository.save_entities(
            dataset.transactions, dataset.accounts, dataset.categories
        )
        self._engine.reload()

        self._log(LedgerEventBuilder.import_completed(
            accounts=len(dataset.accounts),
            categories=len(dataset.categories),
            transactions=len(dataset.transactions),
            dropped_rows=dataset.dropped_rows,
            correlation_id=correlation_id,
        ))

        message = "¡Datos importados exitosamente desde Excel!"
        if dataset.dropped_rows:
            message += (
                f" Se omitieron {dataset.dropped_rows} transacciones sin "
                "categoría o cuenta válida."
            )
        return ImportOutcome(
            success=True,
            message=message,
            accounts=len(dataset.accounts),
            categories=len(dataset.categories),
            transactions=len(dataset.transactions),
            dropped_rows=dataset.dropped_rows,
        )

    def reset(self) -> None:
        """Delete every stored key and fall back to the default data."""
        self._repository.clear()
        self._engine.reload()
        self._log(LedgerEventBuilder.state_reset(correlation_id=create_correlation_id()))


@dataclass
class AppComponents:
    engine: LedgerEngine
    transactions: TransactionFlow
    accounts: AccountFlow
    drafts: DraftFlow
    backups: BackupFlow
    event_logger: EventLogger


def create_store(
    settings: Settings,
    event_logger: Optional[EventLogger] = None,
) -> KeyValueStoreInterface:
    """Build the configured key-value store."""
    storage = settings.storage
    if storage.backend == StorageBackend.MEMORY:
        return InMemoryStore()
    if storage.backend == StorageBackend.GOOGLE_SHEETS:
        try:
            return GoogleSheetsStore(GoogleSheetsClient(settings.google_sheets))
        except Exception as e:
            # Sheets not configured - continue with the local file
            if event_logger:
                event_logger.log_error(
                    error_type="storage_configuration",
                    error_message=f"Google Sheets storage not configured: {e}",
                    details={"fallback": storage.json_path},
                )
    return JsonFileStore(storage.json_path)


def create_app_components(
    store: Optional[KeyValueStoreInterface] = None,
    draft_agent: Optional[TransactionDraftAgent] = None,
    settings: Optional[Settings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Key-value store to use. Defaults to the configured backend.
        draft_agent: Drafting assistant. Defaults to the Gemini agent.
        settings: Settings container. Defaults to get_settings().
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_log_level(app_settings.debug_mode)

    event_logger = EventLogger()
    store = store or create_store(settings, event_logger)

    repository = StateRepository(
        store,
        event_logger=event_logger,
        default_theme=Theme(app_settings.default_theme),
    )
    engine = LedgerEngine(repository, event_logger=event_logger)

    return AppComponents(
        engine=engine,
        transactions=TransactionFlow(
            engine,
            TransactionFormValidator(app_settings.future_date_tolerance_days),
        ),
        accounts=AccountFlow(engine),
        drafts=DraftFlow(
            engine,
            agent=draft_agent or TransactionDraftAgent(
                settings=settings.gemini, event_logger=event_logger
            ),
            event_logger=event_logger,
        ),
        backups=BackupFlow(engine, repository, event_logger=event_logger),
        event_logger=event_logger,
    )
