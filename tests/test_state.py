"""Tests for the state repository."""

import json
from decimal import Decimal

from gastozen.ledger import STATE_KEYS, StateRepository
from gastozen.models import LedgerEventType, Theme, Transaction
from gastozen.services.storage import InMemoryStore


class RecordingLogger:
    def __init__(self):
        self.events = []

    def log(self, event):
        self.events.append(event)
        return True


class TestStateRepository:
    """Tests for StateRepository."""

    def test_empty_store_yields_defaults(self):
        state = StateRepository(InMemoryStore(), default_theme=Theme.DARK).load()
        assert state.transactions == []
        assert len(state.accounts) == 4
        assert len(state.categories) == 17
        assert state.theme is Theme.DARK

    def test_saved_entities_are_json_lists(self, accounts, categories):
        store = InMemoryStore()
        StateRepository(store).save_entities([], accounts, categories)

        assert json.loads(store.get("transactions")) == []
        assert json.loads(store.get("accounts"))[0]["id"] == "acc-main"
        assert json.loads(store.get("accounts"))[0]["balance"] == 100

    def test_money_is_stored_as_json_numbers(self, accounts, categories, tx):
        store = InMemoryStore()
        repository = StateRepository(store)
        transaction = Transaction(id="trans-1", **tx("12.5").model_dump())
        half = accounts[1].model_copy(update={"balance": Decimal("50.25")})

        repository.save_entities([transaction], [accounts[0], half], categories)

        assert json.loads(store.get("transactions"))[0]["amount"] == 12.5
        assert [a["balance"] for a in json.loads(store.get("accounts"))] == [100, 50.25]
        state = repository.load()
        assert state.transactions[0].amount == Decimal("12.5")
        assert state.accounts[1].balance == Decimal("50.25")

    def test_malformed_value_is_logged_and_defaulted(self):
        logger = RecordingLogger()
        store = InMemoryStore({"transactions": '[{"id": "x"}]', "theme": "purple"})

        state = StateRepository(store, event_logger=logger).load()

        assert state.transactions == []
        assert state.theme is Theme.LIGHT
        malformed = [e.entity_id for e in logger.events
                     if e.event_type == LedgerEventType.STATE_VALUE_MALFORMED]
        assert malformed == ["transactions", "theme"]
        assert store.get("theme") == "purple"

    def test_theme_round_trip(self):
        store = InMemoryStore()
        repository = StateRepository(store)
        repository.save_theme(Theme.DARK)
        assert store.get("theme") == '"dark"'
        assert repository.load().theme is Theme.DARK

    def test_clear_removes_every_key(self, accounts, categories):
        store = InMemoryStore({"unrelated": "1"})
        repository = StateRepository(store)
        repository.save_entities([], accounts, categories)
        repository.save_theme(Theme.DARK)

        repository.clear()

        assert all(store.get(key) is None for key in STATE_KEYS)
        assert store.get("unrelated") == "1"
