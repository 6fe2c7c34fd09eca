"""
Flow tests for the ExpenseTracker orchestrator.

The interpreter is a FakeInterpreter with canned answers; every
number the user sees must come from the store and the aggregator.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from gestor_financeiro.models.audit import AuditEventType
from gestor_financeiro.models.categories import ExpenseCategory
from gestor_financeiro.models.expense import (
    CategorizedData,
    ParsedExpenseData,
    ParsedQuery,
    QueryType,
)
from gestor_financeiro.models.tracker import NotificationType, TrackerState
from gestor_financeiro.orchestrator import (
    MSG_ADD_FAILED,
    MSG_API_KEY_MISSING,
    MSG_API_KEY_MISSING_STARTUP,
    MSG_BUSY,
    MSG_EMPTY_INPUT,
    MSG_PARSE_FAILED,
    MSG_UNKNOWN_COMMAND,
    ExpenseTracker,
    create_app_components,
)
from gestor_financeiro.services.storage import InMemoryExpenseStorage, StorageError
from gestor_financeiro.store import ExpenseRecordStore
from tests.conftest import FakeInterpreter, make_expense

NOW = datetime(2024, 5, 20, 15, 0, tzinfo=timezone.utc)


def register(parsed, category=None) -> FakeInterpreter:
    return FakeInterpreter(
        intent=ParsedQuery(tipo_query=QueryType.REGISTRO_DESPESA),
        parsed=parsed,
        category=CategorizedData(categoria=category) if category else None,
    )


class BrokenStorage(InMemoryExpenseStorage):
    def write_blob(self, blob: str) -> None:
        raise StorageError("read-only filesystem")


@pytest.fixture
def state() -> TrackerState:
    return TrackerState(selected_month="2024-05")


class TestExpenseRegistration:
    """Text → extract → categorize → validate → store."""

    def test_registers_expense(self, store, audit_logger, state):
        interpreter = register(
            ParsedExpenseData(valor=Decimal("30"), descricao="Lanche", data="2024-05-19"),
            ExpenseCategory.ALIMENTACAO,
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter, audit_logger=audit_logger)

        notification = asyncio.run(tracker.process_input(state, "Lanche R$30 ontem"))

        assert notification.type == NotificationType.SUCCESS
        assert notification.message == "✅ Despesa registrada: R$ 30,00 em Alimentação (19/05/24)"
        assert len(store) == 1
        expense = store.expenses[0]
        assert expense.original_input == "Lanche R$30 ontem"
        assert expense.category == ExpenseCategory.ALIMENTACAO
        assert [name for name, _ in interpreter.calls] == [
            "interpret_intent", "parse_expense", "categorize",
        ]
        assert audit_logger.recent_events[-1].event_type == AuditEventType.EXPENSE_SAVED
        parsed_event = next(
            e for e in audit_logger.recent_events if e.event_type == AuditEventType.EXPENSE_PARSED
        )
        assert parsed_event.details == {"amount": "30", "date": "2024-05-19"}

    def test_invalid_date_creates_no_record(self, store, state):
        interpreter = register(
            ParsedExpenseData(valor=Decimal("30"), descricao="Lanche", data="2024-13-40"),
            ExpenseCategory.ALIMENTACAO,
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        notification = asyncio.run(tracker.process_input(state, "Lanche 30 dia 40/13"))

        assert notification.is_error
        assert "Data inválida (2024-13-40)" in notification.message
        assert len(store) == 0

    def test_non_positive_amount_creates_no_record(self, store, storage, state):
        interpreter = register(
            ParsedExpenseData(valor=Decimal("0"), descricao="Nada", data="2024-05-01"),
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        notification = asyncio.run(tracker.process_input(state, "Nada 0"))

        assert notification.is_error
        assert len(store) == 0
        assert storage.write_count == 0

    def test_expense_in_other_month_switches_view(self, store, state):
        interpreter = register(
            ParsedExpenseData(valor=Decimal("120"), descricao="Gasolina", data="2024-07-15"),
            ExpenseCategory.TRANSPORTE,
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        asyncio.run(tracker.process_input(state, "Gasolina 120 dia 15/07/2024"))

        assert state.selected_month == "2024-07"
        assert "2024-07" in tracker.available_months(NOW)

    def test_failed_extraction(self, store, state):
        tracker = ExpenseTracker(store=store, interpreter=register(None))

        notification = asyncio.run(tracker.process_input(state, "blablabla"))

        assert notification.is_error
        assert notification.message == MSG_PARSE_FAILED
        assert len(store) == 0

    def test_incomplete_extraction(self, store, state):
        interpreter = register(ParsedExpenseData(valor=Decimal("30"), descricao=None, data="2024-05-01"))
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        notification = asyncio.run(tracker.process_input(state, "30 reais"))

        assert notification.message == MSG_PARSE_FAILED
        assert ("categorize", None) not in interpreter.calls

    def test_missing_category_defaults_to_outros(self, store, state):
        interpreter = register(
            ParsedExpenseData(valor=Decimal("15"), descricao="Coisa", data="2024-05-02"),
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        asyncio.run(tracker.process_input(state, "Coisa 15"))

        assert store.expenses[0].category == ExpenseCategory.OUTROS

    def test_storage_failure_reported(self, state):
        store = ExpenseRecordStore(BrokenStorage())
        store.load()
        interpreter = register(
            ParsedExpenseData(valor=Decimal("30"), descricao="Lanche", data="2024-05-19"),
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        notification = asyncio.run(tracker.process_input(state, "Lanche 30"))

        assert notification.message == MSG_ADD_FAILED
        assert len(store) == 0
        assert state.selected_month == "2024-05"


class TestQueries:
    """Summary and category-total requests never touch the store."""

    def test_category_total(self, store, storage, state):
        store.add(make_expense("100", "mercado", "2024-05-02", ExpenseCategory.ALIMENTACAO))
        store.add(make_expense("20", "lanche", "2024-05-10", ExpenseCategory.ALIMENTACAO))
        store.add(make_expense("999", "jantar", "2024-04-10", ExpenseCategory.ALIMENTACAO))
        writes_before = storage.write_count
        interpreter = FakeInterpreter(
            intent=ParsedQuery(tipo_query=QueryType.TOTAL_CATEGORIA, categoria=ExpenseCategory.ALIMENTACAO),
        )
        tracker = ExpenseTracker(store=store, interpreter=interpreter)

        notification = asyncio.run(tracker.process_input(state, "quanto gastei com alimentação?"))

        assert notification.type == NotificationType.INFO
        assert notification.message == "Total de Alimentação em maio de 2024: R$ 120,00"
        assert storage.write_count == writes_before
        assert len(store) == 3

    def test_category_total_without_category_is_unknown(self, tracker, interpreter, state):
        interpreter.intent = ParsedQuery(tipo_query=QueryType.TOTAL_CATEGORIA)

        notification = asyncio.run(tracker.process_input(state, "quanto gastei com viagens?"))

        assert notification.message == MSG_UNKNOWN_COMMAND

    def test_summary_request(self, tracker, interpreter, state):
        interpreter.intent = ParsedQuery(tipo_query=QueryType.RESUMO_GERAL)

        notification = asyncio.run(tracker.process_input(state, "resumo do mês"))

        assert notification.type == NotificationType.INFO
        assert notification.message == "✅ Resumo de maio de 2024 exibido abaixo."

    def test_unknown_command(self, tracker, state, store):
        notification = asyncio.run(tracker.process_input(state, "apague tudo"))

        assert notification.is_error
        assert notification.message == MSG_UNKNOWN_COMMAND
        assert len(store) == 0


class TestGuards:
    """Requests refused before reaching Gemini."""

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_input(self, tracker, interpreter, state, text):
        notification = asyncio.run(tracker.process_input(state, text))

        assert notification.message == MSG_EMPTY_INPUT
        assert interpreter.calls == []

    def test_busy(self, tracker, interpreter, state):
        state.is_loading = True

        notification = asyncio.run(tracker.process_input(state, "resumo do mês"))

        assert notification.type == NotificationType.INFO
        assert notification.message == MSG_BUSY
        assert interpreter.calls == []
        assert state.is_loading

    def test_loading_flag_set_during_request_and_cleared_after(self, store, state):
        seen = []

        class WatchingInterpreter(FakeInterpreter):
            async def interpret_intent(self, text):
                seen.append(state.is_loading)
                return await super().interpret_intent(text)

        tracker = ExpenseTracker(store=store, interpreter=WatchingInterpreter())

        asyncio.run(tracker.process_input(state, "oi"))

        assert seen == [True]
        assert not state.is_loading

    def test_loading_flag_cleared_after_error(self, store, state):
        class ExplodingInterpreter(FakeInterpreter):
            async def interpret_intent(self, text):
                raise RuntimeError("boom")

        tracker = ExpenseTracker(store=store, interpreter=ExplodingInterpreter())

        with pytest.raises(RuntimeError):
            asyncio.run(tracker.process_input(state, "oi"))
        assert not state.is_loading

    def test_no_api_key(self, store, state):
        tracker = ExpenseTracker(store=store, interpreter=None)
        state.api_key_exists = False

        notification = asyncio.run(tracker.process_input(state, "Lanche 30"))

        assert notification.is_error
        assert notification.message == MSG_API_KEY_MISSING


class TestSessionState:
    """Startup, month selection and read-side helpers."""

    def test_startup_warns_once_without_api_key(self, store, audit_logger):
        tracker = ExpenseTracker(store=store, interpreter=None, audit_logger=audit_logger)
        state = tracker.new_state(NOW)

        assert not state.api_key_exists
        first = tracker.startup(state, NOW)
        second = tracker.startup(state, NOW)

        assert first.is_error
        assert first.message == MSG_API_KEY_MISSING_STARTUP
        assert second is None
        assert audit_logger.recent_events[-1].event_type == AuditEventType.API_KEY_MISSING

    def test_startup_with_api_key_is_silent(self, tracker):
        state = tracker.new_state(NOW)

        assert state.api_key_exists
        assert tracker.startup(state, NOW) is None
        assert state.selected_month == "2024-05"

    def test_startup_loads_persisted_expenses(self, interpreter):
        expense = make_expense("42", "livro", "2024-03-03", ExpenseCategory.EDUCACAO)
        storage = InMemoryExpenseStorage(initial=f"[{expense.model_dump_json(by_alias=True)}]")
        tracker = ExpenseTracker(store=ExpenseRecordStore(storage), interpreter=interpreter)
        state = tracker.new_state(NOW)

        tracker.startup(state, NOW)

        assert tracker.available_months(NOW) == ["2024-03", "2024-05"]
        assert len(tracker.store) == 1

    def test_reconcile_falls_back_to_latest_month(self, tracker, store):
        store.add(make_expense("10", "a", "2023-01-10"))
        state = TrackerState(selected_month="2022-12")

        assert tracker.reconcile_selected_month(state, NOW) == "2024-05"

    def test_select_month(self, tracker, store, state):
        store.add(make_expense("10", "a", "2023-01-10"))

        tracker.select_month(state, "2023-01")
        assert state.selected_month == "2023-01"

        with pytest.raises(ValueError, match="not available"):
            tracker.select_month(state, "1999-01")

    def test_read_side_for_selected_month(self, tracker, store, state, may_expenses):
        for expense in may_expenses:
            store.add(expense)
        store.add(make_expense("70", "cinema", "2024-06-01", ExpenseCategory.LAZER))

        summary = tracker.monthly_summary(state)

        assert summary.grand_total == Decimal("550")
        assert [row.category for row in tracker.chart(state)] == [
            ExpenseCategory.CONTAS_FIXAS,
            ExpenseCategory.ALIMENTACAO,
        ]
        assert [e.description for e in tracker.expenses_for_selected_month(state)] == ["rent", "snack"]

    def test_empty_month_has_no_summary(self, tracker, state):
        assert tracker.monthly_summary(state) is None
        assert tracker.chart(state) == []


class TestCreateAppComponents:
    """Tests for the startup factory."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("GEMINI_API_KEY", "API_KEY", "TIMEZONE"):
            monkeypatch.delenv(name, raising=False)

    def test_without_key_runs_without_ai(self):
        tracker = create_app_components(storage=InMemoryExpenseStorage())

        assert not tracker.ai_enabled

    def test_with_key_builds_interpreter(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")

        tracker = create_app_components(storage=InMemoryExpenseStorage())

        assert tracker.ai_enabled

    def test_invalid_timezone_fails_fast(self, monkeypatch):
        monkeypatch.setenv("TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ValueError, match="Invalid app settings"):
            create_app_components(storage=InMemoryExpenseStorage())
