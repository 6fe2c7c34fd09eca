"""Tests for the expense record store and its storage backends."""

import json
from datetime import datetime, timezone

import pytest

from gestor_financeiro.models.audit import AuditEventType
from gestor_financeiro.models.categories import ExpenseCategory
from gestor_financeiro.services.storage import (
    CorruptStorageError,
    InMemoryExpenseStorage,
    JsonFileExpenseStorage,
    StorageError,
)
from gestor_financeiro.store import ExpenseRecordStore
from tests.conftest import make_expense


def stored_dates(storage) -> list[str]:
    return [item["date"] for item in json.loads(storage.read_blob())]


class FailingStorage(InMemoryExpenseStorage):
    def write_blob(self, blob: str) -> None:
        raise StorageError("disk full")


class TestExpenseRecordStore:
    """Tests for ExpenseRecordStore."""

    def test_load_missing_storage_is_empty(self, storage):
        store = ExpenseRecordStore(storage)
        assert store.load() == []

    def test_load_sorts_by_date(self):
        records = [
            make_expense("1", "late", "2024-06-10").to_storage_dict(),
            make_expense("2", "early", "2024-01-05").to_storage_dict(),
        ]
        store = ExpenseRecordStore(InMemoryExpenseStorage(initial=json.dumps(records)))

        loaded = store.load()

        assert [e.description for e in loaded] == ["early", "late"]

    @pytest.mark.parametrize("blob", [
        "not json",
        '{"a": 1}',
        '"expenses"',
    ])
    def test_load_corrupt_storage_is_empty(self, blob, audit_logger):
        store = ExpenseRecordStore(InMemoryExpenseStorage(initial=blob), audit_logger=audit_logger)

        assert store.load() == []
        assert audit_logger.recent_events[-1].event_type == AuditEventType.STORAGE_LOAD_FAILED

    def test_invalid_records_skipped_others_kept(self, audit_logger):
        good = make_expense("50", "mercado", "2024-02-10", ExpenseCategory.ALIMENTACAO).to_storage_dict()
        bad_date = {**good, "id": "old-1", "date": "2024-02-30"}
        records = [bad_date, good, {"amount": 10}, "nonsense"]
        store = ExpenseRecordStore(
            InMemoryExpenseStorage(initial=json.dumps(records)),
            audit_logger=audit_logger,
        )

        loaded = store.load()

        assert [e.id for e in loaded] == [good["id"]]
        event = audit_logger.recent_events[-1]
        assert event.event_type == AuditEventType.RECORDS_SKIPPED
        assert event.details["record_ids"] == ["old-1", "#2", "#3"]

    def test_add_after_skip_keeps_valid_records(self, storage):
        good = make_expense("50", "mercado", "2024-02-10").to_storage_dict()
        storage.write_blob(json.dumps([{**good, "id": "old-1", "date": "2024-02-30"}, good]))
        store = ExpenseRecordStore(storage)
        store.load()

        store.add(make_expense("10", "café", "2024-02-11"))

        assert [item["description"] for item in json.loads(storage.read_blob())] == ["mercado", "café"]

    def test_add_keeps_list_sorted_after_every_add(self, store, storage):
        for date in ["2024-05-10", "2024-05-01", "2024-06-01", "2023-12-31", "2024-05-05"]:
            store.add(make_expense("10", date, date))
            dates = stored_dates(storage)
            assert dates == sorted(dates)

        assert [e.date for e in store.expenses] == [
            "2023-12-31", "2024-05-01", "2024-05-05", "2024-05-10", "2024-06-01",
        ]

    def test_add_is_stable_for_equal_dates(self, store):
        store.add(make_expense("1", "first", "2024-05-01"))
        store.add(make_expense("2", "second", "2024-05-01"))
        store.add(make_expense("3", "earlier", "2024-04-30"))

        assert [e.description for e in store.expenses] == ["earlier", "first", "second"]

    def test_add_persists_full_list(self, store, storage):
        store.add(make_expense("10", "a", "2024-05-01"))
        store.add(make_expense("20", "b", "2024-05-02"))

        assert storage.write_count == 2
        assert len(json.loads(storage.read_blob())) == 2

    def test_failed_write_leaves_store_untouched(self):
        store = ExpenseRecordStore(FailingStorage())
        store.load()

        with pytest.raises(StorageError):
            store.add(make_expense("10", "a", "2024-05-01"))
        assert len(store) == 0

    def test_reload_round_trip(self, store, storage):
        expense = make_expense("30.50", "Lanche", "2024-07-15", ExpenseCategory.ALIMENTACAO, "Lanche R$30,50")
        store.add(expense)

        reloaded = ExpenseRecordStore(storage).load()

        assert reloaded == [expense]

    def test_clear(self, store, storage, audit_logger):
        store.add(make_expense("10", "a", "2024-05-01"))
        store.clear()

        assert store.expenses == ()
        assert json.loads(storage.read_blob()) == []
        assert audit_logger.recent_events[-1].event_type == AuditEventType.STORE_CLEARED

    def test_available_months_include_current(self, store):
        store.add(make_expense("10", "a", "2024-05-01"))
        store.add(make_expense("10", "b", "2024-05-20"))
        store.add(make_expense("10", "c", "2023-11-02"))
        now = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

        assert store.available_months(now) == ["2023-11", "2024-05", "2025-01"]

    def test_current_month_uses_sao_paulo_time(self, store):
        # 02:00 UTC on June 1st is still May 31st in São Paulo (UTC-3)
        assert store.current_month(datetime(2024, 6, 1, 2, 0, tzinfo=timezone.utc)) == "2024-05"
        assert store.current_month(datetime(2024, 6, 1, 3, 0, tzinfo=timezone.utc)) == "2024-06"

    def test_expenses_for_month(self, store):
        store.add(make_expense("10", "may", "2024-05-01"))
        store.add(make_expense("10", "june", "2024-06-01"))

        assert [e.description for e in store.expenses_for_month("2024-06")] == ["june"]


class TestJsonFileExpenseStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_reads_none(self, tmp_path):
        storage = JsonFileExpenseStorage(path=tmp_path / "expenses.json", key="expenses")
        assert storage.read_blob() is None

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "nested" / "expenses.json"
        storage = JsonFileExpenseStorage(path=path, key="expenses")

        storage.write_blob("[]")

        assert storage.read_blob() == "[]"
        assert json.loads(path.read_text(encoding="utf-8")) == {"expenses": "[]"}

    def test_other_keys_preserved(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
        storage = JsonFileExpenseStorage(path=path, key="expenses")

        storage.write_blob("[]")

        assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark", "expenses": "[]"}

    def test_corrupt_file_raises_on_read_and_is_replaced_on_write(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text("{oops", encoding="utf-8")
        storage = JsonFileExpenseStorage(path=path, key="expenses")

        with pytest.raises(CorruptStorageError):
            storage.read_blob()

        storage.write_blob("[]")
        assert storage.read_blob() == "[]"

    def test_store_over_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text("{oops", encoding="utf-8")
        store = ExpenseRecordStore(JsonFileExpenseStorage(path=path, key="expenses"))

        assert store.load() == []

    def test_store_persists_to_file(self, tmp_path):
        path = tmp_path / "expenses.json"
        store = ExpenseRecordStore(JsonFileExpenseStorage(path=path, key="expenses"))
        store.load()
        store.add(make_expense("12.5", "Café", "2024-05-02", ExpenseCategory.ALIMENTACAO))

        records = json.loads(json.loads(path.read_text(encoding="utf-8"))["expenses"])

        assert records[0]["description"] == "Café"
        assert records[0]["amount"] == 12.5
        assert records[0]["category"] == "Alimentação"
        assert "originalInput" in records[0]
