"""Unit tests for TransactionService orchestration."""

from datetime import UTC, date, datetime, timedelta

import pydantic
import pytest

from ledger.core.errors import Forbidden, NotFound, TransientStoreFailure, Unauthenticated, ValidationError
from ledger.core.models import TransactionCreate, TransactionKind, TransactionUpdate
from ledger.core.settings import Settings
from ledger.services.transactions import TransactionService, parse_record_id

CREATED = datetime(2025, 1, 10, 12, 0, tzinfo=UTC)
LATER = datetime(2025, 2, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def service(fake_store) -> TransactionService:
    """Service over the in-memory store."""
    return TransactionService(fake_store, settings=Settings(summary_window_months=6, summary_category_limit=10))


@pytest.fixture
def mock_store(mocker):
    """A store with no behaviour, for checking delegation"""
    return mocker.Mock()


@pytest.fixture
def coffee() -> TransactionCreate:
    """The canonical expense used across tests"""
    return TransactionCreate.model_validate(
        {"title": "Coffee", "amount": 5, "kind": "expense", "category": "Food", "date": "2025-01-10"}
    )


@pytest.mark.unit
class TestRecordIds:
    """Path id parsing"""

    @pytest.mark.parametrize(
        "raw", ["abc", "", "1.5", "-4", "0", None, "64db123abc", "\u00b2", "99999999999999999999", 2**63]
    )
    def test_rejects_malformed_ids(self, raw):
        with pytest.raises(ValidationError):
            parse_record_id(raw)

    @pytest.mark.parametrize(("raw", "expected"), [("12", 12), (" 3 ", 3), (7, 7), (str(2**63 - 1), 2**63 - 1)])
    def test_accepts_positive_integers(self, raw, expected: int):
        assert parse_record_id(raw) == expected


@pytest.mark.unit
class TestCreate:
    """Creating records"""

    def test_create_stamps_owner_and_timestamps(self, service: TransactionService, coffee, mocker):
        mocker.patch("ledger.services.transactions.utcnow", return_value=CREATED)

        created = service.create("u1", coffee)

        assert created.id == 1
        assert created.owner_id == "u1"
        assert created.kind is TransactionKind.EXPENSE
        assert created.occurred_at == date(2025, 1, 10)
        assert created.created_at == created.updated_at == CREATED

    def test_date_defaults_to_today(self, service: TransactionService, mocker):
        mocker.patch("ledger.services.transactions.utcnow", return_value=CREATED)
        payload = TransactionCreate.model_validate({"title": "Salary", "amount": 100, "kind": "income"})

        created = service.create("u1", payload)

        assert created.occurred_at == CREATED.date()
        assert created.category is None

    def test_blank_owner_is_unauthenticated(self, service: TransactionService, coffee):
        with pytest.raises(Unauthenticated):
            service.create("  ", coffee)

    @pytest.mark.parametrize(
        "body",
        [
            {"amount": 5, "kind": "expense"},
            {"title": "   ", "amount": 5, "kind": "expense"},
            {"title": "x", "kind": "expense"},
            {"title": "x", "amount": 5},
            {"title": "x", "amount": 5, "kind": "transfer"},
            {"title": "x", "amount": -1, "kind": "expense"},
            {"title": "x", "amount": float("inf"), "kind": "expense"},
            {"title": "x", "amount": float("nan"), "kind": "expense"},
            {"title": "x", "amount": 5, "kind": "expense", "date": "not-a-date"},
        ],
    )
    def test_payload_validation(self, body: dict):
        with pytest.raises(pydantic.ValidationError):
            TransactionCreate.model_validate(body)

    def test_payload_accepts_type_alias_and_zero_amount(self):
        payload = TransactionCreate.model_validate({"title": "Free", "amount": 0, "type": "income", "category": ""})

        assert payload.kind is TransactionKind.INCOME
        assert payload.amount == 0
        assert payload.category is None


@pytest.mark.unit
class TestSingleRecordOperations:
    """get / update / delete through the ownership guard"""

    def test_malformed_id_never_reaches_store(self, mock_store):
        service = TransactionService(mock_store, settings=Settings())

        with pytest.raises(ValidationError):
            service.get("u1", "not-an-id")

        mock_store.get.assert_not_called()

    def test_missing_record(self, mock_store):
        mock_store.get.return_value = None
        service = TransactionService(mock_store, settings=Settings())

        with pytest.raises(NotFound):
            service.delete("u1", "42")

        mock_store.get.assert_called_once_with(42)
        mock_store.delete.assert_not_called()

    def test_foreign_record_is_forbidden(self, service: TransactionService, make_record):
        record = make_record(owner_id="u2")

        with pytest.raises(Forbidden):
            service.get("u1", str(record.id))
        with pytest.raises(Forbidden):
            service.update("u1", str(record.id), TransactionUpdate(amount=1))
        with pytest.raises(Forbidden):
            service.delete("u1", str(record.id))

    def test_get_own_record(self, service: TransactionService, make_record):
        record = make_record(owner_id="u1", title="Coffee")

        assert service.get("u1", str(record.id)).title == "Coffee"

    def test_naive_timestamps_are_read_as_utc(self, service: TransactionService, make_record):
        record = make_record(owner_id="u1")
        record.created_at = record.updated_at = datetime(2025, 1, 1, 9, 30)

        fetched = service.get("u1", str(record.id))

        assert fetched.created_at == datetime(2025, 1, 1, 9, 30, tzinfo=UTC)
        assert fetched.updated_at.utcoffset() == timedelta(0)

    def test_update_amount_only(self, service: TransactionService, coffee, mocker):
        clock = mocker.patch("ledger.services.transactions.utcnow", return_value=CREATED)
        created = service.create("u1", coffee)
        clock.return_value = LATER

        updated = service.update("u1", str(created.id), TransactionUpdate.model_validate({"amount": 8}))

        assert updated.amount == 8
        assert updated.id == created.id
        assert updated.owner_id == created.owner_id
        assert updated.created_at == CREATED
        assert updated.updated_at == LATER
        assert updated.title == "Coffee"
        assert updated.category == "Food"

    def test_update_ignores_immutable_fields(self, service: TransactionService, coffee):
        created = service.create("u1", coffee)
        payload = TransactionUpdate.model_validate(
            {"id": 99, "ownerId": "u2", "createdAt": "2000-01-01", "kind": "income"}
        )

        updated = service.update("u1", str(created.id), payload)

        assert updated.id == created.id
        assert updated.owner_id == "u1"
        assert updated.created_at == created.created_at
        assert updated.kind is TransactionKind.INCOME

    def test_update_can_clear_category(self, service: TransactionService, coffee):
        created = service.create("u1", coffee)

        updated = service.update("u1", str(created.id), TransactionUpdate.model_validate({"category": None}))

        assert updated.category is None

    @pytest.mark.parametrize(
        "body",
        [{"title": None}, {"amount": None}, {"kind": None}, {"amount": -2}, {"amount": float("inf")}, {"title": ""}],
    )
    def test_update_rejects_invalid_values(self, body: dict):
        with pytest.raises(pydantic.ValidationError):
            TransactionUpdate.model_validate(body)

    def test_delete_then_get_is_not_found(self, service: TransactionService, coffee):
        created = service.create("u1", coffee)

        confirmation = service.delete("u1", str(created.id))

        assert confirmation.message == "Transaction deleted"
        with pytest.raises(NotFound):
            service.get("u1", str(created.id))

    def test_store_failures_propagate(self, mock_store):
        mock_store.get.side_effect = TransientStoreFailure("Record store unavailable, please retry")
        service = TransactionService(mock_store, settings=Settings())

        with pytest.raises(TransientStoreFailure):
            service.get("u1", "1")


@pytest.mark.unit
class TestViews:
    """list, summary and analytics"""

    def test_list_delegates_to_query_engine(self, mocker, mock_store):
        query_engine = mocker.Mock()
        service = TransactionService(mock_store, settings=Settings(), query_engine=query_engine)
        params = {"kind": "expense", "page": "2"}

        result = service.list(7, params)

        query_engine.list.assert_called_once_with("7", params)
        assert result is query_engine.list.return_value

    def test_summary_uses_configured_window_and_limit(self, mocker, mock_store):
        aggregation = mocker.Mock()
        aggregation.totals.return_value = (10.0, 4.0)
        aggregation.monthly_series.return_value = []
        aggregation.category_totals.return_value = []
        settings = Settings(summary_window_months=3, summary_category_limit=2)
        service = TransactionService(mock_store, settings=settings, aggregation_engine=aggregation)

        summary = service.summary("u1")

        aggregation.monthly_series.assert_called_once_with("u1", 3)
        aggregation.category_totals.assert_called_once_with("u1", 2)
        assert (summary.total_income, summary.total_expense) == (10.0, 4.0)

    def test_end_to_end_scenario(self, service: TransactionService, coffee):
        created = service.create("U", coffee)

        assert service.get("U", str(created.id)).title == "Coffee"
        with pytest.raises(Forbidden):
            service.get("V", str(created.id))

        page = service.list("U", {"kind": "expense"})
        assert page.total == 1
        assert [r.id for r in page.records] == [created.id]

        summary = service.summary("U")
        assert [(c.category, c.total) for c in summary.category] == [("Food", 5)]
        assert (summary.total_income, summary.total_expense) == (0, 5)

        analytics = service.analytics("U")
        assert analytics.category_totals == {"Food": 5}
