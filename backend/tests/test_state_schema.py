from datetime import date

import pytest
from pydantic import ValidationError

from app.schemas import PortfolioState, TransactionCreateRequest


def test_empty_document_falls_back_to_defaults():
    state = PortfolioState.model_validate({})
    assert state.cash == 0
    assert state.transactions == []
    assert state.prices == {}
    assert state.goals.equity is None
    assert state.budgets == {}
    assert state.targets == {}


def test_null_sections_are_treated_as_missing():
    state = PortfolioState.model_validate(
        {"transactions": None, "prices": None, "goals": None, "budgets": None, "targets": None}
    )
    assert state.transactions == []
    assert state.goals.equity is None


def test_stored_cash_is_ignored_and_recomputed():
    state = PortfolioState.model_validate(
        {
            "cash": 999999,
            "transactions": [
                {"id": "1", "date": "2024-01-01", "type": "deposit", "price": 1000},
                {"id": "2", "date": "2024-01-02", "type": "buy", "asset": "abc", "qty": 2, "price": 100, "fees": 1},
            ],
        }
    )
    assert state.cash == pytest.approx(799)


def test_non_numeric_fields_coerce_to_zero():
    state = PortfolioState.model_validate(
        {
            "transactions": [
                {"date": "2024-01-02", "type": "BUY", "asset": " abc ", "qty": "lots", "price": None, "fees": "n/a"}
            ],
            "prices": {"abc": "oops"},
            "goals": {"equity": "-5"},
        }
    )
    tx = state.transactions[0]
    assert tx.id
    assert tx.type.value == "buy"
    assert tx.asset == "ABC"
    assert (tx.qty, tx.price, tx.fees) == (0.0, 0.0, 0.0)
    assert state.prices == {"ABC": 0.0}
    assert state.goals.equity is None


def test_mapping_keys_are_normalised():
    state = PortfolioState.model_validate(
        {"prices": {" ivvb11 ": 300, "": 5}, "targets": {"xyz": 40}, "budgets": {"2024-05": "250"}}
    )
    assert state.prices == {"IVVB11": 300.0}
    assert state.targets == {"XYZ": 40.0}
    assert state.budgets == {"2024-05": 250.0}


def test_unknown_top_level_keys_are_ignored():
    state = PortfolioState.model_validate({"version": 3, "theme": "dark"})
    assert state.transactions == []


@pytest.mark.parametrize(
    "payload",
    [
        [],
        "not a snapshot",
        {"transactions": [{"date": "someday", "type": "deposit", "price": 10}]},
        {"transactions": [{"date": "2024-01-01", "type": "transfer", "price": 10}]},
        {"transactions": {"id": "1"}},
        {"prices": ["ABC", 10]},
    ],
)
def test_malformed_documents_are_rejected(payload):
    with pytest.raises(ValidationError):
        PortfolioState.model_validate(payload)


def test_index_of_raises_for_unknown_id():
    state = PortfolioState.model_validate({"transactions": [{"id": "a", "date": "2024-01-01", "type": "fee", "price": 1}]})
    assert state.index_of("a") == 0
    with pytest.raises(LookupError):
        state.index_of("b")


def test_create_request_enforces_type_rules():
    with pytest.raises(ValidationError):
        TransactionCreateRequest(date=date(2024, 1, 1), type="buy", asset="", qty=1, price=10)
    with pytest.raises(ValidationError):
        TransactionCreateRequest(date=date(2024, 1, 1), type="sell", asset="ABC", qty=0, price=10)
    with pytest.raises(ValidationError):
        TransactionCreateRequest(date=date(2024, 1, 1), type="deposit", price=0)
    with pytest.raises(ValidationError):
        TransactionCreateRequest(date=date(2024, 1, 1), type="fee", price=5, fees=-1)

    request = TransactionCreateRequest(date=date(2024, 1, 1), type="dividend", asset=" abc ", price=3)
    assert request.asset == "ABC"
