import pytest

from nykapital.domain.errors import NotFoundError, ValidationError
from nykapital.domain.services.payment_service import open_account, receive_payment, send_payment
from nykapital.domain.services.transaction_service import (
    CSV_HEADER,
    export_filename,
    list_account_transactions,
    list_transactions,
)


@pytest.fixture()
def accounts(scope, clock):
    clock.set(2025, 3, 1, 9, 0)
    main = open_account(scope)
    savings = open_account(scope, "DKK", "savings")
    receive_payment(scope, main.id, 10000, description="Faktura 2025-001", counterparty="Kunde A/S", category="sales")
    clock.set(2025, 3, 10, 14, 0)
    send_payment(scope, main.id, "Udlejer ApS", "", 4000, description="Husleje marts", category="rent")
    clock.set(2025, 3, 31, 18, 30)
    send_payment(scope, main.id, "Adobe", "", 250, reference="INV-ADOBE-7", category="software")
    clock.set(2025, 4, 2, 8, 0)
    receive_payment(scope, savings.id, 1000, counterparty="Overførsel")
    return main, savings


def _counterparties(transactions):
    return [t.counterparty for t in transactions]


def test_list_is_newest_first(scope, accounts):
    assert _counterparties(list_transactions(scope)) == [
        "Overførsel",
        "Adobe",
        "Udlejer ApS",
        "Kunde A/S",
    ]


def test_date_only_end_includes_the_whole_day(scope, accounts):
    result = list_transactions(scope, start_date="2025-03-10", end_date="2025-03-31")
    assert _counterparties(result) == ["Adobe", "Udlejer ApS"]


def test_filter_by_account_and_category(scope, accounts):
    main, savings = accounts
    assert _counterparties(list_transactions(scope, account_id=savings.id)) == ["Overførsel"]
    assert _counterparties(list_transactions(scope, category="rent")) == ["Udlejer ApS"]
    assert len(list_account_transactions(scope, main.id)) == 3


def test_search_covers_description_and_reference(scope, accounts):
    assert _counterparties(list_transactions(scope, search="husleje")) == ["Udlejer ApS"]
    assert _counterparties(list_transactions(scope, search="inv-adobe")) == ["Adobe"]
    assert list_transactions(scope, search="ingenting") == []


def test_amount_range_uses_absolute_amounts(scope, accounts):
    result = list_transactions(scope, min_amount=500, max_amount=5000)
    assert _counterparties(result) == ["Overførsel", "Udlejer ApS"]


def test_invalid_filters(scope, other_scope, accounts):
    main, _ = accounts
    with pytest.raises(ValidationError):
        list_transactions(scope, min_amount=10, max_amount=1)
    with pytest.raises(ValidationError):
        list_transactions(scope, start_date="not-a-date")
    with pytest.raises(ValidationError):
        list_transactions(scope, category="lottery")
    with pytest.raises(NotFoundError):
        list_transactions(other_scope, account_id=main.id)


def test_export_filename(clock):
    clock.set(2025, 4, 2, 8, 0)
    assert export_filename() == "transactions_2025-04-02.csv"


def test_csv_header_columns():
    assert CSV_HEADER == [
        "date", "type", "counterparty", "description", "category",
        "reference", "amount", "currency", "status",
    ]
