import threading

import pytest

from nykapital.data.base import SessionLocal
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import InsufficientFundsError, NotFoundError, ValidationError
from nykapital.domain.models import PaymentStatus, TransactionType
from nykapital.domain.services.payment_service import (
    get_account,
    list_payments,
    open_account,
    receive_payment,
    send_payment,
)


@pytest.fixture()
def funded_account(scope):
    account = open_account(scope, "DKK")
    receive_payment(scope, account.id, 10000, description="Startkapital", counterparty="Ejer")
    return get_account(scope, account.id)


def test_open_account_starts_empty(scope):
    account = open_account(scope, "EUR", "savings")
    assert account.balance == 0
    assert account.currency.value == "EUR"
    assert account.type.value == "savings"
    assert account.status.value == "active"
    assert account.account_number.startswith("5479 ")


def test_send_then_insufficient_funds(scope, funded_account):
    payment = send_payment(scope, funded_account.id, "Vendor A", "1234 5678901234", 3000)

    assert payment.status == PaymentStatus.COMPLETED
    assert get_account(scope, funded_account.id).balance == 7000
    outgoing = [t for t in scope.transactions() if t.type == TransactionType.OUTGOING]
    assert len(outgoing) == 1
    assert outgoing[0].amount == -3000
    assert payment.transaction_id == outgoing[0].id

    with pytest.raises(InsufficientFundsError) as exc_info:
        send_payment(scope, funded_account.id, "Vendor A", "", 8000)
    assert exc_info.value.context() == {"balance": 7000, "amount": 8000}
    assert get_account(scope, funded_account.id).balance == 7000
    assert len(list_payments(scope)) == 1


def test_send_whole_balance_is_allowed(scope, funded_account):
    send_payment(scope, funded_account.id, "Udlejer", "", 10000, category="rent")
    assert get_account(scope, funded_account.id).balance == 0


@pytest.mark.parametrize("amount", [0, -50, float("nan")])
def test_send_rejects_non_positive_amounts(scope, funded_account, amount):
    with pytest.raises(ValidationError):
        send_payment(scope, funded_account.id, "Vendor A", "", amount)
    assert get_account(scope, funded_account.id).balance == 10000


def test_send_requires_recipient_name(scope, funded_account):
    with pytest.raises(ValidationError):
        send_payment(scope, funded_account.id, "  ", "", 100)


def test_send_rejects_unknown_category(scope, funded_account):
    with pytest.raises(ValidationError):
        send_payment(scope, funded_account.id, "Vendor A", "", 100, category="lottery")


@pytest.mark.parametrize("amount", [0, -100])
def test_receive_rejects_non_positive_amounts(scope, funded_account, amount):
    with pytest.raises(ValidationError):
        receive_payment(scope, funded_account.id, amount)
    assert get_account(scope, funded_account.id).balance == 10000


def test_foreign_account_is_not_found(scope, other_scope, funded_account):
    with pytest.raises(NotFoundError):
        send_payment(other_scope, funded_account.id, "Tyv", "", 10)
    with pytest.raises(NotFoundError):
        receive_payment(other_scope, funded_account.id, 10)
    with pytest.raises(NotFoundError):
        get_account(other_scope, funded_account.id)
    assert list_payments(other_scope) == []


def test_balance_equals_receipts_minus_applied_sends(scope):
    account = open_account(scope)
    operations = [
        ("receive", 500),
        ("send", 200),
        ("send", 400),  # rejected, only 300 left
        ("receive", 1250.5),
        ("send", 1000),
        ("send", 551),  # rejected
        ("send", 550.5),
    ]
    received = sent = 0.0
    for kind, amount in operations:
        if kind == "receive":
            receive_payment(scope, account.id, amount)
            received += amount
        else:
            try:
                send_payment(scope, account.id, "Leverandør", "", amount)
                sent += amount
            except InsufficientFundsError:
                pass

    balance = get_account(scope, account.id).balance
    assert balance == pytest.approx(received - sent)
    assert balance == pytest.approx(0.0)
    assert balance == pytest.approx(sum(t.amount for t in scope.transactions()))


def test_concurrent_sends_never_overdraw(scope, funded_account, user):
    results = []

    def worker():
        session = SessionLocal()
        try:
            send_payment(LedgerScope(session, user.id), funded_account.id, "Vendor", "", 1500)
            results.append("sent")
        except InsufficientFundsError:
            results.append("rejected")
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("sent") == 6
    assert results.count("rejected") == 4
    assert get_account(scope, funded_account.id).balance == 1000


def test_sub_ore_amounts_are_rejected(scope, funded_account):
    with pytest.raises(ValidationError):
        send_payment(scope, funded_account.id, "Vendor A", "", 0.004)
    with pytest.raises(ValidationError):
        receive_payment(scope, funded_account.id, 0.001)

    assert get_account(scope, funded_account.id).balance == 10000
    assert list_payments(scope) == []
    assert [t.amount for t in scope.transactions()] == [10000]


def test_amounts_are_rounded_to_ore(scope, funded_account):
    payment = send_payment(scope, funded_account.id, "Vendor A", "", 0.006)
    assert payment.amount == 0.01
    assert get_account(scope, funded_account.id).balance == 9999.99
