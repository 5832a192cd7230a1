import threading

import pytest

from nykapital.data.base import SessionLocal
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import NotFoundError, OverpaymentError, ValidationError
from nykapital.domain.models import InvoiceStatus
from nykapital.domain.services.invoice_service import (
    create_invoice,
    get_invoice,
    list_invoices,
    record_payment,
    set_status,
)

ITEMS = [
    {"description": "Konsulenttimer", "quantity": 8, "unit_price": 100},
    {"description": "Opsætning", "quantity": 1, "unit_price": 200},
]


def _invoice(scope, items=ITEMS, **kwargs):
    return create_invoice(
        scope,
        kwargs.pop("customer_name", "Kunde A/S"),
        kwargs.pop("customer_email", "bogholderi@kunde.dk"),
        items,
        kwargs.pop("due_date", "2025-07-15"),
        **kwargs,
    )


def _assert_payment_invariant(invoice):
    assert invoice.amount_paid == pytest.approx(sum(p.amount for p in invoice.payments))
    assert invoice.amount_paid <= invoice.total


def test_create_computes_totals_and_number(scope, clock):
    invoice = _invoice(scope, customer_cvr="87654321")

    assert invoice.subtotal == 1000
    assert invoice.tax == 250
    assert invoice.total == 1250
    assert invoice.status == InvoiceStatus.DRAFT
    assert invoice.amount_paid == 0
    assert invoice.currency == "DKK"
    assert invoice.invoice_number == "2025-001"
    assert [item.total for item in invoice.items] == [800, 200]

    second = _invoice(scope)
    assert second.invoice_number == "2025-002"


def test_invoice_numbers_are_per_user_and_year(scope, other_scope, clock):
    _invoice(scope)
    assert _invoice(other_scope).invoice_number == "2025-001"
    clock.set(2026, 1, 2, 9, 0)
    assert _invoice(scope).invoice_number == "2026-001"


@pytest.mark.parametrize(
    "items",
    [
        [],
        [{"description": "Rabat", "quantity": 1, "unit_price": -10}],
        [{"description": "Mangler pris", "quantity": 1}],
    ],
)
def test_create_rejects_bad_items(scope, items):
    with pytest.raises(ValidationError):
        _invoice(scope, items=items)


def test_create_requires_customer_and_known_currency(scope):
    with pytest.raises(ValidationError):
        _invoice(scope, customer_name="")
    with pytest.raises(ValidationError):
        _invoice(scope, currency="SEK")


def test_partial_payments_until_paid(scope, clock):
    invoice = _invoice(scope)
    invoice = set_status(scope, invoice.id, "sent")
    assert invoice.status == InvoiceStatus.SENT

    invoice = record_payment(scope, invoice.id, 500)
    assert invoice.amount_paid == 500
    assert invoice.status == InvoiceStatus.PARTIALLY_PAID
    assert invoice.paid_at is None
    _assert_payment_invariant(invoice)

    with pytest.raises(OverpaymentError) as exc_info:
        record_payment(scope, invoice.id, 800)
    assert exc_info.value.remaining == 750
    unchanged = get_invoice(scope, invoice.id)
    assert unchanged.amount_paid == 500
    assert unchanged.status == InvoiceStatus.PARTIALLY_PAID
    assert len(unchanged.payments) == 1

    clock.set(2025, 6, 20, 10, 30)
    invoice = record_payment(scope, invoice.id, 750, method="MobilePay", reference="MP-1")
    assert invoice.amount_paid == 1250
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.paid_at == clock.current
    assert [p.method for p in invoice.payments] == ["Bank Transfer", "MobilePay"]
    _assert_payment_invariant(invoice)


def test_payment_on_draft_invoice_is_allowed(scope):
    invoice = record_payment(scope, _invoice(scope).id, 100)
    assert invoice.status == InvoiceStatus.PARTIALLY_PAID


def test_no_payments_on_terminal_invoices(scope):
    paid = _invoice(scope)
    record_payment(scope, paid.id, 1250)
    with pytest.raises(ValidationError):
        record_payment(scope, paid.id, 1)

    cancelled = set_status(scope, _invoice(scope).id, "cancelled")
    with pytest.raises(ValidationError):
        record_payment(scope, cancelled.id, 1)


@pytest.mark.parametrize("amount", [0, -1])
def test_payment_amount_must_be_positive(scope, amount):
    invoice = _invoice(scope)
    with pytest.raises(ValidationError):
        record_payment(scope, invoice.id, amount)


def test_set_status_paid_leaves_amount_paid_alone(scope):
    invoice = set_status(scope, _invoice(scope).id, "paid")
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.paid_at is not None
    assert invoice.amount_paid == 0
    assert invoice.payments == []


@pytest.mark.parametrize("target", ["draft", "partially_paid", "archived"])
def test_set_status_rejects_targets(scope, target):
    with pytest.raises(ValidationError):
        set_status(scope, _invoice(scope).id, target)


def test_terminal_invoices_keep_their_status(scope):
    invoice = set_status(scope, _invoice(scope).id, "cancelled")
    with pytest.raises(ValidationError):
        set_status(scope, invoice.id, "sent")


def test_overdue_invoice_can_still_be_paid(scope):
    invoice = set_status(scope, _invoice(scope).id, "overdue")
    invoice = record_payment(scope, invoice.id, 1250)
    assert invoice.status == InvoiceStatus.PAID


def test_foreign_invoice_is_not_found(scope, other_scope):
    invoice = _invoice(scope)
    with pytest.raises(NotFoundError):
        get_invoice(other_scope, invoice.id)
    with pytest.raises(NotFoundError):
        record_payment(other_scope, invoice.id, 10)
    with pytest.raises(NotFoundError):
        set_status(other_scope, invoice.id, "sent")
    assert list_invoices(other_scope) == []


def test_list_is_newest_first(scope, clock):
    first = _invoice(scope)
    clock.set(2025, 6, 16, 8, 0)
    second = _invoice(scope)
    assert [inv.id for inv in list_invoices(scope)] == [second.id, first.id]


def test_sub_ore_payment_is_rejected(scope):
    invoice = _invoice(scope)
    with pytest.raises(ValidationError):
        record_payment(scope, invoice.id, 0.001)
    unchanged = get_invoice(scope, invoice.id)
    assert unchanged.amount_paid == 0
    assert unchanged.payments == []
    assert unchanged.status == InvoiceStatus.DRAFT


def test_concurrent_payments_never_exceed_total(scope, user):
    invoice = _invoice(scope)
    results = []

    def worker():
        session = SessionLocal()
        try:
            record_payment(LedgerScope(session, user.id), invoice.id, 250)
            results.append("paid")
        except (OverpaymentError, ValidationError):
            results.append("rejected")
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("paid") == 5
    assert results.count("rejected") == 5
    settled = get_invoice(scope, invoice.id)
    assert settled.amount_paid == 1250
    assert sum(p.amount for p in settled.payments) == 1250
    assert len(settled.payments) == 5
    assert settled.status == InvoiceStatus.PAID
