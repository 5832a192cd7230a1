import logging
from typing import Any, Dict, Iterable, List, Optional

from nykapital.data.base import unit_of_work
from nykapital.data.repositories.invoice_repository import (
    add_invoice_payment,
    create_invoice as repo_create_invoice,
    invoice_to_domain,
    next_invoice_sequence,
)
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import OverpaymentError, ValidationError
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.aggregation import round_money
from nykapital.domain.helpers.validation import (
    parse_currency,
    parse_enum,
    require_positive,
    require_text,
)
from nykapital.domain.locks import entity_lock
from nykapital.domain.models import (
    SETTABLE_INVOICE_STATUSES,
    TERMINAL_INVOICE_STATUSES,
    VAT_RATE,
    Currency,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "Bank Transfer"


def format_invoice_number(year: int, sequence: int) -> str:
    return f"{year}-{sequence:03d}"


def derive_status(amount_paid: float, total: float, current: InvoiceStatus) -> InvoiceStatus:
    """
    Status implied by the amount paid so far; unpaid invoices keep their status.
    """
    if amount_paid >= total:
        return InvoiceStatus.PAID
    if amount_paid > 0:
        return InvoiceStatus.PARTIALLY_PAID
    return current


def _build_items(items: Iterable[Any]) -> List[InvoiceItem]:
    result = []
    for raw in items or []:
        if isinstance(raw, InvoiceItem):
            item = raw
        else:
            data = raw if isinstance(raw, dict) else raw.model_dump()
            try:
                item = InvoiceItem(
                    description=str(data.get("description") or ""),
                    quantity=float(data["quantity"]),
                    unit_price=float(data["unit_price"]),
                )
            except (KeyError, TypeError, ValueError):
                raise ValidationError("Each item needs a numeric quantity and unit_price")
        if item.total < 0:
            raise ValidationError(f"Item total must not be negative: {item.description}")
        result.append(item)
    if not result:
        raise ValidationError("An invoice needs at least one item")
    return result


def compute_totals(items: List[InvoiceItem]) -> Dict[str, float]:
    subtotal = round_money(sum(item.total for item in items))
    tax = round_money(subtotal * VAT_RATE)
    return {"subtotal": subtotal, "tax": tax, "total": round_money(subtotal + tax)}


def list_invoices(scope: LedgerScope) -> List[Invoice]:
    return scope.invoices()


def get_invoice(scope: LedgerScope, invoice_id: str) -> Invoice:
    return scope.invoice(invoice_id)


def create_invoice(
    scope: LedgerScope,
    customer_name: str,
    customer_email: str,
    items: Iterable[Any],
    due_date,
    customer_cvr: Optional[str] = None,
    currency: Optional[str] = None,
) -> Invoice:
    customer_name = require_text(customer_name, "Customer name")
    customer_email = require_text(customer_email, "Customer email")
    due = dates.parse_start(due_date)
    if due is None:
        raise ValidationError("Due date is required")
    currency_code = parse_currency(currency, default=Currency.DKK).value
    invoice_items = _build_items(items)
    totals = compute_totals(invoice_items)

    now = dates.now()
    with entity_lock("invoice_sequence", scope.user_id):
        with unit_of_work(scope.db):
            sequence = next_invoice_sequence(scope.db, scope.user_id, now.year)
            invoice_orm = repo_create_invoice(
                scope.db,
                user_id=scope.user_id,
                invoice_number=format_invoice_number(now.year, sequence),
                customer_name=customer_name,
                customer_email=customer_email,
                customer_cvr=customer_cvr or None,
                items=invoice_items,
                subtotal=totals["subtotal"],
                tax=totals["tax"],
                total=totals["total"],
                currency=currency_code,
                due_date=due,
                created_at=now,
            )
            invoice = invoice_to_domain(invoice_orm)

    logger.info("Created invoice %s (%.2f %s)", invoice.invoice_number, invoice.total, currency_code)
    return invoice


def record_payment(
    scope: LedgerScope,
    invoice_id: str,
    amount: float,
    method: Optional[str] = None,
    reference: Optional[str] = None,
) -> Invoice:
    """
    Register a (partial) payment and move the invoice to partially_paid or paid.
    Payments above the remaining balance are rejected with OverpaymentError.
    """
    with entity_lock("invoice", invoice_id):
        with unit_of_work(scope.db):
            invoice_orm = scope.invoice_row(invoice_id, for_update=True)
            amount = require_positive(amount)
            if invoice_orm.status in TERMINAL_INVOICE_STATUSES:
                raise ValidationError(
                    f"Cannot record payments on a {invoice_orm.status.value} invoice"
                )
            remaining = round_money(invoice_orm.total - invoice_orm.amount_paid)
            if amount > remaining:
                raise OverpaymentError(remaining)

            now = dates.now()
            add_invoice_payment(
                scope.db,
                invoice_orm,
                amount=amount,
                date=now,
                method=method or DEFAULT_PAYMENT_METHOD,
                reference=reference or "",
            )
            invoice_orm.amount_paid = round_money(invoice_orm.amount_paid + amount)
            invoice_orm.status = derive_status(
                invoice_orm.amount_paid, invoice_orm.total, invoice_orm.status
            )
            if invoice_orm.status == InvoiceStatus.PAID:
                invoice_orm.paid_at = now
            scope.db.flush()
            invoice = invoice_to_domain(invoice_orm)

    logger.info(
        "Recorded payment of %.2f on invoice %s, now %s",
        amount,
        invoice.invoice_number,
        invoice.status.value,
    )
    return invoice


def set_status(scope: LedgerScope, invoice_id: str, status: str) -> Invoice:
    """
    Manual status override. Setting "paid" stamps paid_at but leaves
    amount_paid and the payment list untouched.
    """
    target = parse_enum(InvoiceStatus, status, "invoice status")
    if target not in SETTABLE_INVOICE_STATUSES:
        raise ValidationError(f"Status cannot be set to {target.value}")

    with entity_lock("invoice", invoice_id):
        with unit_of_work(scope.db):
            invoice_orm = scope.invoice_row(invoice_id, for_update=True)
            if invoice_orm.status in TERMINAL_INVOICE_STATUSES:
                raise ValidationError(
                    f"Invoice is {invoice_orm.status.value} and can no longer change status"
                )
            invoice_orm.status = target
            if target == InvoiceStatus.PAID:
                invoice_orm.paid_at = dates.now()
            scope.db.flush()
            invoice = invoice_to_domain(invoice_orm)

    logger.info("Invoice %s set to %s", invoice.invoice_number, target.value)
    return invoice

