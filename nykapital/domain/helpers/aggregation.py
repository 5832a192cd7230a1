from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from nykapital.domain.helpers.dates import in_range
from nykapital.domain.models import (
    Category,
    Invoice,
    InvoiceStatus,
    Transaction,
    TransactionType,
)


def round_money(value: float) -> float:
    return round(value, 2)


def get_absolute_amount(transaction: Transaction) -> float:
    return abs(transaction.amount)


def is_incoming(transaction: Transaction) -> bool:
    return transaction.type == TransactionType.INCOMING


def is_outgoing(transaction: Transaction) -> bool:
    return transaction.type == TransactionType.OUTGOING


def filter_transactions(
    transactions: Iterable[Transaction],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    account_id: Optional[str] = None,
    category: Optional[Category] = None,
    search: Optional[str] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
) -> List[Transaction]:
    """
    Keep transactions matching every given filter. Amount bounds apply to the
    absolute amount; search is a case-insensitive substring over counterparty,
    description and reference.
    """
    term = search.lower() if search else None
    result = []
    for t in transactions:
        if not in_range(t.created_at, start, end):
            continue
        if account_id and t.account_id != account_id:
            continue
        if category and t.category != category:
            continue
        if term and not any(
            term in (text or "").lower()
            for text in (t.counterparty, t.description, t.reference)
        ):
            continue
        if min_amount is not None and get_absolute_amount(t) < min_amount:
            continue
        if max_amount is not None and get_absolute_amount(t) > max_amount:
            continue
        result.append(t)
    return result


def sum_incoming(transactions: Iterable[Transaction]) -> float:
    return round_money(sum(t.amount for t in transactions if is_incoming(t)))


def sum_outgoing(transactions: Iterable[Transaction]) -> float:
    """
    Total of outgoing transactions as a positive number.
    """
    return round_money(abs(sum(t.amount for t in transactions if is_outgoing(t))))


def sum_expenses_by_category(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """
    Absolute outgoing amounts per category; uncategorized transactions are skipped.
    """
    totals: Dict[str, float] = {}
    for t in transactions:
        if not is_outgoing(t) or t.category is None:
            continue
        key = t.category.value
        totals[key] = totals.get(key, 0.0) + get_absolute_amount(t)
    return {k: round_money(v) for k, v in totals.items()}


def sorted_category_data(totals: Dict[str, float]) -> List[dict]:
    return sorted(
        ({"category": category, "amount": amount} for category, amount in totals.items()),
        key=lambda row: row["amount"],
        reverse=True,
    )


def invoices_with_status(
    invoices: Iterable[Invoice], statuses: Set[InvoiceStatus]
) -> List[Invoice]:
    return [inv for inv in invoices if inv.status in statuses]


def sum_invoice_field(invoices: Iterable[Invoice], field: str) -> float:
    return round_money(sum(getattr(inv, field) for inv in invoices))
