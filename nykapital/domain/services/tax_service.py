"""
Danish VAT (moms) reporting.

Sales VAT comes from invoices created in the period that are paid or partially
paid. Purchase VAT is estimated from outgoing transactions, treating every
amount as VAT-inclusive at 25%, so the VAT share is 0.25 / 1.25 = 20%.
"""
from typing import Any, Dict, List

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.aggregation import (
    get_absolute_amount,
    invoices_with_status,
    is_outgoing,
    round_money,
    sum_expenses_by_category,
    sum_incoming,
    sum_invoice_field,
    sum_outgoing,
)
from nykapital.domain.models import (
    PURCHASE_VAT_SHARE,
    SETTLED_INVOICE_STATUSES,
    Invoice,
    InvoiceStatus,
    Transaction,
)


def _purchase_breakdown(purchases: List[Transaction]) -> List[Dict[str, Any]]:
    rows: Dict[str, Dict[str, Any]] = {}
    for t in purchases:
        if t.category is None:
            continue
        row = rows.setdefault(
            t.category.value,
            {"category": t.category.value, "total_amount": 0.0, "estimated_moms": 0.0, "count": 0},
        )
        amount = get_absolute_amount(t)
        row["total_amount"] += amount
        row["estimated_moms"] += amount * PURCHASE_VAT_SHARE
        row["count"] += 1
    for row in rows.values():
        row["total_amount"] = round_money(row["total_amount"])
        row["estimated_moms"] = round_money(row["estimated_moms"])
    return list(rows.values())


def _quarter_slice(invoices: List[Invoice], transactions: List[Transaction], year: int, quarter: int):
    quarter_invoices = [inv for inv in invoices if dates.in_quarter(inv.created_at, year, quarter)]
    quarter_transactions = [t for t in transactions if dates.in_quarter(t.created_at, year, quarter)]
    return quarter_invoices, quarter_transactions


def moms_report(scope: LedgerScope, quarter: int, year: int) -> Dict[str, Any]:
    dates.validate_quarter(quarter)
    dates.validate_year(year)
    start_month, end_month = dates.quarter_months(quarter)

    invoices, transactions = _quarter_slice(
        scope.invoices(), scope.transactions(), year, quarter
    )
    settled = invoices_with_status(invoices, SETTLED_INVOICE_STATUSES)
    purchases = [t for t in transactions if is_outgoing(t)]

    moms_on_sales = sum_invoice_field(settled, "tax")
    total_purchases = sum_outgoing(purchases)
    moms_on_purchases = round_money(total_purchases * PURCHASE_VAT_SHARE)

    return {
        "period": {
            "quarter": quarter,
            "year": year,
            "start_month": start_month,
            "end_month": end_month,
        },
        "sales": {
            "total_sales": sum_invoice_field(settled, "subtotal"),
            "moms_on_sales": moms_on_sales,
            "invoice_count": len(settled),
        },
        "purchases": {
            "total_purchases": total_purchases,
            "moms_on_purchases": moms_on_purchases,
            "transaction_count": len(purchases),
            "category_breakdown": _purchase_breakdown(purchases),
        },
        "summary": {
            "output_moms": moms_on_sales,
            "input_moms": moms_on_purchases,
            # negative means SKAT owes the business a refund
            "net_moms": round_money(moms_on_sales - moms_on_purchases),
        },
    }


def annual_summary(scope: LedgerScope, year: int) -> Dict[str, Any]:
    dates.validate_year(year)
    invoices = [inv for inv in scope.invoices() if inv.created_at.year == year]
    transactions = [t for t in scope.transactions() if t.created_at.year == year]
    settled = invoices_with_status(invoices, SETTLED_INVOICE_STATUSES)

    total_revenue = sum_invoice_field(settled, "subtotal")
    total_expenses = sum_outgoing(transactions)

    quarterly_data = []
    for quarter in range(1, 5):
        q_invoices, q_transactions = _quarter_slice(invoices, transactions, year, quarter)
        revenue = sum_invoice_field(
            invoices_with_status(q_invoices, SETTLED_INVOICE_STATUSES), "subtotal"
        )
        expenses = sum_outgoing(q_transactions)
        quarterly_data.append(
            {
                "quarter": quarter,
                "revenue": revenue,
                "expenses": expenses,
                "income": sum_incoming(q_transactions),
                "profit": round_money(revenue - expenses),
            }
        )

    return {
        "year": year,
        "summary": {
            "total_revenue": total_revenue,
            "total_expenses": total_expenses,
            "total_income": sum_incoming(transactions),
            "total_vat_collected": sum_invoice_field(settled, "tax"),
            "profit": round_money(total_revenue - total_expenses),
        },
        "expenses_by_category": sum_expenses_by_category(transactions),
        "quarterly_data": quarterly_data,
        "invoice_stats": {
            "total": len(invoices),
            "paid": len(invoices_with_status(invoices, {InvoiceStatus.PAID})),
            "pending": len(invoices_with_status(invoices, {InvoiceStatus.SENT})),
            "overdue": len(invoices_with_status(invoices, {InvoiceStatus.OVERDUE})),
        },
    }
