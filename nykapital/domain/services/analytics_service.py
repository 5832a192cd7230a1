from typing import Any, Dict, List, Optional

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.aggregation import (
    filter_transactions,
    invoices_with_status,
    round_money,
    sorted_category_data,
    sum_expenses_by_category,
    sum_incoming,
    sum_invoice_field,
    sum_outgoing,
)
from nykapital.domain.models import Account, InvoiceStatus, Transaction
from nykapital.domain.rates import RateProvider, convert_to_dkk, default_rate_provider


def total_balance_dkk(accounts: List[Account], provider: RateProvider) -> float:
    """
    Current balances across all accounts in DKK. Accounts in a currency the
    provider has no rate for are left out.
    """
    total = 0.0
    for account in accounts:
        converted = convert_to_dkk(account.balance, account.currency.value, provider)
        if converted is not None:
            total += converted
    return round_money(total)


def build_monthly_series(
    transactions: List[Transaction], reference, months: int = 6
) -> List[Dict[str, Any]]:
    """
    Income and expenses for the trailing calendar months ending with the
    reference month, oldest first.
    """
    series = []
    for year, month in dates.trailing_months(reference, months):
        start, next_start = dates.month_bounds(year, month)
        in_month = [t for t in transactions if start <= t.created_at < next_start]
        series.append(
            {
                "month": dates.DANISH_MONTHS[month - 1],
                "year": year,
                "month_number": month,
                "income": sum_incoming(in_month),
                "expenses": sum_outgoing(in_month),
            }
        )
    return series


def get_analytics(
    scope: LedgerScope,
    start_date=None,
    end_date=None,
    rate_provider: Optional[RateProvider] = None,
) -> Dict[str, Any]:
    """
    Dashboard figures. The date range narrows income, expenses and the category
    breakdown only; balances, invoice totals and the six-month series ignore it.
    """
    start, end = dates.parse_date_range(start_date, end_date)
    provider = rate_provider or default_rate_provider()

    accounts = scope.accounts()
    all_transactions = scope.transactions()
    filtered = filter_transactions(all_transactions, start=start, end=end)
    invoices = scope.invoices()
    paid = invoices_with_status(invoices, {InvoiceStatus.PAID})
    overdue = invoices_with_status(invoices, {InvoiceStatus.OVERDUE})

    return {
        "total_balance": total_balance_dkk(accounts, provider),
        "monthly_income": sum_incoming(filtered),
        "monthly_expenses": sum_outgoing(filtered),
        "total_invoiced": sum_invoice_field(invoices, "total"),
        "total_paid": sum_invoice_field(paid, "total"),
        "total_overdue": sum_invoice_field(overdue, "total"),
        "account_count": len(accounts),
        "overdue_invoice_count": len(overdue),
        "monthly_data": build_monthly_series(all_transactions, dates.now()),
        "category_data": sorted_category_data(sum_expenses_by_category(filtered)),
    }
