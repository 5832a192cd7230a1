import csv
import io
from typing import List, Optional

from fastapi.responses import StreamingResponse

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import ValidationError
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.aggregation import filter_transactions
from nykapital.domain.helpers.validation import parse_category
from nykapital.domain.models import Transaction

CSV_HEADER = [
    "date",
    "type",
    "counterparty",
    "description",
    "category",
    "reference",
    "amount",
    "currency",
    "status",
]


def list_transactions(
    scope: LedgerScope,
    start_date=None,
    end_date=None,
    account_id: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
) -> List[Transaction]:
    """
    The caller's transactions, newest first, narrowed by every filter given.
    A date-only end date includes the whole day.
    """
    start, end = dates.parse_date_range(start_date, end_date)
    if account_id:
        scope.account_row(account_id)  # raises NotFoundError for foreign accounts
    if min_amount is not None and max_amount is not None and min_amount > max_amount:
        raise ValidationError("min_amount must not exceed max_amount")
    return filter_transactions(
        scope.transactions(start, end),
        account_id=account_id,
        category=parse_category(category),
        search=search.strip() if search else None,
        min_amount=min_amount,
        max_amount=max_amount,
    )


def list_account_transactions(scope: LedgerScope, account_id: str) -> List[Transaction]:
    return list_transactions(scope, account_id=account_id)


def get_transactions_csv_stream(transactions: List[Transaction], filename: str):
    output = io.StringIO()
    output.write("\ufeff")  # BOM so spreadsheet apps pick up UTF-8
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for t in transactions:
        writer.writerow(
            [
                t.created_at.date().isoformat(),
                t.type.value,
                t.counterparty,
                t.description,
                t.category.value if t.category else "",
                t.reference or "",
                f"{t.amount:.2f}",
                t.currency,
                t.status.value,
            ]
        )
    output.seek(0)
    return StreamingResponse(
        output,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def export_filename(prefix: str = "transactions") -> str:
    return f"{prefix}_{dates.now().date().isoformat()}.csv"

