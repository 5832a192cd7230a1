from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from nykapital.data.repositories.account_repository import (
    AccountORM,
    account_to_domain,
    get_account_row,
    get_accounts,
    get_payments,
    get_transactions,
)
from nykapital.data.repositories.budget_repository import (
    BudgetORM,
    get_budget_row,
    get_budgets,
)
from nykapital.data.repositories.invoice_repository import (
    InvoiceORM,
    get_invoice_row,
    get_invoices,
    invoice_to_domain,
)
from nykapital.data.repositories.recurring_repository import (
    RecurringPaymentORM,
    get_recurring_payments,
    get_recurring_row,
)
from nykapital.domain.errors import NotFoundError
from nykapital.domain.models import (
    Account,
    Budget,
    Invoice,
    Payment,
    RecurringPayment,
    Transaction,
)


class LedgerScope:
    """
    Repository view pre-filtered to one authenticated user.
    Every lookup of an entity the user does not own raises NotFoundError,
    exactly like a lookup of an id that does not exist.
    """

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    # --- accounts ---
    def accounts(self) -> List[Account]:
        return get_accounts(self.db, self.user_id)

    def account_ids(self) -> List[str]:
        return [
            row[0]
            for row in self.db.query(AccountORM.id)
            .filter(AccountORM.user_id == self.user_id)
            .all()
        ]

    def account_row(self, account_id: str, for_update: bool = False) -> AccountORM:
        row = get_account_row(self.db, account_id, self.user_id, for_update=for_update)
        if row is None:
            raise NotFoundError("Account not found")
        return row

    def account(self, account_id: str) -> Account:
        return account_to_domain(self.account_row(account_id))

    # --- transactions and payments ---
    def transactions(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> List[Transaction]:
        return get_transactions(self.db, self.account_ids(), start_date, end_date)

    def payments(self) -> List[Payment]:
        return get_payments(self.db, self.account_ids())

    # --- invoices ---
    def invoices(self) -> List[Invoice]:
        return get_invoices(self.db, self.user_id)

    def invoice_row(self, invoice_id: str, for_update: bool = False) -> InvoiceORM:
        row = get_invoice_row(self.db, invoice_id, self.user_id, for_update=for_update)
        if row is None:
            raise NotFoundError("Invoice not found")
        return row

    def invoice(self, invoice_id: str) -> Invoice:
        return invoice_to_domain(self.invoice_row(invoice_id))

    # --- budgets ---
    def budgets(self) -> List[Budget]:
        return get_budgets(self.db, self.user_id)

    def budget_row(self, budget_id: str) -> BudgetORM:
        row = get_budget_row(self.db, budget_id, self.user_id)
        if row is None:
            raise NotFoundError("Budget not found")
        return row

    # --- recurring payments ---
    def recurring_payments(self) -> List[RecurringPayment]:
        return get_recurring_payments(self.db, self.account_ids())

    def recurring_row(self, recurring_id: str) -> RecurringPaymentORM:
        row = get_recurring_row(self.db, recurring_id, self.account_ids())
        if row is None:
            raise NotFoundError("Recurring payment not found")
        return row
