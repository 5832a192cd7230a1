import logging
from datetime import datetime
from typing import List, Optional

from nykapital.data.base import unit_of_work
from nykapital.data.repositories.account_repository import (
    add_payment,
    add_transaction,
    create_account,
    payment_to_domain,
    transaction_to_domain,
)
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import InsufficientFundsError
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.aggregation import round_money
from nykapital.domain.helpers.validation import (
    parse_category,
    parse_currency,
    parse_enum,
    require_positive,
    require_text,
)
from nykapital.domain.locks import entity_lock
from nykapital.domain.models import (
    Account,
    AccountType,
    Currency,
    Payment,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)


def list_accounts(scope: LedgerScope) -> List[Account]:
    return scope.accounts()


def get_account(scope: LedgerScope, account_id: str) -> Account:
    return scope.account(account_id)


def open_account(
    scope: LedgerScope, currency: str = "DKK", account_type: str = "business"
) -> Account:
    """
    Open an empty account. Funds only arrive through receive_payment so that the
    balance always equals the sum of the account's transactions.
    """
    currency_enum = parse_currency(currency, default=Currency.DKK)
    type_enum = parse_enum(AccountType, account_type, "account type")
    with unit_of_work(scope.db):
        account = create_account(
            scope.db, scope.user_id, currency_enum, type_enum, dates.now()
        )
    logger.info("Opened %s account %s for user %s", currency_enum.value, account.id, scope.user_id)
    return account


def list_payments(scope: LedgerScope) -> List[Payment]:
    return scope.payments()


def send_payment(
    scope: LedgerScope,
    account_id: str,
    recipient_name: str,
    recipient_account: str,
    amount: float,
    currency: Optional[str] = None,
    description: str = "",
    reference: str = "",
    category: Optional[str] = None,
    scheduled_for: Optional[datetime] = None,
) -> Payment:
    """
    Pay out of an account. The balance decrement, the Payment and the outgoing
    Transaction are committed together or not at all.

    Not idempotent: calling this twice sends twice.
    """
    amount = require_positive(amount)
    recipient_name = require_text(recipient_name, "Recipient name")
    category_enum = parse_category(category)

    with entity_lock("account", account_id):
        with unit_of_work(scope.db):
            account = scope.account_row(account_id, for_update=True)
            currency_code = parse_currency(currency, default=account.currency).value
            if amount > account.balance:
                logger.info(
                    "Rejected payment of %.2f from account %s: balance %.2f",
                    amount,
                    account_id,
                    account.balance,
                )
                raise InsufficientFundsError(account.balance, amount)

            now = dates.now()
            tx_orm = add_transaction(
                scope.db,
                account_id=account.id,
                tx_type=TransactionType.OUTGOING,
                amount=-amount,
                currency=currency_code,
                description=description or "",
                counterparty=recipient_name,
                reference=reference or "",
                category=category_enum,
                created_at=now,
            )
            payment_orm = add_payment(
                scope.db,
                account_id=account.id,
                recipient_name=recipient_name,
                recipient_account=recipient_account or "",
                amount=amount,
                currency=currency_code,
                description=description or "",
                reference=reference or "",
                created_at=now,
                transaction_id=tx_orm.id,
                category=category_enum,
                scheduled_for=scheduled_for,
            )
            account.balance = round_money(account.balance - amount)
            scope.db.flush()
            payment = payment_to_domain(payment_orm)

    logger.info("Sent %.2f %s from account %s", amount, currency_code, account_id)
    return payment


def receive_payment(
    scope: LedgerScope,
    account_id: str,
    amount: float,
    description: str = "",
    counterparty: str = "",
    reference: str = "",
    category: Optional[str] = None,
) -> Transaction:
    """
    Book an incoming amount on an account.

    Non-positive amounts are rejected. Not idempotent: retries book twice.
    """
    amount = require_positive(amount)
    category_enum = parse_category(category)

    with entity_lock("account", account_id):
        with unit_of_work(scope.db):
            account = scope.account_row(account_id, for_update=True)
            tx_orm = add_transaction(
                scope.db,
                account_id=account.id,
                tx_type=TransactionType.INCOMING,
                amount=amount,
                currency=account.currency.value,
                description=description or "",
                counterparty=counterparty or "",
                reference=reference or "",
                category=category_enum,
                created_at=dates.now(),
            )
            account.balance = round_money(account.balance + amount)
            scope.db.flush()
            transaction = transaction_to_domain(tx_orm)

    logger.info("Received %.2f on account %s", amount, account_id)
    return transaction
