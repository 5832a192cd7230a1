import logging
from typing import List, Optional

from nykapital.data.base import unit_of_work
from nykapital.data.repositories.recurring_repository import (
    create_recurring_payment as repo_create_recurring_payment,
    delete_recurring_row,
    recurring_to_domain,
)
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import ValidationError
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.validation import (
    parse_category,
    parse_currency,
    parse_enum,
    require_positive,
    require_text,
)
from nykapital.domain.models import Frequency, RecurringPayment, RecurringStatus

logger = logging.getLogger(__name__)


def list_recurring_payments(scope: LedgerScope) -> List[RecurringPayment]:
    return scope.recurring_payments()


def get_recurring_payment(scope: LedgerScope, recurring_id: str) -> RecurringPayment:
    return recurring_to_domain(scope.recurring_row(recurring_id))


def create_recurring_payment(
    scope: LedgerScope,
    account_id: str,
    recipient_name: str,
    recipient_account: str,
    amount: float,
    frequency: str,
    start_date,
    currency: Optional[str] = None,
    description: str = "",
    reference: str = "",
    category: Optional[str] = None,
    end_date=None,
) -> RecurringPayment:
    """
    Store a standing payment instruction. Executing it on schedule is left to
    an external job; next_payment_date starts at start_date.
    """
    account = scope.account(account_id)
    recipient_name = require_text(recipient_name, "Recipient name")
    amount = require_positive(amount)
    frequency_enum = parse_enum(Frequency, frequency, "frequency")
    start = dates.parse_start(start_date)
    if start is None:
        raise ValidationError("Start date is required")
    end = dates.parse_end(end_date)
    if end is not None and end < start:
        raise ValidationError("End date must not be before start date")

    with unit_of_work(scope.db):
        recurring = repo_create_recurring_payment(
            scope.db,
            account_id=account.id,
            recipient_name=recipient_name,
            recipient_account=recipient_account or "",
            amount=amount,
            currency=parse_currency(currency, default=account.currency).value,
            description=description or "",
            reference=reference or "",
            category=parse_category(category),
            frequency=frequency_enum,
            start_date=start,
            end_date=end,
            created_at=dates.now(),
        )
    logger.info("Created %s recurring payment %s", frequency_enum.value, recurring.id)
    return recurring


def update_recurring_status(
    scope: LedgerScope, recurring_id: str, status: str
) -> RecurringPayment:
    """
    Pause, resume or cancel. Cancelled instructions stay cancelled.
    """
    target = parse_enum(RecurringStatus, status, "recurring payment status")
    with unit_of_work(scope.db):
        rp_orm = scope.recurring_row(recurring_id)
        if rp_orm.status == RecurringStatus.CANCELLED and target != RecurringStatus.CANCELLED:
            raise ValidationError("A cancelled recurring payment cannot be reactivated")
        rp_orm.status = target
        scope.db.flush()
        recurring = recurring_to_domain(rp_orm)
    logger.info("Recurring payment %s set to %s", recurring_id, target.value)
    return recurring


def delete_recurring_payment(scope: LedgerScope, recurring_id: str) -> None:
    with unit_of_work(scope.db):
        delete_recurring_row(scope.db, scope.recurring_row(recurring_id))
