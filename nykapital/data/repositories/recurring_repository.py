from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, String

from nykapital.data.base import Base, new_id
from nykapital.domain.models import (
    Category,
    Frequency,
    RecurringPayment,
    RecurringStatus,
)


class RecurringPaymentORM(Base):
    __tablename__ = "recurring_payments"
    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    recipient_name = Column(String, nullable=False)
    recipient_account = Column(String, default="")
    amount = Column(Float, nullable=False)
    currency = Column(String, nullable=False)
    description = Column(String, default="")
    reference = Column(String, default="")
    category = Column(SAEnum(Category), nullable=True)
    frequency = Column(SAEnum(Frequency), nullable=False)
    start_date = Column(DateTime, nullable=False)
    next_payment_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    status = Column(SAEnum(RecurringStatus), nullable=False)
    created_at = Column(DateTime, nullable=False)
    last_payment_id = Column(String(36), nullable=True)


def recurring_to_domain(rp_orm: RecurringPaymentORM) -> RecurringPayment:
    return RecurringPayment(
        id=rp_orm.id,
        account_id=rp_orm.account_id,
        recipient_name=rp_orm.recipient_name,
        recipient_account=rp_orm.recipient_account or "",
        amount=rp_orm.amount,
        currency=rp_orm.currency,
        description=rp_orm.description or "",
        reference=rp_orm.reference or "",
        category=rp_orm.category,
        frequency=rp_orm.frequency,
        start_date=rp_orm.start_date,
        next_payment_date=rp_orm.next_payment_date,
        end_date=rp_orm.end_date,
        status=rp_orm.status,
        created_at=rp_orm.created_at,
        last_payment_id=rp_orm.last_payment_id,
    )


def get_recurring_payments(db, account_ids: List[str]) -> List[RecurringPayment]:
    if not account_ids:
        return []
    rows = (
        db.query(RecurringPaymentORM)
        .filter(RecurringPaymentORM.account_id.in_(account_ids))
        .order_by(RecurringPaymentORM.created_at.desc())
        .all()
    )
    return [recurring_to_domain(rp) for rp in rows]


def get_recurring_row(
    db, recurring_id: str, account_ids: List[str]
) -> Optional[RecurringPaymentORM]:
    if not account_ids:
        return None
    return (
        db.query(RecurringPaymentORM)
        .filter(
            RecurringPaymentORM.id == recurring_id,
            RecurringPaymentORM.account_id.in_(account_ids),
        )
        .first()
    )


def create_recurring_payment(
    db,
    account_id: str,
    recipient_name: str,
    recipient_account: str,
    amount: float,
    currency: str,
    description: str,
    reference: str,
    category: Optional[Category],
    frequency: Frequency,
    start_date: datetime,
    end_date: Optional[datetime],
    created_at: datetime,
) -> RecurringPayment:
    rp_orm = RecurringPaymentORM(
        id=new_id(),
        account_id=account_id,
        recipient_name=recipient_name,
        recipient_account=recipient_account,
        amount=amount,
        currency=currency,
        description=description,
        reference=reference,
        category=category,
        frequency=frequency,
        start_date=start_date,
        next_payment_date=start_date,
        end_date=end_date,
        status=RecurringStatus.ACTIVE,
        created_at=created_at,
    )
    db.add(rp_orm)
    db.flush()
    return recurring_to_domain(rp_orm)


def delete_recurring_row(db, rp_orm: RecurringPaymentORM) -> None:
    db.delete(rp_orm)
