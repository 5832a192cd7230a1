# nykapital/data/repositories/account_repository.py
import secrets
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String

from nykapital.data.base import Base, new_id
from nykapital.domain.models import (
    Account,
    AccountStatus,
    AccountType,
    Category,
    Currency,
    Payment,
    PaymentStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)

BANK_REGISTRATION_NUMBER = "5479"


class AccountORM(Base):
    __tablename__ = "accounts"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    account_number = Column(String, nullable=False, unique=True)
    balance = Column(Float, nullable=False, default=0.0)
    currency = Column(SAEnum(Currency), nullable=False)
    type = Column(SAEnum(AccountType), nullable=False)
    status = Column(SAEnum(AccountStatus), nullable=False)
    created_at = Column(DateTime, nullable=False)


class TransactionORM(Base):
    __tablename__ = "transactions"
    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    type = Column(SAEnum(TransactionType), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String, nullable=False)
    description = Column(String, default="")
    counterparty = Column(String, default="")
    reference = Column(String, default="")
    category = Column(SAEnum(Category), nullable=True)
    status = Column(SAEnum(TransactionStatus), nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)


class PaymentORM(Base):
    __tablename__ = "payments"
    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    recipient_name = Column(String, nullable=False)
    recipient_account = Column(String, default="")
    amount = Column(Float, nullable=False)
    currency = Column(String, nullable=False)
    description = Column(String, default="")
    reference = Column(String, default="")
    category = Column(SAEnum(Category), nullable=True)
    status = Column(SAEnum(PaymentStatus), nullable=False)
    created_at = Column(DateTime, nullable=False)
    scheduled_for = Column(DateTime, nullable=True)
    transaction_id = Column(String(36), ForeignKey("transactions.id"), nullable=True)


def account_to_domain(account_orm: AccountORM) -> Account:
    return Account(
        id=account_orm.id,
        user_id=account_orm.user_id,
        account_number=account_orm.account_number,
        balance=account_orm.balance,
        currency=account_orm.currency,
        type=account_orm.type,
        status=account_orm.status,
        created_at=account_orm.created_at,
    )


def transaction_to_domain(tx_orm: TransactionORM) -> Transaction:
    return Transaction(
        id=tx_orm.id,
        account_id=tx_orm.account_id,
        type=tx_orm.type,
        amount=tx_orm.amount,
        currency=tx_orm.currency,
        description=tx_orm.description or "",
        counterparty=tx_orm.counterparty or "",
        reference=tx_orm.reference or "",
        category=tx_orm.category,
        status=tx_orm.status,
        created_at=tx_orm.created_at,
        completed_at=tx_orm.completed_at,
    )


def payment_to_domain(payment_orm: PaymentORM) -> Payment:
    return Payment(
        id=payment_orm.id,
        account_id=payment_orm.account_id,
        recipient_name=payment_orm.recipient_name,
        recipient_account=payment_orm.recipient_account or "",
        amount=payment_orm.amount,
        currency=payment_orm.currency,
        description=payment_orm.description or "",
        reference=payment_orm.reference or "",
        category=payment_orm.category,
        status=payment_orm.status,
        created_at=payment_orm.created_at,
        scheduled_for=payment_orm.scheduled_for,
        transaction_id=payment_orm.transaction_id,
    )


def generate_account_number() -> str:
    return f"{BANK_REGISTRATION_NUMBER} {secrets.randbelow(10**10):010d}"


def get_accounts(db, user_id: int) -> List[Account]:
    rows = (
        db.query(AccountORM)
        .filter(AccountORM.user_id == user_id)
        .order_by(AccountORM.created_at)
        .all()
    )
    return [account_to_domain(a) for a in rows]


def get_account_row(
    db, account_id: str, user_id: int, for_update: bool = False
) -> Optional[AccountORM]:
    query = db.query(AccountORM).filter(
        AccountORM.id == account_id, AccountORM.user_id == user_id
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def create_account(
    db,
    user_id: int,
    currency: Currency,
    account_type: AccountType,
    created_at: datetime,
) -> Account:
    account_orm = AccountORM(
        id=new_id(),
        user_id=user_id,
        account_number=generate_account_number(),
        balance=0.0,
        currency=currency,
        type=account_type,
        status=AccountStatus.ACTIVE,
        created_at=created_at,
    )
    db.add(account_orm)
    db.flush()
    return account_to_domain(account_orm)


def add_transaction(
    db,
    account_id: str,
    tx_type: TransactionType,
    amount: float,
    currency: str,
    description: str,
    counterparty: str,
    created_at: datetime,
    reference: str = "",
    category: Optional[Category] = None,
    status: TransactionStatus = TransactionStatus.COMPLETED,
) -> TransactionORM:
    tx_orm = TransactionORM(
        id=new_id(),
        account_id=account_id,
        type=tx_type,
        amount=amount,
        currency=currency,
        description=description,
        counterparty=counterparty,
        reference=reference,
        category=category,
        status=status,
        created_at=created_at,
        completed_at=created_at if status == TransactionStatus.COMPLETED else None,
    )
    db.add(tx_orm)
    return tx_orm


def add_payment(
    db,
    account_id: str,
    recipient_name: str,
    recipient_account: str,
    amount: float,
    currency: str,
    description: str,
    reference: str,
    created_at: datetime,
    transaction_id: str,
    category: Optional[Category] = None,
    scheduled_for: Optional[datetime] = None,
    status: PaymentStatus = PaymentStatus.COMPLETED,
) -> PaymentORM:
    payment_orm = PaymentORM(
        id=new_id(),
        account_id=account_id,
        recipient_name=recipient_name,
        recipient_account=recipient_account,
        amount=amount,
        currency=currency,
        description=description,
        reference=reference,
        category=category,
        status=status,
        created_at=created_at,
        scheduled_for=scheduled_for,
        transaction_id=transaction_id,
    )
    db.add(payment_orm)
    return payment_orm


def get_transactions(
    db,
    account_ids: List[str],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Transaction]:
    if not account_ids:
        return []
    filters = [TransactionORM.account_id.in_(account_ids)]
    if start_date:
        filters.append(TransactionORM.created_at >= start_date)
    if end_date:
        filters.append(TransactionORM.created_at <= end_date)
    rows = (
        db.query(TransactionORM)
        .filter(*filters)
        .order_by(TransactionORM.created_at.desc())
        .all()
    )
    return [transaction_to_domain(t) for t in rows]


def get_payments(db, account_ids: List[str]) -> List[Payment]:
    if not account_ids:
        return []
    rows = (
        db.query(PaymentORM)
        .filter(PaymentORM.account_id.in_(account_ids))
        .order_by(PaymentORM.created_at.desc())
        .all()
    )
    return [payment_to_domain(p) for p in rows]
