# nykapital/data/repositories/invoice_repository.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from nykapital.data.base import Base, new_id
from nykapital.domain.models import (
    Invoice,
    InvoiceItem,
    InvoicePayment,
    InvoiceStatus,
)


class InvoiceORM(Base):
    __tablename__ = "invoices"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    invoice_number = Column(String, nullable=False)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_cvr = Column(String, nullable=True)
    subtotal = Column(Float, nullable=False)
    tax = Column(Float, nullable=False)
    total = Column(Float, nullable=False)
    currency = Column(String, nullable=False)
    status = Column(SAEnum(InvoiceStatus), nullable=False)
    due_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    paid_at = Column(DateTime, nullable=True)
    amount_paid = Column(Float, nullable=False, default=0.0)

    items = relationship(
        "InvoiceItemORM",
        order_by="InvoiceItemORM.position",
        cascade="all, delete-orphan",
    )
    payments = relationship(
        "InvoicePaymentORM",
        order_by="InvoicePaymentORM.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("user_id", "invoice_number"),)


class InvoiceItemORM(Base):
    __tablename__ = "invoice_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    description = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)


class InvoicePaymentORM(Base):
    __tablename__ = "invoice_payments"
    id = Column(String(36), primary_key=True, default=new_id)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(DateTime, nullable=False)
    method = Column(String, default="Bank Transfer")
    reference = Column(String, default="")


class InvoiceSequenceORM(Base):
    __tablename__ = "invoice_sequences"
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    year = Column(Integer, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)


def invoice_to_domain(invoice_orm: InvoiceORM) -> Invoice:
    return Invoice(
        id=invoice_orm.id,
        user_id=invoice_orm.user_id,
        invoice_number=invoice_orm.invoice_number,
        customer_name=invoice_orm.customer_name,
        customer_email=invoice_orm.customer_email,
        customer_cvr=invoice_orm.customer_cvr,
        items=[
            InvoiceItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in invoice_orm.items
        ],
        subtotal=invoice_orm.subtotal,
        tax=invoice_orm.tax,
        total=invoice_orm.total,
        currency=invoice_orm.currency,
        status=invoice_orm.status,
        due_date=invoice_orm.due_date,
        created_at=invoice_orm.created_at,
        paid_at=invoice_orm.paid_at,
        amount_paid=invoice_orm.amount_paid,
        payments=[
            InvoicePayment(
                id=p.id,
                amount=p.amount,
                date=p.date,
                method=p.method or "",
                reference=p.reference or "",
            )
            for p in invoice_orm.payments
        ],
    )


def get_invoices(db, user_id: int) -> List[Invoice]:
    rows = (
        db.query(InvoiceORM)
        .filter(InvoiceORM.user_id == user_id)
        .order_by(InvoiceORM.created_at.desc())
        .all()
    )
    return [invoice_to_domain(inv) for inv in rows]


def get_invoice_row(
    db, invoice_id: str, user_id: int, for_update: bool = False
) -> Optional[InvoiceORM]:
    query = db.query(InvoiceORM).filter(
        InvoiceORM.id == invoice_id, InvoiceORM.user_id == user_id
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def next_invoice_sequence(db, user_id: int, year: int) -> int:
    """
    Advance and return the per-user, per-year invoice counter.
    Callers hold the ("invoice_sequence", user_id) lock until commit.
    """
    row = (
        db.query(InvoiceSequenceORM)
        .filter(InvoiceSequenceORM.user_id == user_id, InvoiceSequenceORM.year == year)
        .with_for_update()
        .first()
    )
    if row is None:
        row = InvoiceSequenceORM(user_id=user_id, year=year, last_value=0)
        db.add(row)
    row.last_value += 1
    db.flush()
    return row.last_value


def create_invoice(
    db,
    user_id: int,
    invoice_number: str,
    customer_name: str,
    customer_email: str,
    customer_cvr: Optional[str],
    items: List[InvoiceItem],
    subtotal: float,
    tax: float,
    total: float,
    currency: str,
    due_date: datetime,
    created_at: datetime,
) -> InvoiceORM:
    invoice_orm = InvoiceORM(
        id=new_id(),
        user_id=user_id,
        invoice_number=invoice_number,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_cvr=customer_cvr,
        subtotal=subtotal,
        tax=tax,
        total=total,
        currency=currency,
        status=InvoiceStatus.DRAFT,
        due_date=due_date,
        created_at=created_at,
        amount_paid=0.0,
    )
    invoice_orm.items = [
        InvoiceItemORM(
            position=i,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for i, item in enumerate(items)
    ]
    db.add(invoice_orm)
    db.flush()
    return invoice_orm


def add_invoice_payment(
    db,
    invoice_orm: InvoiceORM,
    amount: float,
    date: datetime,
    method: str,
    reference: str,
) -> InvoicePaymentORM:
    payment_orm = InvoicePaymentORM(
        id=new_id(),
        position=len(invoice_orm.payments),
        amount=amount,
        date=date,
        method=method,
        reference=reference,
    )
    invoice_orm.payments.append(payment_orm)
    return payment_orm
