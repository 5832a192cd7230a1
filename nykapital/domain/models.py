# nykapital/domain/models.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

VAT_RATE = 0.25
# Share of a VAT-inclusive price that is VAT: 0.25 / 1.25
PURCHASE_VAT_SHARE = VAT_RATE / (1 + VAT_RATE)


class Currency(Enum):
    DKK = "DKK"
    EUR = "EUR"
    USD = "USD"


class Category(Enum):
    SALARY = "salary"
    OFFICE = "office"
    MARKETING = "marketing"
    TRAVEL = "travel"
    SOFTWARE = "software"
    EQUIPMENT = "equipment"
    RENT = "rent"
    UTILITIES = "utilities"
    INSURANCE = "insurance"
    TAX = "tax"
    SALES = "sales"
    SERVICES = "services"
    CONSULTING = "consulting"
    OTHER = "other"


class AccountType(Enum):
    BUSINESS = "business"
    SAVINGS = "savings"


class AccountStatus(Enum):
    ACTIVE = "active"
    FROZEN = "frozen"
    CLOSED = "closed"


class TransactionType(Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class TransactionStatus(Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Frequency(Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RecurringStatus(Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class InvoiceStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


TERMINAL_INVOICE_STATUSES = {InvoiceStatus.PAID, InvoiceStatus.CANCELLED}
SETTABLE_INVOICE_STATUSES = {
    InvoiceStatus.SENT,
    InvoiceStatus.PAID,
    InvoiceStatus.CANCELLED,
    InvoiceStatus.OVERDUE,
}
# Invoices whose VAT counts as collected in moms reports
SETTLED_INVOICE_STATUSES = {InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID}


@dataclass
class User:
    id: int
    email: str
    hashed_password: str
    name: str = ""
    company_name: str = ""
    cvr: str = ""
    created_at: Optional[datetime] = None


@dataclass
class Account:
    id: str
    user_id: int
    account_number: str
    balance: float
    currency: Currency
    type: AccountType
    status: AccountStatus
    created_at: datetime


@dataclass
class Transaction:
    id: str
    account_id: str
    type: TransactionType
    amount: float  # + for incoming, - for outgoing
    currency: str
    description: str
    counterparty: str
    status: TransactionStatus
    created_at: datetime
    reference: str = ""
    category: Optional[Category] = None
    completed_at: Optional[datetime] = None


@dataclass
class Payment:
    id: str
    account_id: str
    recipient_name: str
    recipient_account: str
    amount: float
    currency: str
    description: str
    reference: str
    status: PaymentStatus
    created_at: datetime
    category: Optional[Category] = None
    scheduled_for: Optional[datetime] = None
    transaction_id: Optional[str] = None


@dataclass
class RecurringPayment:
    id: str
    account_id: str
    recipient_name: str
    recipient_account: str
    amount: float
    currency: str
    description: str
    reference: str
    frequency: Frequency
    start_date: datetime
    next_payment_date: datetime
    status: RecurringStatus
    created_at: datetime
    category: Optional[Category] = None
    end_date: Optional[datetime] = None
    last_payment_id: Optional[str] = None


@dataclass
class InvoiceItem:
    description: str
    quantity: float
    unit_price: float

    @property
    def total(self) -> float:
        return round(self.quantity * self.unit_price, 2)


@dataclass
class InvoicePayment:
    id: str
    amount: float
    date: datetime
    method: str = "Bank Transfer"
    reference: str = ""


@dataclass
class Invoice:
    id: str
    user_id: int
    invoice_number: str
    customer_name: str
    customer_email: str
    subtotal: float
    tax: float
    total: float
    currency: str
    status: InvoiceStatus
    due_date: datetime
    created_at: datetime
    customer_cvr: Optional[str] = None
    items: List[InvoiceItem] = field(default_factory=list)
    amount_paid: float = 0.0
    payments: List[InvoicePayment] = field(default_factory=list)
    paid_at: Optional[datetime] = None

    @property
    def remaining(self) -> float:
        return round(self.total - self.amount_paid, 2)


@dataclass
class Budget:
    id: str
    user_id: int
    category: Category
    amount: float  # monthly budget amount
    created_at: datetime
    updated_at: datetime
    period: str = "monthly"
