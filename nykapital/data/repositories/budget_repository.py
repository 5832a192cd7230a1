from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint

from nykapital.data.base import Base, new_id
from nykapital.domain.models import Budget, Category


class BudgetORM(Base):
    __tablename__ = "budgets"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(SAEnum(Category), nullable=False)
    amount = Column(Float, nullable=False)
    period = Column(String, nullable=False, default="monthly")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "category"),)


def budget_to_domain(budget_orm: BudgetORM) -> Budget:
    return Budget(
        id=budget_orm.id,
        user_id=budget_orm.user_id,
        category=budget_orm.category,
        amount=budget_orm.amount,
        period=budget_orm.period,
        created_at=budget_orm.created_at,
        updated_at=budget_orm.updated_at,
    )


def get_budgets(db, user_id: int) -> List[Budget]:
    rows = (
        db.query(BudgetORM)
        .filter(BudgetORM.user_id == user_id)
        .order_by(BudgetORM.updated_at.desc())
        .all()
    )
    return [budget_to_domain(b) for b in rows]


def get_budget_row(db, budget_id: str, user_id: int) -> Optional[BudgetORM]:
    return db.query(BudgetORM).filter_by(id=budget_id, user_id=user_id).first()


def budget_exists_for_category(db, user_id: int, category: Category) -> bool:
    return (
        db.query(BudgetORM).filter_by(user_id=user_id, category=category).first()
        is not None
    )


def create_budget(
    db, user_id: int, category: Category, amount: float, created_at: datetime
) -> Budget:
    budget_orm = BudgetORM(
        id=new_id(),
        user_id=user_id,
        category=category,
        amount=amount,
        period="monthly",
        created_at=created_at,
        updated_at=created_at,
    )
    db.add(budget_orm)
    db.flush()
    return budget_to_domain(budget_orm)


def delete_budget_row(db, budget_orm: BudgetORM) -> None:
    db.delete(budget_orm)
