from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from nykapital.data.base import Base
from nykapital.domain.models import User


class UserORM(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, default="")
    company_name = Column(String, default="")
    cvr = Column(String, default="")
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def user_to_domain(user_orm: UserORM) -> User:
    return User(
        id=user_orm.id,
        email=user_orm.email,
        hashed_password=user_orm.hashed_password,
        name=user_orm.name or "",
        company_name=user_orm.company_name or "",
        cvr=user_orm.cvr or "",
        created_at=user_orm.created_at,
    )


def get_user_by_email(db, email: str):
    user = db.query(UserORM).filter(UserORM.email == email).first()
    return user_to_domain(user) if user else None


def get_user(db, user_id: int):
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    return user_to_domain(user) if user else None


def create_user(
    db, email: str, hashed_password: str, name: str, company_name: str, cvr: str
) -> User:
    db_user = UserORM(
        email=email,
        hashed_password=hashed_password,
        name=name,
        company_name=company_name,
        cvr=cvr,
    )
    db.add(db_user)
    db.flush()
    return user_to_domain(db_user)
