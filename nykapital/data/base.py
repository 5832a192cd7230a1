import logging
import uuid
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from nykapital.config import settings
from nykapital.domain.errors import StorageError

logger = logging.getLogger(__name__)


def _connect_args() -> dict:
    if settings.database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


Base = declarative_base()
engine = create_engine(settings.database_url, connect_args=_connect_args())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def new_id() -> str:
    return str(uuid.uuid4())


def create_tables():
    # Import the table modules so every ORM class is registered on Base
    from nykapital.data.repositories import (  # noqa: F401
        account_repository,
        budget_repository,
        invoice_repository,
        recurring_repository,
        user_repository,
    )

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """
    Commit everything staged inside the block exactly once.
    Any error rolls the whole block back; database errors surface as StorageError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storage failure, transaction rolled back")
        raise StorageError(str(e)) from e
    except Exception:
        db.rollback()
        raise
