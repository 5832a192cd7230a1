import logging
import re
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from nykapital.config import settings
from nykapital.data.base import get_db, unit_of_work
from nykapital.data.repositories.user_repository import (
    create_user,
    get_user,
    get_user_by_email,
)
from nykapital.domain.errors import ConflictError, ValidationError
from nykapital.domain.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
CVR_PATTERN = re.compile(r"\d{8}")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def validate_and_normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError("Invalid email address")
    return email


def authenticate_user(db: Session, email: str, password: str):
    email = validate_and_normalize_email(email)
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        user_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception
    user = get_user(db, user_id)
    if user is None:
        raise credentials_exception
    return user


def register_user(
    db: Session,
    email: str,
    password: str,
    name: str = "",
    company_name: str = "",
    cvr: str = "",
) -> User:
    email = validate_and_normalize_email(email)
    if len(password or "") < 8:
        raise ValidationError("Password must be at least 8 characters long")
    cvr = (cvr or "").strip()
    if cvr and not CVR_PATTERN.fullmatch(cvr):
        raise ValidationError("CVR number must be 8 digits")
    with unit_of_work(db):
        if get_user_by_email(db, email):
            raise ConflictError("Email already registered")
        user = create_user(
            db,
            email=email,
            hashed_password=get_password_hash(password),
            name=(name or "").strip(),
            company_name=(company_name or "").strip(),
            cvr=cvr,
        )
    logger.info("Registered user %s", user.id)
    return user
