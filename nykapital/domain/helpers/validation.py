from typing import Optional, Type, TypeVar
from enum import Enum

from nykapital.domain.errors import ValidationError
from nykapital.domain.models import Category, Currency

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value, label: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}")


def parse_category(value) -> Optional[Category]:
    if value is None or value == "":
        return None
    return parse_enum(Category, value, "category")


def parse_currency(value, default: Optional[Currency] = None) -> Currency:
    if value is None or value == "":
        if default is None:
            raise ValidationError("Currency must be provided")
        return default
    if isinstance(value, str):
        value = value.upper()
    return parse_enum(Currency, value, "currency")


def require_positive(amount, label: str = "Amount") -> float:
    """
    Amount rounded to øre; anything that rounds to zero or below is rejected.
    """
    try:
        amount = round(float(amount), 2)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number")
    if amount != amount or amount <= 0:  # rejects NaN as well
        raise ValidationError(f"{label} must be positive")
    return amount


def require_text(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return str(value).strip()
