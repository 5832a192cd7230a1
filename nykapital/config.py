import os
from dataclasses import dataclass
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env

DEV_SECRET_KEY = "nykapital-dev-secret"


def _parse_csv(value: str | None) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _parse_rates(value: str) -> Dict[str, float]:
    """
    Parse "DKK=1,EUR=7.5" into {"DKK": 1.0, "EUR": 7.5}.
    """
    rates: Dict[str, float] = {}
    for pair in _parse_csv(value):
        code, sep, rate = pair.partition("=")
        if not sep:
            raise RuntimeError(f"FX_RATES_TO_DKK entry {pair!r} is not CODE=RATE")
        try:
            rates[code.strip().upper()] = float(rate)
        except ValueError:
            raise RuntimeError(f"FX_RATES_TO_DKK rate for {code!r} is not a number")
    return rates


@dataclass(frozen=True)
class Settings:
    app_env: str
    database_url: str
    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    cors_origins: List[str]
    log_level: str
    fx_rates_to_dkk: Dict[str, float]


def load_settings() -> Settings:
    app_env = os.getenv("APP_ENV", "development")
    secret_key = os.getenv("SECRET_KEY")
    if not secret_key:
        if app_env == "production":
            raise RuntimeError("SECRET_KEY environment variable is not set")
        secret_key = DEV_SECRET_KEY
    return Settings(
        app_env=app_env,
        database_url=os.getenv("DATABASE_URL", "sqlite:///./nykapital.db"),
        secret_key=secret_key,
        algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_expire_minutes=_parse_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7),
        cors_origins=_parse_csv(os.getenv("CORS_ORIGINS", "http://localhost:5173")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        fx_rates_to_dkk=_parse_rates(os.getenv("FX_RATES_TO_DKK", "DKK=1,EUR=7.5")),
    )


settings = load_settings()
