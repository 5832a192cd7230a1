import logging
from typing import Dict, Optional, Protocol

from nykapital.config import settings

logger = logging.getLogger(__name__)


class RateProvider(Protocol):
    def rate_to_dkk(self, currency: str) -> Optional[float]:
        ...


class FixedRateProvider:
    """
    Static conversion table into DKK. A live provider only needs to offer
    rate_to_dkk() to replace it.
    """

    def __init__(self, rates: Dict[str, float]):
        self.rates = {code.upper(): rate for code, rate in rates.items()}

    def rate_to_dkk(self, currency: str) -> Optional[float]:
        return self.rates.get(currency.upper())


def convert_to_dkk(amount: float, currency: str, provider: RateProvider) -> Optional[float]:
    """
    Returns the amount in DKK, or None when the provider has no rate for the currency.
    """
    rate = provider.rate_to_dkk(currency)
    if rate is None:
        logger.warning("No DKK rate for currency %s, amount left out", currency)
        return None
    return amount * rate


def default_rate_provider() -> FixedRateProvider:
    return FixedRateProvider(settings.fx_rates_to_dkk)
