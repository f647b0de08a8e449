"""
Mock provider for testing and fallback.
Serves a static table of realistic exchange rates.
"""

from decimal import Decimal

from apps.exchange.domain.errors import ExternalServiceError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider


class MockProvider(BaseExchangeRateProvider):
    """
    Mock provider that serves fixed exchange rates.
    Useful for:
    - Testing without external API calls
    - Fallback when all real providers fail
    - Development without API keys
    """

    # Units per 1 USD (approximate real-world values)
    USD_RATES = {
        "USD": Decimal("1.0"),
        "EUR": Decimal("0.92"),
        "GBP": Decimal("0.79"),
        "JPY": Decimal("147.50"),
        "CHF": Decimal("0.88"),
        "AUD": Decimal("1.52"),
        "ILS": Decimal("3.70"),
        "JOD": Decimal("0.709"),
        "KWD": Decimal("0.307"),
        "SAR": Decimal("3.75"),
        "AED": Decimal("3.6725"),
    }

    def fetch_rates(self, base_currency: str) -> dict[str, Decimal]:
        """
        Rebase the static USD table on base_currency.

        Raises:
            ExternalServiceError: base_currency is not in the table
        """
        base_rate = self.USD_RATES.get(base_currency)
        if base_rate is None:
            raise ExternalServiceError("MockProvider", f"Unsupported base currency {base_currency}")

        return {
            code: (rate / base_rate).quantize(Decimal("0.000001"))
            for code, rate in self.USD_RATES.items()
        }
