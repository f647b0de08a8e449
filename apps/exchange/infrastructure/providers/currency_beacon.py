import logging
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings

from apps.exchange.domain.errors import ExternalServiceError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider

logger = logging.getLogger(__name__)


class CurrencyBeaconProvider(BaseExchangeRateProvider):
    """
    CurrencyBeacon API provider.
    Uses /latest endpoint to fetch today's rates for a base currency.
    """

    service_name = "CurrencyBeacon"

    def fetch_rates(self, base_currency: str) -> dict[str, Decimal]:
        """
        Fetch latest exchange rates from CurrencyBeacon API.

        Args:
            base_currency: Base currency code (e.g. USD)

        Returns:
            {currency_code: units of currency per 1 base unit}
        """
        # Format: https://api.currencybeacon.com/v1/latest?api_key=KEY&base=USD
        url = (
            f"{settings.CURRENCY_BEACON_URL}/latest"
            f"?api_key={settings.CURRENCY_BEACON_API_KEY}"
            f"&base={base_currency}"
        )

        try:
            response = requests.get(url, timeout=10)
            response.raise_for_status()
            data = response.json()

            # Response format: {"response": {"base": "USD", "rates": {"EUR": 0.92}}}
            rates = data['response']['rates']
            return {code.upper(): Decimal(str(value)) for code, value in rates.items()}

        except requests.exceptions.Timeout as e:
            logger.warning("Timeout calling CurrencyBeacon API for base %s", base_currency)
            raise ExternalServiceError(self.service_name, "request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from CurrencyBeacon: %s", e)
            raise ExternalServiceError(self.service_name, f"request failed: {e}") from e
        except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as e:
            logger.warning("Invalid response from CurrencyBeacon: %r", e)
            raise ExternalServiceError(self.service_name, "invalid response payload") from e
