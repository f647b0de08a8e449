import logging
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings

from apps.exchange.domain.errors import ExternalServiceError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider

logger = logging.getLogger(__name__)


class ExchangeRateProvider(BaseExchangeRateProvider):
    """
    ExchangeRate-API (v6) provider.
    Uses the /latest/{base} endpoint to fetch every rate against the base currency.
    """

    service_name = "ExchangeRate-API"

    def fetch_rates(self, base_currency: str) -> dict[str, Decimal]:
        """
        Fetch the latest rates from ExchangeRate-API.

        Args:
            base_currency: Base currency code (e.g. USD)

        Returns:
            {currency_code: units of currency per 1 base unit}

        Raises:
            ExternalServiceError: provider not configured, unreachable or
            answering with an unexpected payload
        """
        base_url = settings.EXCHANGERATE_URL
        api_key = settings.EXCHANGERATE_API_KEY

        if not base_url or not api_key:
            raise ExternalServiceError(
                self.service_name,
                "EXCHANGERATE_URL or EXCHANGERATE_API_KEY is not configured",
            )

        # Format: https://v6.exchangerate-api.com/v6/YOUR-API-KEY/latest/USD
        url = f"{base_url}/{api_key}/latest/{base_currency}"

        try:
            response = requests.get(url, timeout=10)
            response.raise_for_status()
            data = response.json()

            # Response format: {"result": "success", "conversion_rates": {"EUR": 0.92, ...}}
            if data.get("result") != "success":
                raise ExternalServiceError(
                    self.service_name,
                    f"API answered {data.get('result')!r}: {data.get('error-type', 'unknown error')}",
                )
            rates = data["conversion_rates"]
            return {code.upper(): Decimal(str(value)) for code, value in rates.items()}

        except requests.exceptions.Timeout as e:
            logger.warning("Timeout calling ExchangeRate-API for base %s", base_currency)
            raise ExternalServiceError(self.service_name, "request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from ExchangeRate-API: %s", e)
            raise ExternalServiceError(self.service_name, f"request failed: {e}") from e
        except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as e:
            logger.warning("Invalid response from ExchangeRate-API: %r", e)
            raise ExternalServiceError(self.service_name, "invalid response payload") from e
