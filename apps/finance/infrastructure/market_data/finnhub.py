import logging
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings

from apps.exchange.domain.errors import ExternalServiceError
from apps.finance.domain.interfaces import BaseMarketDataProvider

logger = logging.getLogger(__name__)


class FinnhubMarketDataProvider(BaseMarketDataProvider):
    """
    Finnhub stock quotes (/quote?symbol=...).
    Quotes come in the listing currency, which Finnhub's free tier reports as USD.
    """

    service_name = "Finnhub"
    quote_currency = "USD"

    def get_asset_price(self, symbol: str, asset_type: str, currency: str) -> Decimal:
        if currency.upper() != self.quote_currency:
            raise ExternalServiceError(self.service_name, f"quotes are only available in {self.quote_currency}")

        api_key = settings.FINNHUB_API_KEY
        if not api_key:
            raise ExternalServiceError(self.service_name, "FINNHUB_API_KEY is not configured")

        try:
            response = requests.get(
                f"{settings.FINNHUB_URL}/quote",
                params={"symbol": symbol.upper(), "token": api_key},
                timeout=10,
            )
            response.raise_for_status()
            data = response.json()

            # Response format: {"c": 189.5, "h": ..., "l": ..., "o": ..., "pc": ...}
            price = Decimal(str(data["c"]))
        except requests.exceptions.Timeout as e:
            logger.warning("Timeout calling Finnhub for %s", symbol)
            raise ExternalServiceError(self.service_name, "request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from Finnhub: %s", e)
            raise ExternalServiceError(self.service_name, f"request failed: {e}") from e
        except (KeyError, ValueError, TypeError, InvalidOperation) as e:
            logger.warning("Invalid response from Finnhub for %s: %r", symbol, e)
            raise ExternalServiceError(self.service_name, "invalid response payload") from e

        # Finnhub answers c=0 for unknown symbols
        if price <= 0:
            raise ExternalServiceError(self.service_name, f"no quote for symbol {symbol}")
        return price
