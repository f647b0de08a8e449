import logging
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings

from apps.exchange.domain.errors import ExternalServiceError
from apps.finance.domain.interfaces import BaseMarketDataProvider

logger = logging.getLogger(__name__)


class CoinGeckoMarketDataProvider(BaseMarketDataProvider):
    """
    CoinGecko simple price endpoint.
    The symbol is the CoinGecko coin id (e.g. "bitcoin"), priced directly in the requested currency.
    """

    service_name = "CoinGecko"

    def get_asset_price(self, symbol: str, asset_type: str, currency: str) -> Decimal:
        coin_id = symbol.strip().lower()
        vs_currency = currency.strip().lower()

        try:
            response = requests.get(
                f"{settings.COINGECKO_URL}/simple/price",
                params={"ids": coin_id, "vs_currencies": vs_currency},
                timeout=10,
            )
            response.raise_for_status()
            data = response.json()

            # Response format: {"bitcoin": {"usd": 50000}}
            price = Decimal(str(data[coin_id][vs_currency]))
        except requests.exceptions.Timeout as e:
            logger.warning("Timeout calling CoinGecko for %s", coin_id)
            raise ExternalServiceError(self.service_name, "request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from CoinGecko: %s", e)
            raise ExternalServiceError(self.service_name, f"request failed: {e}") from e
        except (KeyError, ValueError, TypeError, InvalidOperation) as e:
            logger.warning("No CoinGecko price for %s in %s: %r", coin_id, vs_currency, e)
            raise ExternalServiceError(self.service_name, f"no price for {coin_id} in {currency.upper()}") from e

        if price <= 0:
            raise ExternalServiceError(self.service_name, f"invalid price for {coin_id}: {price}")
        return price
