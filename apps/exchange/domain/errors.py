"""
Domain errors shared by the exchange and finance bounded contexts.
No dependency on Django or DRF; the API layer maps them to HTTP statuses.
"""


class DomainError(Exception):
    """Base class for every business error raised by the domain."""


class ValidationError(DomainError, ValueError):
    """Malformed input: bad currency code, non-finite amount, bad date range..."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class CurrencyMismatchError(DomainError):
    """Arithmetic attempted between Money values of different currencies."""

    def __init__(self, left: str, right: str, operation: str = "combine"):
        super().__init__(f"Cannot {operation} {right} with {left}")
        self.left = left
        self.right = right


class InvalidRateError(DomainError):
    """A rate of zero or below was stored or used for a conversion."""

    def __init__(self, currency_code: str, rate):
        super().__init__(f"Invalid exchange rate for {currency_code}: {rate}")
        self.currency_code = currency_code
        self.rate = rate


class NotFoundError(DomainError):

    def __init__(self, entity_name: str, entity_id):
        super().__init__(f"{entity_name} with ID {entity_id} not found")
        self.entity_name = entity_name
        self.entity_id = entity_id


class BusinessRuleViolationError(DomainError):
    pass


class ExternalServiceError(DomainError):
    """A rate or market-data provider is unreachable or returned bad data."""

    def __init__(self, service_name: str, message: str):
        super().__init__(f"{service_name}: {message}")
        self.service_name = service_name


class RateNotFoundError(ExternalServiceError):
    """No rate is known for a non-base currency."""

    def __init__(self, currency_code: str):
        super().__init__("ExchangeRate", f"Rate not found for currency: {currency_code}")
        self.currency_code = currency_code
