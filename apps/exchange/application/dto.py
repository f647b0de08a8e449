"""
Data Transfer Objects for the application layer.
DTOs decouple internal domain models from external API contracts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class ConversionResultDTO:
    """Result DTO for currency conversion."""
    source_currency: str
    exchanged_currency: str
    amount: Decimal
    converted_amount: Decimal
    base_currency: str
    amount_in_base: Decimal

    def to_dict(self) -> dict:
        return {
            "source_currency": self.source_currency,
            "exchanged_currency": self.exchanged_currency,
            "amount": str(self.amount),
            "converted_amount": str(self.converted_amount),
            "base_currency": self.base_currency,
            "amount_in_base": str(self.amount_in_base),
        }


@dataclass
class ProviderHealthDTO:
    """Outcome of probing a single rate provider."""
    name: str
    status: str
    message: str = ""
    currencies_returned: int = 0


@dataclass
class RateSyncResultDTO:
    """Result DTO for rate synchronization task."""
    success: bool
    rates_synced: int
    currencies_processed: List[str]
    errors: List[str]
    provider_used: Optional[str] = None
    skipped_manual: List[str] = field(default_factory=list)
    skipped: bool = False
    finished_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "rates_synced": self.rates_synced,
            "currencies_processed": list(self.currencies_processed),
            "errors": list(self.errors),
            "provider_used": self.provider_used,
            "skipped_manual": list(self.skipped_manual),
            "skipped": self.skipped,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
