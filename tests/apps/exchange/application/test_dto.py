from datetime import datetime, timezone
from decimal import Decimal

from apps.exchange.application.dto import ConversionResultDTO, RateSyncResultDTO


class TestDataTransferObjects:
    """Tests for the serialized shape of DTOs."""

    def test_conversion_result_to_dict_stringifies_decimals(self):
        dto = ConversionResultDTO(
            source_currency="EUR",
            exchanged_currency="GBP",
            amount=Decimal("92"),
            converted_amount=Decimal("79.000000"),
            base_currency="USD",
            amount_in_base=Decimal("100.000000"),
        )

        assert dto.to_dict() == {
            "source_currency": "EUR",
            "exchanged_currency": "GBP",
            "amount": "92",
            "converted_amount": "79.000000",
            "base_currency": "USD",
            "amount_in_base": "100.000000",
        }

    def test_rate_sync_result_defaults(self):
        dto = RateSyncResultDTO(success=True, rates_synced=0, currencies_processed=[], errors=[])

        data = dto.to_dict()

        assert data["skipped"] is False
        assert data["skipped_manual"] == []
        assert data["provider_used"] is None
        assert data["finished_at"] is None

    def test_rate_sync_result_lists_are_copied(self):
        processed = ["EUR"]
        dto = RateSyncResultDTO(
            success=True,
            rates_synced=1,
            currencies_processed=processed,
            errors=[],
            finished_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )

        data = dto.to_dict()
        processed.append("GBP")

        assert data["currencies_processed"] == ["EUR"]
        assert data["finished_at"] == "2024-05-01T12:00:00+00:00"
