"""
ViewSets for the exchange API v1.
Each ViewSet exposes standard CRUD operations via DRF router.
"""

from decimal import Decimal, InvalidOperation

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.exchange.api.v1.serializers import (
    CurrencyExchangeRateSerializer,
    CurrencySerializer,
    ManualRateSerializer,
    ProviderSerializer,
)
from apps.exchange.application.dto import ConversionResultDTO
from apps.exchange.application.factories import get_converter, get_rate_store, get_sync_service
from apps.exchange.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    Provider,
)


@extend_schema(tags=['Currencies'])
class CurrencyViewSet(viewsets.ModelViewSet):

    queryset = Currency.objects.all()
    serializer_class = CurrencySerializer


@extend_schema(tags=['Rates'])
class CurrencyExchangeRateViewSet(viewsets.ReadOnlyModelViewSet):

    queryset = CurrencyExchangeRate.objects.all()
    serializer_class = CurrencyExchangeRateSerializer
    lookup_field = "currency_code"

    def get_object(self):
        self.kwargs[self.lookup_field] = self.kwargs[self.lookup_field].upper()
        return super().get_object()

    def _rate_response(self, currency_code: str, response_status=status.HTTP_200_OK):
        instance = CurrencyExchangeRate.objects.get(currency_code=currency_code)
        return Response(self.get_serializer(instance).data, status=response_status)

    @extend_schema(
        request=ManualRateSerializer,
        responses=CurrencyExchangeRateSerializer,
        description="Set a manual rate (units per 1 base unit). Automatic sync will not overwrite it."
    )
    @action(detail=False, methods=['post'], url_path='override')
    def override(self, request):
        serializer = ManualRateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        rate = get_rate_store().set_rate(
            serializer.validated_data["currency_code"],
            serializer.validated_data["rate"],
            is_manual=True,
        )
        return self._rate_response(rate.currency_code)

    @extend_schema(request=None, description="Hand a manual rate back to automatic sync")
    @action(detail=True, methods=['post'], url_path='clear-override')
    def clear_override(self, request, currency_code=None):
        rate = get_rate_store().clear_manual_override(currency_code)
        return self._rate_response(rate.currency_code)

    @extend_schema(request=None, description="Fetch the latest rates from the active providers now")
    @action(detail=False, methods=['post'], url_path='sync')
    def sync(self, request):
        result = get_sync_service().sync_now()
        if result.skipped:
            return Response(result.to_dict(), status=status.HTTP_409_CONFLICT)
        return Response(result.to_dict())

    @extend_schema(description="Base currency, last automatic sync time and current sync state")
    @action(detail=False, methods=['get'], url_path='status')
    def sync_status(self, request):
        store = get_rate_store()
        service = get_sync_service()
        last_sync = store.get_last_sync_time()
        return Response({
            "base_currency": store.base_currency,
            "last_sync_time": last_sync.isoformat() if last_sync else None,
            "state": service.state.value,
            "in_progress": service.in_progress,
            "manual_overrides": sorted(r.currency_code for r in store.all() if r.is_manual),
            "last_result": service.last_result.to_dict() if service.last_result else None,
        })

    @extend_schema(
        parameters=[
            OpenApiParameter("source_currency", OpenApiTypes.STR, required=True, description="Source currency code (e.g. EUR)"),
            OpenApiParameter("exchanged_currency", OpenApiTypes.STR, required=True, description="Target currency code (e.g. USD)"),
            OpenApiParameter("amount", OpenApiTypes.DECIMAL, required=True, description="Amount to convert"),
        ],
        description="Convert amount from one currency to another through the base currency"
    )
    @action(detail=False, methods=['get'], url_path='convert')
    def convert(self, request):
        """
        Convert an amount from one currency to another.
        """
        source_currency_code = request.query_params.get('source_currency')
        exchanged_currency_code = request.query_params.get('exchanged_currency')
        amount_str = request.query_params.get('amount')

        # Validation
        if not all([source_currency_code, exchanged_currency_code, amount_str]):
            return Response(
                {"error": "source_currency, exchanged_currency, and amount are required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            amount = Decimal(amount_str)
        except (ValueError, TypeError, InvalidOperation):
            return Response(
                {"error": "Invalid amount. Must be a number"},
                status=status.HTTP_400_BAD_REQUEST
            )

        converter = get_converter()
        converted = converter.convert(amount, source_currency_code, exchanged_currency_code)
        in_base = converter.convert_to_base(amount, source_currency_code)

        result = ConversionResultDTO(
            source_currency=source_currency_code.strip().upper(),
            exchanged_currency=converted.currency,
            amount=amount,
            converted_amount=converted.quantized().amount,
            base_currency=converter.base_currency,
            amount_in_base=in_base.quantized().amount,
        )
        return Response(result.to_dict())


@extend_schema(tags=['Providers'])
class ProviderViewSet(viewsets.ModelViewSet):

    queryset = Provider.objects.all()
    serializer_class = ProviderSerializer
