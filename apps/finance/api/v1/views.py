"""
ViewSets for the finance API v1.
Every query is scoped to the authenticated user; writes go through the use cases.
"""

from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.exchange.domain.errors import ValidationError as DomainValidationError
from apps.finance.api.v1.serializers import (
    CloseInvestmentSerializer,
    ExpenseSerializer,
    IncomeSerializer,
    InvestmentSerializer,
    NotificationSerializer,
    SavingSerializer,
)
from apps.finance.application.use_cases import (
    CloseInvestment,
    CreateExpense,
    CreateIncome,
    CreateInvestment,
    CreateSaving,
    GetDashboardSummary,
    GetPortfolioMetrics,
    RefreshInvestmentPrices,
    UpdateConvertedRecord,
    UpdateInvestment,
)
from apps.finance.domain.value_objects import DateRange
from apps.finance.infrastructure.persistence.models import (
    Expense,
    Income,
    Investment,
    Notification,
    Saving,
)
from apps.finance.infrastructure.persistence.repositories import NotificationRepository


class UserRecordViewSet(viewsets.ModelViewSet):
    """CRUD restricted to the caller's own records; create/update delegate to a use case."""

    permission_classes = [permissions.IsAuthenticated]
    create_use_case = None
    update_use_case = UpdateConvertedRecord

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return self.queryset.none()
        return self.queryset.filter(user_id=self.request.user.id)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        instance = self.create_use_case().execute(user_id=request.user.id, **serializer.validated_data)
        return Response(self.get_serializer(instance).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        instance = self.update_use_case().execute(instance, serializer.validated_data)
        return Response(self.get_serializer(instance).data)


@extend_schema(tags=['Income'])
class IncomeViewSet(UserRecordViewSet):

    queryset = Income.objects.all()
    serializer_class = IncomeSerializer
    create_use_case = CreateIncome

    @extend_schema(parameters=[
        OpenApiParameter("active", OpenApiTypes.BOOL, description="Only active (true) or inactive (false) incomes"),
    ])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        active = self.request.query_params.get("active")
        if active is not None:
            queryset = queryset.filter(is_active=active.lower() in ("1", "true", "yes"))
        return queryset


@extend_schema(tags=['Expenses'])
class ExpenseViewSet(UserRecordViewSet):

    queryset = Expense.objects.all()
    serializer_class = ExpenseSerializer
    create_use_case = CreateExpense

    @extend_schema(parameters=[
        OpenApiParameter("date_from", OpenApiTypes.DATE, description="Start of the period (YYYY-MM-DD)"),
        OpenApiParameter("date_to", OpenApiTypes.DATE, description="End of the period (YYYY-MM-DD)"),
        OpenApiParameter("category", OpenApiTypes.STR, description="Expense category"),
    ])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        date_from, date_to = params.get("date_from"), params.get("date_to")
        if date_from or date_to:
            if not (date_from and date_to):
                raise DomainValidationError("date_from and date_to must be given together", "date_range")
            period = DateRange.from_strings(date_from, date_to)
            queryset = queryset.filter(expense_date__gte=period.start_date, expense_date__lte=period.end_date)
        if params.get("category"):
            queryset = queryset.filter(category=params["category"])
        return queryset


@extend_schema(tags=['Savings'])
class SavingViewSet(UserRecordViewSet):

    queryset = Saving.objects.all()
    serializer_class = SavingSerializer
    create_use_case = CreateSaving


@extend_schema(tags=['Investments'])
class InvestmentViewSet(UserRecordViewSet):

    queryset = Investment.objects.all()
    serializer_class = InvestmentSerializer
    create_use_case = CreateInvestment
    update_use_case = UpdateInvestment

    @extend_schema(request=CloseInvestmentSerializer, responses=InvestmentSerializer,
                   description="Close an active investment at the given sell price")
    @action(detail=True, methods=['post'], url_path='close')
    def close(self, request, pk=None):
        serializer = CloseInvestmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        investment = CloseInvestment().execute(request.user.id, pk, **serializer.validated_data)
        return Response(self.get_serializer(investment).data)

    @extend_schema(request=None, description="Fetch current market prices for the active investments")
    @action(detail=False, methods=['post'], url_path='refresh-prices')
    def refresh_prices(self, request):
        result = RefreshInvestmentPrices().execute(request.user.id)
        return Response(result.to_dict())

    @extend_schema(description="Invested amount, market value, profit/loss and ROI in the base currency")
    @action(detail=False, methods=['get'], url_path='metrics')
    def metrics(self, request):
        return Response(GetPortfolioMetrics().execute(request.user.id).to_dict())


@extend_schema(tags=['Notifications'])
class NotificationViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):

    queryset = Notification.objects.all()
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return self.queryset.none()
        queryset = self.queryset.filter(user_id=self.request.user.id)
        if self.request.query_params.get("unread") in ("1", "true"):
            queryset = queryset.filter(is_read=False)
        return queryset

    @extend_schema(request=None)
    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
        return Response(self.get_serializer(notification).data)

    @extend_schema(request=None)
    @action(detail=False, methods=['post'], url_path='mark-all-read')
    def mark_all_read(self, request):
        updated = NotificationRepository.mark_all_read(request.user.id)
        return Response({"updated": updated})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return Response({"unread_count": NotificationRepository.unread_count(request.user.id)})


@extend_schema(tags=['Dashboard'])
class DashboardViewSet(viewsets.ViewSet):

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter("currency", OpenApiTypes.STR, description="Display currency (defaults to the base currency)"),
        ],
        description="Current month summary: income, expenses, savings, investments and net worth"
    )
    def list(self, request):
        summary = GetDashboardSummary().execute(request.user.id, currency=request.query_params.get("currency"))
        return Response(summary.to_dict())
