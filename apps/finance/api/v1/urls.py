from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.finance.api.v1.views import (
    DashboardViewSet,
    ExpenseViewSet,
    IncomeViewSet,
    InvestmentViewSet,
    NotificationViewSet,
    SavingViewSet,
)

router = DefaultRouter()
router.register(r'incomes', IncomeViewSet, basename='income')
router.register(r'expenses', ExpenseViewSet, basename='expense')
router.register(r'savings', SavingViewSet, basename='saving')
router.register(r'investments', InvestmentViewSet, basename='investment')
router.register(r'notifications', NotificationViewSet, basename='notification')
router.register(r'dashboard', DashboardViewSet, basename='dashboard')

urlpatterns = [
    path('', include(router.urls)),
]
