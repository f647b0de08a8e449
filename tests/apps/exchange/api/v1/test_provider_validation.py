import pytest
from rest_framework.test import APIClient
from rest_framework import status

from apps.exchange.infrastructure.persistence.models import Provider, ProviderName


@pytest.mark.django_db(transaction=True)
class TestProviderPriorityValidation:
    """Tests for the unique fallback priority of providers."""

    def setup_method(self):
        """Clean up before each test."""
        Provider.objects.all().delete()
        self.client = APIClient()

    def test_create_provider_with_unique_priority(self):
        response = self.client.post("/api/v1/exchange/providers/", {
            "name": ProviderName.MOCK,
            "priority": 1,
            "is_active": True
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert Provider.objects.filter(priority=1).exists()

    def test_duplicate_priority_names_the_holder(self):
        Provider.objects.create(name=ProviderName.MOCK, priority=1)

        response = self.client.post("/api/v1/exchange/providers/", {
            "name": ProviderName.EXCHANGE_RATE,
            "priority": 1,
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "already assigned to Mock" in str(response.data["priority"][0])

    def test_keeping_own_priority_on_update(self):
        provider = Provider.objects.create(name=ProviderName.MOCK, priority=1)

        response = self.client.put(f"/api/v1/exchange/providers/{provider.id}/", {
            "name": ProviderName.MOCK,
            "priority": 1,
            "is_active": False
        })

        assert response.status_code == status.HTTP_200_OK
        provider.refresh_from_db()
        assert provider.is_active is False

    def test_swap_priorities_through_a_free_slot(self):
        """Swapping needs a temporary priority since two providers never share one."""
        first = Provider.objects.create(name=ProviderName.EXCHANGE_RATE, priority=1)
        second = Provider.objects.create(name=ProviderName.MOCK, priority=2)
        url = "/api/v1/exchange/providers/{}/"

        assert self.client.patch(url.format(first.id), {"priority": 2}).status_code == status.HTTP_400_BAD_REQUEST
        assert self.client.patch(url.format(first.id), {"priority": 99}).status_code == status.HTTP_200_OK
        assert self.client.patch(url.format(second.id), {"priority": 1}).status_code == status.HTTP_200_OK
        assert self.client.patch(url.format(first.id), {"priority": 2}).status_code == status.HTTP_200_OK

        first.refresh_from_db()
        second.refresh_from_db()
        assert (first.priority, second.priority) == (2, 1)
