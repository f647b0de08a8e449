import pytest
from rest_framework.test import APIClient

from apps.exchange.application.factories import get_rate_store


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="alice", password="s3cret-pass")


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="bob", password="s3cret-pass")


@pytest.fixture
def rates(db):
    """EUR at 0.92 and GBP at 0.8 per USD."""
    store = get_rate_store()
    store.bulk_merge_automatic_rates({"EUR": "0.92", "GBP": "0.8"})
    return store


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client
