# trackvault/conftest.py
from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from trackvault.products.models import Product, ProductRate, Unit
from trackvault.suppliers.models import Supplier


def make_user(username: str, *roles: str, password: str = "testpass"):
    User = get_user_model()
    user = User.objects.create_user(username=username, password=password, is_active=True)
    for role in roles:
        group, _ = Group.objects.get_or_create(name=role)
        user.groups.add(group)
    return user


def client_for(user) -> APIClient:
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def user(db):
    """
    Test user in the ADMIN group.
    """
    return make_user("testuser", "ADMIN")


@pytest.fixture
def api_client(user):
    return client_for(user)


@pytest.fixture
def manager_client(db):
    return client_for(make_user("manager", "MANAGER"))


@pytest.fixture
def collector_client(db):
    return client_for(make_user("collector", "COLLECTOR"))


@pytest.fixture
def viewer_client(db):
    # no groups -> VIEWER
    return client_for(make_user("viewer"))


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(name="Green Leaf Estate", code="SUP-001", phone="0771234567")


@pytest.fixture
def product(db):
    return Product.objects.create(
        name="Tea Leaves",
        code="TEA-01",
        base_unit=Unit.KG,
        allowed_units=[Unit.G],
    )


@pytest.fixture
def product_rate(product):
    """
    10.00/kg for the first half of 2024.
    """
    return ProductRate.objects.create(
        product=product,
        rate=Decimal("10.0000"),
        unit=Unit.KG,
        effective_from=date(2024, 1, 1),
        effective_to=date(2024, 6, 30),
    )
