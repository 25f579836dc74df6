# trackvault/common/tests/test_permissions.py
import pytest
from django.contrib.auth.models import AnonymousUser

from trackvault.common.permissions import user_roles
from trackvault.conftest import make_user

pytestmark = pytest.mark.django_db


def test_roles_from_groups():
    assert user_roles(make_user("m", "MANAGER", "COLLECTOR")) == {"MANAGER", "COLLECTOR"}


def test_unknown_groups_fall_back_to_viewer():
    assert user_roles(make_user("x", "WAREHOUSE")) == {"VIEWER"}


def test_superuser_is_admin():
    su = make_user("root")
    su.is_superuser = True
    assert user_roles(su) == {"ADMIN"}


def test_anonymous_has_no_roles():
    assert user_roles(AnonymousUser()) == set()
