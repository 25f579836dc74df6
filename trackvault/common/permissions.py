# trackvault/common/permissions.py

from __future__ import annotations

from typing import FrozenSet, Mapping

from rest_framework.permissions import SAFE_METHODS, BasePermission

# Django auth Group names
ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_COLLECTOR = "COLLECTOR"
ROLE_VIEWER = "VIEWER"

ALL_ROLES = frozenset({ROLE_ADMIN, ROLE_MANAGER, ROLE_COLLECTOR, ROLE_VIEWER})
OFFICE_ROLES = frozenset({ROLE_ADMIN, ROLE_MANAGER})

_DEFAULT_ACTIONS = {
    "POST": "create",
    "PUT": "update",
    "PATCH": "partial_update",
    "DELETE": "destroy",
}


def user_roles(user) -> set[str]:
    """
    Roles come from Django group names. A superuser is ADMIN; an authenticated
    user without groups is VIEWER; anonymous users have none.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    if getattr(user, "is_superuser", False):
        return {ROLE_ADMIN}

    roles = set(user.groups.values_list("name", flat=True)) & ALL_ROLES
    return roles or {ROLE_VIEWER}


def _is_detail(view) -> bool:
    kwargs = getattr(view, "kwargs", None) or {}
    return "pk" in kwargs or "id" in kwargs


class BaseRolePermission(BasePermission):
    """
    Role check keyed on the viewset action.

    ADMIN passes everything. Read-only custom actions without an entry use
    the list/retrieve roles. Write actions without an entry are denied.
    """
    message = "You do not have permission to perform this action."

    read_roles: FrozenSet[str] = ALL_ROLES
    allowed_roles_per_action: Mapping[str, FrozenSet[str]] = {}

    def roles_for(self, request, view) -> FrozenSet[str] | None:
        action = getattr(view, "action", None)
        if not action and request.method not in SAFE_METHODS:
            action = _DEFAULT_ACTIONS.get(request.method)

        if action in self.allowed_roles_per_action:
            return self.allowed_roles_per_action[action]
        if request.method in SAFE_METHODS:
            read_action = "retrieve" if _is_detail(view) else "list"
            return self.allowed_roles_per_action.get(read_action, self.read_roles)
        return None

    def has_permission(self, request, view) -> bool:
        roles = user_roles(request.user)
        if not roles:
            return False
        if ROLE_ADMIN in roles:
            return True

        allowed = self.roles_for(request, view)
        return bool(allowed and roles & allowed)

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class SupplierPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "create": OFFICE_ROLES,
        "update": OFFICE_ROLES,
        "partial_update": OFFICE_ROLES,
        "destroy": frozenset({ROLE_ADMIN}),
        "balance": OFFICE_ROLES,
    }


class ProductPermission(BaseRolePermission):
    """Products and their rates; every rate write is office-only."""
    allowed_roles_per_action = {
        "create": OFFICE_ROLES,
        "update": OFFICE_ROLES,
        "partial_update": OFFICE_ROLES,
        "destroy": frozenset({ROLE_ADMIN}),
        "add_rate": OFFICE_ROLES,
        "supersede_rate": OFFICE_ROLES,
        "deactivate": OFFICE_ROLES,
        "activate": OFFICE_ROLES,
    }


class CollectionPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "create": ALL_ROLES - {ROLE_VIEWER},
        "update": OFFICE_ROLES,
        "partial_update": OFFICE_ROLES,
        "destroy": OFFICE_ROLES,
    }


class PaymentPermission(BaseRolePermission):
    """Collectors record deliveries but never see money movements."""
    read_roles = ALL_ROLES - {ROLE_COLLECTOR}
    allowed_roles_per_action = {
        "create": OFFICE_ROLES,
        "update": OFFICE_ROLES,
        "partial_update": OFFICE_ROLES,
        "destroy": frozenset({ROLE_ADMIN}),
        "calculate": OFFICE_ROLES,
    }


class AuditPermission(BaseRolePermission):
    read_roles = frozenset({ROLE_ADMIN})
