# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# These describe what the staff member does on the floor.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"
ROLE_WAITER = "waiter"
ROLE_KITCHEN = "kitchen"
ROLE_BAR = "bar"

STAFF_ROLES = frozenset(
    {
        ROLE_ADMIN,
        ROLE_MANAGER,
        ROLE_CASHIER,
        ROLE_WAITER,
        ROLE_KITCHEN,
        ROLE_BAR,
    }
)


# =========================================================
# ROLE SETS PER FLOW
# =========================================================
# Cashier-initiated flow: settlement + cancellation.
SETTLEMENT_ROLES = frozenset({ROLE_CASHIER, ROLE_MANAGER, ROLE_ADMIN})

# Front-of-house: opening orders and editing line items.
ORDER_TAKING_ROLES = frozenset({ROLE_WAITER, ROLE_CASHIER, ROLE_MANAGER, ROLE_ADMIN})

# Kitchen-initiated flow: preparing / ready only.
KITCHEN_ROLES = frozenset({ROLE_KITCHEN, ROLE_BAR, ROLE_MANAGER, ROLE_ADMIN})


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


# =========================================================
# Base Role Permission (DRF)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)

    The services re-check roles through permissions.guard.assert_staff_role;
    these classes only keep obviously wrong callers away from the views.
    """

    allowed_roles: frozenset[str] = frozenset()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES


class IsOrderTaker(BaseRolePermission):
    allowed_roles = ORDER_TAKING_ROLES


class IsCashierOrAbove(BaseRolePermission):
    allowed_roles = SETTLEMENT_ROLES


class IsKitchenStaff(BaseRolePermission):
    allowed_roles = KITCHEN_ROLES
