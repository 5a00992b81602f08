# permissions/guard.py

"""
STAFF ROLE GUARD (SERVICE LAYER)

Purpose:
- The services authorize the *staff id they are given*, independent of how the
  caller authenticated (JWT view, management command, webhook).
- Views keep their own DRF permission classes; this is the authoritative check.
"""

from __future__ import annotations

from typing import Iterable

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError

from permissions.exceptions import RoleDeniedError, StaffInactiveError, StaffNotFoundError


def get_staff(staff_id):
    """
    Resolve an active staff member by id.

    Raises StaffNotFoundError for unknown/malformed ids and StaffInactiveError
    for deactivated accounts.
    """
    User = get_user_model()
    try:
        staff = User.objects.filter(pk=staff_id).first()
    except (ValidationError, ValueError):
        staff = None

    if staff is None:
        raise StaffNotFoundError(staff_id)
    if not staff.is_active:
        raise StaffInactiveError(staff_id)
    return staff


def assert_staff_role(staff_id, allowed_roles: Iterable[str]):
    staff = get_staff(staff_id)
    allowed = set(allowed_roles)
    if staff.role not in allowed:
        raise RoleDeniedError(staff_id, staff.role, allowed)
    return staff
