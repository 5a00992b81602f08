# permissions/exceptions.py

"""
STAFF AUTHORIZATION ERRORS

Raised by permissions.guard. The API layer renders these as 403/404/409.
"""


class StaffAuthorizationError(Exception):
    """Base exception for staff lookup and role checks."""

    code = "STAFF_AUTHORIZATION_ERROR"


class StaffNotFoundError(StaffAuthorizationError):
    code = "STAFF_NOT_FOUND"

    def __init__(self, staff_id):
        self.staff_id = staff_id
        super().__init__(f"Staff not found: {staff_id}")


class StaffInactiveError(StaffAuthorizationError):
    code = "STAFF_INACTIVE"

    def __init__(self, staff_id):
        self.staff_id = staff_id
        super().__init__(f"Staff is inactive: {staff_id}")


class RoleDeniedError(StaffAuthorizationError):
    code = "ROLE_DENIED"

    def __init__(self, staff_id, role, allowed_roles):
        self.staff_id = staff_id
        self.role = role
        self.allowed_roles = sorted(allowed_roles)
        super().__init__(
            f"Staff {staff_id} with role {role} is not authorized. "
            f"Required: {', '.join(self.allowed_roles)}"
        )
