# shifts/services.py

from __future__ import annotations

from shifts.models import Shift


class NoActiveShiftError(Exception):
    code = "NO_ACTIVE_SHIFT"

    def __init__(self, staff_id):
        self.staff_id = staff_id
        super().__init__(f"No active shift for staff: {staff_id}")


def get_active_shift(staff_id) -> Shift:
    """
    Latest open shift (end_time IS NULL) for the staff member.
    """
    shift = (
        Shift.objects.filter(staff_id=staff_id, end_time__isnull=True)
        .order_by("-start_time")
        .first()
    )
    if shift is None:
        raise NoActiveShiftError(staff_id)
    return shift
