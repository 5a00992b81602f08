# shifts/models.py

"""
SHIFT (READ CONTRACT FOR THE ORDER CORE)

A shift is a staff member's working session on a terminal.
Open shift   -> end_time IS NULL
Closed shift -> end_time set; orders owned by it are frozen for payment.

Opening/closing shifts (cash counts, reconciliation) is handled outside the
order core; this app only exposes what orders need to read.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Shift(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="shifts",
    )

    terminal_id = models.CharField(max_length=64, blank=True, default="")

    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-start_time"]
        indexes = [
            models.Index(fields=["staff", "end_time"], name="shift_staff_end_idx"),
        ]

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def __str__(self):
        state = "OPEN" if self.is_open else "CLOSED"
        return f"Shift {str(self.id)[:8]} | {self.staff} | {state}"
