from django.contrib import admin

from shifts.models import Shift


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ("id", "staff", "terminal_id", "start_time", "end_time")
    list_filter = ("terminal_id",)
    search_fields = ("staff__email", "terminal_id")
