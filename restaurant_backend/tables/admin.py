from django.contrib import admin

from tables.models import RestaurantTable


@admin.register(RestaurantTable)
class RestaurantTableAdmin(admin.ModelAdmin):
    list_display = ("number", "capacity", "status", "is_active")
    list_filter = ("status", "is_active")
    search_fields = ("number",)
