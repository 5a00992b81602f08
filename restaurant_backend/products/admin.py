from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "station", "price", "is_active")
    list_filter = ("category", "station", "is_active")
    search_fields = ("name",)
