from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Product
from tables.models import RestaurantTable

MENU = [
    # (name, category, station, price)
    ("Rolex", "Snacks", Product.STATION_KITCHEN, "5000"),
    ("Chicken & Chips", "Mains", Product.STATION_KITCHEN, "25000"),
    ("Whole Tilapia", "Mains", Product.STATION_KITCHEN, "40000"),
    ("Beef Pilau", "Mains", Product.STATION_KITCHEN, "18000"),
    ("Fresh Passion Juice", "Drinks", Product.STATION_BAR, "6000"),
    ("Nile Special", "Drinks", Product.STATION_BAR, "7000"),
    ("Soda", "Drinks", Product.STATION_BAR, "3000"),
]


class Command(BaseCommand):
    help = "Seed menu products and dine-in tables (idempotent)"

    def add_arguments(self, parser):
        parser.add_argument("--tables", type=int, default=10, help="Number of tables to ensure")

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding menu and tables..."))

        created_products = 0
        for name, category, station, price in MENU:
            _, created = Product.objects.get_or_create(
                name=name,
                defaults={
                    "category": category,
                    "station": station,
                    "price": Decimal(price),
                },
            )
            created_products += int(created)

        created_tables = 0
        for n in range(1, options["tables"] + 1):
            _, created = RestaurantTable.objects.get_or_create(number=str(n))
            created_tables += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Menu seeded: {created_products} new products, {created_tables} new tables."
            )
        )
