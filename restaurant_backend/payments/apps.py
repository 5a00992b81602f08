# payments/apps.py

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """
    External payment gateway (Pesapal API 3.0).

    No models: sessions are stateless and settlement is recorded by the order
    core (orders.services.record_external_payment).
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payment Gateway"
