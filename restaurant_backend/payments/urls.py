# payments/urls.py

from django.urls import path

from payments.views import PaymentSessionView, PesapalCallbackView, PesapalWebhookView

urlpatterns = [
    path(
        "pesapal/orders/<uuid:order_id>/session/",
        PaymentSessionView.as_view(),
        name="pesapal-session",
    ),
    path("pesapal/webhook/", PesapalWebhookView.as_view(), name="pesapal-webhook"),
    path("pesapal/callback/", PesapalCallbackView.as_view(), name="pesapal-callback"),
]
