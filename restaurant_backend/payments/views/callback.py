# payments/views/callback.py

"""
GET /api/payments/pesapal/callback/?OrderTrackingId=...&OrderMerchantReference=<order_id>

Browser return leg only: it never settles anything (the webhook does).
Redirects to the POS screen for the order.
"""

from __future__ import annotations

import logging
import uuid
from urllib.parse import urlencode, urlparse

from django.conf import settings
from django.shortcuts import redirect
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

logger = logging.getLogger(__name__)

DEFAULT_FRONTEND = "http://localhost:3000"


def _safe_frontend_base() -> str:
    base = (getattr(settings, "FRONTEND_BASE_URL", "") or "").strip()
    if not base:
        base = DEFAULT_FRONTEND

    parsed = urlparse(base)
    if not parsed.scheme or not parsed.netloc:
        logger.warning("Invalid FRONTEND_BASE_URL detected")
        return DEFAULT_FRONTEND

    return base.rstrip("/")


def _valid_order_id(value: str) -> str | None:
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError):
        return None


class PesapalCallbackView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        frontend = _safe_frontend_base()
        order_id = _valid_order_id(request.query_params.get("OrderMerchantReference") or "")
        tracking_id = (request.query_params.get("OrderTrackingId") or "").strip()

        if not order_id:
            logger.warning("Pesapal callback without a valid order reference")
            return redirect(f"{frontend}/pos/orders")

        logger.info(
            "Pesapal callback redirecting to frontend",
            extra={"order_id": order_id, "order_tracking_id": tracking_id},
        )

        query = f"?{urlencode({'OrderTrackingId': tracking_id})}" if tracking_id else ""
        return redirect(f"{frontend}/pos/orders/{order_id}/payment-callback{query}")
