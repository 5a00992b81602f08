# payments/services/pesapal.py

"""
PESAPAL API 3.0 CLIENT (MINIMAL)

Only the two calls the POS needs:
- POST {base}/Auth/RequestToken                 -> bearer token
- POST {base}/Transactions/SubmitOrderRequest   -> redirect_url

Plus the webhook signature check (HMAC-SHA256 over the raw body).

Rules:
- Single attempt, no retry; callers decide retry policy.
- Every failure surfaces as PaymentGatewayError (config gaps as
  PaymentGatewayConfigError), never a bare urllib exception.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from decimal import Decimal
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from payments.services.exceptions import PaymentGatewayConfigError, PaymentGatewayError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("BASE_URL", "CONSUMER_KEY", "CONSUMER_SECRET", "IPN_ID")

# Pesapal requires a billing address; the POS has no customer profile.
POS_BILLING_ADDRESS = {
    "email_address": "pos@merchant.local",
    "phone_number": "0000000000",
    "country_code": "UG",
    "first_name": "",
    "middle_name": "",
    "last_name": "",
    "line_1": "",
    "line_2": "",
    "city": "",
    "state": "",
    "postal_code": "",
    "zip_code": "",
}


def _pesapal_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get("PESAPAL") if isinstance(payments, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def get_gateway_config() -> dict:
    """
    Resolved, validated Pesapal settings (raises PaymentGatewayConfigError).
    """
    cfg = _pesapal_cfg()
    missing = [k for k in REQUIRED_KEYS if not str(cfg.get(k) or "").strip()]
    if missing:
        raise PaymentGatewayConfigError(
            "Pesapal config missing: " + ", ".join(f"PESAPAL_{k}" for k in missing)
        )

    return {
        "base_url": str(cfg["BASE_URL"]).strip().rstrip("/"),
        "consumer_key": str(cfg["CONSUMER_KEY"]).strip(),
        "consumer_secret": str(cfg["CONSUMER_SECRET"]).strip(),
        "ipn_id": str(cfg["IPN_ID"]).strip(),
        "timeout": int(cfg.get("TIMEOUT_SECONDS") or 25),
    }


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _request_json(
    url: str,
    *,
    body: dict,
    bearer: str | None = None,
    timeout: int = 25,
) -> dict[str, Any]:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if bearer:
        headers["Authorization"] = f"Bearer {bearer}"

    req = Request(
        url,
        data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        headers=headers,
        method="POST",
    )

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw = ""
        raise PaymentGatewayError(
            f"Pesapal HTTPError: {e.code} {_safe_preview(raw or str(e))}",
            http_status=e.code,
        ) from e
    except URLError as e:
        raise PaymentGatewayError(f"Pesapal URLError: {e.reason}") from e
    except (TimeoutError, OSError) as e:
        raise PaymentGatewayError(f"Pesapal request failed: {e}") from e

    try:
        parsed = json.loads(raw or "")
    except ValueError as e:
        raise PaymentGatewayError(f"Pesapal returned non-JSON: {_safe_preview(raw)}") from e

    if not isinstance(parsed, dict):
        raise PaymentGatewayError(f"Pesapal returned unexpected JSON: {_safe_preview(raw)}")

    return parsed


def request_token(cfg: dict) -> str:
    data = _request_json(
        f"{cfg['base_url']}/Auth/RequestToken",
        body={
            "consumer_key": cfg["consumer_key"],
            "consumer_secret": cfg["consumer_secret"],
        },
        timeout=cfg["timeout"],
    )

    token = str(data.get("token") or "").strip()
    if data.get("error") or not token:
        raise PaymentGatewayError(f"Pesapal auth error: {json.dumps(data.get('error') or 'no token')}")
    return token


def submit_order_request(
    cfg: dict,
    *,
    bearer: str,
    order_id: str,
    amount: Decimal,
    currency: str,
    callback_url: str,
    description: str = "",
) -> str:
    """
    Register a payment request; returns the hosted-checkout redirect URL.

    The order id is sent as the merchant reference, so retrying the same
    order never creates a second, distinct charge request.
    """
    body = {
        "id": str(order_id),
        "currency": currency,
        # Whole-unit currency: Pesapal expects a JSON number.
        "amount": int(amount) if amount == amount.to_integral_value() else float(amount),
        "description": description or f"Order {str(order_id)[:8]}",
        "callback_url": callback_url,
        "notification_id": cfg["ipn_id"],
        "billing_address": dict(POS_BILLING_ADDRESS),
    }

    data = _request_json(
        f"{cfg['base_url']}/Transactions/SubmitOrderRequest",
        body=body,
        bearer=bearer,
        timeout=cfg["timeout"],
    )

    redirect_url = str(data.get("redirect_url") or "").strip()
    if data.get("error") or not redirect_url:
        raise PaymentGatewayError(
            f"Pesapal SubmitOrderRequest error: {json.dumps(data.get('error') or 'no redirect_url')}"
        )

    logger.info(
        "Pesapal order request submitted",
        extra={"order_id": str(order_id), "order_tracking_id": data.get("order_tracking_id")},
    )
    return redirect_url


def webhook_secret() -> str:
    return str(_pesapal_cfg().get("WEBHOOK_SECRET") or "").strip()


def verify_webhook_signature(*, raw_body: bytes, signature: str | None) -> bool:
    """
    HMAC-SHA256(raw_body, PESAPAL_WEBHOOK_SECRET), hex encoded.

    With no secret configured the body is refused, unless
    ALLOW_UNSIGNED_WEBHOOKS is set (dev settings only; prod forces it off).
    """
    secret = webhook_secret()
    if not secret:
        return bool(_pesapal_cfg().get("ALLOW_UNSIGNED_WEBHOOKS", False))
    if not signature:
        return False

    computed = hmac.new(secret.encode("utf-8"), raw_body or b"", hashlib.sha256).hexdigest()
    return hmac.compare_digest(computed, str(signature).strip().lower())
