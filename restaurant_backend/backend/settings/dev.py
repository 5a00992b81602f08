# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS
Safe + convenient defaults. Also used by the test runners.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import PAYMENTS, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

CORS_ALLOWED_ORIGINS = env.list(
    "CORS_ALLOWED_ORIGINS", default=["http://localhost:3000"]
)

CSRF_TRUSTED_ORIGINS = env.list(
    "CSRF_TRUSTED_ORIGINS", default=["http://localhost:3000"]
)

CORS_ALLOW_CREDENTIALS = True

# Sandbox callbacks usually arrive unsigned.
PAYMENTS["PESAPAL"]["ALLOW_UNSIGNED_WEBHOOKS"] = env.bool(
    "PESAPAL_ALLOW_UNSIGNED_WEBHOOKS", default=True
)
