# orders/services/idempotency.py

"""
CLIENT REQUEST IDEMPOTENCY

Offline terminals queue write commands and replay them with the same
client_request_id until they see a response. This module makes a replay a
read of the first response.

Flow:
    claim_request(key, type)
      -> (record, None)   first sight: run the command, then
                          complete_request(...) or release_request(...)
      -> (None, stored)   already completed: return stored response

Rules:
- The claim is its own committed row, so the command keeps its own
  transaction boundaries (settlement and post-commit table release).
- Only successful responses are stored; a failed command releases the claim.
- A claim left behind by a crashed worker is taken over after
  IDEMPOTENCY_CLAIM_TIMEOUT_SECONDS.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from orders.models import IdempotencyRecord
from orders.services.exceptions import IdempotencyKeyReusedError, IdempotentRequestInProgressError

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 64


def normalize_key(client_request_id) -> Optional[str]:
    key = str(client_request_id or "").strip()
    if not key or len(key) > MAX_KEY_LENGTH:
        return None
    return key


def _claim_timeout() -> timedelta:
    return timedelta(seconds=int(getattr(settings, "IDEMPOTENCY_CLAIM_TIMEOUT_SECONDS", 120)))


def _insert_claim(key: str, resource_type: str) -> Optional[IdempotencyRecord]:
    try:
        with transaction.atomic():
            return IdempotencyRecord.objects.create(client_request_id=key, resource_type=resource_type)
    except IntegrityError:
        return None


def claim_request(client_request_id: str, resource_type: str):
    """
    Returns (record, None) for a new request or (None, stored_record) for a replay.
    """
    record = _insert_claim(client_request_id, resource_type)
    if record is not None:
        return record, None

    existing = IdempotencyRecord.objects.filter(client_request_id=client_request_id).first()
    if existing is None:
        # Released between our insert and read.
        record = _insert_claim(client_request_id, resource_type)
        if record is None:
            raise IdempotentRequestInProgressError(client_request_id)
        return record, None

    if existing.resource_type != resource_type:
        raise IdempotencyKeyReusedError(client_request_id, existing.resource_type, resource_type)

    if existing.is_completed:
        logger.info(
            "Idempotent replay served from stored response",
            extra={"client_request_id": client_request_id, "resource_type": resource_type},
        )
        return None, existing

    stale_before = timezone.now() - _claim_timeout()
    taken_over = IdempotencyRecord.objects.filter(
        pk=existing.pk, completed_at__isnull=True, created_at__lt=stale_before
    ).update(created_at=timezone.now())
    if taken_over:
        logger.warning(
            "Stale idempotency claim taken over",
            extra={"client_request_id": client_request_id, "resource_type": resource_type},
        )
        existing.refresh_from_db()
        return existing, None

    raise IdempotentRequestInProgressError(client_request_id)


def complete_request(record: IdempotencyRecord, *, response_status: int, response_json) -> None:
    record.response_status = response_status
    record.response_json = response_json
    record.completed_at = timezone.now()
    record.save(update_fields=["response_status", "response_json", "completed_at"])


def release_request(record: IdempotencyRecord) -> None:
    IdempotencyRecord.objects.filter(pk=record.pk, completed_at__isnull=True).delete()
