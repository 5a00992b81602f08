# orders/api/idempotency.py

"""
IDEMPOTENT COMMAND RESPONSES

Wraps a view's command handler so a retried request with the same
client_request_id gets the first successful response back instead of
running the command twice. Requests without a key run as usual.
"""

from __future__ import annotations

from rest_framework.response import Response

from orders.api.errors import DOMAIN_ERRORS, domain_error_response
from orders.services.idempotency import claim_request, complete_request, normalize_key, release_request


def idempotent_response(client_request_id, resource_type: str, handler) -> Response:
    key = normalize_key(client_request_id)
    if key is None:
        return handler()

    try:
        record, stored = claim_request(key, resource_type)
    except DOMAIN_ERRORS as exc:
        return domain_error_response(exc)

    if stored is not None:
        return Response(stored.response_json, status=stored.response_status)

    try:
        response = handler()
    except Exception:
        release_request(record)
        raise

    if response.status_code >= 400:
        release_request(record)
        return response

    complete_request(record, response_status=response.status_code, response_json=response.data)
    return response
