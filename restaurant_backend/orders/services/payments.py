# orders/services/payments.py

"""
PAYMENT FINALIZER (SETTLEMENT CHOKE POINT)

Purpose:
- The ONLY code path that moves an order to "served" on payment.
- Shared by every tender: cash, MTN MoMo, and gateway callbacks.

Settlement steps (one transaction):
  1. external_reference already recorded      -> success, no effect
  2. lock order (+ shift) inside the transaction
  3. missing order                            -> OrderNotFoundError
  4. owning shift closed                      -> ShiftAlreadyClosedError
  5. no live items                            -> OrderHasNoItemsError
  6. stored total drifted from live items     -> corrected in place (WARNING)
  7. order no longer payable                  -> success, no effect
  8. amount < total                           -> PaymentInsufficientError
  9. insert Payment(status=completed)
 10. order.status = served

After commit (outside the transaction): release the dine-in table.

Idempotency:
- external_reference is unique at the DB level.
- A concurrent insert of the same reference surfaces as IntegrityError; it is
  re-checked and reported as a duplicate (success), not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction

from orders.models import Order, Payment
from orders.services.exceptions import (
    ExternalReferenceRequiredError,
    OrderHasNoItemsError,
    PaymentAmountInvalidError,
    PaymentInsufficientError,
    ShiftAlreadyClosedError,
    UnsupportedPaymentMethodError,
)
from orders.services.money import ZERO, amounts_differ, order_totals, to_money, to_money_exact
from orders.services.order_lookup import get_order
from orders.services.order_status import release_table_after_commit
from permissions.guard import assert_staff_role
from permissions.roles import SETTLEMENT_ROLES

logger = logging.getLogger(__name__)

# Staff id used by authenticated gateway callbacks.
SYSTEM_STAFF_ID = "system"

OUTCOME_SETTLED = "settled"
OUTCOME_DUPLICATE_REFERENCE = "duplicate_reference"
OUTCOME_ALREADY_SETTLED = "already_settled"


@dataclass(frozen=True)
class SettlementResult:
    order_id: str
    outcome: str
    payment_id: Optional[str] = None
    amount: Optional[Decimal] = None
    total_corrected: bool = False

    @property
    def settled(self) -> bool:
        return self.outcome == OUTCOME_SETTLED


# ============================================================
# INTERNAL: CANONICAL SETTLEMENT
# ============================================================


def _normalize_amount(amount) -> Decimal:
    try:
        value = to_money_exact(amount)
    except ValueError:
        raise PaymentAmountInvalidError(amount) from None
    if value < ZERO:
        raise PaymentAmountInvalidError(amount)
    return value


def _reference_exists(reference: Optional[str]) -> bool:
    return bool(reference) and Payment.objects.filter(external_reference=reference).exists()


def _settle_locked(*, order_id, amount: Decimal, method: str, staff, reference) -> SettlementResult:
    if _reference_exists(reference):
        logger.info(
            "Duplicate payment reference ignored",
            extra={"order_id": str(order_id), "reference": reference},
        )
        return SettlementResult(order_id=str(order_id), outcome=OUTCOME_DUPLICATE_REFERENCE)

    order = get_order(order_id, for_update=True)

    if order.shift.end_time is not None:
        raise ShiftAlreadyClosedError(order.pk, order.shift_id)

    items = list(order.items.all())
    if not items:
        raise OrderHasNoItemsError(order.pk)

    derived_subtotal, derived_total = order_totals(
        ((i.unit_price, i.quantity) for i in items), order.tax_amount
    )
    corrected = False

    if amounts_differ(derived_total, order.total_amount):
        logger.warning(
            "Order total drifted from live items; corrected before settlement",
            extra={
                "order_id": str(order.pk),
                "stored_total": str(order.total_amount),
                "derived_total": str(derived_total),
            },
        )
        order.subtotal_amount = derived_subtotal
        order.total_amount = derived_total
        order.save(update_fields=["subtotal_amount", "total_amount", "updated_at"])
        corrected = True

    if not order.is_payable:
        logger.info(
            "Order already settled; payment ignored",
            extra={"order_id": str(order.pk), "status": order.status},
        )
        return SettlementResult(
            order_id=str(order.pk),
            outcome=OUTCOME_ALREADY_SETTLED,
            total_corrected=corrected,
        )

    total = to_money(order.total_amount)
    if amount < total:
        raise PaymentInsufficientError(order.pk, amount, total)

    payment = Payment.objects.create(
        order=order,
        amount=amount,
        method=method,
        status=Payment.STATUS_COMPLETED,
        external_reference=reference,
        created_by=staff,
    )

    order.status = Order.STATUS_SERVED
    order.updated_by = staff
    order.save(update_fields=["status", "updated_by", "updated_at"])

    return SettlementResult(
        order_id=str(order.pk),
        outcome=OUTCOME_SETTLED,
        payment_id=str(payment.pk),
        amount=amount,
        total_corrected=corrected,
    )


def _finalize_payment(
    *,
    order_id,
    amount,
    method: str,
    staff=None,
    external_reference: Optional[str] = None,
) -> SettlementResult:
    value = _normalize_amount(amount)
    reference = (external_reference or "").strip() or None

    try:
        with transaction.atomic():
            result = _settle_locked(
                order_id=order_id,
                amount=value,
                method=method,
                staff=staff,
                reference=reference,
            )
    except IntegrityError:
        # Lost the race on the unique reference: the other writer settled it.
        if _reference_exists(reference):
            logger.info(
                "Duplicate payment reference ignored (concurrent insert)",
                extra={"order_id": str(order_id), "reference": reference},
            )
            return SettlementResult(order_id=str(order_id), outcome=OUTCOME_DUPLICATE_REFERENCE)
        raise

    if result.settled:
        logger.info(
            "Order settled",
            extra={
                "order_id": result.order_id,
                "payment_id": result.payment_id,
                "method": method,
                "amount": str(value),
                "reference": reference,
            },
        )

    if result.outcome != OUTCOME_DUPLICATE_REFERENCE:
        release_table_after_commit(result.order_id)
    return result


# ============================================================
# PUBLIC ENTRY POINTS
# ============================================================


def pay_order_cash(*, order_id, amount, staff_id) -> SettlementResult:
    staff = assert_staff_role(staff_id, SETTLEMENT_ROLES)
    return _finalize_payment(
        order_id=order_id,
        amount=amount,
        method=Payment.METHOD_CASH,
        staff=staff,
    )


def pay_order_momo(*, order_id, amount, staff_id) -> SettlementResult:
    staff = assert_staff_role(staff_id, SETTLEMENT_ROLES)
    return _finalize_payment(
        order_id=order_id,
        amount=amount,
        method=Payment.METHOD_MTN_MOMO,
        staff=staff,
    )


def record_external_payment(
    *,
    order_id,
    amount,
    method: str,
    staff_id,
    external_reference: str,
) -> SettlementResult:
    """
    Gateway-originated settlement. staff_id == "system" skips the role check;
    the caller has already authenticated the callback.
    """
    if method not in Payment.EXTERNAL_METHODS:
        raise UnsupportedPaymentMethodError(method)

    if not (external_reference or "").strip():
        raise ExternalReferenceRequiredError()

    staff = None
    if staff_id != SYSTEM_STAFF_ID:
        staff = assert_staff_role(staff_id, SETTLEMENT_ROLES)

    return _finalize_payment(
        order_id=order_id,
        amount=amount,
        method=method,
        staff=staff,
        external_reference=external_reference,
    )
