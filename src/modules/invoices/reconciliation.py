"""Reconciliation: fee lines + adjustments + payments -> balance and status."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal, DecimalException
from typing import Any

from src.core.exceptions import PreconditionError
from src.modules.app_settings.models import SettingKey
from src.modules.invoices.schemas import (
    BillAdjustmentSnapshot,
    InvoiceResult,
    LineItem,
    LineItemType,
    PaymentSnapshot,
    PaymentStatus,
    SurchargeQuote,
    as_snapshot,
)
from src.shared.utils.money import ZERO, parse_money, parse_optional_money

logger = logging.getLogger(__name__)


def sort_adjustments(adjustments: Iterable[Any] | None) -> list[BillAdjustmentSnapshot]:
    """Adjustments by date ascending (id, then description, on equal dates)."""
    snapshots = [as_snapshot(BillAdjustmentSnapshot, a) for a in adjustments or ()]
    return sorted(
        snapshots,
        key=lambda a: (a.adjustment_date, a.id if a.id is not None else 0, a.description),
    )


def sort_payments(payments: Iterable[Any] | None) -> list[PaymentSnapshot]:
    """Payments by date ascending (id on equal dates)."""
    snapshots = [as_snapshot(PaymentSnapshot, p) for p in payments or ()]
    return sorted(snapshots, key=lambda p: (p.payment_date, p.id if p.id is not None else 0))


def total_paid(payments: Iterable[PaymentSnapshot]) -> Decimal:
    """Sum of payments. A payment always reduces the balance, whatever sign was stored."""
    return sum((abs(parse_money(p.amount)) for p in payments), ZERO)


def classify_payment_status(paid: Decimal, balance: Decimal) -> PaymentStatus:
    if balance < 0:
        return PaymentStatus.OVERPAID
    if balance == 0:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def compute_surcharge(balance: Decimal, settings: Mapping[str, str | None]) -> Decimal | None:
    """
    Processor fee for paying ``balance`` online.

    surcharge = balance * percentage / 100 + fixed rate, kept at full precision.
    None when nothing is owed or either rate is missing or not a number.
    """
    if balance <= 0:
        return None
    percentage = parse_optional_money(settings.get(SettingKey.PAYPAL_PERCENTAGE))
    fixed_rate = parse_optional_money(settings.get(SettingKey.PAYPAL_FIXED_RATE))
    if percentage is None or fixed_rate is None:
        return None
    try:
        return balance * (percentage / Decimal("100")) + fixed_rate
    except DecimalException:
        logger.debug("Surcharge rates %s%% + %s out of range, no surcharge", percentage, fixed_rate)
        return None


def reconcile(
    base_total: Decimal,
    line_items: Sequence[LineItem],
    adjustments: Iterable[Any] | None,
    payments: Iterable[Any] | None,
    settings: Mapping[str, str | None] | None,
    include_surcharge: bool = False,
) -> InvoiceResult:
    """
    Fold adjustments and payments into the fee lines.

    Adjustments become trailing line items and count towards the total;
    payments are subtracted afterwards and only reported, date-sorted, in
    ``InvoiceResult.payments``.

    Raises:
        PreconditionError: settings missing.
    """
    if settings is None:
        raise PreconditionError("Settings")

    lines = list(line_items)
    adjusted_total = base_total
    sorted_adjustments = sort_adjustments(adjustments)
    for adjustment in sorted_adjustments:
        amount = parse_money(adjustment.amount)
        lines.append(
            LineItem(
                item_type=LineItemType.ADJUSTMENT,
                description=adjustment.description,
                amount=amount,
            )
        )
        adjusted_total += amount

    sorted_payments = sort_payments(payments)
    paid = total_paid(sorted_payments)
    balance = adjusted_total - paid

    surcharge = compute_surcharge(balance, settings) if include_surcharge else None
    total_with_surcharge = None
    balance_with_surcharge = None
    if surcharge is not None:
        total_with_surcharge = adjusted_total + surcharge
        balance_with_surcharge = total_with_surcharge - paid

    return InvoiceResult(
        line_items=tuple(lines),
        base_total=base_total,
        adjusted_total=adjusted_total,
        total_paid=paid,
        balance=balance,
        payment_status=classify_payment_status(paid, balance),
        surcharge=surcharge,
        total_with_surcharge=total_with_surcharge,
        balance_with_surcharge=balance_with_surcharge,
        payments=tuple(sorted_payments),
        adjustments=tuple(sorted_adjustments),
    )


def surcharge_quote(result: InvoiceResult) -> SurchargeQuote | None:
    """Surcharge amounts of a reconciled invoice, if a surcharge applied."""
    if result.surcharge is None:
        return None
    return SurchargeQuote(
        surcharge=result.surcharge,
        total_with_surcharge=result.total_with_surcharge,
        balance_with_surcharge=result.balance_with_surcharge,
    )
