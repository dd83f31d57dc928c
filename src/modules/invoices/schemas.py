"""Schemas for Invoices module.

Snapshot models are the read-only inputs of the invoice engine; they can be
built from ORM rows or plain dicts. Result models are what the engine returns
and what the API serializes.
"""

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import field_validator

from src.shared.schemas.base import FrozenSchema

SnapshotT = TypeVar("SnapshotT", bound=FrozenSchema)


def as_snapshot(model: type[SnapshotT], value: Any) -> SnapshotT:
    """Return ``value`` as ``model`` (ORM row, dict or already a snapshot)."""
    if isinstance(value, model):
        return value
    return model.model_validate(value)


# --- Input snapshots ---


class FamilySnapshot(FrozenSchema):
    id: int
    last_name: str
    father: str | None = None
    mother: str | None = None
    needs_background_check: bool = False
    active: bool = True

    @field_validator("needs_background_check", mode="before")
    @classmethod
    def _none_is_false(cls, v):
        return False if v is None else v

    @field_validator("active", mode="before")
    @classmethod
    def _none_is_active(cls, v):
        return True if v is None else v


class StudentSnapshot(FrozenSchema):
    id: int | None = None
    family_id: int | None = None
    first_name: str = ""
    last_name: str = ""
    grad_year: str | None = None
    inactive: bool = False
    math_hour: str | None = None
    first_hour: str | None = None
    second_hour: str | None = None
    third_hour: str | None = None
    fourth_hour: str | None = None
    fifth_hour_fall: str | None = None
    fifth_hour_spring: str | None = None

    @field_validator("grad_year", mode="before")
    @classmethod
    def _grad_year_as_text(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("inactive", mode="before")
    @classmethod
    def _none_is_false(cls, v):
        return False if v is None else v


class CourseSnapshot(FrozenSchema):
    course_name: str
    fee: Decimal | str | None = None
    book_rental: Decimal | str | None = None
    hour: int | None = None
    location: str | None = None


class GradeSnapshot(FrozenSchema):
    code: int
    grade_name: str


class HourSnapshot(FrozenSchema):
    id: int
    description: str | None = None


class PaymentSnapshot(FrozenSchema):
    id: int | None = None
    family_id: int | None = None
    amount: Decimal | str
    payment_date: date
    payment_method: str | None = None
    description: str | None = None


class BillAdjustmentSnapshot(FrozenSchema):
    id: int | None = None
    family_id: int | None = None
    amount: Decimal | str
    adjustment_date: date
    description: str


# --- Engine output ---


class LineItemType(StrEnum):
    """Kind of statement row."""

    FAMILY = "family"
    BACKGROUND = "background"
    STUDENT = "student"
    COURSE = "course"
    BOOK = "book"
    ADJUSTMENT = "adjustment"


class PaymentStatus(StrEnum):
    """Payment status derived from balance and total paid."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERPAID = "overpaid"


class LineItem(FrozenSchema):
    """One statement row. Adjustment credits carry a negative amount."""

    item_type: LineItemType
    description: str
    amount: Decimal
    student_name: str | None = None
    grade: str | None = None
    hour: str | None = None
    course_name: str | None = None


class InvoiceResult(FrozenSchema):
    """Billing statement for one family at one point in time."""

    line_items: tuple[LineItem, ...]
    base_total: Decimal
    adjusted_total: Decimal
    total_paid: Decimal
    balance: Decimal
    payment_status: PaymentStatus
    # Present only when a processor surcharge was requested and applies
    surcharge: Decimal | None = None
    total_with_surcharge: Decimal | None = None
    balance_with_surcharge: Decimal | None = None
    # Trailing statement sections, date ascending
    payments: tuple[PaymentSnapshot, ...] = ()
    adjustments: tuple[BillAdjustmentSnapshot, ...] = ()


class FamilyInvoice(FrozenSchema):
    """Invoice result together with the family it belongs to."""

    family: FamilySnapshot
    token: str
    invoice: InvoiceResult


class InvoiceSummary(FrozenSchema):
    """One row of the admin invoice grid."""

    family_id: int
    last_name: str
    father: str | None = None
    mother: str | None = None
    needs_background_check: bool
    total_amount: Decimal
    total_paid: Decimal
    balance: Decimal
    last_payment_date: date | None = None
    payment_status: PaymentStatus


class SurchargeQuote(FrozenSchema):
    """Amounts due when the family pays the balance through the payment processor."""

    surcharge: Decimal
    total_with_surcharge: Decimal
    balance_with_surcharge: Decimal


class FamilyLink(FrozenSchema):
    """Shareable, unauthenticated links for a family."""

    family_id: int
    token: str
    invoice_url: str
    schedule_url: str
