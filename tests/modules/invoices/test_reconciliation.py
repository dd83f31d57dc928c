from datetime import date
from decimal import Decimal

import pytest

from src.core.exceptions import PreconditionError
from src.modules.families.models import NO_COURSE
from src.modules.invoices.calculator import compute_line_items
from src.modules.invoices.reconciliation import (
    classify_payment_status,
    compute_surcharge,
    reconcile,
    surcharge_quote,
)
from src.modules.invoices.schemas import LineItemType, PaymentStatus

FEE_SETTINGS = {"FamilyFee": "20", "BackgroundFee": "35", "StudentFee": "20"}
PAYPAL_SETTINGS = {**FEE_SETTINGS, "PayPalPercentage": "2.9", "PayPalFixedRate": "0.30"}


def _example_lines():
    """Family 7: background check plus one student taking Algebra, 135.00 in fees."""
    return compute_line_items(
        {"id": 7, "last_name": "Miller", "needs_background_check": True},
        [{"first_name": "Ann", "last_name": "Miller", "grad_year": "2030",
          "math_hour": "Algebra", "first_hour": NO_COURSE}],
        [{"course_name": "Algebra", "fee": "50", "book_rental": "10"}],
        {},
        FEE_SETTINGS,
    )


def _payment(amount: str, day: date, payment_id: int | None = None) -> dict:
    return {"id": payment_id, "family_id": 7, "amount": amount, "payment_date": day}


def _adjustment(amount: str, day: date, description: str, adjustment_id: int | None = None) -> dict:
    return {
        "id": adjustment_id,
        "family_id": 7,
        "amount": amount,
        "adjustment_date": day,
        "description": description,
    }


class TestReconcile:
    """Tests for balance reconciliation."""

    def test_example_scenario(self):
        lines, base_total = _example_lines()
        result = reconcile(
            base_total, lines, [], [_payment("100.00", date(2025, 9, 1))], FEE_SETTINGS
        )

        assert result.adjusted_total == Decimal("135.00")
        assert result.total_paid == Decimal("100.00")
        assert result.balance == Decimal("35.00")
        assert result.payment_status == PaymentStatus.PARTIAL
        assert result.surcharge is None
        assert result.total_with_surcharge is None
        assert result.balance_with_surcharge is None

    def test_adjustments_are_appended_in_date_order(self):
        lines, base_total = _example_lines()
        adjustments = [
            _adjustment("15.00", date(2025, 10, 1), "Field trip"),
            _adjustment("-25.00", date(2025, 8, 15), "Volunteer credit"),
            _adjustment("5", date(2025, 9, 1), "Late fee"),
        ]
        result = reconcile(base_total, lines, adjustments, [], FEE_SETTINGS)

        tail = result.line_items[len(lines):]
        assert [(li.description, li.amount) for li in tail] == [
            ("Volunteer credit", Decimal("-25.00")),
            ("Late fee", Decimal("5.00")),
            ("Field trip", Decimal("15.00")),
        ]
        assert all(li.item_type == LineItemType.ADJUSTMENT for li in tail)
        assert result.base_total == Decimal("135.00")
        assert result.adjusted_total == Decimal("130.00")
        assert [a.description for a in result.adjustments] == [
            "Volunteer credit",
            "Late fee",
            "Field trip",
        ]

    def test_adjustments_on_same_date_are_ordered_by_id(self):
        adjustments = [
            _adjustment("1", date(2025, 9, 1), "second", adjustment_id=2),
            _adjustment("1", date(2025, 9, 1), "first", adjustment_id=1),
        ]
        result = reconcile(Decimal("0"), [], adjustments, [], {})

        assert [li.description for li in result.line_items] == ["first", "second"]

    def test_payments_are_sorted_and_not_line_items(self):
        lines, base_total = _example_lines()
        payments = [
            _payment("50.00", date(2025, 11, 1)),
            _payment("25.00", date(2025, 9, 1)),
        ]
        result = reconcile(base_total, lines, [], payments, FEE_SETTINGS)

        assert len(result.line_items) == len(lines)
        assert [p.payment_date for p in result.payments] == [date(2025, 9, 1), date(2025, 11, 1)]
        assert result.total_paid == Decimal("75.00")
        assert result.balance == Decimal("60.00")

    def test_negative_payment_still_reduces_balance(self):
        result = reconcile(
            Decimal("100.00"), [], [], [_payment("-40.00", date(2025, 9, 1))], {}
        )

        assert result.total_paid == Decimal("40.00")
        assert result.balance == Decimal("60.00")

    def test_unparsable_amounts_count_as_zero(self):
        result = reconcile(
            Decimal("100.00"),
            [],
            [_adjustment("oops", date(2025, 9, 1), "Typo")],
            [_payment("abc", date(2025, 9, 1))],
            {},
        )

        assert result.line_items[-1].amount == Decimal("0.00")
        assert result.total_paid == Decimal("0.00")
        assert result.balance == Decimal("100.00")

    def test_missing_settings_raise(self):
        with pytest.raises(PreconditionError):
            reconcile(Decimal("0"), [], [], [], None)

    def test_result_is_immutable(self):
        result = reconcile(Decimal("10.00"), [], [], [], {})
        with pytest.raises(Exception):
            result.balance = Decimal("0")

    def test_same_input_gives_identical_result(self):
        adjustments = [_adjustment("-10", date(2025, 9, 2), "Credit")]
        payments = [_payment("20", date(2025, 9, 3))]

        lines_a, total_a = _example_lines()
        first = reconcile(total_a, lines_a, adjustments, payments, PAYPAL_SETTINGS, True)
        lines_b, total_b = _example_lines()
        second = reconcile(total_b, lines_b, adjustments, payments, PAYPAL_SETTINGS, True)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()


class TestConservation:
    """Exact decimal totals over many line items."""

    def test_fifty_small_amounts_sum_exactly(self):
        courses = [
            {"course_name": f"Course {n}", "fee": "0.10", "book_rental": "0.20"} for n in range(7)
        ]
        slots = dict(
            math_hour="Course 0",
            first_hour="Course 1",
            second_hour="Course 2",
            third_hour="Course 3",
            fourth_hour="Course 4",
            fifth_hour_fall="Course 5",
            fifth_hour_spring="Course 6",
        )
        students = [
            {"first_name": name, "last_name": "Miller", "grad_year": year, **slots}
            for name, year in (("Ann", "2030"), ("Bob", "2032"), ("Cy", "2034"))
        ]
        lines, base_total = compute_line_items(
            {"id": 7, "last_name": "Miller"}, students, courses, {}, FEE_SETTINGS
        )
        adjustments = [
            _adjustment(amount, date(2025, 9, day), f"adj {day}")
            for day, amount in enumerate(("-0.10", "0.20", "-0.30", "0.70"), start=1)
        ]
        result = reconcile(base_total, lines, adjustments, [], FEE_SETTINGS)

        assert len(result.line_items) == 50
        assert result.adjusted_total == sum(li.amount for li in result.line_items)
        assert result.adjusted_total == Decimal("86.80")


class TestPaymentStatus:
    """Payment status classification around zero."""

    @pytest.mark.parametrize(
        ("payment", "expected_balance", "expected_status"),
        [
            ("100.01", Decimal("-0.01"), PaymentStatus.OVERPAID),
            ("100.00", Decimal("0.00"), PaymentStatus.PAID),
            ("99.99", Decimal("0.01"), PaymentStatus.PARTIAL),
        ],
    )
    def test_boundaries_with_payment(self, payment, expected_balance, expected_status):
        result = reconcile(
            Decimal("100.00"), [], [], [_payment(payment, date(2025, 9, 1))], {}
        )

        assert result.balance == expected_balance
        assert result.payment_status == expected_status

    def test_unpaid_when_nothing_paid(self):
        result = reconcile(Decimal("0.01"), [], [], [], {})

        assert result.balance == Decimal("0.01")
        assert result.payment_status == PaymentStatus.UNPAID

    def test_credit_without_payment_is_overpaid(self):
        result = reconcile(
            Decimal("20.00"), [], [_adjustment("-20.01", date(2025, 9, 1), "Credit")], [], {}
        )

        assert result.balance == Decimal("-0.01")
        assert result.payment_status == PaymentStatus.OVERPAID

    def test_classify(self):
        assert classify_payment_status(Decimal("0"), Decimal("0")) == PaymentStatus.PAID
        assert classify_payment_status(Decimal("0"), Decimal("5")) == PaymentStatus.UNPAID
        assert classify_payment_status(Decimal("1"), Decimal("5")) == PaymentStatus.PARTIAL
        assert classify_payment_status(Decimal("9"), Decimal("-1")) == PaymentStatus.OVERPAID


class TestSurcharge:
    """Processor surcharge on the outstanding balance."""

    def test_surcharge_on_example_balance(self):
        lines, base_total = _example_lines()
        result = reconcile(
            base_total,
            lines,
            [],
            [_payment("100.00", date(2025, 9, 1))],
            PAYPAL_SETTINGS,
            include_surcharge=True,
        )

        # 35.00 * 2.9% + 0.30, not rounded to cents
        assert result.surcharge == Decimal("1.315")
        assert result.total_with_surcharge == Decimal("136.315")
        assert result.balance_with_surcharge == Decimal("36.315")
        assert result.balance == Decimal("35.00")

        quote = surcharge_quote(result)
        assert quote is not None
        assert quote.surcharge == Decimal("1.315")

    def test_surcharge_uses_balance_not_total(self):
        settings = {"PayPalPercentage": "10", "PayPalFixedRate": "0"}
        result = reconcile(
            Decimal("200.00"),
            [],
            [],
            [_payment("100.00", date(2025, 9, 1))],
            settings,
            include_surcharge=True,
        )

        assert result.surcharge == Decimal("10.00")
        assert result.total_with_surcharge == Decimal("210.00")
        assert result.balance_with_surcharge == Decimal("110.00")

    @pytest.mark.parametrize("payment", ["200.00", "250.00"])
    def test_no_surcharge_when_nothing_owed(self, payment):
        result = reconcile(
            Decimal("200.00"),
            [],
            [],
            [_payment(payment, date(2025, 9, 1))],
            PAYPAL_SETTINGS,
            include_surcharge=True,
        )

        assert result.surcharge is None
        assert result.total_with_surcharge is None
        assert result.balance_with_surcharge is None
        assert surcharge_quote(result) is None

    def test_no_surcharge_unless_requested(self):
        result = reconcile(Decimal("50.00"), [], [], [], PAYPAL_SETTINGS)
        assert result.surcharge is None

    @pytest.mark.parametrize(
        "settings",
        [
            {"PayPalPercentage": "2.9"},
            {"PayPalFixedRate": "0.30"},
            {"PayPalPercentage": "two", "PayPalFixedRate": "0.30"},
            {"PayPalPercentage": "2.9", "PayPalFixedRate": ""},
        ],
    )
    def test_no_surcharge_without_both_rates(self, settings):
        assert compute_surcharge(Decimal("50.00"), settings) is None

    def test_compute_surcharge(self):
        assert compute_surcharge(Decimal("100.00"), PAYPAL_SETTINGS) == Decimal("3.20")
        assert compute_surcharge(Decimal("0.01"), PAYPAL_SETTINGS) == Decimal("0.30029")
        assert compute_surcharge(Decimal("0.00"), PAYPAL_SETTINGS) is None

    @pytest.mark.parametrize(
        "settings",
        [
            {"PayPalPercentage": "1e30", "PayPalFixedRate": "0"},
            {"PayPalPercentage": "2.9", "PayPalFixedRate": "1e30"},
        ],
    )
    def test_huge_rates_do_not_raise(self, settings):
        result = reconcile(Decimal("35.00"), [], [], [], settings, include_surcharge=True)

        assert result.balance == Decimal("35.00")
        assert result.surcharge is not None
        assert result.surcharge > Decimal("1e27")
        assert result.balance_with_surcharge == result.total_with_surcharge

    def test_overflowing_rates_give_no_surcharge(self):
        settings = {"PayPalPercentage": "9e999999", "PayPalFixedRate": "0"}

        result = reconcile(
            Decimal("10000000000.00"), [], [], [], settings, include_surcharge=True
        )

        assert result.surcharge is None
        assert result.total_with_surcharge is None


class TestMissingHistory:
    """No adjustments or payments recorded yet."""

    def test_none_is_treated_as_empty(self):
        lines, base_total = _example_lines()

        result = reconcile(base_total, lines, None, None, FEE_SETTINGS)

        assert result.line_items == lines
        assert result.adjusted_total == Decimal("135.00")
        assert result.total_paid == Decimal("0.00")
        assert result.payment_status == PaymentStatus.UNPAID
        assert result.payments == ()
        assert result.adjustments == ()
