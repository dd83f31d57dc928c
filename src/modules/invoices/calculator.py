"""Fee accumulation: family enrollment state -> ordered statement lines.

Order of the emitted lines is fixed:

1. Family Fee
2. Background Check (only when the family needs one)
3. Per active student, youngest first (higher graduation year first), ties
   by last name then first name: Student Fee, then one line per paid course
   in hour-slot order, each optionally followed by its book rental line.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any, NamedTuple

from src.core.exceptions import PreconditionError
from src.modules.app_settings.models import SettingKey
from src.modules.families.models import NO_COURSE
from src.modules.invoices.schemas import (
    CourseSnapshot,
    FamilySnapshot,
    GradeSnapshot,
    HourSnapshot,
    LineItem,
    LineItemType,
    StudentSnapshot,
    as_snapshot,
)
from src.shared.utils.money import ZERO, parse_int_prefix, parse_money

logger = logging.getLogger(__name__)

DEFAULT_FAMILY_FEE = Decimal("20")
DEFAULT_BACKGROUND_FEE = Decimal("0")
DEFAULT_STUDENT_FEE = Decimal("20")
DEFAULT_SCHOOL_YEAR = 2024

# gradeCode = schoolYear - graduationYear + 13
GRADE_CODE_OFFSET = 13
UNKNOWN_GRADE = "Unknown"


class HourSlot(NamedTuple):
    """A Student field holding a course selection for one teaching hour."""

    field: str
    hour_id: int
    default_label: str
    suffix: str = ""


# Fixed iteration order for course lines
HOUR_SLOTS: tuple[HourSlot, ...] = (
    HourSlot("math_hour", 0, "Math"),
    HourSlot("first_hour", 1, "1st"),
    HourSlot("second_hour", 2, "2nd"),
    HourSlot("third_hour", 3, "3rd"),
    HourSlot("fourth_hour", 4, "4th"),
    HourSlot("fifth_hour_fall", 5, "5th", " Fall"),
    HourSlot("fifth_hour_spring", 5, "5th", " Spring"),
)


# --- Lookup helpers ---


def build_hour_labels(hours: Iterable[Any]) -> dict[int, str]:
    """Hour id -> description, skipping hours without a description."""
    labels: dict[int, str] = {}
    for hour in hours:
        hour = as_snapshot(HourSnapshot, hour)
        if hour.description:
            labels[hour.id] = hour.description
    return labels


def build_grade_names(grades: Iterable[Any]) -> dict[int, str]:
    """Grade code -> display name. The first grade with a given code wins."""
    names: dict[int, str] = {}
    for grade in grades:
        grade = as_snapshot(GradeSnapshot, grade)
        names.setdefault(grade.code, grade.grade_name)
    return names


def slot_label(slot: HourSlot, hour_labels: Mapping[int, str]) -> str:
    return (hour_labels.get(slot.hour_id) or slot.default_label) + slot.suffix


def index_courses(courses: Iterable[Any]) -> dict[str, CourseSnapshot]:
    """Course name -> course. Names are the join key; the first duplicate wins."""
    by_name: dict[str, CourseSnapshot] = {}
    for course in courses:
        course = as_snapshot(CourseSnapshot, course)
        by_name.setdefault(course.course_name, course)
    return by_name


def is_course_selection(value: str | None) -> bool:
    """True when an hour slot holds a real course name."""
    return bool(value) and value != NO_COURSE


def parse_grad_year(grad_year: str | None) -> int:
    """Graduation year as int; missing or garbage values become 0."""
    return parse_int_prefix(grad_year, default=0)


def current_grade_code(grad_year: str | None, settings: Mapping[str, str | None]) -> int | None:
    """Grade code for the current school year, or None without a graduation year."""
    if not grad_year:
        return None
    year = parse_int_prefix(grad_year, default=None)
    if year is None:
        return None
    school_year = parse_int_prefix(settings.get(SettingKey.SCHOOL_YEAR), default=DEFAULT_SCHOOL_YEAR)
    return school_year - year + GRADE_CODE_OFFSET


def current_grade_label(
    grad_year: str | None,
    settings: Mapping[str, str | None],
    grade_names: Mapping[int, str],
) -> str:
    code = current_grade_code(grad_year, settings)
    if code is None:
        return UNKNOWN_GRADE
    return grade_names.get(code, UNKNOWN_GRADE)


def fee_setting(settings: Mapping[str, str | None], key: str, default: Decimal) -> Decimal:
    """Numeric fee setting; absent or non-numeric values use ``default``."""
    return parse_money(settings.get(key), default=default)


def order_students(students: Iterable[Any]) -> list[StudentSnapshot]:
    """
    Active students in statement order.

    Higher graduation year (younger) first; unparsable years sort as 0, i.e.
    last. Ties by last name, then first name (ordinal compare).
    """
    active = [
        student
        for student in (as_snapshot(StudentSnapshot, s) for s in students)
        if not student.inactive
    ]
    return sorted(
        active,
        key=lambda s: (
            -parse_grad_year(s.grad_year),
            s.last_name,
            s.first_name,
            s.id if s.id is not None else 0,
        ),
    )


# --- Fee accumulation ---


def _student_course_lines(
    student: StudentSnapshot,
    grade: str | None,
    courses_by_name: Mapping[str, CourseSnapshot],
    hour_labels: Mapping[int, str],
) -> list[LineItem]:
    lines: list[LineItem] = []
    for slot in HOUR_SLOTS:
        course_name = getattr(student, slot.field)
        if not is_course_selection(course_name):
            continue

        course = courses_by_name.get(course_name)
        if course is None:
            logger.debug(
                "Student %s: no course named %r for %s, no fee line",
                student.id,
                course_name,
                slot.field,
            )
            continue

        hour = slot_label(slot, hour_labels)
        fee = parse_money(course.fee)
        if fee > 0:
            lines.append(
                LineItem(
                    item_type=LineItemType.COURSE,
                    description=course_name,
                    amount=fee,
                    student_name=student.first_name,
                    grade=grade,
                    hour=hour,
                    course_name=course_name,
                )
            )
            book_rental = parse_money(course.book_rental)
            if book_rental > 0:
                lines.append(
                    LineItem(
                        item_type=LineItemType.BOOK,
                        description=f"{course_name} - Book Rental",
                        amount=book_rental,
                        student_name=student.first_name,
                        grade=grade,
                        hour=hour,
                        course_name=course_name,
                    )
                )
    return lines


def compute_line_items(
    family: Any,
    students: Sequence[Any],
    courses: Sequence[Any] | None,
    hour_labels: Mapping[int, str] | None,
    settings: Mapping[str, str | None] | None,
    grade_names: Mapping[int, str] | None = None,
) -> tuple[tuple[LineItem, ...], Decimal]:
    """
    Build the fee lines for one family and their total.

    Inactive students are dropped here; callers may pass the family's full
    student list. When ``grade_names`` is given, student rows carry the
    student's current grade label.

    Fee settings and course amounts are read to whole cents (half-up, see
    ``parse_money``): a course stored as "10.005" is billed 10.01. Line
    amounts and the returned total therefore always agree exactly.

    Raises:
        PreconditionError: family, course catalog, hour labels or settings missing.
    """
    if family is None:
        raise PreconditionError("Family", status_code=404)
    if settings is None:
        raise PreconditionError("Settings")
    if courses is None:
        raise PreconditionError("Course catalog")
    if hour_labels is None:
        raise PreconditionError("Hour catalog")

    family = as_snapshot(FamilySnapshot, family)
    courses_by_name = index_courses(courses)

    lines: list[LineItem] = [
        LineItem(
            item_type=LineItemType.FAMILY,
            description="Family Fee",
            amount=fee_setting(settings, SettingKey.FAMILY_FEE, DEFAULT_FAMILY_FEE),
        )
    ]

    if family.needs_background_check:
        lines.append(
            LineItem(
                item_type=LineItemType.BACKGROUND,
                description="Background Check",
                amount=fee_setting(settings, SettingKey.BACKGROUND_FEE, DEFAULT_BACKGROUND_FEE),
            )
        )

    student_fee = fee_setting(settings, SettingKey.STUDENT_FEE, DEFAULT_STUDENT_FEE)
    for student in order_students(students or ()):
        grade = (
            current_grade_label(student.grad_year, settings, grade_names)
            if grade_names is not None
            else None
        )
        lines.append(
            LineItem(
                item_type=LineItemType.STUDENT,
                description="Student Fee",
                amount=student_fee,
                student_name=student.first_name,
                grade=grade,
            )
        )
        lines.extend(_student_course_lines(student, grade, courses_by_name, hour_labels))

    base_total = sum((line.amount for line in lines), ZERO)
    return tuple(lines), base_total
