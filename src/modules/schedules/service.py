"""Service for family schedules."""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import PreconditionError
from src.modules.invoices.calculator import (
    HOUR_SLOTS,
    current_grade_label,
    index_courses,
    is_course_selection,
    order_students,
    slot_label,
)
from src.modules.invoices.locator import hash_for_family
from src.modules.invoices.repository import InvoiceRepository
from src.modules.invoices.schemas import FamilySnapshot, as_snapshot
from src.modules.invoices.service import InvoiceService
from src.modules.schedules.schemas import FamilySchedule, ScheduleSlot, StudentSchedule


def build_family_schedule(
    family: Any,
    students: Sequence[Any],
    courses: Sequence[Any],
    hour_labels: Mapping[int, str],
    settings: Mapping[str, str | None],
    grade_names: Mapping[int, str],
) -> FamilySchedule:
    """Active students in invoice order, each with all seven hour slots."""
    if family is None:
        raise PreconditionError("Family", status_code=404)
    family = as_snapshot(FamilySnapshot, family)
    courses_by_name = index_courses(courses)

    schedules = []
    for student in order_students(students):
        slots = []
        for slot in HOUR_SLOTS:
            course_name = getattr(student, slot.field)
            if not is_course_selection(course_name):
                slots.append(ScheduleSlot(hour=slot_label(slot, hour_labels)))
                continue
            course = courses_by_name.get(course_name)
            slots.append(
                ScheduleSlot(
                    hour=slot_label(slot, hour_labels),
                    course_name=course_name,
                    location=course.location if course else None,
                )
            )
        schedules.append(
            StudentSchedule(
                student_id=student.id,
                first_name=student.first_name,
                last_name=student.last_name,
                grade=current_grade_label(student.grad_year, settings, grade_names),
                slots=tuple(slots),
            )
        )

    return FamilySchedule(
        family=family,
        token=hash_for_family(family.id),
        students=tuple(schedules),
    )


class ScheduleService:
    """Family schedules, reusing the invoice service's data loading and token lookup."""

    def __init__(
        self,
        db: AsyncSession | None = None,
        *,
        repository: InvoiceRepository | None = None,
    ):
        self.invoices = InvoiceService(db, repository=repository)
        self.repository = self.invoices.repository

    async def get_family_schedule(self, family_id: int) -> FamilySchedule:
        family = await self.invoices.get_family_snapshot(family_id)
        catalogs = await self.invoices.load_catalogs()
        students = await self.repository.get_students_by_family(family.id)
        return build_family_schedule(
            family,
            students,
            catalogs.courses,
            catalogs.hour_labels,
            catalogs.settings,
            catalogs.grade_names,
        )

    async def get_family_schedule_by_token(self, token: str) -> FamilySchedule | None:
        family_id = await self.invoices.resolve_token(token)
        if family_id is None:
            return None
        return await self.get_family_schedule(family_id)
