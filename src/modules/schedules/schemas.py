"""Schemas for family schedules (public schedule page)."""

from src.modules.invoices.schemas import FamilySnapshot
from src.shared.schemas.base import FrozenSchema


class ScheduleSlot(FrozenSchema):
    """One teaching hour of a student's day. course_name is None for a free hour."""

    hour: str
    course_name: str | None = None
    location: str | None = None


class StudentSchedule(FrozenSchema):
    student_id: int | None = None
    first_name: str
    last_name: str
    grade: str
    slots: tuple[ScheduleSlot, ...]


class FamilySchedule(FrozenSchema):
    family: FamilySnapshot
    token: str
    students: tuple[StudentSchedule, ...]
