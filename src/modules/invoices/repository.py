"""Read-only data access for invoice and schedule computation."""

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.app_settings.service import get_settings_map
from src.modules.courses.models import Course, Grade, Hour
from src.modules.families.models import Family, Student
from src.modules.payments.models import BillAdjustment, Payment


class InvoiceRepository(Protocol):
    """What the invoice service needs from persistence.

    Methods returning ``None`` signal that the data is unavailable; an empty
    sequence is a valid (empty) answer.
    """

    async def get_family(self, family_id: int) -> object | None: ...

    async def get_families(self) -> Sequence[object]: ...

    async def get_students_by_family(self, family_id: int) -> Sequence[object]: ...

    async def get_courses(self) -> Sequence[object] | None: ...

    async def get_grades(self) -> Sequence[object] | None: ...

    async def get_hours(self) -> Sequence[object] | None: ...

    async def get_settings(self) -> dict[str, str] | None: ...

    async def get_payments_by_family(self, family_id: int) -> Sequence[object]: ...

    async def get_bill_adjustments_by_family(self, family_id: int) -> Sequence[object]: ...


class FamilyLedgerRepository:
    """SQLAlchemy implementation of InvoiceRepository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_family(self, family_id: int) -> Family | None:
        result = await self.db.execute(select(Family).where(Family.id == family_id))
        return result.scalar_one_or_none()

    async def get_families(self) -> list[Family]:
        """All families ordered by id (the token lookup iteration order)."""
        result = await self.db.execute(select(Family).order_by(Family.id))
        return list(result.scalars().all())

    async def get_students_by_family(self, family_id: int) -> list[Student]:
        """All students of the family, inactive ones included."""
        result = await self.db.execute(
            select(Student).where(Student.family_id == family_id).order_by(Student.id)
        )
        return list(result.scalars().all())

    async def get_courses(self) -> list[Course]:
        result = await self.db.execute(select(Course).order_by(Course.id))
        return list(result.scalars().all())

    async def get_grades(self) -> list[Grade]:
        result = await self.db.execute(select(Grade).order_by(Grade.code))
        return list(result.scalars().all())

    async def get_hours(self) -> list[Hour]:
        result = await self.db.execute(select(Hour).order_by(Hour.id))
        return list(result.scalars().all())

    async def get_settings(self) -> dict[str, str]:
        """Settings as a flat map; rows without a value are left out."""
        return await get_settings_map(self.db)

    async def get_payments_by_family(self, family_id: int) -> list[Payment]:
        result = await self.db.execute(
            select(Payment).where(Payment.family_id == family_id).order_by(Payment.id)
        )
        return list(result.scalars().all())

    async def get_bill_adjustments_by_family(self, family_id: int) -> list[BillAdjustment]:
        result = await self.db.execute(
            select(BillAdjustment)
            .where(BillAdjustment.family_id == family_id)
            .order_by(BillAdjustment.id)
        )
        return list(result.scalars().all())
