"""Course catalog, teaching hours and grade lookup models."""

from decimal import Decimal

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base, BaseModel, MoneyAmount


class Course(BaseModel):
    """Catalog entry. Students reference it by course_name."""

    __tablename__ = "courses"

    course_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    fee: Mapped[Decimal | None] = mapped_column(MoneyAmount, nullable=True)
    book_rental: Mapped[Decimal | None] = mapped_column(MoneyAmount, nullable=True)
    hour: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    from_grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    to_grade: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Hour(Base):
    """Teaching hour. id 0 is the math/primary hour, 1..5 the numbered hours."""

    __tablename__ = "hours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    description: Mapped[str] = mapped_column(String(50), nullable=False)


class Grade(Base):
    """Grade code -> display name (e.g. 1 -> "1st")."""

    __tablename__ = "grades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    grade_name: Mapped[str] = mapped_column(String(50), nullable=False)
