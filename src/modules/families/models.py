"""Family and Student models."""

from sqlalchemy import BigInteger, Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel

# Stored in a Student hour slot when the student takes no course that hour
NO_COURSE = "NO_COURSE"


class Family(BaseModel):
    """Billing unit: parents plus zero or more students."""

    __tablename__ = "families"

    last_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    father: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mother: Mapped[str | None] = mapped_column(String(100), nullable=True)
    needs_background_check: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    # Relationships
    students: Mapped[list["Student"]] = relationship("Student", back_populates="family")


class Student(BaseModel):
    """Student enrolled through a family.

    Hour slots hold a course name (joined to Course.course_name, not by id),
    the NO_COURSE sentinel, or NULL.
    """

    __tablename__ = "students"

    family_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("families.id"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    grad_year: Mapped[str | None] = mapped_column(String(10), nullable=True)
    inactive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Hour slots
    math_hour: Mapped[str | None] = mapped_column(String(200), nullable=True)
    first_hour: Mapped[str | None] = mapped_column(String(200), nullable=True)
    second_hour: Mapped[str | None] = mapped_column(String(200), nullable=True)
    third_hour: Mapped[str | None] = mapped_column(String(200), nullable=True)
    fourth_hour: Mapped[str | None] = mapped_column(String(200), nullable=True)
    fifth_hour_fall: Mapped[str | None] = mapped_column(String(200), nullable=True)
    fifth_hour_spring: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Relationships
    family: Mapped["Family"] = relationship("Family", back_populates="students")
