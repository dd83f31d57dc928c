"""Key/value business settings (fees, school year, payment processor rates)."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class SettingKey:
    """Setting keys read by the invoice engine."""

    FAMILY_FEE = "FamilyFee"
    BACKGROUND_FEE = "BackgroundFee"
    STUDENT_FEE = "StudentFee"
    SCHOOL_YEAR = "SchoolYear"
    PAYPAL_PERCENTAGE = "PayPalPercentage"
    PAYPAL_FIXED_RATE = "PayPalFixedRate"


class AppSetting(BaseModel):
    """One setting row; values are stored as strings and parsed on read."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
