"""Payment and BillAdjustment models."""

from datetime import date
from decimal import Decimal

from sqlalchemy import BigInteger, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel, MoneyAmount


class Payment(BaseModel):
    """
    Payment received from a family.

    Stored positive; always reduces the family's balance.
    """

    __tablename__ = "payments"

    family_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("families.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class BillAdjustment(BaseModel):
    """
    Manual correction to a family's bill.

    Signed: negative amounts are credits, positive amounts are extra charges.
    """

    __tablename__ = "bill_adjustments"

    family_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("families.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    adjustment_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
