"""Service for Invoices module.

Fetches a point-in-time snapshot through the repository and hands it to the
pure engine (calculator, reconciliation, locator). Every screen that shows
money (admin grid, family invoice, public invoice) goes through here.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings as app_config
from src.core.exceptions import NotFoundError, PreconditionError
from src.modules.invoices.calculator import (
    build_grade_names,
    build_hour_labels,
    compute_line_items,
    index_courses,
)
from src.modules.invoices.locator import hash_for_family, token_index
from src.modules.invoices.reconciliation import reconcile, surcharge_quote
from src.modules.invoices.repository import FamilyLedgerRepository, InvoiceRepository
from src.modules.invoices.schemas import (
    CourseSnapshot,
    FamilyInvoice,
    FamilyLink,
    FamilySnapshot,
    InvoiceSummary,
    SurchargeQuote,
    as_snapshot,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Catalogs:
    """Family-independent inputs, loaded once per request."""

    courses: tuple[CourseSnapshot, ...]
    hour_labels: dict[int, str]
    grade_names: dict[int, str]
    settings: dict[str, str]


class InvoiceService:
    """Service for computing family invoices."""

    def __init__(
        self,
        db: AsyncSession | None = None,
        *,
        repository: InvoiceRepository | None = None,
    ):
        if repository is None:
            if db is None:
                raise ValueError("InvoiceService needs a session or a repository")
            repository = FamilyLedgerRepository(db)
        self.repository = repository

    # --- Helper Methods ---

    async def load_catalogs(self) -> Catalogs:
        """Load courses, hours, grades and settings; all four are required."""
        courses = await self.repository.get_courses()
        hours = await self.repository.get_hours()
        grades = await self.repository.get_grades()
        settings = await self.repository.get_settings()

        for resource, value in (
            ("Course catalog", courses),
            ("Hour catalog", hours),
            ("Grade catalog", grades),
            ("Settings", settings),
        ):
            if value is None:
                logger.warning("Cannot compute invoices: %s unavailable", resource)
                raise PreconditionError(resource)

        return Catalogs(
            courses=tuple(index_courses(courses).values()),
            hour_labels=build_hour_labels(hours),
            grade_names=build_grade_names(grades),
            settings=dict(settings),
        )

    async def get_family_snapshot(self, family_id: int) -> FamilySnapshot:
        family = await self.repository.get_family(family_id)
        if family is None:
            logger.warning("Cannot compute invoice: family %s not found", family_id)
            raise PreconditionError("Family", identifier=family_id, status_code=404)
        return as_snapshot(FamilySnapshot, family)

    async def _calculate(
        self,
        family: FamilySnapshot,
        catalogs: Catalogs,
        include_surcharge: bool,
    ) -> FamilyInvoice:
        students = await self.repository.get_students_by_family(family.id)
        payments = await self.repository.get_payments_by_family(family.id)
        adjustments = await self.repository.get_bill_adjustments_by_family(family.id)

        line_items, base_total = compute_line_items(
            family,
            students,
            catalogs.courses,
            catalogs.hour_labels,
            catalogs.settings,
            catalogs.grade_names,
        )
        result = reconcile(
            base_total,
            line_items,
            adjustments,
            payments,
            catalogs.settings,
            include_surcharge=include_surcharge,
        )
        return FamilyInvoice(family=family, token=hash_for_family(family.id), invoice=result)

    async def active_family_ids(self) -> list[int]:
        families = await self.repository.get_families()
        return [
            snapshot.id
            for snapshot in (as_snapshot(FamilySnapshot, f) for f in families)
            if snapshot.active
        ]

    # --- Invoices ---

    async def calculate_family_invoice(
        self, family_id: int, include_surcharge: bool = False
    ) -> FamilyInvoice:
        """
        Compute the invoice for one family.

        Raises:
            PreconditionError: family or a required catalog is missing.
        """
        family = await self.get_family_snapshot(family_id)
        catalogs = await self.load_catalogs()
        return await self._calculate(family, catalogs, include_surcharge)

    async def calculate_all_family_summaries(self) -> list[InvoiceSummary]:
        """Invoice summary for every active family, sorted by last name."""
        families = [as_snapshot(FamilySnapshot, f) for f in await self.repository.get_families()]
        catalogs = await self.load_catalogs()

        summaries: list[InvoiceSummary] = []
        for family in families:
            if not family.active:
                continue
            invoice = (await self._calculate(family, catalogs, include_surcharge=False)).invoice
            last_payment_date = (
                max(p.payment_date for p in invoice.payments) if invoice.payments else None
            )
            summaries.append(
                InvoiceSummary(
                    family_id=family.id,
                    last_name=family.last_name,
                    father=family.father,
                    mother=family.mother,
                    needs_background_check=family.needs_background_check,
                    total_amount=invoice.adjusted_total,
                    total_paid=invoice.total_paid,
                    balance=invoice.balance,
                    last_payment_date=last_payment_date,
                    payment_status=invoice.payment_status,
                )
            )

        return sorted(summaries, key=lambda s: (s.last_name.casefold(), s.last_name, s.family_id))

    async def calculate_surcharge(self, family_id: int) -> SurchargeQuote | None:
        """Processor surcharge for paying the family's balance online, if any applies."""
        invoice = await self.calculate_family_invoice(family_id, include_surcharge=True)
        return surcharge_quote(invoice.invoice)

    # --- Public links ---

    async def resolve_token(self, token: str) -> int | None:
        """Active family id for a public token, or None."""
        token_index.sync(await self.active_family_ids())
        family_id = token_index.resolve(token)
        if family_id is None:
            logger.info("No active family for public token %r", token)
        return family_id

    async def get_family_invoice_by_token(
        self, token: str, include_surcharge: bool = False
    ) -> FamilyInvoice | None:
        family_id = await self.resolve_token(token)
        if family_id is None:
            return None
        return await self.calculate_family_invoice(family_id, include_surcharge)

    async def get_family_link(self, family_id: int) -> FamilyLink:
        family = await self.repository.get_family(family_id)
        if family is None:
            raise NotFoundError("Family", family_id)
        family = as_snapshot(FamilySnapshot, family)
        token = hash_for_family(family.id)
        return FamilyLink(
            family_id=family.id,
            token=token,
            invoice_url=app_config.public_invoice_url(token),
            schedule_url=app_config.public_schedule_url(token),
        )
