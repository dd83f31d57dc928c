"""API endpoints for Invoices module."""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.core.exceptions import NotFoundError
from src.modules.invoices.locator import TOKEN_LENGTH
from src.modules.invoices.schemas import (
    FamilyInvoice,
    FamilyLink,
    InvoiceSummary,
    SurchargeQuote,
)
from src.modules.invoices.service import InvoiceService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/invoices", tags=["Invoices"])
public_router = APIRouter(prefix="/public/invoices", tags=["Public"])


# --- Admin ---


@router.get(
    "",
    response_model=ApiResponse[list[InvoiceSummary]],
)
async def list_invoice_summaries(
    db: AsyncSession = Depends(get_db),
):
    """Balance summary of every active family (admin invoice grid)."""
    service = InvoiceService(db)
    summaries = await service.calculate_all_family_summaries()
    return ApiResponse(data=summaries)


@router.get(
    "/families/{family_id}",
    response_model=ApiResponse[FamilyInvoice],
)
async def get_family_invoice(
    family_id: int,
    include_surcharge: bool = Query(False, description="Add the online payment surcharge"),
    db: AsyncSession = Depends(get_db),
):
    """Full invoice of one family."""
    service = InvoiceService(db)
    invoice = await service.calculate_family_invoice(family_id, include_surcharge)
    return ApiResponse(data=invoice)


@router.get(
    "/families/{family_id}/surcharge",
    response_model=ApiResponse[SurchargeQuote],
)
async def get_family_surcharge(
    family_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Surcharge for paying the outstanding balance online. 404 when none applies."""
    service = InvoiceService(db)
    quote = await service.calculate_surcharge(family_id)
    if quote is None:
        raise NotFoundError("Surcharge")
    return ApiResponse(data=quote)


@router.get(
    "/families/{family_id}/link",
    response_model=ApiResponse[FamilyLink],
)
async def get_family_link(
    family_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Shareable invoice and schedule links for a family."""
    service = InvoiceService(db)
    link = await service.get_family_link(family_id)
    return ApiResponse(data=link)


# --- Public (token) ---


@public_router.get(
    "/{token}",
    response_model=ApiResponse[FamilyInvoice],
)
async def get_public_invoice(
    token: str = Path(..., max_length=64),
    include_surcharge: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Invoice behind a public link. Unknown or malformed tokens get 404."""
    service = InvoiceService(db)
    invoice = None
    if len(token) == TOKEN_LENGTH:
        invoice = await service.get_family_invoice_by_token(token, include_surcharge)
    if invoice is None:
        raise NotFoundError("Invoice")
    return ApiResponse(data=invoice)
