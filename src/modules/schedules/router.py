"""API endpoints for family schedules."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.core.exceptions import NotFoundError
from src.modules.schedules.schemas import FamilySchedule
from src.modules.schedules.service import ScheduleService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/schedules", tags=["Schedules"])
public_router = APIRouter(prefix="/public/schedules", tags=["Public"])


@router.get("/families/{family_id}", response_model=ApiResponse[FamilySchedule])
async def get_family_schedule(
    family_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Class schedule of every active student in the family."""
    service = ScheduleService(db)
    return ApiResponse(data=await service.get_family_schedule(family_id))


@public_router.get("/{token}", response_model=ApiResponse[FamilySchedule])
async def get_public_schedule(
    token: str = Path(..., max_length=64),
    db: AsyncSession = Depends(get_db),
):
    """Schedule behind a public link. Unknown tokens get 404."""
    service = ScheduleService(db)
    schedule = await service.get_family_schedule_by_token(token)
    if schedule is None:
        raise NotFoundError("Schedule")
    return ApiResponse(data=schedule)
