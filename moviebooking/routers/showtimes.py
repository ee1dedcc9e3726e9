from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.database.database import get_db
from moviebooking.schemas.schemas import MAX_ID, ShowtimeOut
from moviebooking.services import showtime_service

router = APIRouter()


@router.get("/{showtime_id}", response_model=ShowtimeOut)
async def get_showtime(
    showtime_id: int = Path(ge=1, le=MAX_ID), db: AsyncSession = Depends(get_db)
):
    return await showtime_service.get_showtime_by_id(db, showtime_id)
