from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.security import require_admin
from moviebooking.database.database import get_db
from moviebooking.model.model import User
from moviebooking.schemas.schemas import (
    MAX_ID, DashboardStats, MessageOut, ShowtimeCreate, ShowtimeOut, UserOut
)
from moviebooking.services import admin_service, showtime_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/profile")
async def profile(admin: User = Depends(require_admin)):
    return {"user": UserOut.model_validate(admin)}


@router.get("/stats", response_model=DashboardStats)
async def stats(db: AsyncSession = Depends(get_db)):
    return await admin_service.get_dashboard_stats(db)


@router.get("/showtimes", response_model=List[ShowtimeOut])
async def list_showtimes(
    movie_id: int = Query(alias="movieId", ge=1, le=MAX_ID), db: AsyncSession = Depends(get_db)
):
    return await showtime_service.list_showtimes_by_movie(db, movie_id)


@router.get("/showtimes/{showtime_id}", response_model=ShowtimeOut)
async def get_showtime(
    showtime_id: int = Path(ge=1, le=MAX_ID), db: AsyncSession = Depends(get_db)
):
    return await showtime_service.get_showtime_by_id(db, showtime_id)


@router.post("/showtimes", response_model=ShowtimeOut, status_code=201)
async def create_showtime(payload: ShowtimeCreate, db: AsyncSession = Depends(get_db)):
    return await showtime_service.create_showtime(db, payload.movie_id, payload.time)


@router.delete("/showtimes/{showtime_id}", response_model=MessageOut)
async def delete_showtime(
    showtime_id: int = Path(ge=1, le=MAX_ID), db: AsyncSession = Depends(get_db)
):
    await showtime_service.delete_showtime(db, showtime_id)
    return {"message": "Showtime removed"}
