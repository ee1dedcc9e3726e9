from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.security import require_admin
from moviebooking.database.database import get_db
from moviebooking.model.model import User
from moviebooking.schemas.schemas import (
    MAX_ID, MessageOut, MovieDetailOut, MovieIn, MovieOut, MovieUpdate, ShowtimeOut
)
from moviebooking.services import movie_service, showtime_service

router = APIRouter()


@router.get("", response_model=List[MovieOut])
async def list_movies(db: AsyncSession = Depends(get_db)):
    return await movie_service.list_movies(db)


# must stay above /{movie_id}
@router.get("/showtimes", response_model=List[ShowtimeOut])
async def showtimes_for_movie(
    movie_id: int = Query(alias="movieId", ge=1, le=MAX_ID), db: AsyncSession = Depends(get_db)
):
    return await showtime_service.list_showtimes_by_movie(db, movie_id)


@router.get("/{movie_id}", response_model=MovieDetailOut)
async def get_movie(
    movie_id: int = Path(ge=1, le=MAX_ID), db: AsyncSession = Depends(get_db)
):
    return await movie_service.get_movie_with_showtimes(db, movie_id)


@router.post("", response_model=MovieOut, status_code=201)
async def create_movie(
    payload: MovieIn, db: AsyncSession = Depends(get_db), admin: User = Depends(require_admin)
):
    return await movie_service.create_movie(db, admin, payload)


@router.put("/{movie_id}", response_model=MovieOut)
async def update_movie(
    payload: MovieUpdate,
    movie_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await movie_service.update_movie(db, movie_id, payload)


@router.delete("/{movie_id}", response_model=MessageOut)
async def delete_movie(
    movie_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await movie_service.delete_movie(db, movie_id)
    return {"message": "Movie and related showtimes/bookings removed"}
