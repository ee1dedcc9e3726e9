from typing import List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moviebooking.core.exceptions import NotFoundError
from moviebooking.core.logger_config import logger
from moviebooking.model.model import Booking, Movie, Showtime, ShowtimeSeat, User
from moviebooking.schemas.schemas import MovieIn, MovieUpdate
from moviebooking.services.showtime_service import list_showtimes_by_movie


async def list_movies(db: AsyncSession) -> List[Movie]:
    res = await db.execute(select(Movie).order_by(Movie.created_at.desc(), Movie.id.desc()))
    return list(res.scalars().all())


async def get_movie(db: AsyncSession, movie_id: int) -> Movie:
    movie = await db.get(Movie, movie_id)
    if not movie:
        raise NotFoundError("Movie not found")
    return movie


async def get_movie_with_showtimes(db: AsyncSession, movie_id: int) -> dict:
    movie = await get_movie(db, movie_id)
    detail = {c.name: getattr(movie, c.name) for c in Movie.__table__.columns}
    detail["showtimes"] = await list_showtimes_by_movie(db, movie_id)
    return detail


async def create_movie(db: AsyncSession, creator: User, payload: MovieIn) -> Movie:
    movie = Movie(**payload.model_dump(), created_by=creator.id)
    db.add(movie)
    await db.commit()
    await db.refresh(movie)
    logger.info(f"Movie {movie.id} '{movie.title}' created by user {creator.id}")
    return movie


async def update_movie(db: AsyncSession, movie_id: int, payload: MovieUpdate) -> Movie:
    movie = await get_movie(db, movie_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(movie, field, value)
    await db.commit()
    await db.refresh(movie)
    return movie


async def delete_movie(db: AsyncSession, movie_id: int) -> None:
    """Remove a movie together with its showtimes, their seats and all its bookings."""
    movie = await get_movie(db, movie_id)
    showtime_ids = select(Showtime.id).where(Showtime.movie_id == movie.id)
    await db.execute(delete(ShowtimeSeat).where(ShowtimeSeat.showtime_id.in_(showtime_ids)))
    await db.execute(delete(Showtime).where(Showtime.movie_id == movie.id))
    await db.execute(delete(Booking).where(Booking.movie_id == movie.id))
    await db.execute(delete(Movie).where(Movie.id == movie.id))
    await db.commit()
    logger.info(f"Movie {movie_id} and related showtimes/bookings removed")
