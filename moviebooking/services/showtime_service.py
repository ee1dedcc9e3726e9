from datetime import datetime
from typing import Dict, List, Sequence

from sqlalchemy import and_, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moviebooking.core.exceptions import NotFoundError
from moviebooking.core.logger_config import logger
from moviebooking.model.model import Movie, SeatStatus, Showtime, ShowtimeSeat
from moviebooking.services.seat_inventory import SeatInventory


async def showtime_views(db: AsyncSession, showtimes: Sequence[Showtime]) -> List[dict]:
    """Attach each showtime's available seats, fetched in one query."""
    ids = [s.id for s in showtimes]
    pools: Dict[int, List[str]] = {i: [] for i in ids}
    if ids:
        q = (
            select(ShowtimeSeat.showtime_id, ShowtimeSeat.label)
            .where(
                and_(
                    ShowtimeSeat.showtime_id.in_(ids),
                    ShowtimeSeat.status == SeatStatus.AVAILABLE,
                )
            )
            .order_by(ShowtimeSeat.showtime_id, ShowtimeSeat.row_label, ShowtimeSeat.seat_number)
        )
        res = await db.execute(q)
        for showtime_id, label in res.all():
            pools[showtime_id].append(label)
    return [
        {"id": s.id, "movie_id": s.movie_id, "time": s.time, "available_seats": pools[s.id]}
        for s in showtimes
    ]


async def create_showtime(db: AsyncSession, movie_id: int, time: datetime) -> dict:
    movie = await db.get(Movie, movie_id)
    if not movie:
        raise NotFoundError("Movie not found")
    showtime = Showtime(movie_id=movie_id, time=time)
    db.add(showtime)
    await db.flush()
    await SeatInventory(db).initialize(showtime.id)
    await db.commit()
    logger.info(f"Showtime {showtime.id} created for movie {movie_id} at {time.isoformat()}")
    return (await showtime_views(db, [showtime]))[0]


async def get_showtime_by_id(db: AsyncSession, showtime_id: int) -> dict:
    showtime = await db.get(Showtime, showtime_id)
    if not showtime:
        raise NotFoundError("Showtime not found")
    return (await showtime_views(db, [showtime]))[0]


async def list_showtimes_by_movie(db: AsyncSession, movie_id: int) -> List[dict]:
    q = select(Showtime).where(Showtime.movie_id == movie_id).order_by(Showtime.time, Showtime.id)
    res = await db.execute(q)
    return await showtime_views(db, res.scalars().all())


async def delete_showtime(db: AsyncSession, showtime_id: int) -> None:
    # bookings for this showtime are intentionally left in place
    showtime = await db.get(Showtime, showtime_id)
    if not showtime:
        raise NotFoundError("Showtime not found")
    await db.execute(delete(ShowtimeSeat).where(ShowtimeSeat.showtime_id == showtime_id))
    await db.execute(delete(Showtime).where(Showtime.id == showtime_id))
    await db.commit()
    logger.info(f"Showtime {showtime_id} removed")
