from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moviebooking.model.model import Booking, BookingStatus, Movie, Showtime, User, UserRole


async def _count(db: AsyncSession, q) -> int:
    return (await db.execute(q)).scalar_one()


async def get_dashboard_stats(db: AsyncSession) -> dict:
    return {
        "total_movies": await _count(db, select(func.count()).select_from(Movie)),
        "total_users": await _count(
            db, select(func.count()).select_from(User).where(User.role == UserRole.USER)
        ),
        "total_showtimes": await _count(db, select(func.count()).select_from(Showtime)),
        "total_bookings": await _count(db, select(func.count()).select_from(Booking)),
        "confirmed_bookings": await _count(
            db,
            select(func.count())
            .select_from(Booking)
            .where(Booking.status == BookingStatus.CONFIRMED),
        ),
    }
