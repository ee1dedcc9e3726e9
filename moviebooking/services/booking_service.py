"""
Booking lifecycle: create, cancel and list bookings.

A booking and the seats it takes out of the showtime's pool are committed in
the same transaction. Cancellation flips the status with a conditional update
so a booking is cancelled at most once, and returns its seats to the pool.
"""

from typing import List, Optional, Sequence

from sqlalchemy import and_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moviebooking.core.exceptions import (
    InvalidStateError,
    NotFoundError,
    SeatUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from moviebooking.core.logger_config import logger
from moviebooking.model.model import Booking, BookingStatus, Movie, Showtime, User, UserRole
from moviebooking.notification.email import EmailSender, dispatch_booking_confirmation
from moviebooking.services.seat_inventory import SeatInventory, validate_seat_request


def format_showtime(showtime: Showtime) -> str:
    return showtime.time.strftime("%a, %d %b %Y %I:%M %p") if showtime.time else ""


async def create_booking(
    db: AsyncSession,
    user: User,
    movie_id: Optional[int],
    showtime_id: int,
    seats: Sequence[str],
    sender: Optional[EmailSender] = None,
) -> Booking:
    showtime = await db.get(Showtime, showtime_id)
    if not showtime:
        raise NotFoundError("Showtime not found")
    if movie_id is not None and movie_id != showtime.movie_id:
        raise ValidationError("Showtime does not belong to this movie")
    movie = await db.get(Movie, showtime.movie_id)
    if not movie:
        raise NotFoundError("Movie not found")

    requested = validate_seat_request(seats)
    user_id, user_email, user_name = user.id, user.email, user.name

    booking = Booking(
        user_id=user_id,
        movie_id=movie.id,
        showtime_id=showtime.id,
        seats=requested,
        status=BookingStatus.CONFIRMED,
    )
    db.add(booking)
    await db.flush()
    try:
        await SeatInventory(db).reserve(showtime.id, requested, booking.id)
    except SeatUnavailableError:
        await db.rollback()
        raise
    await db.commit()
    logger.info(
        f"Booking {booking.id} confirmed for user {user_id}: "
        f"showtime {showtime.id}, seats {','.join(requested)}"
    )

    if sender is not None:
        dispatch_booking_confirmation(
            sender, user_email, user_name, movie.title, format_showtime(showtime), requested
        )
    return booking


async def cancel_booking(db: AsyncSession, user: User, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id != user.id:
        raise UnauthorizedError("Not authorized")
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidStateError("Booking is already cancelled")

    res = await db.execute(
        update(Booking)
        .where(and_(Booking.id == booking_id, Booking.status == BookingStatus.CONFIRMED))
        .values(status=BookingStatus.CANCELLED)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise InvalidStateError("Booking is already cancelled")
    await SeatInventory(db).release(booking.showtime_id, booking.seats)
    await db.commit()
    await db.refresh(booking)
    logger.info(f"Booking {booking_id} cancelled, seats {','.join(booking.seats)} released")
    return booking


async def get_booking(db: AsyncSession, user: User, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id != user.id and user.role != UserRole.ADMIN:
        raise UnauthorizedError("Not authorized")
    return booking


async def list_user_bookings(db: AsyncSession, user: User) -> List[dict]:
    q = (
        select(Booking)
        .where(Booking.user_id == user.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    res = await db.execute(q)
    bookings = res.scalars().all()
    if not bookings:
        return []

    movie_ids = {b.movie_id for b in bookings}
    showtime_ids = {b.showtime_id for b in bookings}
    movies = {
        m.id: m
        for m in (await db.execute(select(Movie).where(Movie.id.in_(movie_ids)))).scalars()
    }
    showtimes = {
        s.id: s
        for s in (
            await db.execute(select(Showtime).where(Showtime.id.in_(showtime_ids)))
        ).scalars()
    }

    history = []
    for b in bookings:
        movie = movies.get(b.movie_id)
        showtime = showtimes.get(b.showtime_id)
        history.append(
            {
                "id": b.id,
                "user_id": b.user_id,
                "movie_id": b.movie_id,
                "showtime_id": b.showtime_id,
                "seats": b.seats,
                "status": b.status,
                "created_at": b.created_at,
                "movie": {
                    "id": movie.id,
                    "title": movie.title,
                    "poster": movie.poster,
                    "ticket_price": movie.ticket_price,
                }
                if movie
                else None,
                "showtime": {"id": showtime.id, "time": showtime.time} if showtime else None,
            }
        )
    return history
