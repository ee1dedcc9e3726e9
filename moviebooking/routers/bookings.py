from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.security import get_current_user
from moviebooking.database.database import get_db
from moviebooking.model.model import User
from moviebooking.notification.email import EmailSender, get_email_sender
from moviebooking.schemas.schemas import MAX_ID, BookingHistoryItem, BookingOut, BookingRequest
from moviebooking.services import booking_service

router = APIRouter()


@router.get("/user", response_model=List[BookingHistoryItem])
async def user_bookings(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    return await booking_service.list_user_bookings(db, user)


@router.post("", response_model=BookingOut, status_code=201)
async def create_booking(
    payload: BookingRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    sender: EmailSender = Depends(get_email_sender),
):
    """
    Reserve the requested seats for a showtime.

    All seats are taken or none are; a seat already held by another booking
    yields 409 naming that seat. The confirmation email is sent after the
    response path and its failure never affects the booking.
    """
    return await booking_service.create_booking(
        db, user, payload.movie_id, payload.showtime_id, payload.seats, sender=sender
    )


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await booking_service.get_booking(db, user, booking_id)


@router.patch("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await booking_service.cancel_booking(db, user, booking_id)
