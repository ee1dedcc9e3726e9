import enum
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import func
from sqlalchemy.orm import relationship

from moviebooking.database.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SeatStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"


def _enum_column(enum_cls, **kwargs):
    return sa.Enum(
        enum_cls,
        native_enum=False,
        length=16,
        values_callable=lambda members: [m.value for m in members],
        **kwargs,
    )


class User(Base):
    __tablename__ = "users"
    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String, nullable=False)
    email = sa.Column(sa.String, nullable=False, unique=True, index=True)
    hashed_password = sa.Column(sa.String, nullable=False)
    role = sa.Column(_enum_column(UserRole), nullable=False, default=UserRole.USER)
    created_at = sa.Column(sa.DateTime(timezone=True), server_default=func.now())


class Movie(Base):
    __tablename__ = "movies"
    id = sa.Column(sa.Integer, primary_key=True)
    title = sa.Column(sa.String, nullable=False)
    description = sa.Column(sa.Text, nullable=False)
    duration = sa.Column(sa.Integer, nullable=False)  # minutes
    genre = sa.Column(sa.String, nullable=False)
    poster = sa.Column(sa.String, nullable=False)
    ticket_price = sa.Column(sa.Numeric(8, 2), nullable=False, default=10)
    created_by = sa.Column(sa.Integer, sa.ForeignKey("users.id"), nullable=True)
    created_at = sa.Column(sa.DateTime(timezone=True), server_default=func.now())
    updated_at = sa.Column(
        sa.DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Showtime(Base):
    __tablename__ = "showtimes"
    id = sa.Column(sa.Integer, primary_key=True)
    movie_id = sa.Column(sa.Integer, sa.ForeignKey("movies.id"), nullable=False, index=True)
    time = sa.Column(sa.DateTime(timezone=True), nullable=False)
    created_at = sa.Column(sa.DateTime(timezone=True), server_default=func.now())

    seats = relationship(
        "ShowtimeSeat",
        back_populates="showtime",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ShowtimeSeat(Base):
    """One row of a showtime's seat pool; available iff status is 'available'."""

    __tablename__ = "showtime_seats"
    id = sa.Column(sa.Integer, primary_key=True)
    showtime_id = sa.Column(
        sa.Integer, sa.ForeignKey("showtimes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    row_label = sa.Column(sa.String(1), nullable=False)
    seat_number = sa.Column(sa.Integer, nullable=False)
    label = sa.Column(sa.String(3), nullable=False)
    status = sa.Column(_enum_column(SeatStatus), nullable=False, default=SeatStatus.AVAILABLE)
    # no FK: bookings may outlive their showtime
    booking_id = sa.Column(sa.Integer, nullable=True)

    showtime = relationship("Showtime", back_populates="seats")
    __table_args__ = (
        sa.UniqueConstraint("showtime_id", "label", name="uq_showtime_seat_label"),
    )


class Booking(Base):
    __tablename__ = "bookings"
    id = sa.Column(sa.Integer, primary_key=True)
    user_id = sa.Column(sa.Integer, sa.ForeignKey("users.id"), nullable=False, index=True)
    # plain integers: showtime deletion leaves bookings in place
    movie_id = sa.Column(sa.Integer, nullable=False, index=True)
    showtime_id = sa.Column(sa.Integer, nullable=False, index=True)
    seats = sa.Column(sa.JSON, nullable=False)
    status = sa.Column(
        _enum_column(BookingStatus), nullable=False, default=BookingStatus.CONFIRMED
    )
    created_at = sa.Column(
        sa.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
