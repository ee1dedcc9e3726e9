from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, confloat, conint, constr, field_validator

from moviebooking.model.model import BookingStatus, UserRole


# ids are stored as signed 64-bit integers
MAX_ID = 2**63 - 1
MAX_PASSWORD_BYTES = 72

RecordId = conint(ge=1, le=MAX_ID)


class _Schema(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ---------- Users & auth ----------
class RegisterIn(_Schema):
    name: constr(strip_whitespace=True, min_length=1)
    email: constr(strip_whitespace=True, to_lower=True, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: constr(min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginIn(_Schema):
    email: constr(strip_whitespace=True, to_lower=True)
    password: str


class UserOut(_Schema):
    id: int
    name: str
    email: str
    role: UserRole


class TokenOut(_Schema):
    token: str
    user: UserOut


# ---------- Movies ----------
class MovieIn(_Schema):
    title: constr(strip_whitespace=True, min_length=1)
    description: constr(strip_whitespace=True, min_length=1)
    duration: conint(gt=0)
    genre: constr(strip_whitespace=True, min_length=1)
    poster: constr(strip_whitespace=True, min_length=1)
    ticket_price: confloat(ge=0) = Field(10.0, alias="ticketPrice")


class MovieUpdate(_Schema):
    title: Optional[constr(strip_whitespace=True, min_length=1)] = None
    description: Optional[constr(strip_whitespace=True, min_length=1)] = None
    duration: Optional[conint(gt=0)] = None
    genre: Optional[constr(strip_whitespace=True, min_length=1)] = None
    poster: Optional[constr(strip_whitespace=True, min_length=1)] = None
    ticket_price: Optional[confloat(ge=0)] = Field(None, alias="ticketPrice")


class MovieOut(_Schema):
    id: int
    title: str
    description: str
    duration: int
    genre: str
    poster: str
    ticket_price: float
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------- Showtimes ----------
class ShowtimeCreate(_Schema):
    movie_id: RecordId = Field(alias="movieId")
    time: datetime


class ShowtimeOut(_Schema):
    id: int
    movie_id: int
    time: datetime
    available_seats: List[str] = []


class MovieDetailOut(MovieOut):
    showtimes: List[ShowtimeOut] = []


# ---------- Bookings ----------
class BookingRequest(_Schema):
    movie_id: Optional[RecordId] = Field(None, alias="movieId")
    showtime_id: RecordId = Field(alias="showtimeId")
    seats: List[str]

    @field_validator("seats", mode="before")
    @classmethod
    def split_seats(cls, v):
        # accepts ["A1", "A2"] or "A1,A2"
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, list):
            return [str(s).strip().upper() for s in v if str(s).strip()]
        return v


class BookingOut(_Schema):
    id: int
    user_id: int
    movie_id: int
    showtime_id: int
    seats: List[str]
    status: BookingStatus
    created_at: datetime


class BookingMovieInfo(_Schema):
    id: int
    title: str
    poster: str
    ticket_price: float


class BookingShowtimeInfo(_Schema):
    id: int
    time: datetime


class BookingHistoryItem(BookingOut):
    movie: Optional[BookingMovieInfo] = None
    showtime: Optional[BookingShowtimeInfo] = None


# ---------- Admin ----------
class DashboardStats(_Schema):
    total_movies: int
    total_users: int
    total_showtimes: int
    total_bookings: int
    confirmed_bookings: int


class MessageOut(_Schema):
    message: str
