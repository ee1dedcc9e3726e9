"""
Seat pool bookkeeping for showtimes.

Every showtime owns a fixed grid of 100 seats (rows A-J, numbers 1-10). A seat
is available iff no confirmed booking holds it. Reservation is a single
conditional UPDATE so two concurrent requests can never both take the same
seat: the second one matches fewer rows than it asked for and is rejected.
"""

import re
import string
from typing import Iterable, List, Sequence, Tuple

import sqlalchemy as sa
from sqlalchemy import and_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moviebooking.core.exceptions import SeatUnavailableError, ValidationError
from moviebooking.core.logger_config import logger
from moviebooking.model.model import SeatStatus, ShowtimeSeat


ROWS = string.ascii_uppercase[:10]  # A-J
SEATS_PER_ROW = 10
TOTAL_SEATS = len(ROWS) * SEATS_PER_ROW

_LABEL_RE = re.compile(r"^([A-Z])(\d{1,2})$")


def default_seat_labels() -> List[str]:
    return [f"{row}{number}" for row in ROWS for number in range(1, SEATS_PER_ROW + 1)]


def parse_seat_label(label: str) -> Tuple[str, int]:
    match = _LABEL_RE.match(label or "")
    if not match:
        raise ValidationError(f"Invalid seat label: {label!r}")
    row, number = match.group(1), int(match.group(2))
    if row not in ROWS or not 1 <= number <= SEATS_PER_ROW:
        raise ValidationError(f"Invalid seat label: {label!r}")
    return row, number


def validate_seat_request(seats: Sequence[str]) -> List[str]:
    """Check a reservation request: non-empty, well-formed, no repeats."""
    if not seats:
        raise ValidationError("At least one seat must be selected")
    seen = set()
    for seat in seats:
        parse_seat_label(seat)
        if seat in seen:
            raise ValidationError(f"Seat {seat} requested more than once")
        seen.add(seat)
    return list(seats)


class SeatInventory:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def initialize(self, showtime_id: int) -> None:
        for label in default_seat_labels():
            row, number = parse_seat_label(label)
            self.db.add(
                ShowtimeSeat(
                    showtime_id=showtime_id,
                    row_label=row,
                    seat_number=number,
                    label=label,
                    status=SeatStatus.AVAILABLE,
                )
            )
        await self.db.flush()

    async def available_seats(self, showtime_id: int) -> List[str]:
        q = (
            select(ShowtimeSeat.label)
            .where(
                and_(
                    ShowtimeSeat.showtime_id == showtime_id,
                    ShowtimeSeat.status == SeatStatus.AVAILABLE,
                )
            )
            .order_by(ShowtimeSeat.row_label, ShowtimeSeat.seat_number)
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def reserve(self, showtime_id: int, seats: Sequence[str], booking_id: int) -> List[str]:
        """
        Take every requested seat out of the pool or none of them.

        Raises SeatUnavailableError naming the first requested seat that is not
        in the pool. The caller owns the transaction and must roll it back on
        failure; nothing is left half-reserved once it does.
        """
        requested = validate_seat_request(seats)
        q_upd = (
            update(ShowtimeSeat)
            .where(
                and_(
                    ShowtimeSeat.showtime_id == showtime_id,
                    ShowtimeSeat.label.in_(requested),
                    ShowtimeSeat.status == SeatStatus.AVAILABLE,
                )
            )
            .values(status=SeatStatus.BOOKED, booking_id=booking_id)
        )
        res = await self.db.execute(q_upd)
        if res.rowcount != len(requested):
            seat = await self._first_unavailable(showtime_id, requested, booking_id)
            logger.warning(
                f"Reservation rejected for showtime {showtime_id}: seat {seat} unavailable"
            )
            raise SeatUnavailableError(seat)
        return requested

    async def release(self, showtime_id: int, seats: Iterable[str]) -> None:
        labels = list(seats)
        if not labels:
            return
        q_upd = (
            update(ShowtimeSeat)
            .where(
                and_(ShowtimeSeat.showtime_id == showtime_id, ShowtimeSeat.label.in_(labels))
            )
            .values(status=SeatStatus.AVAILABLE, booking_id=None)
        )
        await self.db.execute(q_upd)

    async def count_available(self, showtime_id: int) -> int:
        q = select(sa.func.count()).where(
            and_(
                ShowtimeSeat.showtime_id == showtime_id,
                ShowtimeSeat.status == SeatStatus.AVAILABLE,
            )
        )
        res = await self.db.execute(q)
        return res.scalar_one()

    async def _first_unavailable(
        self, showtime_id: int, requested: Sequence[str], booking_id: int
    ) -> str:
        # seats claimed by this attempt's own update still count as available
        q = select(ShowtimeSeat.label).where(
            and_(
                ShowtimeSeat.showtime_id == showtime_id,
                ShowtimeSeat.label.in_(requested),
                sa.or_(
                    ShowtimeSeat.status == SeatStatus.AVAILABLE,
                    ShowtimeSeat.booking_id == booking_id,
                ),
            )
        )
        res = await self.db.execute(q)
        free = set(res.scalars().all())
        for seat in requested:
            if seat not in free:
                return seat
        return requested[0]
