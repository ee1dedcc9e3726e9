"""Booking confirmation email, delivered off the request path."""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import List, Optional, Set

from moviebooking.core.config import Settings, settings
from moviebooking.core.logger_config import logger


SUBJECT = 'Your Movie Ticket is Confirmed!'

_pending: Set[asyncio.Task] = set()


def render_booking_confirmation(name: str, movie_title: str, showtime: str, seats: List[str]) -> str:
    return (
        f'<h2>Hi {name},</h2>'
        f'<p>Your ticket for <b>{movie_title}</b> has been <b>confirmed</b>!</p>'
        f'<p><b>Showtime:</b> {showtime}</p>'
        f'<p><b>Seats:</b> {", ".join(seats)}</p>'
        '<br/>'
        '<p>Enjoy your movie!</p>'
        '<hr/>'
        '<small>This is an automated email. Please do not reply.</small>'
    )


class EmailSender:
    """SMTP sender; only logs the message when no EMAIL_HOST is configured."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    @property
    def enabled(self) -> bool:
        return bool(self.config.EMAIL_HOST)

    async def send_booking_confirmation(
        self, to: str, name: str, movie_title: str, showtime: str, seats: List[str]
    ) -> None:
        message = EmailMessage()
        message['Subject'] = SUBJECT
        message['From'] = f'"{self.config.EMAIL_FROM_NAME}" <{self.config.EMAIL_USER or ""}>'
        message['To'] = to
        message.set_content(f'Your ticket for {movie_title} at {showtime} is confirmed. Seats: {", ".join(seats)}')
        message.add_alternative(
            render_booking_confirmation(name, movie_title, showtime, seats), subtype='html'
        )

        if not self.enabled:
            logger.info(f'Email delivery disabled, confirmation for {to}: {movie_title} {showtime} {seats}')
            return
        await asyncio.to_thread(self._deliver, message)
        logger.info(f'Booking confirmation sent to {to}')

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.config.EMAIL_HOST, self.config.EMAIL_PORT, timeout=30) as smtp:
            if self.config.EMAIL_USE_TLS:
                smtp.starttls()
            if self.config.EMAIL_USER and self.config.EMAIL_PASSWORD:
                smtp.login(self.config.EMAIL_USER, self.config.EMAIL_PASSWORD.get_secret_value())
            smtp.send_message(message)


email_sender = EmailSender()


def get_email_sender() -> EmailSender:
    return email_sender


def _on_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.warning('Booking confirmation email task was cancelled')
        return
    exc = task.exception()
    if exc is not None:
        logger.opt(exception=exc).error(f'Failed to send booking confirmation email: {exc}')


def dispatch_booking_confirmation(
    sender: EmailSender, to: str, name: str, movie_title: str, showtime: str, seats: List[str]
) -> asyncio.Task:
    """Fire and forget; the task outlives the request that scheduled it."""
    task = asyncio.create_task(
        sender.send_booking_confirmation(to, name, movie_title, showtime, list(seats))
    )
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


async def drain_pending(timeout: float = 10.0) -> None:
    """Wait for in-flight confirmations, used on shutdown."""
    if not _pending:
        return
    await asyncio.wait(set(_pending), timeout=timeout)
