"""Domain exceptions shared by the services and the HTTP layer."""

from typing import Optional


class DomainError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 400)


class InvalidStateError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 400)


class UnauthorizedError(DomainError):
    def __init__(self, message: str = 'Not authorized', status_code: int = 401):
        super().__init__(message, status_code)


class ForbiddenError(UnauthorizedError):
    """Authenticated, but the role does not allow the action."""

    def __init__(self, message: str = 'Admin access required'):
        super().__init__(message, 403)


class NotFoundError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 404)


class SeatUnavailableError(DomainError):
    def __init__(self, seat: str, message: Optional[str] = None):
        self.seat = seat
        super().__init__(message or f'Seat {seat} is not available', 409)


class StoreError(DomainError):
    def __init__(self, message: str = 'Server error'):
        super().__init__(message, 500)
