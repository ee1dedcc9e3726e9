from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.config import settings
from moviebooking.core.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from moviebooking.database.database import get_db
from moviebooking.model.model import User, UserRole
from moviebooking.schemas.schemas import MAX_ID, MAX_PASSWORD_BYTES


bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(plain_password: str) -> str:
    if len(plain_password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValidationError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes')
    return bcrypt.hashpw(plain_password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # bcrypt rejects longer inputs, and no stored hash can match one
    if len(plain_password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    lifetime = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        'sub': str(user.id),
        'role': UserRole(user.role).value,
        'exp': int((datetime.now(timezone.utc) + lifetime).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM]
        )
    except jwt.PyJWTError:
        raise UnauthorizedError('Token is not valid')


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise UnauthorizedError('No token, authorization denied')
    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload.get('sub'))
    except (TypeError, ValueError):
        raise UnauthorizedError('Token is not valid')
    if not 1 <= user_id <= MAX_ID:
        raise UnauthorizedError('Token is not valid')
    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedError('Token is not valid')
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError('Access denied. Admin only.')
    return current_user
