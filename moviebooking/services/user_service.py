from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moviebooking.core.config import settings
from moviebooking.core.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from moviebooking.core.logger_config import logger
from moviebooking.core.security import hash_password, verify_password
from moviebooking.model.model import User, UserRole


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == email.lower()))
    return res.scalar_one_or_none()


async def register_user(
    db: AsyncSession, name: str, email: str, password: str, role: UserRole = UserRole.USER
) -> User:
    if await get_user_by_email(db, email):
        raise ValidationError("User already exists")
    user = User(name=name, email=email.lower(), hashed_password=hash_password(password), role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Registered {role.value} {user.id} <{user.email}>")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise UnauthorizedError("Invalid credentials")
    return user


async def authenticate_admin(db: AsyncSession, email: str, password: str) -> User:
    user = await authenticate(db, email, password)
    if user.role != UserRole.ADMIN:
        raise ForbiddenError("Access denied. Admin only.")
    return user


async def ensure_admin(db: AsyncSession) -> Optional[User]:
    """Create the configured bootstrap admin if it does not exist yet."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None
    existing = await get_user_by_email(db, settings.ADMIN_EMAIL)
    if existing:
        return existing
    return await register_user(
        db,
        settings.ADMIN_NAME,
        settings.ADMIN_EMAIL,
        settings.ADMIN_PASSWORD.get_secret_value(),
        role=UserRole.ADMIN,
    )
