from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.security import create_access_token, get_current_user
from moviebooking.database.database import get_db
from moviebooking.model.model import User
from moviebooking.schemas.schemas import LoginIn, RegisterIn, TokenOut, UserOut
from moviebooking.services import user_service

router = APIRouter()


def _token_response(user: User) -> TokenOut:
    return TokenOut(token=create_access_token(user), user=UserOut.model_validate(user))


@router.post("/register", response_model=TokenOut, status_code=201)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db)):
    user = await user_service.register_user(db, payload.name, payload.email, payload.password)
    return _token_response(user)


@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(db, payload.email, payload.password)
    return _token_response(user)


@router.post("/admin/login", response_model=TokenOut)
async def admin_login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate_admin(db, payload.email, payload.password)
    return _token_response(user)


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
