from __future__ import annotations

from fastapi import APIRouter, Depends

from auth.auth import auth_backend, fastapi_users, get_current_active_user
from auth.schemas import UserCreate, UserRead
from users.user_model import User


router = APIRouter(prefix="/api", tags=["auth"])

# POST /api/login, POST /api/logout
router.include_router(fastapi_users.get_auth_router(auth_backend))
# POST /api/auth/register
router.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth")


@router.get("/auth/user", response_model=UserRead)
async def get_auth_user(user: User = Depends(get_current_active_user)) -> UserRead:
    return UserRead.model_validate(user, from_attributes=True)
