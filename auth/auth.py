from __future__ import annotations

import uuid

from fastapi_users import FastAPIUsers
from fastapi_users.authentication import AuthenticationBackend, CookieTransport
from fastapi_users.authentication.strategy.db import DatabaseStrategy
from fastapi import Depends

from settings.config import settings
from users.user_model import User
from users.user_repo import StorageAccessTokenDatabase
from .user_manager import get_access_token_db, get_user_manager


cookie_transport = CookieTransport(
    cookie_name=settings.SESSION_COOKIE_NAME,
    cookie_max_age=settings.SESSION_LIFETIME_SECONDS,
    cookie_secure=settings.SESSION_COOKIE_SECURE,
)


def get_database_strategy(
    access_token_db: StorageAccessTokenDatabase = Depends(get_access_token_db),
) -> DatabaseStrategy:
    return DatabaseStrategy(access_token_db, lifetime_seconds=settings.SESSION_LIFETIME_SECONDS)


auth_backend = AuthenticationBackend(
    name="session",
    transport=cookie_transport,
    get_strategy=get_database_strategy,
)


fastapi_users = FastAPIUsers[User, uuid.UUID](
    get_user_manager,
    [auth_backend],
)


# Dependency to require an authenticated, active user and return the user's ID
_current_active_user = fastapi_users.current_user(active=True)

async def get_current_user(user: User = Depends(_current_active_user)) -> str:
    return user.id

async def get_current_active_user(user: User = Depends(_current_active_user)) -> User:
    return user
