from fastapi import Depends, Request
from fastapi_users import BaseUserManager, UUIDIDMixin
from typing import AsyncIterator, Optional
import logging
import uuid

from settings.config import settings
from storage.factory import get_storage
from storage.interface import Storage
from users.user_model import User
from users.user_repo import StorageAccessTokenDatabase, StorageUserDatabase

logger = logging.getLogger(__name__)


class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.ENV_RESET_PASSWORD_TOKEN_SECRET
    verification_token_secret = settings.ENV_VERIFICATION_TOKEN_SECRET

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered.")

    async def on_after_login(self, user: User, request: Optional[Request] = None, response=None):
        logger.info(f"User {user.email} logged in.")


async def get_user_db(storage: Storage = Depends(get_storage)) -> AsyncIterator[StorageUserDatabase]:
    yield StorageUserDatabase(storage)


async def get_access_token_db(storage: Storage = Depends(get_storage)) -> AsyncIterator[StorageAccessTokenDatabase]:
    yield StorageAccessTokenDatabase(storage)


async def get_user_manager(user_db: StorageUserDatabase = Depends(get_user_db)) -> AsyncIterator[UserManager]:
    yield UserManager(user_db)
