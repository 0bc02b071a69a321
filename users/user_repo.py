from typing import Any, Dict, Optional
from datetime import datetime, timezone
import logging
import uuid

from fastapi_users.authentication.strategy.db import AccessTokenDatabase
from fastapi_users.db import BaseUserDatabase
from storage.interface import Storage
from users.user_model import Session, User


logger = logging.getLogger(__name__)

class StorageUserDatabase(BaseUserDatabase[User, uuid.UUID]):
    """fastapi-users adapter that keeps accounts in the application storage."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def get(self, id: uuid.UUID) -> Optional[User]:
        return await self.storage.get_user(str(id))

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.storage.get_user_by_email(email)

    async def create(self, create_dict: Dict[str, Any]) -> User:
        user = User(id=str(uuid.uuid4()), **create_dict)
        created = await self.storage.upsert_user(user)
        logger.info("Created user %s", created.id)
        return created

    async def update(self, user: User, update_dict: Dict[str, Any]) -> User:
        return await self.storage.upsert_user(user.model_copy(update=update_dict))

    async def delete(self, user: User) -> None:
        await self.storage.delete_user(user.id)


class StorageAccessTokenDatabase(AccessTokenDatabase[Session]):
    """Session table used by the database auth strategy."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def get_by_token(self, token: str, max_age: Optional[datetime] = None) -> Optional[Session]:
        session = await self.storage.get_session(token)
        if session is None:
            return None
        if max_age is not None and _as_utc(session.created_at) < _as_utc(max_age):
            return None
        return session

    async def create(self, create_dict: Dict[str, Any]) -> Session:
        return await self.storage.create_session(create_dict["token"], str(create_dict["user_id"]))

    async def update(self, access_token: Session, update_dict: Dict[str, Any]) -> Session:
        # Sessions are immutable rows; replace the old one
        await self.storage.delete_session(access_token.token)
        token = update_dict.get("token", access_token.token)
        user_id = str(update_dict.get("user_id", access_token.user_id))
        return await self.storage.create_session(token, user_id)

    async def delete(self, access_token: Session) -> None:
        await self.storage.delete_session(access_token.token)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
