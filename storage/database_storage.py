from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from analytics.analytics_model import CategoryExpense
from analytics.analytics_service import get_analytics_service
from budgets.budget_model import Budget, BudgetCreate, BudgetUpdate
from categories.category_model import Category, CategoryCreate
from db.models import Base, BudgetTable, CategoryTable, SessionTable, TransactionTable, UserTable
from storage.interface import DEFAULT_CATEGORIES, DuplicateCategoryError, Storage
from transactions.transaction_model import Transaction, TransactionCreate, TransactionUpdate
from users.user_model import Session, User


logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class DatabaseStorage(Storage):
    """
    SQLAlchemy-backed storage. Every call opens its own AsyncSession; writes
    commit before returning. Transaction and budget queries always filter on
    the owning user.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def initialize(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await self._seed_categories()

    async def close(self) -> None:
        await self._engine.dispose()

    async def _seed_categories(self) -> None:
        async with self._session_factory() as session:
            existing = await session.scalar(select(func.count()).select_from(CategoryTable))
            if existing:
                return
            session.add_all(CategoryTable(id=_new_id(), **data.model_dump()) for data in DEFAULT_CATEGORIES)
            await session.commit()
        logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))

    # Users
    async def get_user(self, user_id: str) -> Optional[User]:
        async with self._session_factory() as session:
            row = await session.get(UserTable, user_id)
            return User.model_validate(row) if row else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        async with self._session_factory() as session:
            stmt = select(UserTable).where(func.lower(UserTable.email) == email.lower())
            row = (await session.execute(stmt)).scalars().first()
            return User.model_validate(row) if row else None

    async def upsert_user(self, user: User) -> User:
        now = _now()
        values = user.model_dump(exclude={"id", "created_at", "updated_at"})
        async with self._session_factory() as session:
            row = await session.get(UserTable, user.id)
            if row is None:
                row = UserTable(id=user.id, created_at=user.created_at or now, updated_at=now, **values)
                session.add(row)
            else:
                for key, value in values.items():
                    setattr(row, key, value)
                row.updated_at = now
            await session.commit()
            return User.model_validate(row)

    async def delete_user(self, user_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(delete(UserTable).where(UserTable.id == user_id))
            await session.commit()
            return result.rowcount > 0

    # Sessions
    async def create_session(self, token: str, user_id: str) -> Session:
        async with self._session_factory() as session:
            row = SessionTable(token=token, user_id=user_id, created_at=_now())
            session.add(row)
            await session.commit()
            return Session.model_validate(row)

    async def get_session(self, token: str) -> Optional[Session]:
        async with self._session_factory() as session:
            row = await session.get(SessionTable, token)
            return Session.model_validate(row) if row else None

    async def delete_session(self, token: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(delete(SessionTable).where(SessionTable.token == token))
            await session.commit()
            return result.rowcount > 0

    # Transactions
    async def get_transactions(self, user_id: str) -> List[Transaction]:
        stmt = (
            select(TransactionTable)
            .where(TransactionTable.user_id == user_id)
            .order_by(desc(TransactionTable.date), desc(TransactionTable.created_at))
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [Transaction.model_validate(row) for row in rows]

    async def _owned_transaction(self, session: AsyncSession, transaction_id: str, user_id: str) -> Optional[TransactionTable]:
        stmt = select(TransactionTable).where(
            TransactionTable.id == transaction_id,
            TransactionTable.user_id == user_id,
        )
        return (await session.execute(stmt)).scalars().first()

    async def get_transaction(self, transaction_id: str, user_id: str) -> Optional[Transaction]:
        async with self._session_factory() as session:
            row = await self._owned_transaction(session, transaction_id, user_id)
            return Transaction.model_validate(row) if row else None

    async def create_transaction(self, data: TransactionCreate, user_id: str) -> Transaction:
        async with self._session_factory() as session:
            row = TransactionTable(id=_new_id(), user_id=user_id, created_at=_now(), **data.model_dump())
            session.add(row)
            await session.commit()
            return Transaction.model_validate(row)

    async def update_transaction(self, transaction_id: str, updates: TransactionUpdate, user_id: str) -> Optional[Transaction]:
        async with self._session_factory() as session:
            row = await self._owned_transaction(session, transaction_id, user_id)
            if row is None:
                return None
            for key, value in updates.changes().items():
                setattr(row, key, value)
            await session.commit()
            return Transaction.model_validate(row)

    async def delete_transaction(self, transaction_id: str, user_id: str) -> bool:
        stmt = delete(TransactionTable).where(
            TransactionTable.id == transaction_id,
            TransactionTable.user_id == user_id,
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    # Categories
    async def get_categories(self) -> List[Category]:
        async with self._session_factory() as session:
            rows = (await session.execute(select(CategoryTable))).scalars().all()
            return [Category.model_validate(row) for row in rows]

    async def create_category(self, data: CategoryCreate) -> Category:
        async with self._session_factory() as session:
            row = CategoryTable(id=_new_id(), **data.model_dump())
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateCategoryError(data.name) from exc
            return Category.model_validate(row)

    # Budgets
    async def get_budgets(self, user_id: str) -> List[Budget]:
        stmt = select(BudgetTable).where(BudgetTable.user_id == user_id).order_by(BudgetTable.created_at)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [Budget.model_validate(row) for row in rows]

    async def create_budget(self, data: BudgetCreate, user_id: str) -> Budget:
        async with self._session_factory() as session:
            row = BudgetTable(id=_new_id(), user_id=user_id, created_at=_now(), **data.model_dump())
            session.add(row)
            await session.commit()
            return Budget.model_validate(row)

    async def update_budget(self, budget_id: str, updates: BudgetUpdate, user_id: str) -> Optional[Budget]:
        stmt = select(BudgetTable).where(BudgetTable.id == budget_id, BudgetTable.user_id == user_id)
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).scalars().first()
            if row is None:
                return None
            for key, value in updates.changes().items():
                setattr(row, key, value)
            await session.commit()
            return Budget.model_validate(row)

    async def delete_budget(self, budget_id: str, user_id: str) -> bool:
        stmt = delete(BudgetTable).where(BudgetTable.id == budget_id, BudgetTable.user_id == user_id)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    # Analytics
    async def _expenses(self, user_id: str, date_prefix: Optional[str] = None) -> List[Transaction]:
        stmt = select(TransactionTable).where(
            TransactionTable.user_id == user_id,
            TransactionTable.type == "expense",
        )
        if date_prefix:
            stmt = stmt.where(TransactionTable.date.startswith(date_prefix))
        stmt = stmt.order_by(desc(TransactionTable.date), desc(TransactionTable.created_at))
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [Transaction.model_validate(row) for row in rows]

    async def get_monthly_expenses(self, year: int, month: int, user_id: str) -> List[Transaction]:
        # ISO dates sort and prefix-match lexically
        return await self._expenses(user_id, date_prefix=f"{year:04d}-{month:02d}")

    async def get_expenses_by_category(self, start_date: str, end_date: str, user_id: str) -> List[CategoryExpense]:
        expenses = await self._expenses(user_id)
        return await get_analytics_service().expenses_by_category(expenses, start_date, end_date)
