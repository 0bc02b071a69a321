from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from analytics.analytics_model import CategoryExpense
from analytics.analytics_service import get_analytics_service
from budgets.budget_model import Budget, BudgetCreate, BudgetUpdate
from categories.category_model import Category, CategoryCreate
from storage.interface import DEFAULT_CATEGORIES, DuplicateCategoryError, Storage
from transactions.transaction_model import Transaction, TransactionCreate, TransactionUpdate
from users.user_model import Session, User


logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class MemStorage(Storage):
    """Dict-backed storage for development and tests. Not shared across processes."""

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._sessions: Dict[str, Session] = {}
        self._transactions: Dict[str, Transaction] = {}
        self._categories: Dict[str, Category] = {}
        self._budgets: Dict[str, Budget] = {}
        self._seed_categories()

    def _seed_categories(self) -> None:
        for data in DEFAULT_CATEGORIES:
            category = Category(id=_new_id(), **data.model_dump())
            self._categories[category.id] = category
        logger.debug("Seeded %d default categories", len(DEFAULT_CATEGORIES))

    # Users
    async def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user
        return None

    async def upsert_user(self, user: User) -> User:
        now = _now()
        existing = self._users.get(user.id)
        if existing is None:
            stored = user.model_copy(update={"created_at": user.created_at or now, "updated_at": now})
        else:
            stored = user.model_copy(update={"created_at": existing.created_at, "updated_at": now})
        self._users[stored.id] = stored
        return stored

    async def delete_user(self, user_id: str) -> bool:
        if self._users.pop(user_id, None) is None:
            return False
        for table in (self._sessions, self._transactions, self._budgets):
            for key in [k for k, row in table.items() if row.user_id == user_id]:
                del table[key]
        return True

    # Sessions
    async def create_session(self, token: str, user_id: str) -> Session:
        session = Session(token=token, user_id=user_id, created_at=_now())
        self._sessions[token] = session
        return session

    async def get_session(self, token: str) -> Optional[Session]:
        return self._sessions.get(token)

    async def delete_session(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    # Transactions
    async def get_transactions(self, user_id: str) -> List[Transaction]:
        rows = [t for t in self._transactions.values() if t.user_id == user_id]
        rows.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return rows

    async def get_transaction(self, transaction_id: str, user_id: str) -> Optional[Transaction]:
        transaction = self._transactions.get(transaction_id)
        if transaction is None or transaction.user_id != user_id:
            return None
        return transaction

    async def create_transaction(self, data: TransactionCreate, user_id: str) -> Transaction:
        transaction = Transaction(id=_new_id(), user_id=user_id, created_at=_now(), **data.model_dump())
        self._transactions[transaction.id] = transaction
        return transaction

    async def update_transaction(self, transaction_id: str, updates: TransactionUpdate, user_id: str) -> Optional[Transaction]:
        existing = await self.get_transaction(transaction_id, user_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=updates.changes())
        self._transactions[transaction_id] = updated
        return updated

    async def delete_transaction(self, transaction_id: str, user_id: str) -> bool:
        if await self.get_transaction(transaction_id, user_id) is None:
            return False
        del self._transactions[transaction_id]
        return True

    # Categories
    async def get_categories(self) -> List[Category]:
        return list(self._categories.values())

    async def create_category(self, data: CategoryCreate) -> Category:
        if any(c.name == data.name for c in self._categories.values()):
            raise DuplicateCategoryError(data.name)
        category = Category(id=_new_id(), **data.model_dump())
        self._categories[category.id] = category
        return category

    # Budgets
    async def get_budgets(self, user_id: str) -> List[Budget]:
        return [b for b in self._budgets.values() if b.user_id == user_id]

    async def create_budget(self, data: BudgetCreate, user_id: str) -> Budget:
        budget = Budget(id=_new_id(), user_id=user_id, created_at=_now(), **data.model_dump())
        self._budgets[budget.id] = budget
        return budget

    async def update_budget(self, budget_id: str, updates: BudgetUpdate, user_id: str) -> Optional[Budget]:
        existing = self._budgets.get(budget_id)
        if existing is None or existing.user_id != user_id:
            return None
        updated = existing.model_copy(update=updates.changes())
        self._budgets[budget_id] = updated
        return updated

    async def delete_budget(self, budget_id: str, user_id: str) -> bool:
        existing = self._budgets.get(budget_id)
        if existing is None or existing.user_id != user_id:
            return False
        del self._budgets[budget_id]
        return True

    # Analytics
    async def get_monthly_expenses(self, year: int, month: int, user_id: str) -> List[Transaction]:
        transactions = await self.get_transactions(user_id)
        return await get_analytics_service().monthly_expenses(transactions, year, month)

    async def get_expenses_by_category(self, start_date: str, end_date: str, user_id: str) -> List[CategoryExpense]:
        transactions = await self.get_transactions(user_id)
        return await get_analytics_service().expenses_by_category(transactions, start_date, end_date)
