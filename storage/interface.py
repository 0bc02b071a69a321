from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from analytics.analytics_model import CategoryExpense
from budgets.budget_model import Budget, BudgetCreate, BudgetUpdate
from categories.category_model import Category, CategoryCreate
from transactions.transaction_model import Transaction, TransactionCreate, TransactionUpdate
from users.user_model import Session, User


class DuplicateCategoryError(ValueError):
    """Raised when a category name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Category '{name}' already exists")
        self.name = name


DEFAULT_CATEGORIES: List[CategoryCreate] = [
    CategoryCreate(name="Food & Dining", type="expense", color="#F44336", icon="fas fa-utensils"),
    CategoryCreate(name="Transportation", type="expense", color="#FF9800", icon="fas fa-car"),
    CategoryCreate(name="Utilities", type="expense", color="#2196F3", icon="fas fa-bolt"),
    CategoryCreate(name="Entertainment", type="expense", color="#9C27B0", icon="fas fa-film"),
    CategoryCreate(name="Healthcare", type="expense", color="#4CAF50", icon="fas fa-heartbeat"),
    CategoryCreate(name="Shopping", type="expense", color="#795548", icon="fas fa-shopping-bag"),
    CategoryCreate(name="Income", type="income", color="#4CAF50", icon="fas fa-dollar-sign"),
    CategoryCreate(name="Other", type="expense", color="#607D8B", icon="fas fa-question"),
]


class Storage(ABC):
    """
    Persistence contract shared by the in-memory and database backends.

    Lookups return None (and deletes False) when the row does not exist or is
    owned by another user; the route layer turns that into a 404.
    """

    async def initialize(self) -> None:
        """Prepare the backend (schema, default categories)."""

    async def close(self) -> None:
        """Release backend resources."""

    # Users
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def upsert_user(self, user: User) -> User: ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool: ...

    # Sessions
    @abstractmethod
    async def create_session(self, token: str, user_id: str) -> Session: ...

    @abstractmethod
    async def get_session(self, token: str) -> Optional[Session]: ...

    @abstractmethod
    async def delete_session(self, token: str) -> bool: ...

    # Transactions
    @abstractmethod
    async def get_transactions(self, user_id: str) -> List[Transaction]: ...

    @abstractmethod
    async def get_transaction(self, transaction_id: str, user_id: str) -> Optional[Transaction]: ...

    @abstractmethod
    async def create_transaction(self, data: TransactionCreate, user_id: str) -> Transaction: ...

    @abstractmethod
    async def update_transaction(self, transaction_id: str, updates: TransactionUpdate, user_id: str) -> Optional[Transaction]: ...

    @abstractmethod
    async def delete_transaction(self, transaction_id: str, user_id: str) -> bool: ...

    # Categories
    @abstractmethod
    async def get_categories(self) -> List[Category]: ...

    @abstractmethod
    async def create_category(self, data: CategoryCreate) -> Category: ...

    # Budgets
    @abstractmethod
    async def get_budgets(self, user_id: str) -> List[Budget]: ...

    @abstractmethod
    async def create_budget(self, data: BudgetCreate, user_id: str) -> Budget: ...

    @abstractmethod
    async def update_budget(self, budget_id: str, updates: BudgetUpdate, user_id: str) -> Optional[Budget]: ...

    @abstractmethod
    async def delete_budget(self, budget_id: str, user_id: str) -> bool: ...

    # Analytics
    @abstractmethod
    async def get_monthly_expenses(self, year: int, month: int, user_id: str) -> List[Transaction]: ...

    @abstractmethod
    async def get_expenses_by_category(self, start_date: str, end_date: str, user_id: str) -> List[CategoryExpense]: ...
