from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from auth.auth import get_current_user
from budgets.budget_model import Budget, BudgetCreate, BudgetUpdate
from storage.factory import get_storage
from storage.interface import Storage


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/budgets", tags=["budgets"])


@router.get("", response_model=List[Budget])
async def list_budgets(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Budget]:
    try:
        return await storage.get_budgets(user_id)
    except Exception:
        logger.exception("Failed to fetch budgets")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch budgets")


@router.post("", response_model=Budget, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget: BudgetCreate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Budget:
    try:
        return await storage.create_budget(budget, user_id)
    except Exception:
        logger.exception("Failed to create budget")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create budget")


@router.put("/{budget_id}", response_model=Budget)
async def update_budget(
    budget_id: str,
    updates: BudgetUpdate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Budget:
    try:
        budget = await storage.update_budget(budget_id, updates, user_id)
    except Exception:
        logger.exception("Failed to update budget %s", budget_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update budget")
    if budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return budget


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    try:
        deleted = await storage.delete_budget(budget_id, user_id)
    except Exception:
        logger.exception("Failed to delete budget %s", budget_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete budget")
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
