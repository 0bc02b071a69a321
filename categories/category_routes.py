from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from auth.auth import get_current_user
from categories.category_model import Category, CategoryCreate
from storage.factory import get_storage
from storage.interface import DuplicateCategoryError, Storage


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[Category])
async def list_categories(storage: Storage = Depends(get_storage)) -> List[Category]:
    try:
        return await storage.get_categories()
    except Exception:
        logger.exception("Failed to fetch categories")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch categories")


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, storage: Storage = Depends(get_storage)) -> Category:
    try:
        return await storage.create_category(body)
    except DuplicateCategoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Failed to create category")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create category")
