from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from auth.auth import get_current_user
from storage.factory import get_storage
from storage.interface import Storage
from transactions.transaction_history import export_filename, search_transactions, transactions_to_csv
from transactions.transaction_model import Transaction, TransactionCreate, TransactionType, TransactionUpdate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=List[Transaction])
async def list_transactions(
    response: Response,
    search: Optional[str] = None,
    type: Optional[TransactionType] = None,
    category: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Transaction]:
    try:
        transactions = await storage.get_transactions(user_id)
    except Exception:
        logger.exception("Failed to fetch transactions for %s", user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch transactions")
    matched = search_transactions(transactions, search=search, type=type, category=category)
    response.headers["X-Total-Count"] = str(len(matched))
    if limit is None:
        return matched
    start = (page - 1) * limit
    return matched[start:start + limit]


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: TransactionCreate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Transaction:
    try:
        return await storage.create_transaction(body, user_id)
    except Exception:
        logger.exception("Failed to create transaction")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create transaction")


@router.get("/export")
async def export_transactions(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    try:
        transactions = await storage.get_transactions(user_id)
    except Exception:
        logger.exception("Failed to export transactions")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to export transactions")
    if not transactions:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No transactions to export")
    return Response(
        content=transactions_to_csv(transactions),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Transaction:
    try:
        transaction = await storage.get_transaction(transaction_id, user_id)
    except Exception:
        logger.exception("Failed to fetch transaction %s", transaction_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch transaction")
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return transaction


@router.put("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Transaction:
    try:
        transaction = await storage.update_transaction(transaction_id, body, user_id)
    except Exception:
        logger.exception("Failed to update transaction %s", transaction_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update transaction")
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return transaction


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    try:
        deleted = await storage.delete_transaction(transaction_id, user_id)
    except Exception:
        logger.exception("Failed to delete transaction %s", transaction_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete transaction")
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
