from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from analytics.analytics_model import CategoryExpense, DashboardStats
from analytics.analytics_service import AnalyticsService, get_analytics_service
from auth.auth import get_current_user
from storage.factory import get_storage
from storage.interface import Storage
from transactions.transaction_model import Transaction, parse_iso_date


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/dashboard-stats", response_model=DashboardStats)
async def dashboard_stats(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    service: AnalyticsService = Depends(get_analytics_service),
) -> DashboardStats:
    try:
        transactions = await storage.get_transactions(user_id)
        return await service.dashboard_stats(transactions)
    except Exception:
        logger.exception("Failed to fetch dashboard stats")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch dashboard stats")


@router.get("/expenses-by-category", response_model=List[CategoryExpense])
async def expenses_by_category(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    period: Optional[int] = Query(default=None, ge=1, le=3660, description="Trailing window in days"),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[CategoryExpense]:
    if period is not None and not (start_date or end_date):
        today = date.today()
        start_date, end_date = (today - timedelta(days=period)).isoformat(), today.isoformat()
    if not start_date or not end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date and end date are required")
    try:
        parse_iso_date(start_date)
        parse_iso_date(end_date)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date and end date must be ISO dates")
    try:
        return await storage.get_expenses_by_category(start_date, end_date, user_id)
    except Exception:
        logger.exception("Failed to fetch expense analytics")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch expense analytics")


@router.get("/monthly-expenses", response_model=List[Transaction])
async def monthly_expenses(
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Transaction]:
    today = date.today()
    try:
        return await storage.get_monthly_expenses(year or today.year, month or today.month, user_id)
    except Exception:
        logger.exception("Failed to fetch monthly expenses")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch monthly expenses")
