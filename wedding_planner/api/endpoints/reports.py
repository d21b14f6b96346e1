from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.report import ReportPeriod
from wedding_planner.services.report import AsyncReportService

router = APIRouter()


@router.get("/financial", response_model=ApiResponse)
async def financial_report(
    period: ReportPeriod = Query(ReportPeriod.MONTH, description="Reporting period"),
    value: Optional[str] = Query(None, description="YYYY-MM for month, YYYY for year; omit for all time"),
    db: AsyncSession = Depends(get_async_db)
):
    """Revenue, cost of goods, profit and margins for weddings in the period."""
    return ApiResponse.ok(await AsyncReportService.financial_report(db, period, value))


@router.get("/wedding/{wedding_id}/seating", response_model=ApiResponse)
async def seating_report(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncReportService.seating_report(db, wedding_id))


@router.get("/wedding/{wedding_id}/inventory", response_model=ApiResponse)
async def inventory_report(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncReportService.inventory_report(db, wedding_id))


@router.get("/wedding/{wedding_id}/menu-dietary", response_model=ApiResponse)
async def menu_dietary_report(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncReportService.menu_dietary_report(db, wedding_id))
