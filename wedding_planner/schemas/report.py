from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class ReportPeriod(str, Enum):
    MONTH = "month"
    YEAR = "year"


class PackageTypeRevenue(BaseModel):
    package_type: str
    revenue: float
    cost: float
    usage_count: int


class PreviousPeriod(BaseModel):
    value: Optional[str] = None
    total_revenue: float = 0
    total_cogs: float = 0
    net_profit: float = 0


class FinancialReport(BaseModel):
    """Revenue and profit figures for weddings held in one month or year"""
    period: ReportPeriod
    value: Optional[str] = Field(None, description="YYYY-MM for months, YYYY for years; omitted means all time")
    total_revenue: float = Field(..., description="Sum of assigned package selling prices")
    total_cogs: float = Field(..., description="Sum of assigned package unit costs")
    total_gross_profit: float
    total_equipment_cost: float
    net_profit: float
    gross_profit_margin: float = Field(..., description="Percentage of revenue")
    net_profit_margin: float = Field(..., description="Percentage of revenue")
    total_table_assignments: int
    weddings_with_packages: int
    revenue_by_package_type: List[PackageTypeRevenue] = []
    previous_period: PreviousPeriod
