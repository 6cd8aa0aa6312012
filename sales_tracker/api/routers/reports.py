"""
API router for sales reports

Every report loads a fresh snapshot of the stored sales. Query parameters
are parsed leniently: values that do not parse are treated as missing.
"""

from fastapi import APIRouter, Query
from typing import List, Optional
from datetime import datetime
import logging
import pandas as pd

from sales_tracker.api.models.report import (
    MonthlyData,
    RevenueTrendPoint,
    SalesByType,
    SummaryReport,
    TopCustomer,
)
from sales_tracker.api.services import report_service
from sales_tracker.core.report_engine import to_utc_naive

# Create router
router = APIRouter()
logger = logging.getLogger(__name__)


def parse_date_param(value: Optional[str]) -> Optional[datetime]:
    """Parse a date query parameter, returning None when it does not parse."""
    if not value or not value.strip():
        return None
    try:
        parsed = pd.to_datetime(value.strip(), errors="coerce")
    except (ValueError, TypeError, OverflowError):
        parsed = pd.NaT
    if pd.isna(parsed):
        logger.warning(f"Ignoring unparseable date parameter: {value}")
        return None
    return to_utc_naive(parsed.to_pydatetime())


def parse_int_param(value: Optional[str]) -> Optional[int]:
    """Parse an integer query parameter, returning None when it does not parse."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.warning(f"Ignoring unparseable integer parameter: {value}")
        return None


@router.get(
    "/summary",
    response_model=SummaryReport,
    summary="Sales summary",
    description="Totals, extremes, top customer and most sold type over every sale"
)
async def get_summary():
    """
    Summary statistics over every sale

    Returns:
        SummaryReport: Zeros and "N/A" when there are no sales
    """
    return report_service.get_summary()


@router.get(
    "/revenue-trend",
    response_model=List[RevenueTrendPoint],
    summary="Revenue trend",
    description="Daily revenue within a date window, defaulting to the last 30 days"
)
async def get_revenue_trend(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate")
):
    """
    Daily revenue within a date window

    Args:
        start_date: Window start, inclusive
        end_date: Window end, inclusive; defaults to now

    Returns:
        List[RevenueTrendPoint]: One entry per day with sales, oldest first
    """
    return report_service.get_revenue_trend(
        parse_date_param(start_date), parse_date_param(end_date)
    )


@router.get(
    "/sales-by-type",
    response_model=List[SalesByType],
    summary="Sales by type",
    description="Revenue, count and share of total revenue per type"
)
async def get_sales_by_type():
    """
    Revenue per type, largest first

    Returns:
        List[SalesByType]: One entry per type
    """
    return report_service.get_sales_by_type()


@router.get(
    "/top-customers",
    response_model=List[TopCustomer],
    summary="Top customers",
    description="Customers ranked by total revenue"
)
async def get_top_customers(limit: Optional[str] = Query(None, description="Number of customers")):
    """
    Customers ranked by total revenue

    Args:
        limit: Number of customers; missing or negative values use the default

    Returns:
        List[TopCustomer]: At most ``limit`` customers
    """
    return report_service.get_top_customers(parse_int_param(limit))


@router.get(
    "/monthly-comparison",
    response_model=List[MonthlyData],
    summary="Monthly comparison",
    description="Revenue and sales count for each month of a year"
)
async def get_monthly_comparison(year: Optional[str] = Query(None, description="Calendar year")):
    """
    Twelve months of revenue for a year

    Args:
        year: Calendar year; defaults to the current year

    Returns:
        List[MonthlyData]: Exactly twelve entries, January first
    """
    return report_service.get_monthly_comparison(parse_int_param(year))
