"""
Service layer for reports

Loads a fresh snapshot of sales for each request and hands it to the
report engine.
"""

from typing import List, Dict, Any, Optional
import logging
from datetime import datetime

from sales_tracker.config.settings import settings
from sales_tracker.core import report_engine
from sales_tracker.db.session import get_db_session
from sales_tracker.db.repository import SaleItemRepository

# Configure logging
logger = logging.getLogger(__name__)

sale_repository = SaleItemRepository()


def get_summary() -> Dict[str, Any]:
    """Summary statistics over every sale."""
    with get_db_session() as session:
        return report_engine.summarize(sale_repository.list_all(session))


def get_revenue_trend(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """
    Daily revenue within a date window

    Args:
        start_date: Window start, defaults to ``TREND_DEFAULT_DAYS`` before the end
        end_date: Window end, defaults to now

    Returns:
        List[Dict]: One entry per day that has sales
    """
    start, end = report_engine.resolve_trend_window(
        start_date, end_date, default_days=settings.TREND_DEFAULT_DAYS
    )
    with get_db_session() as session:
        sales = sale_repository.list_in_range(session, start, end)
        return report_engine.revenue_trend(sales, start, end)


def get_sales_by_type() -> List[Dict[str, Any]]:
    """Revenue and share per type."""
    with get_db_session() as session:
        return report_engine.sales_by_type(sale_repository.list_all(session))


def get_top_customers(limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Customers ranked by revenue

    Args:
        limit: Number of customers, defaults to ``TOP_CUSTOMERS_DEFAULT_LIMIT``
    """
    with get_db_session() as session:
        return report_engine.top_customers(
            sale_repository.list_all(session),
            limit=limit,
            default_limit=settings.TOP_CUSTOMERS_DEFAULT_LIMIT
        )


def get_monthly_comparison(year: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Twelve months of revenue for a year

    Args:
        year: Calendar year, defaults to the current year
    """
    target_year = report_engine.resolve_year(year)
    with get_db_session() as session:
        sales = sale_repository.list_for_year(session, target_year)
        return report_engine.monthly_comparison(sales, target_year)
