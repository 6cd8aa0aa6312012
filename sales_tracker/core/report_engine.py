"""
Report aggregations over sale records.

Every function here is a pure computation over a list of sale records
(ORM ``SaleItem`` rows or any object exposing ``date``, ``customer_name``,
``type`` and ``price`` attributes). Parameters that are missing or out of
range fall back to their defaults instead of raising.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
DEFAULT_TREND_DAYS = 30
DEFAULT_TOP_CUSTOMERS = 10

# Fixed English abbreviations; calendar.month_abbr follows the process locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_COLUMNS = ["day", "year", "month", "customer_name", "type", "price"]


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching stored values."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _to_frame(records) -> pd.DataFrame:
    """
    Build a DataFrame with one row per sale record.

    Calendar keys are derived in Python so that dates outside the
    nanosecond timestamp range never reach pandas.
    """
    rows = []
    for record in records:
        moment = to_utc_naive(record.date)
        rows.append({
            "day": moment.date(),
            "year": moment.year,
            "month": moment.month,
            "customer_name": record.customer_name,
            "type": record.type,
            "price": float(record.price or 0),
        })
    df = pd.DataFrame(rows, columns=_COLUMNS)
    df["price"] = df["price"].astype(float)
    return df


def _leading_key(totals: pd.Series) -> str:
    """
    Key of the largest value in a grouped series.

    Groups come out of ``groupby`` sorted by key, and ``idxmax`` returns
    the first maximum, so ties resolve to the lexicographically smallest key.
    """
    if totals.empty:
        return NOT_AVAILABLE
    return str(totals.idxmax())


def summarize(records) -> Dict[str, Any]:
    """
    Summary statistics over all records.

    An empty record set yields zeros and ``"N/A"`` names.
    """
    df = _to_frame(records)
    if df.empty:
        return {
            "total_revenue": 0.0,
            "total_sales": 0,
            "average_revenue": 0.0,
            "highest_sale": 0.0,
            "lowest_sale": 0.0,
            "top_customer": NOT_AVAILABLE,
            "most_sold_type": NOT_AVAILABLE,
        }

    revenue_by_customer = df.groupby("customer_name", sort=True)["price"].sum()
    count_by_type = df.groupby("type", sort=True)["price"].count()

    return {
        "total_revenue": float(df["price"].sum()),
        "total_sales": int(len(df)),
        "average_revenue": float(df["price"].mean()),
        "highest_sale": float(df["price"].max()),
        "lowest_sale": float(df["price"].min()),
        "top_customer": _leading_key(revenue_by_customer),
        "most_sold_type": _leading_key(count_by_type),
    }


def resolve_trend_window(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    default_days: int = DEFAULT_TREND_DAYS,
    now: Optional[datetime] = None,
):
    """
    Resolve the revenue trend window.

    A missing end defaults to now; a missing start defaults to
    ``default_days`` before the end.
    """
    end = to_utc_naive(end_date) if end_date is not None else (now or utc_now())
    if start_date is not None:
        start = to_utc_naive(start_date)
    else:
        start = end - timedelta(days=default_days)
    return start, end


def revenue_trend(
    records,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    default_days: int = DEFAULT_TREND_DAYS,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Daily revenue within ``[start_date, end_date]`` inclusive.

    Only dates that have sales appear in the output; days without sales are
    left out, unlike the monthly comparison which fills every month.
    """
    start, end = resolve_trend_window(start_date, end_date, default_days, now)
    in_window = [r for r in records if start <= to_utc_naive(r.date) <= end]
    df = _to_frame(in_window)
    if df.empty:
        return []

    daily = df.groupby("day", sort=True)["price"].agg(["sum", "count"])
    return [
        {
            "date": datetime.combine(day, time()),
            "revenue": float(row["sum"]),
            "sales_count": int(row["count"]),
        }
        for day, row in daily.iterrows()
    ]


def sales_by_type(records) -> List[Dict[str, Any]]:
    """Revenue and share of grand total per type, largest revenue first."""
    df = _to_frame(records)
    if df.empty:
        return []

    total_revenue = float(df["price"].sum())
    by_type = (
        df.groupby("type", sort=True)["price"]
        .agg(["count", "sum"])
        .reset_index()
        .sort_values(["sum", "type"], ascending=[False, True], kind="mergesort")
    )

    result = []
    for _, row in by_type.iterrows():
        revenue = float(row["sum"])
        result.append({
            "type": row["type"],
            "count": int(row["count"]),
            "revenue": revenue,
            "percentage": (revenue / total_revenue * 100) if total_revenue > 0 else 0.0,
        })
    return result


def resolve_limit(limit: Optional[int], default: int = DEFAULT_TOP_CUSTOMERS) -> int:
    """A missing or negative limit falls back to the default."""
    if limit is None or limit < 0:
        return default
    return limit


def top_customers(
    records,
    limit: Optional[int] = DEFAULT_TOP_CUSTOMERS,
    default_limit: int = DEFAULT_TOP_CUSTOMERS,
) -> List[Dict[str, Any]]:
    """
    Customers ranked by total revenue, truncated to ``limit`` entries.

    A limit of zero yields an empty list. Equal revenues are ordered by
    customer name.
    """
    limit = resolve_limit(limit, default_limit)
    df = _to_frame(records)
    if df.empty or limit == 0:
        return []

    ranked = (
        df.groupby("customer_name", sort=True)["price"]
        .agg(["count", "sum"])
        .reset_index()
        .sort_values(["sum", "customer_name"], ascending=[False, True], kind="mergesort")
        .head(limit)
    )
    return [
        {
            "customer_name": row["customer_name"],
            "sales_count": int(row["count"]),
            "total_revenue": float(row["sum"]),
        }
        for _, row in ranked.iterrows()
    ]


def resolve_year(year: Optional[int], now: Optional[datetime] = None) -> int:
    """A missing or out-of-range year falls back to the current year."""
    if year is None or not (1 <= year <= 9999):
        return (now or utc_now()).year
    return year


def monthly_comparison(
    records,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Revenue and sales count for each month of ``year``.

    Always returns twelve entries, January first; months without sales are
    reported with zero revenue and zero count.
    """
    target_year = resolve_year(year, now)
    df = _to_frame(records)
    df = df[df["year"] == target_year]

    monthly = (
        df.groupby("month")["price"].agg(["sum", "count"])
        .reindex(range(1, 13), fill_value=0)
    )
    logger.debug(f"Monthly comparison for {target_year}: {len(df)} sales in range")
    return [
        {
            "month": MONTH_ABBREVIATIONS[month - 1],
            "month_number": int(month),
            "revenue": float(row["sum"]),
            "sales_count": int(row["count"]),
        }
        for month, row in monthly.iterrows()
    ]
