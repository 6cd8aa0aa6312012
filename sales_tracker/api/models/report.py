"""
API data models for reports
"""

from pydantic import Field
from datetime import datetime

from sales_tracker.api.models.sale import CamelModel


class SummaryReport(CamelModel):
    """Model for the summary report"""
    total_revenue: float = Field(..., description="Sum of all sale prices")
    total_sales: int = Field(..., description="Number of sales")
    average_revenue: float = Field(..., description="Mean sale price")
    highest_sale: float = Field(..., description="Largest sale price")
    lowest_sale: float = Field(..., description="Smallest sale price")
    top_customer: str = Field(..., description="Customer with the most revenue")
    most_sold_type: str = Field(..., description="Type with the most sales")


class RevenueTrendPoint(CamelModel):
    """Model for one day of the revenue trend"""
    date: datetime = Field(..., description="Calendar day")
    revenue: float = Field(..., description="Revenue on that day")
    sales_count: int = Field(..., description="Number of sales on that day")


class SalesByType(CamelModel):
    """Model for revenue per type"""
    type: str = Field(..., description="Type of item sold")
    count: int = Field(..., description="Number of sales")
    revenue: float = Field(..., description="Revenue for the type")
    percentage: float = Field(..., description="Share of total revenue, 0-100")


class TopCustomer(CamelModel):
    """Model for a ranked customer"""
    customer_name: str = Field(..., description="Customer name")
    sales_count: int = Field(..., description="Number of sales")
    total_revenue: float = Field(..., description="Revenue from the customer")


class MonthlyData(CamelModel):
    """Model for one month of the monthly comparison"""
    month: str = Field(..., description="Three letter month abbreviation")
    month_number: int = Field(..., description="Month number, 1-12")
    revenue: float = Field(..., description="Revenue in the month")
    sales_count: int = Field(..., description="Number of sales in the month")
