"""
API data models for sales records
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from sales_tracker.core.report_engine import to_utc_naive, utc_now


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SaleBase(CamelModel):
    """Fields shared by every sale payload"""
    date: datetime = Field(default_factory=utc_now, description="Date of the sale")
    customer_name: str = Field(..., max_length=200, description="Customer name")
    type: str = Field(..., max_length=100, description="Type of item sold")
    asset_name: str = Field(..., max_length=300, description="Name of the item sold")
    link: Optional[str] = Field("", max_length=500, description="Link to the item")
    price: float = Field(..., description="Sale price")

    @field_validator("link", mode="before")
    @classmethod
    def link_default(cls, v):
        return v if v is not None else ""

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, v):
        return to_utc_naive(v)


class SaleCreate(SaleBase):
    """Model for a single sale creation request"""

    @field_validator("customer_name", "type", "asset_name")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("price")
    @classmethod
    def positive_price(cls, v):
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v


class SaleUpdate(SaleBase):
    """Model for a full sale update; the body id must match the path id"""
    id: int = Field(..., description="Identifier of the sale being updated")
    customer_name: str = Field(..., min_length=1, max_length=200, description="Customer name")
    type: str = Field(..., min_length=1, max_length=100, description="Type of item sold")
    asset_name: str = Field(..., min_length=1, max_length=300, description="Name of the item sold")


class BulkSaleItem(CamelModel):
    """
    Model for one already-mapped row of a bulk import

    Every field is optional here; rows are validated one by one and
    rejected rows are reported instead of failing the request.
    """
    date: Optional[datetime] = Field(None, description="Date of the sale")
    customer_name: Optional[str] = Field("", description="Customer name")
    type: Optional[str] = Field("Other", description="Type of item sold")
    asset_name: Optional[str] = Field("", description="Name of the item sold")
    link: Optional[str] = Field("", description="Link to the item")
    price: Optional[float] = Field(0, description="Sale price")

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, v):
        return to_utc_naive(v) if v is not None else v


class Sale(SaleBase):
    """Model for a stored sale"""
    id: int = Field(..., description="Identifier assigned by the database")


class ImportResponse(CamelModel):
    """Model for bulk and file import results"""
    success: bool = Field(..., description="Whether the batch was processed")
    imported: int = Field(..., description="Number of records stored")
    failed: int = Field(..., description="Number of rejected rows")
    errors: List[str] = Field([], description="One message per rejected row")


class ImportPreview(CamelModel):
    """Model for an import preview"""
    total: int = Field(..., description="Number of data rows in the file")
    valid: int = Field(..., description="Rows that would be imported")
    invalid: int = Field(..., description="Rows that would be rejected")
    preview: List[SaleBase] = Field(..., description="First normalized rows")
    errors: List[str] = Field([], description="One message per rejected row")
