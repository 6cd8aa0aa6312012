"""
Database models for the Sales Tracker
"""
from sqlalchemy import Column, Integer, String, DateTime, Numeric
from typing import Dict, Any

from sales_tracker.db.session import Base


class SaleItem(Base):
    """Sale record database model"""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime, nullable=False, index=True)
    customer_name = Column(String(200), nullable=False, index=True)
    type = Column(String(100), nullable=False, index=True)
    asset_name = Column(String(300), nullable=False)
    link = Column(String(500), nullable=True, default="")
    price = Column(Numeric(precision=18, scale=2, asdecimal=False), nullable=False)

    def __repr__(self):
        return f"<SaleItem {self.id}, customer={self.customer_name}, price={self.price}>"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the sale to a plain dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of the sale
        """
        return {
            "id": self.id,
            "date": self.date,
            "customer_name": self.customer_name,
            "type": self.type,
            "asset_name": self.asset_name,
            "link": self.link or "",
            "price": float(self.price) if self.price is not None else 0.0,
        }
