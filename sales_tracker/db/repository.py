from typing import List, Dict, Any, Optional, TypeVar, Generic, Type, Iterable
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from sales_tracker.db.session import Base
from sales_tracker.models.models import SaleItem

# Setup logging
logger = logging.getLogger(__name__)

# Generic type for SQLAlchemy models
T = TypeVar('T', bound=Base)

class Repository(Generic[T]):
    """
    Generic repository for database CRUD operations.

    This class provides a standard interface for basic CRUD operations
    for any SQLAlchemy model with an integer ``id`` primary key.
    """

    def __init__(self, model: Type[T]):
        """
        Initialize the repository with the SQLAlchemy model.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def create(self, session: Session, obj_in: Dict[str, Any]) -> T:
        """
        Create a new database record.

        Args:
            session: SQLAlchemy session
            obj_in: Dictionary containing the object data

        Returns:
            T: Created database object
        """
        db_obj = self.model(**obj_in)
        session.add(db_obj)
        session.flush()
        session.refresh(db_obj)
        return db_obj

    def get(self, session: Session, id: Any) -> Optional[T]:
        """
        Get an object by ID.

        Args:
            session: SQLAlchemy session
            id: Object ID

        Returns:
            Optional[T]: Retrieved object or None if not found
        """
        return session.get(self.model, id)

    def update(self, session: Session, *, db_obj: T, obj_in: Dict[str, Any]) -> T:
        """
        Update an existing database object.

        Args:
            session: SQLAlchemy session
            db_obj: Database object to update
            obj_in: Dictionary containing update data

        Returns:
            T: Updated database object
        """
        for field in obj_in:
            if field != "id" and hasattr(db_obj, field):
                setattr(db_obj, field, obj_in[field])

        session.add(db_obj)
        session.flush()
        session.refresh(db_obj)
        return db_obj

    def delete(self, session: Session, *, id: Any) -> Optional[T]:
        """
        Delete an object by ID.

        Args:
            session: SQLAlchemy session
            id: Object ID

        Returns:
            Optional[T]: Deleted object or None if not found
        """
        obj = self.get(session, id)
        if obj:
            session.delete(obj)
            session.flush()
        return obj

    def count(self, session: Session) -> int:
        """Count all objects."""
        return session.query(self.model).count()


class SaleItemRepository(Repository[SaleItem]):
    """Repository for SaleItem operations with report and bulk helpers."""

    def __init__(self):
        super().__init__(SaleItem)

    def list_all(self, session: Session) -> List[SaleItem]:
        """Get every sale, newest first."""
        return session.query(self.model).order_by(self.model.date.desc(), self.model.id.desc()).all()

    def list_in_range(self, session: Session, start: datetime, end: datetime) -> List[SaleItem]:
        """Get sales dated within ``[start, end]`` inclusive."""
        return session.query(self.model).filter(
            self.model.date >= start,
            self.model.date <= end
        ).order_by(self.model.date.asc()).all()

    def list_for_year(self, session: Session, year: int) -> List[SaleItem]:
        """Get sales dated within the given calendar year."""
        query = session.query(self.model).filter(self.model.date >= datetime(year, 1, 1))
        if year < 9999:
            query = query.filter(self.model.date < datetime(year + 1, 1, 1))
        return query.order_by(self.model.date.asc()).all()

    def insert_many(self, session: Session, records: Iterable[Dict[str, Any]]) -> List[SaleItem]:
        """
        Insert a batch of sales in a single flush.

        The caller's transaction decides whether the batch is committed;
        a failure rolls back every row of the batch.

        Args:
            session: SQLAlchemy session
            records: Canonical sale dictionaries

        Returns:
            List[SaleItem]: Inserted objects with identifiers assigned
        """
        items = [self.model(**record) for record in records]
        if not items:
            return []

        session.add_all(items)
        session.flush()
        logger.info(f"Inserted {len(items)} sales")
        return items

    def delete_all(self, session: Session) -> int:
        """
        Delete every sale.

        Returns:
            int: Number of sales deleted
        """
        deleted = session.query(self.model).delete(synchronize_session=False)
        session.flush()
        return deleted
