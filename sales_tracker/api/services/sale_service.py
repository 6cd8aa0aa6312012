"""
Service layer for sales operations

Provides functions for storing, importing and exporting sales records.
"""

from typing import List, Dict, Any
import logging

from sales_tracker.db.session import get_db_session
from sales_tracker.db.repository import SaleItemRepository
from sales_tracker.core.errors import IdentifierMismatchError, RecordNotFoundError
from sales_tracker.core.import_normalizer import (
    ImportNormalizer,
    ImportResult,
    export_frame,
    read_upload,
)
from sales_tracker.core.report_engine import utc_now

# Configure logging
logger = logging.getLogger(__name__)

sale_repository = SaleItemRepository()
normalizer = ImportNormalizer()


def list_sales() -> List[Dict[str, Any]]:
    """
    Get every sale, newest first

    Returns:
        List[Dict]: Sales as dictionaries
    """
    with get_db_session() as session:
        return [sale.to_dict() for sale in sale_repository.list_all(session)]


def get_sale(sale_id: int) -> Dict[str, Any]:
    """
    Get a sale by its ID

    Raises:
        RecordNotFoundError: if the sale does not exist
    """
    with get_db_session() as session:
        sale = sale_repository.get(session, sale_id)
        if not sale:
            raise RecordNotFoundError(sale_id)
        return sale.to_dict()


def create_sale(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Store a single sale

    Args:
        values: Validated sale fields

    Returns:
        Dict: The stored sale including its new ID
    """
    with get_db_session() as session:
        sale = sale_repository.create(session, values)
        logger.info(f"Created sale {sale.id} for {sale.customer_name}")
        return sale.to_dict()


def update_sale(sale_id: int, values: Dict[str, Any]) -> None:
    """
    Replace every field of an existing sale

    Args:
        sale_id: ID from the request path
        values: Full record, including its ``id``

    Raises:
        IdentifierMismatchError: if the body ID differs from the path ID
        RecordNotFoundError: if the sale does not exist
    """
    if values.get("id") != sale_id:
        raise IdentifierMismatchError(sale_id, values.get("id"))

    with get_db_session() as session:
        sale = sale_repository.get(session, sale_id)
        if not sale:
            raise RecordNotFoundError(sale_id)
        sale_repository.update(session, db_obj=sale, obj_in=values)
        logger.info(f"Updated sale {sale_id}")


def delete_sale(sale_id: int) -> None:
    """
    Delete a sale by its ID

    Raises:
        RecordNotFoundError: if the sale does not exist
    """
    with get_db_session() as session:
        if not sale_repository.delete(session, id=sale_id):
            raise RecordNotFoundError(sale_id)
        logger.info(f"Deleted sale {sale_id}")


def delete_all_sales() -> int:
    """
    Delete every sale

    Returns:
        int: Number of deleted sales
    """
    with get_db_session() as session:
        deleted = sale_repository.delete_all(session)
        logger.info(f"Deleted all sales ({deleted} records)")
        return deleted


def _store_accepted(result: ImportResult) -> ImportResult:
    # One transaction for the whole accepted subset
    if result.accepted_records:
        with get_db_session() as session:
            sale_repository.insert_many(session, result.accepted_records)
    return result


def bulk_add_sales(items: List[Dict[str, Any]]) -> ImportResult:
    """
    Validate already-mapped records and store the valid ones

    Args:
        items: Records with canonical field names

    Returns:
        ImportResult: Accepted records and per-row failures

    Raises:
        EmptyBatchError: if no records are submitted
    """
    now = utc_now()
    records = [
        {
            "date": item.get("date") or now,
            "customer_name": item.get("customer_name") or "",
            "type": (item.get("type") or "").strip() or "Other",
            "asset_name": item.get("asset_name") or "",
            "link": item.get("link") or "",
            "price": item.get("price") or 0,
        }
        for item in items
    ]
    result = _store_accepted(normalizer.validate_batch(records))
    logger.info(f"Bulk import: {result.imported_count} imported, {result.failed_count} failed")
    return result


def import_file(filename: str, contents: bytes) -> ImportResult:
    """
    Normalize an uploaded CSV or Excel file and store the valid rows

    Args:
        filename: Uploaded file name, used to pick the parser
        contents: Raw file bytes

    Returns:
        ImportResult: Accepted records and per-row failures

    Raises:
        UnsupportedFileError: if the file cannot be read
        EmptyBatchError: if the file has no data rows
    """
    rows = read_upload(filename, contents)
    result = _store_accepted(normalizer.normalize_rows(rows))
    logger.info(
        f"Imported {filename}: {result.imported_count} imported, {result.failed_count} failed"
    )
    return result


def preview_file(filename: str, contents: bytes) -> ImportResult:
    """Normalize an uploaded file without storing anything."""
    return normalizer.normalize_rows(read_upload(filename, contents))


def export_sales():
    """
    Get every sale in the canonical import layout

    Returns:
        pd.DataFrame: One row per sale with ``Date,Name,Type,Asset,Link,Price`` columns
    """
    with get_db_session() as session:
        return export_frame(sale_repository.list_all(session))
