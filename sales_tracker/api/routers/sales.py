"""
API router for sales operations

Provides endpoints for managing, importing and exporting sales records.
"""

from fastapi import APIRouter, HTTPException, status, Query, UploadFile, File, Response
from fastapi.responses import StreamingResponse
from typing import List
import io
import logging

from sales_tracker.api.models.sale import (
    BulkSaleItem,
    ImportPreview,
    ImportResponse,
    Sale,
    SaleCreate,
    SaleUpdate,
)
from sales_tracker.api.services import sale_service
from sales_tracker.config.settings import settings
from sales_tracker.core.errors import SalesTrackerError
from sales_tracker.core.report_engine import utc_now

# Create router
router = APIRouter()
logger = logging.getLogger(__name__)

PREVIEW_ROWS = 10


async def _read_upload_file(file: UploadFile) -> bytes:
    """Read an uploaded file, rejecting anything over ``MAX_UPLOAD_SIZE_MB``."""
    contents = await file.read()
    max_size = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(contents) > max_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB} MB"
        )
    return contents


@router.get(
    "",
    response_model=List[Sale],
    summary="List sales",
    description="Get every sale, newest first"
)
async def list_sales():
    """
    Get every sale, newest first

    Returns:
        List[Sale]: All stored sales
    """
    try:
        return sale_service.list_sales()
    except Exception as e:
        logger.error(f"Error listing sales: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error listing sales: {str(e)}"
        )


@router.post(
    "",
    response_model=Sale,
    status_code=status.HTTP_201_CREATED,
    summary="Create sale",
    description="Store a single validated sale"
)
async def create_sale(sale: SaleCreate):
    """
    Store a single sale

    Args:
        sale: Sale fields; price must be greater than zero

    Returns:
        Sale: The stored sale including its ID
    """
    try:
        return sale_service.create_sale(sale.model_dump())
    except Exception as e:
        logger.error(f"Error creating sale: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating sale: {str(e)}"
        )


@router.post(
    "/bulk",
    response_model=ImportResponse,
    summary="Bulk import sales",
    description="Validate already-mapped sales and store the valid ones in one batch"
)
async def bulk_import(items: List[BulkSaleItem]):
    """
    Validate already-mapped sales and store the valid ones

    Args:
        items: Sales with canonical field names

    Returns:
        ImportResponse: Imported and failed counts with one error per rejected row
    """
    try:
        result = sale_service.bulk_add_sales([item.model_dump() for item in items])
        return {
            "success": True,
            "imported": result.imported_count,
            "failed": result.failed_count,
            "errors": result.errors
        }
    except (HTTPException, SalesTrackerError):
        raise
    except Exception as e:
        logger.error(f"Error importing sales: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error importing sales: {str(e)}"
        )


@router.post(
    "/import",
    response_model=ImportResponse,
    summary="Import sales file",
    description="Upload a CSV or Excel file, normalize its rows and store the valid ones"
)
async def import_sales_file(file: UploadFile = File(...)):
    """
    Import sales from an uploaded CSV or Excel file

    Args:
        file: Uploaded ``.csv``, ``.xlsx`` or ``.xls`` file

    Returns:
        ImportResponse: Imported and failed counts with one error per rejected row
    """
    try:
        contents = await _read_upload_file(file)
        result = sale_service.import_file(file.filename, contents)
        return {
            "success": True,
            "imported": result.imported_count,
            "failed": result.failed_count,
            "errors": result.errors
        }
    except (HTTPException, SalesTrackerError):
        raise
    except Exception as e:
        logger.error(f"Error importing file {file.filename}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error importing file: {str(e)}"
        )
    finally:
        await file.close()


@router.post(
    "/import/preview",
    response_model=ImportPreview,
    summary="Preview sales file",
    description="Normalize an uploaded file without storing it"
)
async def preview_sales_file(file: UploadFile = File(...)):
    """
    Preview an import

    Args:
        file: Uploaded ``.csv``, ``.xlsx`` or ``.xls`` file

    Returns:
        ImportPreview: Row totals and the first normalized rows that would be stored
    """
    try:
        contents = await _read_upload_file(file)
        result = sale_service.preview_file(file.filename, contents)
        return {
            "total": result.imported_count + result.failed_count,
            "valid": result.imported_count,
            "invalid": result.failed_count,
            "preview": result.accepted_records[:PREVIEW_ROWS],
            "errors": result.errors
        }
    except (HTTPException, SalesTrackerError):
        raise
    except Exception as e:
        logger.error(f"Error previewing file {file.filename}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error previewing file: {str(e)}"
        )
    finally:
        await file.close()


@router.get(
    "/export",
    summary="Export sales",
    description="Download every sale as CSV or Excel in the import layout"
)
async def export_sales(format: str = Query("csv", description="Export format (csv or excel)")):
    """
    Export every sale in the layout accepted by the import endpoint

    Args:
        format: Export format (csv or excel)

    Returns:
        StreamingResponse: File download response
    """
    try:
        if format.lower() not in ["csv", "excel"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported export format. Use 'csv' or 'excel'"
            )

        df = sale_service.export_sales()
        timestamp = utc_now().strftime("%Y%m%d_%H%M%S")
        output = io.BytesIO()

        if format.lower() == "csv":
            df.to_csv(output, index=False)
            media_type = "text/csv"
            filename = f"sales-{timestamp}.csv"
        else:
            df.to_excel(output, index=False, engine="openpyxl")
            media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
            filename = f"sales-{timestamp}.xlsx"

        output.seek(0)
        logger.info(f"Exported {len(df)} sales as {format.lower()}")

        return StreamingResponse(
            output,
            media_type=media_type,
            headers={
                "Content-Disposition": f"attachment; filename={filename}"
            }
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error exporting sales: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error exporting sales: {str(e)}"
        )


@router.delete(
    "/all",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete all sales",
    description="Remove every stored sale"
)
async def delete_all_sales():
    """Remove every stored sale."""
    sale_service.delete_all_sales()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{sale_id}",
    response_model=Sale,
    summary="Get sale by ID",
    description="Get a specific sale by its ID"
)
async def get_sale(sale_id: int):
    """
    Get a specific sale by its ID

    Args:
        sale_id: Sale ID

    Returns:
        Sale: The stored sale
    """
    return sale_service.get_sale(sale_id)


@router.put(
    "/{sale_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Update sale",
    description="Replace every field of a sale; the body ID must match the path ID"
)
async def update_sale(sale_id: int, sale: SaleUpdate):
    """
    Replace every field of an existing sale

    Args:
        sale_id: Sale ID from the path
        sale: Full sale including its ``id``
    """
    sale_service.update_sale(sale_id, sale.model_dump())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{sale_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete sale",
    description="Remove a single sale"
)
async def delete_sale(sale_id: int):
    """
    Remove a single sale

    Args:
        sale_id: Sale ID
    """
    sale_service.delete_sale(sale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
