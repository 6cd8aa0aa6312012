"""
Error taxonomy for the sales tracker core.

Row-level import failures are plain values collected into the batch result;
the exception classes below cover the failures that abort an operation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """Enum representing error categories."""
    DATA_VALIDATION = "data_validation"
    EMPTY_BATCH = "empty_batch"
    NOT_FOUND = "not_found"
    IDENTIFIER_MISMATCH = "identifier_mismatch"
    FILE_PROCESSING = "file_processing"


class SalesTrackerError(Exception):
    """Base class for errors raised by the sales tracker."""

    category: ErrorCategory = ErrorCategory.DATA_VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyBatchError(SalesTrackerError):
    """Raised when an import is submitted with zero rows."""

    category = ErrorCategory.EMPTY_BATCH

    def __init__(self, message: str = "No sales data provided"):
        super().__init__(message)


class RecordNotFoundError(SalesTrackerError):
    """Raised when a sale id does not exist."""

    category = ErrorCategory.NOT_FOUND

    def __init__(self, record_id: int):
        super().__init__(f"Sale with ID {record_id} not found")
        self.record_id = record_id


class IdentifierMismatchError(SalesTrackerError):
    """Raised when an update body names a different sale than the path."""

    category = ErrorCategory.IDENTIFIER_MISMATCH

    def __init__(self, path_id: int, body_id: Optional[int]):
        super().__init__(f"Sale ID {body_id} in body does not match ID {path_id} in path")
        self.path_id = path_id
        self.body_id = body_id


class UnsupportedFileError(SalesTrackerError):
    """Raised when an uploaded file is not a readable CSV or Excel sheet."""

    category = ErrorCategory.FILE_PROCESSING


@dataclass
class RowValidationError:
    """A rejected import row. Recorded in the batch result, never raised."""

    row_number: int
    customer_name: str
    message: str

    def __str__(self):
        return self.message
