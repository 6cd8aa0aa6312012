import pandas as pd
from dataclasses import dataclass, field
from datetime import datetime
import io
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sales_tracker.core.errors import EmptyBatchError, RowValidationError, UnsupportedFileError
from sales_tracker.core.report_engine import to_utc_naive, utc_now

# Set up logging
logger = logging.getLogger(__name__)

# Canonical layout used for export and accepted back on import
EXPORT_HEADERS = ["Date", "Name", "Type", "Asset", "Link", "Price"]

CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xls")

_DAY_MONTH_YEAR = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_NON_NUMERIC = re.compile(r"[^0-9.\-]+")
_LEADING_NUMBER = re.compile(r"^-?\d*\.?\d+")


@dataclass
class ImportResult:
    """Outcome of normalizing one import batch."""

    accepted_records: List[Dict[str, Any]] = field(default_factory=list)
    failures: List[RowValidationError] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.accepted_records)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def errors(self) -> List[str]:
        return [failure.message for failure in self.failures]


class ImportNormalizer:
    """
    Maps raw tabular rows onto canonical sale records.

    This class is responsible for:
    - Resolving flexible column names onto canonical fields
    - Parsing currency strings and heterogeneous date formats
    - Validating mapped records without aborting the batch
    """

    def __init__(self, column_aliases=None, defaults=None):
        # Alternative header names per canonical field, in priority order
        self.column_aliases = column_aliases or {
            "customer_name": ["Name", "Customer", "Client", "Customer Name"],
            "type": ["Type", "Category"],
            "asset_name": ["Asset", "Product", "Item"],
            "link": ["Link", "Url", "EnvatoLink"],
            "price": ["Price", "Amount", "Cost"],
            "date": ["Date", "DateAdded", "Created"],
        }

        self.defaults = defaults or {
            "customer_name": "Unknown Customer",
            "type": "Other",
            "asset_name": "Unknown Asset",
            "link": "",
            "price": "0",
            "date": None,
        }

        self.max_lengths = {
            "customer_name": 200,
            "type": 100,
            "asset_name": 300,
            "link": 500,
        }

    def resolve_column(self, row: Mapping[str, Any], field_name: str) -> Optional[str]:
        """
        Pick the value for a canonical field from a raw row.

        The first alias present in the row wins, even when its value is
        blank; the default applies only when no alias is present.
        """
        for alias in self.column_aliases[field_name]:
            if alias in row and row[alias] is not None:
                return str(row[alias])
        return self.defaults[field_name]

    @staticmethod
    def parse_price(value: Optional[str]) -> float:
        """
        Parse a currency string such as ``$1,250.00``.

        Everything but digits, ``.`` and ``-`` is stripped and the leading
        number is read, so ``100.00.`` is 100 and ``$25 - 30`` is 25.
        Anything without a leading number becomes 0.
        """
        cleaned = _NON_NUMERIC.sub("", value or "")
        match = _LEADING_NUMBER.match(cleaned)
        if not match:
            return 0.0
        price = pd.to_numeric(match.group(), errors="coerce")
        if pd.isna(price):
            return 0.0
        return round(float(price), 2)

    @staticmethod
    def parse_date(value: Optional[str], now: Optional[datetime] = None) -> datetime:
        """
        Parse a date string into a naive UTC datetime.

        ``D/M/YYYY`` and ``D-M-YYYY`` are always read day first. ISO
        ``YYYY-M-D`` is read next, then any format pandas recognises.
        Blank or unparseable input becomes the current time.
        """
        cleaned = (value or "").strip()
        if not cleaned:
            return now or utc_now()

        match = _DAY_MONTH_YEAR.match(cleaned)
        if match:
            day, month, year = (int(part) for part in match.groups())
            if 1 <= day <= 31 and 1 <= month <= 12:
                try:
                    return datetime(year, month, day)
                except ValueError:
                    # e.g. 31/02/2024, try the remaining formats
                    pass

        match = _ISO_DATE.match(cleaned)
        if match:
            year, month, day = (int(part) for part in match.groups())
            try:
                return datetime(year, month, day)
            except ValueError:
                pass

        try:
            parsed = pd.to_datetime(cleaned, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            parsed = pd.NaT
        if not pd.isna(parsed):
            return to_utc_naive(parsed.to_pydatetime())

        logger.warning(f"Could not parse date: {value}, using current date")
        return now or utc_now()

    def map_row(self, row: Mapping[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Map one raw row onto a canonical sale record.

        Args:
            row: Mapping of header to cell value
            now: Timestamp substituted for missing dates

        Returns:
            Dict: Canonical record (not yet validated)
        """
        trimmed = {
            str(key).strip(): value for key, value in row.items() if key is not None
        }
        return {
            "date": self.parse_date(self.resolve_column(trimmed, "date"), now),
            "customer_name": self.resolve_column(trimmed, "customer_name").strip(),
            "type": self.resolve_column(trimmed, "type").strip() or self.defaults["type"],
            "asset_name": self.resolve_column(trimmed, "asset_name").strip(),
            "link": self.resolve_column(trimmed, "link").strip(),
            "price": self.parse_price(self.resolve_column(trimmed, "price")),
        }

    def validate_record(self, record: Mapping[str, Any]) -> Tuple[bool, Optional[str]]:
        """
        Validate a mapped record.

        Args:
            record: Canonical record

        Returns:
            tuple: (is_valid, error message)
        """
        customer_name = (record.get("customer_name") or "").strip()
        asset_name = (record.get("asset_name") or "").strip()
        price = record.get("price") or 0

        is_valid = bool(customer_name) and bool(asset_name) and price > 0
        # Column widths of the sale_items table
        for field_name, max_length in self.max_lengths.items():
            if len(record.get(field_name) or "") > max_length:
                is_valid = False

        if not is_valid:
            return False, f"Invalid data for customer: {customer_name or 'Unknown'}"
        return True, None

    def validate_batch(self, records: List[Mapping[str, Any]]) -> ImportResult:
        """
        Split already-mapped records into accepted and rejected.

        Raises:
            EmptyBatchError: when no records are submitted
        """
        if not records:
            raise EmptyBatchError()

        result = ImportResult()
        for row_number, record in enumerate(records, start=1):
            is_valid, message = self.validate_record(record)
            if is_valid:
                result.accepted_records.append(dict(record))
            else:
                result.failures.append(RowValidationError(
                    row_number=row_number,
                    customer_name=(record.get("customer_name") or "").strip(),
                    message=message,
                ))

        logger.info(
            f"Validated import batch: {result.imported_count} accepted, "
            f"{result.failed_count} failed"
        )
        return result

    def normalize_rows(
        self, rows: Iterable[Mapping[str, Any]], now: Optional[datetime] = None
    ) -> ImportResult:
        """
        Map and validate raw rows.

        Args:
            rows: Raw rows keyed by (untrimmed) header
            now: Timestamp substituted for missing dates

        Returns:
            ImportResult: accepted records plus per-row failures

        Raises:
            EmptyBatchError: when no rows are submitted
        """
        rows = list(rows)
        if not rows:
            raise EmptyBatchError()

        now = now or utc_now()
        return self.validate_batch([self.map_row(row, now) for row in rows])


def read_upload(filename: str, contents: bytes) -> List[Dict[str, str]]:
    """
    Parse an uploaded CSV or Excel file into raw rows.

    Every cell is read as text, headers are trimmed and blank lines skipped.

    Raises:
        UnsupportedFileError: for other extensions or unreadable content
    """
    name = (filename or "").lower()
    try:
        if name.endswith(CSV_EXTENSIONS):
            df = pd.read_csv(
                io.BytesIO(contents),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                skipinitialspace=False,
            )
        elif name.endswith(EXCEL_EXTENSIONS):
            df = pd.read_excel(io.BytesIO(contents), dtype=str, keep_default_na=False)
        else:
            raise UnsupportedFileError(
                "Invalid file format. Only CSV and Excel files are supported."
            )
    except pd.errors.EmptyDataError:
        return []
    except UnsupportedFileError:
        raise
    except (ValueError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise UnsupportedFileError(f"Could not parse {filename}: {str(e)}")

    df = df.fillna("")
    df.columns = [str(column).strip() for column in df.columns]

    # Rows where every cell is blank are skipped
    blank = df.apply(lambda column: column.astype(str).str.strip().eq("")).all(axis=1)
    df = df[~blank]
    return df.to_dict("records")


def export_rows(records) -> List[Dict[str, str]]:
    """
    Render sale records in the canonical import layout.

    Feeding the rows back through ``ImportNormalizer`` reproduces the records.
    """
    return [
        {
            "Date": to_utc_naive(record.date).isoformat(),
            "Name": record.customer_name,
            "Type": record.type,
            "Asset": record.asset_name,
            "Link": record.link or "",
            "Price": f"{float(record.price):.2f}",
        }
        for record in records
    ]


def export_frame(records) -> pd.DataFrame:
    """Canonical export as a DataFrame with ``EXPORT_HEADERS`` columns."""
    return pd.DataFrame(export_rows(records), columns=EXPORT_HEADERS)
