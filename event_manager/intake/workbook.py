"""Parse uploaded Excel workbooks into rows of cell values."""
import logging
import zipfile
from io import BytesIO

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from event_manager.core.errors import EmptyOrUnreadable

logger = logging.getLogger(__name__)

EXCEL_CONTENT_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def parse_workbook(data: bytes) -> list[list]:
    """
    Read the first worksheet of an .xlsx file.

    Returns one list of cell values per row (formulas resolved to their
    cached values). Raises EmptyOrUnreadable if the bytes are not a workbook
    or the first worksheet holds no values.
    """
    if not data:
        raise EmptyOrUnreadable("Excel file is empty")

    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        logger.warning(f"Could not read uploaded workbook: {e}")
        raise EmptyOrUnreadable("Excel file could not be read") from e

    try:
        if not workbook.worksheets:
            raise EmptyOrUnreadable("Excel file is empty")

        worksheet = workbook.worksheets[0]
        rows = [
            list(row)
            for row in worksheet.iter_rows(values_only=True)
            if any(value is not None for value in row)
        ]
    finally:
        workbook.close()

    if not rows:
        raise EmptyOrUnreadable("Excel file is empty")

    logger.debug(f"Parsed {len(rows)} non-empty rows from uploaded workbook")
    return rows
