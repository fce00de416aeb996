from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException


logger = logging.getLogger(__name__)

# Banner row, then the column header row, then holdings.
HEADER_ROWS = 2

COLUMN_POSITIONS = {
    "name": 1,
    "purchase_price": 2,
    "qty": 3,
    "investment": 4,
    "symbol": 6,
    "cmp": 7,
    "present_value": 8,
    "gain_loss": 9,
    "pe_ratio": 12,
    "earnings": 13,
    "revenue": 14,
}
RAW_COLUMNS = list(COLUMN_POSITIONS.keys())


def select_schema_columns(sheet: pd.DataFrame) -> pd.DataFrame:
    """Map a position-indexed sheet onto RAW_COLUMNS, padding short sheets."""
    data = {}
    for field, pos in COLUMN_POSITIONS.items():
        if pos < sheet.shape[1]:
            data[field] = sheet.iloc[:, pos].tolist()
        else:
            data[field] = [pd.NA] * len(sheet)
    df = pd.DataFrame(data, columns=RAW_COLUMNS, dtype=object)
    return df.reset_index(drop=True)


def read_holdings_sheet(path: str | Path) -> pd.DataFrame:
    workbook = Path(path)
    if not workbook.exists():
        raise FileNotFoundError(f"Holdings workbook not found: {workbook}")

    try:
        sheet = pd.read_excel(
            workbook,
            sheet_name=0,
            header=None,
            skiprows=HEADER_ROWS,
            dtype=object,
            engine="openpyxl",
        )
    except (zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
        raise ValueError(f"Holdings workbook is not a readable .xlsx file: {workbook} ({exc})") from exc
    sheet = sheet.dropna(how="all")
    logger.info("Read %d raw rows from %s", len(sheet), workbook)
    return select_schema_columns(sheet)
