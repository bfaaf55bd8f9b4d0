"""
CSV gear list loader module.

Gear lists exported from spreadsheets or other packing tools are read with polars,
and their headers are mapped to gear fields with a static synonym table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from typing import BinaryIO

logger = logging.getLogger(__name__)


class CSVImportError(Exception):
    """Exception raised when a CSV file cannot be read."""


class GearField(str, Enum):
    """Gear fields a CSV column can be mapped to."""

    IGNORE = "Ignore"
    NAME = "Name"
    CATEGORY = "Category"
    WEIGHT = "Weight"
    PRICE = "Price"
    QUANTITY = "Quantity"
    CONSUMABLE = "Consumable"
    WORN = "Worn Weight"
    NOTES = "Notes"
    LINK = "Link"


HEADER_SYNONYMS: dict[str, GearField] = {
    **dict.fromkeys(["item", "name", "gear", "item name"], GearField.NAME),
    **dict.fromkeys(["category", "cat", "type"], GearField.CATEGORY),
    **dict.fromkeys(
        [
            "weight", "weight (g)", "grams", "g",
            "weight (oz)", "oz", "ounces",
            "weight (kg)", "kg", "kilograms",
            "weight (lbs)", "lbs", "pounds",
        ],
        GearField.WEIGHT,
    ),
    **dict.fromkeys(["price", "cost", "value"], GearField.PRICE),
    **dict.fromkeys(["qty", "quantity", "count"], GearField.QUANTITY),
    **dict.fromkeys(["consumable", "food"], GearField.CONSUMABLE),
    **dict.fromkeys(["worn", "worn weight"], GearField.WORN),
    **dict.fromkeys(["notes", "description", "desc"], GearField.NOTES),
    **dict.fromkeys(["url", "link", "product url"], GearField.LINK),
}  # fmt: skip


@dataclass
class CSVParseResult:
    """Headers and raw string rows of a CSV file."""

    headers: list[str]
    rows: list[list[str]]


@dataclass
class ColumnMapping:
    """Mapping from a CSV column to a gear field."""

    csv_header: str
    mapped_to: GearField = GearField.IGNORE


def parse_csv(file: BinaryIO) -> CSVParseResult:
    """
    Read a CSV file with every column kept as text.

    Args:
        file: Binary file object containing CSV data with a header row

    Returns:
        CSVParseResult with headers and rows (missing cells as empty strings)

    Raises:
        CSVImportError: If the file is empty or cannot be parsed

    """
    try:
        df = pl.read_csv(file, infer_schema_length=0, truncate_ragged_lines=True)
    except (pl.exceptions.PolarsError, OSError) as e:
        msg = f"Error reading CSV file: {e!s}"
        raise CSVImportError(msg) from e

    if not df.columns:
        msg = "CSV file has no header row"
        raise CSVImportError(msg)

    rows = [[value if value is not None else "" for value in row] for row in df.iter_rows()]
    logger.debug("Read CSV with %d columns and %d rows", len(df.columns), len(rows))
    return CSVParseResult(headers=df.columns, rows=rows)


def map_headers(headers: list[str]) -> list[ColumnMapping]:
    """
    Guess the gear field for each CSV header.

    Headers are matched case-insensitively (after trimming) against a fixed synonym
    table; anything unknown is ignored.

    Args:
        headers: CSV header strings

    Returns:
        One ColumnMapping per header, in the same order

    """
    return [
        ColumnMapping(csv_header=header, mapped_to=HEADER_SYNONYMS.get(header.strip().lower(), GearField.IGNORE))
        for header in headers
    ]
