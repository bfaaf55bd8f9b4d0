"""
Unit tests for CSV gear list loader module.
"""

import io

import pytest

from trail_planner.data_accessors.gear_csv_loader import CSVImportError, GearField, map_headers, parse_csv


class TestParseCSV:
    """Test cases for parse_csv function."""

    def test_parse_csv(self, sample_gear_csv: io.BytesIO) -> None:
        """Test reading headers and rows as text."""
        result = parse_csv(sample_gear_csv)

        assert result.headers == ["Item", "Category", "Weight (oz)", "Qty", "Consumable", "Notes"]
        assert len(result.rows) == 5
        assert result.rows[0] == ["Tent", "Shelter", "32", "1", "false", "Two person"]

    def test_missing_cells_are_empty_strings(self, sample_gear_csv: io.BytesIO) -> None:
        """Test that empty cells become empty strings."""
        result = parse_csv(sample_gear_csv)

        assert result.rows[3] == ["Sleeping Pad", "", "12", "1", "", ""]

    def test_numbers_stay_text(self) -> None:
        """Test that numeric-looking values are not converted."""
        result = parse_csv(io.BytesIO(b"Name,Weight\nStakes,010\n"))

        assert result.rows == [["Stakes", "010"]]

    def test_empty_file(self) -> None:
        """Test that an empty file raises CSVImportError."""
        with pytest.raises(CSVImportError):
            parse_csv(io.BytesIO(b""))


class TestMapHeaders:
    """Test cases for map_headers function."""

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Item", GearField.NAME),
            (" item name ", GearField.NAME),
            ("Cat", GearField.CATEGORY),
            ("Weight (oz)", GearField.WEIGHT),
            ("GRAMS", GearField.WEIGHT),
            ("Pounds", GearField.WEIGHT),
            ("Cost", GearField.PRICE),
            ("Qty", GearField.QUANTITY),
            ("Food", GearField.CONSUMABLE),
            ("Worn Weight", GearField.WORN),
            ("Desc", GearField.NOTES),
            ("Product URL", GearField.LINK),
            ("Colour", GearField.IGNORE),
            ("", GearField.IGNORE),
        ],
    )
    def test_header_synonyms(self, header: str, expected: GearField) -> None:
        """Test mapping headers through the synonym table."""
        [mapping] = map_headers([header])

        assert mapping.csv_header == header
        assert mapping.mapped_to is expected

    def test_keeps_order(self) -> None:
        """Test that one mapping is returned per header, in order."""
        mappings = map_headers(["Notes", "Name", "Unknown"])

        assert [mapping.mapped_to for mapping in mappings] == [GearField.NOTES, GearField.NAME, GearField.IGNORE]
