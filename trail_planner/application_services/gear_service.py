"""
Gear service module for the gear inventory and packing lists.

This module keeps the gear catalogue (categories and items), provides the filtered
and grouped view used for browsing, and computes weight and cost totals for
backpacks (packing lists).
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import polars as pl

from trail_planner.data_accessors.gear_csv_loader import GearField

if TYPE_CHECKING:
    from trail_planner.application_services.food_service import TripFood
    from trail_planner.data_accessors.gear_csv_loader import ColumnMapping, CSVParseResult

logger = logging.getLogger(__name__)

OTHER_CATEGORY_NAME = "Other"
UNKNOWN_CATEGORY_NAME = "Unknown Category"

# Grams per unit
WEIGHT_UNITS = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.349523125,
    "lbs": 453.59237,
}

# Keyword -> category name, used when an imported item has no category
CATEGORY_KEYWORDS = [
    (("tent", "shelter"), "Shelter"),
    (("pack",), "Packs"),
    (("sleep", "quilt", "pad"), "Sleep System"),
    (("cook", "stove", "pot"), "Cooking & Water"),
]

WEIGHT_PATTERN = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))\s*([a-zA-Z]*)")
THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")
GRAM_SUFFIXES = {"g", "gr", "gram", "grams"}
TRUE_VALUES = {"true", "1", "yes", "y"}

# Unit hints found in weight values or CSV headers, checked in order
UNIT_HINTS = [
    ("oz", "oz"),
    ("ounce", "oz"),
    ("kg", "kg"),
    ("kilogram", "kg"),
    ("lb", "lbs"),
    ("pound", "lbs"),
]


@dataclass
class GearCategory:
    """A gear category."""

    name: str
    icon: str = "question"
    color: str = "gray"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class GearItem:
    """A piece of gear in the inventory."""

    name: str
    category_id: str
    weight_grams: float = 0.0
    price: float = 0.0
    worn: bool = False
    consumable: bool = False
    favorite: bool = False
    optional: bool = False
    quantity: int = 1
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    product_url: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class BackpackItem:
    """A gear item packed in a backpack."""

    item_id: str
    quantity: int = 1


@dataclass
class Backpack:
    """A packing list for a trip."""

    name: str
    description: str = ""
    items: list[BackpackItem] = field(default_factory=list)
    foods: list[TripFood] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class GroupedGearItems:
    """Gear items belonging to one category."""

    category: GearCategory
    items: list[GearItem]


@dataclass
class BackpackTotals:
    """Weight and cost totals for a backpack. Weights are in grams."""

    base_weight: float
    consumable_weight: float
    worn_weight: float
    optional_weight: float
    total_weight: float
    trail_weight: float  # Total weight minus worn weight
    total_cost: float
    category_summary: pl.DataFrame  # Columns: category, weight_g


@dataclass
class ImportReport:
    """Outcome of importing a batch of gear items."""

    imported: int
    skipped_duplicates: int


@dataclass
class CSVConversion:
    """Gear items built from CSV rows, plus any categories created on the way."""

    items: list[GearItem]
    created_categories: list[str] = field(default_factory=list)


def default_categories() -> list[GearCategory]:
    """Build the default category catalogue."""
    return [
        GearCategory("Packs", "suitcase", "darkred"),
        GearCategory("Shelter", "home", "green"),
        GearCategory("Sleep System", "bed", "purple"),
        GearCategory("Cooking & Water", "fire", "orange"),
        GearCategory("Food", "cutlery", "beige"),
        GearCategory("Clothing", "user", "lightblue"),
        GearCategory("Footwear", "road", "darkred"),
        GearCategory("Electronics", "flash", "blue"),
        GearCategory("Navigation", "map-marker", "cadetblue"),
        GearCategory("First Aid & Safety", "plus-sign", "red"),
        GearCategory("Hygiene", "tint", "lightgreen"),
        GearCategory("Tools & Repair", "wrench", "gray"),
        GearCategory("Photography", "camera", "darkblue"),
        GearCategory("Personal Items", "user", "pink"),
        GearCategory(OTHER_CATEGORY_NAME, "question-sign", "gray"),
    ]


def format_weight(grams: float, unit: str) -> str:
    """
    Format a weight in the given display unit.

    Args:
        grams: Weight in grams
        unit: One of "g", "kg", "oz", "lbs"

    Returns:
        Formatted string with at most two decimals, e.g. "1.25 kg"

    Raises:
        ValueError: If the unit is not supported
    """
    if unit not in WEIGHT_UNITS:
        msg = f"Unsupported weight unit: {unit}"
        raise ValueError(msg)
    value = f"{grams / WEIGHT_UNITS[unit]:,.2f}".rstrip("0").rstrip(".")
    return f"{value} {unit}"


def _unit_hint(text: str) -> str | None:
    lowered = text.lower()
    for hint, unit in UNIT_HINTS:
        if hint in lowered:
            return unit
    return None


def parse_weight(value: str, header: str = "") -> float | None:
    """
    Convert a weight cell to grams.

    The unit comes from the value ("12 oz"), then from the header ("Weight (oz)"),
    and defaults to grams.

    Args:
        value: Cell text
        header: Header of the column the value came from

    Returns:
        Weight in grams, or None if the value has no leading number or carries
        digits after the unit (e.g. "1,5")
    """
    value = THOUSANDS_SEPARATOR.sub("", value)
    match = WEIGHT_PATTERN.match(value)
    if match is None or any(char.isdigit() for char in value[match.end() :]):
        return None

    number = float(match.group(1))
    suffix = match.group(2).lower()
    if suffix in GRAM_SUFFIXES:
        return number
    unit = _unit_hint(suffix) or _unit_hint(header) or "g"
    return number * WEIGHT_UNITS[unit]


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value)
    except ValueError:
        return default


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


class GearInventory:
    """In-memory gear inventory with categories, items and backpacks."""

    def __init__(self, categories: list[GearCategory] | None = None) -> None:
        """
        Initialize the inventory.

        Args:
            categories: Initial categories (default: the default catalogue)
        """
        self.categories: list[GearCategory] = categories if categories else default_categories()
        self.items: list[GearItem] = []
        self.backpacks: list[Backpack] = []

    # Categories

    def category_for(self, category_id: str | None) -> GearCategory | None:
        if category_id is None:
            return None
        return next((category for category in self.categories if category.id == category_id), None)

    def find_category(self, name: str) -> GearCategory | None:
        """Find a category by name, ignoring case and surrounding whitespace."""
        wanted = name.strip().lower()
        return next((category for category in self.categories if category.name.lower() == wanted), None)

    def add_category(self, category: GearCategory) -> GearCategory:
        self.categories.append(category)
        return category

    def update_category(self, category: GearCategory) -> None:
        for i, existing in enumerate(self.categories):
            if existing.id == category.id:
                self.categories[i] = category
                return

    def delete_category(self, category_id: str) -> None:
        """
        Delete a category, moving its items to the "Other" category.

        Items keep their (now dangling) category when no "Other" category exists.
        """
        other = self.find_category(OTHER_CATEGORY_NAME)
        if other is not None and other.id != category_id:
            for item in self.items:
                if item.category_id == category_id:
                    item.category_id = other.id
        self.categories = [category for category in self.categories if category.id != category_id]

    def suggest_category(self, item_name: str) -> GearCategory | None:
        """
        Guess a category for an item from its name.

        A category whose name appears in the item name wins, then a few keyword
        rules, then "Other".
        """
        lowered = item_name.lower()
        for category in self.categories:
            if category.name and category.name.lower() in lowered:
                return category

        for keywords, category_name in CATEGORY_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                category = self.find_category(category_name)
                if category is not None:
                    return category

        return self.find_category(OTHER_CATEGORY_NAME)

    # Items

    def get_item(self, item_id: str) -> GearItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def update_item(self, item: GearItem) -> GearItem:
        """Replace an item with the same id, or add it if it is new."""
        for i, existing in enumerate(self.items):
            if existing.id == item.id:
                self.items[i] = item
                return item
        self.items.append(item)
        return item

    def delete_items(self, item_ids: set[str]) -> None:
        """Delete items and remove them from every backpack."""
        self.items = [item for item in self.items if item.id not in item_ids]
        for backpack in self.backpacks:
            backpack.items = [packed for packed in backpack.items if packed.item_id not in item_ids]

    def move_items(self, item_ids: set[str], category_id: str) -> None:
        for item in self.items:
            if item.id in item_ids:
                item.category_id = category_id

    def is_duplicate(self, candidate: GearItem) -> bool:
        """Check for an existing item with the same name (ignoring case) and weight."""
        name = candidate.name.strip().lower()
        return any(
            item.name.strip().lower() == name and item.weight_grams == candidate.weight_grams for item in self.items
        )

    def import_items(self, items: list[GearItem]) -> ImportReport:
        """
        Add imported items, skipping ones that already exist in the inventory.

        Args:
            items: Items to import

        Returns:
            ImportReport with the number of imported and skipped items
        """
        to_import = [item for item in items if not self.is_duplicate(item)]
        self.items.extend(to_import)

        report = ImportReport(imported=len(to_import), skipped_duplicates=len(items) - len(to_import))
        logger.info("Imported %d gear items (%d duplicates skipped)", report.imported, report.skipped_duplicates)
        return report

    def items_from_csv(self, result: CSVParseResult, mappings: list[ColumnMapping]) -> CSVConversion:
        """
        Build gear items from parsed CSV rows.

        Unknown category names are added to the inventory. Items without a category
        get one suggested from their name. Rows without a name are skipped.

        Args:
            result: Parsed CSV
            mappings: Column mappings, one per header

        Returns:
            CSVConversion with the items (not yet imported) and created category names
        """
        items: list[GearItem] = []
        created: list[str] = []

        for row in result.rows:
            item = GearItem(name="", category_id="")
            category: GearCategory | None = None

            for index, mapping in enumerate(mappings):
                if index >= len(row):
                    continue
                value = row[index].strip()
                field_type = mapping.mapped_to

                if field_type is GearField.NAME:
                    item.name = value
                elif field_type is GearField.WEIGHT:
                    grams = parse_weight(value, mapping.csv_header)
                    if grams is not None:
                        item.weight_grams = grams
                elif field_type is GearField.PRICE:
                    item.price = _parse_float(value, 0.0)
                elif field_type is GearField.QUANTITY:
                    item.quantity = _parse_int(value, 1)
                elif field_type is GearField.CONSUMABLE:
                    item.consumable = value.lower() in TRUE_VALUES
                elif field_type is GearField.WORN:
                    item.worn = value.lower() in TRUE_VALUES
                elif field_type is GearField.NOTES:
                    item.notes = value
                elif field_type is GearField.LINK:
                    item.product_url = value
                elif field_type is GearField.CATEGORY and value:
                    category = self.find_category(value)
                    if category is None:
                        category = self.add_category(GearCategory(name=value))
                        created.append(value)

            if not item.name:
                continue

            if category is None:
                category = self.suggest_category(item.name)
            if category is None:
                category = self.add_category(GearCategory(name=OTHER_CATEGORY_NAME))
                created.append(OTHER_CATEGORY_NAME)

            item.category_id = category.id
            items.append(item)

        logger.debug("Converted %d of %d CSV rows to gear items", len(items), len(result.rows))
        return CSVConversion(items=items, created_categories=created)

    def grouped_items(
        self,
        search: str = "",
        favorites_only: bool = False,
        consumable_only: bool = False,
    ) -> list[GroupedGearItems]:
        """
        Group the inventory by category for browsing.

        Args:
            search: Free text matched (case-insensitive) against item name,
                category name and tags
            favorites_only: Only include favorite items
            consumable_only: Only include consumable items

        Returns:
            Groups sorted by category name; items without a known category are left out
        """
        filtered = self.items
        if favorites_only:
            filtered = [item for item in filtered if item.favorite]
        if consumable_only:
            filtered = [item for item in filtered if item.consumable]

        needle = search.strip().lower()
        if needle:
            filtered = [item for item in filtered if self._matches(item, needle)]

        groups: dict[str, GroupedGearItems] = {}
        for item in filtered:
            category = self.category_for(item.category_id)
            if category is None:
                continue
            groups.setdefault(category.id, GroupedGearItems(category=category, items=[])).items.append(item)

        return sorted(groups.values(), key=lambda group: group.category.name)

    def _matches(self, item: GearItem, needle: str) -> bool:
        category = self.category_for(item.category_id)
        category_name = category.name if category is not None else ""
        haystacks = [item.name, category_name, " ".join(item.tags)]
        return any(needle in haystack.lower() for haystack in haystacks)

    # Backpacks

    def add_backpack(self, backpack: Backpack) -> Backpack:
        self.backpacks.append(backpack)
        return backpack

    def update_backpack(self, backpack: Backpack) -> None:
        for i, existing in enumerate(self.backpacks):
            if existing.id == backpack.id:
                self.backpacks[i] = backpack
                return

    def delete_backpack(self, backpack_id: str) -> None:
        self.backpacks = [backpack for backpack in self.backpacks if backpack.id != backpack_id]

    def backpack_totals(self, backpack: Backpack) -> BackpackTotals:
        """
        Compute weight and cost totals for a backpack.

        Each packed item counts its weight and price times the packed quantity.
        Worn items count as worn weight whether or not they are optional; other
        optional items count as optional weight only. The category summary covers
        non-optional, non-worn items.

        Args:
            backpack: Backpack to total

        Returns:
            BackpackTotals with weights in grams
        """
        base = consumable = worn = optional = cost = 0.0
        rows: list[tuple[str, float]] = []

        for packed in backpack.items:
            item = self.get_item(packed.item_id)
            if item is None:
                continue

            weight = float(item.weight_grams * packed.quantity)
            cost += item.price * packed.quantity

            if item.worn:
                worn += weight
            elif item.optional:
                optional += weight
            else:
                if item.consumable:
                    consumable += weight
                else:
                    base += weight
                category = self.category_for(item.category_id)
                rows.append((category.name if category is not None else UNKNOWN_CATEGORY_NAME, weight))

        total = base + consumable + worn + optional
        summary = (
            pl.DataFrame(
                {"category": [row[0] for row in rows], "weight_g": [row[1] for row in rows]},
                schema={"category": pl.Utf8, "weight_g": pl.Float64},
            )
            .group_by("category")
            .agg(pl.col("weight_g").sum())
            .sort(["weight_g", "category"], descending=[True, False])
        )

        return BackpackTotals(
            base_weight=base,
            consumable_weight=consumable,
            worn_weight=worn,
            optional_weight=optional,
            total_weight=total,
            trail_weight=total - worn,
            total_cost=cost,
            category_summary=summary,
        )
