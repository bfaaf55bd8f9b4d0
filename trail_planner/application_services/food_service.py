"""
Food service module for trip food planning.

This module keeps the food library (pantry) and reusable food plan templates, and
computes weight and nutrition totals for the food packed in a backpack, per day and
per meal.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from trail_planner.application_services.gear_service import Backpack

logger = logging.getLogger(__name__)

NUTRIENT_COLUMNS = ["weight_g", "calories", "fat_g", "carbs_g", "protein_g"]


class MealType(str, Enum):
    """Meal a trip food is eaten at, in the order meals happen in a day."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snacks & Drinks"

    @property
    def order(self) -> int:
        return list(MealType).index(self)


@dataclass
class FoodItem:
    """A food in the library. Nutrition values are per serving."""

    name: str
    weight_grams: float = 0.0
    packaging_weight_grams: float = 0.0
    calories: float = 0.0
    fat: float = 0.0  # Grams
    carbs: float = 0.0  # Grams
    protein: float = 0.0  # Grams
    notes: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def packed_weight_grams(self) -> float:
        """Weight carried per serving, packaging included."""
        return self.weight_grams + self.packaging_weight_grams


@dataclass
class TripFood:
    """Servings of a library food planned for one meal of a trip day."""

    food_item_id: str
    quantity: int = 1
    day: int = 1
    meal_type: MealType = MealType.SNACK
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class FoodPlanTemplate:
    """A reusable set of library foods, e.g. "3-day solo meals"."""

    name: str
    food_item_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class NutritionTotals:
    """Packed weight (grams) and nutrition totals."""

    weight_grams: float = 0.0
    calories: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0


@dataclass
class FoodPlanSummary:
    """Totals for a backpack's food plan."""

    totals: NutritionTotals
    by_day: pl.DataFrame  # Columns: day, weight_g, calories, fat_g, carbs_g, protein_g
    by_meal: pl.DataFrame  # Columns: day, meal, weight_g, calories, fat_g, carbs_g, protein_g


class FoodPlanner:
    """In-memory food library and templates, plus planning on backpacks."""

    def __init__(self) -> None:
        """Initialize an empty food library."""
        self.foods: list[FoodItem] = []
        self.templates: list[FoodPlanTemplate] = []

    # Library

    def get_food(self, food_id: str) -> FoodItem | None:
        return next((food for food in self.foods if food.id == food_id), None)

    def update_food(self, food: FoodItem) -> FoodItem:
        """
        Replace a food with the same id, or add it if it is new.

        Raises:
            ValueError: If the name is empty or a weight or nutrition value is negative
        """
        if not food.name.strip():
            msg = "Food name must not be empty"
            raise ValueError(msg)
        values = [food.weight_grams, food.packaging_weight_grams, food.calories, food.fat, food.carbs, food.protein]
        if any(value < 0 for value in values):
            msg = f"Weights and nutrition values of {food.name!r} must not be negative"
            raise ValueError(msg)

        for i, existing in enumerate(self.foods):
            if existing.id == food.id:
                self.foods[i] = food
                return food
        self.foods.append(food)
        logger.info("Added food %r to the library", food.name)
        return food

    def delete_foods(self, food_ids: set[str], backpacks: list[Backpack]) -> None:
        """Delete foods from the library, every template and every backpack's food plan."""
        self.foods = [food for food in self.foods if food.id not in food_ids]
        for template in self.templates:
            template.food_item_ids = [food_id for food_id in template.food_item_ids if food_id not in food_ids]
        for backpack in backpacks:
            backpack.foods = [trip_food for trip_food in backpack.foods if trip_food.food_item_id not in food_ids]

    # Templates

    def get_template(self, template_id: str) -> FoodPlanTemplate | None:
        return next((template for template in self.templates if template.id == template_id), None)

    def update_template(self, template: FoodPlanTemplate) -> FoodPlanTemplate:
        """
        Replace a template with the same id, or add it if it is new.

        Raises:
            ValueError: If the name is empty
        """
        if not template.name.strip():
            msg = "Template name must not be empty"
            raise ValueError(msg)

        for i, existing in enumerate(self.templates):
            if existing.id == template.id:
                self.templates[i] = template
                return template
        self.templates.append(template)
        return template

    def delete_template(self, template_id: str) -> None:
        self.templates = [template for template in self.templates if template.id != template_id]

    def add_to_template(self, template: FoodPlanTemplate, food_id: str) -> None:
        """
        Add a library food to a template; a food already in the template is not added again.

        Raises:
            ValueError: If the food is not in the library
        """
        if self.get_food(food_id) is None:
            msg = f"Unknown food: {food_id}"
            raise ValueError(msg)
        if food_id not in template.food_item_ids:
            template.food_item_ids.append(food_id)

    # Planning

    def add_trip_food(
        self,
        backpack: Backpack,
        food_id: str,
        day: int = 1,
        meal_type: MealType = MealType.SNACK,
        quantity: int = 1,
    ) -> TripFood:
        """
        Plan servings of a library food for a meal of a trip day.

        Args:
            backpack: Backpack whose food plan is changed
            food_id: Library food id
            day: Trip day, starting at 1
            meal_type: Meal the food is eaten at
            quantity: Number of servings

        Returns:
            The new TripFood

        Raises:
            ValueError: If the food is unknown, or day or quantity is below 1
        """
        if self.get_food(food_id) is None:
            msg = f"Unknown food: {food_id}"
            raise ValueError(msg)
        if day < 1 or quantity < 1:
            msg = f"Day and quantity must be at least 1, got day={day}, quantity={quantity}"
            raise ValueError(msg)

        trip_food = TripFood(food_item_id=food_id, quantity=quantity, day=day, meal_type=meal_type)
        backpack.foods.append(trip_food)
        return trip_food

    def apply_template(
        self,
        template: FoodPlanTemplate,
        backpack: Backpack,
        day: int = 1,
        meal_type: MealType = MealType.SNACK,
    ) -> list[TripFood]:
        """
        Plan one serving of every template food for a meal of a trip day.

        Foods that were deleted from the library are skipped.

        Returns:
            The TripFoods added to the backpack
        """
        return [
            self.add_trip_food(backpack, food_id, day=day, meal_type=meal_type)
            for food_id in template.food_item_ids
            if self.get_food(food_id) is not None
        ]

    @staticmethod
    def remove_trip_food(backpack: Backpack, trip_food_id: str) -> None:
        backpack.foods = [trip_food for trip_food in backpack.foods if trip_food.id != trip_food_id]

    def food_plan(self, backpack: Backpack) -> FoodPlanSummary:
        """
        Compute weight and nutrition totals of a backpack's food plan.

        Each planned food counts its packed weight (food plus packaging) and its
        nutrition values times the number of servings. Planned foods whose library
        entry is gone are left out.

        Args:
            backpack: Backpack to total

        Returns:
            FoodPlanSummary with trip totals and per-day and per-meal tables
        """
        rows = []
        for trip_food in backpack.foods:
            food = self.get_food(trip_food.food_item_id)
            if food is None:
                continue
            rows.append(
                {
                    "day": trip_food.day,
                    "meal": trip_food.meal_type.value,
                    "meal_order": trip_food.meal_type.order,
                    "weight_g": float(food.packed_weight_grams * trip_food.quantity),
                    "calories": float(food.calories * trip_food.quantity),
                    "fat_g": float(food.fat * trip_food.quantity),
                    "carbs_g": float(food.carbs * trip_food.quantity),
                    "protein_g": float(food.protein * trip_food.quantity),
                }
            )

        df = pl.DataFrame(
            rows,
            schema={
                "day": pl.Int64,
                "meal": pl.Utf8,
                "meal_order": pl.Int64,
                **dict.fromkeys(NUTRIENT_COLUMNS, pl.Float64),
            },
        )
        sums = [pl.col(column).sum() for column in NUTRIENT_COLUMNS]

        by_day = df.group_by("day").agg(sums).sort("day")
        by_meal = (
            df.group_by(["day", "meal", "meal_order"])
            .agg(sums)
            .sort(["day", "meal_order"])
            .drop("meal_order")
        )

        totals = NutritionTotals(
            weight_grams=df["weight_g"].sum(),
            calories=df["calories"].sum(),
            fat=df["fat_g"].sum(),
            carbs=df["carbs_g"].sum(),
            protein=df["protein_g"].sum(),
        )
        return FoodPlanSummary(totals=totals, by_day=by_day, by_meal=by_meal)
