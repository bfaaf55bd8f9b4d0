"""
Chart visualization module for displaying packing list breakdowns.

This module provides functionality to render category weight charts and daily
calorie charts for a backpack.
"""

import plotly.graph_objects as go
import polars as pl
import streamlit as st

from trail_planner.application_services.gear_service import WEIGHT_UNITS
from trail_planner.settings import settings


class ChartView:
    """Class for rendering gear weight and food charts."""

    @staticmethod
    def build_category_weight_figure(category_summary: pl.DataFrame, unit: str, chart_type: str = "Bar") -> go.Figure:
        """
        Build a chart of pack weight per category.

        Args:
            category_summary: DataFrame with columns category, weight_g
            unit: Display weight unit ("g", "kg", "oz", "lbs")
            chart_type: "Bar" or "Pie"

        Returns:
            Plotly figure

        """
        categories = category_summary["category"].to_list()
        weights = [grams / WEIGHT_UNITS[unit] for grams in category_summary["weight_g"].to_list()]

        fig = go.Figure()

        if chart_type == "Pie":
            fig.add_trace(
                go.Pie(
                    labels=categories,
                    values=weights,
                    hovertemplate=f"<b>%{{label}}</b><br>%{{value:.2f}} {unit}<extra></extra>",
                )
            )
        else:
            # Heaviest category on top
            fig.add_trace(
                go.Bar(
                    x=weights[::-1],
                    y=categories[::-1],
                    orientation="h",
                    marker={"color": "#2E8B57"},
                    hovertemplate=f"<b>%{{y}}</b><br>%{{x:.2f}} {unit}<extra></extra>",
                )
            )
            fig.update_layout(xaxis_title=f"Weight ({unit})", yaxis_title=None)

        fig.update_layout(
            height=settings.chart_height,
            showlegend=chart_type == "Pie",
            margin={"l": 10, "r": 10, "t": 30, "b": 10},
        )

        return fig

    @staticmethod
    def render_category_weights(category_summary: pl.DataFrame, unit: str, chart_type: str = "Bar") -> None:
        """
        Render the category weight chart.

        Args:
            category_summary: DataFrame with columns category, weight_g
            unit: Display weight unit
            chart_type: "Bar" or "Pie"
        """
        if category_summary.is_empty():
            st.info("Pack some gear to see the weight breakdown")
            return

        fig = ChartView.build_category_weight_figure(category_summary, unit, chart_type)
        st.plotly_chart(fig, use_container_width=True)

    @staticmethod
    def build_daily_calories_figure(by_day: pl.DataFrame) -> go.Figure:
        """
        Build a bar chart of planned calories per trip day.

        Args:
            by_day: DataFrame with columns day, calories

        Returns:
            Plotly figure

        """
        fig = go.Figure(
            go.Bar(
                x=[f"Day {day}" for day in by_day["day"].to_list()],
                y=by_day["calories"].to_list(),
                marker={"color": "#D2691E"},
                hovertemplate="<b>%{x}</b><br>%{y:,.0f} kcal<extra></extra>",
            )
        )
        fig.update_layout(
            height=settings.chart_height,
            yaxis_title="Calories (kcal)",
            showlegend=False,
            margin={"l": 10, "r": 10, "t": 30, "b": 10},
        )
        return fig

    @staticmethod
    def render_daily_calories(by_day: pl.DataFrame) -> None:
        """Render the daily calorie chart."""
        if by_day.is_empty():
            return

        fig = ChartView.build_daily_calories_figure(by_day)
        st.plotly_chart(fig, use_container_width=True)
