"""
Main entry point for the Trail Planner Streamlit application.

Run with: uv run streamlit run app.py
"""

import logging

import streamlit as st

from trail_planner.settings import Settings
from trail_planner.ui import (
    initialize_session_state,
    render_campsites_tab,
    render_food_tab,
    render_gear_tab,
    render_help_tab,
    render_wishlist_tab,
)


def main() -> None:
    """Run the main application."""

    settings = Settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    st.set_page_config(
        page_title=settings.app_name,
        page_icon="🏕️",
        layout="wide",
        initial_sidebar_state="collapsed",
    )

    st.title(f"🏕️ {settings.app_name}")
    st.caption(f"Version {settings.app_version}")

    st.markdown(
        """
        Plan backpacking trips: collect hikes from GPX tracks, keep track of campsites,
        weigh your gear and packing lists, and plan trip food.
        """
    )

    initialize_session_state()

    # Create tabs
    tab1, tab2, tab3, tab4, tab5 = st.tabs(["Wishlist", "Campsites", "Gear", "Food", "Help"])

    with tab1:
        render_wishlist_tab()

    with tab2:
        render_campsites_tab()

    with tab3:
        render_gear_tab()

    with tab4:
        render_food_tab()

    with tab5:
        render_help_tab()


if __name__ == "__main__":
    main()
