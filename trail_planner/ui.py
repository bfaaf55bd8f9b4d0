"""
Main UI module for the Trail Planner application.

This module contains the user interface logic with tabs for the hike wishlist,
campsites, gear, food and help.
"""

from dataclasses import replace
from pathlib import Path

import polars as pl
import streamlit as st

from trail_planner.application_services.campsite_service import Campsite, CampsiteService
from trail_planner.application_services.food_service import FoodItem, FoodPlanner, FoodPlanTemplate, MealType
from trail_planner.application_services.gear_service import (
    OTHER_CATEGORY_NAME,
    WEIGHT_UNITS,
    Backpack,
    BackpackItem,
    GearCategory,
    GearInventory,
    GearItem,
    format_weight,
)
from trail_planner.application_services.wishlist_service import (
    PRIORITY_LABELS,
    WishlistHike,
    WishlistService,
    draft_from_summary,
    parse_tags,
)
from trail_planner.data_accessors.gear_csv_loader import CSVImportError, GearField, map_headers, parse_csv
from trail_planner.data_accessors.gpx_loader import GPXLoader, GPXLoadError
from trail_planner.settings import settings
from trail_planner.views.chart_view import ChartView
from trail_planner.views.map_view import MapView

NEW_ENTRY = ""


def initialize_session_state() -> None:
    """Initialize Streamlit session state variables."""
    if "wishlist_service" not in st.session_state:
        st.session_state.wishlist_service = WishlistService()

    if "campsite_service" not in st.session_state:
        st.session_state.campsite_service = CampsiteService()

    if "gear_inventory" not in st.session_state:
        st.session_state.gear_inventory = GearInventory()

    if "food_planner" not in st.session_state:
        st.session_state.food_planner = FoodPlanner()

    if "draft_hike" not in st.session_state:
        st.session_state.draft_hike = None

    if "editing_campsite_id" not in st.session_state:
        st.session_state.editing_campsite_id = None

    if "current_lat" not in st.session_state:
        st.session_state.current_lat = None

    if "current_lon" not in st.session_state:
        st.session_state.current_lon = None

    if "last_map_click" not in st.session_state:
        st.session_state.last_map_click = None

    if "weight_unit" not in st.session_state:
        st.session_state.weight_unit = settings.default_weight_unit


# Wishlist


def render_gpx_import() -> None:
    """Render GPX import section."""
    st.subheader("Import a GPX track")

    service: WishlistService = st.session_state.wishlist_service

    upload_method = st.radio(
        "Source",
        ["Local file", "URL"],
        horizontal=True,
    )

    if upload_method == "Local file":
        uploaded_file = st.file_uploader(
            "Choose a GPX file",
            type=["gpx"],
            help=f"GPX file up to {settings.max_gpx_file_size_mb}MB",
        )

        if uploaded_file is not None:
            # Only parse each upload once
            file_id = f"{uploaded_file.name}_{uploaded_file.size}"
            if st.session_state.get("imported_file_id") != file_id:
                try:
                    with st.spinner("Reading GPX file..."):
                        st.session_state.draft_hike = service.import_gpx(uploaded_file, uploaded_file.name)
                    st.session_state.imported_file_id = file_id
                    st.success("GPX file imported")
                except GPXLoadError as e:
                    st.error(f"Error: {e!s}")
    else:
        url = st.text_input("GPX file URL", placeholder="https://example.com/track.gpx")

        if st.button("Import from URL", type="primary"):
            if url:
                try:
                    with st.spinner("Downloading GPX file..."):
                        summary = GPXLoader.load_from_url(url)
                    draft = draft_from_summary(summary)
                    if draft.link is None:
                        draft.link = url
                    st.session_state.draft_hike = draft
                    st.success("GPX file imported")
                except GPXLoadError as e:
                    st.error(f"Error: {e!s}")
            else:
                st.warning("Enter a URL")


def render_hike_form() -> None:
    """Render the form for the hike being added or edited."""
    service: WishlistService = st.session_state.wishlist_service
    draft: WishlistHike | None = st.session_state.draft_hike

    is_new = draft is None or service.get(draft.id) is None
    hike = draft if draft is not None else WishlistHike(name="")

    st.subheader("New wishlist hike" if is_new else "Edit hike")

    with st.form("hike_form", clear_on_submit=False):
        name = st.text_input("Hike name", value=hike.name)
        region = st.text_input("Region", value=hike.region, placeholder="e.g. Kananaskis, Jasper")

        col1, col2, col3 = st.columns(3)
        with col1:
            distance = st.number_input("Distance (km)", value=float(hike.distance_km), min_value=0.0, format="%.2f")
        with col2:
            elevation = st.number_input("Elevation gain (m)", value=float(hike.elevation_gain_m), min_value=0.0)
        with col3:
            duration = st.number_input(
                "Est. duration (hours)", value=float(hike.estimated_duration_hours), min_value=0.0
            )

        priority = st.selectbox(
            "Priority",
            options=list(PRIORITY_LABELS),
            index=list(PRIORITY_LABELS).index(hike.priority) if hike.priority in PRIORITY_LABELS else 0,
            format_func=lambda value: PRIORITY_LABELS[value],
        )
        tags = st.text_input("Tags (comma-separated)", value=", ".join(hike.tags))
        link = st.text_input("GPX or web link", value=hike.link or "")
        notes = st.text_area("Notes", value=hike.notes)

        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        hike = replace(
            hike,
            name=name.strip(),
            region=region,
            distance_km=distance,
            elevation_gain_m=elevation,
            estimated_duration_hours=duration,
            priority=priority,
            tags=parse_tags(tags),
            link=link.strip() or None,
            notes=notes,
        )

        try:
            if is_new:
                service.add(hike)
            else:
                service.update(hike)
        except ValueError as e:
            st.error(f"Error: {e!s}")
            return

        st.session_state.draft_hike = None
        st.rerun()


def render_wishlist() -> None:
    """Render the list of wishlist hikes."""
    service: WishlistService = st.session_state.wishlist_service
    hikes = service.list_hikes()

    st.subheader("Wishlist")
    st.write(f"**Hikes:** {len(hikes)}")

    if not hikes:
        st.caption("No hikes on the wishlist yet")
        return

    for hike in hikes:
        col1, col2, col3 = st.columns([5, 1, 1])
        with col1:
            info_text = (
                f"{hike.name} ({hike.priority_label}) - "
                f"{hike.distance_km:.1f} km, {hike.elevation_gain_m:.0f} m gain"
            )
            if hike.region:
                info_text += f" - {hike.region}"
            st.text(info_text)
            if hike.tags:
                st.caption(", ".join(hike.tags))
        with col2:
            if st.button("Edit", key=f"edit_hike_{hike.id}"):
                st.session_state.draft_hike = hike
                st.rerun()
        with col3:
            if st.button("Delete", key=f"delete_hike_{hike.id}"):
                service.delete(hike.id)
                st.rerun()


def render_wishlist_tab() -> None:
    """Render the wishlist tab."""
    render_gpx_import()
    st.divider()

    col1, col2 = st.columns([1, 1])
    with col1:
        render_hike_form()
    with col2:
        render_wishlist()


# Campsites


def render_campsite_form() -> None:
    """Render the form for adding a campsite, or editing the one picked from the list."""
    service: CampsiteService = st.session_state.campsite_service

    editing = None
    if st.session_state.editing_campsite_id is not None:
        editing = service.get(st.session_state.editing_campsite_id)
    campsite = editing if editing is not None else Campsite()
    form_key = editing.id if editing is not None else "new"

    st.subheader("Add a campsite" if editing is None else f"Edit {campsite.name}")

    map_link = st.text_input(
        "Map link",
        value=campsite.map_link,
        placeholder="Paste a shared map link to fill in the coordinates",
        key=f"campsite_map_link_{form_key}",
    )

    if st.button("Read coordinates from link") and map_link:
        located = Campsite(latitude=st.session_state.current_lat, longitude=st.session_state.current_lon)
        with st.spinner("Reading link..."):
            updated = CampsiteService.apply_map_link(located, map_link)
        if updated:
            st.session_state.current_lat = located.latitude
            st.session_state.current_lon = located.longitude
            st.success(f"Coordinates: ({located.latitude:.6f}, {located.longitude:.6f})")
        else:
            st.warning("Could not parse coordinates from this link")

    default_lat = campsite.latitude if campsite.latitude is not None else 51.0
    default_lon = campsite.longitude if campsite.longitude is not None else -115.0

    with st.form(f"campsite_form_{form_key}"):
        name = st.text_input("Name", value=campsite.name)

        col1, col2 = st.columns(2)
        with col1:
            latitude = st.number_input(
                "Latitude",
                value=st.session_state.current_lat if st.session_state.current_lat is not None else default_lat,
                min_value=-90.0,
                max_value=90.0,
                format="%.6f",
            )
        with col2:
            longitude = st.number_input(
                "Longitude",
                value=st.session_state.current_lon if st.session_state.current_lon is not None else default_lon,
                min_value=-180.0,
                max_value=180.0,
                format="%.6f",
            )

        linked_hike = st.text_input("Linked hike", value=campsite.linked_hike_name)
        tags = st.text_input(
            "Tags (comma-separated)", value=", ".join(campsite.tags), placeholder="backcountry, crown land"
        )
        access_notes = st.text_area("Access notes", value=campsite.access_notes)

        col1, col2, col3 = st.columns(3)
        with col1:
            permit_required = st.checkbox("Permit required", value=campsite.permit_required)
        with col2:
            visited = st.checkbox("Visited", value=campsite.visited)
        with col3:
            needs_investigation = st.checkbox("Needs investigation", value=campsite.needs_investigation)

        submitted = st.form_submit_button("Save campsite", type="primary")

    if editing is not None and st.button("Cancel editing"):
        _reset_campsite_form()
        st.rerun()

    if submitted:
        campsite = replace(
            campsite,
            name=name.strip() or "New Campsite",
            latitude=latitude,
            longitude=longitude,
            permit_required=permit_required,
            visited=visited,
            needs_investigation=needs_investigation,
            access_notes=access_notes,
            linked_hike_name=linked_hike,
            map_link=map_link.strip(),
            tags=parse_tags(tags),
        )

        try:
            if editing is None:
                service.add(campsite)
            else:
                service.update(campsite)
        except ValueError as e:
            st.error(f"Error: {e!s}")
            return

        _reset_campsite_form()
        st.rerun()


def _reset_campsite_form() -> None:
    st.session_state.editing_campsite_id = None
    st.session_state.current_lat = None
    st.session_state.current_lon = None
    st.session_state.last_map_click = None


def render_campsite_map() -> None:
    """Render the campsite map and list."""
    service: CampsiteService = st.session_state.campsite_service

    st.subheader("Campsite map")

    pending_coords = None
    if st.session_state.current_lat is not None and st.session_state.current_lon is not None:
        pending_coords = (st.session_state.current_lat, st.session_state.current_lon)

    map_data = MapView.render_map(service.list_campsites(), pending_coordinates=pending_coords)

    # Handle map clicks
    clicked_coords = MapView.get_clicked_coordinates(map_data)
    if clicked_coords and st.session_state.last_map_click != clicked_coords:
        st.session_state.current_lat = clicked_coords[0]
        st.session_state.current_lon = clicked_coords[1]
        st.session_state.last_map_click = clicked_coords
        st.rerun()

    for campsite in service.list_campsites():
        col1, col2, col3 = st.columns([5, 1, 1])
        with col1:
            st.text(f"{campsite.name} [{campsite.primary_type.value}]")
        with col2:
            if st.button("Edit", key=f"edit_campsite_{campsite.id}"):
                st.session_state.editing_campsite_id = campsite.id
                st.session_state.current_lat = campsite.latitude
                st.session_state.current_lon = campsite.longitude
                st.rerun()
        with col3:
            if st.button("Delete", key=f"delete_campsite_{campsite.id}"):
                service.delete(campsite.id)
                if st.session_state.editing_campsite_id == campsite.id:
                    _reset_campsite_form()
                st.rerun()


def render_campsites_tab() -> None:
    """Render the campsites tab."""
    col1, col2 = st.columns([1, 2])
    with col1:
        render_campsite_form()
    with col2:
        render_campsite_map()


# Gear


def render_gear_import() -> None:
    """Render CSV gear import section."""
    inventory: GearInventory = st.session_state.gear_inventory

    st.subheader("Import gear from CSV")

    uploaded_file = st.file_uploader("Choose a CSV file", type=["csv"], key="gear_csv")
    if uploaded_file is None:
        return

    try:
        result = parse_csv(uploaded_file)
    except CSVImportError as e:
        st.error(f"Error: {e!s}")
        return

    field_options = list(GearField)
    mappings = map_headers(result.headers)
    for i, mapping in enumerate(mappings):
        mapping.mapped_to = st.selectbox(
            f"Column '{mapping.csv_header}'",
            options=field_options,
            index=field_options.index(mapping.mapped_to),
            format_func=lambda value: value.value,
            key=f"csv_mapping_{i}",
        )

    if st.button("Import gear", type="primary"):
        conversion = inventory.items_from_csv(result, mappings)
        report = inventory.import_items(conversion.items)

        summary = f"Processed {len(result.rows)} rows. Created {report.imported} new gear items."
        if report.skipped_duplicates:
            summary += f" Skipped {report.skipped_duplicates} duplicates."
        if conversion.created_categories:
            summary += f" New categories: {', '.join(conversion.created_categories)}."
        st.success(summary)


def render_gear_list() -> None:
    """Render the grouped gear list."""
    inventory: GearInventory = st.session_state.gear_inventory
    unit = st.session_state.weight_unit

    st.subheader("Gear")

    col1, col2, col3 = st.columns([3, 1, 1])
    with col1:
        search = st.text_input("Search", placeholder="Name, category or tag")
    with col2:
        favorites_only = st.checkbox("Favorites")
    with col3:
        consumable_only = st.checkbox("Consumables")

    groups = inventory.grouped_items(search, favorites_only=favorites_only, consumable_only=consumable_only)
    if not groups:
        st.caption("No gear found")
        return

    for group in groups:
        with st.expander(f"{group.category.name} ({len(group.items)})"):
            st.dataframe(
                pl.DataFrame(
                    {
                        "name": [item.name for item in group.items],
                        "weight": [format_weight(item.weight_grams, unit) for item in group.items],
                        "quantity": [item.quantity for item in group.items],
                        "price": [item.price for item in group.items],
                    }
                ),
                width="stretch",
            )

    item_names = {item.id: item.name for item in inventory.items}
    category_names = {category.id: category.name for category in inventory.categories}
    if not category_names:
        return

    with st.expander("Move gear to another category"):
        moved_ids = st.multiselect(
            "Gear to move",
            options=list(item_names),
            format_func=lambda item_id: item_names[item_id],
            key="move_item_ids",
        )
        target_id = st.selectbox(
            "Target category",
            options=list(category_names),
            format_func=lambda category_id: category_names[category_id],
            key="move_target_category",
        )
        if st.button("Move gear") and moved_ids:
            inventory.move_items(set(moved_ids), target_id)
            st.rerun()


def render_gear_item_form() -> None:
    """Render the form for adding a gear item or editing an existing one."""
    inventory: GearInventory = st.session_state.gear_inventory

    st.subheader("Add or edit gear")

    category_names = {category.id: category.name for category in inventory.categories}
    if not category_names:
        st.caption("Add a category before adding gear")
        return

    item_names = {item.id: item.name for item in inventory.items}
    selected_id = st.selectbox(
        "Gear item",
        options=[NEW_ENTRY, *item_names],
        format_func=lambda item_id: "New item" if item_id == NEW_ENTRY else item_names[item_id],
        key="gear_item_choice",
    )
    existing = inventory.get_item(selected_id) if selected_id != NEW_ENTRY else None

    if existing is not None:
        item = existing
    else:
        other = inventory.find_category(OTHER_CATEGORY_NAME)
        item = GearItem(name="", category_id=other.id if other is not None else next(iter(category_names)))

    category_ids = list(category_names)
    with st.form(f"gear_item_form_{item.id if existing is not None else 'new'}"):
        name = st.text_input("Gear name", value=item.name)
        category_id = st.selectbox(
            "Category",
            options=category_ids,
            index=category_ids.index(item.category_id) if item.category_id in category_names else 0,
            format_func=lambda value: category_names[value],
        )

        col1, col2, col3 = st.columns(3)
        with col1:
            weight = st.number_input("Weight (g)", value=float(item.weight_grams), min_value=0.0)
        with col2:
            price = st.number_input("Price", value=float(item.price), min_value=0.0, format="%.2f")
        with col3:
            quantity = st.number_input("Owned quantity", value=int(item.quantity), min_value=1, step=1)

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            worn = st.checkbox("Worn", value=item.worn)
        with col2:
            consumable = st.checkbox("Consumable", value=item.consumable)
        with col3:
            favorite = st.checkbox("Favorite", value=item.favorite)
        with col4:
            optional = st.checkbox("Optional", value=item.optional)

        tags = st.text_input("Gear tags (comma-separated)", value=", ".join(item.tags))
        product_url = st.text_input("Product link", value=item.product_url)
        notes = st.text_area("Gear notes", value=item.notes)

        submitted = st.form_submit_button("Save gear", type="primary")

    if submitted:
        if not name.strip():
            st.error("Enter a name for the gear item")
            return
        inventory.update_item(
            replace(
                item,
                name=name.strip(),
                category_id=category_id,
                weight_grams=weight,
                price=price,
                quantity=int(quantity),
                worn=worn,
                consumable=consumable,
                favorite=favorite,
                optional=optional,
                tags=parse_tags(tags),
                product_url=product_url.strip(),
                notes=notes,
            )
        )
        st.rerun()

    if existing is not None and st.button("Delete gear item"):
        inventory.delete_items({existing.id})
        st.rerun()


def render_category_controls() -> None:
    """Render adding and deleting gear categories."""
    inventory: GearInventory = st.session_state.gear_inventory

    with st.expander("Categories"):
        new_name = st.text_input("New category name", key="new_category_name")
        if st.button("Add category") and new_name.strip():
            if inventory.find_category(new_name) is not None:
                st.warning(f"Category '{new_name.strip()}' already exists")
            else:
                inventory.add_category(GearCategory(name=new_name.strip()))
                st.rerun()

        category_names = {category.id: category.name for category in inventory.categories}
        if not category_names:
            return

        deleted_id = st.selectbox(
            "Category to delete",
            options=list(category_names),
            format_func=lambda category_id: category_names[category_id],
            key="delete_category_choice",
        )
        st.caption(f"Gear in a deleted category moves to '{OTHER_CATEGORY_NAME}'")
        if st.button("Delete category"):
            inventory.delete_category(deleted_id)
            st.rerun()


def _select_backpack(inventory: GearInventory, label: str, key: str) -> Backpack | None:
    backpack_names = {backpack.id: backpack.name for backpack in inventory.backpacks}
    backpack_id = st.selectbox(
        label,
        options=list(backpack_names),
        format_func=lambda value: backpack_names[value],
        key=key,
    )
    return next((backpack for backpack in inventory.backpacks if backpack.id == backpack_id), None)


def render_backpacks() -> None:
    """Render backpack composition and totals."""
    inventory: GearInventory = st.session_state.gear_inventory

    st.subheader("Backpacks")

    new_name = st.text_input("New backpack name")
    if st.button("Create backpack") and new_name.strip():
        inventory.add_backpack(Backpack(name=new_name.strip()))
        st.rerun()

    if not inventory.backpacks:
        st.caption("No backpacks yet")
        return

    backpack = _select_backpack(inventory, "Backpack", key="gear_backpack")
    if backpack is None:
        return

    item_names = {item.id: item.name for item in inventory.items}
    packed_ids = st.multiselect(
        "Packed gear",
        options=list(item_names),
        default=[packed.item_id for packed in backpack.items if packed.item_id in item_names],
        format_func=lambda item_id: item_names[item_id],
        key=f"packed_{backpack.id}",
    )

    quantities = {packed.item_id: packed.quantity for packed in backpack.items}
    packed_items = []
    for item_id in packed_ids:
        quantity = st.number_input(
            f"Packed {item_names[item_id]}",
            value=quantities.get(item_id, 1),
            min_value=1,
            step=1,
            key=f"packed_quantity_{backpack.id}_{item_id}",
        )
        packed_items.append(BackpackItem(item_id=item_id, quantity=int(quantity)))
    backpack.items = packed_items

    unit = st.radio("Unit", list(WEIGHT_UNITS), horizontal=True, key="weight_unit")
    totals = inventory.backpack_totals(backpack)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Base weight", format_weight(totals.base_weight, unit))
    with col2:
        st.metric("Consumables", format_weight(totals.consumable_weight, unit))
    with col3:
        st.metric("Worn weight", format_weight(totals.worn_weight, unit))
    with col4:
        st.metric("Optional", format_weight(totals.optional_weight, unit))

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Trail weight", format_weight(totals.trail_weight, unit))
    with col2:
        st.metric("Total cost", f"${totals.total_cost:,.2f}")

    chart_type = st.radio("Chart", ["Bar", "Pie"], horizontal=True)
    ChartView.render_category_weights(totals.category_summary, unit, chart_type)


def render_gear_tab() -> None:
    """Render the gear tab."""
    render_gear_import()
    st.divider()

    col1, col2 = st.columns([1, 1])
    with col1:
        render_gear_list()
        render_gear_item_form()
        render_category_controls()
    with col2:
        render_backpacks()


# Food


def render_food_library() -> None:
    """Render the food library form and list."""
    planner: FoodPlanner = st.session_state.food_planner
    inventory: GearInventory = st.session_state.gear_inventory

    st.subheader("Food library")

    food_names = {food.id: food.name for food in planner.foods}
    selected_id = st.selectbox(
        "Food",
        options=[NEW_ENTRY, *food_names],
        format_func=lambda food_id: "New food" if food_id == NEW_ENTRY else food_names[food_id],
        key="food_choice",
    )
    existing = planner.get_food(selected_id) if selected_id != NEW_ENTRY else None
    food = existing if existing is not None else FoodItem(name="")

    with st.form(f"food_form_{food.id if existing is not None else 'new'}"):
        name = st.text_input("Food name", value=food.name)

        col1, col2 = st.columns(2)
        with col1:
            weight = st.number_input("Serving weight (g)", value=float(food.weight_grams), min_value=0.0)
        with col2:
            packaging = st.number_input("Packaging (g)", value=float(food.packaging_weight_grams), min_value=0.0)

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            calories = st.number_input("Calories (kcal)", value=float(food.calories), min_value=0.0)
        with col2:
            fat = st.number_input("Fat (g)", value=float(food.fat), min_value=0.0)
        with col3:
            carbs = st.number_input("Carbs (g)", value=float(food.carbs), min_value=0.0)
        with col4:
            protein = st.number_input("Protein (g)", value=float(food.protein), min_value=0.0)

        notes = st.text_area("Food notes", value=food.notes)

        submitted = st.form_submit_button("Save food", type="primary")

    if submitted:
        try:
            planner.update_food(
                replace(
                    food,
                    name=name.strip(),
                    weight_grams=weight,
                    packaging_weight_grams=packaging,
                    calories=calories,
                    fat=fat,
                    carbs=carbs,
                    protein=protein,
                    notes=notes,
                )
            )
        except ValueError as e:
            st.error(f"Error: {e!s}")
            return
        st.rerun()

    if existing is not None and st.button("Delete food"):
        planner.delete_foods({existing.id}, inventory.backpacks)
        st.rerun()

    if planner.foods:
        st.dataframe(
            pl.DataFrame(
                {
                    "name": [food.name for food in planner.foods],
                    "weight_g": [food.packed_weight_grams for food in planner.foods],
                    "calories": [food.calories for food in planner.foods],
                    "fat_g": [food.fat for food in planner.foods],
                    "carbs_g": [food.carbs for food in planner.foods],
                    "protein_g": [food.protein for food in planner.foods],
                }
            ),
            width="stretch",
        )


def render_food_templates() -> None:
    """Render food template creation and editing."""
    planner: FoodPlanner = st.session_state.food_planner

    st.subheader("Food templates")

    new_name = st.text_input("New template name", placeholder="e.g. 3-day solo meals")
    if st.button("Create template") and new_name.strip():
        planner.update_template(FoodPlanTemplate(name=new_name.strip()))
        st.rerun()

    if not planner.templates:
        st.caption("No templates yet")
        return

    template_names = {template.id: template.name for template in planner.templates}
    template_id = st.selectbox(
        "Template",
        options=list(template_names),
        format_func=lambda value: template_names[value],
        key="template_choice",
    )
    template = planner.get_template(template_id)
    if template is None:
        return

    food_names = {food.id: food.name for food in planner.foods}
    contents = [food_names[food_id] for food_id in template.food_item_ids if food_id in food_names]
    st.text(", ".join(contents) if contents else "Empty template")

    if food_names:
        col1, col2 = st.columns([3, 1])
        with col1:
            food_id = st.selectbox(
                "Food to add",
                options=list(food_names),
                format_func=lambda value: food_names[value],
                key="template_food",
            )
        with col2:
            if st.button("Add to template"):
                planner.add_to_template(template, food_id)
                st.rerun()

    if st.button("Delete template"):
        planner.delete_template(template.id)
        st.rerun()


def render_food_plan() -> None:
    """Render the food plan of a backpack with its nutrition totals."""
    planner: FoodPlanner = st.session_state.food_planner
    inventory: GearInventory = st.session_state.gear_inventory
    unit = st.session_state.weight_unit

    st.subheader("Trip food plan")

    if not inventory.backpacks:
        st.caption("Create a backpack in the Gear tab to plan its food")
        return

    backpack = _select_backpack(inventory, "Trip backpack", key="food_backpack")
    if backpack is None:
        return

    food_names = {food.id: food.name for food in planner.foods}
    if food_names:
        with st.form("trip_food_form"):
            col1, col2, col3, col4 = st.columns([3, 1, 2, 1])
            with col1:
                food_id = st.selectbox(
                    "Planned food", options=list(food_names), format_func=lambda value: food_names[value]
                )
            with col2:
                day = st.number_input("Day", value=1, min_value=1, step=1)
            with col3:
                meal_type = st.selectbox("Meal", options=list(MealType), format_func=lambda value: value.value)
            with col4:
                servings = st.number_input("Servings", value=1, min_value=1, step=1)

            if st.form_submit_button("Add to plan"):
                planner.add_trip_food(backpack, food_id, day=int(day), meal_type=meal_type, quantity=int(servings))
                st.rerun()
    else:
        st.caption("Add foods to the library first")

    if planner.templates:
        template_names = {template.id: template.name for template in planner.templates}
        with st.form("apply_template_form"):
            col1, col2, col3 = st.columns([3, 1, 2])
            with col1:
                template_id = st.selectbox(
                    "Template to apply", options=list(template_names), format_func=lambda value: template_names[value]
                )
            with col2:
                template_day = st.number_input("Template day", value=1, min_value=1, step=1)
            with col3:
                template_meal = st.selectbox(
                    "Template meal", options=list(MealType), format_func=lambda value: value.value
                )

            if st.form_submit_button("Apply template"):
                template = planner.get_template(template_id)
                if template is not None:
                    planner.apply_template(template, backpack, day=int(template_day), meal_type=template_meal)
                    st.rerun()

    summary = planner.food_plan(backpack)
    totals = summary.totals

    col1, col2, col3, col4, col5 = st.columns(5)
    with col1:
        st.metric("Food weight", format_weight(totals.weight_grams, unit))
    with col2:
        st.metric("Calories", f"{totals.calories:,.0f} kcal")
    with col3:
        st.metric("Fat", f"{totals.fat:,.0f} g")
    with col4:
        st.metric("Carbs", f"{totals.carbs:,.0f} g")
    with col5:
        st.metric("Protein", f"{totals.protein:,.0f} g")

    if summary.by_day.is_empty():
        st.info("No food planned for this backpack yet")
        return

    ChartView.render_daily_calories(summary.by_day)
    st.dataframe(summary.by_meal, width="stretch")

    planned = sorted(backpack.foods, key=lambda trip_food: (trip_food.day, trip_food.meal_type.order))
    for trip_food in planned:
        food = planner.get_food(trip_food.food_item_id)
        if food is None:
            continue
        col1, col2 = st.columns([5, 1])
        with col1:
            st.text(f"Day {trip_food.day} - {trip_food.meal_type.value}: {trip_food.quantity} x {food.name}")
        with col2:
            if st.button("Remove", key=f"remove_trip_food_{trip_food.id}"):
                FoodPlanner.remove_trip_food(backpack, trip_food.id)
                st.rerun()


def render_food_tab() -> None:
    """Render the food tab."""
    col1, col2 = st.columns([1, 1])
    with col1:
        render_food_library()
        st.divider()
        render_food_templates()
    with col2:
        render_food_plan()


def render_help_tab() -> None:
    """Render the help tab with usage instructions."""
    st.header("User guide")

    # Load usage guide from markdown file
    usage_path = Path(__file__).parent.parent / "usages" / "usage.md"

    try:
        with usage_path.open(encoding="utf-8") as f:
            usage_content = f.read()
        st.markdown(usage_content)
    except FileNotFoundError:
        st.error(f"Usage guide not found: {usage_path}")
        st.info("See usages/usage.md in the repository for detailed instructions.")
