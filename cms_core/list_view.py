"""
List views for the content console: the collections index and the item table of one collection.
"""

import streamlit as st
import logging

from .collaborators import CAPABILITY_CREATE, CAPABILITY_DELETE, StaticPermissionOracle
from .config_loader import get_config_value
from .error_handler import ErrorHandler
from .exceptions import CMSError
from .list_screen import CollectionListScreen, TABLE_FIELD_COUNT
from .routes import Route, collection_list_path
from .session_manager import SessionManager, run_async
from .ui_feedback import Notify, spinner

logger = logging.getLogger(__name__)


class CollectionsView:
    """Index of every collection."""

    @staticmethod
    def render():
        st.header("📚 Collections")

        try:
            with spinner("Loading collections..."):
                collections = run_async(SessionManager.get_store().list_collections())
        except CMSError as e:
            ErrorHandler.handle_error(e, "loading collections")
            return

        if not collections:
            st.info("No collections have been defined yet.")
            return

        for collection in collections:
            col1, col2 = st.columns([4, 1])
            with col1:
                badge = " · single" if collection.is_singleton else ""
                st.markdown(f"**{collection.name}**{badge}")
                if collection.description:
                    st.caption(collection.description)
            with col2:
                if st.button("Open", key=f"open_collection_{collection.id}"):
                    SessionManager.navigate(collection_list_path(collection.slug))
                    st.rerun()


class ListView:
    """Table of items in one collection."""

    @staticmethod
    def render(route: Route):
        path = SessionManager.get_current_path()
        config = SessionManager.get_config()
        screen = SessionManager.get_list_screen(path)

        if screen is None:
            screen = CollectionListScreen(
                SessionManager.get_store(),
                SessionManager.get_guard(),
                route.collection_slug,
                table_field_count=get_config_value(config, 'editor', 'table_field_count', TABLE_FIELD_COUNT),
            )
            try:
                with spinner("Loading content..."):
                    run_async(screen.load())
            except CMSError as e:
                ErrorHandler.handle_error(e, f"loading collection {route.collection_slug}")
                return

            if screen.redirected_to:
                st.rerun()
                return
            SessionManager.set_list_screen(screen, path)

        if not screen.should_render_table:
            return

        oracle = StaticPermissionOracle.from_config(config)
        collection = screen.collection

        col1, col2 = st.columns([4, 1])
        with col1:
            st.header(f"📄 {collection.name}")
        with col2:
            if oracle.has_capability(CAPABILITY_CREATE) and st.button("➕ New", type="primary", key="list_new"):
                SessionManager.navigate(screen.create_path())
                st.rerun()

        query = st.text_input("Search", key=f"search_{collection.id}", placeholder="Search content...")
        items = screen.filter_items(query)

        if not items:
            st.info("No content matches your search." if query else "No content yet.")
            return

        fields = screen.table_fields
        header = st.columns(len(fields) + 2)
        for col, definition in zip(header, fields):
            col.markdown(f"**{definition.label}**")
        header[-2].markdown("**Status**")

        can_delete = oracle.has_capability(CAPABILITY_DELETE)
        for item in items:
            row = st.columns(len(fields) + 2)
            for col, definition in zip(row, fields):
                value = item.data.get(definition.name)
                col.write("" if value is None else str(value)[:60])
            row[-2].write("Published" if item.is_published else "Draft")
            with row[-1]:
                if st.button("Edit", key=f"edit_{item.id}"):
                    SessionManager.navigate(screen.edit_path(item.id))
                    st.rerun()
                if can_delete and st.button("Delete", key=f"delete_{item.id}"):
                    ListView._handle_delete(screen, item.id)

    @staticmethod
    def _handle_delete(screen: CollectionListScreen, item_id: str):
        try:
            run_async(screen.delete_item(item_id))
        except CMSError as e:
            ErrorHandler.handle_error(e, f"deleting item {item_id}")
            return
        Notify.success("Content deleted")
        st.rerun()
