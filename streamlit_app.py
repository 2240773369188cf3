"""
Main Streamlit application for the content console.
Schema-driven editor for collections served by the content API.
"""

import streamlit as st
import logging

from cms_core.config_loader import configure_logging, get_config_summary, get_config_value, load_config, validate_config
from cms_core.entity_store import EntityStore
from cms_core.routes import COLLECTIONS_PATH, PAGE_COLLECTIONS, PAGE_EDITOR, PAGE_LIST, collection_list_path

config = load_config()
configure_logging(config)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title=get_config_value(config, 'ui', 'page_title', 'Content Console'),
    page_icon="📝",
    layout="wide",
    initial_sidebar_state="expanded"
)


def main():
    """Main application entry point."""
    from cms_core.error_handler import ErrorHandler

    try:
        init_session_state()
        render_sidebar()
        render_main_content()
    except Exception as e:
        ErrorHandler.handle_error(e, "application run")


def init_session_state():
    """Initialize session state and the store adapter."""
    from cms_core.session_manager import SessionManager

    SessionManager.initialize(config)
    if SessionManager.get_store() is None:
        if not validate_config(config):
            logger.warning("Configuration has issues; continuing with merged defaults")
        SessionManager.set_store(EntityStore.from_config(config))
        app_version = get_config_value(config, 'app', 'version', 'Unknown')
        logger.info(f"Starting content console version: {app_version}")
        logger.debug(f"Configuration summary: {get_config_summary(config)}")


def render_sidebar():
    """Render application sidebar."""
    from cms_core.session_manager import SessionManager

    with st.sidebar:
        st.header(get_config_value(config, 'ui', 'sidebar_title', 'Navigation'))

        if st.button("📚 Collections", key="nav_collections", use_container_width=True):
            SessionManager.navigate(COLLECTIONS_PATH)
            st.rerun()

        route = SessionManager.get_current_route()
        if route.collection_slug and route.page == PAGE_EDITOR:
            if st.button(f"📄 {route.collection_slug}", key="nav_collection", use_container_width=True):
                SessionManager.navigate(collection_list_path(route.collection_slug))
                st.rerun()

        st.divider()
        guard = SessionManager.get_guard()
        if guard.dirty:
            st.warning("⚠️ Unsaved changes")
        st.caption(f"Session: {SessionManager.get_session_id()}")


def render_main_content():
    """Render main content area based on the current route."""
    from cms_core.edit_view import EditView, render_unsaved_changes_prompt
    from cms_core.list_view import CollectionsView, ListView
    from cms_core.session_manager import SessionManager

    render_unsaved_changes_prompt()

    route = SessionManager.get_current_route()
    if route.page == PAGE_COLLECTIONS:
        CollectionsView.render()
    elif route.page == PAGE_LIST:
        ListView.render(route)
    elif route.page == PAGE_EDITOR:
        EditView.render(route)
    else:
        st.error(f"Unknown page: {route.page}")


if __name__ == "__main__":
    main()
