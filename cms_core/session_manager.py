"""
Session state management for the content console.
Holds the current route, the navigation guard, the live editor session and
the store in st.session_state, and bridges async core calls into Streamlit's
synchronous script runs.
"""

import asyncio
import streamlit as st
from typing import Dict, Any, Optional
from datetime import datetime
import logging

from .navigation_guard import NavigationGuard
from .routes import COLLECTIONS_PATH, PAGE_EDITOR, Route, parse_route

logger = logging.getLogger(__name__)

DEFAULT_ROUTE = COLLECTIONS_PATH


def run_async(coro):
    """
    Run a coroutine to completion from a Streamlit script run.

    Args:
        coro: Coroutine to run

    Returns:
        The coroutine's result
    """
    return asyncio.run(coro)


class SessionManager:
    """Manages Streamlit session state for the content console."""

    @staticmethod
    def initialize(config: Optional[Dict[str, Any]] = None):
        """Initialize session state keys; existing keys are kept."""
        defaults = {
            'current_route': DEFAULT_ROUTE,
            'config': config or {},
            'store': None,
            'media_picker': None,
            'editor_session': None,
            'editor_route': None,
            'list_screen': None,
            'list_route': None,
            'search_query': '',
            'last_activity': datetime.now(),
            'session_id': None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if st.session_state.get('guard') is None:
            st.session_state.guard = NavigationGuard(SessionManager.set_current_route)

        if not st.session_state.session_id:
            st.session_state.session_id = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

        logger.debug(f"Session initialized: {st.session_state.session_id}")

    @staticmethod
    def get_config() -> Dict[str, Any]:
        return st.session_state.get('config', {})

    @staticmethod
    def get_guard() -> NavigationGuard:
        return st.session_state.guard

    @staticmethod
    def get_store():
        return st.session_state.get('store')

    @staticmethod
    def set_store(store):
        st.session_state.store = store

    @staticmethod
    def get_media_picker():
        return st.session_state.get('media_picker')

    @staticmethod
    def set_media_picker(picker):
        """Install the media library the editor offers next to media fields."""
        st.session_state.media_picker = picker

    @staticmethod
    def get_current_path() -> str:
        return st.session_state.get('current_route', DEFAULT_ROUTE)

    @staticmethod
    def get_current_route() -> Route:
        return parse_route(SessionManager.get_current_path())

    @staticmethod
    def set_current_route(path: str):
        """
        Switch screens.

        Leaving an editor screen closes its session so late responses are
        dropped and the guard registration is released. The cached list
        screen is dropped too, so each visit to a list reloads it.
        """
        old_path = st.session_state.get('current_route')
        if old_path == path:
            return

        logger.info(f"Route transition: {old_path} -> {path}")
        new_route = parse_route(path)
        editor = st.session_state.get('editor_session')
        if editor is not None and (new_route.page != PAGE_EDITOR or st.session_state.get('editor_route') != path):
            SessionManager.close_editor()
        SessionManager.clear_list_screen()

        st.session_state.current_route = path
        SessionManager.update_activity()

    @staticmethod
    def navigate(path: str) -> bool:
        """
        Ask the guard to navigate.

        Returns:
            True if the route changed, False if the unsaved-changes prompt opened
        """
        return SessionManager.get_guard().request_navigation(path)

    @staticmethod
    def get_editor_session():
        return st.session_state.get('editor_session')

    @staticmethod
    def set_editor_session(session, path: str):
        current = st.session_state.get('editor_session')
        if current is not None and current is not session:
            current.close()
        st.session_state.editor_session = session
        st.session_state.editor_route = path

    @staticmethod
    def close_editor():
        editor = st.session_state.get('editor_session')
        if editor is not None:
            editor.close()
        st.session_state.editor_session = None
        st.session_state.editor_route = None

    @staticmethod
    def get_list_screen(path: str):
        if st.session_state.get('list_route') == path:
            return st.session_state.get('list_screen')
        return None

    @staticmethod
    def set_list_screen(screen, path: str):
        st.session_state.list_screen = screen
        st.session_state.list_route = path

    @staticmethod
    def clear_list_screen():
        st.session_state.list_screen = None
        st.session_state.list_route = None

    @staticmethod
    def update_activity():
        st.session_state.last_activity = datetime.now()

    @staticmethod
    def get_session_id() -> str:
        return st.session_state.get('session_id', 'unknown')

    @staticmethod
    def reset_session():
        """Reset the session, keeping config, store and media picker."""
        logger.info(f"Resetting session: {SessionManager.get_session_id()}")
        config = SessionManager.get_config()
        store = SessionManager.get_store()
        media_picker = SessionManager.get_media_picker()
        SessionManager.close_editor()

        for key in list(st.session_state.keys()):
            del st.session_state[key]

        SessionManager.initialize(config)
        SessionManager.set_store(store)
        SessionManager.set_media_picker(media_picker)

    @staticmethod
    def get_session_info() -> Dict[str, Any]:
        """Get session information for debugging."""
        editor = SessionManager.get_editor_session()
        guard = st.session_state.get('guard')
        return {
            'session_id': SessionManager.get_session_id(),
            'current_route': SessionManager.get_current_path(),
            'editor_open': editor is not None,
            'editor_state': editor.state.value if editor is not None else None,
            'unsaved_changes': bool(guard and guard.dirty),
            'prompt_open': bool(guard and guard.is_prompt_open),
        }
