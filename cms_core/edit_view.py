"""
Edit view for the content console.
Hosts one EditorSession: loads it for the current route, renders the form,
the changes preview and the save actions, and shows the unsaved-changes
prompt when the navigation guard suspends a transition.
"""

import streamlit as st
from typing import Optional
import logging

from .collaborators import CAPABILITY_CREATE, CAPABILITY_UPDATE, StaticPermissionOracle
from .diff_utils import calculate_diff, format_value, get_change_summary
from .editor_session import EditorSession
from .error_handler import ErrorHandler
from .exceptions import CMSError
from .form_generator import FormGenerator
from .model_builder import split_orphaned_fields
from .navigation_guard import CHOICE_LABELS, GuardChoice
from .routes import Route, collection_list_path, item_editor_path
from .session_manager import SessionManager, run_async
from .ui_feedback import Notify, spinner

logger = logging.getLogger(__name__)


class EditView:
    """Manages the editor screen."""

    @staticmethod
    def render(route: Route):
        """Render the editor for the current route."""
        session = EditView._get_or_open_session(route)
        if session is None:
            return

        if session.is_missing:
            EditView._render_missing(route)
            return

        oracle = StaticPermissionOracle.from_config(SessionManager.get_config())
        capability = CAPABILITY_CREATE if session.is_new else CAPABILITY_UPDATE
        can_save = oracle.has_capability(capability)

        EditView._render_header(session, route)
        if not can_save:
            st.info("🔒 You can view this content but do not have permission to change it.")

        FormGenerator.render_editor_form(session, disabled=not can_save)

        st.divider()
        EditView._render_diff_section(session)
        EditView._render_action_buttons(session, route, can_save)

    @staticmethod
    def _get_or_open_session(route: Route) -> Optional[EditorSession]:
        path = SessionManager.get_current_path()
        session = SessionManager.get_editor_session()
        if session is not None and st.session_state.get('editor_route') == path:
            return session

        try:
            with spinner("Loading editor..."):
                session = run_async(EditorSession.open(
                    SessionManager.get_store(),
                    route.collection_slug,
                    item_id=route.item_id,
                    guard=SessionManager.get_guard(),
                    config=SessionManager.get_config(),
                    media_picker=SessionManager.get_media_picker(),
                ))
        except CMSError as e:
            ErrorHandler.handle_error(e, f"opening editor for {path}")
            EditView._render_back_button(route)
            return None

        SessionManager.set_editor_session(session, path)
        return session

    @staticmethod
    def _render_header(session: EditorSession, route: Route):
        collection = session.collection
        col1, col2 = st.columns([4, 1])
        with col1:
            if session.is_new:
                st.header(f"✏️ New {collection.name}")
            else:
                title = session.get_field(session.title_field) if session.title_field else None
                st.header(f"✏️ {title or collection.name}")
            if collection.description:
                st.caption(collection.description)
            _, orphans = split_orphaned_fields(session.working.data, collection)
            if orphans:
                st.caption(f"Kept fields no longer in the schema: {', '.join(orphans)}")
        with col2:
            if session.is_dirty:
                st.warning("Unsaved changes")
            if not collection.is_singleton:
                EditView._render_back_button(route)

    @staticmethod
    def _render_back_button(route: Route):
        if route.collection_slug and st.button("← Back to list", key="editor_back"):
            SessionManager.navigate(collection_list_path(route.collection_slug))
            st.rerun()

    @staticmethod
    def _render_missing(route: Route):
        st.header("Content not found")
        st.warning("This item does not exist or has been deleted.")
        EditView._render_back_button(route)

    @staticmethod
    def _render_diff_section(session: EditorSession):
        """Render the changes preview."""
        st.subheader("🔍 Changes Preview")

        original = session.snapshot.to_dict()
        current = session.working.to_dict()
        diff = calculate_diff(original, current)
        if not diff:
            st.success("✅ No changes")
            return

        summary = get_change_summary(diff)
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Modified", summary['modified'])
        with col2:
            st.metric("Added", summary['added'])
        with col3:
            st.metric("Removed", summary['removed'])

        for name in session.changed_fields():
            if name in ('isPublished', 'slug'):
                before, after = original.get(name), current.get(name)
            else:
                before, after = original['data'].get(name), current['data'].get(name)
            definition = session.collection.get_field(name)
            label = definition.label if definition else name
            st.markdown(f"**{label}**: {format_value(before)} → {format_value(after)}")

    @staticmethod
    def _render_action_buttons(session: EditorSession, route: Route, can_save: bool):
        col1, col2, col3 = st.columns([2, 2, 3])

        with col1:
            label = "💾 Create" if session.is_new else "💾 Save"
            if st.button(label, type="primary", key="editor_save",
                         disabled=not can_save or session.is_saving):
                EditView._handle_save(session, route)

        with col2:
            if st.button("🔄 Reset", key="editor_reset", disabled=not session.is_dirty):
                session.reset()
                for key in [k for k in st.session_state.keys() if str(k).startswith(f"editor_{id(session)}_")]:
                    del st.session_state[key]
                st.rerun()

        with col3:
            if session.last_error:
                st.error(session.last_error)

    @staticmethod
    def _handle_save(session: EditorSession, route: Route):
        was_new = session.is_new
        with spinner("Saving..."):
            result = run_async(session.save())

        if result.skipped:
            Notify.warn(result.message)
            return
        if not result.success:
            Notify.error(result.message or "Failed to save changes")
            return

        Notify.success("Content created" if was_new else "Changes saved")
        if was_new and route.collection_slug:
            new_path = item_editor_path(route.collection_slug, result.item.id)
            # Same session now edits the created item
            st.session_state.editor_route = new_path
            SessionManager.set_current_route(new_path)
        st.rerun()


def render_unsaved_changes_prompt():
    """Render the prompt for a navigation suspended by the guard."""
    guard = SessionManager.get_guard()
    pending = guard.pending
    if pending is None:
        if guard.last_error:
            st.error(f"Could not save: {guard.last_error}")
        return

    st.warning("⚠️ You have unsaved changes. What would you like to do?")
    cols = st.columns(len(pending.choices))
    for col, choice in zip(cols, pending.choices):
        with col:
            button_type = "primary" if choice == GuardChoice.SAVE_AND_EXIT else "secondary"
            if st.button(CHOICE_LABELS[choice], key=f"guard_{choice.value}", type=button_type,
                         disabled=guard.saving):
                outcome = run_async(guard.resolve(choice))
                if outcome.error:
                    Notify.error(outcome.error)
                elif outcome.navigated and choice == GuardChoice.SAVE_AND_EXIT:
                    Notify.success("Changes saved")
                elif outcome.navigated:
                    Notify.info("Changes discarded")
                st.rerun()
