"""
Dynamic editor form for a collection.
Renders one widget per declared field and pushes every change into the
EditorSession, which stays the single owner of the working copy.
"""

import streamlit as st
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import logging

from dateutil import parser as date_parser

from .editor_session import EditorSession
from .field_types import FieldType, WidgetKind, input_type_for, placement_for, widget_kind_for
from .model_builder import coerce_widget_value
from .models import FieldDefinition
from .session_manager import run_async

logger = logging.getLogger(__name__)

PUBLISHED_OPTIONS = ["Published", "Draft"]


def widget_key(session: EditorSession, name: str) -> str:
    """Widget key scoped to one editor session so a new session starts with fresh widgets."""
    return f"editor_{id(session)}_{name}"


def to_widget_value(definition: FieldDefinition, value: Any) -> Any:
    """Convert a stored value to what the field's widget expects."""
    kind = widget_kind_for(definition.type)

    if kind == WidgetKind.DATE_INPUT:
        if value in (None, ""):
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date_parser.parse(str(value)).date()
        except (ValueError, OverflowError) as e:
            logger.warning(f"Failed to parse date string '{value}' for '{definition.name}': {e}")
            return None

    if kind == WidgetKind.NUMBER_INPUT:
        if value in (None, ""):
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Non-numeric value {value!r} in number field '{definition.name}'")
            return 0.0

    if kind == WidgetKind.TOGGLE:
        return bool(value)

    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def from_widget_value(definition: FieldDefinition, raw: Any) -> Any:
    """Convert a widget's return value back to the stored representation."""
    kind = widget_kind_for(definition.type)

    if kind == WidgetKind.DATE_INPUT:
        if raw is None:
            return ""
        if isinstance(raw, date):
            return raw.strftime("%Y-%m-%d")
        return str(raw)

    if kind == WidgetKind.NUMBER_INPUT:
        return coerce_widget_value(definition, raw)

    if kind == WidgetKind.TOGGLE:
        return bool(raw)

    return "" if raw is None else raw


def apply_widget_value(session: EditorSession, definition: FieldDefinition, raw: Any, seeded: Any) -> bool:
    """
    Push a widget value into the session once the operator has changed the widget.

    Stored values a widget cannot show exactly (None, datetimes, numeric
    strings) are left untouched until the widget moves off its seed value.

    Args:
        session: Live editor session
        definition: Field being rendered
        raw: Value returned by the widget
        seeded: Widget value the field was seeded with

    Returns:
        True if the working copy changed
    """
    if raw == seeded:
        return False
    value = from_widget_value(definition, raw)
    current = session.get_field(definition.name)
    if value == current:
        return False
    session.set_field(definition.name, value)
    return True


def split_by_placement(fields: List[FieldDefinition]) -> Dict[str, List[FieldDefinition]]:
    """Group fields into the main column and the sidebar column, keeping schema order."""
    groups: Dict[str, List[FieldDefinition]] = {'main': [], 'sidebar': []}
    for definition in fields:
        groups[placement_for(definition.type)].append(definition)
    return groups


class FormGenerator:
    """Renders the editor form for an EditorSession."""

    @staticmethod
    def render_editor_form(session: EditorSession, disabled: bool = False) -> None:
        """
        Render the main column and sidebar column of the editor.

        Args:
            session: Live editor session
            disabled: Render every widget read-only
        """
        groups = split_by_placement(session.collection.fields)
        main_col, side_col = st.columns([3, 1])

        with main_col:
            if not groups['main']:
                st.info("This collection has no content fields.")
            for definition in groups['main']:
                FormGenerator._render_field(session, definition, disabled)
                FormGenerator._render_field_errors(session, definition)

        with side_col:
            FormGenerator.render_publish_settings(session, disabled)
            for definition in groups['sidebar']:
                FormGenerator._render_field(session, definition, disabled)
                FormGenerator._render_field_errors(session, definition)

    @staticmethod
    def render_publish_settings(session: EditorSession, disabled: bool = False) -> None:
        """Slug input and published/draft selector."""
        st.subheader("Settings")

        slug_key = widget_key(session, "__slug")
        seeded_key = f"{slug_key}__seeded"
        # Reseed from the session unless the operator typed since the last seed
        typed = slug_key in st.session_state and st.session_state[slug_key] != st.session_state.get(seeded_key)
        if not typed:
            st.session_state[slug_key] = session.working.slug
            st.session_state[seeded_key] = session.working.slug
        slug = st.text_input(
            "Slug",
            key=slug_key,
            disabled=disabled,
            help="Leave empty to generate from the title",
        )
        if slug != session.working.slug:
            session.set_slug(slug)
            st.session_state[seeded_key] = slug

        status_key = widget_key(session, "__status")
        if status_key not in st.session_state:
            st.session_state[status_key] = PUBLISHED_OPTIONS[0] if session.working.is_published else PUBLISHED_OPTIONS[1]
        status = st.selectbox("Status", PUBLISHED_OPTIONS, key=status_key, disabled=disabled)
        is_published = status == PUBLISHED_OPTIONS[0]
        if is_published != session.working.is_published:
            session.set_published(is_published)

    @staticmethod
    def _render_field(session: EditorSession, definition: FieldDefinition, disabled: bool) -> None:
        key = widget_key(session, definition.name)
        seeded_key = f"{key}__seeded"
        if key not in st.session_state:
            st.session_state[key] = to_widget_value(definition, session.get_field(definition.name))
            st.session_state[seeded_key] = st.session_state[key]

        label = f"{definition.label} *" if definition.required else definition.label
        kind = widget_kind_for(definition.type)

        if kind == WidgetKind.TEXT_INPUT:
            raw = st.text_input(label, key=key, disabled=disabled,
                                help=FormGenerator._input_hint(definition))
        elif kind == WidgetKind.RICH_TEXT:
            raw = st.text_area(label, key=key, disabled=disabled, height=200,
                               help="Markdown is supported")
        elif kind == WidgetKind.NUMBER_INPUT:
            raw = st.number_input(label, key=key, disabled=disabled)
        elif kind == WidgetKind.DATE_INPUT:
            raw = st.date_input(label, key=key, disabled=disabled)
        elif kind == WidgetKind.COLOR_PICKER:
            raw = st.color_picker(label, key=key, disabled=disabled)
        elif kind == WidgetKind.TOGGLE:
            raw = st.toggle(label, key=key, disabled=disabled)
        else:
            raw = FormGenerator._render_media_field(session, definition, label, key, disabled)
            if key not in st.session_state:
                # Picked from the library; widget is reseeded on the next run
                return

        apply_widget_value(session, definition, raw, st.session_state.get(seeded_key))
        st.session_state[seeded_key] = raw

    @staticmethod
    def _render_media_field(session: EditorSession, definition: FieldDefinition,
                            label: str, key: str, disabled: bool) -> Any:
        raw = st.text_input(label, key=key, disabled=disabled, placeholder="https://")

        if raw and definition.type == FieldType.IMAGE:
            st.image(raw, use_container_width=True)
        elif raw:
            st.markdown(f"[{raw.rsplit('/', 1)[-1] or raw}]({raw})")

        if session.media_picker is not None and st.button(
                "Choose from library", key=f"{key}__pick", disabled=disabled):
            picked = run_async(session.open_media_picker(definition.name))
            if picked:
                # Widget state is owned by Streamlit; reseed it on the next run
                del st.session_state[key]
                del st.session_state[f"{key}__seeded"]
                st.rerun()
        return raw

    @staticmethod
    def _render_field_errors(session: EditorSession, definition: FieldDefinition) -> None:
        for message in session.field_errors.get(definition.name, []):
            st.error(message)

    @staticmethod
    def _input_hint(definition: FieldDefinition) -> Optional[str]:
        input_type = input_type_for(definition.type)
        if input_type == "email":
            return "Email address"
        if input_type == "url":
            return "Full URL including https://"
        if input_type == "tel":
            return "Phone number"
        return None
