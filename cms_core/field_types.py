"""
Field type registry for the content editor.
Declares the closed set of field kinds, their default values and presentation hints.
"""

from enum import Enum
from typing import Any, Type
import logging

from .exceptions import SchemaError

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#3b82f6"

# Older schemas spell rich text with a hyphen
_LEGACY_ALIASES = {
    'rich-text': 'richText',
    'richtext': 'richText',
}


class FieldType(str, Enum):
    """Supported field kinds. Values are the wire spelling."""

    TEXT = "text"
    RICH_TEXT = "richText"
    NUMBER = "number"
    DATE = "date"
    URL = "url"
    EMAIL = "email"
    TEL = "tel"
    COLOR = "color"
    IMAGE = "image"
    FILE = "file"
    BOOLEAN = "boolean"

    @classmethod
    def parse(cls, value: Any) -> "FieldType":
        """
        Convert a raw schema value into a FieldType.

        Args:
            value: FieldType member or wire string

        Returns:
            Matching FieldType

        Raises:
            SchemaError: If the value names no supported type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            raw = _LEGACY_ALIASES.get(value, value)
            for member in cls:
                if member.value == raw:
                    return member
        raise SchemaError(f"Unsupported field type '{value}'. "
                          f"Supported types: {[m.value for m in cls]}")


class WidgetKind(str, Enum):
    """Presentation tag for the widget that edits a field."""

    TEXT_INPUT = "text_input"
    RICH_TEXT = "rich_text"
    NUMBER_INPUT = "number_input"
    DATE_INPUT = "date_input"
    COLOR_PICKER = "color_picker"
    MEDIA_PICKER = "media_picker"
    TOGGLE = "toggle"


def default_value_for(field_type: FieldType) -> Any:
    """
    Get the initial value for a field of the given type.

    Args:
        field_type: Field type

    Returns:
        "" for textual kinds, DEFAULT_COLOR for color, 0 for number, False for boolean
    """
    field_type = FieldType.parse(field_type)

    if field_type in (FieldType.TEXT, FieldType.RICH_TEXT, FieldType.URL,
                      FieldType.EMAIL, FieldType.TEL):
        return ""
    elif field_type == FieldType.COLOR:
        return DEFAULT_COLOR
    elif field_type == FieldType.NUMBER:
        return 0
    elif field_type == FieldType.BOOLEAN:
        return False
    elif field_type in (FieldType.DATE, FieldType.IMAGE, FieldType.FILE):
        return ""

    raise SchemaError(f"No default value registered for field type '{field_type}'")


def widget_kind_for(field_type: FieldType) -> WidgetKind:
    """Map a field type to the widget used to edit it."""
    field_type = FieldType.parse(field_type)

    if field_type in (FieldType.TEXT, FieldType.URL, FieldType.EMAIL, FieldType.TEL):
        return WidgetKind.TEXT_INPUT
    elif field_type == FieldType.RICH_TEXT:
        return WidgetKind.RICH_TEXT
    elif field_type == FieldType.NUMBER:
        return WidgetKind.NUMBER_INPUT
    elif field_type == FieldType.DATE:
        return WidgetKind.DATE_INPUT
    elif field_type == FieldType.COLOR:
        return WidgetKind.COLOR_PICKER
    elif field_type in (FieldType.IMAGE, FieldType.FILE):
        return WidgetKind.MEDIA_PICKER
    elif field_type == FieldType.BOOLEAN:
        return WidgetKind.TOGGLE

    raise SchemaError(f"No widget registered for field type '{field_type}'")


def python_type_for(field_type: FieldType) -> Type:
    """
    Map a field type to the Python type its values hold.

    Args:
        field_type: Field type

    Returns:
        str, float or bool
    """
    field_type = FieldType.parse(field_type)

    if field_type == FieldType.NUMBER:
        return float
    elif field_type == FieldType.BOOLEAN:
        return bool
    elif field_type in (FieldType.TEXT, FieldType.RICH_TEXT, FieldType.DATE, FieldType.URL,
                        FieldType.EMAIL, FieldType.TEL, FieldType.COLOR, FieldType.IMAGE,
                        FieldType.FILE):
        return str

    raise SchemaError(f"No value type registered for field type '{field_type}'")


def input_type_for(field_type: FieldType) -> str:
    """Input hint for text-like widgets (url, email, tel or text)."""
    field_type = FieldType.parse(field_type)
    if field_type in (FieldType.URL, FieldType.EMAIL, FieldType.TEL):
        return field_type.value
    return "text"


def placement_for(field_type: FieldType) -> str:
    """Editor column for a field: media and toggles sit in the sidebar."""
    if widget_kind_for(field_type) in (WidgetKind.MEDIA_PICKER, WidgetKind.TOGGLE):
        return "sidebar"
    return "main"


def is_media_type(field_type: FieldType) -> bool:
    """Check whether values of this type are picked through the media library."""
    return widget_kind_for(field_type) == WidgetKind.MEDIA_PICKER
