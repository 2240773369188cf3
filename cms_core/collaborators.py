"""
Interfaces to services outside the editor core: the media library and the permission oracle.
"""

import inspect
import logging
from typing import Any, Callable, Iterable, Optional, Protocol

from .field_types import FieldType

logger = logging.getLogger(__name__)

# Capability names consulted by host screens
CAPABILITY_CREATE = "content_create"
CAPABILITY_UPDATE = "content_update"
CAPABILITY_DELETE = "content_delete"


class MediaPicker(Protocol):
    """Presents a media selection UI and returns the chosen URL, or None if cancelled."""

    async def pick(self, field_name: str, field_type: FieldType) -> Optional[str]:
        ...


class PermissionOracle(Protocol):
    def has_capability(self, name: str) -> bool:
        ...


class CallbackMediaPicker:
    """Adapts a plain or async callable to the MediaPicker interface."""

    def __init__(self, callback: Callable[[str, FieldType], Any]):
        self._callback = callback

    async def pick(self, field_name: str, field_type: FieldType) -> Optional[str]:
        result = self._callback(field_name, field_type)
        if inspect.isawaitable(result):
            result = await result
        if result is not None and not isinstance(result, str):
            logger.warning(f"Media picker returned non-string value for '{field_name}', ignoring")
            return None
        return result or None


class StaticPermissionOracle:
    """Permission oracle backed by a fixed capability set."""

    def __init__(self, capabilities: Optional[Iterable[str]] = None, allow_all: bool = False):
        self.capabilities = set(capabilities or [])
        self.allow_all = allow_all

    @classmethod
    def from_config(cls, config: dict) -> "StaticPermissionOracle":
        section = config.get('permissions', {}) or {}
        return cls(section.get('capabilities') or [], bool(section.get('allow_all', False)))

    def has_capability(self, name: str) -> bool:
        return self.allow_all or name in self.capabilities
