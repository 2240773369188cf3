"""
Diff utilities for the content editor.
Compares an editor's working copy with its snapshot using DeepDiff and
summarises the changes for dirtiness checks and the changes preview.
"""

from typing import Dict, Any, List
import logging
import re

from deepdiff import DeepDiff

logger = logging.getLogger(__name__)

# root['data']['title'] -> data, title ; root['slug'] -> slug
_PATH_KEY_RE = re.compile(r"\['([^']*)'\]|\[(\d+)\]")

_CHANGE_TYPES = (
    'values_changed',
    'type_changes',
    'dictionary_item_added',
    'dictionary_item_removed',
    'iterable_item_added',
    'iterable_item_removed',
)


def calculate_diff(original: Dict[str, Any], modified: Dict[str, Any]) -> DeepDiff:
    """
    Calculate structural differences between two documents.

    Whole-number floats and ints compare equal (number widgets return floats);
    list order is significant.

    Args:
        original: Snapshot document
        modified: Working document

    Returns:
        DeepDiff result (empty when the documents are structurally equal)
    """
    return DeepDiff(
        original,
        modified,
        ignore_numeric_type_changes=True,
        verbose_level=2
    )


def has_changes(diff: DeepDiff) -> bool:
    return bool(diff)


def _path_keys(path: str) -> List[str]:
    keys = []
    for name, index in _PATH_KEY_RE.findall(path):
        keys.append(name if name else index)
    return keys


def changed_paths(diff: DeepDiff) -> List[List[str]]:
    """
    Flatten a DeepDiff into key paths.

    Args:
        diff: Result of calculate_diff

    Returns:
        List of key paths, e.g. [['data', 'title'], ['isPublished']]
    """
    paths = []
    for change_type in _CHANGE_TYPES:
        changes = diff.get(change_type)
        if not changes:
            continue
        for path in changes:
            keys = _path_keys(str(path))
            if keys and keys not in paths:
                paths.append(keys)
    return paths


def changed_top_level_fields(original: Dict[str, Any], modified: Dict[str, Any]) -> List[str]:
    """
    List the changed fields of an editor document.

    Data keys are reported by name; isPublished and slug are reported as
    themselves.

    Args:
        original: Snapshot document ({'data': ..., 'isPublished': ..., 'slug': ...})
        modified: Working document of the same shape

    Returns:
        Changed field names in first-seen order
    """
    diff = calculate_diff(original, modified)
    fields: List[str] = []
    for keys in changed_paths(diff):
        if keys[0] == 'data' and len(keys) > 1:
            name = keys[1]
        else:
            name = keys[0]
        if name not in fields:
            fields.append(name)
    return fields


def get_change_summary(diff: DeepDiff) -> Dict[str, int]:
    """
    Get summary statistics for a diff.

    Args:
        diff: Result of calculate_diff

    Returns:
        Dictionary with counts for modified, added, removed and total
    """
    modified = len(diff.get('values_changed', {})) + len(diff.get('type_changes', {}))
    added = len(diff.get('dictionary_item_added', {})) + len(diff.get('iterable_item_added', {}))
    removed = len(diff.get('dictionary_item_removed', {})) + len(diff.get('iterable_item_removed', {}))
    return {
        'modified': modified,
        'added': added,
        'removed': removed,
        'total': modified + added + removed
    }


def format_value(value: Any) -> str:
    """Short display form of a field value for the changes preview."""
    if value is None or value == "":
        return "(empty)"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    text = str(value)
    return text if len(text) <= 80 else text[:77] + "..."
