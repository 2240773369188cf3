"""
Dashboard routes for the content console.
"""

from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)

COLLECTIONS_PATH = "/dashboard/collections"
CONTENT_PREFIX = "/dashboard/content"
NEW_ITEM_ID = "new"

PAGE_COLLECTIONS = "collections"
PAGE_LIST = "list"
PAGE_EDITOR = "editor"


@dataclass(frozen=True)
class Route:
    """Parsed dashboard location."""

    page: str
    collection_slug: Optional[str] = None
    item_id: Optional[str] = None

    @property
    def is_create(self) -> bool:
        return self.page == PAGE_EDITOR and self.item_id == NEW_ITEM_ID


def collections_path() -> str:
    return COLLECTIONS_PATH


def collection_list_path(slug: str) -> str:
    return f"{CONTENT_PREFIX}/{slug}"


def create_editor_path(slug: str) -> str:
    return f"{CONTENT_PREFIX}/{slug}/{NEW_ITEM_ID}"


def item_editor_path(slug: str, item_id: str) -> str:
    return f"{CONTENT_PREFIX}/{slug}/{item_id}"


def parse_route(path: str) -> Route:
    """
    Parse a dashboard path.

    Unknown paths resolve to the collections index.

    Args:
        path: Path such as /dashboard/content/blog/new

    Returns:
        Route for the path
    """
    parts = [p for p in (path or "").split("?")[0].split("/") if p]

    if len(parts) >= 3 and parts[0] == "dashboard" and parts[1] == "content":
        slug = parts[2]
        if len(parts) == 3:
            return Route(PAGE_LIST, slug)
        if len(parts) == 4:
            return Route(PAGE_EDITOR, slug, parts[3])

    if path and path.rstrip("/") != COLLECTIONS_PATH:
        logger.warning(f"Unknown route '{path}', falling back to collections")
    return Route(PAGE_COLLECTIONS)
