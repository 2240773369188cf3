"""
Collection list screen logic.

Loads the items of a collection for the table view. SINGLETON collections
never show a table; the screen forwards the operator to the one editor
instead.
"""

import logging
from typing import Any, List, Optional, Union

from .models import Collection, ContentItem
from .routes import create_editor_path, item_editor_path
from .schema_resolver import resolve_collection, resolve_singleton_destination

logger = logging.getLogger(__name__)

TABLE_FIELD_COUNT = 4


class CollectionListScreen:
    """Backs the list view of one collection."""

    def __init__(self, store, guard, collection_ref: Union[Collection, str],
                 table_field_count: int = TABLE_FIELD_COUNT):
        self.store = store
        self.guard = guard
        self.collection_ref = collection_ref
        self.table_field_count = table_field_count
        self.collection: Optional[Collection] = None
        self.items: List[ContentItem] = []
        self.loaded = False
        self.redirected_to: Optional[str] = None
        self._redirect_done = False

    async def load(self) -> List[ContentItem]:
        """
        Resolve the collection and fetch its items.

        Returns:
            Items of the collection

        Raises:
            NotFoundError: If the collection does not exist
            NetworkError: If the store is unreachable
        """
        if isinstance(self.collection_ref, Collection):
            self.collection = self.collection_ref
        else:
            self.collection = await resolve_collection(self.store, self.collection_ref)

        self.items = await self.store.list(self.collection.id)
        self.loaded = True
        logger.info(f"Loaded {len(self.items)} items for '{self.collection.slug}'")

        if self.collection.is_singleton and not self._redirect_done:
            self._redirect_done = True
            destination = resolve_singleton_destination(self.collection, self.items)
            self.redirected_to = destination
            logger.info(f"Singleton '{self.collection.slug}' redirects to {destination}")
            self.guard.request_navigation(destination)

        return self.items

    @property
    def should_render_table(self) -> bool:
        return self.loaded and self.collection is not None and not self.collection.is_singleton

    @property
    def table_fields(self):
        if self.collection is None:
            return []
        return self.collection.fields[:self.table_field_count]

    def filter_items(self, query: Optional[str]) -> List[ContentItem]:
        """
        Case-insensitive search over the joined data values of each item.

        Args:
            query: Search text; empty returns every item

        Returns:
            Matching items in their original order
        """
        if not query:
            return list(self.items)
        needle = query.lower()
        return [item for item in self.items if needle in _joined_values(item).lower()]

    async def delete_item(self, item_id: str) -> bool:
        """Delete an item through the store and drop it from the loaded list."""
        await self.store.delete(item_id)
        before = len(self.items)
        self.items = [item for item in self.items if item.id != item_id]
        if len(self.items) == before:
            logger.warning(f"Deleted item {item_id} was not in the loaded list")
        logger.info(f"Deleted item {item_id}")
        return True

    def create_path(self) -> str:
        return create_editor_path(self._slug())

    def edit_path(self, item_id: str) -> str:
        return item_editor_path(self._slug(), item_id)

    def _slug(self) -> str:
        if self.collection is not None:
            return self.collection.slug
        return str(self.collection_ref)


def _joined_values(item: ContentItem) -> str:
    return " ".join(_display(value) for value in item.data.values())


def _display(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
