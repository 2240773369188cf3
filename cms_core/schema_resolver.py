"""
Schema resolver for the content console.
Looks up collection definitions, validates them and builds default field values.
"""

from typing import Dict, Any, Optional, List, Sequence
import logging

from .exceptions import NotFoundError, SchemaError
from .field_types import FieldType, default_value_for
from .models import Collection, ContentItem, FIELD_NAME_PATTERN
from .routes import create_editor_path, item_editor_path

logger = logging.getLogger(__name__)

DEFAULT_TITLE_FIELDS = ('title', 'name', 'heading')


async def resolve_collection(store, slug_or_id: str) -> Collection:
    """
    Find a collection by slug, falling back to id.

    Args:
        store: Entity store adapter
        slug_or_id: Collection slug or id

    Returns:
        Validated collection

    Raises:
        NotFoundError: If no collection matches
        SchemaError: If the matching collection is malformed
    """
    collections = await store.list_collections()

    match = next((c for c in collections if c.slug == slug_or_id), None)
    if match is None:
        match = next((c for c in collections if c.id == str(slug_or_id)), None)

    if match is None:
        rejected = getattr(store, 'rejected_collections', {}).get(str(slug_or_id))
        if rejected is not None:
            logger.error(f"Collection '{slug_or_id}' has a malformed definition: {rejected}")
            raise SchemaError(rejected.message, field_name=rejected.field_name, context=rejected.context)
        logger.warning(f"Collection not found: {slug_or_id}")
        raise NotFoundError("Collection", slug_or_id)

    validate_collection(match)
    logger.info(f"Resolved collection '{match.slug}' ({match.type.value}, {len(match.fields)} fields)")
    return match


def validate_collection(collection: Collection) -> bool:
    """
    Validate collection structure and field definitions.

    Collections built through the models are already checked on parse; this
    guards collections assembled in code.

    Args:
        collection: Collection to validate

    Returns:
        True if the collection is valid

    Raises:
        SchemaError: On the first invalid field
    """
    seen = set()
    for definition in collection.fields:
        if not FIELD_NAME_PATTERN.match(definition.name):
            raise SchemaError(f"Field name '{definition.name}' is not a valid object key",
                              field_name=definition.name)
        if definition.name in seen:
            raise SchemaError(f"Duplicate field name '{definition.name}'", field_name=definition.name)
        seen.add(definition.name)

        # Raises SchemaError for anything outside the closed set
        FieldType.parse(definition.type)

    return True


def build_default_data(collection: Collection) -> Dict[str, Any]:
    """
    Build the initial value bag for a collection, in field order.

    Args:
        collection: Collection definition

    Returns:
        Dictionary with one default value per declared field
    """
    return {definition.name: default_value_for(definition.type) for definition in collection.fields}


def is_singleton(collection: Collection) -> bool:
    return collection.is_singleton


def find_title_field(collection: Collection, candidates: Optional[Sequence[str]] = None) -> Optional[str]:
    """
    Pick the field whose value seeds the slug.

    Args:
        collection: Collection definition
        candidates: Field names to look for, in priority order

    Returns:
        Name of the first declared field listed in candidates, or None
    """
    if candidates is None:
        candidates = DEFAULT_TITLE_FIELDS

    declared = set(collection.field_names)
    for name in candidates:
        if name in declared:
            return name
    return None


def resolve_singleton_destination(collection: Collection, items: List[ContentItem]) -> Optional[str]:
    """
    Decide where the list screen of a collection sends the operator.

    Args:
        collection: Collection definition
        items: Items of the collection

    Returns:
        Editor route for SINGLETON collections, None for REPEATABLE ones
    """
    if not collection.is_singleton:
        return None

    if not items:
        return create_editor_path(collection.slug)

    if len(items) > 1:
        logger.warning(f"Singleton collection '{collection.slug}' has {len(items)} items; "
                       f"editing the first one")
    return item_editor_path(collection.slug, items[0].id)
