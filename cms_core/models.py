"""
Data model for collections and content items.

Collections and items travel as camelCase JSON; the models expose snake_case
attributes and serialise back with aliases.
"""

import copy
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import SchemaError
from .field_types import FieldType

logger = logging.getLogger(__name__)

FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class CollectionType(str, Enum):
    """Cardinality policy of a collection."""

    REPEATABLE = "REPEATABLE"
    SINGLETON = "SINGLETON"


def _coerce_identifier(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class FieldDefinition(BaseModel):
    """One typed field of a collection."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = ""
    name: str
    label: str = ""
    type: FieldType
    required: bool = False

    @field_validator('id', mode='before')
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator('name')
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not FIELD_NAME_PATTERN.match(value):
            raise ValueError(f"Field name '{value}' is not a valid object key")
        return value

    @field_validator('type', mode='before')
    @classmethod
    def _parse_type(cls, value: Any) -> FieldType:
        try:
            return FieldType.parse(value)
        except SchemaError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode='after')
    def _default_label(self) -> "FieldDefinition":
        if not self.label:
            self.label = self.name
        return self


class Collection(BaseModel):
    """A server-declared content type with an ordered field list."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str
    slug: str
    name: str
    type: CollectionType = CollectionType.REPEATABLE
    description: Optional[str] = None
    fields: List[FieldDefinition] = Field(default_factory=list)

    @field_validator('id', mode='before')
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator('type', mode='before')
    @classmethod
    def _upper_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @model_validator(mode='after')
    def _unique_field_names(self) -> "Collection":
        seen = set()
        for definition in self.fields:
            if definition.name in seen:
                raise ValueError(f"Duplicate field name '{definition.name}' in collection '{self.slug}'")
            seen.add(definition.name)
        return self

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def is_singleton(self) -> bool:
        return self.type == CollectionType.SINGLETON

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None


class ContentItem(BaseModel):
    """One record conforming to a collection's schema."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str
    collection_id: str = Field(alias='collectionId')
    slug: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    is_published: bool = Field(default=True, alias='isPublished')
    created_at: Optional[datetime] = Field(default=None, alias='createdAt')
    updated_at: Optional[datetime] = Field(default=None, alias='updatedAt')

    @field_validator('id', 'collection_id', mode='before')
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator('data', mode='before')
    @classmethod
    def _null_data(cls, value: Any) -> Any:
        return {} if value is None else value


@dataclass
class WorkingCopy:
    """Editable part of an item. Used for both the live state and the snapshot."""

    data: Dict[str, Any] = field(default_factory=dict)
    is_published: bool = True
    slug: str = ""

    def copy(self) -> "WorkingCopy":
        return WorkingCopy(
            data=copy.deepcopy(self.data),
            is_published=self.is_published,
            slug=self.slug,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'data': self.data,
            'isPublished': self.is_published,
            'slug': self.slug,
        }

    @classmethod
    def from_item(cls, item: ContentItem, defaults: Optional[Dict[str, Any]] = None) -> "WorkingCopy":
        """
        Build a working copy from a stored item.

        Args:
            item: Item fetched from the store
            defaults: Default bag for the collection; keys missing from the item are filled from it

        Returns:
            Working copy holding deep copies of the item's values
        """
        data = copy.deepcopy(defaults) if defaults else {}
        data.update(copy.deepcopy(item.data))
        return cls(data=data, is_published=item.is_published, slug=item.slug or "")


def parse_collection(raw: Dict[str, Any]) -> Collection:
    """
    Parse a collection payload from the server.

    Args:
        raw: Collection JSON object

    Returns:
        Collection model

    Raises:
        SchemaError: If the payload is malformed or names an unknown field type
    """
    try:
        return Collection.model_validate(raw)
    except PydanticValidationError as e:
        slug = raw.get('slug') if isinstance(raw, dict) else None
        logger.error(f"Invalid collection definition '{slug}': {e}")
        raise SchemaError(f"Invalid collection definition '{slug}': {e.errors()[0]['msg']}",
                          context={'collection': slug}) from e


def parse_item(raw: Dict[str, Any]) -> ContentItem:
    """Parse a content item payload from the server."""
    return ContentItem.model_validate(raw)
