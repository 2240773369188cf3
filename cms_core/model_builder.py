"""
Dynamic Pydantic model builder for content items.
Creates per-collection Pydantic models used to type-check item data at save time.
"""

from typing import Dict, Any, Type, Optional, List, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, create_model
from pydantic import ValidationError as PydanticValidationError

from .field_types import FieldType, python_type_for
from .models import Collection, FieldDefinition

logger = logging.getLogger(__name__)

_model_cache: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], Type[BaseModel]] = {}


def get_field_annotation(definition: FieldDefinition) -> Any:
    """
    Map a field definition to a strict Pydantic annotation.

    Args:
        definition: Field definition from the collection

    Returns:
        Optional annotation for the field's underlying value type
    """
    value_type = python_type_for(definition.type)

    if value_type is bool:
        return Optional[StrictBool]
    elif value_type is float:
        return Optional[Union[StrictInt, StrictFloat]]
    return Optional[StrictStr]


def create_model_from_collection(collection: Collection, model_name: Optional[str] = None) -> Type[BaseModel]:
    """
    Create a Pydantic model from a collection definition.

    Every declared field is optional at the model level; required-ness is
    checked separately so blank strings count as missing. Undeclared keys are
    allowed so orphaned data passes through.

    Args:
        collection: Collection definition
        model_name: Name for the generated model class

    Returns:
        Pydantic model class
    """
    cache_key = (collection.id, tuple((f.name, f.type.value) for f in collection.fields))
    if cache_key in _model_cache:
        return _model_cache[cache_key]

    if model_name is None:
        model_name = f"Item_{collection.slug.replace('-', '_')}"

    model_fields = {}
    for definition in collection.fields:
        model_fields[definition.name] = (
            get_field_annotation(definition),
            Field(default=None, description=definition.label)
        )

    try:
        dynamic_model = create_model(
            model_name,
            __config__=ConfigDict(extra='allow'),
            **model_fields
        )
    except Exception as e:
        logger.error(f"Failed to create model '{model_name}': {e}")
        raise

    logger.info(f"Created dynamic model '{model_name}' with {len(collection.fields)} fields")
    _model_cache[cache_key] = dynamic_model
    return dynamic_model


def is_blank(value: Any) -> bool:
    """A value counts as missing when it is None or a whitespace-only string."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def find_missing_required(data: Dict[str, Any], collection: Collection) -> List[str]:
    """
    List required fields whose value is missing or blank, in field order.

    Args:
        data: Item data
        collection: Collection definition

    Returns:
        Names of required fields without a value
    """
    return [
        definition.name for definition in collection.fields
        if definition.required and is_blank(data.get(definition.name))
    ]


def validate_item_data(data: Dict[str, Any], collection: Collection) -> Dict[str, List[str]]:
    """
    Validate item data against its collection.

    Args:
        data: Item data
        collection: Collection definition

    Returns:
        Mapping of field name to error messages (empty if valid)
    """
    field_errors: Dict[str, List[str]] = {}

    for name in find_missing_required(data, collection):
        label = collection.get_field(name).label
        field_errors.setdefault(name, []).append(f"{label} is required")

    model_class = create_model_from_collection(collection)
    try:
        model_class.model_validate(data)
    except PydanticValidationError as e:
        for error in e.errors():
            loc = error.get('loc', ())
            name = str(loc[0]) if loc else 'general'
            field_errors.setdefault(name, []).append(f"{name}: {error.get('msg')}")

    if field_errors:
        logger.debug(f"Validation errors for collection '{collection.slug}': {field_errors}")
    return field_errors


def split_orphaned_fields(data: Dict[str, Any], collection: Collection) -> Tuple[Dict[str, Any], List[str]]:
    """
    Separate declared fields from keys the current schema no longer declares.

    Args:
        data: Item data
        collection: Collection definition

    Returns:
        Tuple of (declared_data, orphaned_names)
        - declared_data: values of declared fields present in data
        - orphaned_names: sorted keys present in data but not declared
    """
    if not isinstance(data, dict):
        return {}, []

    declared = set(collection.field_names)
    filtered = {k: v for k, v in data.items() if k in declared}
    orphans = sorted(set(data.keys()) - declared)
    return filtered, orphans


def coerce_widget_value(definition: FieldDefinition, value: Any) -> Any:
    """
    Normalise a value coming back from a widget to the field's value type.

    Whole floats from number widgets become ints so they compare equal to
    stored integers; everything else passes through unchanged.
    """
    if definition.type == FieldType.NUMBER and isinstance(value, float) and value.is_integer():
        return int(value)
    return value
