"""
Unit tests for collection and content item models.
"""

import pytest

from cms_core.exceptions import SchemaError
from cms_core.field_types import FieldType
from cms_core.models import CollectionType, ContentItem, WorkingCopy, parse_collection, parse_item
from test_fixtures import BLOG_COLLECTION, blog_collection


class TestCollection:

    def test_parse_blog(self):
        collection = blog_collection()
        assert collection.id == 'c1'
        assert collection.type == CollectionType.REPEATABLE
        assert collection.field_names[:2] == ['title', 'body']
        assert collection.get_field('body').type == FieldType.RICH_TEXT
        assert collection.get_field('nope') is None

    def test_type_is_case_insensitive(self):
        collection = parse_collection({'id': 1, 'slug': 's', 'name': 'S', 'type': 'singleton'})
        assert collection.is_singleton
        assert collection.id == '1'

    def test_label_defaults_to_name(self):
        collection = parse_collection({'id': 'c', 'slug': 's', 'name': 'S',
                                       'fields': [{'name': 'headline', 'type': 'text'}]})
        assert collection.fields[0].label == 'headline'
        assert collection.fields[0].required is False

    def test_legacy_rich_text_accepted(self):
        collection = parse_collection({'id': 'c', 'slug': 's', 'name': 'S',
                                       'fields': [{'name': 'body', 'type': 'rich-text'}]})
        assert collection.fields[0].type == FieldType.RICH_TEXT

    def test_unknown_field_type_is_schema_error(self):
        with pytest.raises(SchemaError):
            parse_collection({'id': 'c', 'slug': 's', 'name': 'S',
                              'fields': [{'name': 'x', 'type': 'markdown'}]})

    def test_invalid_field_name_is_schema_error(self):
        with pytest.raises(SchemaError):
            parse_collection({'id': 'c', 'slug': 's', 'name': 'S',
                              'fields': [{'name': 'bad name', 'type': 'text'}]})

    def test_duplicate_field_names_rejected(self):
        raw = dict(BLOG_COLLECTION)
        raw['fields'] = [{'name': 'title', 'type': 'text'}, {'name': 'title', 'type': 'number'}]
        with pytest.raises(SchemaError):
            parse_collection(raw)


class TestContentItem:

    def test_aliases_and_null_data(self):
        item = parse_item({'id': 7, 'collectionId': 'c1', 'data': None, 'isPublished': False,
                           'createdAt': '2024-05-01T10:00:00Z'})
        assert isinstance(item, ContentItem)
        assert item.id == '7'
        assert item.data == {}
        assert item.is_published is False
        assert item.created_at.year == 2024
        assert item.slug is None

    def test_unknown_keys_ignored(self):
        item = parse_item({'id': '1', 'collectionId': 'c1', 'data': {}, 'author': 'someone'})
        assert not hasattr(item, 'author')


class TestWorkingCopy:

    def test_from_item_overlays_defaults(self):
        item = parse_item({'id': '1', 'collectionId': 'c1', 'slug': 'a',
                           'data': {'title': 'A', 'old': 1}})
        working = WorkingCopy.from_item(item, {'title': '', 'views': 0})

        assert working.data == {'title': 'A', 'views': 0, 'old': 1}
        assert working.slug == 'a'

    def test_copy_is_deep(self):
        working = WorkingCopy(data={'tags': ['a']})
        clone = working.copy()
        clone.data['tags'].append('b')
        assert working.data['tags'] == ['a']

    def test_to_dict_shape(self):
        working = WorkingCopy(data={'x': 1}, is_published=False, slug='s')
        assert working.to_dict() == {'data': {'x': 1}, 'isPublished': False, 'slug': 's'}
