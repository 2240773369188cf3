"""
Test fixtures for the content editor core.

Provides sample collection definitions, an in-memory entity store and a
navigation recorder shared by the core and view tests.
"""

import asyncio
import copy
from typing import Any, Dict, List, Optional

import pytest

from cms_core.exceptions import NotFoundError
from cms_core.models import parse_collection, parse_item


BLOG_COLLECTION = {
    'id': 'c1',
    'slug': 'blog',
    'name': 'Blog Posts',
    'type': 'REPEATABLE',
    'description': 'Articles for the news page',
    'fields': [
        {'id': 'f1', 'name': 'title', 'label': 'Title', 'type': 'text', 'required': True},
        {'id': 'f2', 'name': 'body', 'label': 'Body', 'type': 'richText', 'required': False},
        {'id': 'f3', 'name': 'views', 'label': 'Views', 'type': 'number', 'required': False},
        {'id': 'f4', 'name': 'publishDate', 'label': 'Publish Date', 'type': 'date', 'required': False},
        {'id': 'f5', 'name': 'cover', 'label': 'Cover Image', 'type': 'image', 'required': False},
        {'id': 'f6', 'name': 'featured', 'label': 'Featured', 'type': 'boolean', 'required': False},
        {'id': 'f7', 'name': 'accent', 'label': 'Accent Colour', 'type': 'color', 'required': False},
    ]
}

SETTINGS_COLLECTION = {
    'id': 'c2',
    'slug': 'settings',
    'name': 'Site Settings',
    'type': 'SINGLETON',
    'fields': [
        {'id': 'f10', 'name': 'siteName', 'label': 'Site Name', 'type': 'text', 'required': True},
        {'id': 'f11', 'name': 'logo', 'label': 'Logo', 'type': 'image', 'required': False},
    ]
}

NO_TITLE_COLLECTION = {
    'id': 'c3',
    'slug': 'metrics',
    'name': 'Metrics',
    'fields': [
        {'id': 'f20', 'name': 'count', 'label': 'Count', 'type': 'number', 'required': True},
    ]
}


def blog_collection():
    return parse_collection(copy.deepcopy(BLOG_COLLECTION))


def settings_collection():
    return parse_collection(copy.deepcopy(SETTINGS_COLLECTION))


def no_title_collection():
    return parse_collection(copy.deepcopy(NO_TITLE_COLLECTION))


def make_item(item_id: str, collection_id: str = 'c1', data: Optional[Dict[str, Any]] = None,
              slug: Optional[str] = None, is_published: bool = True):
    return parse_item({
        'id': item_id,
        'collectionId': collection_id,
        'slug': slug,
        'data': data or {},
        'isPublished': is_published,
        'createdAt': '2024-01-01T00:00:00Z',
        'updatedAt': '2024-01-01T00:00:00Z',
    })


class FakeStore:
    """
    In-memory entity store.

    Records every call in `calls`. Set `fail_with` to make the next create,
    update or delete raise. Set `gate`/`entered` (asyncio.Event, created inside
    the running loop) to hold create/update until the test releases them.
    """

    def __init__(self, collections=None, items=None):
        self.collections = list(collections if collections is not None else [blog_collection(), settings_collection()])
        self.items: Dict[str, Any] = {item.id: item for item in (items or [])}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.echo_slug: Optional[str] = None
        self.gate: Optional[asyncio.Event] = None
        self.entered: Optional[asyncio.Event] = None
        self._next_id = 100

    async def _maybe_wait(self):
        if self.gate is not None:
            if self.entered is not None:
                self.entered.set()
            await self.gate.wait()

    def _raise_if_failing(self):
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    async def list_collections(self):
        self.calls.append(('list_collections',))
        return list(self.collections)

    async def get(self, item_id):
        self.calls.append(('get', item_id))
        if item_id not in self.items:
            raise NotFoundError("Content item", item_id)
        return self.items[item_id]

    async def list(self, collection_id):
        self.calls.append(('list', collection_id))
        return [item for item in self.items.values() if item.collection_id == collection_id]

    async def create(self, collection_id, payload):
        self.calls.append(('create', collection_id, copy.deepcopy(payload)))
        await self._maybe_wait()
        self._raise_if_failing()
        self._next_id += 1
        item = make_item(
            str(self._next_id),
            collection_id,
            data=copy.deepcopy(payload.get('data')),
            slug=self.echo_slug or payload.get('slug'),
            is_published=payload.get('isPublished', True),
        )
        self.items[item.id] = item
        return item

    async def update(self, item_id, payload):
        self.calls.append(('update', item_id, copy.deepcopy(payload)))
        await self._maybe_wait()
        self._raise_if_failing()
        if item_id not in self.items:
            raise NotFoundError("Content item", item_id)
        existing = self.items[item_id]
        item = make_item(
            item_id,
            existing.collection_id,
            data=copy.deepcopy(payload.get('data', existing.data)),
            slug=self.echo_slug or payload.get('slug', existing.slug),
            is_published=payload.get('isPublished', existing.is_published),
        )
        self.items[item_id] = item
        return item

    async def delete(self, item_id):
        self.calls.append(('delete', item_id))
        self._raise_if_failing()
        if item_id not in self.items:
            raise NotFoundError("Content item", item_id)
        del self.items[item_id]
        return True

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class NavigationRecorder:
    """Collects destinations passed to the guard's navigate callback."""

    def __init__(self):
        self.destinations: List[str] = []

    def __call__(self, destination: str):
        self.destinations.append(destination)


@pytest.fixture
def store():
    return FakeStore(items=[
        make_item('1', 'c1', data={'title': 'Hello World', 'body': 'First post', 'views': 3,
                                   'legacyField': 'kept'}, slug='hello-world'),
        make_item('2', 'c1', data={'title': 'Second', 'body': 'Another post'}, slug='second',
                  is_published=False),
    ])


@pytest.fixture
def navigation():
    return NavigationRecorder()


@pytest.fixture
def guard(navigation):
    from cms_core.navigation_guard import NavigationGuard
    return NavigationGuard(navigation)


class DummyContext:
    """Column/expander stand-in; also exposes the element calls made directly on a column."""

    def __init__(self):
        from unittest.mock import MagicMock
        self.markdown = MagicMock()
        self.write = MagicMock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class SessionStateStub:
    """Dict-backed stand-in for st.session_state supporting item and attribute access."""

    def __init__(self, initial=None):
        super().__setattr__("_data", dict(initial or {}))

    def get(self, key, default=None):
        return self._data.get(key, default)

    def keys(self):
        return self._data.keys()

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value):
        self._data[key] = value

    def __delitem__(self, key):
        del self._data[key]

    def __contains__(self, key):
        return key in self._data

    def __getattr__(self, name):
        if name in self._data:
            return self._data[name]
        raise AttributeError(name)

    def __setattr__(self, name, value):
        if name == "_data":
            super().__setattr__(name, value)
        else:
            self._data[name] = value


def mock_st(session_state=None):
    """SimpleNamespace standing in for the streamlit module; widgets return their session value."""
    from types import SimpleNamespace
    from unittest.mock import MagicMock

    state = SessionStateStub(session_state)

    def _columns(spec, **_kwargs):
        count = spec if isinstance(spec, int) else len(spec)
        return tuple(DummyContext() for _ in range(count))

    def _keyed_widget(*_args, key=None, **_kwargs):
        return state.get(key)

    def _selectbox(_label, options, key=None, **_kwargs):
        return state.get(key, options[0])

    return SimpleNamespace(
        session_state=state,
        header=MagicMock(),
        subheader=MagicMock(),
        caption=MagicMock(),
        divider=MagicMock(),
        markdown=MagicMock(),
        write=MagicMock(),
        metric=MagicMock(),
        image=MagicMock(),
        code=MagicMock(),
        info=MagicMock(),
        success=MagicMock(),
        warning=MagicMock(),
        error=MagicMock(),
        toast=MagicMock(),
        rerun=MagicMock(),
        columns=MagicMock(side_effect=_columns),
        expander=MagicMock(return_value=DummyContext()),
        spinner=MagicMock(return_value=DummyContext()),
        button=MagicMock(return_value=False),
        text_input=MagicMock(side_effect=_keyed_widget),
        text_area=MagicMock(side_effect=_keyed_widget),
        number_input=MagicMock(side_effect=_keyed_widget),
        date_input=MagicMock(side_effect=_keyed_widget),
        color_picker=MagicMock(side_effect=_keyed_widget),
        toggle=MagicMock(side_effect=_keyed_widget),
        selectbox=MagicMock(side_effect=_selectbox),
    )
