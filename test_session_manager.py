"""
Tests for Streamlit session state management.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

import cms_core.session_manager as session_manager
from cms_core.editor_session import EditorSession
from cms_core.routes import PAGE_EDITOR
from cms_core.session_manager import SessionManager, run_async
from test_fixtures import mock_st, store  # noqa: F401


@pytest.fixture
def st(monkeypatch):
    fake = mock_st()
    monkeypatch.setattr(session_manager, "st", fake)
    return fake


def test_initialize_sets_defaults(st):
    SessionManager.initialize({'app': {'name': 'x'}})

    assert SessionManager.get_current_path() == '/dashboard/collections'
    assert SessionManager.get_config() == {'app': {'name': 'x'}}
    assert SessionManager.get_guard() is not None
    assert SessionManager.get_editor_session() is None
    assert SessionManager.get_session_id().startswith('session_')


def test_initialize_is_idempotent(st):
    SessionManager.initialize()
    guard = SessionManager.get_guard()
    st.session_state.current_route = '/dashboard/content/blog'

    SessionManager.initialize()

    assert SessionManager.get_guard() is guard
    assert SessionManager.get_current_path() == '/dashboard/content/blog'


def test_navigate_clean_changes_route(st):
    SessionManager.initialize()
    assert SessionManager.navigate('/dashboard/content/blog') is True
    assert SessionManager.get_current_route().collection_slug == 'blog'


def test_navigate_dirty_opens_prompt(st):
    SessionManager.initialize()
    SessionManager.get_guard().register(True, lambda: True)

    assert SessionManager.navigate('/dashboard/content/blog') is False
    assert SessionManager.get_current_path() == '/dashboard/collections'
    assert SessionManager.get_guard().is_prompt_open


def test_leaving_editor_closes_session(st, store):
    SessionManager.initialize()
    guard = SessionManager.get_guard()
    path = '/dashboard/content/blog/1'
    session = run_async(EditorSession.open(store, 'blog', item_id='1', guard=guard))
    SessionManager.set_current_route(path)
    SessionManager.set_editor_session(session, path)

    SessionManager.set_current_route('/dashboard/content/blog')

    assert session.state.value == 'closed'
    assert SessionManager.get_editor_session() is None
    assert guard.owner is None


def test_staying_on_editor_route_keeps_session(st):
    SessionManager.initialize()
    editor = MagicMock()
    path = '/dashboard/content/blog/1'
    SessionManager.set_editor_session(editor, path)

    SessionManager.set_current_route(path)

    editor.close.assert_not_called()
    assert SessionManager.get_current_route().page == PAGE_EDITOR


def test_replacing_editor_session_closes_previous(st):
    SessionManager.initialize()
    old, new = MagicMock(), MagicMock()
    SessionManager.set_editor_session(old, '/a')
    SessionManager.set_editor_session(new, '/b')
    old.close.assert_called_once()


def test_list_screen_cached_per_route(st):
    SessionManager.initialize()
    screen = object()
    SessionManager.set_list_screen(screen, '/dashboard/content/blog')

    assert SessionManager.get_list_screen('/dashboard/content/blog') is screen
    assert SessionManager.get_list_screen('/dashboard/content/news') is None


def test_reset_session_keeps_config_and_store(st):
    SessionManager.initialize({'k': 1})
    store = object()
    SessionManager.set_store(store)
    st.session_state.search_query = 'abc'

    SessionManager.reset_session()

    assert SessionManager.get_config() == {'k': 1}
    assert SessionManager.get_store() is store
    assert st.session_state.search_query == ''


def test_session_info(st):
    SessionManager.initialize()
    info = SessionManager.get_session_info()
    assert info['editor_open'] is False
    assert info['unsaved_changes'] is False


def test_run_async_returns_result():
    async def answer():
        await asyncio.sleep(0)
        return 42

    assert run_async(answer()) == 42


def test_route_change_drops_list_screen(st):
    SessionManager.initialize()
    SessionManager.set_current_route('/dashboard/content/blog')
    SessionManager.set_list_screen(object(), '/dashboard/content/blog')

    SessionManager.set_current_route('/dashboard/content/blog/1')
    SessionManager.set_current_route('/dashboard/content/blog')

    assert SessionManager.get_list_screen('/dashboard/content/blog') is None
