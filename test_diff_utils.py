"""
Unit tests for diff_utils module.
"""

from cms_core.diff_utils import (
    calculate_diff,
    changed_paths,
    changed_top_level_fields,
    format_value,
    get_change_summary,
    has_changes,
)


def doc(data, is_published=True, slug='s'):
    return {'data': data, 'isPublished': is_published, 'slug': slug}


class TestDiffUtils:
    """Test class for diff utilities."""

    def test_no_changes(self):
        diff = calculate_diff(doc({'a': 1}), doc({'a': 1}))
        assert not has_changes(diff)

    def test_int_and_whole_float_are_equal(self):
        assert not has_changes(calculate_diff(doc({'n': 3}), doc({'n': 3.0})))

    def test_value_change(self):
        diff = calculate_diff(doc({'title': 'a'}), doc({'title': 'b'}))
        assert has_changes(diff)
        assert changed_paths(diff) == [['data', 'title']]

    def test_list_order_matters(self):
        assert has_changes(calculate_diff(doc({'tags': ['a', 'b']}), doc({'tags': ['b', 'a']})))

    def test_changed_top_level_fields(self):
        original = doc({'title': 'a', 'body': 'x', 'meta': {'k': 1}})
        modified = doc({'title': 'a', 'body': 'y', 'meta': {'k': 2}, 'extra': True}, is_published=False)

        fields = changed_top_level_fields(original, modified)

        assert set(fields) == {'body', 'meta', 'extra', 'isPublished'}

    def test_slug_change_reported(self):
        assert changed_top_level_fields(doc({}, slug='a'), doc({}, slug='b')) == ['slug']

    def test_change_summary(self):
        diff = calculate_diff(doc({'a': 1, 'b': 2}), doc({'a': 5, 'c': 3}))
        summary = get_change_summary(diff)
        assert summary == {'modified': 1, 'added': 1, 'removed': 1, 'total': 3}


class TestFormatValue:

    def test_empty_values(self):
        assert format_value(None) == "(empty)"
        assert format_value("") == "(empty)"

    def test_booleans(self):
        assert format_value(True) == "Yes"
        assert format_value(False) == "No"

    def test_long_text_truncated(self):
        text = "x" * 200
        assert len(format_value(text)) == 80
        assert format_value(text).endswith("...")
