"""
Unit tests for configuration loader module.
"""

import logging

import pytest
import yaml

from cms_core.config_loader import (
    configure_logging,
    deep_merge,
    get_config_summary,
    get_config_value,
    get_default_config,
    get_logging_level,
    load_config,
    validate_config,
)


class TestDeepMerge:
    """Test cases for deep_merge function."""

    def test_deep_merge_simple_dicts(self):
        base = {'a': 1, 'b': 2}
        update = {'b': 3, 'c': 4}

        result = deep_merge(base, update)

        assert result == {'a': 1, 'b': 3, 'c': 4}
        assert base == {'a': 1, 'b': 2}
        assert update == {'b': 3, 'c': 4}

    def test_deep_merge_nested_dicts(self):
        base = {'api': {'base_url': 'http://a', 'timeout': 30.0}}
        update = {'api': {'timeout': 5}}

        assert deep_merge(base, update) == {'api': {'base_url': 'http://a', 'timeout': 5}}

    def test_lists_are_replaced(self):
        base = {'editor': {'title_fields': ['title', 'name']}}
        update = {'editor': {'title_fields': ['heading']}}
        assert deep_merge(base, update)['editor']['title_fields'] == ['heading']


class TestLoadConfig:
    """Test cases for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / 'nope.yaml') == get_default_config()

    def test_user_values_merged_over_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'api': {'base_url': 'https://cms.example.com/api'},
                                        'editor': {'default_published': False}}))

        config = load_config(path)

        assert config['api']['base_url'] == 'https://cms.example.com/api'
        assert config['api']['timeout'] == 30.0
        assert config['editor']['default_published'] is False
        assert config['editor']['title_fields'] == ['title', 'name', 'heading']

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('')
        assert load_config(path) == get_default_config()

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('api: [unclosed')
        assert load_config(path) == get_default_config()

    def test_non_mapping_uses_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('- just\n- a list\n')
        assert load_config(path) == get_default_config()


class TestValidateConfig:

    def test_defaults_are_valid(self):
        assert validate_config(get_default_config()) is True

    def test_missing_section(self):
        config = get_default_config()
        del config['api']
        assert validate_config(config) is False

    @pytest.mark.parametrize("api", [
        {'base_url': '', 'timeout': 30},
        {'base_url': 'http://x', 'timeout': 0},
        {'base_url': 'http://x', 'timeout': 'soon'},
    ])
    def test_bad_api_section(self, api):
        config = get_default_config()
        config['api'] = api
        assert validate_config(config) is False

    def test_title_fields_must_be_strings(self):
        config = get_default_config()
        config['editor']['title_fields'] = ['title', 3]
        assert validate_config(config) is False

    def test_default_published_must_be_bool(self):
        config = get_default_config()
        config['editor']['default_published'] = 'yes'
        assert validate_config(config) is False


class TestHelpers:

    def test_get_config_value(self):
        config = {'api': {'token': None, 'timeout': 5}}
        assert get_config_value(config, 'api', 'timeout') == 5
        assert get_config_value(config, 'api', 'token', 'fallback') == 'fallback'
        assert get_config_value(config, 'missing', 'key', 1) == 1

    def test_logging_level_mapping(self):
        assert get_logging_level('debug') == logging.DEBUG
        assert get_logging_level('nonsense') == logging.INFO

    def test_configure_logging_sets_root_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            assert configure_logging({'logging': {'level': 'WARNING'}}) == logging.WARNING
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)

    def test_summary(self):
        summary = get_config_summary(get_default_config())
        assert summary['api_base_url'] == 'http://localhost:3001/api'
        assert summary['token_configured'] is False
        assert summary['log_level'] == 'INFO'
