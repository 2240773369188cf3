"""
Configuration loading utilities for the content editor console.

This module loads config.yaml, merges it over built-in defaults and
configures logging from the merged result.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Content Console',
            'version': '1.0.0',
            'debug': False
        },
        'api': {
            'base_url': 'http://localhost:3001/api',
            'timeout': 30.0,
            'token': None
        },
        'editor': {
            'default_published': True,
            'title_fields': ['title', 'name', 'heading'],
            'table_field_count': 4
        },
        'ui': {
            'page_title': 'Content Console',
            'sidebar_title': 'Navigation'
        },
        'logging': {
            'level': 'INFO',
            'format': DEFAULT_LOG_FORMAT
        },
        'permissions': {
            'allow_all': True,
            'capabilities': []
        }
    }


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)

        if user_config is None:
            logger.warning(f"Configuration file is empty: {config_path}")
            return default_config

        if not isinstance(user_config, dict):
            logger.error(f"Configuration file is not a valid dictionary: {config_path}")
            logger.info("Using default configuration")
            return default_config

        config = deep_merge(default_config, user_config)

        logger.info(f"Successfully loaded configuration from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config

    except (IOError, OSError) as e:
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and required fields.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    required_sections = ['app', 'api', 'editor', 'ui', 'logging']

    for section in required_sections:
        if section not in config:
            logger.warning(f"Missing required configuration section: {section}")
            return False

    api = config.get('api', {})
    if not isinstance(api.get('base_url'), str) or not api.get('base_url'):
        logger.warning("api.base_url must be a non-empty string")
        return False

    try:
        timeout = float(api.get('timeout', 30.0))
        if timeout <= 0:
            logger.warning("api.timeout must be positive")
            return False
    except (ValueError, TypeError):
        logger.warning("api.timeout must be a valid number")
        return False

    editor = config.get('editor', {})
    if not isinstance(editor.get('default_published', True), bool):
        logger.warning("editor.default_published must be a boolean")
        return False

    title_fields = editor.get('title_fields', [])
    if not isinstance(title_fields, list) or not all(isinstance(name, str) for name in title_fields):
        logger.warning("editor.title_fields must be a list of field names")
        return False

    return True


def get_config_value(config: Dict[str, Any], section: str, key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        config: Configuration dictionary
        section: Configuration section (e.g., 'api', 'editor')
        key: Configuration key within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    value = (config.get(section) or {}).get(key, default)
    return default if value is None else value


def get_logging_level(level_str: str) -> int:
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


def configure_logging(config: Dict[str, Any]) -> int:
    """
    Configure root logging from the logging section of the config.

    Args:
        config: Configuration dictionary

    Returns:
        The logging level that was applied
    """
    level_str = get_config_value(config, 'logging', 'level', 'INFO')
    log_format = get_config_value(config, 'logging', 'format', DEFAULT_LOG_FORMAT)
    level = get_logging_level(level_str)
    logging.basicConfig(level=level, format=log_format)
    logging.getLogger().setLevel(level)
    logger.info(f"Logging configured to level: {level_str}")
    return level


def get_config_summary(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get a summary of the current configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary with configuration summary
    """
    return {
        'app_name': config.get('app', {}).get('name', 'Unknown'),
        'app_version': config.get('app', {}).get('version', 'Unknown'),
        'debug_mode': config.get('app', {}).get('debug', False),
        'api_base_url': config.get('api', {}).get('base_url', 'Unknown'),
        'api_timeout': config.get('api', {}).get('timeout', 30.0),
        'token_configured': bool(config.get('api', {}).get('token')),
        'default_published': config.get('editor', {}).get('default_published', True),
        'log_level': config.get('logging', {}).get('level', 'INFO')
    }
