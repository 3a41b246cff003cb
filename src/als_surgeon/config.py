"""
Configuration loader for ALS Surgeon.

Loads settings from als_surgeon.yaml and provides defaults.
Supports environment variable overrides.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import yaml

from .tag_extractor import KNOWN_SCHEMAS, PluginSchema

logger = logging.getLogger(__name__)

CONFIG_FILENAME = 'als_surgeon.yaml'
ENV_CONFIG_PATH = 'ALS_SURGEON_CONFIG'
ENV_PREFIX = 'ALS_SURGEON_'


# Default configuration - matches als_surgeon.yaml structure
DEFAULT_CONFIG = {
    'filter': {
        'delete_tags': ['SideChain'],
    },
    'extract': {
        'default_schemas': ['vst2', 'vst3'],
    },
    'plugins': {
        'schemas': {
            key: {
                'container': schema.container,
                'name_element': schema.name_element,
                'name_attribute': schema.name_attribute,
                'description': schema.description,
            }
            for key, schema in KNOWN_SCHEMAS.items()
        },
    },
    'output': {
        'compress': False,
        'suffix': '.stripped',
    },
    'logging': {
        'level': 'WARNING',
    },
}


def deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries, override takes precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass
class SurgeonConfig:
    """Configuration container with convenient accessors."""

    _config: Dict = field(default_factory=dict)
    _config_path: Optional[Path] = None

    def __post_init__(self):
        if not self._config:
            self._config = copy.deepcopy(DEFAULT_CONFIG)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a nested config value using multiple keys.

        Examples:
            config.get('filter', 'delete_tags')
            config.get('output', 'compress')
        """
        value = self._config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def __getitem__(self, key: str) -> Any:
        """Allow dict-like access to top-level config sections."""
        return self._config.get(key, {})

    @property
    def path(self) -> Optional[Path]:
        return self._config_path

    @property
    def filter(self) -> Dict:
        return self._config.get('filter', {})

    @property
    def extract(self) -> Dict:
        return self._config.get('extract', {})

    @property
    def output(self) -> Dict:
        return self._config.get('output', {})

    @property
    def delete_tags(self) -> List[str]:
        tags = self.filter.get('delete_tags') or []
        return [tags] if isinstance(tags, str) else list(tags)

    @property
    def log_level(self) -> str:
        return str(self.get('logging', 'level', default='WARNING')).upper()

    def plugin_schemas(self) -> Dict[str, PluginSchema]:
        """Plugin schema table, built from the `plugins.schemas` section.

        Entries without a `container` or `name_element` are skipped with a
        warning.
        """
        table = {}
        entries = self.get('plugins', 'schemas', default={})
        if not isinstance(entries, dict):
            logger.warning("Ignoring plugins.schemas: expected a mapping")
            return table
        for key, entry in entries.items():
            if not isinstance(entry, dict) or not entry.get('container') \
                    or not entry.get('name_element'):
                logger.warning(
                    f"Ignoring plugin schema '{key}': needs container and name_element"
                )
                continue
            table[key] = PluginSchema(
                key=key,
                container=entry['container'],
                name_element=entry['name_element'],
                name_attribute=entry.get('name_attribute', 'Value'),
                description=entry.get('description', ''),
            )
        return table

    def to_dict(self) -> Dict:
        """Return the full config as a dictionary."""
        return copy.deepcopy(self._config)


# Global config instance
_config: Optional[SurgeonConfig] = None


def _cast_env_value(default: Any, raw: str) -> Any:
    """Cast an environment string to the type of the default value."""
    if isinstance(default, bool):
        return raw.lower() in ('true', '1', 'yes')
    if isinstance(default, list):
        return [item.strip() for item in raw.split(',') if item.strip()]
    return type(default)(raw)


def _apply_env_overrides(config_data: Dict):
    """Apply ALS_SURGEON_<SECTION>_<KEY>=value overrides in place.

    Example: ALS_SURGEON_FILTER_DELETE_TAGS=SideChain,Buffer
    """
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == ENV_CONFIG_PATH:
            continue
        parts = env_key[len(ENV_PREFIX):].lower().split('_', 1)
        if len(parts) != 2:
            continue
        section, key = parts
        if isinstance(config_data.get(section), dict) and key in config_data[section]:
            try:
                config_data[section][key] = _cast_env_value(config_data[section][key], env_value)
            except (ValueError, TypeError):
                logger.warning(f"Ignoring {env_key}: cannot convert {env_value!r}")


def load_config(config_path: Optional[str] = None) -> SurgeonConfig:
    """
    Load configuration from YAML file.

    Search order:
    1. Explicit path if provided
    2. ALS_SURGEON_CONFIG environment variable
    3. als_surgeon.yaml in the current directory
    4. Default config

    Args:
        config_path: Optional explicit path to config file

    Returns:
        SurgeonConfig instance
    """
    global _config

    if config_path:
        cfg_path = Path(config_path)
    elif os.environ.get(ENV_CONFIG_PATH):
        cfg_path = Path(os.environ[ENV_CONFIG_PATH])
    else:
        cfg_path = Path.cwd() / CONFIG_FILENAME

    config_data = copy.deepcopy(DEFAULT_CONFIG)

    if cfg_path.exists():
        try:
            with open(cfg_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f) or {}
            if isinstance(user_config, dict):
                for section in list(user_config):
                    if section in DEFAULT_CONFIG and not isinstance(user_config[section], dict):
                        logger.warning(
                            f"Ignoring section '{section}' in {cfg_path}: expected a mapping"
                        )
                        del user_config[section]
                config_data = deep_merge(config_data, user_config)
                logger.debug(f"Loaded config from {cfg_path}")
            else:
                logger.warning(f"Ignoring {cfg_path}: top level must be a mapping")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config from {cfg_path}: {e}; using defaults")

    _apply_env_overrides(config_data)

    _config = SurgeonConfig(_config=config_data, _config_path=cfg_path)
    return _config


def get_config() -> SurgeonConfig:
    """Get the current config instance, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> SurgeonConfig:
    """Force reload the configuration."""
    global _config
    _config = None
    return load_config(config_path)
