"""
Engine settings stored as YAML and merged with defaults.
"""
import logging
import os

import yaml

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = 'ENGINE_SETTINGS_FILE'


def get_default_settings():
    """Return default settings."""
    return {
        'registration_expiry_days': 14,
        'default_skill_rating': 3.0,
        'pool_count': 2,
        'teams_per_pool_advancing': 2,
        'team_formation_mode': 'auto-pair',
        'tournament_format': 'pool-bracket',
        'ring_buffer_size': 50,
    }


def load_settings(path=None):
    """Load settings from YAML file, merging with defaults.

    Uses ``path`` if given, otherwise the ENGINE_SETTINGS_FILE environment
    variable. A missing, empty or unreadable file yields the defaults.
    """
    defaults = get_default_settings()
    path = path or os.environ.get(SETTINGS_ENV_VAR)
    if not path or not os.path.exists(path):
        return defaults
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return defaults
    if not data:
        return defaults
    if not isinstance(data, dict):
        logger.warning(f'Ignoring {path}: expected a mapping, got {type(data).__name__}')
        return defaults
    # Merge with defaults to ensure all keys exist
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return data


def save_settings(settings, path):
    """Save settings to YAML file."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)
