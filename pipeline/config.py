"""
Tracking configuration - YAML settings plus environment overrides.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


DEFAULT_CONFIG_PATH = './config/tracking.yml'

DEFAULT_TRACKING = {
    'max_tokens_to_track': 50,
    'min_market_cap': 50000,
    'max_market_cap': 100000000,
    'min_volume_24h': 1000,
    'data_retention_days': 30,
    'history_window_days': 7,
}

DEFAULT_LAUNCHPAD = {
    'enabled': True,
    'recent_hours': 24,
    'trending_limit': 20,
    'enrich': True,
}


class ConfigError(Exception):
    """Raised when the tracking configuration cannot be loaded."""
    pass


def load_tracking_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load tracking configuration from YAML file.

    Missing `tracking` and `launchpad` keys fall back to defaults.

    Args:
        config_path: Path to config file (defaults to TRACKING_CONFIG env var)

    Returns:
        Dictionary with tracking, dexscreener, launchpad and reports sections

    Raises:
        ConfigError: If config file cannot be loaded
    """
    if config_path is None:
        config_path = os.getenv('TRACKING_CONFIG', DEFAULT_CONFIG_PATH)

    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Tracking config file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load tracking config: {e}")

    search_terms = (config.get('dexscreener') or {}).get('search_terms')
    if not search_terms:
        raise ConfigError("Tracking config missing 'dexscreener.search_terms'")

    config['tracking'] = {**DEFAULT_TRACKING, **(config.get('tracking') or {})}
    config['launchpad'] = {**DEFAULT_LAUNCHPAD, **(config.get('launchpad') or {})}
    config.setdefault('reports', {})
    return config


def db_path() -> str:
    return os.getenv('TRACKER_DB_PATH', './data/tracker.db')


def output_dir() -> Path:
    return Path(os.getenv('TRACKER_OUTPUT_DIR', './reports/output'))
