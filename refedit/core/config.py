"""
Central configuration for refedit paths and settings.

Detection order:
    1. REFEDIT_HOME environment variable → base directory
    2. .refedit.local in the current directory → settings (may set base_dir)
    3. Default base directory: $XDG_DATA_HOME/refedit (~/.local/share/refedit)

Structure:
    <base_dir>/cache/                 - Fetched reference catalogs
    <base_dir>/work/                  - Working copies of edited catalogs
    <base_dir>/repository/            - Pre-downloaded packages (sync)

.refedit.local format (optional, one setting per line):
    base_dir=/path/to/custom/dir
    catalog_url=https://example.com/ref/{platform}/{platform}_64_{os}.{os_version}.xml
    metadata_url=https://example.com/pub/softpaq/{range}/{id}.cva
    repository_dir=/srv/softpaqs
    # Comments start with #
"""

import os
from pathlib import Path
from typing import Optional

LOCAL_CONFIG_FILE = ".refedit.local"
ENV_HOME = "REFEDIT_HOME"

DEFAULT_CATALOG_URL = (
    "https://hpia.hpcloud.hp.com/ref/{platform}/{platform}_64_{os}.{os_version}.xml"
)
DEFAULT_METADATA_URL = "https://ftp.hp.com/pub/softpaq/{range}/{id}.cva"

# Cache for detected configuration (avoid repeated filesystem checks)
_cached_config: Optional[dict] = None


def _read_local_config(directory: Path) -> Optional[dict]:
    """Read .refedit.local from a directory.

    Returns:
        Dict with config values, or None if the file doesn't exist
    """
    config_path = directory / LOCAL_CONFIG_FILE
    if not config_path.exists():
        return None

    config = {}
    try:
        with open(config_path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' in line:
                    key, value = line.split('=', 1)
                    config[key.strip()] = value.strip()
    except OSError:
        return None

    return config


def _default_base_dir() -> Path:
    data_home = os.environ.get('XDG_DATA_HOME')
    if data_home:
        return Path(data_home) / "refedit"
    return Path.home() / ".local" / "share" / "refedit"


def _detect() -> dict:
    """Detect configuration from the environment.

    Returns:
        Dict with 'base_dir' and 'settings'
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    settings = _read_local_config(Path.cwd()) or {}

    env_home = os.environ.get(ENV_HOME)
    if env_home:
        base_dir = Path(env_home).expanduser()
    elif 'base_dir' in settings:
        base_dir = Path(settings['base_dir']).expanduser()
    else:
        base_dir = _default_base_dir()

    _cached_config = {
        'base_dir': base_dir,
        'settings': settings,
    }
    return _cached_config


def reset_cache():
    """Forget the detected configuration (next call re-detects)."""
    global _cached_config
    _cached_config = None


def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get a setting from .refedit.local."""
    return _detect()['settings'].get(key, default)


def get_base_dir() -> Path:
    return _detect()['base_dir']


def get_cache_dir() -> Path:
    """Directory where fetched reference catalogs are stored."""
    return get_base_dir() / "cache"


def get_work_dir() -> Path:
    """Directory holding working copies of edited catalogs."""
    return get_base_dir() / "work"


def get_repository_dir() -> Path:
    """Directory where sync stores downloaded packages."""
    configured = get_setting('repository_dir')
    if configured:
        return Path(configured).expanduser()
    return get_base_dir() / "repository"


def get_catalog_url() -> str:
    return get_setting('catalog_url', DEFAULT_CATALOG_URL)


def get_metadata_url() -> str:
    return get_setting('metadata_url', DEFAULT_METADATA_URL)
