"""Application settings: persistence via JSON."""

import json
import logging
import os
from dataclasses import dataclass, field, asdict

from hookmanager.branding import AppBranding

logger = logging.getLogger(__name__)


def _default_data_dir() -> str:
    base = os.environ.get('LOCALAPPDATA') or os.path.join(
        os.path.expanduser('~'), '.local', 'share')
    return os.path.join(base, AppBranding.APP_NAME)


DEFAULT_DATA_DIR = _default_data_dir()
DEFAULT_DOH_URL = "https://cloudflare-dns.com/dns-query"


@dataclass
class AppSettings:
    """Persistent application settings."""
    # Paths
    data_dir: str = ""
    cache_dir: str = ""                 # process-private, holds http_cache/

    # Endpoints
    release_url: str = AppBranding.RELEASES_URL
    doh_url: str = DEFAULT_DOH_URL

    # Privileged service discovery
    service_process_names: list[str] = field(
        default_factory=lambda: ['hookmanagerd', 'lspd'])
    installer_paths: list[str] = field(
        default_factory=lambda: ['magisk', '/sbin/magisk', '/system/bin/magisk'])
    core_version_file: str = ""

    def __post_init__(self):
        if not self.data_dir:
            self.data_dir = DEFAULT_DATA_DIR
        if not self.cache_dir:
            self.cache_dir = os.path.join(self.data_dir, 'cache')

    @property
    def preferences_path(self) -> str:
        return os.path.join(self.data_dir, 'preferences.json')

    @property
    def http_cache_dir(self) -> str:
        return os.path.join(self.cache_dir, 'http_cache')

    @staticmethod
    def load(path: str | None = None) -> 'AppSettings':
        """Load settings from JSON. Returns defaults if file doesn't exist."""
        if path is None:
            path = os.path.join(DEFAULT_DATA_DIR, 'settings.json')

        if not os.path.isfile(path):
            logger.info("No settings file, using defaults")
            return AppSettings()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            settings = AppSettings(**{k: v for k, v in data.items()
                                      if k in AppSettings.__dataclass_fields__})
            logger.info("Loaded settings from %s", path)
            return settings
        except Exception as e:
            logger.warning("Failed to load settings: %s", e)
            return AppSettings()

    def save(self, path: str | None = None):
        """Save settings to JSON."""
        if path is None:
            path = os.path.join(self.data_dir, 'settings.json')

        os.makedirs(os.path.dirname(path), exist_ok=True)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(asdict(self), f, indent=2)
            logger.info("Saved settings to %s", path)
        except Exception as e:
            logger.warning("Failed to save settings: %s", e)

    def ensure_dirs(self):
        """Create data directories if they don't exist."""
        os.makedirs(self.data_dir, exist_ok=True)
        os.makedirs(os.path.join(self.data_dir, 'logs'), exist_ok=True)
        os.makedirs(self.http_cache_dir, exist_ok=True)
