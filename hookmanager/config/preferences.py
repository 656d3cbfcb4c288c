"""Runtime preferences: small key-value store with atomic multi-key commits.

Settings (settings.py) describe how the app is set up; preferences hold the
state the app writes for itself while running, such as the outcome of the
last update check. Both are JSON on disk, but preferences are written far more
often and from background threads, so every commit goes through one lock and
lands on disk with a single rename.
"""

import json
import locale
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from typing import Callable

from hookmanager.core.models import FreshnessRecord

logger = logging.getLogger(__name__)

KEY_CHECKED = 'checked'
KEY_LATEST_CHECK = 'latest_check'       # epoch seconds (float), 0 = never succeeded
KEY_LATEST_VERSION = 'latest_version'
KEY_DOH = 'doh'


class PreferenceStore:
    """In-memory key-value store. Subclasses add durability via _persist()."""

    def __init__(self, values: dict | None = None):
        self._lock = threading.RLock()
        self._values: dict = dict(values or {})

    def get(self, key: str, default=None):
        with self._lock:
            return self._values.get(key, default)

    def get_many(self, defaults: dict) -> dict:
        """Read several keys as one consistent snapshot."""
        with self._lock:
            return {k: self._values.get(k, d) for k, d in defaults.items()}

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._values

    def put(self, key: str, value):
        self.commit({key: value})

    def commit(self, values: dict):
        """Apply all of ``values`` as one unit. Readers see all or none."""
        with self._lock:
            updated = dict(self._values)
            updated.update(values)
            self._persist(updated)
            self._values = updated

    def update(self, changes: Callable[[dict], dict | None]):
        """Derive changes from the current values and commit them as one unit.

        ``changes`` runs under the store lock and returns the keys to write,
        or None to leave the store alone.
        """
        with self._lock:
            values = changes(dict(self._values))
            if values:
                self.commit(values)

    def _persist(self, values: dict):
        pass


class MemoryPreferenceStore(PreferenceStore):
    """Non-durable store, used by tests and headless hosts."""


class JsonPreferenceStore(PreferenceStore):
    """Preferences backed by a JSON file, replaced atomically on each commit."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(self._load(path))

    @staticmethod
    def _load(path: str) -> dict:
        if not os.path.isfile(path):
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except Exception as e:
            logger.warning("Failed to load preferences: %s", e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file with unexpected format: %s", path)
            return {}
        return data

    def _persist(self, values: dict):
        directory = os.path.dirname(self.path) or '.'
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.preferences-')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(values, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            # In-memory state still advances; next successful commit catches up
            logger.warning("Failed to save preferences: %s", e)


class FreshnessStore:
    """Typed view over the three update-check keys of a PreferenceStore."""

    def __init__(self, store: PreferenceStore):
        self._store = store

    def read(self) -> FreshnessRecord:
        values = self._store.get_many({
            KEY_CHECKED: False,
            KEY_LATEST_CHECK: 0,
            KEY_LATEST_VERSION: 0,
        })
        check = float(values[KEY_LATEST_CHECK] or 0)
        return FreshnessRecord(
            checked=bool(values[KEY_CHECKED]),
            last_checked_at=(datetime.fromtimestamp(check, tz=timezone.utc)
                             if check > 0 else None),
            latest_version_code=int(values[KEY_LATEST_VERSION] or 0),
        )

    def record_success(self, version_code: int, now: datetime):
        self._store.commit({
            KEY_LATEST_VERSION: int(version_code),
            KEY_LATEST_CHECK: now.timestamp(),
            KEY_CHECKED: True,
        })

    def mark_checked(self):
        """Flag that an attempt completed. Never clears the flag."""
        self._store.update(
            lambda current: None if current.get(KEY_CHECKED) else {KEY_CHECKED: True})


def locale_country() -> str:
    """Return the upper-case country code of the current locale, or ''."""
    try:
        name = locale.getlocale()[0]
    except ValueError:
        name = None
    name = name or os.environ.get('LC_ALL') or os.environ.get('LANG') or ''
    parts = name.split('.')[0].replace('-', '_').split('_')
    return parts[1].upper() if len(parts) > 1 else ''


def apply_locale_defaults(store: PreferenceStore, country: str | None = None):
    """Turn encrypted DNS on by default where plain DNS is commonly tampered with."""
    if country is None:
        country = locale_country()
    if country == 'CN' and not store.contains(KEY_DOH):
        store.put(KEY_DOH, True)
        logger.info("Enabled DNS-over-HTTPS by default for locale %s", country)
