"""Update checker: GitHub Releases probe plus a persisted freshness verdict.

Architecture:
  UpdateChecker.check_for_update(): fire-and-forget, runs the fetch on a
      detached background thread and records the outcome in FreshnessStore
  UpdateChecker.needs_update(): synchronous, reads only persisted state;
      safe to call from UI code at any time

The UI never waits for the network: it asks needs_update() whenever it draws
the "update available" badge, and the answer catches up once a check lands.
"""

import logging
import re
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from hookmanager.config.preferences import FreshnessStore
from hookmanager.core.errors import NetworkError, ParseError
from hookmanager.core.models import BuildIdentity
from hookmanager.network.http_client import HttpClient

logger = logging.getLogger(__name__)

# A verdict older than this is not trusted; nag so the user re-verifies
STALENESS_WINDOW = timedelta(days=30)

_INT_RE = re.compile(r'[+-]?\d+')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def spawn_detached(target: Callable[[], None]):
    """Run ``target`` on a daemon thread nobody joins.

    If the process exits first the thread simply dies with it; nothing is
    written until the task has a complete result.
    """
    thread = threading.Thread(target=target, name="update-check", daemon=True)
    thread.start()


def parse_version_code(asset_name: str) -> int:
    """Extract the version code from ``name-variant-<code>-rest`` style asset names.

    >>> parse_version_code("xposed-v1-1234-release.zip")
    1234
    """
    parts = asset_name.split('-', 3)
    if len(parts) < 3:
        raise ParseError(f"Asset name has no version field: {asset_name!r}")
    token = parts[2]
    if not _INT_RE.fullmatch(token):
        raise ParseError(f"Version field is not an integer: {token!r}")
    return int(token, 10)


def parse_release(payload) -> int:
    """Return the version code advertised by a releases/latest payload."""
    try:
        name = payload['assets'][0]['name']
    except (KeyError, IndexError, TypeError) as e:
        raise ParseError(f"Unexpected release metadata: {e!r}") from e
    if not isinstance(name, str):
        raise ParseError(f"Asset name is not a string: {name!r}")
    return parse_version_code(name)


class UpdateChecker:
    """Checks the release endpoint and answers "is an update needed?".

    All collaborators are injected: the HTTP client (usually through
    HttpClientProvider.get), the freshness store, the running build, the
    clock and the function used to start the detached task.
    """

    def __init__(self, release_url: str,
                 client_factory: Callable[[], HttpClient],
                 store: FreshnessStore,
                 build: BuildIdentity,
                 clock: Callable[[], datetime] = utc_now,
                 spawn: Callable[[Callable[[], None]], None] = spawn_detached):
        self.release_url = release_url
        self._client_factory = client_factory
        self._store = store
        self._build = build
        self._clock = clock
        self._spawn = spawn

    # ── Check ────────────────────────────────────────────────────────

    def check_for_update(self):
        """Start one background check and return immediately."""
        self._spawn(self._run_check)

    def _run_check(self):
        try:
            self.check_now()
        except Exception as e:
            # Nothing above the detached thread could handle this
            logger.error("Update check crashed: %s", e, exc_info=True)

    def check_now(self) -> bool:
        """Fetch release metadata and record the result. Returns True on success."""
        try:
            code = self._fetch_latest_code()
        except (NetworkError, ParseError) as e:
            logger.warning("Update check failed: %s", e)
            self._store.mark_checked()
            return False

        now = self._clock()
        self._store.record_success(code, now)
        logger.info("Latest release version code %d (running %d)",
                    code, self._build.version_code)
        return True

    def _fetch_latest_code(self) -> int:
        try:
            client = self._client_factory()
        except OSError as e:
            raise NetworkError(f"HTTP client unavailable: {e}") from e
        resp = client.fetch(self.release_url, headers={
            'Accept': 'application/vnd.github.v3+json',
        })
        if not 200 <= resp.status_code < 300:
            raise NetworkError(f"HTTP {resp.status_code} from {self.release_url}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise ParseError(f"Release metadata is not JSON: {e}") from e
        return parse_release(payload)

    # ── Verdict ──────────────────────────────────────────────────────

    def needs_update(self) -> bool:
        """Decide from persisted state alone whether to show the update prompt."""
        record = self._store.read()
        if not record.checked:
            return False
        now = self._clock()
        if record.last_checked_at is not None:
            if now >= record.last_checked_at + STALENESS_WINDOW:
                return True
            return record.latest_version_code > self._build.version_code
        return now > self._build.build_time + STALENESS_WINDOW
