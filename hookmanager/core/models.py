"""Core data models: build identity, freshness record, navigation requests."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# Host action that opens the app's preference screen
ACTION_APPLICATION_PREFERENCES = "android.intent.action.APPLICATION_PREFERENCES"


@dataclass(frozen=True)
class BuildIdentity:
    """Identity of the running build. Compiled in, never mutated."""

    version_code: int
    version_name: str
    build_time: datetime    # UTC
    debug: bool = False


@dataclass(frozen=True)
class FreshnessRecord:
    """Snapshot of the persisted update-check state."""

    checked: bool = False
    last_checked_at: datetime | None = None    # last *successful* fetch
    latest_version_code: int = 0


class RouteToken(Enum):
    SETTINGS = "settings"
    MODULE_DETAIL = "module_detail"
    DEEP_LINK = "deep_link"


@dataclass
class RouteRequest:
    """One navigation event handed over by the UI shell."""

    token: RouteToken
    payload: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_intent(action: str | None = None, data: str | None = None,
                    extras: dict | None = None) -> 'RouteRequest | None':
        """Build a request from the raw pieces of a host intent.

        The preferences action wins over module extras, which win over a
        deep-link data string. Returns None when nothing is routable.
        """
        extras = extras or {}
        if action == ACTION_APPLICATION_PREFERENCES:
            return RouteRequest(RouteToken.SETTINGS)
        # Module extras win even when the service turns out to be down; the
        # router then drops the request rather than trying the data string.
        if 'modulePackageName' in extras:
            return RouteRequest(RouteToken.MODULE_DETAIL, {
                'package_name': str(extras['modulePackageName']),
                'user_id': str(extras.get('moduleUserId', -1)),
            })
        if data:
            return RouteRequest(RouteToken.DEEP_LINK, {'link': data})
        return None


@dataclass(frozen=True)
class Destination:
    """Concrete navigation target resolved by the router."""

    name: str               # 'settings', 'module_detail', 'modules', 'logs', 'repo'
    arguments: dict = field(default_factory=dict)
