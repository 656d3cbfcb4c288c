"""Centralized branding constants: single source of truth for version.

Values are stamped at build time; everything that needs to know which build
is running asks this class instead of hardcoding its own copy.
"""

from datetime import datetime, timezone

from hookmanager.core.models import BuildIdentity


class AppBranding:
    """Application identity constants."""

    APP_NAME = "HookManager"
    TAG = "HookManager"
    VERSION = "1.9.2"
    VERSION_CODE = 6990
    BUILD_TIME = 1760832000         # epoch seconds, stamped by the release build
    DEBUG = False

    RELEASES_URL = "https://api.github.com/repos/hookmanager/hookmanager/releases/latest"
    SOURCE_URL = "https://github.com/hookmanager/hookmanager"

    @classmethod
    def user_agent(cls) -> str:
        # Fixed tag, no version suffix
        return cls.TAG

    @classmethod
    def build_identity(cls) -> BuildIdentity:
        return BuildIdentity(
            version_code=cls.VERSION_CODE,
            version_name=cls.VERSION,
            build_time=datetime.fromtimestamp(cls.BUILD_TIME, tz=timezone.utc),
            debug=cls.DEBUG,
        )
