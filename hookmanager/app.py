"""Process-wide wiring: the objects a host UI shell talks to."""

import logging
import threading

from hookmanager.branding import AppBranding
from hookmanager.config.preferences import (
    FreshnessStore, JsonPreferenceStore, PreferenceStore, KEY_DOH, apply_locale_defaults,
)
from hookmanager.config.settings import AppSettings
from hookmanager.core.compat import CoreVersionStatus, check_core_version
from hookmanager.core.models import BuildIdentity, Destination, RouteRequest
from hookmanager.core.router import Router, ServiceProbes
from hookmanager.core.update_checker import UpdateChecker
from hookmanager.network.detector import ProcessServiceProbes
from hookmanager.network.http_client import HttpClientProvider, build_bootstrap_session
from hookmanager.network.resolver import DohResolver, Resolver

logger = logging.getLogger(__name__)


class Application:
    """Owns the shared HTTP client, preferences, update checker and router."""

    def __init__(self, settings: AppSettings,
                 preferences: PreferenceStore | None = None,
                 probes: ServiceProbes | None = None,
                 build: BuildIdentity | None = None,
                 **checker_kwargs):
        self.settings = settings
        self.build = build or AppBranding.build_identity()
        self.preferences = preferences or JsonPreferenceStore(settings.preferences_path)
        apply_locale_defaults(self.preferences)

        self.probes = probes or ProcessServiceProbes(
            settings.service_process_names,
            settings.installer_paths,
            settings.core_version_file,
        )

        self.resolver = Resolver(
            doh=DohResolver(settings.doh_url, build_bootstrap_session()),
            doh_enabled=lambda: bool(self.preferences.get(KEY_DOH, False)),
        )
        self.http = HttpClientProvider(settings.http_cache_dir, self.resolver,
                                       debug=self.build.debug)
        self.updates = UpdateChecker(
            settings.release_url,
            self.http.get,
            FreshnessStore(self.preferences),
            self.build,
            **checker_kwargs,
        )
        self.router = Router(self.probes)

        self._started = False
        self._start_lock = threading.Lock()

    def start(self):
        """Kick off the once-per-process update check."""
        with self._start_lock:
            if self._started:
                return
            self._started = True
        logger.info("%s %s (%d) starting", AppBranding.APP_NAME,
                    self.build.version_name, self.build.version_code)
        self.updates.check_for_update()

    # ── Host-facing API ──────────────────────────────────────────────

    def needs_update(self) -> bool:
        return self.updates.needs_update()

    def route(self, request: RouteRequest | None) -> Destination | None:
        return self.router.route(request)

    def core_version_status(self) -> CoreVersionStatus | None:
        return check_core_version(self.build, self.probes)
