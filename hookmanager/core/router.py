"""Navigation router: admits a request only when the services it needs are up.

A request that cannot be served is dropped: route() returns None and the UI
stays where it is. Callers cannot tell an unknown link from an unmet
precondition, and do not need to.
"""

import logging
from typing import Protocol

from hookmanager.core.models import Destination, RouteRequest, RouteToken

logger = logging.getLogger(__name__)


class ServiceProbes(Protocol):
    """Availability checks supplied by the host environment."""

    def is_privileged_service_alive(self) -> bool: ...

    def is_installer_present(self) -> bool: ...


class Router:
    """Maps RouteRequests to Destinations. Never raises, performs no I/O itself."""

    def __init__(self, probes: ServiceProbes):
        self._probes = probes

    def route(self, request: RouteRequest | None) -> Destination | None:
        if request is None:
            return None
        try:
            destination = self._resolve(request)
        except Exception as e:
            logger.warning("Probe failed while routing %s: %s", request.token, e)
            return None
        if destination is None:
            logger.debug("Dropped route request %s %s", request.token, request.payload)
        return destination

    def _resolve(self, request: RouteRequest) -> Destination | None:
        if request.token is RouteToken.SETTINGS:
            return Destination('settings')

        if request.token is RouteToken.MODULE_DETAIL:
            if not self._probes.is_privileged_service_alive():
                return None
            return Destination('module_detail', dict(request.payload))

        if request.token is RouteToken.DEEP_LINK:
            link = request.payload.get('link', '')
            if link in ('modules', 'logs'):
                if not self._probes.is_privileged_service_alive():
                    return None
                return Destination(link)
            if link == 'repo':
                if not (self._probes.is_privileged_service_alive()
                        or self._probes.is_installer_present()):
                    return None
                return Destination('repo')

        return None
