"""DNS resolution for the HTTP client: DNS-over-HTTPS with system fallback.

The DoH endpoint itself is reached through a plain requests session, which
resolves the endpoint's host with the system resolver. That breaks the
bootstrap loop without hardcoding resolver IPs.
"""

import ipaddress
import logging
import socket
from typing import Callable

import requests

from hookmanager.core.errors import ResolutionError

logger = logging.getLogger(__name__)

# DNS record types (RFC 1035 / RFC 3596)
TYPE_A = 1
TYPE_AAAA = 28

DOH_TIMEOUT = 5


class SystemResolver:
    """Platform resolver via getaddrinfo."""

    def lookup(self, hostname: str) -> list[str]:
        try:
            infos = socket.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as e:
            raise ResolutionError(f"{hostname}: {e}") from e
        addresses = []
        for _family, _type, _proto, _canon, sockaddr in infos:
            if sockaddr[0] not in addresses:
                addresses.append(sockaddr[0])
        if not addresses:
            raise ResolutionError(f"{hostname}: no addresses")
        return addresses


class DohResolver:
    """DNS-over-HTTPS using the JSON wire format (application/dns-json)."""

    def __init__(self, url: str, session: requests.Session, timeout: float = DOH_TIMEOUT):
        self.url = url
        self._session = session
        self._timeout = timeout

    def lookup(self, hostname: str) -> list[str]:
        addresses = []
        for record_type in (TYPE_A, TYPE_AAAA):
            addresses.extend(self._query(hostname, record_type))
        if not addresses:
            raise ResolutionError(f"{hostname}: empty DoH answer")
        return addresses

    def _query(self, hostname: str, record_type: int) -> list[str]:
        try:
            resp = self._session.get(
                self.url,
                params={'name': hostname, 'type': record_type},
                headers={'Accept': 'application/dns-json'},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ResolutionError(f"{hostname}: DoH query failed: {e}") from e

        if not isinstance(payload, dict) or payload.get('Status') != 0:
            raise ResolutionError(f"{hostname}: DoH status {payload!r:.80}")

        addresses = []
        for answer in payload.get('Answer') or []:
            if not isinstance(answer, dict) or answer.get('type') != record_type:
                continue    # CNAME chain entries
            data = answer.get('data', '')
            try:
                addresses.append(str(ipaddress.ip_address(data)))
            except ValueError as e:
                raise ResolutionError(f"{hostname}: malformed address {data!r}") from e
        return addresses


class Resolver:
    """Resolve via DoH when enabled, otherwise (or on any DoH failure) via the system."""

    def __init__(self, doh: DohResolver | None = None,
                 system: SystemResolver | None = None,
                 doh_enabled: Callable[[], bool] = lambda: True):
        self._doh = doh
        self._system = system or SystemResolver()
        self._doh_enabled = doh_enabled

    def lookup(self, hostname: str) -> list[str]:
        """Return the addresses for ``hostname`` or raise ResolutionError."""
        try:
            return [str(ipaddress.ip_address(hostname))]
        except ValueError:
            pass

        if self._doh is not None and self._doh_enabled():
            try:
                return self._doh.lookup(hostname)
            except Exception as e:
                logger.warning("DoH lookup failed, using system resolver: %s", e)
        return self._system.lookup(hostname)
