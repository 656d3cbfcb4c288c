"""Shared HTTP client: one requests session per process.

Every outbound call goes through the client built here:
  - responses are cached on disk (BoundedFileCache, 50 MiB)
  - every request carries the fixed User-Agent from AppBranding
  - host names are resolved by hookmanager.network.resolver.Resolver
  - debug builds log request/response headers (never bodies)

The session is expensive to build (cache directory, connection pools), so
HttpClientProvider builds it lazily, exactly once, on first use.
"""

import logging
import os
import socket
import threading

import requests
from cachecontrol import CacheControlAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool
from urllib3.exceptions import ConnectTimeoutError, NewConnectionError
from urllib3.util import connection

from hookmanager.branding import AppBranding
from hookmanager.core.errors import NetworkError, ResolutionError
from hookmanager.network.cache import BoundedFileCache, DEFAULT_CAPACITY
from hookmanager.network.resolver import Resolver

logger = logging.getLogger(__name__)


# ── Transport ────────────────────────────────────────────────────────

class _ResolvingConnectionMixin:
    """Connects to the addresses returned by ``resolver`` instead of getaddrinfo.

    ``self.host`` is left untouched, so the Host header and TLS SNI still
    carry the original name.
    """

    resolver: Resolver | None = None

    def _new_conn(self):
        if self.resolver is None:
            return super()._new_conn()
        try:
            addresses = self.resolver.lookup(self.host)
        except ResolutionError as e:
            raise NewConnectionError(self, f"Failed to resolve {self.host}: {e}") from e

        last_error = None
        for address in addresses:
            try:
                return connection.create_connection(
                    (address, self.port),
                    self.timeout,
                    source_address=self.source_address,
                    socket_options=self.socket_options,
                )
            except socket.timeout as e:
                raise ConnectTimeoutError(
                    self,
                    f"Connection to {self.host} timed out. (connect timeout={self.timeout})",
                ) from e
            except OSError as e:
                last_error = e
        raise NewConnectionError(
            self, f"Failed to establish a new connection: {last_error}") from last_error


def _pool_classes(resolver: Resolver) -> dict:
    http_conn = type('ResolvingHTTPConnection',
                     (_ResolvingConnectionMixin, HTTPConnection), {'resolver': resolver})
    https_conn = type('ResolvingHTTPSConnection',
                      (_ResolvingConnectionMixin, HTTPSConnection), {'resolver': resolver})
    return {
        'http': type('ResolvingHTTPConnectionPool',
                     (HTTPConnectionPool,), {'ConnectionCls': http_conn}),
        'https': type('ResolvingHTTPSConnectionPool',
                      (HTTPSConnectionPool,), {'ConnectionCls': https_conn}),
    }


class ResolvingCacheAdapter(CacheControlAdapter):
    """CacheControl adapter whose connection pools use a custom Resolver."""

    def __init__(self, resolver: Resolver, cache: BoundedFileCache, **kwargs):
        # Must exist before HTTPAdapter.__init__ calls init_poolmanager()
        self.resolver = resolver
        super().__init__(cache=cache, **kwargs)

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = _pool_classes(self.resolver)


# ── Client ───────────────────────────────────────────────────────────

def _log_headers(response: requests.Response, *args, **kwargs):
    request = response.request
    logger.debug("--> %s %s", request.method, request.url)
    for name, value in request.headers.items():
        logger.debug("%s: %s", name, value)
    logger.debug("<-- %d %s (%s)", response.status_code, response.reason, response.url)
    for name, value in response.headers.items():
        logger.debug("%s: %s", name, value)


class HttpClient:
    """Thin wrapper turning transport failures into NetworkError."""

    def __init__(self, session: requests.Session, cache: BoundedFileCache | None = None):
        self.session = session
        self.cache = cache

    def fetch(self, url: str, headers: dict | None = None,
              method: str = "GET") -> requests.Response:
        """Perform a request. Non-2xx responses are returned, not raised."""
        try:
            return self.session.request(method, url, headers=headers)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url}: {e}") from e

    def close(self):
        self.session.close()


def build_client(cache_dir: str, resolver: Resolver, debug: bool = False,
                 capacity: int = DEFAULT_CAPACITY) -> HttpClient:
    """Build a fully configured client. Prefer HttpClientProvider.get()."""
    os.makedirs(cache_dir, exist_ok=True)
    cache = BoundedFileCache(cache_dir, capacity=capacity)
    adapter = ResolvingCacheAdapter(resolver, cache)

    session = requests.Session()
    session.headers['User-Agent'] = AppBranding.user_agent()
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    if debug:
        session.hooks['response'].append(_log_headers)
    logger.info("HTTP client ready (cache %s, %d MiB)", cache_dir, capacity // (1024 * 1024))
    return HttpClient(session, cache)


def build_bootstrap_session() -> requests.Session:
    """Plain session for reaching the DoH endpoint with system DNS."""
    session = requests.Session()
    session.headers['User-Agent'] = AppBranding.user_agent()
    return session


class HttpClientProvider:
    """Process-wide owner of the shared HttpClient.

    The first get() builds the client; concurrent first callers block on the
    lock and then observe the same instance.
    """

    def __init__(self, cache_dir: str, resolver: Resolver, debug: bool = False,
                 capacity: int = DEFAULT_CAPACITY):
        self._cache_dir = cache_dir
        self._resolver = resolver
        self._debug = debug
        self._capacity = capacity
        self._client: HttpClient | None = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def get(self) -> HttpClient:
        client = self._client
        if client is None:
            with self._lock:
                if self._client is None:
                    self._client = build_client(
                        self._cache_dir, self._resolver,
                        debug=self._debug, capacity=self._capacity,
                    )
                client = self._client
        return client

    def close(self):
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
