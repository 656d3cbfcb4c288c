"""Fakes shared by the test modules."""

from datetime import datetime, timedelta, timezone

from hookmanager.core.errors import NetworkError

BUILD_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)
T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, body_error: Exception | None = None):
        self.status_code = status_code
        self._payload = payload
        self._body_error = body_error

    def json(self):
        if self._body_error is not None:
            raise self._body_error
        return self._payload


class FakeClient:
    """Stands in for HttpClient; returns a canned response or raises."""

    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def fetch(self, url, headers=None, method="GET"):
        self.calls.append((url, headers or {}))
        if self.error is not None:
            raise self.error
        return self.response


class FakeProbes:
    def __init__(self, alive: bool = False, installer: bool = False,
                 core_version: str | None = None):
        self.alive = alive
        self.installer = installer
        self.core_version = core_version

    def is_privileged_service_alive(self) -> bool:
        return self.alive

    def is_installer_present(self) -> bool:
        return self.installer

    def core_version_name(self):
        return self.core_version


def release_payload(asset_name: str) -> dict:
    return {
        'tag_name': 'v1.9.2',
        'assets': [
            {'name': asset_name, 'browser_download_url': f'https://example.invalid/{asset_name}'},
            {'name': 'other-asset.zip'},
        ],
    }


def ok_client(asset_name: str = "xposed-v1-1234-release.zip") -> FakeClient:
    return FakeClient(FakeResponse(200, release_payload(asset_name)))


def failing_client() -> FakeClient:
    return FakeClient(error=NetworkError("connection reset"))
