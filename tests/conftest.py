"""Shared fixtures: in-memory preferences, a controllable clock, a build identity."""

import pytest

from hookmanager.config.preferences import FreshnessStore, MemoryPreferenceStore
from hookmanager.core.models import BuildIdentity

from helpers import BUILD_TIME, T0, FakeClock


@pytest.fixture
def store():
    return MemoryPreferenceStore()


@pytest.fixture
def freshness(store):
    return FreshnessStore(store)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def build():
    return BuildIdentity(version_code=1000, version_name="1.0.0", build_time=BUILD_TIME)
