import pytest

from hookmanager.core.compat import CoreVersionStatus, check_core_version, compare_version_names
from hookmanager.core.models import BuildIdentity

from helpers import BUILD_TIME, FakeProbes


def manager(version_name: str, debug: bool = False) -> BuildIdentity:
    return BuildIdentity(version_code=1, version_name=version_name,
                         build_time=BUILD_TIME, debug=debug)


def test_matching_versions_report_nothing():
    assert check_core_version(manager("1.9.2"), FakeProbes(alive=True, core_version="1.9.2")) is None


def test_newer_manager_reports_outdated_core():
    status = check_core_version(manager("1.10.0"), FakeProbes(alive=True, core_version="1.9.2"))
    assert status is CoreVersionStatus.OUTDATED_CORE


def test_newer_core_reports_outdated_manager():
    status = check_core_version(manager("1.9.2"), FakeProbes(alive=True, core_version="1.10.0"))
    assert status is CoreVersionStatus.OUTDATED_MANAGER


def test_debug_builds_skip_the_check():
    assert check_core_version(manager("1.0", debug=True),
                              FakeProbes(alive=True, core_version="2.0")) is None


def test_dead_service_skips_the_check():
    assert check_core_version(manager("1.0"), FakeProbes(alive=False, core_version="2.0")) is None


def test_unknown_core_version_skips_the_check():
    assert check_core_version(manager("1.0"), FakeProbes(alive=True, core_version=None)) is None


@pytest.mark.parametrize("a,b,expected", [
    ("1.9.2", "1.9.2", 0),
    ("v1.10.0", "1.9.2", 1),
    ("1.9.2", "1.9.3", -1),
    ("nightly-b", "nightly-a", 1),
])
def test_compare_version_names(a, b, expected):
    assert compare_version_names(a, b) == expected
