"""Manager/core version consistency check, run once when the UI comes up."""

import logging
from enum import Enum

from packaging.version import Version, InvalidVersion

from hookmanager.core.models import BuildIdentity

logger = logging.getLogger(__name__)


class CoreVersionStatus(Enum):
    OUTDATED_CORE = "outdated_core"         # manager is newer than the service
    OUTDATED_MANAGER = "outdated_manager"   # service is newer than the manager


def compare_version_names(a: str, b: str) -> int:
    """Return -1, 0 or 1. PEP 440 ordering, plain string order as a fallback."""
    try:
        va, vb = Version(a.lstrip('vV')), Version(b.lstrip('vV'))
    except InvalidVersion:
        va, vb = a, b
    return (va > vb) - (va < vb)


def check_core_version(build: BuildIdentity, probes) -> CoreVersionStatus | None:
    """Return which side is out of date, or None when nothing should be shown.

    Debug builds and a stopped service are never reported.
    """
    if build.debug:
        return None
    if not probes.is_privileged_service_alive():
        return None
    core_version = probes.core_version_name()
    if not core_version or core_version == build.version_name:
        return None
    if compare_version_names(build.version_name, core_version) > 0:
        status = CoreVersionStatus.OUTDATED_CORE
    else:
        status = CoreVersionStatus.OUTDATED_MANAGER
    logger.warning("Version mismatch: manager %s, core %s (%s)",
                   build.version_name, core_version, status.value)
    return status
