"""Privileged service and installer detection: process table via psutil."""

import logging
import os
import shutil

import psutil

logger = logging.getLogger(__name__)


class ServiceDetector:
    """Detects whether the privileged backend daemon is running."""

    @staticmethod
    def is_alive(process_names: list[str]) -> bool:
        """Return True if a process with one of ``process_names`` is running."""
        wanted = {name.lower() for name in process_names}
        try:
            for proc in psutil.process_iter(['name']):
                name = (proc.info.get('name') or '').lower()
                if name in wanted:
                    return True
        except Exception as e:
            logger.warning("Service detection failed: %s", e)
        return False


class InstallerDetector:
    """Detects the installer component (absolute path or a command on PATH)."""

    @staticmethod
    def is_present(candidates: list[str]) -> bool:
        for candidate in candidates:
            if os.path.isabs(candidate):
                if os.path.isfile(candidate):
                    return True
            elif shutil.which(candidate):
                return True
        return False


class ProcessServiceProbes:
    """ServiceProbes implementation backed by the local process table."""

    def __init__(self, process_names: list[str], installer_paths: list[str],
                 version_file: str = ""):
        self._process_names = process_names
        self._installer_paths = installer_paths
        self._version_file = version_file

    def is_privileged_service_alive(self) -> bool:
        return ServiceDetector.is_alive(self._process_names)

    def is_installer_present(self) -> bool:
        return InstallerDetector.is_present(self._installer_paths)

    def core_version_name(self) -> str | None:
        """Version name published by the service, or None if unknown."""
        if not self._version_file:
            return None
        try:
            with open(self._version_file, 'r', encoding='utf-8') as f:
                return f.read().strip() or None
        except OSError as e:
            logger.warning("Failed to read core version: %s", e)
            return None
