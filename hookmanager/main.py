"""HookManager: entry point.

Headless stand-in for the UI shell: starts the update check, reports the
persisted verdict and routes an optional deep link given on the command line,
e.g. ``hookmanager repo``.
"""

import sys
import os
import logging

from hookmanager.app import Application
from hookmanager.branding import AppBranding
from hookmanager.config.settings import AppSettings
from hookmanager.core.models import RouteRequest


def setup_logging(data_dir: str, debug: bool = False):
    """Configure logging to file and console."""
    log_dir = os.path.join(data_dir, 'logs')
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'hookmanager.log')

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(),
        ],
    )


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    # Load settings early (before anything touches the network)
    settings = AppSettings.load()
    settings.ensure_dirs()

    setup_logging(settings.data_dir, debug=AppBranding.DEBUG)
    logger = logging.getLogger(__name__)

    app = Application(settings)
    app.start()

    status = app.core_version_status()
    if status is not None:
        print(f"Version mismatch: {status.value}")

    # Verdict from the previous run's check; this run's check lands in the background
    if app.needs_update():
        print("Update available")
    else:
        print("Up to date")

    if argv:
        destination = app.route(RouteRequest.from_intent(data=argv[0]))
        if destination is None:
            logger.info("Nothing to open for %s", argv[0])
        else:
            print(f"Open {destination.name} {destination.arguments or ''}".rstrip())

    return 0


if __name__ == '__main__':
    sys.exit(main())
