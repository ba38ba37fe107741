from __future__ import annotations

import logging
import os
from pathlib import Path

FALLBACK_LOG_NAME = "i3-installer.log"

FILE_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
CONSOLE_FORMAT = logging.Formatter(fmt="%(levelname)-7s %(message)s")


def _open_log_file(log_path: str) -> tuple[logging.Handler, str]:
    """FileHandler on log_path, or on ./i3-installer.log if that is not writable."""

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str,
    *,
    verbose: bool = False,
    also_console: bool = True,
) -> str:
    """Configure logging.

    The log file always gets DEBUG (every command and its output); the
    console gets INFO, or DEBUG with verbose=True.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, "_i3_installer_configured", False):
        return getattr(root, "_i3_installer_log_path", log_path)

    file_handler, chosen_path = _open_log_file(log_path)
    file_handler.setFormatter(FILE_FORMAT)
    file_handler.setLevel(logging.DEBUG)
    root.addHandler(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(CONSOLE_FORMAT)
        console.setLevel(logging.DEBUG if verbose else logging.INFO)
        root.addHandler(console)

    setattr(root, "_i3_installer_configured", True)
    setattr(root, "_i3_installer_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
