from __future__ import annotations

from typing import Optional


class InstallerError(Exception):
    """Base class for installer failures."""


class CommandError(InstallerError, RuntimeError):
    def __init__(self, argv: list[str], returncode: int, stderr: str = "") -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(argv)}\n{stderr}".rstrip())


class InstallAborted(InstallerError):
    """A fatal step failure; the run stops here."""

    def __init__(self, message: str, *, step_id: Optional[str] = None) -> None:
        self.step_id = step_id
        super().__init__(message)


class InstallCancelled(InstallerError):
    """The operator declined to continue."""

    def __init__(self, message: str = "Installation cancelled.", *, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        super().__init__(message)
