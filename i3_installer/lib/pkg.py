from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

from .command import run_cmd, run_piped, which

logger = logging.getLogger(__name__)

# pv needs a size estimate; apt prints roughly this many bytes per package.
PV_BYTES_PER_PACKAGE = 50


class PackageBackend(Protocol):
    """What the group installer needs from a package manager."""

    def is_installed(self, package: str) -> bool:
        ...

    def update(self) -> int:
        ...

    def install(self, packages: Sequence[str], *, label: str, progress: bool) -> int:
        ...


def parse_dpkg_list(output: str) -> dict[str, str]:
    """Map package name -> two-letter status from `dpkg -l` output."""

    states: dict[str, str] = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2 or len(parts[0]) < 2:
            continue
        status = parts[0]
        if not status[0].isalpha() or status.startswith(("Desired", "|", "+")):
            continue
        # Multi-arch names come back as name:arch.
        name = parts[1].split(":", 1)[0]
        states[name] = status
    return states


def dpkg_is_installed(package: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    r = run_cmd(["dpkg", "-l", package], check=False)
    if r.returncode != 0:
        return False
    status = parse_dpkg_list(r.stdout).get(package.split(":", 1)[0], "")
    return status.startswith("ii")


def apt_update(*, dry_run: bool = False, quiet: bool = False) -> int:
    r = run_cmd(["sudo", "apt-get", "update"], check=False, capture=quiet, dry_run=dry_run)
    return r.returncode


def apt_upgrade(*, dry_run: bool = False) -> int:
    r = run_cmd(["sudo", "apt-get", "upgrade", "-y"], check=False, capture=False, dry_run=dry_run)
    return r.returncode


def apt_install(packages: Sequence[str], *, dry_run: bool = False, quiet: bool = False) -> int:
    """Plain `sudo apt-get install -y ...`; returns the exit code."""

    if not packages:
        return 0
    r = run_cmd(
        ["sudo", "apt-get", "install", "-y", *packages],
        check=False,
        capture=quiet,
        dry_run=dry_run,
    )
    return r.returncode


def apt_install_any(alternatives: Iterable[str], *, dry_run: bool = False) -> Optional[str]:
    """Install the first alternative apt accepts; None if none did.

    Used for packages whose name differs between Debian and Ubuntu
    (firefox-esr/firefox, exa/eza).
    """

    for name in alternatives:
        if apt_install([name], dry_run=dry_run, quiet=True) == 0:
            logger.info("Installed %s", name)
            return name
        logger.info("%s not available", name)
    return None


def systemctl_enable(units: Sequence[str], *, dry_run: bool = False) -> int:
    r = run_cmd(["sudo", "systemctl", "enable", *units], check=False, dry_run=dry_run)
    return r.returncode


def export_selections(out_path: str, *, dry_run: bool = False) -> str:
    """Write `dpkg --get-selections` to out_path."""

    r = run_cmd(["dpkg", "--get-selections"], dry_run=dry_run)
    if dry_run:
        logger.info("Would write %s", out_path)
        return out_path
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(r.stdout, encoding="utf-8")
    logger.info("Packages exported to %s", out_path)
    return out_path


class AptBackend:
    """PackageBackend over dpkg/apt-get, running apt through sudo."""

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def is_installed(self, package: str) -> bool:
        return dpkg_is_installed(package, dry_run=self.dry_run)

    def update(self) -> int:
        return apt_update(dry_run=self.dry_run)

    def install(self, packages: Sequence[str], *, label: str, progress: bool) -> int:
        if not packages:
            return 0
        if progress and which("pv"):
            return run_piped(
                ["sudo", "apt-get", "install", "-y", *packages],
                [
                    "pv",
                    "-ptebar",
                    "-s",
                    str(len(packages) * PV_BYTES_PER_PACKAGE),
                    "-N",
                    label,
                ],
                dry_run=self.dry_run,
            )
        return apt_install(packages, dry_run=self.dry_run)
