from __future__ import annotations

import enum
import logging
import time
from typing import Callable, List, Sequence, Tuple

from ..errors import InstallAborted
from ..result import GroupOutcome
from .pkg import PackageBackend

logger = logging.getLogger(__name__)


class EmptyGroupPolicy(str, enum.Enum):
    """How to report a group with no packages in it.

    FAIL keeps the historical behavior of the shell installer; SUCCEED treats
    "nothing required" as done.
    """

    FAIL = "fail"
    SUCCEED = "succeed"


def partition_installed(
    packages: Sequence[str], is_installed: Callable[[str], bool]
) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Split packages into (already installed, needs installation), order kept.

    Queries once per identifier.
    """

    present: List[str] = []
    missing: List[str] = []
    for pkg in packages:
        if is_installed(pkg):
            present.append(pkg)
        else:
            missing.append(pkg)
    return tuple(present), tuple(missing)


def install_group(
    label: str,
    packages: Sequence[str],
    *,
    backend: PackageBackend,
    empty_policy: EmptyGroupPolicy = EmptyGroupPolicy.FAIL,
    progress: bool = False,
) -> GroupOutcome:
    """Make sure every package in the group is installed.

    The caller decides whether a failed outcome is fatal (see require/tolerate).
    """

    if not label or not label.strip():
        raise ValueError("group label must be a non-empty string")

    pkgs = list(packages)
    total = len(pkgs)
    logger.info("== %s (%d packages) ==", label, total)

    if total == 0:
        ok = empty_policy == EmptyGroupPolicy.SUCCEED
        logger.warning("%s: no packages specified", label)
        return GroupOutcome(label=label, total=0, ok=ok, returncode=0 if ok else 1, reason="empty")

    present, missing = partition_installed(pkgs, backend.is_installed)
    for pkg in present:
        logger.info("  already installed: %s", pkg)

    if not missing:
        logger.info("%s: all packages already installed", label)
        return GroupOutcome(label=label, total=total, already_installed=present, reason="all_installed")

    logger.info("%s: installing %d package(s): %s", label, len(missing), " ".join(missing))

    started = time.monotonic()
    backend.update()
    rc = backend.install(missing, label=label, progress=progress)
    duration = time.monotonic() - started

    confirmed = 0
    if rc == 0:
        confirmed = sum(1 for pkg in missing if backend.is_installed(pkg))
        logger.info("%s done in %.0fs", label, duration)
        logger.info("  %d/%d packages installed successfully", confirmed, len(missing))
    else:
        logger.error("%s failed (exit code %d)", label, rc)

    return GroupOutcome(
        label=label,
        total=total,
        already_installed=present,
        to_install=missing,
        confirmed=confirmed,
        returncode=rc,
        duration_s=duration,
        ok=rc == 0,
    )


def require(outcome: GroupOutcome, *, step_id: str | None = None) -> GroupOutcome:
    """Strict policy: a failed group stops the run."""

    if not outcome.ok:
        raise InstallAborted(f"Failed to install {outcome.label}", step_id=step_id)
    return outcome


def tolerate(outcome: GroupOutcome, warnings: List[str]) -> GroupOutcome:
    """Best-effort policy: record the failure and carry on."""

    if not outcome.ok:
        msg = f"{outcome.label} failed (continuing)"
        logger.warning(msg)
        warnings.append(msg)
    return outcome
