from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from .command import run_cmd

logger = logging.getLogger(__name__)


def git_clone(url: str, dest: Path, *, dry_run: bool = False) -> bool:
    """Best-effort clone; False if git failed."""

    r = run_cmd(["git", "clone", url, str(dest)], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("git clone %s failed (%d)", url, r.returncode)
    return r.ok


def download(url: str, dest: Path, *, dry_run: bool = False) -> bool:
    r = run_cmd(["wget", "-q", "-O", str(dest), url], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Download of %s failed (%d)", url, r.returncode)
    return r.ok


def run_remote_script(
    url: str,
    workdir: Path,
    args: tuple[str, ...] = (),
    *,
    env: Optional[Mapping[str, str]] = None,
    dry_run: bool = False,
) -> int:
    """Fetch a shell script with curl and run it with sh; returns the exit code."""

    script = workdir / Path(url).name
    fetched = run_cmd(["curl", "-fsSL", "-o", str(script), url], check=False, dry_run=dry_run)
    if not fetched.ok:
        logger.warning("Fetching %s failed (%d)", url, fetched.returncode)
        return fetched.returncode
    r = run_cmd(["sh", str(script), *args], check=False, env=env, capture=False, dry_run=dry_run)
    return r.returncode
