from __future__ import annotations

import logging
import shutil
import stat
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def copy_tree(src: str, dst: str, *, dry_run: bool = False) -> int:
    """Copy the contents of src into dst, merging; returns files copied."""

    s = Path(src)
    d = Path(dst)
    if not s.exists():
        raise FileNotFoundError(src)

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(s), str(d))
        return 0

    copied = 0
    d.mkdir(parents=True, exist_ok=True)
    for item in s.rglob("*"):
        rel = item.relative_to(s)
        out = d / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)
            copied += 1
    logger.info("Copied %d file(s) %s -> %s", copied, str(s), str(d))
    return copied


def backup_path(path: Path, *, suffix: str = ".bak", now: Optional[int] = None) -> Path:
    """<path><suffix>.<epoch>, e.g. ~/.config/i3.bak.1700000000."""
    stamp = int(time.time()) if now is None else now
    return path.with_name(f"{path.name}{suffix}.{stamp}")


def backup_dir(path: Path, *, dry_run: bool = False, now: Optional[int] = None) -> Path:
    dest = backup_path(path, now=now)
    if dry_run:
        logger.info("Would move %s -> %s", str(path), str(dest))
        return dest
    path.rename(dest)
    logger.info("Backed up %s -> %s", str(path), str(dest))
    return dest


def backup_file(path: Path, *, dry_run: bool = False, now: Optional[int] = None) -> Path:
    dest = backup_path(path, suffix=".backup", now=now)
    if dry_run:
        logger.info("Would copy %s -> %s", str(path), str(dest))
        return dest
    shutil.copy2(path, dest)
    logger.info("Backed up %s -> %s", str(path), str(dest))
    return dest


def remove_tree(path: Path, *, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would remove %s", str(path))
        return
    shutil.rmtree(path)
    logger.info("Removed %s", str(path))


def make_executable(root: Path, *, dry_run: bool = False) -> int:
    """chmod +x every regular file below root."""

    if not root.is_dir():
        return 0
    count = 0
    for item in root.rglob("*"):
        if not item.is_file():
            continue
        count += 1
        if dry_run:
            continue
        mode = item.stat().st_mode
        item.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return count
