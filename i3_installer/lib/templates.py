from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

KITTY_CONF = "kitty.conf"
I3STATUS_CONF = "i3status.conf"
ZSHRC = "zshrc"
P10K = "p10k.zsh"
XORG_NVIDIA = "10-nvidia.conf"
CHECK_GPU = "check-gpu"


def template_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "templates"


def read_template(name: str) -> str:
    p = template_dir() / name
    if not p.is_file():
        raise FileNotFoundError(str(p))
    return p.read_text(encoding="utf-8")


def write_file(path: Path, contents: str, *, mode: Optional[int] = None, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    logger.info("Wrote %s", str(path))


def write_template(name: str, path: Path, *, mode: Optional[int] = None, dry_run: bool = False) -> None:
    write_file(path, read_template(name), mode=mode, dry_run=dry_run)
