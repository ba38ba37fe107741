from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .command import run_cmd, which

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Distro:
    id: str
    codename: str
    version: str = ""

    @property
    def is_ubuntu(self) -> bool:
        return self.id == "ubuntu"

    @property
    def cuda_repo_slug(self) -> str:
        """NVIDIA repo directory name, e.g. ubuntu2204."""
        return f"{self.id}{self.version.replace('.', '')}"


UNKNOWN = Distro(id="unknown", codename="unknown")


def parse_os_release(text: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        values[key.strip()] = raw.strip().strip("\"'")
    return values


def detect_distro(*, os_release: str = "/etc/os-release") -> Distro:
    """lsb_release first, then /etc/os-release."""

    if which("lsb_release"):
        dist_id = run_cmd(["lsb_release", "-is"], check=False)
        codename = run_cmd(["lsb_release", "-cs"], check=False)
        release = run_cmd(["lsb_release", "-rs"], check=False)
        if dist_id.ok and codename.ok and dist_id.stdout.strip():
            d = Distro(
                id=dist_id.stdout.strip().lower(),
                codename=codename.stdout.strip().lower(),
                version=release.stdout.strip() if release.ok else "",
            )
            logger.info("Distribution: %s %s", d.id, d.codename)
            return d

    p = Path(os_release)
    if p.exists():
        values = parse_os_release(p.read_text(encoding="utf-8", errors="ignore"))
        d = Distro(
            id=(values.get("ID") or "unknown").lower(),
            codename=(values.get("VERSION_CODENAME") or "unknown").lower(),
            version=values.get("VERSION_ID") or "",
        )
        logger.info("Distribution (os-release): %s %s", d.id, d.codename)
        return d

    logger.warning("Could not determine distribution")
    return UNKNOWN
