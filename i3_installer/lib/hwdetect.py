from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .command import run_cmd, which

logger = logging.getLogger(__name__)

_GPU_VENDOR_MAP = {
    "0x8086": "intel",
    "0x1002": "amd",
    "0x10de": "nvidia",
}

_DISPLAY_CLASSES = ("vga", "3d", "display")


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except OSError:
        return None


def display_lines(lspci_output: str) -> List[str]:
    """lspci lines describing display controllers."""
    return [ln for ln in lspci_output.splitlines() if any(x in ln.lower() for x in _DISPLAY_CLASSES)]


def vendors_from_lspci(lspci_output: str) -> List[str]:
    vendors: List[str] = []
    for ln in display_lines(lspci_output):
        low = ln.lower()
        if "nvidia" in low:
            vendor = "nvidia"
        elif "advanced micro devices" in low or "amd/ati" in low or "radeon" in low:
            vendor = "amd"
        elif "intel" in low:
            vendor = "intel"
        else:
            continue
        if vendor not in vendors:
            vendors.append(vendor)
    return vendors


def _drm_vendors(drm: Path) -> List[str]:
    cards = sorted([p for p in drm.glob("card[0-9]*") if p.is_dir()]) if drm.exists() else []
    vendors: List[str] = []
    for card in cards:
        vendor_id = _read_text(card / "device" / "vendor")
        if not vendor_id:
            continue
        vendor = _GPU_VENDOR_MAP.get(vendor_id.lower(), "unknown")
        if vendor not in vendors:
            vendors.append(vendor)
    return vendors


def detect_gpu(*, drm_root: str = "/sys/class/drm") -> Dict[str, Any]:
    """Best-effort GPU detection.

    Both /sys/class/drm and lspci are consulted; either can report NVIDIA.
    """

    gpu: Dict[str, Any] = {"vendors": [], "raw": {}}

    for vendor in _drm_vendors(Path(drm_root)):
        gpu["vendors"].append(vendor)

    if which("lspci"):
        r = run_cmd(["lspci"], check=False)
        if r.ok and r.stdout:
            gpu["raw"]["lspci_display"] = display_lines(r.stdout)
            # Also catch NVIDIA devices not classed as display (e.g. 3D controllers on Optimus).
            if "nvidia" in r.stdout.lower() and "nvidia" not in gpu["vendors"]:
                gpu["vendors"].append("nvidia")
            for vendor in vendors_from_lspci(r.stdout):
                if vendor not in gpu["vendors"]:
                    gpu["vendors"].append(vendor)
    else:
        logger.info("lspci not available; relying on /sys/class/drm only")

    gpu["has_nvidia"] = "nvidia" in gpu["vendors"]
    logger.info("GPU vendors: %s", ",".join(gpu["vendors"]) or "none")
    return gpu


def parse_recommended_driver(ubuntu_drivers_output: str) -> Optional[str]:
    """Driver package from the `recommended` line of `ubuntu-drivers devices`."""

    for ln in ubuntu_drivers_output.splitlines():
        if "recommended" in ln:
            fields = ln.split()
            if len(fields) >= 3:
                return fields[2]
    return None


def recommended_nvidia_driver(*, dry_run: bool = False) -> Optional[str]:
    r = run_cmd(["ubuntu-drivers", "devices"], check=False, dry_run=dry_run)
    if not r.ok:
        return None
    return parse_recommended_driver(r.stdout)
