from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml


@dataclass(frozen=True)
class PackageGroup:
    key: str
    label: str
    packages: Tuple[str, ...]


def _package_root() -> Path:
    # i3_installer/lib/manifests.py -> i3_installer
    return Path(__file__).resolve().parents[1]


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_packages_manifest(path: Optional[str] = None) -> Dict[str, Any]:
    p = Path(path) if path else _package_root() / "manifests" / "packages.yaml"
    return load_yaml(p)


def _str_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where} must be a list")
    return [str(v).strip() for v in value if str(v).strip()]


def package_groups(
    manifest: Mapping[str, Any],
    *,
    extra: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[PackageGroup]:
    """Groups in manifest order; `extra` appends packages to existing groups."""

    groups_cfg = manifest.get("package_groups") or {}
    if not isinstance(groups_cfg, dict):
        raise ValueError("package_groups must be a mapping")

    extra = extra or {}
    unknown = sorted(set(extra) - set(groups_cfg))
    if unknown:
        raise ValueError(f"Unknown package group(s): {', '.join(unknown)}")

    groups: List[PackageGroup] = []
    for key, obj in groups_cfg.items():
        obj = obj or {}
        pkgs = _str_list(obj.get("packages"), f"package_groups.{key}.packages")
        pkgs += [p for p in _str_list(list(extra.get(key) or []), f"package_groups.{key}") if p not in pkgs]
        groups.append(PackageGroup(key=str(key), label=str(obj.get("label") or key), packages=tuple(pkgs)))
    return groups


def alternatives_after(manifest: Mapping[str, Any], group_key: str) -> List[List[str]]:
    alts = (manifest.get("alternatives") or {}).get(group_key) or []
    return [_str_list(a, f"alternatives.{group_key}") for a in alts]


def package_list(manifest: Mapping[str, Any], key: str) -> List[str]:
    return _str_list(manifest.get(key), key)


def nvidia_packages(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    return dict(manifest.get("nvidia") or {})
