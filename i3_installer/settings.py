from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .lib.env import Paths, default_assets_dir
from .lib.group_install import EmptyGroupPolicy

PROGRESS_MODES = {"auto", "never"}


@dataclass(frozen=True)
class Settings:
    """Optional YAML overrides, read once at start-up."""

    raw: Dict[str, Any] = field(default_factory=dict)

    def _path(self, key: str) -> Optional[Path]:
        value = self.raw.get(key)
        return Path(str(value)).expanduser() if value else None

    @property
    def config_dir(self) -> Optional[Path]:
        return self._path("config_dir")

    @property
    def assets_dir(self) -> Optional[Path]:
        return self._path("assets_dir")

    @property
    def log_path(self) -> Optional[Path]:
        return self._path("log_path")

    @property
    def state_path(self) -> Optional[Path]:
        return self._path("state_path")

    @property
    def empty_group_policy(self) -> EmptyGroupPolicy:
        value = str(self.raw.get("empty_group_policy") or "fail").strip().lower()
        try:
            return EmptyGroupPolicy(value)
        except ValueError:
            raise ValueError(f"empty_group_policy must be 'fail' or 'succeed', got {value!r}") from None

    @property
    def progress(self) -> str:
        value = str(self.raw.get("progress") or "auto").strip().lower()
        if value not in PROGRESS_MODES:
            raise ValueError(f"progress must be one of {sorted(PROGRESS_MODES)}, got {value!r}")
        return value

    @property
    def package_groups(self) -> Dict[str, List[str]]:
        groups = self.raw.get("package_groups") or {}
        if not isinstance(groups, dict):
            raise ValueError("package_groups must be a mapping of group -> list of packages")
        out: Dict[str, List[str]] = {}
        for key, pkgs in groups.items():
            if not isinstance(pkgs, list):
                raise ValueError(f"package_groups.{key} must be a list")
            out[str(key)] = [str(p).strip() for p in pkgs if str(p).strip()]
        return out


def load_settings(path: Optional[str]) -> Settings:
    if not path:
        return Settings()
    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(path)
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("settings file must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"{p.name}: invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")
    return Settings(raw=raw)


@dataclass(frozen=True)
class RunOptions:
    only_config: bool = False
    export_packages: bool = False
    non_interactive: bool = False
    dry_run: bool = False
    verbose: bool = False
    home: Path = field(default_factory=Path.home)
    config_dir: Path = field(default_factory=lambda: Path.home() / ".config" / "i3")
    assets_dir: Path = field(default_factory=default_assets_dir)
    log_path: Path = field(default_factory=lambda: Path.home() / "i3-install.log")
    state_path: Path = field(default_factory=lambda: Path.home() / ".local/state/i3-installer/state.json")
    empty_group_policy: EmptyGroupPolicy = EmptyGroupPolicy.FAIL
    progress: str = "auto"
    extra_packages: Dict[str, List[str]] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "only_config": self.only_config,
            "export_packages": self.export_packages,
            "non_interactive": self.non_interactive,
            "dry_run": self.dry_run,
            "verbose": self.verbose,
            "home": str(self.home),
            "config_dir": str(self.config_dir),
            "assets_dir": str(self.assets_dir),
            "log_path": str(self.log_path),
            "state_path": str(self.state_path),
            "empty_group_policy": self.empty_group_policy.value,
            "progress": self.progress,
        }


def build_options(
    settings: Settings,
    paths: Paths,
    *,
    only_config: bool = False,
    export_packages: bool = False,
    non_interactive: bool = False,
    dry_run: bool = False,
    verbose: bool = False,
    log_path: Optional[str] = None,
    state_path: Optional[str] = None,
) -> RunOptions:
    """CLI values win over the settings file, which wins over defaults."""

    return RunOptions(
        only_config=only_config,
        export_packages=export_packages,
        non_interactive=non_interactive,
        dry_run=dry_run,
        verbose=verbose,
        home=paths.home,
        config_dir=settings.config_dir or paths.config_dir,
        assets_dir=settings.assets_dir or default_assets_dir(),
        log_path=Path(log_path).expanduser() if log_path else (settings.log_path or paths.log_default),
        state_path=Path(state_path).expanduser() if state_path else (settings.state_path or paths.state_default),
        empty_group_policy=settings.empty_group_policy,
        progress=settings.progress,
        extra_packages=settings.package_groups,
    )
