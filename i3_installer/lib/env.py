from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    home: Path

    @property
    def config_dir(self) -> Path:
        return self.home / ".config" / "i3"

    @property
    def log_default(self) -> Path:
        return self.home / "i3-install.log"

    @property
    def state_default(self) -> Path:
        return self.home / ".local" / "state" / "i3-installer" / "state.json"


def home_dir() -> Path:
    return Path(os.environ.get("HOME") or Path.home())


def current_user() -> str:
    return os.environ.get("USER") or getpass.getuser()


def default_assets_dir() -> Path:
    """Bundled dotfiles shipped inside the package."""
    return Path(__file__).resolve().parents[1] / "assets"


PATHS = Paths(home=home_dir())
