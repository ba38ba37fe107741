from pathlib import Path
from typing import List, Optional, Sequence, Set

import pytest

from i3_installer.context import InstallContext
from i3_installer.lib.manifests import load_packages_manifest
from i3_installer.preferences import Preferences
from i3_installer.settings import RunOptions


class FakeBackend:
    """In-memory package database; install() marks packages present."""

    def __init__(self, installed: Optional[Set[str]] = None, returncode: int = 0, broken: Optional[Set[str]] = None) -> None:
        self.installed = set(installed or ())
        self.returncode = returncode
        # Packages apt "installs" with exit 0 but that never show up in dpkg.
        self.broken = set(broken or ())
        self.queries: List[str] = []
        self.updates = 0
        self.install_calls: List[List[str]] = []
        self.progress_flags: List[bool] = []

    def is_installed(self, package: str) -> bool:
        self.queries.append(package)
        return package in self.installed

    def update(self) -> int:
        self.updates += 1
        return 0

    def install(self, packages: Sequence[str], *, label: str, progress: bool) -> int:
        self.install_calls.append(list(packages))
        self.progress_flags.append(progress)
        if self.returncode == 0:
            self.installed.update(p for p in packages if p not in self.broken)
        return self.returncode


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def options(tmp_path: Path) -> RunOptions:
    home = tmp_path / "home"
    home.mkdir()
    return RunOptions(
        dry_run=True,
        home=home,
        config_dir=home / ".config" / "i3",
        assets_dir=tmp_path / "assets",
        log_path=tmp_path / "install.log",
        state_path=tmp_path / "state.json",
    )


@pytest.fixture
def make_ctx(options: RunOptions, backend: FakeBackend, tmp_path: Path):
    def _make(opts: Optional[RunOptions] = None, prefs: Optional[Preferences] = None, be=None) -> InstallContext:
        workdir = tmp_path / "work"
        workdir.mkdir(exist_ok=True)
        return InstallContext(
            options=opts or options,
            prefs=prefs or Preferences(),
            backend=be or backend,
            manifest=load_packages_manifest(),
            workdir=workdir,
            interactive_tty=False,
        )

    return _make
