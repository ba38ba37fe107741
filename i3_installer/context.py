from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .lib.group_install import install_group
from .lib.manifests import PackageGroup, package_groups
from .lib.pkg import PackageBackend
from .preferences import Preferences
from .result import GroupOutcome
from .settings import RunOptions


@dataclass(frozen=True)
class InstallContext:
    """Read-only inputs shared by every step."""

    options: RunOptions
    prefs: Preferences
    backend: PackageBackend
    manifest: Dict[str, Any]
    workdir: Path
    interactive_tty: bool = field(default_factory=lambda: sys.stdout.isatty())

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    @property
    def progress(self) -> bool:
        return self.options.progress == "auto" and self.interactive_tty

    def groups(self) -> List[PackageGroup]:
        return package_groups(self.manifest, extra=self.options.extra_packages)

    def install(self, label: str, packages: Sequence[str]) -> GroupOutcome:
        return install_group(
            label,
            packages,
            backend=self.backend,
            empty_policy=self.options.empty_group_policy,
            progress=self.progress,
        )
