from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.assets import backup_dir, copy_tree, make_executable, remove_tree
from ..lib.command import run_cmd
from ..lib.templates import CHECK_GPU, write_template
from ..preferences import ExistingConfig
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)


class ApplyConfigStep:
    step_id = "40_apply_config"

    def _clear_existing(self, ctx: InstallContext) -> None:
        config_dir = ctx.options.config_dir
        if not config_dir.is_dir():
            return
        choice = ctx.prefs.existing_config
        if choice == ExistingConfig.OVERWRITE:
            remove_tree(config_dir, dry_run=ctx.dry_run)
        else:
            # Appeared after preferences were resolved; keep a copy.
            backup_dir(config_dir, dry_run=ctx.dry_run)

    def run(self, ctx: InstallContext) -> StepResult:
        result = StepResult(status=StepStatus.SUCCESS)
        config_dir = ctx.options.config_dir

        self._clear_existing(ctx)

        logger.info("Setting up configuration...")
        if not ctx.dry_run:
            config_dir.mkdir(parents=True, exist_ok=True)

        bundled = ctx.options.assets_dir / "i3"
        if bundled.is_dir():
            try:
                copy_tree(str(bundled), str(config_dir), dry_run=ctx.dry_run)
            except OSError as e:
                result.warn(f"Some i3 config files couldn't be copied: {e}")
        else:
            result.warn(f"i3 config directory not found at {bundled}")

        if ctx.prefs.nvidia_selected and not ctx.options.only_config:
            write_template(CHECK_GPU, config_dir / "scripts" / "check-gpu", mode=0o755, dry_run=ctx.dry_run)

        make_executable(config_dir / "scripts", dry_run=ctx.dry_run)

        if not run_cmd(["xdg-user-dirs-update"], check=False, dry_run=ctx.dry_run).ok:
            result.warn("xdg-user-dirs-update failed")
        if not ctx.dry_run:
            (ctx.options.home / "Screenshots").mkdir(parents=True, exist_ok=True)

        return result.finish(f"Configuration written to {config_dir}")
