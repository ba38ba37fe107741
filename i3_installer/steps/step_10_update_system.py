from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.pkg import apt_install, apt_update, apt_upgrade
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)


class UpdateSystemStep:
    step_id = "10_update_system"

    def run(self, ctx: InstallContext) -> StepResult:
        if ctx.options.only_config:
            return StepResult.skipped("Skipping system update (--only-config mode)")

        logger.info("Updating system...")
        if apt_update(dry_run=ctx.dry_run) != 0:
            return StepResult.fatal("apt-get update failed")
        if apt_upgrade(dry_run=ctx.dry_run) != 0:
            return StepResult.fatal("apt-get upgrade failed")

        result = StepResult(status=StepStatus.SUCCESS)
        # pv only drives the progress bar; its absence is fine.
        if apt_install(["pv"], dry_run=ctx.dry_run, quiet=True) != 0:
            result.warn("pv not installed; package groups will run without a progress bar")
        return result.finish("System updated")
