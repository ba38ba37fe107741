from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.manifests import alternatives_after, package_list
from ..lib.pkg import apt_install_any, systemctl_enable
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "30_install_packages"

    def run(self, ctx: InstallContext) -> StepResult:
        if ctx.options.only_config:
            return StepResult.skipped("Skipping package installation (--only-config mode)")

        result = StepResult(status=StepStatus.SUCCESS)

        for group in ctx.groups():
            outcome = ctx.install(group.label, group.packages)
            result.outcomes.append(outcome)
            if not outcome.ok:
                result.status = StepStatus.FATAL
                result.message = f"Failed to install {group.label}"
                return result

            # Names that differ between Debian and Ubuntu: take whichever exists.
            for alternatives in alternatives_after(ctx.manifest, group.key):
                if apt_install_any(alternatives, dry_run=ctx.dry_run) is None:
                    result.warn(f"{'/'.join(alternatives)} not available, skipping")

        services = package_list(ctx.manifest, "services")
        if services and systemctl_enable(services, dry_run=ctx.dry_run) != 0:
            return StepResult.fatal(f"Could not enable {', '.join(services)}")

        installed = sum(o.confirmed for o in result.outcomes)
        return result.finish(f"{len(result.outcomes)} package groups done, {installed} packages newly installed")
