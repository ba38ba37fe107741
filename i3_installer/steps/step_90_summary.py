from __future__ import annotations

import logging

from ..context import InstallContext
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)


def next_steps(ctx: InstallContext) -> list[str]:
    lines = [
        "Log out and select 'i3' from your display manager",
        "Press Super+Z for keybindings",
    ]
    if ctx.prefs.nvidia_selected and not ctx.options.only_config:
        lines += [
            "Run 'check-gpu' to verify GPU acceleration",
            "REBOOT IS REQUIRED for NVIDIA drivers",
        ]
    else:
        lines.append("Enjoy your new i3 setup!")
    return lines


class SummaryStep:
    step_id = "90_summary"
    always_run = True

    def run(self, ctx: InstallContext) -> StepResult:
        if ctx.prefs.nvidia_selected and not ctx.options.only_config:
            logger.info("NVIDIA driver installation complete. Useful commands:")
            logger.info("  nvidia-smi       - Check GPU status and utilization")
            logger.info("  nvidia-settings  - Configure NVIDIA settings")
            logger.info("  nvtop            - GPU monitoring (like htop for GPU)")
            logger.info("  check-gpu        - Check GPU acceleration status")

        logger.info("Installation complete! Next steps:")
        for n, line in enumerate(next_steps(ctx), start=1):
            logger.info("%d. %s", n, line)
        logger.info("Installation log saved to: %s", str(ctx.options.log_path))
        return StepResult(status=StepStatus.SUCCESS, message="Summary printed")
