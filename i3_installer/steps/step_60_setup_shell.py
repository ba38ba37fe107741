from __future__ import annotations

import logging
import os
from pathlib import Path

from ..context import InstallContext
from ..lib.assets import backup_file
from ..lib.command import run_cmd, which
from ..lib.env import current_user
from ..lib.group_install import require
from ..lib.net import git_clone, run_remote_script
from ..lib.templates import P10K, ZSHRC, write_template
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)

OH_MY_ZSH_INSTALLER = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"

ZSH_PLUGINS = {
    "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions",
    "zsh-syntax-highlighting": "https://github.com/zsh-users/zsh-syntax-highlighting",
    "zsh-completions": "https://github.com/zsh-users/zsh-completions",
    "k": "https://github.com/supercrabtree/k",
    "zsh-z": "https://github.com/agkozak/zsh-z",
}


def shell_registered(shells_text: str, shell_path: str) -> bool:
    return any(line.strip() == shell_path for line in shells_text.splitlines())


class SetupShellStep:
    step_id = "60_setup_shell"

    def _register_shell(self, ctx: InstallContext, zsh_path: str, shells: Path = Path("/etc/shells")) -> bool:
        current = shells.read_text(encoding="utf-8") if shells.exists() else ""
        if shell_registered(current, zsh_path):
            return True
        r = run_cmd(["sudo", "tee", "-a", str(shells)], check=False, input_text=zsh_path + "\n", dry_run=ctx.dry_run)
        return r.ok

    def _install_plugins(self, ctx: InstallContext, result: StepResult) -> None:
        zsh_custom = Path(os.environ.get("ZSH_CUSTOM") or ctx.options.home / ".oh-my-zsh" / "custom")
        if not zsh_custom.is_dir() and not ctx.dry_run:
            result.warn("Oh My Zsh directory not found, skipping plugins")
            return
        for name, url in ZSH_PLUGINS.items():
            dest = zsh_custom / "plugins" / name
            if dest.is_dir():
                continue
            if not git_clone(url, dest, dry_run=ctx.dry_run):
                result.warn(f"zsh plugin {name} could not be cloned")

    def run(self, ctx: InstallContext) -> StepResult:
        if ctx.options.only_config or not ctx.prefs.install_zsh:
            return StepResult.skipped("Skipping zsh/oh-my-zsh installation")

        result = StepResult(status=StepStatus.SUCCESS)
        home = ctx.options.home

        logger.info("Installing zsh and dependencies...")
        result.outcomes.append(
            require(ctx.install("Installing zsh", ["zsh", "curl", "git"]), step_id=self.step_id)
        )

        zsh_path = which("zsh") or ("/usr/bin/zsh" if ctx.dry_run else None)
        if not zsh_path:
            return StepResult.fatal("zsh was not installed correctly")

        if not self._register_shell(ctx, zsh_path):
            result.warn(f"Could not add {zsh_path} to /etc/shells")

        zshrc = home / ".zshrc"
        if zshrc.is_file():
            backup_file(zshrc, dry_run=ctx.dry_run)

        logger.info("Installing Oh My Zsh...")
        rc = run_remote_script(
            OH_MY_ZSH_INSTALLER,
            ctx.workdir,
            ("--unattended",),
            env={"RUNZSH": "no", "CHSH": "no"},
            dry_run=ctx.dry_run,
        )
        if rc != 0:
            result.warn(f"Oh My Zsh installer exited with {rc}")

        self._install_plugins(ctx, result)

        logger.info("Configuring custom .zshrc...")
        write_template(ZSHRC, zshrc, dry_run=ctx.dry_run)
        p10k = home / ".p10k.zsh"
        if not p10k.exists():
            write_template(P10K, p10k, dry_run=ctx.dry_run)

        logger.info("Setting zsh as default shell for future sessions...")
        chsh = run_cmd(["sudo", "chsh", "-s", zsh_path, current_user()], check=False, dry_run=ctx.dry_run)
        if not chsh.ok:
            result.warn("chsh failed; zsh is not the login shell")

        logger.info("zsh will be activated on your next login (or run: exec zsh)")
        return result.finish("zsh + oh-my-zsh installed")
