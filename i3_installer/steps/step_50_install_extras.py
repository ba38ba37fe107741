from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..context import InstallContext
from ..lib.assets import copy_tree
from ..lib.command import run_cmd, which
from ..lib.group_install import require, tolerate
from ..lib.manifests import package_list
from ..lib.net import git_clone
from ..lib.pkg import apt_install, apt_update, systemctl_enable
from ..lib.templates import I3STATUS_CONF, KITTY_CONF, write_template
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)

NVIM_CONFIG_REPO = "https://github.com/owhska/nvim"
TMUX_CONFIG_REPO = "https://github.com/owhska/tmux"
ST_REPO = "https://git.suckless.org/st"


class InstallExtrasStep:
    step_id = "50_install_extras"

    def _clone_config(self, ctx: InstallContext, url: str, dest: Path) -> None:
        if dest.is_dir():
            logger.info("%s already present", str(dest))
            return
        if not git_clone(url, dest, dry_run=ctx.dry_run) and not ctx.dry_run:
            dest.mkdir(parents=True, exist_ok=True)

    def _install_emacs_config(self, ctx: InstallContext, result: StepResult) -> None:
        assets = ctx.options.assets_dir
        for candidate in (assets / "emacs" / ".emacs", assets / ".emacs"):
            if candidate.is_file():
                if not ctx.dry_run:
                    try:
                        shutil.copy2(candidate, ctx.options.home / ".emacs")
                    except OSError as e:
                        result.warn(f".emacs couldn't be copied: {e}")
                        return
                logger.info("Emacs config installed!")
                return
        result.warn(".emacs file not found")

    def _install_st(self, ctx: InstallContext) -> bool:
        if apt_install(["st"], dry_run=ctx.dry_run, quiet=True) == 0:
            return True
        src = ctx.workdir / "st"
        if not git_clone(ST_REPO, src, dry_run=ctx.dry_run):
            return False
        return run_cmd(["sudo", "make", "install"], check=False, cwd=str(src), dry_run=ctx.dry_run).ok

    def _install_wallpapers(self, ctx: InstallContext, result: StepResult) -> None:
        # The bundled i3 config points at <config_dir>/i3/wallpaper.
        target = ctx.options.config_dir / "i3" / "wallpaper"
        if not ctx.dry_run:
            target.mkdir(parents=True, exist_ok=True)
        source = ctx.options.assets_dir / "wallpaper"
        if not source.is_dir():
            result.warn("wallpapers directory not found")
            return
        try:
            copy_tree(str(source), str(target), dry_run=ctx.dry_run)
        except OSError as e:
            result.warn(f"Some wallpapers couldn't be copied: {e}")
            return
        if (target / "wall.jpg").is_file():
            logger.info("Wallpaper 'wall.jpg' found and set as default")
        else:
            logger.info("wall.jpg not found in wallpapers directory")

    def run(self, ctx: InstallContext) -> StepResult:
        if ctx.options.only_config:
            return StepResult.skipped("Skipping external tool installation (--only-config mode)")

        result = StepResult(status=StepStatus.SUCCESS)
        home = ctx.options.home

        result.outcomes.append(tolerate(ctx.install("Installing picom", ["picom"]), result.warnings))

        if which("kitty"):
            logger.info("Kitty already installed")
        else:
            apt_update(dry_run=ctx.dry_run)
            result.outcomes.append(tolerate(ctx.install("Installing kitty", ["kitty"]), result.warnings))
        write_template(KITTY_CONF, home / ".config" / "kitty" / "kitty.conf", dry_run=ctx.dry_run)

        self._clone_config(ctx, NVIM_CONFIG_REPO, home / ".config" / "nvim")
        self._clone_config(ctx, TMUX_CONFIG_REPO, home / ".config" / "tmux")
        self._install_emacs_config(ctx, result)

        logger.info("Installing st terminal...")
        if not self._install_st(ctx):
            result.warn("st terminal installation failed")

        logger.info("Installing themes...")
        if apt_install(package_list(ctx.manifest, "themes"), dry_run=ctx.dry_run, quiet=True) != 0:
            result.warn("themes installation failed")

        self._install_wallpapers(ctx, result)

        result.outcomes.append(require(ctx.install("Installing lightdm", ["lightdm"]), step_id=self.step_id))
        if systemctl_enable(["lightdm"], dry_run=ctx.dry_run) != 0:
            return StepResult.fatal("Could not enable lightdm")

        status_conf = ctx.options.config_dir / I3STATUS_CONF
        if not status_conf.exists():
            logger.info("Creating i3status configuration...")
            write_template(I3STATUS_CONF, status_conf, dry_run=ctx.dry_run)

        if ctx.prefs.install_optional_tools:
            logger.info("Installing optional tools...")
            optional = package_list(ctx.manifest, "optional_tools")
            if apt_install(optional, dry_run=ctx.dry_run, quiet=True) != 0:
                result.warn("Some optional tools failed to install")

        return result.finish("Extras installed")
