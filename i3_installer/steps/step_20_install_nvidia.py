from __future__ import annotations

import logging
from pathlib import Path

from ..context import InstallContext
from ..lib.command import run_cmd, which
from ..lib.distro import Distro, detect_distro
from ..lib.hwdetect import recommended_nvidia_driver
from ..lib.manifests import nvidia_packages
from ..lib.net import download
from ..lib.pkg import apt_install, apt_update
from ..lib.templates import XORG_NVIDIA, read_template
from ..result import StepResult, StepStatus

logger = logging.getLogger(__name__)

CUDA_KEYRING = "cuda-keyring_1.1-1_all.deb"
CUDA_REPO_URL = "https://developer.download.nvidia.com/compute/cuda/repos/{slug}/x86_64/{keyring}"
XORG_CONF_PATH = "/etc/X11/xorg.conf.d/10-nvidia.conf"


def cuda_keyring_url(distro: Distro) -> str:
    return CUDA_REPO_URL.format(slug=distro.cuda_repo_slug, keyring=CUDA_KEYRING)


class InstallNvidiaStep:
    step_id = "20_install_nvidia"

    def _add_ubuntu_ppa(self, ctx: InstallContext) -> bool:
        logger.info("Adding NVIDIA repository...")
        if apt_install(["software-properties-common"], dry_run=ctx.dry_run) != 0:
            return False
        r = run_cmd(
            ["sudo", "add-apt-repository", "-y", "ppa:graphics-drivers/ppa"],
            check=False,
            capture=False,
            dry_run=ctx.dry_run,
        )
        return r.ok and apt_update(dry_run=ctx.dry_run) == 0

    def _install_driver(self, ctx: InstallContext) -> bool:
        pkgs = nvidia_packages(ctx.manifest)
        logger.info("Finding recommended NVIDIA driver...")
        if which("ubuntu-drivers"):
            driver = recommended_nvidia_driver(dry_run=ctx.dry_run)
            if driver:
                logger.info("Installing recommended driver: %s", driver)
            else:
                driver = str(pkgs.get("fallback_driver") or "nvidia-driver-535")
                logger.info("No recommendation; installing %s", driver)
            return apt_install([driver], dry_run=ctx.dry_run) == 0
        debian = [str(p) for p in pkgs.get("debian_driver") or ["nvidia-driver", "firmware-misc-nonfree"]]
        return apt_install(debian, dry_run=ctx.dry_run) == 0

    def _install_cuda(self, ctx: InstallContext, distro: Distro) -> bool:
        pkgs = nvidia_packages(ctx.manifest)
        logger.info("Installing CUDA toolkit...")
        if not distro.is_ubuntu:
            return apt_install([str(pkgs.get("cuda_debian") or "nvidia-cuda-toolkit")], dry_run=ctx.dry_run) == 0

        keyring = ctx.workdir / CUDA_KEYRING
        if not download(cuda_keyring_url(distro), keyring, dry_run=ctx.dry_run):
            return False
        if not run_cmd(["sudo", "dpkg", "-i", str(keyring)], check=False, dry_run=ctx.dry_run).ok:
            return False
        if apt_update(dry_run=ctx.dry_run) != 0:
            return False
        return apt_install([str(pkgs.get("cuda_ubuntu") or "cuda-toolkit")], dry_run=ctx.dry_run) == 0

    def _write_xorg_conf(self, ctx: InstallContext) -> bool:
        logger.info("Creating Xorg configuration for NVIDIA...")
        if not run_cmd(["sudo", "mkdir", "-p", str(Path(XORG_CONF_PATH).parent)], check=False, dry_run=ctx.dry_run).ok:
            return False
        r = run_cmd(
            ["sudo", "tee", XORG_CONF_PATH],
            check=False,
            input_text=read_template(XORG_NVIDIA),
            dry_run=ctx.dry_run,
        )
        return r.ok

    def run(self, ctx: InstallContext) -> StepResult:
        if ctx.options.only_config:
            return StepResult.skipped("--only-config mode")
        if not ctx.prefs.nvidia_selected:
            return StepResult.skipped("No NVIDIA GPU detected or NVIDIA installation skipped")

        logger.info("Installing NVIDIA drivers...")
        distro = detect_distro()
        result = StepResult(status=StepStatus.SUCCESS)

        if distro.is_ubuntu and not self._add_ubuntu_ppa(ctx):
            return StepResult.fatal("Could not add the graphics-drivers PPA")

        if not self._install_driver(ctx):
            return StepResult.fatal("NVIDIA driver installation failed")

        if ctx.prefs.install_cuda and not self._install_cuda(ctx, distro):
            return StepResult.fatal("CUDA toolkit installation failed")

        logger.info("Installing GPU monitoring tools...")
        monitoring = [str(p) for p in nvidia_packages(ctx.manifest).get("monitoring") or []]
        if apt_install(monitoring, dry_run=ctx.dry_run) != 0:
            result.warn("GPU monitoring tools failed to install")

        if not self._write_xorg_conf(ctx):
            return StepResult.fatal(f"Could not write {XORG_CONF_PATH}")

        logger.info("NVIDIA drivers installed! A reboot is required for changes to take effect.")
        return result.finish(f"NVIDIA stack installed ({distro.id} {distro.codename})")
