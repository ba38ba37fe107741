from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict

from .errors import InstallCancelled
from .settings import RunOptions

logger = logging.getLogger(__name__)

Ask = Callable[[str], bool]


class ExistingConfig(str, enum.Enum):
    ABSENT = "absent"
    BACKUP = "backup"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class Preferences:
    """Everything the operator decides, fixed before any step runs."""

    install_i3: bool = True
    has_nvidia: bool = False
    install_nvidia: bool = False
    install_cuda: bool = False
    install_optional_tools: bool = False
    install_zsh: bool = False
    existing_config: ExistingConfig = ExistingConfig.ABSENT

    @property
    def nvidia_selected(self) -> bool:
        return self.has_nvidia and self.install_nvidia

    def as_dict(self) -> Dict[str, Any]:
        return {
            "install_i3": self.install_i3,
            "has_nvidia": self.has_nvidia,
            "install_nvidia": self.install_nvidia,
            "install_cuda": self.install_cuda,
            "install_optional_tools": self.install_optional_tools,
            "install_zsh": self.install_zsh,
            "existing_config": self.existing_config.value,
        }


def _existing_config_choice(options: RunOptions, ask: Ask, config_pending: bool) -> ExistingConfig:
    # Nothing to decide if the config step will not run this time.
    if not config_pending or not options.config_dir.is_dir():
        return ExistingConfig.ABSENT
    if options.non_interactive:
        return ExistingConfig.BACKUP
    if ask("Found existing i3 config. Backup?"):
        return ExistingConfig.BACKUP
    if ask("Overwrite without backup?"):
        return ExistingConfig.OVERWRITE
    raise InstallCancelled("Installation cancelled", exit_code=1)


def resolve_preferences(
    options: RunOptions,
    *,
    has_nvidia: bool,
    ask: Ask,
    config_pending: bool = True,
) -> Preferences:
    """Resolve the preference set once.

    config_pending is False when the config step is already done (resumed
    run), in which case the existing config dir is left alone.

    Non-interactive runs take fixed defaults: NVIDIA driver yes (if present),
    CUDA no, optional tools yes, zsh yes, existing config backed up.
    """

    if options.non_interactive:
        prefs = Preferences(
            install_i3=True,
            has_nvidia=has_nvidia,
            install_nvidia=has_nvidia,
            install_cuda=False,
            install_optional_tools=True,
            install_zsh=True,
            existing_config=_existing_config_choice(options, ask, config_pending),
        )
        logger.info("Preferences (non-interactive): %s", prefs.as_dict())
        return prefs

    if not ask("Install i3?"):
        raise InstallCancelled()

    install_nvidia = False
    install_cuda = False
    if has_nvidia:
        logger.info("NVIDIA GPU detected!")
        install_nvidia = ask("Install NVIDIA drivers?")
        if install_nvidia:
            install_cuda = ask("Install CUDA toolkit for GPU computing?")

    install_optional_tools = ask("Install optional tools (browsers, editors, etc)?")
    install_zsh = ask("Install and configure zsh + oh-my-zsh as default shell?")

    prefs = Preferences(
        install_i3=True,
        has_nvidia=has_nvidia,
        install_nvidia=install_nvidia,
        install_cuda=install_cuda,
        install_optional_tools=install_optional_tools,
        install_zsh=install_zsh,
        existing_config=_existing_config_choice(options, ask, config_pending),
    )
    logger.info("Preferences: %s", prefs.as_dict())
    return prefs
