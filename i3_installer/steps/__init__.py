from .step_10_update_system import UpdateSystemStep
from .step_20_install_nvidia import InstallNvidiaStep
from .step_30_install_packages import InstallPackagesStep
from .step_40_apply_config import ApplyConfigStep
from .step_50_install_extras import InstallExtrasStep
from .step_60_setup_shell import SetupShellStep
from .step_90_summary import SummaryStep

__all__ = [
    "UpdateSystemStep",
    "InstallNvidiaStep",
    "InstallPackagesStep",
    "ApplyConfigStep",
    "InstallExtrasStep",
    "SetupShellStep",
    "SummaryStep",
]
