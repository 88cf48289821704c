from .step_10_check_target import CheckTargetStep
from .step_20_resolve_model import ResolveModelStep
from .step_30_create_dirs import CreateDirsStep
from .step_40_fetch_snaps import FetchSnapsStep
from .step_50_write_seed import WriteSeedStep
from .step_60_install_boot_config import InstallBootConfigStep
from .step_70_set_boot_vars import SetBootVarsStep

__all__ = [
    "CheckTargetStep",
    "ResolveModelStep",
    "CreateDirsStep",
    "FetchSnapsStep",
    "WriteSeedStep",
    "InstallBootConfigStep",
    "SetBootVarsStep",
]
