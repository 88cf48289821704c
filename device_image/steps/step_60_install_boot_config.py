from __future__ import annotations

from ..lib.bootloader import install_boot_config
from ..pipeline import BootstrapCtx


class InstallBootConfigStep:
    step_id = "60_install_boot_config"

    def run(self, ctx: BootstrapCtx) -> None:
        install_boot_config(ctx.options.gadget_unpack_dir, ctx.dirs)
