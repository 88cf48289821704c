from __future__ import annotations

import logging

from ..errors import ImageError
from ..lib.boot import extract_kernel_assets_from_file
from ..lib.bootloader import find_bootloader
from ..lib.bootvars import set_initial
from ..lib.snap import PackageType
from ..pipeline import BootstrapCtx

logger = logging.getLogger(__name__)


class SetBootVarsStep:
    """Point the bootloader at the kernel/core blobs for the first boot.

    Nothing is mounted yet; the boot variables name the blobs themselves.
    """

    step_id = "70_set_boot_vars"

    def run(self, ctx: BootstrapCtx) -> None:
        bootloader = ctx.bootloader or find_bootloader(ctx.dirs)

        kernel = core = None
        for blob, info in sorted(ctx.boot_blobs.items()):
            if info.type == PackageType.KERNEL:
                extract_kernel_assets_from_file(blob, info, bootloader, ctx.open_container)
                kernel = blob.name
            elif info.type == PackageType.OS:
                core = blob.name
            else:
                logger.warning("Ignoring %s: type %s is neither kernel nor os", blob.name, info.type.value)

        if not kernel or not core:
            raise ImageError(
                f"internal error: cannot find core/kernel snap (kernel={kernel!r} core={core!r})"
            )

        set_initial(bootloader, kernel=kernel, core=core)
