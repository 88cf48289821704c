from __future__ import annotations

import logging

from .bootloader import Bootloader

logger = logging.getLogger(__name__)

MODE = "snap_mode"
KERNEL = "snap_kernel"
CORE = "snap_core"
TRY_KERNEL = "snap_try_kernel"
TRY_CORE = "snap_try_core"

MODE_TRYING = "trying"

# try-variable -> the stable variable it is promoted into
PROMOTIONS = (
    (TRY_KERNEL, KERNEL),
    (TRY_CORE, CORE),
)


def set_initial(bootloader: Bootloader, *, kernel: str, core: str) -> None:
    """Point a freshly bootstrapped image at its kernel and core.

    Nothing has booted yet so there is nothing to confirm; the stable
    variables are written directly.
    """

    bootloader.set_boot_var(KERNEL, kernel)
    bootloader.set_boot_var(CORE, core)
    logger.info("Initial boot variables set (kernel=%s core=%s)", kernel, core)


def is_trying(bootloader: Bootloader) -> bool:
    return bootloader.get_boot_var(MODE) == MODE_TRYING


def mark_boot_successful(bootloader: Bootloader) -> bool:
    """Confirm a pending kernel/core swap.

    In trying mode every set try-variable is promoted to its stable slot, then
    mode and both try-variables are cleared. Outside trying mode nothing
    changes. Returns True if a pending swap was confirmed.
    """

    if not is_trying(bootloader):
        logger.info("Boot already confirmed (%s is not %r); nothing to do", MODE, MODE_TRYING)
        return False

    for try_var, stable_var in PROMOTIONS:
        value = bootloader.get_boot_var(try_var)
        if value:
            bootloader.set_boot_var(stable_var, value)

    bootloader.set_boot_var(MODE, "")
    for try_var, _ in PROMOTIONS:
        bootloader.set_boot_var(try_var, "")

    logger.info(
        "Boot marked successful (kernel=%s core=%s)",
        bootloader.get_boot_var(KERNEL),
        bootloader.get_boot_var(CORE),
    )
    return True
