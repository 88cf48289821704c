from __future__ import annotations

import logging
from pathlib import Path

from ..errors import ExtractError, ImageError, OpenError
from .bootloader import Bootloader
from .container import ContainerOpener, PackageContainer, open_container
from .snap import PackageInfo

logger = logging.getLogger(__name__)

# files the bootloader needs outside the kernel snap
KERNEL_ASSETS = ("kernel.img", "initrd.img", "dtbs/*")

# bootloaders that can read the kernel straight out of the snap
LOOP_BOOTING = {"grub"}


def kernel_assets_dir(bootloader: Bootloader, info: PackageInfo) -> Path:
    return bootloader.dir / info.blob_filename


def extract_kernel_assets(info: PackageInfo, container: PackageContainer, bootloader: Bootloader) -> None:
    if bootloader.name in LOOP_BOOTING:
        logger.info("%s boots %s directly; no kernel assets to extract", bootloader.name, info.blob_filename)
        return

    dst = kernel_assets_dir(bootloader, info)
    try:
        dst.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExtractError(f"cannot create kernel asset dir {dst}: {e}") from e

    for pattern in KERNEL_ASSETS:
        container.unpack(pattern, dst)
    logger.info("Extracted kernel assets of %s into %s", info.name, str(dst))


def extract_kernel_assets_from_file(
    path: str | Path,
    info: PackageInfo,
    bootloader: Bootloader,
    opener: ContainerOpener = open_container,
) -> None:
    try:
        container = opener(path)
    except OpenError:
        raise
    except (OSError, ImageError) as e:
        raise OpenError(f"cannot open kernel snap {str(path)!r}: {e}") from e

    extract_kernel_assets(info, container, bootloader)
