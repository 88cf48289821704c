from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Protocol, Tuple, Type

from ..errors import BootConfigNotFoundError, BootloaderNotFoundError, BootVarError
from .env import Dirs
from .grubenv import GrubEnv
from .uenv import UbootEnv

logger = logging.getLogger(__name__)


class Bootloader(Protocol):
    name: str

    @property
    def dir(self) -> Path:
        ...

    @property
    def config_file(self) -> Path:
        ...

    def get_boot_var(self, name: str) -> str:
        ...

    def set_boot_var(self, name: str, value: str) -> None:
        ...


class Grub:
    name = "grub"
    # boot config shipped by the gadget
    gadget_file = "grub.conf"

    def __init__(self, dirs: Dirs) -> None:
        self.dirs = dirs

    @property
    def dir(self) -> Path:
        return self.dirs.grub_dir

    @property
    def config_file(self) -> Path:
        return self.dir / "grub.cfg"

    @property
    def env_file(self) -> Path:
        return self.dir / "grubenv"

    def get_boot_var(self, name: str) -> str:
        try:
            return GrubEnv(self.env_file).load().get(name)
        except (OSError, ValueError) as e:
            raise BootVarError(f"cannot read boot variable {name!r} from {self.env_file}: {e}") from e

    def set_boot_var(self, name: str, value: str) -> None:
        try:
            env = GrubEnv(self.env_file).load()
            env.set(name, value)
            env.save()
        except (OSError, ValueError) as e:
            raise BootVarError(f"cannot set boot variable {name!r} in {self.env_file}: {e}") from e
        logger.info("grub: %s=%s", name, value)


class Uboot:
    name = "u-boot"
    gadget_file = "uboot.conf"

    def __init__(self, dirs: Dirs) -> None:
        self.dirs = dirs

    @property
    def dir(self) -> Path:
        return self.dirs.uboot_dir

    @property
    def config_file(self) -> Path:
        return self.dir / "uboot.env"

    @property
    def env_file(self) -> Path:
        # the gadget-provided config is the environment image itself
        return self.config_file

    def get_boot_var(self, name: str) -> str:
        try:
            return UbootEnv(self.env_file).load().get(name)
        except (OSError, ValueError) as e:
            raise BootVarError(f"cannot read boot variable {name!r} from {self.env_file}: {e}") from e

    def set_boot_var(self, name: str, value: str) -> None:
        try:
            env = UbootEnv(self.env_file).load()
            env.set(name, value)
            env.save()
        except (OSError, ValueError) as e:
            raise BootVarError(f"cannot set boot variable {name!r} in {self.env_file}: {e}") from e
        logger.info("u-boot: %s=%s", name, value)


# Probe order matters: one bootloader family per image.
BOOTLOADERS: Tuple[Type, ...] = (Grub, Uboot)


def find_bootloader(dirs: Dirs) -> Bootloader:
    """Return the bootloader whose config file is installed under ``dirs.root``."""

    for cls in BOOTLOADERS:
        bl = cls(dirs)
        if bl.config_file.exists():
            return bl
    raise BootloaderNotFoundError(f"cannot determine bootloader under {dirs.root}")


def install_boot_config(gadget_dir: str | Path, dirs: Dirs) -> Bootloader:
    """Copy the gadget's bootloader config to its canonical path in the target."""

    gd = Path(gadget_dir)
    searched: List[str] = []
    for cls in BOOTLOADERS:
        bl = cls(dirs)
        src = gd / cls.gadget_file
        searched.append(cls.gadget_file)
        if not src.is_file():
            continue
        dst = bl.config_file
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        logger.info("Installed %s boot config: %s -> %s", bl.name, str(src), str(dst))
        return bl

    logger.error("No boot config in %s (looked for %s)", str(gd), ", ".join(searched))
    raise BootConfigNotFoundError(str(gd))
