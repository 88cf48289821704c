from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Dirs:
    """Well-known locations inside a target root.

    Every path is derived from ``root``; callers pass a ``Dirs`` value around
    instead of mutating a process-wide root directory.
    """

    root: Path = Path("/")

    @classmethod
    def for_root(cls, root: str | Path | None) -> "Dirs":
        return cls(root=Path(root or "/"))

    @property
    def snapd_lib_dir(self) -> Path:
        return self.root / "var/lib/snapd"

    @property
    def state_file(self) -> Path:
        return self.snapd_lib_dir / "state.json"

    @property
    def blob_dir(self) -> Path:
        return self.snapd_lib_dir / "snaps"

    @property
    def seed_dir(self) -> Path:
        return self.snapd_lib_dir / "seed"

    @property
    def seed_snaps_dir(self) -> Path:
        return self.seed_dir / "snaps"

    @property
    def seed_file(self) -> Path:
        return self.seed_dir / "seed.yaml"

    @property
    def grub_dir(self) -> Path:
        return self.root / "boot/grub"

    @property
    def uboot_dir(self) -> Path:
        return self.root / "boot/uboot"

