from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

from ..errors import CommandError, ExtractError, OpenError
from .command import run_cmd

logger = logging.getLogger(__name__)

SQUASHFS_MAGIC = b"hsqs"


class PackageContainer(Protocol):
    """A package artifact that files can be read from or unpacked out of."""

    path: Path

    def read_file(self, rel: str) -> bytes:
        ...

    def unpack(self, pattern: str, dest_dir: str | Path) -> None:
        ...


ContainerOpener = Callable[..., PackageContainer]


class SquashfsContainer:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read_file(self, rel: str) -> bytes:
        try:
            r = run_cmd(["unsquashfs", "-n", "-cat", str(self.path), rel])
        except CommandError as e:
            raise ExtractError(f"cannot read {rel!r} from {self.path}: {e.stderr.strip()}") from e
        return r.stdout

    def unpack(self, pattern: str, dest_dir: str | Path) -> None:
        # unsquashfs treats extract-file arguments as globs.
        dest = Path(dest_dir)
        dest.mkdir(parents=True, exist_ok=True)
        try:
            run_cmd(["unsquashfs", "-n", "-f", "-d", str(dest), str(self.path), pattern])
        except CommandError as e:
            raise ExtractError(f"cannot unpack {pattern!r} from {self.path}: {e.stderr.strip()}") from e


def open_container(path: str | Path) -> PackageContainer:
    p = Path(path)
    try:
        with p.open("rb") as f:
            magic = f.read(len(SQUASHFS_MAGIC))
    except OSError as e:
        raise OpenError(f"cannot open snap {str(p)!r}: {e}") from e
    if magic != SQUASHFS_MAGIC:
        raise OpenError(f"cannot open snap {str(p)!r}: not a squashfs image")
    return SquashfsContainer(p)
