from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Tuple

from ..errors import CopyError, DownloadError, ImageError, OpenError, PackageNotFoundError
from .container import ContainerOpener, open_container
from .fileutil import atomic_copy
from .snap import SIDELOAD_REVISION, UNSET_REVISION, PackageInfo, info_from_snap_yaml
from .store import (
    DEFAULT_CHANNEL,
    LoggingProgress,
    PackageSource,
    StoreFactory,
    normalize_store_id,
)

logger = logging.getLogger(__name__)


def _no_store(store_id: str, architecture: str) -> PackageSource:
    raise ImageError("no package source configured (pass --mirror or a store factory)")


@dataclass(frozen=True)
class AcquireOptions:
    target_dir: str = ""
    channel: str = DEFAULT_CHANNEL
    store_id: str = ""
    architecture: str = ""
    store_factory: StoreFactory = _no_store
    open_container: ContainerOpener = field(default=open_container)

    @property
    def normalized_store_id(self) -> str:
        return normalize_store_id(self.store_id)

    def resolved_target_dir(self) -> Path:
        return Path(self.target_dir) if self.target_dir else Path.cwd()


class Acquirer(Protocol):
    def acquire(self, name: str, opts: AcquireOptions) -> Tuple[Path, PackageInfo]:
        ...


def _copy_into(src: str | Path, dst: Path, *, name: str) -> None:
    try:
        atomic_copy(src, dst, mode=0o644)
    except OSError as e:
        raise CopyError(f"cannot copy snap {name!r} to {dst}: {e}") from e


class SideloadAcquirer:
    """Takes a package from a local file; metadata comes from the artifact."""

    def acquire(self, name: str, opts: AcquireOptions) -> Tuple[Path, PackageInfo]:
        try:
            container = opts.open_container(name)
        except OpenError:
            raise
        except (OSError, ImageError) as e:
            raise OpenError(f"cannot open snap {name!r}: {e}") from e

        try:
            info = info_from_snap_yaml(container.read_file("meta/snap.yaml"))
        except (ImageError, ValueError) as e:
            raise OpenError(f"cannot read snap metadata from {name!r}: {e}") from e

        if info.revision == UNSET_REVISION:
            info = info.with_revision(SIDELOAD_REVISION)

        dst = opts.resolved_target_dir() / info.blob_filename
        _copy_into(name, dst, name=name)
        logger.info("Sideloaded %s as %s", name, dst.name)
        return dst, info


class StoreAcquirer:
    """Resolves the package at the package source and downloads it."""

    def acquire(self, name: str, opts: AcquireOptions) -> Tuple[Path, PackageInfo]:
        source = opts.store_factory(opts.normalized_store_id, opts.architecture)

        try:
            info = source.resolve(name, opts.channel, False, None)
        except PackageNotFoundError:
            raise
        except (ImageError, OSError, ValueError) as e:
            raise PackageNotFoundError(name, str(e)) from e
        if info.revision == UNSET_REVISION:
            # only sideloaded artifacts may lack a store revision
            raise PackageNotFoundError(name, "package source returned no revision")

        try:
            tmp_name = source.download(name, info.download, LoggingProgress(), None)
        except DownloadError:
            raise
        except (ImageError, OSError) as e:
            raise DownloadError(f"cannot download snap {name!r}: {e}") from e

        dst = opts.resolved_target_dir() / info.blob_filename
        try:
            _copy_into(tmp_name, dst, name=name)
        finally:
            try:
                os.remove(tmp_name)
            except FileNotFoundError:
                pass
        return dst, info


def select_acquirer(name: str) -> Acquirer:
    if os.path.isfile(name):
        return SideloadAcquirer()
    return StoreAcquirer()


def acquire(name: str, opts: Optional[AcquireOptions] = None) -> Tuple[Path, PackageInfo]:
    """Fetch ``name`` into ``opts.target_dir``; returns the local path and metadata."""

    opts = opts or AcquireOptions()
    return select_acquirer(name).acquire(name, opts)
