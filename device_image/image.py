from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .errors import ImageError
from .image_config import ImageOptions
from .lib.acquire import AcquireOptions, acquire
from .lib.bootloader import Bootloader
from .lib.container import ContainerOpener, open_container
from .lib.env import Dirs
from .lib.model import decode_model_assertion
from .lib.store import PackageSource, StoreFactory, mirror_store_factory
from .pipeline import BootstrapCtx, run_pipeline
from .steps import (
    CheckTargetStep,
    CreateDirsStep,
    FetchSnapsStep,
    InstallBootConfigStep,
    ResolveModelStep,
    SetBootVarsStep,
    WriteSeedStep,
)
from .steps.step_10_check_target import check_target

logger = logging.getLogger(__name__)


def build_steps():
    return [
        CheckTargetStep(),
        ResolveModelStep(),
        CreateDirsStep(),
        FetchSnapsStep(),
        WriteSeedStep(),
        InstallBootConfigStep(),
        SetBootVarsStep(),
    ]


def default_store_factory(options: ImageOptions) -> StoreFactory:
    if options.mirror_dir:
        return mirror_store_factory(options.mirror_dir)

    def _unconfigured(store_id: str, architecture: str) -> PackageSource:
        raise ImageError("no package source configured; set a store mirror or sideload local snaps")

    return _unconfigured


def download_unpack_gadget(
    options: ImageOptions,
    *,
    store_factory: Optional[StoreFactory] = None,
    opener: ContainerOpener = open_container,
) -> Path:
    """Fetch the model's gadget and unpack it into ``options.gadget_unpack_dir``."""

    if not options.gadget_unpack_dir:
        raise ImageError("a gadget unpack dir is required")

    model = decode_model_assertion(options.model_file)
    unpack_dir = Path(options.gadget_unpack_dir)
    try:
        unpack_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise ImageError(f"cannot create gadget unpack dir {str(unpack_dir)!r}: {e}") from e

    opts = AcquireOptions(
        target_dir=str(unpack_dir),
        channel=options.channel,
        store_id=model.store,
        architecture=model.architecture,
        store_factory=store_factory or default_store_factory(options),
        open_container=opener,
    )
    logger.info("Fetching gadget %s", model.gadget)
    path, _ = acquire(model.gadget, opts)
    opener(path).unpack("*", unpack_dir)
    logger.info("Unpacked gadget %s into %s", path.name, str(unpack_dir))
    return path


def bootstrap_to_root_dir(
    options: ImageOptions,
    *,
    store_factory: Optional[StoreFactory] = None,
    bootloader: Optional[Bootloader] = None,
    opener: ContainerOpener = open_container,
) -> BootstrapCtx:
    """Populate ``options.root_dir`` with the model's snaps, seed and boot config."""

    ctx = BootstrapCtx(
        options=options,
        dirs=Dirs.for_root(options.root_dir),
        store_factory=store_factory or default_store_factory(options),
        open_container=opener,
        bootloader=bootloader,
    )
    result = run_pipeline(ctx=ctx, steps=build_steps())
    logger.info("Bootstrap of %s done (steps: %s)", str(ctx.dirs.root), ", ".join(result.ran_steps))
    return result.ctx


def prepare(
    options: ImageOptions,
    *,
    store_factory: Optional[StoreFactory] = None,
    bootloader: Optional[Bootloader] = None,
    opener: ContainerOpener = open_container,
) -> BootstrapCtx:
    """Unpack the gadget, then bootstrap ``options.root_dir`` from it.

    An already bootstrapped root is refused before the gadget is fetched.
    """

    check_target(Dirs.for_root(options.root_dir))
    download_unpack_gadget(options, store_factory=store_factory, opener=opener)
    return bootstrap_to_root_dir(options, store_factory=store_factory, bootloader=bootloader, opener=opener)
