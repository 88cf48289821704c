from __future__ import annotations

import logging
from typing import List

from ..errors import CopyError
from ..lib.acquire import acquire
from ..lib.fileutil import atomic_copy
from ..lib.model import Model
from ..pipeline import BootstrapCtx

logger = logging.getLogger(__name__)


def acquisition_list(extra: List[str], model: Model) -> List[str]:
    """Extras first, then the boot-critical gadget/core/kernel, then required snaps."""

    names: List[str] = list(extra)
    names += [model.gadget, model.core, model.kernel]
    names += list(model.required_snaps)
    return names


class FetchSnapsStep:
    step_id = "40_fetch_snaps"

    def run(self, ctx: BootstrapCtx) -> None:
        model = ctx.require_model()
        opts = ctx.acquire_options(ctx.dirs.seed_snaps_dir)

        boot_names = {model.kernel, model.core}

        for name in acquisition_list(list(ctx.options.packages), model):
            logger.info("Fetching %s", name)
            path, info = acquire(name, opts)
            ctx.fetched.append(path)

            # kernel/core are required for booting; a sideloaded one is named by path
            if name in boot_names or info.name in boot_names:
                blob = ctx.dirs.blob_dir / path.name
                try:
                    atomic_copy(path, blob, mode=0o644)
                except OSError as e:
                    raise CopyError(f"cannot copy {name!r} into {ctx.dirs.blob_dir}: {e}") from e
                ctx.boot_blobs[blob] = info

            ctx.seed.add(info, path.name)

        logger.info("Fetched %d snaps", len(ctx.fetched))
