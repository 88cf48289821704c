from __future__ import annotations

import logging

from ..pipeline import BootstrapCtx

logger = logging.getLogger(__name__)


class CreateDirsStep:
    step_id = "30_create_dirs"

    def run(self, ctx: BootstrapCtx) -> None:
        for d in (ctx.dirs.blob_dir, ctx.dirs.seed_snaps_dir):
            d.mkdir(mode=0o755, parents=True, exist_ok=True)
            logger.info("Ensured %s", str(d))
