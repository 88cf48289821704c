from __future__ import annotations

import logging

from ..errors import SeedWriteError
from ..pipeline import BootstrapCtx

logger = logging.getLogger(__name__)


class WriteSeedStep:
    step_id = "50_write_seed"

    def run(self, ctx: BootstrapCtx) -> None:
        seed_file = ctx.dirs.seed_file
        try:
            ctx.seed.write(seed_file)
        except OSError as e:
            raise SeedWriteError(f"cannot write seed.yaml: {e}") from e
        logger.info("Wrote %s (%d snaps)", str(seed_file), len(ctx.seed.snaps))
