from __future__ import annotations

import logging

from ..errors import AlreadyBootstrappedError
from ..lib.env import Dirs
from ..pipeline import BootstrapCtx

logger = logging.getLogger(__name__)


def check_target(dirs: Dirs) -> None:
    # a persisted state means the target already booted; refuse to touch it
    if dirs.state_file.exists():
        raise AlreadyBootstrappedError(f"cannot bootstrap over existing system ({dirs.state_file} exists)")


class CheckTargetStep:
    step_id = "10_check_target"

    def run(self, ctx: BootstrapCtx) -> None:
        check_target(ctx.dirs)
        logger.info("Target root %s is empty of system state", str(ctx.dirs.root))
