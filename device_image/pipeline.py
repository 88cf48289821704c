from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from .errors import ImageError
from .image_config import ImageOptions
from .lib.acquire import AcquireOptions
from .lib.bootloader import Bootloader
from .lib.container import ContainerOpener, open_container
from .lib.env import Dirs
from .lib.model import Model
from .lib.seed import Seed
from .lib.snap import PackageInfo
from .lib.store import StoreFactory

logger = logging.getLogger(__name__)


@dataclass
class BootstrapCtx:
    """What the bootstrap steps share. Filled in as the steps run."""

    options: ImageOptions
    dirs: Dirs
    store_factory: StoreFactory
    open_container: ContainerOpener = open_container
    bootloader: Optional[Bootloader] = None

    model: Optional[Model] = None
    seed: Seed = field(default_factory=Seed)
    # kernel/core blobs copied into the blob dir, keyed by blob path
    boot_blobs: Dict[Path, PackageInfo] = field(default_factory=dict)
    fetched: List[Path] = field(default_factory=list)

    def require_model(self) -> Model:
        if self.model is None:
            raise ImageError("internal error: model not resolved before use")
        return self.model

    def acquire_options(self, target_dir: Path | str) -> AcquireOptions:
        model = self.require_model()
        return AcquireOptions(
            target_dir=str(target_dir),
            channel=self.options.channel,
            store_id=model.store,
            architecture=model.architecture,
            store_factory=self.store_factory,
            open_container=self.open_container,
        )


class Step(Protocol):
    """A single bootstrap step. Raising aborts the run."""

    step_id: str

    def run(self, ctx: BootstrapCtx) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ctx: BootstrapCtx
    ran_steps: List[str]


def run_pipeline(*, ctx: BootstrapCtx, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order, stopping at the first failure.

    Completed steps are not undone: a target that failed half way is
    discarded and bootstrapped again from scratch.
    """

    ran: List[str] = []
    for step in steps:
        logger.info("Running step %s", step.step_id)
        try:
            step.run(ctx)
        except Exception:
            logger.error("Step %s failed (completed: %s)", step.step_id, ", ".join(ran) or "none")
            raise
        ran.append(step.step_id)

    return PipelineResult(ctx=ctx, ran_steps=ran)
