from __future__ import annotations

from ..lib.model import decode_model_assertion
from ..pipeline import BootstrapCtx


class ResolveModelStep:
    step_id = "20_resolve_model"

    def run(self, ctx: BootstrapCtx) -> None:
        ctx.model = decode_model_assertion(ctx.options.model_file)
