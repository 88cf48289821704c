from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

from ..errors import ManifestDecodeError, ManifestReadError, ManifestTypeError
from .assertions import Assertion, decode_assertion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Model:
    """The device model: which store, architecture and packages make up the device."""

    store: str
    architecture: str
    gadget: str
    kernel: str
    core: str
    required_snaps: Tuple[str, ...]
    headers: Dict[str, Any]

    @classmethod
    def from_assertion(cls, assertion: Assertion) -> "Model":
        if assertion.type != "model":
            raise ManifestTypeError(f"not a model assertion: {assertion.type!r}")

        def _str(name: str, *, required: bool = True) -> str:
            value = assertion.header(name, "")
            if not isinstance(value, str):
                raise ManifestDecodeError(f'"{name}" header must be a string')
            if required and not value:
                raise ManifestDecodeError(f'"{name}" header is mandatory')
            return value

        required = assertion.header("required-snaps", [])
        if required == "":
            required = []
        if not isinstance(required, list) or not all(isinstance(s, str) for s in required):
            raise ManifestDecodeError('"required-snaps" header must be a list of strings')

        return cls(
            store=_str("store", required=False),
            architecture=_str("architecture"),
            gadget=_str("gadget"),
            kernel=_str("kernel"),
            core=_str("core"),
            required_snaps=tuple(required),
            headers=dict(assertion.headers),
        )


def decode_model_assertion(path: str | Path) -> Model:
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ManifestReadError(f"cannot read model assertion: {e}") from e

    try:
        assertion = decode_assertion(raw)
    except ManifestDecodeError as e:
        raise ManifestDecodeError(f"cannot decode model assertion {str(path)!r}: {e}") from e

    if assertion.type != "model":
        raise ManifestTypeError(f"assertion in {str(path)!r} is not a model assertion")

    try:
        model = Model.from_assertion(assertion)
    except ManifestDecodeError as e:
        raise ManifestDecodeError(f"cannot decode model assertion {str(path)!r}: {e}") from e

    logger.info(
        "Model %s: architecture=%s gadget=%s kernel=%s core=%s",
        model.headers.get("model", "?"),
        model.architecture,
        model.gadget,
        model.kernel,
        model.core,
    )
    return model
