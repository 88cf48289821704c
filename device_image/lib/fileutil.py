from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_copy(src: str | Path, dst: str | Path, *, mode: int = 0o644) -> Path:
    """Copy ``src`` to ``dst`` so readers never observe a partial file.

    The data lands in a sibling temp file first and is renamed into place.
    """

    s = Path(src)
    d = Path(dst)
    d.parent.mkdir(parents=True, exist_ok=True)
    tmp = d.with_name(f".{d.name}.~tmp")
    try:
        shutil.copyfile(s, tmp)
        os.chmod(tmp, mode)
        os.replace(tmp, d)
    finally:
        if tmp.exists():
            tmp.unlink()
    logger.debug("Copied %s -> %s", str(s), str(d))
    return d
