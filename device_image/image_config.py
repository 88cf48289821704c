from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .lib.store import DEFAULT_CHANNEL


@dataclass(frozen=True)
class ImageConfig:
    raw: Dict[str, Any]

    @property
    def model_file(self) -> str:
        return str(self.raw.get("model") or "")

    @property
    def packages(self) -> List[str]:
        return [str(p) for p in (self.raw.get("snaps") or [])]

    @property
    def root_dir(self) -> str:
        return str(self.raw.get("root_dir") or "")

    @property
    def channel(self) -> str:
        return str(self.raw.get("channel") or DEFAULT_CHANNEL)

    @property
    def gadget_unpack_dir(self) -> str:
        return str(self.raw.get("gadget_unpack_dir") or "")

    @property
    def mirror_dir(self) -> str:
        return str(((self.raw.get("store") or {}).get("mirror")) or "")


@dataclass(frozen=True)
class ImageOptions:
    """Everything a prepare/bootstrap run needs to know."""

    model_file: str
    packages: Tuple[str, ...] = ()
    root_dir: str = ""
    channel: str = DEFAULT_CHANNEL
    gadget_unpack_dir: str = ""
    mirror_dir: str = ""

    @classmethod
    def from_config(cls, cfg: Optional[ImageConfig] = None, **overrides: Any) -> "ImageOptions":
        cfg = cfg or ImageConfig(raw={})
        opts = cls(
            model_file=cfg.model_file,
            packages=tuple(cfg.packages),
            root_dir=cfg.root_dir,
            channel=cfg.channel,
            gadget_unpack_dir=cfg.gadget_unpack_dir,
            mirror_dir=cfg.mirror_dir,
        )
        given = {k: v for k, v in overrides.items() if v not in (None, "", [], ())}
        if "packages" in given:
            given["packages"] = tuple(given["packages"])
        return replace(opts, **given)


def load_image_config(path: str) -> ImageConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("image config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("image config must contain a mapping/object")

    return ImageConfig(raw=raw)
