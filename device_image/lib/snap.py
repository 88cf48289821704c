from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional

import yaml

UNSET_REVISION = 0
SIDELOAD_REVISION = -1


class PackageType(str, Enum):
    APP = "app"
    GADGET = "gadget"
    KERNEL = "kernel"
    OS = "os"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PackageType":
        # snap.yaml omits "type" for ordinary apps
        if not value:
            return cls.APP
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValueError(f"unknown snap type {value!r}") from e


@dataclass(frozen=True)
class DownloadInfo:
    url: str = ""
    size: int = 0
    sha3_384: str = ""
    file: str = ""


@dataclass(frozen=True)
class PackageInfo:
    name: str
    type: PackageType = PackageType.APP
    revision: int = UNSET_REVISION
    snap_id: str = ""
    channel: str = ""
    developer_id: str = ""
    developer: str = ""
    version: str = ""
    download: DownloadInfo = field(default_factory=DownloadInfo)

    @property
    def blob_filename(self) -> str:
        return f"{self.name}_{format_revision(self.revision)}.snap"

    def with_revision(self, revision: int) -> "PackageInfo":
        return replace(self, revision=revision)


def format_revision(revision: int) -> str:
    """Render a revision the way blob filenames and the seed carry it.

    Sideloaded (negative) revisions are prefixed with ``x``.
    """

    if revision < 0:
        return f"x{-revision}"
    return str(revision)


def parse_revision(value: Any) -> int:
    if value is None or value == "":
        return UNSET_REVISION
    text = str(value).strip()
    if text.startswith("x"):
        return -int(text[1:])
    return int(text)


def info_from_snap_yaml(raw: bytes) -> PackageInfo:
    """Build package metadata from a ``meta/snap.yaml`` payload.

    snap.yaml carries no store identity, so the revision is left unset.
    """

    data: Dict[str, Any] = yaml.safe_load(raw.decode("utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("snap.yaml must contain a mapping")
    name = str(data.get("name") or "").strip()
    if not name:
        raise ValueError("snap.yaml has no name")
    return PackageInfo(
        name=name,
        type=PackageType.parse(data.get("type")),
        version=str(data.get("version") or ""),
    )
