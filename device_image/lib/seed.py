from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .snap import PackageInfo, format_revision, parse_revision


@dataclass(frozen=True)
class SeedEntry:
    name: str
    snap_id: str
    revision: int
    channel: str
    developer_id: str
    developer: str
    file: str

    @classmethod
    def from_info(cls, info: PackageInfo, filename: str) -> "SeedEntry":
        return cls(
            name=info.name,
            snap_id=info.snap_id,
            revision=info.revision,
            channel=info.channel,
            developer_id=info.developer_id,
            developer=info.developer,
            file=filename,
        )

    def to_yaml(self) -> Dict[str, Any]:
        revision: Any = self.revision if self.revision >= 0 else format_revision(self.revision)
        return {
            "name": self.name,
            "snap-id": self.snap_id,
            "revision": revision,
            "channel": self.channel,
            "developer-id": self.developer_id,
            "developer": self.developer,
            "file": self.file,
        }

    @classmethod
    def from_yaml(cls, raw: Dict[str, Any]) -> "SeedEntry":
        return cls(
            name=str(raw.get("name") or ""),
            snap_id=str(raw.get("snap-id") or ""),
            revision=parse_revision(raw.get("revision")),
            channel=str(raw.get("channel") or ""),
            developer_id=str(raw.get("developer-id") or ""),
            developer=str(raw.get("developer") or ""),
            file=str(raw.get("file") or ""),
        )


@dataclass
class Seed:
    """Packages fetched during bootstrap, in fetch order, for the first-boot initializer."""

    snaps: List[SeedEntry] = field(default_factory=list)

    def add(self, info: PackageInfo, filename: str) -> SeedEntry:
        entry = SeedEntry.from_info(info, filename)
        self.snaps.append(entry)
        return entry

    def write(self, path: str | Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        doc = {"snaps": [s.to_yaml() for s in self.snaps]}
        p.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")


def load_seed(path: str | Path) -> Seed:
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p} must contain a mapping/object")
    snaps = raw.get("snaps") or []
    if not isinstance(snaps, list):
        raise ValueError(f"{p}: snaps must be a list")
    return Seed(snaps=[SeedEntry.from_yaml(s) for s in snaps if isinstance(s, dict)])
