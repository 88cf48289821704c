from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

import yaml

from ..errors import DownloadError, PackageNotFoundError
from .snap import DownloadInfo, PackageInfo, PackageType, parse_revision

logger = logging.getLogger(__name__)

DEFAULT_STORE_ID = "canonical"
DEFAULT_CHANNEL = "stable"


def normalize_store_id(store_id: Optional[str]) -> str:
    """The default public store is addressed by the empty id."""

    if not store_id or store_id == DEFAULT_STORE_ID:
        return ""
    return store_id


class ProgressMeter(Protocol):
    def start(self, label: str, total: int) -> None:
        ...

    def set(self, current: int) -> None:
        ...

    def finished(self) -> None:
        ...


class LoggingProgress:
    """Reports download progress through the logger at 25% steps."""

    def __init__(self) -> None:
        self._label = ""
        self._total = 0
        self._last_quarter = -1

    def start(self, label: str, total: int) -> None:
        self._label = label
        self._total = total
        self._last_quarter = -1
        logger.info("Downloading %s (%d bytes)", label, total)

    def set(self, current: int) -> None:
        if self._total <= 0:
            return
        quarter = min(4, current * 4 // self._total)
        if quarter != self._last_quarter:
            self._last_quarter = quarter
            logger.debug("%s: %d%%", self._label, quarter * 25)

    def finished(self) -> None:
        logger.info("Downloaded %s", self._label)


class PackageSource(Protocol):
    """The store capability the acquirer consumes."""

    def resolve(self, name: str, channel: str, devmode: bool, user: Any) -> PackageInfo:
        ...

    def download(
        self,
        name: str,
        download_info: DownloadInfo,
        progress: ProgressMeter,
        user: Any,
    ) -> str:
        ...


StoreFactory = Callable[[str, str], PackageSource]


class MirrorStore:
    """Package source backed by an offline mirror directory.

    Layout::

        <mirror_dir>/index.yaml
        <mirror_dir>/<file>          (as referenced from the index)

    index.yaml holds a ``snaps`` list; each entry has name, snap-id, revision,
    channel, developer-id, developer, type, version, architectures and file.
    """

    CHUNK = 1024 * 1024

    def __init__(self, mirror_dir: str | Path, *, store_id: str = "", architecture: str = "") -> None:
        self.mirror_dir = Path(mirror_dir)
        self.store_id = normalize_store_id(store_id)
        self.architecture = architecture
        self._index: Optional[List[Dict[str, Any]]] = None

    def _load_index(self) -> List[Dict[str, Any]]:
        if self._index is None:
            p = self.mirror_dir / "index.yaml"
            if not p.exists():
                raise FileNotFoundError(str(p))
            try:
                raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"cannot parse {p}: {e}") from e
            if not isinstance(raw, dict):
                raise ValueError(f"{p} must contain a mapping/object")
            snaps = raw.get("snaps") or []
            if not isinstance(snaps, list):
                raise ValueError(f"{p}: snaps must be a list")
            self._index = [s for s in snaps if isinstance(s, dict)]
        return self._index

    def _matches_arch(self, entry: Dict[str, Any]) -> bool:
        arches = entry.get("architectures") or ["all"]
        return not self.architecture or "all" in arches or self.architecture in arches

    def resolve(self, name: str, channel: str, devmode: bool, user: Any) -> PackageInfo:
        channel = channel or DEFAULT_CHANNEL
        for entry in self._load_index():
            if entry.get("name") != name:
                continue
            if (entry.get("channel") or DEFAULT_CHANNEL) != channel:
                continue
            if not self._matches_arch(entry):
                continue
            rel = str(entry.get("file") or "")
            blob = self.mirror_dir / rel
            size = blob.stat().st_size if rel and blob.is_file() else 0
            return PackageInfo(
                name=name,
                type=PackageType.parse(entry.get("type")),
                revision=parse_revision(entry.get("revision")),
                snap_id=str(entry.get("snap-id") or ""),
                channel=channel,
                developer_id=str(entry.get("developer-id") or ""),
                developer=str(entry.get("developer") or ""),
                version=str(entry.get("version") or ""),
                download=DownloadInfo(
                    url=blob.resolve().as_uri() if rel else "",
                    size=size,
                    sha3_384=str(entry.get("sha3-384") or ""),
                    file=rel,
                ),
            )
        raise PackageNotFoundError(
            name, f"not in mirror {self.mirror_dir} (channel={channel}, architecture={self.architecture or 'any'})"
        )

    def download(
        self,
        name: str,
        download_info: DownloadInfo,
        progress: ProgressMeter,
        user: Any,
    ) -> str:
        src = self.mirror_dir / download_info.file
        if not download_info.file or not src.is_file():
            raise DownloadError(f"cannot download snap {name!r}: {src} missing from mirror")

        fd, tmp_name = tempfile.mkstemp(prefix=f"{name}-", suffix=".partial")
        try:
            progress.start(name, download_info.size)
            done = 0
            with os.fdopen(fd, "wb") as out, src.open("rb") as inp:
                while True:
                    chunk = inp.read(self.CHUNK)
                    if not chunk:
                        break
                    out.write(chunk)
                    done += len(chunk)
                    progress.set(done)
            progress.finished()
        except OSError as e:
            os.unlink(tmp_name)
            raise DownloadError(f"cannot download snap {name!r}: {e}") from e
        return tmp_name


def mirror_store_factory(mirror_dir: str | Path) -> StoreFactory:
    def _factory(store_id: str, architecture: str) -> PackageSource:
        return MirrorStore(mirror_dir, store_id=store_id, architecture=architecture)

    return _factory
