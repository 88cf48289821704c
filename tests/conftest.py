from __future__ import annotations

import fnmatch
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from device_image.errors import ExtractError, OpenError, PackageNotFoundError
from device_image.lib.env import Dirs
from device_image.lib.snap import DownloadInfo, PackageInfo, PackageType


class FakeContainer:
    """Stand-in package container: a JSON file mapping member paths to text."""

    def __init__(self, path: Path, files: Dict[str, str]) -> None:
        self.path = path
        self.files = files

    @classmethod
    def open(cls, path) -> "FakeContainer":
        p = Path(path)
        try:
            doc = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise OpenError(f"cannot open snap {str(p)!r}: {e}") from e
        return cls(p, doc["files"])

    def read_file(self, rel: str) -> bytes:
        if rel not in self.files:
            raise ExtractError(f"{rel} not in {self.path}")
        return self.files[rel].encode("utf-8")

    def unpack(self, pattern: str, dest_dir) -> None:
        dest = Path(dest_dir)
        for rel, text in self.files.items():
            if fnmatch.fnmatch(rel, pattern):
                out = dest / rel
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_text(text, encoding="utf-8")


def snap_payload(name: str, type_: str = "app", version: str = "1.0", extra: Optional[Dict[str, str]] = None) -> str:
    files = {"meta/snap.yaml": f"name: {name}\nversion: '{version}'\ntype: {type_}\n"}
    files.update(extra or {})
    return json.dumps({"files": files})


def write_snap(path: Path, name: str, type_: str = "app", **kwargs: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snap_payload(name, type_, **kwargs), encoding="utf-8")
    return path


class FakeStore:
    """In-memory package source recording every call."""

    def __init__(self, tmp_dir: Path) -> None:
        self.tmp_dir = tmp_dir
        self.snaps: Dict[str, PackageInfo] = {}
        self.payloads: Dict[str, str] = {}
        self.resolved: List[tuple] = []
        self.downloads: List[str] = []
        self.factory_calls: List[tuple] = []
        self.fail_download = False

    def add(self, name: str, type_: PackageType, revision: int, **extra_files: str) -> PackageInfo:
        info = PackageInfo(
            name=name,
            type=type_,
            revision=revision,
            snap_id=f"{name}-id",
            channel="stable",
            developer_id="canonical-id",
            developer="canonical",
            download=DownloadInfo(url=f"https://example.invalid/{name}", file=name),
        )
        self.snaps[name] = info
        self.payloads[name] = snap_payload(name, type_.value, extra=dict(extra_files))
        return info

    def factory(self, store_id: str, architecture: str) -> "FakeStore":
        self.factory_calls.append((store_id, architecture))
        return self

    def resolve(self, name: str, channel: str, devmode: bool, user: Any) -> PackageInfo:
        self.resolved.append((name, channel))
        if name not in self.snaps:
            raise PackageNotFoundError(name, "no such snap")
        return self.snaps[name]

    def download(self, name: str, download_info: DownloadInfo, progress: Any, user: Any) -> str:
        if self.fail_download:
            raise OSError("connection reset")
        fd, tmp = tempfile.mkstemp(dir=self.tmp_dir, prefix=f"{name}-")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(self.payloads[name])
        self.downloads.append(tmp)
        return tmp


class MockBootloader:
    name = "mocky"

    def __init__(self) -> None:
        self.boot_vars: Dict[str, str] = {}

    @property
    def dir(self) -> Path:
        return Path("/boot/mocky")

    @property
    def config_file(self) -> Path:
        return self.dir / "mocky.env"

    def get_boot_var(self, name: str) -> str:
        return self.boot_vars.get(name, "")

    def set_boot_var(self, name: str, value: str) -> None:
        self.boot_vars[name] = value


def model_text(required: Optional[List[str]] = None, **overrides: str) -> str:
    headers = {
        "type": "model",
        "authority-id": "my-brand",
        "series": "16",
        "brand-id": "my-brand",
        "model": "my-model",
        "store": "canonical",
        "architecture": "amd64",
        "gadget": "pc",
        "kernel": "pc-kernel",
        "core": "core",
        "timestamp": "2016-08-31T00:00:00.0Z",
        "sign-key-sha3-384": "Jv8_JiHiIzJVcO9M55pPdqSDWUvuhfDIBJUS-3VW7F_idjix7Ffn5qMxB21ZQuij",
    }
    headers.update(overrides)
    lines = [f"{k}: {v}" for k, v in headers.items()]
    if required is not None:
        lines.append("required-snaps:")
        lines += [f"  - {r}" for r in required]
    return "\n".join(lines) + "\n\nAXNpZw==\n"


@pytest.fixture
def dirs(tmp_path: Path) -> Dirs:
    root = tmp_path / "root"
    root.mkdir()
    return Dirs.for_root(root)


@pytest.fixture
def fake_store(tmp_path: Path) -> FakeStore:
    d = tmp_path / "downloads"
    d.mkdir()
    return FakeStore(d)


@pytest.fixture
def mock_bootloader() -> MockBootloader:
    return MockBootloader()


@pytest.fixture
def write_model(tmp_path: Path):
    def _write(required: Optional[List[str]] = None, **overrides: str) -> Path:
        p = tmp_path / "model.assert"
        p.write_text(model_text(required, **overrides), encoding="utf-8")
        return p

    return _write
