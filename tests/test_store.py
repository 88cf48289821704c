from __future__ import annotations

import os

import pytest
import yaml

from device_image.errors import DownloadError, PackageNotFoundError
from device_image.lib.snap import PackageType
from device_image.lib.store import LoggingProgress, MirrorStore, normalize_store_id


@pytest.fixture
def mirror(tmp_path):
    d = tmp_path / "mirror"
    (d / "pool").mkdir(parents=True)
    (d / "pool" / "pc-kernel_3.snap").write_bytes(b"kernel-amd64")
    (d / "pool" / "pc-kernel_4.snap").write_bytes(b"kernel-arm64")
    (d / "pool" / "core_7.snap").write_bytes(b"core")
    index = {
        "snaps": [
            {"name": "pc-kernel", "snap-id": "kid", "revision": 3, "channel": "stable", "type": "kernel",
             "developer-id": "canonical", "developer": "Canonical", "architectures": ["amd64"],
             "file": "pool/pc-kernel_3.snap"},
            {"name": "pc-kernel", "snap-id": "kid", "revision": 4, "channel": "stable", "type": "kernel",
             "architectures": ["arm64"], "file": "pool/pc-kernel_4.snap"},
            {"name": "core", "snap-id": "cid", "revision": 7, "channel": "edge", "type": "os",
             "architectures": ["all"], "file": "pool/core_7.snap"},
        ]
    }
    (d / "index.yaml").write_text(yaml.safe_dump(index), encoding="utf-8")
    return d


def test_normalize_store_id():
    assert normalize_store_id("canonical") == ""
    assert normalize_store_id("") == ""
    assert normalize_store_id("brand-store") == "brand-store"


def test_mirror_resolve_filters_architecture(mirror):
    info = MirrorStore(mirror, architecture="arm64").resolve("pc-kernel", "stable", False, None)

    assert info.revision == 4
    assert info.type == PackageType.KERNEL
    assert info.blob_filename == "pc-kernel_4.snap"
    assert info.download.size == len(b"kernel-arm64")


def test_mirror_resolve_channel(mirror):
    store = MirrorStore(mirror, architecture="amd64")

    assert store.resolve("core", "edge", False, None).revision == 7
    with pytest.raises(PackageNotFoundError, match="core"):
        store.resolve("core", "stable", False, None)


def test_mirror_download_to_temp_file(mirror):
    store = MirrorStore(mirror, architecture="amd64")
    info = store.resolve("pc-kernel", "stable", False, None)

    tmp = store.download("pc-kernel", info.download, LoggingProgress(), None)
    try:
        with open(tmp, "rb") as f:
            assert f.read() == b"kernel-amd64"
    finally:
        os.remove(tmp)


def test_mirror_download_missing_blob(mirror):
    store = MirrorStore(mirror, architecture="amd64")
    info = store.resolve("pc-kernel", "stable", False, None)
    (mirror / "pool" / "pc-kernel_3.snap").unlink()

    with pytest.raises(DownloadError, match="pc-kernel"):
        store.download("pc-kernel", info.download, LoggingProgress(), None)


def test_mirror_corrupt_index(tmp_path):
    d = tmp_path / "mirror"
    d.mkdir()
    (d / "index.yaml").write_text("snaps: [core\n", encoding="utf-8")

    with pytest.raises(ValueError, match="cannot parse"):
        MirrorStore(d).resolve("core", "stable", False, None)
