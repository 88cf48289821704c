from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import Dict

# crc32 (little endian) + flags byte, as written by fw_setenv with a
# redundant environment.
HEADER_SIZE = 5
DEFAULT_ENV_SIZE = 4096


class UbootEnv:
    """A u-boot environment image.

    Layout: ``<crc32><flags><k=v>\\0<k=v>\\0\\0<\\0 padding>``. The crc covers
    everything after the header. An empty or missing file is an empty
    environment of ``DEFAULT_ENV_SIZE`` bytes.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.size = DEFAULT_ENV_SIZE
        self.flags = 0
        self._vars: Dict[str, str] = {}

    def load(self) -> "UbootEnv":
        raw = self.path.read_bytes() if self.path.exists() else b""
        self._vars = {}
        if not raw:
            self.size = DEFAULT_ENV_SIZE
            return self
        if len(raw) <= HEADER_SIZE:
            raise ValueError(f"{self.path}: u-boot environment too small ({len(raw)} bytes)")

        (crc,) = struct.unpack("<I", raw[:4])
        self.flags = raw[4]
        data = raw[HEADER_SIZE:]
        actual = zlib.crc32(data) & 0xFFFFFFFF
        if crc != actual:
            raise ValueError(f"{self.path}: bad CRC {crc:#010x} != {actual:#010x}")

        self.size = len(raw)
        end = data.find(b"\x00\x00")
        payload = data[:end] if end >= 0 else data
        for entry in payload.split(b"\x00"):
            if not entry:
                continue
            key, sep, value = entry.decode("utf-8").partition("=")
            if sep:
                self._vars[key] = value
        return self

    def get(self, name: str) -> str:
        return self._vars.get(name, "")

    def set(self, name: str, value: str) -> None:
        if "=" in name or "\x00" in name or "\x00" in value:
            raise ValueError(f"invalid u-boot environment entry {name!r}")
        if value == "":
            # fw_setenv semantics: an empty value deletes the variable
            self._vars.pop(name, None)
            return
        self._vars[name] = value

    def items(self) -> Dict[str, str]:
        return dict(self._vars)

    def encode(self) -> bytes:
        payload = b"".join(f"{k}={self._vars[k]}".encode("utf-8") + b"\x00" for k in sorted(self._vars))
        payload += b"\x00"
        data_size = self.size - HEADER_SIZE
        if len(payload) > data_size:
            raise ValueError(f"{self.path}: environment exceeds {data_size} bytes")
        data = payload + b"\x00" * (data_size - len(payload))
        crc = zlib.crc32(data) & 0xFFFFFFFF
        return struct.pack("<I", crc) + bytes([self.flags]) + data

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(self.encode())
