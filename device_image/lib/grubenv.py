from __future__ import annotations

from pathlib import Path
from typing import Dict

GRUBENV_HEADER = b"# GRUB Environment Block\n"
GRUBENV_SIZE = 1024


class GrubEnv:
    """A grub environment block (what ``grub-editenv`` reads and writes).

    The block is exactly 1024 bytes: the header line, ``key=value`` lines,
    then ``#`` padding.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._vars: Dict[str, str] = {}

    def load(self) -> "GrubEnv":
        if not self.path.exists():
            self._vars = {}
            return self
        raw = self.path.read_bytes()
        if not raw.startswith(GRUBENV_HEADER):
            raise ValueError(f"{self.path}: not a grub environment block")
        self._vars = {}
        for line in raw[len(GRUBENV_HEADER):].split(b"\n"):
            if not line or line.startswith(b"#"):
                continue
            key, sep, value = line.decode("utf-8").partition("=")
            if sep:
                self._vars[key] = value
        return self

    def get(self, name: str) -> str:
        return self._vars.get(name, "")

    def set(self, name: str, value: str) -> None:
        if "\n" in name or "=" in name or "\n" in value:
            raise ValueError(f"invalid grub environment entry {name!r}={value!r}")
        self._vars[name] = value

    def items(self) -> Dict[str, str]:
        return dict(self._vars)

    def encode(self) -> bytes:
        body = b"".join(f"{k}={v}\n".encode("utf-8") for k, v in self._vars.items())
        data = GRUBENV_HEADER + body
        if len(data) > GRUBENV_SIZE:
            raise ValueError(f"{self.path}: environment exceeds {GRUBENV_SIZE} bytes")
        return data + b"#" * (GRUBENV_SIZE - len(data))

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(self.encode())
