from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import yaml

from ..errors import ManifestDecodeError

SEPARATOR = b"\n\n"


@dataclass(frozen=True)
class Assertion:
    """A decoded signed document: headers, optional body and signature.

    The signature is kept as raw bytes; it is not verified here.
    """

    headers: Dict[str, Any]
    body: bytes = b""
    signature: bytes = field(default=b"", repr=False)

    @property
    def type(self) -> str:
        return str(self.headers.get("type") or "")

    def header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name, default)


def _parse_headers(raw: bytes) -> Dict[str, Any]:
    try:
        # BaseLoader keeps every scalar a string (series, timestamps, revisions).
        headers = yaml.load(raw.decode("utf-8"), Loader=yaml.BaseLoader)
    except (UnicodeDecodeError, yaml.YAMLError) as e:
        raise ManifestDecodeError(f"invalid assertion headers: {e}") from e
    if not isinstance(headers, dict):
        raise ManifestDecodeError("assertion headers must be a mapping")
    return headers


def decode_assertion(data: bytes) -> Assertion:
    """Split and decode a signed document.

    Layout::

        <headers>\\n\\n[<body>\\n\\n]<signature>

    ``body-length`` in the headers announces a body.
    """

    head_end = data.find(SEPARATOR)
    if head_end <= 0:
        raise ManifestDecodeError("assertion content/signature separator not found")

    headers = _parse_headers(data[:head_end])
    if not headers.get("type"):
        raise ManifestDecodeError('assertion: "type" header is mandatory')

    rest = data[head_end + len(SEPARATOR):]
    body = b""
    length_header = headers.get("body-length")
    if length_header is not None:
        try:
            length = int(length_header)
        except (TypeError, ValueError) as e:
            raise ManifestDecodeError(f"assertion: invalid body-length {length_header!r}") from e
        if length < 0 or len(rest) < length + len(SEPARATOR):
            raise ManifestDecodeError("assertion body length and declared body-length don't match")
        body = rest[:length]
        if rest[length:length + len(SEPARATOR)] != SEPARATOR:
            raise ManifestDecodeError("assertion body length and declared body-length don't match")
        rest = rest[length + len(SEPARATOR):]

    signature = rest.strip()
    if not signature:
        raise ManifestDecodeError("empty assertion signature")

    return Assertion(headers=headers, body=body, signature=signature)
