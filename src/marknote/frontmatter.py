"""Front matter codec for Markdown notes.

A note may start with a metadata block delimited by ``---`` lines::

    ---
    title: Shopping
    tags:
      - home
      - errands
    ---
    # Shopping

Only flat mappings are supported: each key maps to a string or to a list of
strings. Decoding never raises; text without a complete block decodes to empty
metadata and the unchanged text as body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

FrontMatterValue = Union[str, list[str]]
FrontMatter = dict[str, FrontMatterValue]

_DELIM = "---"
_KEY_RE = re.compile(r"^([^\s:#-][^:]*?)\s*:(.*)$")
_BOM = "\ufeff"
_ITEM_RE = re.compile(r"^\s*-(?:\s+(.*))?$")
_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


@dataclass(frozen=True)
class FrontMatterDocument:
    metadata: FrontMatter = field(default_factory=dict)
    body: str = ""


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    if len(value) >= 2 and value[0] == value[-1] == '"':
        out: list[str] = []
        inner = value[1:-1]
        i = 0
        while i < len(inner):
            ch = inner[i]
            if ch == "\\" and i + 1 < len(inner):
                nxt = inner[i + 1]
                out.append(_ESCAPES.get(nxt, "\\" + nxt))
                i += 2
                continue
            out.append(ch)
            i += 1
        return "".join(out)
    return value


def _needs_quotes(value: str) -> bool:
    if value == "" or value != value.strip():
        return True
    if value[0] in "[\"'" or value.startswith("- ") or value == "-":
        return True
    return any(ch in value for ch in "\n\r\t")


def _quote(value: str) -> str:
    if not _needs_quotes(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "")
    )
    return f'"{escaped}"'


def _parse_inline_list(value: str) -> list[str]:
    inner = value[1:-1].strip()
    if not inner:
        return []
    items = [_unquote(part) for part in inner.split(",")]
    return [item for item in items if item]


def _parse_block(lines: list[str]) -> FrontMatter:
    metadata: FrontMatter = {}
    current_key: Optional[str] = None

    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        item = _ITEM_RE.match(line)
        if item is not None and current_key is not None:
            sequence = metadata[current_key]
            if isinstance(sequence, list):
                sequence.append(_unquote(item.group(1) or ""))
            continue

        m = _KEY_RE.match(line)
        if m is None:
            continue

        key = m.group(1).strip()
        value = m.group(2).strip()
        if value == "":
            metadata[key] = []
            current_key = key
        elif value.startswith("[") and value.endswith("]"):
            metadata[key] = _parse_inline_list(value)
            current_key = None
        else:
            metadata[key] = _unquote(value)
            current_key = None

    return metadata


def decode(raw_text: str) -> FrontMatterDocument:
    """Split ``raw_text`` into front matter metadata and body.

    A byte order mark in front of the opening ``---`` is ignored.
    """
    text = raw_text[len(_BOM):] if raw_text.startswith(_BOM) else raw_text
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _DELIM:
        return FrontMatterDocument(metadata={}, body=raw_text)

    for idx in range(1, len(lines)):
        if lines[idx].rstrip() == _DELIM:
            metadata = _parse_block(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            return FrontMatterDocument(metadata=metadata, body=body)

    return FrontMatterDocument(metadata={}, body=raw_text)


def encode(body: str, metadata: Mapping[str, Any]) -> str:
    """Serialize ``metadata`` as a front matter block followed by ``body``."""
    out = [_DELIM]
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                out.append(f"{key}: []")
                continue
            out.append(f"{key}:")
            out.extend(f"  - {_quote(str(item))}" for item in value)
        else:
            out.append(f"{key}: {_quote(str(value))}")
    out.append(_DELIM)
    return "\n".join(out) + "\n" + body


def coerce_tags(value: Any) -> list[str]:
    """Normalize a decoded ``tags`` value to a list of strings."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if str(v)]
    text = str(value).strip()
    return [text] if text else []


def get_text(metadata: Mapping[str, Any], key: str) -> Optional[str]:
    """Return a scalar metadata value, or None if absent, empty or a sequence."""
    value = metadata.get(key)
    if value is None or isinstance(value, list):
        return None
    text = str(value)
    return text if text else None
