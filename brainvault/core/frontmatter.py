"""Flat frontmatter codec for stored captures.

Only scalars (str, int, float, bool) and lists of strings are supported.
Nested mappings are not.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Tuple

DELIMITER = "---"

_KEY_VALUE = re.compile(r"^([a-zA-Z_]\w*)\s*:\s*(.*)$")
_LIST_ITEM = re.compile(r"^\s+-\s+(.*)$")
_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
_EMPTY_LIST = "[]"


def decode(text: str) -> Tuple[Dict[str, Any], str]:
    stripped = text.lstrip()
    lines = stripped.split("\n")
    if not lines or lines[0].rstrip() != DELIMITER:
        return {}, text

    end = None
    for index in range(1, len(lines)):
        if lines[index].rstrip() == DELIMITER:
            end = index
            break
    if end is None:
        return {}, text

    metadata = _parse_block(lines[1:end])
    body = "\n".join(lines[end + 1 :])
    return metadata, body.strip()


def encode(metadata: Dict[str, Any], body: str) -> str:
    lines = [DELIMITER]
    for key, value in metadata.items():
        if isinstance(value, (list, tuple)):
            if not value:
                lines.append(f"{key}: {_EMPTY_LIST}")
                continue
            lines.append(f"{key}:")
            for item in value:
                lines.append(f"  - {_scalar_text(item)}")
        else:
            lines.append(f"{key}: {_scalar_text(value)}")
    lines.append(DELIMITER)
    lines.append("")
    lines.append(body)
    return "\n".join(lines)


def _parse_block(lines: List[str]) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {}
    index = 0
    while index < len(lines):
        match = _KEY_VALUE.match(lines[index])
        if not match:
            index += 1
            continue
        key, raw = match.group(1), match.group(2).strip()
        if raw == "" and index + 1 < len(lines) and _LIST_ITEM.match(lines[index + 1]):
            items: List[str] = []
            index += 1
            while index < len(lines):
                item = _LIST_ITEM.match(lines[index])
                if not item:
                    break
                items.append(item.group(1).strip())
                index += 1
            metadata[key] = items
            continue
        metadata[key] = _coerce(raw)
        index += 1
    return metadata


def _coerce(raw: str) -> Any:
    if raw == "":
        return ""
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw == _EMPTY_LIST:
        return []
    if _NUMBER.match(raw):
        return float(raw) if "." in raw else int(raw)
    return raw


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    # one line per key
    return " ".join(str(value).splitlines()).strip()
