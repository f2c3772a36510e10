"""Key-preserving merges of JSON fragments into existing config documents.

Configuration files such as ``package.json`` and ``tsconfig.json`` are also
edited by other tools, so the scaffolder never rewrites them wholesale: it
parses the current document, merges a fragment into it and writes the result
back.  Two strategies are available:

* ``SHALLOW_OVERLAY`` replaces each top-level key named by the fragment and
  leaves every other key alone.  Use it where a whole sub-object (a script
  map, for example) is meant to be replaced.
* ``DEEP_MERGE`` recurses into objects present on both sides.  Arrays are
  **not** element-merged: an array in the fragment replaces the destination
  array wholesale.  This is a deliberate simplification, since there is no
  general way to tell whether two array entries denote "the same" item.

Neither strategy mutates its inputs.  Existing keys keep their relative
order and new keys are appended in the fragment's order.
"""

from __future__ import annotations

import copy
import json
from enum import Enum
from typing import Any

from ..errors import MalformedJsonError


class MergeStrategy(str, Enum):
    """How a fragment is combined with an existing document."""

    SHALLOW_OVERLAY = "shallow_overlay"
    DEEP_MERGE = "deep_merge"


def merge(
    existing: Any,
    fragment: dict[str, Any],
    strategy: MergeStrategy = MergeStrategy.DEEP_MERGE,
) -> dict[str, Any]:
    """Return a new document with *fragment* merged into *existing*.

    Raises:
        MalformedJsonError: If *existing* is not a JSON object.
        TypeError: If *fragment* is not a dict (programmer error).
    """
    if not isinstance(existing, dict):
        raise MalformedJsonError(
            f"Expected a JSON object at the top level, got {_json_kind(existing)}"
        )
    if not isinstance(fragment, dict):
        raise TypeError(f"Merge fragment must be a dict, got {type(fragment).__name__}")

    strategy = MergeStrategy(strategy)
    if strategy is MergeStrategy.SHALLOW_OVERLAY:
        result = copy.deepcopy(existing)
        for key, value in fragment.items():
            result[key] = copy.deepcopy(value)
        return result
    return _deep_merge(existing, fragment)


def _deep_merge(existing: dict[str, Any], fragment: dict[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(existing)
    for key, value in fragment.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def parse_json_object(text: str | bytes, source: str = "<document>") -> dict[str, Any]:
    """Parse *text* and require a top-level JSON object.

    Args:
        text: Raw file content; bytes are decoded as UTF-8.
        source: Name used in error messages (usually the file path).

    Raises:
        MalformedJsonError: For undecodable bytes, empty input, invalid JSON
            or a non-object top level.  Nothing is coerced.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedJsonError(f"{source} is not valid UTF-8: {exc}") from exc
    if not text.strip():
        raise MalformedJsonError(f"{source} is empty")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(f"{source} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedJsonError(
            f"{source} must contain a JSON object at the top level, got {_json_kind(data)}"
        )
    return data


def dump_json(document: dict[str, Any]) -> str:
    """Serialise a document the way npm and the Next.js tooling write config files."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _json_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    return type(value).__name__
