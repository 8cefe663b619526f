from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import InputError

_ENVELOPE_KEYS = ("data", "influencers", "overrides", "results", "items")


def load_records(path: str | Path, key: str | None = None) -> list[dict[str, Any]]:
    """
    Read a JSON file holding a list of records.

    An object is accepted when it wraps the list under `key` or one of the
    usual API envelope keys. Non-object list entries are dropped.
    """
    p = Path(path)

    if not p.exists():
        raise InputError(f"Input file not found: {p}")

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Failed to read input file: {p}") from e

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise InputError(f"Failed to parse JSON in {p}: {e}") from e

    if isinstance(data, dict):
        keys = (key, *_ENVELOPE_KEYS) if key else _ENVELOPE_KEYS
        for k in keys:
            if isinstance(data.get(k), list):
                data = data[k]
                break
        else:
            raise InputError(f"{p} must hold a list of records or wrap one under {', '.join(keys)}")

    if not isinstance(data, list):
        raise InputError(f"Top-level JSON in {p} must be a list or an object")

    return [item for item in data if isinstance(item, dict)]
