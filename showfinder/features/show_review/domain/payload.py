"""
Total accessors over scraped / submitted JSON payloads.

Scrapers and the public form send loosely shaped objects. Every accessor
here returns ``None`` (or an empty default) instead of raising when a key
is missing or holds the wrong type.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any


class UntrustedPayload:
    """Read-only view over a JSON object of unknown shape."""

    __slots__ = ("_data", "is_object")

    def __init__(self, data: Any):
        self.is_object = isinstance(data, Mapping)
        self._data: Mapping[str, Any] = data if self.is_object else {}

    @classmethod
    def from_json(cls, value: Any) -> UntrustedPayload:
        """Accept an already-decoded object or a JSON string."""
        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except ValueError:
                return cls(None)
        return cls(value)

    def raw(self, key: str) -> Any:
        return self._data.get(key)

    def has(self, key: str) -> bool:
        return self._data.get(key) is not None

    def text(self, *keys: str) -> str | None:
        """First non-blank string (or number rendered as string) among ``keys``."""
        for key in keys:
            value = self._data.get(key)
            if isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                return str(value)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    def number(self, *keys: str) -> float | None:
        for key in keys:
            value = self._data.get(key)
            if isinstance(value, bool) or value is None:
                continue
            try:
                number = float(value)
            except (TypeError, ValueError):
                continue
            if math.isfinite(number):
                return number
        return None

    def array(self, key: str) -> list[Any] | None:
        value = self._data.get(key)
        return list(value) if isinstance(value, list) else None

    def string_list(self, key: str) -> list[str]:
        values = self.array(key) or []
        return [item.strip() for item in values if isinstance(item, str) and item.strip()]

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
