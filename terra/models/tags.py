"""
Tag Store
=========
Named integer facts accumulated from selected entities.

A store is immutable once built: ``add`` and ``merge`` return new stores.
Presence and value are distinct questions. A tag explicitly set to 0 is
present (``has`` is True) while its value is 0, the same value an absent
tag reports.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def _checked(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Tag '{name}' must have an integer weight, got {value!r}")
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"Tag '{name}' weight {value} is outside the 32-bit range")
    return value


class TagStore(Mapping):
    """Immutable mapping of tag name to integer weight."""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping] = None):
        checked: Dict[str, int] = {}
        for name, value in (values or {}).items():
            if not isinstance(name, str) or not name:
                raise ValueError(f"Tag names must be non-empty strings, got {name!r}")
            checked[name] = _checked(name, value)
        self._values = checked

    # --- Mapping protocol ---

    def __getitem__(self, name: str) -> int:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v}" for k, v in sorted(self._values.items()))
        return f"TagStore({inner})"

    # --- Queries ---

    def value(self, name: str) -> int:
        return self._values.get(name, 0)

    def has(self, name: str) -> bool:
        return name in self._values

    # --- Accumulation ---

    def add(self, name: str, delta: int = 1) -> "TagStore":
        values = dict(self._values)
        values[name] = values.get(name, 0) + delta
        return TagStore(values)

    def merge(self, other: Mapping) -> "TagStore":
        values = dict(self._values)
        for name, weight in other.items():
            values[name] = values.get(name, 0) + weight
        return TagStore(values)

    @classmethod
    def sum(cls, stores: Iterable[Mapping]) -> "TagStore":
        values: Dict[str, int] = {}
        for store in stores:
            for name, weight in store.items():
                values[name] = values.get(name, 0) + weight
        return cls(values)

    @classmethod
    def coerce(cls, raw: Any) -> "TagStore":
        """
        Build a store from catalog data.

        Accepts an existing store, a mapping of name -> weight, or a list of
        names (each contributing weight 1). ``None`` yields an empty store.
        """
        if raw is None:
            return cls()
        if isinstance(raw, TagStore):
            return raw
        if isinstance(raw, Mapping):
            return cls(raw)
        if isinstance(raw, (list, tuple, set, frozenset)):
            values: Dict[str, int] = {}
            for name in raw:
                if not isinstance(name, str):
                    raise ValueError(f"Tag list entries must be strings, got {name!r}")
                values[name] = values.get(name, 0) + 1
            return cls(values)
        raise ValueError(f"Cannot read tags from {type(raw).__name__}")

    def to_text(self) -> str:
        """Space-separated names, weight suffixed when it isn't 1."""
        parts = []
        for name, weight in sorted(self._values.items()):
            parts.append(name if weight == 1 else f"{name}={weight}")
        return " ".join(parts)
