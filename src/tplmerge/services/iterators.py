"""Named JSON data sources bound into repeated template regions."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from ..errors import ArgumentError
from .file_names import split_explicit_name, stem_name


class IteratorKind(Enum):
    JSON = "json"


class IteratorSourceError(Exception):
    """Raised when an iterator source file is missing or malformed."""
    pass


@dataclass(frozen=True)
class IteratorEntry:
    name: str
    source: Path
    kind: IteratorKind


def parse_iterator_spec(raw: str) -> IteratorEntry:
    """Turn ``[NAME=]PATH.json`` into an :class:`IteratorEntry`.

    Without an explicit name, the file stem is used.
    """
    name, source = split_explicit_name(raw)

    if source.lower().endswith(".json"):
        if not name:
            name = stem_name(source)
        return IteratorEntry(name=name, source=Path(source), kind=IteratorKind.JSON)

    raise ArgumentError(f"unknown iterator format: {source!r} (expected a .json file)")


class JsonIterator:
    """Iterator handle over a JSON array, loaded eagerly on construction."""

    def __init__(self, path: Path):
        self.path = Path(path)
        if not self.path.is_file():
            raise IteratorSourceError(f"Iterator source not found: {self.path}")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise IteratorSourceError(f"Malformed JSON in {self.path}: {exc}") from exc
        if not isinstance(data, list):
            raise IteratorSourceError(
                f"Iterator source {self.path} must contain a JSON array, got {type(data).__name__}"
            )
        self._items = data

    @property
    def items(self) -> list[Any]:
        return self._items

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"JsonIterator({str(self.path)!r}, items={len(self._items)})"


_HANDLE_TYPES = {IteratorKind.JSON: JsonIterator}


class IteratorRegistry:
    """Maps iterator names to loaded handles. Names are unique."""

    def __init__(self) -> None:
        self._handles: dict[str, JsonIterator] = {}

    def register(self, raw: str) -> IteratorEntry:
        entry = parse_iterator_spec(raw)
        if entry.name in self._handles:
            raise ArgumentError(f"iterator {entry.name!r} is already registered")
        self._handles[entry.name] = _HANDLE_TYPES[entry.kind](entry.source)
        return entry

    @property
    def handles(self) -> dict[str, JsonIterator]:
        return dict(self._handles)
