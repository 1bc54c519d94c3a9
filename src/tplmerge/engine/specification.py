"""Specification of bindable template slots, loaded from YAML.

Accepted layouts::

    elements:
      - name: title            # binds <... data-slot="title">
        kind: text
      - name: logo
        kind: attribute
        attribute: src
      - name: rows
        kind: repeat
        iterator: items        # defaults to the element name

A bare top-level list of elements is accepted as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

KINDS = ("text", "attribute", "repeat")


class SpecificationError(Exception):
    """Raised when a specification file cannot be loaded or is invalid."""
    pass


@dataclass(frozen=True)
class DanglingElement:
    kind: str
    name: str
    data: Any = None


@dataclass(frozen=True)
class SpecElement:
    name: str
    kind: str
    slot: str
    attribute: str | None = None
    iterator: str | None = None
    data: dict = field(default_factory=dict, compare=False)


def _parse_element(raw: Any, index: int) -> SpecElement:
    if not isinstance(raw, dict):
        raise SpecificationError(f"Element #{index} must be a mapping, got {type(raw).__name__}")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise SpecificationError(f"Element #{index} needs a non-empty 'name'")

    kind = str(raw.get("kind", "text")).lower()
    if kind not in KINDS:
        raise SpecificationError(f"Element {name!r} has unknown kind {kind!r}; expected one of {KINDS}")

    attribute = raw.get("attribute")
    if kind == "attribute" and not attribute:
        raise SpecificationError(f"Attribute element {name!r} needs an 'attribute' key")

    iterator = (raw.get("iterator") or name) if kind == "repeat" else None

    return SpecElement(
        name=name,
        kind=kind,
        slot=str(raw.get("slot") or name),
        attribute=str(attribute) if attribute else None,
        iterator=iterator,
        data=dict(raw),
    )


class Specification:
    def __init__(self, elements: list[SpecElement], path: Path | None = None):
        seen: set[str] = set()
        for el in elements:
            if el.name in seen:
                raise SpecificationError(f"Duplicate element name {el.name!r}")
            seen.add(el.name)

        self.path = path
        self.elements = list(elements)
        self._dangling: list[DanglingElement] = []

    @classmethod
    def from_file(cls, path: Path) -> "Specification":
        path = Path(path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise SpecificationError(f"Malformed specification {path}: {exc}") from exc

        if isinstance(raw, dict):
            raw = raw.get("elements")
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise SpecificationError(f"Specification {path} must list its elements")

        return cls([_parse_element(item, i) for i, item in enumerate(raw, start=1)], path=path)

    def record_dangling(self, elements: list[DanglingElement]) -> None:
        self._dangling = list(elements)

    def dangling_elements(self) -> list[DanglingElement]:
        """Elements left unmatched by the last merge, in discovery order."""
        return list(self._dangling)
