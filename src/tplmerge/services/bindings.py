from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ..errors import ArgumentError
from .iterators import IteratorRegistry, JsonIterator, parse_iterator_spec

if TYPE_CHECKING:
    from ..config import Settings
    from ..options import Options


@dataclass
class BindingContext:
    template_file: Path
    specification_file: Path
    iterators: dict[str, JsonIterator] = field(default_factory=dict)
    values: dict[str, str] = field(default_factory=dict)
    config: "Settings | None" = None


def build_value_map(pairs: Iterable[str]) -> dict[str, str]:
    """Split ``NAME=VALUE`` pairs on the first ``=``; the last write wins."""
    values: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ArgumentError(f"--value expects NAME=VALUE, got {pair!r}")
        values[name] = value
    return values


def check_process_arguments(options: "Options") -> tuple[Path, Path]:
    """Return (specification, template) or fail without touching any file."""
    if len(options.positional) < 2:
        raise ArgumentError("expected SPECIFICATION and TEMPLATE arguments")
    if len(options.positional) > 2:
        extra = " ".join(str(p) for p in options.positional[2:])
        raise ArgumentError(f"unexpected extra arguments: {extra}")
    if options.iterator:
        parse_iterator_spec(options.iterator)
    return options.positional[0], options.positional[1]


def build_binding_context(options: "Options", settings: "Settings | None" = None) -> BindingContext:
    specification_file, template_file = check_process_arguments(options)

    registry = IteratorRegistry()
    if options.iterator:
        registry.register(options.iterator)

    return BindingContext(
        template_file=template_file,
        specification_file=specification_file,
        iterators=registry.handles,
        values=dict(options.values),
        config=settings,
    )
