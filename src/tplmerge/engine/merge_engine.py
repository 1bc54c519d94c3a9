"""Binds values and iterators into a template according to a specification."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from .specification import DanglingElement, SpecElement, Specification
from .template import FIELD_ATTRIBUTE, Template, TemplateError


class EngineError(Exception):
    """Raised when the engine is misused, e.g. processed twice."""
    pass


@dataclass(frozen=True)
class RenderedOutput:
    text: str
    template: Template

    def __str__(self) -> str:
        return self.text


def _lookup(item: Any, key: str) -> Any:
    if key == ".":
        return item
    current = item
    for part in key.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return None
    return current


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _set_text(node, text: str) -> None:
    for child in list(node):
        node.remove(child)
    node.text = text


def _remove(node) -> None:
    parent = node.getparent()
    if parent is None:
        raise TemplateError("Cannot remove the template root element")
    tail = node.tail
    prev = node.getprevious()
    parent.remove(node)
    if tail:
        if prev is not None:
            prev.tail = (prev.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail


class MergeEngine:
    """One-shot merge of a template with its specification.

    ``process()`` may only be called once per instance; afterwards
    ``template`` holds the bound tree and ``specification`` knows its
    dangling elements.
    """

    def __init__(
        self,
        template_file: Path,
        specification_file: Path,
        iterators: Mapping[str, Iterable[Any]] | None = None,
        values: Mapping[str, str] | None = None,
        config=None,
    ):
        self.specification = Specification.from_file(Path(specification_file))
        self.template = Template.from_file(Path(template_file))
        self.iterators = dict(iterators or {})
        self.values = dict(values or {})
        self.strip_slots = bool(config.get("strip_slot_attributes", True)) if config else True
        self.missing_value = config.missing_value if config else "keep"
        self._processed = False

    def process(self) -> RenderedOutput:
        if self._processed:
            raise EngineError("MergeEngine.process() may only be called once")
        self._processed = True

        declared = {el.slot for el in self.specification.elements}
        undeclared = [
            DanglingElement(
                kind="slot",
                name=slot,
                data={"tag": nodes[0].tag, "attributes": dict(nodes[0].attrib)},
            )
            for slot, nodes in self.template.slots().items()
            if slot not in declared
        ]

        unmatched: list[DanglingElement] = []
        for el in self.specification.elements:
            nodes = self.template.find_slot(el.slot)
            if not nodes:
                unmatched.append(DanglingElement(kind=el.kind, name=el.name, data=el.data))
                continue
            for node in nodes:
                self._bind(el, node)

        self.specification.record_dangling(unmatched + undeclared)

        if self.strip_slots:
            self.template.strip_binding_attributes()
        return RenderedOutput(text=self.template.to_string(), template=self.template)

    def _bind(self, el: SpecElement, node) -> None:
        if el.kind == "repeat":
            self._bind_repeat(el, node)
            return

        value = self.values.get(el.name)
        if value is None:
            if self.missing_value == "keep":
                return
            value = ""

        if el.kind == "text":
            _set_text(node, value)
        elif el.kind == "attribute":
            node.set(el.attribute, value)

    def _bind_repeat(self, el: SpecElement, node) -> None:
        items = self.iterators.get(el.iterator)
        if items is None:
            if self.missing_value == "blank":
                _remove(node)
            return

        parent = node.getparent()
        if parent is None:
            raise TemplateError(f"Repeat element {el.name!r} cannot bind the template root")

        added = 0
        for item in items:
            clone = copy.deepcopy(node)
            clone.tail = node.tail
            for target in clone.iter():
                if not isinstance(target.tag, str):
                    continue
                key = target.get(FIELD_ATTRIBUTE)
                if key is None:
                    continue
                value = _lookup(item, key)
                if value is not None:
                    _set_text(target, _format(value))
                elif self.missing_value == "blank":
                    _set_text(target, "")
            node.addprevious(clone)
            added += 1

        if added:
            node.tail = None
        _remove(node)
