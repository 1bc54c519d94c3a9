from __future__ import annotations

import re
from html import escape
from pathlib import Path

import lxml.html
from lxml import etree

SLOT_ATTRIBUTE = "data-slot"
FIELD_ATTRIBUTE = "data-field"

_DOCTYPE_RE = re.compile(r"\s*(<!doctype[^>]*>)", re.IGNORECASE)
_HTML_ROOT_RE = re.compile(r"\s*(?:<!--.*?-->\s*)*<html[\s>]", re.IGNORECASE | re.DOTALL)


class TemplateError(Exception):
    """Raised when a template file cannot be parsed or bound."""
    pass


class Template:
    """An HTML template parsed into an lxml tree. Binding mutates ``root``.

    A full document keeps its ``<html>`` root and its doctype. Anything
    else is a fragment: its top-level nodes live under a container element
    that is never serialized, so several roots round-trip unchanged.
    """

    def __init__(self, root, path: Path | None = None, doctype: str | None = None,
                 fragment: bool = False):
        self.root = root
        self.path = path
        self.doctype = doctype
        self.fragment = fragment

    @classmethod
    def from_file(cls, path: Path) -> "Template":
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            raise TemplateError(f"Template {path} is empty")
        try:
            return cls.from_string(text, path=path)
        except (etree.ParserError, ValueError) as exc:
            raise TemplateError(f"Cannot parse template {path}: {exc}") from exc

    @classmethod
    def from_string(cls, text: str, path: Path | None = None) -> "Template":
        match = _DOCTYPE_RE.match(text)
        if match:
            return cls(lxml.html.document_fromstring(text), path=path, doctype=match.group(1))
        if _HTML_ROOT_RE.match(text):
            return cls(lxml.html.document_fromstring(text), path=path)

        container = lxml.html.Element("div")
        for part in lxml.html.fragments_fromstring(text):
            if isinstance(part, str):
                container.text = part
            else:
                container.append(part)
        return cls(container, path=path, fragment=True)

    def find_slot(self, slot: str) -> list:
        return self.root.xpath(f"descendant-or-self::*[@{SLOT_ATTRIBUTE}=$slot]", slot=slot)

    def slots(self) -> dict[str, list]:
        """All ``data-slot`` names in document order, with their nodes."""
        found: dict[str, list] = {}
        for node in self.root.iter():
            if not isinstance(node.tag, str):
                continue
            slot = node.get(SLOT_ATTRIBUTE)
            if slot is not None:
                found.setdefault(slot, []).append(node)
        return found

    def strip_binding_attributes(self) -> None:
        for node in self.root.iter():
            if not isinstance(node.tag, str):
                continue
            for attr in (SLOT_ATTRIBUTE, FIELD_ATTRIBUTE):
                if attr in node.attrib:
                    del node.attrib[attr]

    def to_string(self) -> str:
        if not self.fragment:
            return lxml.html.tostring(self.root, encoding="unicode", doctype=self.doctype)
        parts = [escape(self.root.text or "", quote=False)]
        parts.extend(lxml.html.tostring(child, encoding="unicode") for child in self.root)
        return "".join(parts)
