from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..config import Settings


class RenderError(Exception):
    """Raised when a bound template cannot be rendered to PDF."""
    pass


@dataclass
class TextBlock:
    """A run of text drawn with one font, followed by some vertical space."""
    text: str
    font_name: str = "Helvetica"
    font_size: float = 10
    indent: float = 0
    space_after: float = 6
    keep_lines: bool = False


# ---------------------------------------------------------------------------
# DOM → text blocks
# ---------------------------------------------------------------------------

HEADING_SCALE = {"h1": 2.0, "h2": 1.6, "h3": 1.35, "h4": 1.2, "h5": 1.1, "h6": 1.0}
SKIP_TAGS = {"head", "script", "style", "title", "template", "noscript"}
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "body", "dd", "div", "dl", "dt",
    "figure", "footer", "form", "header", "hr", "html", "li", "main", "nav", "ol",
    "p", "pre", "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
    *HEADING_SCALE,
}


def _tag(node) -> str:
    return node.tag.lower() if isinstance(node.tag, str) else ""


def _collapse(text: str | None) -> str:
    return " ".join((text or "").split())


def _has_block_children(node) -> bool:
    return any(_tag(child) in BLOCK_TAGS for child in node)


class _BlockBuilder:
    def __init__(self, base_size: float):
        self.base_size = base_size

    def paragraph(self, text: str, indent: float = 0) -> TextBlock:
        return TextBlock(text=text, font_size=self.base_size, indent=indent,
                         space_after=self.base_size * 0.6)

    def walk(self, node, indent: float = 0) -> Iterator[TextBlock]:
        tag = _tag(node)
        if not tag or tag in SKIP_TAGS:
            return

        if tag in HEADING_SCALE:
            text = _collapse(node.text_content())
            if text:
                size = self.base_size * HEADING_SCALE[tag]
                yield TextBlock(text=text, font_name="Helvetica-Bold", font_size=size,
                                space_after=size * 0.5)
        elif tag == "hr":
            yield self.paragraph("-" * 72, indent)
        elif tag == "pre":
            yield TextBlock(text=node.text_content().strip("\n"), font_name="Courier",
                            font_size=self.base_size, indent=indent, keep_lines=True,
                            space_after=self.base_size * 0.6)
        elif tag in ("ul", "ol"):
            number = 0
            for child in node:
                if _tag(child) != "li":
                    yield from self.walk(child, indent)
                    continue
                number += 1
                bullet = f"{number}." if tag == "ol" else "•"
                text = _collapse(child.text_content())
                if text:
                    yield self.paragraph(f"{bullet} {text}", indent + 12)
        elif tag == "tr":
            cells = [_collapse(c.text_content()) for c in node if _tag(c) in ("td", "th")]
            if any(cells):
                block = self.paragraph(" | ".join(cells), indent)
                if all(_tag(c) == "th" for c in node if _tag(c)):
                    block.font_name = "Helvetica-Bold"
                yield block
        elif _has_block_children(node):
            loose = _collapse(node.text)
            if loose:
                yield self.paragraph(loose, indent)
            for child in node:
                yield from self.walk(child, indent + (12 if tag == "blockquote" else 0))
                tail = _collapse(child.tail)
                if tail:
                    yield self.paragraph(tail, indent)
        else:
            text = _collapse(node.text_content())
            if text:
                yield self.paragraph(text, indent)


def template_blocks(root, base_size: float = 10) -> List[TextBlock]:
    """Flatten a bound lxml tree into the blocks the PDF layout draws."""
    body = root.find("body") if _tag(root) == "html" else None
    return list(_BlockBuilder(base_size).walk(body if body is not None else root))


# ---------------------------------------------------------------------------
# PDF helpers
# ---------------------------------------------------------------------------

def _wrap_text_lines(
    text: str,
    max_width: float,
    font_name: str,
    font_size: float,
    keep_lines: bool = False,
) -> List[str]:
    """
    Wrap the text across multiple lines so that each one fits within max_width.
    Use ReportLab's stringWidth to measure the actual length.
    """
    lines: List[str] = []
    for raw_line in text.splitlines() or [""]:
        line = raw_line.rstrip("\r\n")
        if not line or keep_lines:
            lines.append(line)
            continue

        current = ""
        for word in line.split(" "):
            candidate = word if not current else current + " " + word
            width = pdfmetrics.stringWidth(candidate, font_name, font_size)
            if width <= max_width:
                current = candidate
            else:
                if current:
                    lines.append(current)
                current = word
        if current:
            lines.append(current)

    return lines


def _draw_blocks_multi_page(
    c: canvas.Canvas,
    blocks: List[TextBlock],
    page_size: tuple[float, float],
    margin: float,
) -> int:
    """Draw blocks top to bottom, starting new pages as needed. Returns pages used."""
    page_width, page_height = page_size
    usable_width = page_width - 2 * margin
    top = page_height - margin
    y = top

    pages = 1
    for block in blocks:
        leading = block.font_size * 1.3
        lines = _wrap_text_lines(
            block.text, usable_width - block.indent, block.font_name, block.font_size,
            keep_lines=block.keep_lines,
        )
        c.setFont(block.font_name, block.font_size)
        for line in lines:
            if y - leading < margin:
                c.showPage()
                c.setFont(block.font_name, block.font_size)
                y = top
                pages += 1
            y -= leading
            if line:
                c.drawString(margin + block.indent, y, line)
        y -= block.space_after

    return pages


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class PdfRenderer:
    def __init__(self, template, output_path: Path, settings: Settings | None = None):
        self.template = template
        self.output_path = Path(output_path)
        self.settings = settings or Settings()

    def process(self) -> int:
        """Write the PDF and return the number of pages drawn."""
        try:
            page_size = self.settings.page_size
            margin = float(self.settings.get("margin_pts"))
            blocks = template_blocks(self.template.root, float(self.settings.get("font_size")))

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            c = canvas.Canvas(str(self.output_path), pagesize=page_size)
            pages = _draw_blocks_multi_page(c, blocks, page_size, margin)
            c.save()
        except Exception as exc:
            raise RenderError(f"Cannot render PDF {self.output_path}: {exc}") from exc
        return pages
