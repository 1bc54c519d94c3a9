from pathlib import Path

import pytest
from PyPDF2 import PdfWriter

from tplmerge.logging_setup import get_logger


@pytest.fixture(autouse=True, scope="session")
def _shared_logger():
    # Bind the stream handler once, before any per-test capture swaps stderr.
    get_logger()


SPEC = """\
elements:
  - name: title
    kind: text
  - name: link
    kind: attribute
    attribute: href
  - name: rows
    kind: repeat
"""

TEMPLATE = (
    "<div>"
    '<h1 data-slot="title">Placeholder</h1>'
    '<a data-slot="link" href="#">home</a>'
    '<ul><li data-slot="rows"><span data-field="name">x</span></li></ul>'
    "</div>"
)


@pytest.fixture
def spec_file(tmp_path: Path) -> Path:
    p = tmp_path / "spec.yaml"
    p.write_text(SPEC, encoding="utf-8")
    return p


@pytest.fixture
def template_file(tmp_path: Path) -> Path:
    p = tmp_path / "template.html"
    p.write_text(TEMPLATE, encoding="utf-8")
    return p


@pytest.fixture
def rows_file(tmp_path: Path) -> Path:
    p = tmp_path / "rows.json"
    p.write_text('[{"name": "a"}, {"name": "b"}]', encoding="utf-8")
    return p


def make_pdf(path: Path, width: float, height: float, pages: int = 1) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    with path.open("wb") as fh:
        writer.write(fh)
    return path


class RecordingLauncher:
    def __init__(self):
        self.launched = []

    def launch(self, path):
        self.launched.append(Path(path))


class FakeSpecification:
    def __init__(self, dangling=()):
        self._dangling = list(dangling)

    def dangling_elements(self):
        return list(self._dangling)


class FakeEngineFactory:
    """Stands in for MergeEngine and records every construction."""

    def __init__(self, text: str = "rendered", dangling=()):
        self.text = text
        self.dangling = dangling
        self.calls = []
        self.engines = []

    def __call__(self, template_file, specification_file, iterators, values, config):
        self.calls.append(
            dict(
                template_file=template_file,
                specification_file=specification_file,
                iterators=iterators,
                values=values,
                config=config,
            )
        )
        engine = _FakeEngine(self.text, FakeSpecification(self.dangling))
        self.engines.append(engine)
        return engine


class _FakeEngine:
    def __init__(self, text, specification):
        self.text = text
        self.specification = specification
        self.template = None
        self.process_calls = 0

    def process(self):
        self.process_calls += 1
        return self.text
