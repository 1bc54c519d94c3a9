from pathlib import Path

import pytest

from tplmerge.config import Settings
from tplmerge.engine.merge_engine import EngineError, MergeEngine
from tplmerge.engine.specification import Specification, SpecificationError
from tplmerge.services.iterators import JsonIterator


def _write(tmp_path: Path, name: str, text: str) -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_binds_text_attribute_and_repeat(spec_file, template_file, rows_file):
    engine = MergeEngine(
        template_file,
        spec_file,
        iterators={"rows": JsonIterator(rows_file)},
        values={"title": "Hello", "link": "https://example.org"},
    )
    text = engine.process().text

    assert "<h1>Hello</h1>" in text
    assert 'href="https://example.org"' in text
    assert "<li><span>a</span></li><li><span>b</span></li>" in text
    assert "data-slot" not in text
    assert "data-field" not in text
    assert engine.specification.dangling_elements() == []


def test_values_are_escaped(spec_file, template_file):
    text = MergeEngine(template_file, spec_file, values={"title": "<b>&</b>"}).process().text
    assert "<h1>&lt;b&gt;&amp;&lt;/b&gt;</h1>" in text


def test_missing_values_keep_template_content(spec_file, template_file):
    text = MergeEngine(template_file, spec_file).process().text
    assert "<h1>Placeholder</h1>" in text
    assert "<li><span>x</span></li>" in text


def test_missing_values_blank(spec_file, template_file, tmp_path):
    settings = Settings({"missing_value": "blank"})
    text = MergeEngine(template_file, spec_file, config=settings).process().text
    assert "<h1></h1>" in text
    assert "<li>" not in text


def test_slot_attributes_can_be_kept(spec_file, template_file):
    settings = Settings({"strip_slot_attributes": False})
    text = MergeEngine(template_file, spec_file, values={"title": "T"}, config=settings).process().text
    assert 'data-slot="title"' in text


def test_repeat_with_dotted_and_self_fields(tmp_path):
    spec = _write(tmp_path, "s.yaml", "- name: people\n  kind: repeat\n  iterator: items\n")
    tpl = _write(
        tmp_path,
        "t.html",
        '<ol><li data-slot="people"><b data-field="who.first">?</b> '
        '<i data-field="missing">keep</i></li></ol>',
    )
    items = [{"who": {"first": "Ada"}}, {"who": {"first": "Alan"}}]
    text = MergeEngine(tpl, spec, iterators={"items": items}).process().text
    assert "<b>Ada</b>" in text and "<b>Alan</b>" in text
    assert text.count("<i>keep</i>") == 2

    spec2 = _write(tmp_path, "s2.yaml", "- {name: tags, kind: repeat}\n")
    tpl2 = _write(tmp_path, "t2.html", '<p><span data-slot="tags" data-field=".">t</span></p>')
    text2 = MergeEngine(tpl2, spec2, iterators={"tags": ["x", 2, True]}).process().text
    assert "<span>x</span><span>2</span><span>true</span>" in text2


def test_dangling_elements_both_ways(tmp_path):
    spec = _write(
        tmp_path,
        "s.yaml",
        "elements:\n"
        "  - {name: title, kind: text}\n"
        "  - {name: missing, kind: attribute, attribute: alt}\n",
    )
    tpl = _write(tmp_path, "t.html", '<div><h1 data-slot="title">x</h1><p data-slot="orphan">o</p></div>')
    engine = MergeEngine(tpl, spec)
    engine.process()

    dangling = engine.specification.dangling_elements()
    assert [(d.kind, d.name) for d in dangling] == [("attribute", "missing"), ("slot", "orphan")]
    assert dangling[0].data == {"name": "missing", "kind": "attribute", "attribute": "alt"}
    assert dangling[1].data["tag"] == "p"


def test_process_only_once(spec_file, template_file):
    engine = MergeEngine(template_file, spec_file)
    engine.process()
    with pytest.raises(EngineError):
        engine.process()


def test_invalid_specifications(tmp_path):
    bad_kind = _write(tmp_path, "a.yaml", "- {name: x, kind: loop}\n")
    with pytest.raises(SpecificationError, match="unknown kind"):
        Specification.from_file(bad_kind)

    no_attr = _write(tmp_path, "b.yaml", "- {name: x, kind: attribute}\n")
    with pytest.raises(SpecificationError):
        Specification.from_file(no_attr)

    dup = _write(tmp_path, "c.yaml", "- {name: x}\n- {name: x}\n")
    with pytest.raises(SpecificationError, match="Duplicate"):
        Specification.from_file(dup)

    broken = _write(tmp_path, "d.yaml", "elements: [\n")
    with pytest.raises(SpecificationError):
        Specification.from_file(broken)


def test_missing_template_file(spec_file, tmp_path):
    with pytest.raises(FileNotFoundError):
        MergeEngine(tmp_path / "nope.html", spec_file)


def test_document_keeps_its_doctype(tmp_path):
    spec = _write(tmp_path, "s.yaml", "- {name: greeting}\n")
    tpl = _write(
        tmp_path,
        "t.html",
        "<!DOCTYPE html>\n<html><head><title>t</title></head>"
        '<body><p data-slot="greeting">x</p></body></html>\n',
    )
    text = MergeEngine(tpl, spec, values={"greeting": "Hi"}).process().text

    assert text.startswith("<!DOCTYPE html>")
    assert text.count("<html>") == 1
    assert "<p>Hi</p>" in text


def test_several_top_level_elements_are_not_wrapped(tmp_path):
    spec = _write(tmp_path, "s.yaml", "- {name: a}\n- {name: b}\n")
    tpl = _write(tmp_path, "t.html", '<p data-slot="a">x</p><p data-slot="b">y</p>')

    text = MergeEngine(tpl, spec, values={"a": "1", "b": "2"}).process().text

    assert text == "<p>1</p><p>2</p>"


def test_top_level_repeat_in_fragment(tmp_path):
    spec = _write(tmp_path, "s.yaml", "- {name: rows, kind: repeat}\n")
    tpl = _write(tmp_path, "t.html", 'lead <p data-slot="rows" data-field=".">x</p>')

    text = MergeEngine(tpl, spec, iterators={"rows": ["a", "b"]}).process().text

    assert text == "lead <p>a</p><p>b</p>"
