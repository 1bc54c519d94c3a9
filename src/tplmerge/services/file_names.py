from __future__ import annotations
import re
from pathlib import Path

_EXPLICIT_NAME = re.compile(r"^(\w+)=")

def split_explicit_name(spec: str) -> tuple[str | None, str]:
    # "rows=data/rows.json" -> ("rows", "data/rows.json")
    m = _EXPLICIT_NAME.match(spec)
    if not m:
        return None, spec
    return m.group(1), spec[m.end():]

def stem_name(path: str | Path) -> str:
    # "data/rows.json" -> "rows"
    return Path(path).stem
