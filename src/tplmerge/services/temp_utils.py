from __future__ import annotations
from pathlib import Path
import tempfile


def write_preview_file(text: str, prefix: str = "tplmerge_", suffix: str = ".html") -> Path:
    """
    Write text as UTF-8 into a new, uniquely named temp file and return its path.
    The file is left on disk so a viewer can read it after this process exits.
    """
    with tempfile.NamedTemporaryFile(mode="wb", prefix=prefix, suffix=suffix, delete=False) as fh:
        fh.write(text.encode("utf-8"))
        return Path(fh.name)
