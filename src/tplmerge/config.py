from __future__ import annotations
import shlex
import yaml
from pathlib import Path
from reportlab.lib.pagesizes import A4, legal, letter


DEFAULTS = {
    "strip_slot_attributes": True,
    "missing_value": "keep",
    "page_size": "letter",
    "margin_pts": 72,
    "font_size": 10,
    "viewer_command": None,
    "preview_prefix": "tplmerge_",
    "preview_suffix": ".html",
    "log_file": None,
    }

PAGE_SIZES = {"letter": letter, "a4": A4, "legal": legal}
MISSING_VALUE_POLICIES = ("keep", "blank")

class Settings:
    def __init__(self, data: dict | None = None):
        self._data = {**DEFAULTS, **(data or {})}

    @property
    def page_size(self) -> tuple[float, float]:
        key = str(self._data["page_size"]).lower()
        if key not in PAGE_SIZES:
            raise ValueError(f"Unknown page_size {key!r}; expected one of {sorted(PAGE_SIZES)}")
        return PAGE_SIZES[key]

    @property
    def missing_value(self) -> str:
        policy = str(self._data["missing_value"]).lower()
        if policy not in MISSING_VALUE_POLICIES:
            raise ValueError(f"Unknown missing_value {policy!r}; expected 'keep' or 'blank'")
        return policy

    @property
    def viewer_command(self) -> list[str] | None:
        cmd = self._data["viewer_command"]
        if not cmd:
            return None
        if isinstance(cmd, str):
            return shlex.split(cmd)
        return [str(part) for part in cmd]

    @classmethod
    def from_file(cls, path: Path) -> "Settings":
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls(data)

    def get(self, key: str, default=None):
        return self._data.get(key, default)
