from __future__ import annotations
import subprocess
import sys
from pathlib import Path


def default_viewer_command() -> list[str]:
    if sys.platform == "darwin":
        return ["open"]
    if sys.platform == "win32":
        return ["cmd", "/c", "start", ""]
    return ["xdg-open"]


class ViewerLauncher:
    """Starts an external viewer on a file and returns immediately."""

    def __init__(self, command: list[str] | None = None):
        self.command = list(command) if command else default_viewer_command()

    def launch(self, path: Path) -> None:
        # Never waited on; output and exit status are ignored.
        subprocess.Popen(
            [*self.command, str(path)],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
