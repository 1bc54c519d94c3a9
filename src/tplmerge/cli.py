from __future__ import annotations
import sys
from typing import Callable, Sequence

import typer

from .engine.merge_engine import MergeEngine
from .errors import HelpRequested, TplMergeError
from .logging_setup import get_logger
from .options import parse_options
from .pipeline import dispatch
from .services.viewer import ViewerLauncher


def main(
    argv: Sequence[str] | None = None,
    *,
    launcher: ViewerLauncher | None = None,
    engine_factory: Callable[..., MergeEngine] = MergeEngine,
) -> int:
    """Parse ``argv``, run the request and return the process exit code."""
    logger = get_logger()
    try:
        options = parse_options(argv)
        dispatch(options, launcher=launcher, engine_factory=engine_factory)
    except HelpRequested as req:
        return req.exit_code
    except TplMergeError as exc:
        typer.echo(f"{exc.label}: {exc}", err=True)
        if exc.__cause__ is not None:
            logger.debug("Caused by", exc_info=exc.__cause__)
        return exc.exit_code
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
