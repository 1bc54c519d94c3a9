from __future__ import annotations
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable

import typer

from .config import Settings
from .engine.merge_engine import MergeEngine
from .errors import ArgumentError, CollaboratorError, ConfigurationError, TplMergeError
from .logging_setup import attach_log_file, get_logger
from .options import Options
from .services.bindings import BindingContext, build_binding_context, check_process_arguments
from .services.consistency import check_consistency
from .services.pdf_merge import merge_pdfs
from .services.pdf_render import PdfRenderer
from .services.temp_utils import write_preview_file
from .services.viewer import ViewerLauncher


class OutputMode(Enum):
    PDF = "pdf"
    BROWSER = "browser"
    STDOUT = "stdout"


def select_output_mode(options: Options) -> OutputMode:
    """Single precedence rule for process mode: PDF, then BROWSER, then STDOUT."""
    if options.pdf is not None:
        return OutputMode.PDF
    if options.browser:
        return OutputMode.BROWSER
    return OutputMode.STDOUT


@contextmanager
def collaborator_boundary(what: str):
    """Normalize failures of an external collaborator into CollaboratorError."""
    try:
        yield
    except TplMergeError:
        raise
    except Exception as exc:
        raise CollaboratorError(f"{what} failed: {exc}") from exc


def dispatch(
    options: Options,
    *,
    launcher: ViewerLauncher | None = None,
    engine_factory: Callable[..., MergeEngine] = MergeEngine,
) -> None:
    """Run one request: combine PDFs, or merge once and write one output."""
    if options.combine:
        run_combine(options)
    else:
        run_process(options, launcher=launcher, engine_factory=engine_factory)


def run_combine(options: Options) -> Path:
    logger = get_logger()
    if options.pdf is None:
        raise ConfigurationError("--combine requires --pdf=PATH for the output file")
    if not options.positional:
        raise ArgumentError("--combine needs at least one input PDF")

    inputs = list(options.positional)
    with collaborator_boundary("PDF combine"):
        out = merge_pdfs(inputs, options.pdf, status_cb=logger.debug)

    logger.info("Combined %d PDF(s) into %s", len(inputs), out)
    return out


def load_settings(options: Options) -> Settings | None:
    if options.conf is None:
        return None
    with collaborator_boundary(f"Loading config {options.conf}"):
        settings = Settings.from_file(options.conf)
        if settings.get("log_file"):
            attach_log_file(Path(settings.get("log_file")))
    return settings


def run_process(
    options: Options,
    *,
    launcher: ViewerLauncher | None = None,
    engine_factory: Callable[..., MergeEngine] = MergeEngine,
) -> OutputMode:
    logger = get_logger()
    mode = select_output_mode(options)
    check_process_arguments(options)

    config = load_settings(options)
    settings = config or Settings()

    with collaborator_boundary("Loading iterator"):
        ctx: BindingContext = build_binding_context(options, config)

    with collaborator_boundary("Merge"):
        engine = engine_factory(
            ctx.template_file,
            ctx.specification_file,
            ctx.iterators,
            ctx.values,
            ctx.config,
        )
        rendered = engine.process()

    if mode is OutputMode.PDF:
        with collaborator_boundary("PDF rendering"):
            pages = PdfRenderer(engine.template, options.pdf, settings).process()
        logger.info("Wrote %s (%d page(s))", options.pdf, pages)

    elif mode is OutputMode.BROWSER:
        with collaborator_boundary("Writing preview file"):
            preview = write_preview_file(
                str(rendered),
                prefix=str(settings.get("preview_prefix")),
                suffix=str(settings.get("preview_suffix")),
            )
        typer.echo(str(preview))
        viewer = launcher or ViewerLauncher(settings.viewer_command)
        try:
            viewer.launch(preview)
        except OSError as exc:
            logger.warning("Could not start viewer for %s: %s", preview, exc)

    else:
        typer.echo(str(rendered))

    if options.check:
        check_consistency(engine.specification, logger)

    return mode
