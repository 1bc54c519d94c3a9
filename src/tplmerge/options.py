"""Command-line option model.

Parses argv into an immutable :class:`Options` using a typer command run in
non-standalone mode, so the parsed object comes back as the command's return
value instead of the process exiting.
"""

import sys
import warnings
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

import click
import typer

from .errors import ArgumentError, HelpRequested
from .logging_setup import get_logger
from .services.bindings import build_value_map

PROG_NAME = "tplmerge"

HELP_TEXT = (
    "Merge a specification and template with JSON iterators and values, "
    "then print the result, preview it in a browser or render it to PDF. "
    "With --combine, concatenate existing PDF files into --pdf instead."
)


@dataclass(frozen=True)
class Options:
    help: bool = False
    browser: bool = False
    combine: bool = False
    check: bool = False
    conf: Optional[Path] = None
    pdf: Optional[Path] = None
    iterator: Optional[str] = None
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    positional: Tuple[Path, ...] = ()


def _build_command():
    app = typer.Typer(
        add_completion=False,
        rich_markup_mode=None,
    )

    @app.command(help=HELP_TEXT, context_settings={"help_option_names": []})
    def tplmerge(
        positional: Optional[List[Path]] = typer.Argument(
            None, metavar="SPECIFICATION TEMPLATE | PDF...", show_default=False
        ),
        help_: bool = typer.Option(False, "--help", help="Show this message and exit."),
        browser: bool = typer.Option(False, "--browser", help="Open the result in a browser."),
        combine: bool = typer.Option(False, "--combine", help="Concatenate the given PDFs into --pdf."),
        check: bool = typer.Option(False, "--check", help="Fail if the specification has dangling elements."),
        conf: Optional[Path] = typer.Option(None, "--conf", metavar="PATH", help="YAML configuration file."),
        pdf: Optional[Path] = typer.Option(None, "--pdf", metavar="PATH", help="Write a PDF to PATH."),
        iterator: Optional[str] = typer.Option(
            None, "--iterator", metavar="[NAME=]PATH.json", help="Bind a JSON array as a named iterator."
        ),
        value: Optional[List[str]] = typer.Option(
            None, "--value", metavar="NAME=VALUE", help="Bind a scalar value (repeatable)."
        ),
    ) -> Options:
        return Options(
            help=help_,
            browser=browser,
            combine=combine,
            check=check,
            conf=conf,
            pdf=pdf,
            iterator=iterator,
            values=MappingProxyType(build_value_map(value or [])),
            positional=tuple(positional or ()),
        )

    return typer.main.get_command(app)


@contextmanager
def _warnings_to_log():
    """Route ``warnings.warn`` output to the tplmerge logger while parsing."""
    logger = get_logger()
    previous = warnings.showwarning

    def _show(message, category, filename, lineno, file=None, line=None):
        logger.warning("%s: %s", category.__name__, message)

    warnings.showwarning = _show
    try:
        yield
    finally:
        warnings.showwarning = previous


def _wants_help(args: Sequence[str]) -> bool:
    for arg in args:
        if arg == "--":
            return False
        if arg == "--help":
            return True
    return False


def _parse_error_types(command) -> Tuple[type, ...]:
    """ClickException bases for ``command``.

    Newer typer releases carry their own copy of click, whose exceptions do
    not derive from the installed ``click`` package. The base is found next
    to whichever click ``Command`` class the typer command is built on.
    """
    found = [click.ClickException]
    for klass in type(command).__mro__:
        package = klass.__module__.rpartition(".")[0]
        module = sys.modules.get(f"{package}.exceptions") if package else None
        base = getattr(module, "ClickException", None)
        if isinstance(base, type) and base not in found:
            found.append(base)
    return tuple(found)


def usage_text(command=None) -> str:
    command = command or _build_command()
    with command.make_context(PROG_NAME, [], resilient_parsing=True) as ctx:
        return command.get_help(ctx)


def parse_options(argv: Sequence[str] | None = None) -> Options:
    """Parse ``argv`` (defaults to ``sys.argv[1:]``).

    ``--help`` wins over every other flag and raises :class:`HelpRequested`
    after printing usage. Any parse failure becomes :class:`ArgumentError`.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    command = _build_command()

    if _wants_help(args):
        typer.echo(usage_text(command))
        raise HelpRequested()

    with _warnings_to_log():
        try:
            result = command.main(args=args, prog_name=PROG_NAME, standalone_mode=False)
        except _parse_error_types(command) as exc:
            raise ArgumentError(exc.format_message()) from exc

    if not isinstance(result, Options):
        raise ArgumentError("could not parse command line")
    return result
