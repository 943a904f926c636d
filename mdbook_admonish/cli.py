"""Cyclopts CLI entrypoint for the ``mdbook-admonish`` preprocessor.

Without a subcommand the tool speaks the mdbook preprocessor protocol: it
reads ``[context, book]`` JSON on stdin and writes the processed book to
stdout. The subcommands support mdbook's renderer probe and set up a book to
use the preprocessor.

Logs go to stderr, since stdout carries the protocol. Set
``MDBOOK_ADMONISH_LOG`` (for example to ``DEBUG``) to change the level.

Examples
--------
Install the stylesheet into the book in the current directory:

>>> from mdbook_admonish.cli import app
>>> app(["install", "."])  # doctest: +SKIP

Write styles for the configured custom directives:

>>> app(["generate-custom", "theme/custom.css"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from .book import preprocess as run_preprocess
from .book import supports_renderer
from .custom_css import generate_custom_css
from .errors import AdmonishError
from .install import install_assets

LOG_LEVEL_ENV = "MDBOOK_ADMONISH_LOG"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)

app = App(
    name="mdbook-admonish",
    help="mdbook preprocessor to add support for admonitions.",
)


@app.default
def preprocess() -> None:
    """Run as an mdbook preprocessor, reading stdin and writing stdout."""
    output = run_preprocess(sys.stdin.buffer.read())
    sys.stdout.buffer.write(output)
    sys.stdout.buffer.flush()


@app.command(help="Check whether a renderer is supported by this preprocessor.")
def supports(
    renderer: typ.Annotated[str, Parameter(help="Name of the mdbook renderer")],
) -> None:
    """Exit with status 0 when ``renderer`` is supported, 1 otherwise."""
    if not supports_renderer(renderer):
        raise SystemExit(1)


@app.command(help="Install the required assets and add them to book.toml.")
def install(
    directory: typ.Annotated[
        Path, Parameter(help="Root directory for the book, containing book.toml")
    ] = Path(),
    *,
    css_dir: typ.Annotated[
        Path,
        Parameter(help="Directory relative to the book root for the stylesheet"),
    ] = Path(),
) -> None:
    """Copy ``mdbook-admonish.css`` into the book and update its config.

    Parameters
    ----------
    directory : Path, optional
        Book root containing ``book.toml``; defaults to the current directory.
    css_dir : Path, optional
        Where to place the stylesheet, relative to ``directory``.

    Raises
    ------
    FileNotFoundError
        If ``book.toml`` is missing.
    AdmonishConfigError
        If ``book.toml`` cannot be parsed.
    """
    install_assets(directory, css_dir)


@app.command(
    name="generate-custom",
    help="Generate a stylesheet for the custom directives in book.toml.",
)
def generate_custom(
    output: typ.Annotated[Path, Parameter(help="File to write the stylesheet to")],
    *,
    book_dir: typ.Annotated[
        Path,
        Parameter(name="--dir", help="Root directory for the book, containing book.toml"),
    ] = Path(),
) -> None:
    """Render the custom directive styles configured in ``book_dir``."""
    generate_custom_css(book_dir, output)


def configure_logging() -> None:
    """Send log records to stderr at the level named by ``MDBOOK_ADMONISH_LOG``."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def main() -> None:
    """Invoke the Cyclopts application behind the ``mdbook-admonish`` command.

    Errors raised by a command are logged and turned into exit status 1,
    without writing anything to stdout.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    configure_logging()
    try:
        app()
    except (AdmonishError, OSError) as exc:
        logger.error("Fatal error: %s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
