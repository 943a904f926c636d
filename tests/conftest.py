"""Shared fixtures for the mdbook_admonish test suite."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest
from bs4 import BeautifulSoup

from mdbook_admonish.config import load_admonish_config
from mdbook_admonish.pipeline import AdmonitionPipeline

if typ.TYPE_CHECKING:
    from pathlib import Path

    from mdbook_admonish.config import AdmonishConfig


@pytest.fixture
def default_config() -> AdmonishConfig:
    """Return the configuration of a book with an empty admonish table."""
    return load_admonish_config({"assets_version": "3.0.2"})


@pytest.fixture
def html_pipeline(default_config: AdmonishConfig) -> AdmonitionPipeline:
    """Return a pipeline rendering HTML for the ``html`` renderer."""
    return AdmonitionPipeline(default_config, "html")


@pytest.fixture
def render_html(
    html_pipeline: AdmonitionPipeline,
) -> typ.Callable[[str], BeautifulSoup]:
    """Return a helper that processes markdown and parses the result."""

    def _render(markdown: str) -> BeautifulSoup:
        output = html_pipeline.process_document(markdown, path="chapter.md")
        return BeautifulSoup(output, "html.parser")

    return _render


@pytest.fixture
def book_dir(tmp_path: Path) -> Path:
    """Create a minimal mdbook project with a commented ``book.toml``."""
    (tmp_path / "book.toml").write_text(
        dedent(
            """\
            [book]
            # Keep this comment
            title = "Example book"
            """
        ),
        encoding="utf-8",
    )
    return tmp_path
