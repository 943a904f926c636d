"""Tests for installing the stylesheet and updating ``book.toml``."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import pytest
import tomlkit

from mdbook_admonish.install import bundled_stylesheet, install_assets


def _book_toml(book_dir: Path) -> dict[str, typ.Any]:
    return tomlkit.parse((book_dir / "book.toml").read_text(encoding="utf-8")).unwrap()


def test_fresh_install(book_dir: Path) -> None:
    """A first install writes the stylesheet and registers the preprocessor."""
    report = install_assets(book_dir)
    config = _book_toml(book_dir)
    text = report.config_path.read_text(encoding="utf-8")

    assert report.config_changed is True, "expected book.toml to change"
    assert config["preprocessor"]["admonish"] == {
        "command": "mdbook-admonish",
        "assets_version": "3.0.2",
    }, "expected the preprocessor table"
    assert config["output"]["html"]["additional-css"] == ["mdbook-admonish.css"], (
        "expected the stylesheet in additional-css"
    )
    assert "managed by `mdbook-admonish install`" in text, "expected the version note"
    assert "# Keep this comment" in text, "expected existing comments to survive"
    assert report.stylesheet_path.read_text(encoding="utf-8") == bundled_stylesheet(), (
        "expected the bundled stylesheet to be copied"
    )


def test_second_install_is_a_no_op(book_dir: Path) -> None:
    """Running install twice leaves book.toml unchanged."""
    install_assets(book_dir)
    before = (book_dir / "book.toml").read_text(encoding="utf-8")
    report = install_assets(book_dir)

    assert report.config_changed is False, "expected no config changes"
    assert (book_dir / "book.toml").read_text(encoding="utf-8") == before, (
        "expected identical book.toml"
    )
    css = _book_toml(book_dir)["output"]["html"]["additional-css"]
    assert css.count("mdbook-admonish.css") == 1, "expected a single stylesheet entry"


def test_install_into_css_dir(book_dir: Path) -> None:
    """The stylesheet lands in the requested directory and is referenced there."""
    report = install_assets(book_dir, Path("theme"))

    assert report.stylesheet_path == book_dir / "theme" / "mdbook-admonish.css", (
        "expected the stylesheet under theme/"
    )
    assert report.stylesheet_path.exists(), "expected the stylesheet to be written"
    css = _book_toml(book_dir)["output"]["html"]["additional-css"]
    assert css == ["theme/mdbook-admonish.css"], f"unexpected additional-css {css!r}"


def test_outdated_version_is_updated(book_dir: Path) -> None:
    """An older pinned assets version is replaced by the bundled one."""
    path = book_dir / "book.toml"
    path.write_text(
        path.read_text(encoding="utf-8")
        + '\n[preprocessor.admonish]\ncommand = "mdbook-admonish"\n'
        'assets_version = "2.0.0"\n'
        '\n[output.html]\nadditional-css = ["custom.css"]\n',
        encoding="utf-8",
    )
    install_assets(book_dir)
    config = _book_toml(book_dir)

    assert config["preprocessor"]["admonish"]["assets_version"] == "3.0.2", (
        "expected the bundled version"
    )
    assert config["output"]["html"]["additional-css"] == [
        "custom.css",
        "mdbook-admonish.css",
    ], "expected the stylesheet appended after existing entries"


def test_unexpected_preprocessor_shape_is_skipped(
    book_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """A non-table ``preprocessor`` key is left alone with a warning."""
    path = book_dir / "book.toml"
    path.write_text('preprocessor = "oops"\n' + path.read_text(encoding="utf-8"))
    with caplog.at_level(logging.WARNING, logger="mdbook_admonish.install"):
        install_assets(book_dir)

    assert _book_toml(book_dir)["preprocessor"] == "oops", "expected no change"
    assert "not updating [preprocessor.admonish]" in caplog.text, (
        "expected a warning about the unexpected shape"
    )


def test_missing_book_toml(tmp_path: Path) -> None:
    """Installing outside a book fails clearly."""
    with pytest.raises(FileNotFoundError, match="book.toml"):
        install_assets(tmp_path)
