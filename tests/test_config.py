"""Unit tests for loading the ``[preprocessor.admonish]`` configuration."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from mdbook_admonish.config import (
    admonish_table,
    load_admonish_config,
    load_admonish_config_from_book,
)
from mdbook_admonish.errors import AdmonishConfigError
from mdbook_admonish.modes import OnFailure, RunMode


def test_defaults_for_an_empty_table() -> None:
    """An empty table yields the documented defaults."""
    config = load_admonish_config({})

    assert config.on_failure is OnFailure.CONTINUE, "expected continue by default"
    assert config.assets_version is None, "expected no assets version"
    assert config.defaults.title is None, "expected no default title"
    assert config.defaults.collapsible is False, "expected static blocks"
    assert config.defaults.css_id_prefix == "admonition-", "expected default prefix"
    assert config.custom == (), "expected no custom directives"


def test_full_table() -> None:
    """Every supported key is read into the typed config."""
    config = load_admonish_config(
        {
            "command": "mdbook-admonish",
            "assets_version": "3.0.2",
            "on_failure": "bail",
            "default": {"title": "Heads up", "collapsible": True, "css_id_prefix": "x-"},
            "renderer": {"test": {"render_mode": "strip"}},
            "custom": [
                {
                    "directive": "frog",
                    "icon": "icons/frog.svg",
                    "color": "2e7d32",
                    "aliases": ["toad"],
                    "title": "Ribbit",
                    "class": "amphibian green",
                }
            ],
        }
    )

    assert config.on_failure is OnFailure.BAIL, "expected bail"
    assert config.defaults.title == "Heads up", "expected the default title"
    assert config.defaults.collapsible is True, "expected collapsible default"
    assert config.defaults.css_id_prefix == "x-", "expected the custom prefix"
    assert config.render_mode_for("test") is RunMode.STRIP, "expected strip for test"
    (frog,) = config.custom
    assert frog.icon == Path("icons/frog.svg"), "expected the icon path"
    assert frog.color.hex == "#2e7d32", "expected the parsed colour"
    assert frog.classnames == ("amphibian", "green"), "expected split classes"
    definition = config.directive_definitions()[0]
    assert definition.keywords == ("frog", "toad"), "expected keywords with aliases"
    assert definition.title == "Ribbit", "expected the custom title"


def test_kebab_case_prefix_is_accepted() -> None:
    """mdbook configs may spell the prefix key in kebab case."""
    config = load_admonish_config({"default": {"css-id-prefix": "note-"}})

    assert config.defaults.css_id_prefix == "note-", "expected the kebab-case key"


def test_render_mode_defaults_by_renderer() -> None:
    """html renders HTML; anything else preserves blocks."""
    config = load_admonish_config({"renderer": {"html": {}}})

    assert config.render_mode_for("html") is RunMode.HTML, "expected HTML for html"
    assert config.render_mode_for("epub") is RunMode.PRESERVE, "expected preserve"


@pytest.mark.parametrize(
    ("table", "message"),
    [
        ({"on_failure": "explode"}, "'on_failure'"),
        ({"renderer": {"html": {"render_mode": "pdf"}}}, "render_mode"),
        ({"default": {"collapsible": "yes"}}, "default.collapsible"),
        ({"default": "oops"}, "'default' must be a table"),
        ({"custom": {"directive": "frog"}}, "array of tables"),
        ({"custom": [{"directive": "frog", "color": "#000000"}]}, "custom\\[0\\]"),
        (
            {"custom": [{"directive": "bad name", "icon": "a.svg", "color": "000000"}]},
            "Invalid directive",
        ),
        (
            {"custom": [{"directive": "frog", "icon": "a.svg", "color": "green"}]},
            "Invalid color",
        ),
        (
            {
                "custom": [
                    {"directive": "frog", "icon": "a.svg", "color": "000000", "aliases": "x"}
                ]
            },
            "aliases",
        ),
    ],
)
def test_invalid_values_raise(table: dict[str, typ.Any], message: str) -> None:
    """Invalid values produce a config error naming the problem."""
    with pytest.raises(AdmonishConfigError, match=message):
        load_admonish_config(table)


def test_admonish_table_requires_the_preprocessor_entry() -> None:
    """A book without ``[preprocessor.admonish]`` is rejected."""
    with pytest.raises(AdmonishConfigError, match="No configuration"):
        admonish_table({"preprocessor": {"other": {}}})


def test_load_from_book(tmp_path: Path) -> None:
    """The CLI reads the table straight from ``book.toml``."""
    (tmp_path / "book.toml").write_text(
        dedent(
            """\
            [preprocessor.admonish]
            command = "mdbook-admonish"
            assets_version = "3.0.2" # comment

            [[preprocessor.admonish.custom]]
            directive = "frog"
            icon = "frog.svg"
            color = "#2e7d32"
            """
        ),
        encoding="utf-8",
    )
    config = load_admonish_config_from_book(tmp_path)

    assert config.assets_version == "3.0.2", "expected the assets version"
    assert [custom.directive for custom in config.custom] == ["frog"], (
        "expected the custom directive from the array of tables"
    )


def test_load_from_book_errors(tmp_path: Path) -> None:
    """Missing files and tables are reported."""
    with pytest.raises(FileNotFoundError, match="book.toml"):
        load_admonish_config_from_book(tmp_path)

    (tmp_path / "book.toml").write_text('[book]\ntitle = "x"\n', encoding="utf-8")
    with pytest.raises(AdmonishConfigError, match="No configuration"):
        load_admonish_config_from_book(tmp_path)

    (tmp_path / "book.toml").write_text("[book\n", encoding="utf-8")
    with pytest.raises(AdmonishConfigError, match="not valid TOML"):
        load_admonish_config_from_book(tmp_path)
