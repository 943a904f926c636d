"""Unit tests for rendering resolved blocks in each run mode."""

from __future__ import annotations

import dataclasses as dc

import pytest
from bs4 import BeautifulSoup

from mdbook_admonish.directives import DirectiveTable
from mdbook_admonish.modes import RunMode
from mdbook_admonish.render import render_block
from mdbook_admonish.resolve import ResolvedBlock


@pytest.fixture
def note_block() -> ResolvedBlock:
    """Return a titled note with an anchor, as the pipeline would build it."""
    definition = DirectiveTable.with_custom(()).get("note")
    assert definition is not None, "expected the built-in note directive"
    return ResolvedBlock(
        definition=definition,
        keyword="note",
        title="Note",
        explicit_id=None,
        id_prefix="admonition-",
        collapsible=False,
        content="Hello",
        source="```admonish\nHello\n```",
        anchor_id="admonition-note",
    )


def test_html_output_shape(note_block: ResolvedBlock) -> None:
    """The HTML layout is stable, line by line."""
    expected = (
        "\n"
        '<div id="admonition-note" class="admonition admonish-note" role="note" '
        'aria-labelledby="admonition-note-title">\n'
        '<div id="admonition-note-title" class="admonition-title" '
        'role="heading" aria-level="2">\n'
        '<a class="admonition-anchor-link" href="#admonition-note"></a>\n'
        "\n"
        "Note\n"
        "\n"
        "</div>\n"
        '<div id="admonition-note-body" role="region" '
        'aria-labelledby="admonition-note-title">\n'
        "\n"
        "Hello\n"
        "\n"
        "</div>\n"
        "</div>"
    )

    assert render_block(note_block, RunMode.HTML) == expected, "unexpected HTML"


def test_title_bar_and_body_carry_aria(note_block: ResolvedBlock) -> None:
    """Assistive technology sees a labelled heading and a labelled region."""
    soup = BeautifulSoup(render_block(note_block, RunMode.HTML), "html.parser")

    title = soup.find(class_="admonition-title")
    assert title is not None, "expected a title bar"
    assert title.get("role") == "heading", "expected a heading role on the title"
    assert title.get("aria-level") == "2", "expected a heading level"
    body = soup.find(id="admonition-note-body")
    assert body is not None, "expected the body element"
    assert body.get("role") == "region", "expected a region role on the body"
    assert body.get("aria-labelledby") == "admonition-note-title", (
        "expected the body to be labelled by the title bar"
    )


def test_rendering_is_idempotent(note_block: ResolvedBlock) -> None:
    """The same block renders byte-identically every time."""
    for mode in RunMode:
        assert render_block(note_block, mode) == render_block(note_block, mode), (
            f"expected identical output in {mode} mode"
        )


def test_collapsible_uses_details_and_summary(note_block: ResolvedBlock) -> None:
    """Collapsible blocks use the native disclosure elements."""
    block = dc.replace(note_block, collapsible=True)
    soup = BeautifulSoup(render_block(block, RunMode.HTML), "html.parser")

    details = soup.find("details")
    assert details is not None, "expected a details container"
    assert details.get("open") is None, "expected the block to start collapsed"
    summary = details.find("summary", class_="admonition-title")
    assert summary is not None, "expected a summary title bar"
    assert summary.get_text(strip=True) == "Note", "expected the title in summary"
    assert summary.get("role") is None, "expected the native summary role"
    assert summary.get("aria-controls") == "admonition-note-body", (
        "expected the summary to reference the body it discloses"
    )


def test_untitled_block_has_no_title_bar(note_block: ResolvedBlock) -> None:
    """An empty title removes the title bar and its ARIA reference."""
    block = dc.replace(note_block, title="")
    soup = BeautifulSoup(render_block(block, RunMode.HTML), "html.parser")

    container = soup.find("div", class_="admonition")
    assert container is not None, "expected the container"
    assert soup.find(class_="admonition-title") is None, "expected no title bar"
    assert container.get("aria-labelledby") is None, "expected no aria reference"
    body = soup.find(id="admonition-note-body")
    assert body is not None, "expected the body element"
    assert body.get("aria-labelledby") is None, "expected an unlabelled body"
    assert container.get_text(strip=True) == "Hello", "expected the body to render"


def test_classnames_and_ids_are_escaped(note_block: ResolvedBlock) -> None:
    """Attribute values cannot break out of their quotes."""
    block = dc.replace(
        note_block, classnames=("extra", "more"), anchor_id='odd"id'
    )
    html = render_block(block, RunMode.HTML)

    assert 'id="odd&quot;id"' in html, "expected the id to be escaped"
    assert 'class="admonition admonish-note extra more"' in html, (
        "expected directive class before the extra classes"
    )


def test_html_is_indented_to_the_fence_column(note_block: ResolvedBlock) -> None:
    """Non-blank lines get the fence column back; blank lines stay empty."""
    block = dc.replace(note_block, indent=2, content="Line one\n\nLine two")
    lines = render_block(block, RunMode.HTML).split("\n")[1:]

    for line in lines:
        assert line == "" or line.startswith("  "), f"unexpected line {line!r}"
    assert "  Line two" in lines, "expected content lines to be re-indented"


def test_html_requires_an_anchor(note_block: ResolvedBlock) -> None:
    """Blocks must pass through the anchor registry before HTML rendering."""
    with pytest.raises(ValueError, match="anchor id"):
        render_block(dc.replace(note_block, anchor_id=None), RunMode.HTML)


def test_strip_mode_emits_only_content(note_block: ResolvedBlock) -> None:
    """Strip mode drops all admonition markup."""
    block = dc.replace(note_block, indent=2, content="Hello\n\nWorld")

    assert render_block(block, RunMode.STRIP) == "\n  Hello\n\n  World\n", (
        "expected only the re-indented content"
    )


def test_preserve_mode_returns_source(note_block: ResolvedBlock) -> None:
    """Preserve mode returns the fence verbatim."""
    assert render_block(note_block, RunMode.PRESERVE) == note_block.source, (
        "expected the original fence"
    )
