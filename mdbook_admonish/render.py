"""Turn resolved blocks into replacement markdown for each run mode.

HTML output is markdown-embedded HTML: the title and body are separated from
the surrounding tags by blank lines so mdbook renders their markdown. The
anchor link sits inside the raw HTML part of the title bar so it never gets
wrapped in a paragraph of its own.
"""

from __future__ import annotations

import typing as typ
from html import escape

from mdbook_admonish._constants import ANCHOR_BODY_SUFFIX, ANCHOR_TITLE_SUFFIX
from mdbook_admonish.modes import RunMode
from mdbook_admonish.reflow import indent

if typ.TYPE_CHECKING:
    from mdbook_admonish.resolve import ResolvedBlock


def render_block(block: ResolvedBlock, mode: RunMode) -> str:
    """Return the replacement text for ``block`` under ``mode``.

    Parameters
    ----------
    block : ResolvedBlock
        Resolved block; HTML mode requires ``anchor_id`` to be set.
    mode : RunMode
        Output mode selected for the run.

    Returns
    -------
    str
        Replacement text starting at the fence column.
    """
    match mode:
        case RunMode.HTML:
            return _render_html(block)
        case RunMode.STRIP:
            return _render_strip(block)
        case RunMode.PRESERVE:
            return block.source
    msg = f"Unsupported render mode: {mode!r}"
    raise ValueError(msg)


def _render_html(block: ResolvedBlock) -> str:
    anchor = block.anchor_id
    if anchor is None:
        msg = "Cannot render HTML for a block without an anchor id."
        raise ValueError(msg)
    container = "details" if block.collapsible else "div"
    classes = " ".join(
        dict.fromkeys(["admonition", block.definition.class_name, *block.classnames])
    )
    attributes = f'id="{escape(anchor)}" class="{escape(classes)}" role="note"'
    title_id = escape(f"{anchor}{ANCHOR_TITLE_SUFFIX}")
    body_id = escape(f"{anchor}{ANCHOR_BODY_SUFFIX}")

    lines: list[str] = []
    if block.title:
        # <summary> keeps its native disclosure role.
        title_tag = (
            f'<summary id="{title_id}" class="admonition-title" '
            f'aria-controls="{body_id}">'
            if block.collapsible
            else f'<div id="{title_id}" class="admonition-title" '
            'role="heading" aria-level="2">'
        )
        lines.extend(
            [
                f'<{container} {attributes} aria-labelledby="{title_id}">',
                title_tag,
                f'<a class="admonition-anchor-link" href="#{escape(anchor)}"></a>',
                "",
                block.title,
                "",
                "</summary>" if block.collapsible else "</div>",
                f'<div id="{body_id}" role="region" aria-labelledby="{title_id}">',
            ]
        )
    else:
        lines.extend([f"<{container} {attributes}>", f'<div id="{body_id}">'])

    if block.content:
        lines.extend(["", block.content, ""])
    lines.extend(["</div>", f"</{container}>"])
    return "\n" + indent("\n".join(lines), block.indent)


def _render_strip(block: ResolvedBlock) -> str:
    return "\n" + indent(block.content, block.indent) + "\n"


__all__ = ["render_block"]
