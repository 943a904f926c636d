"""Locate fenced code blocks in a chapter using markdown-it-py.

Token line maps give exact source positions, so the original text can be
sliced and spliced back without re-rendering the rest of the document.
Fences inside list items and blockquotes are reported with their container
prefixes (list indentation and ``>`` markers) removed; the prefix is re-added
to every line when the replacement is spliced in.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from markdown_it import MarkdownIt

if typ.TYPE_CHECKING:
    import collections.abc as cabc

QUOTE_MARKER = re.compile(r"^ {0,3}> ?")
LIST_MARKER = re.compile(r"^ {0,3}(?:[-+*]|\d{1,9}[.)])")
BLOCKQUOTE = "blockquote"
LIST_ITEM = "list_item"

_PARSER = MarkdownIt("commonmark")


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` keeping line endings (unlike ``splitlines``)."""
    parts = text.split("\n")
    lines = [f"{part}\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


@dc.dataclass(frozen=True, slots=True)
class _Container:
    """An open blockquote or list item enclosing the current token."""

    kind: str
    start_line: int
    width: int = 0

    @property
    def continuation(self) -> str:
        """Prefix this container puts in front of its continuation lines."""
        return "> " if self.kind == BLOCKQUOTE else " " * self.width

    def strip(self, line: str, line_no: int) -> str:
        """Remove this container's prefix from ``line``."""
        if self.kind == BLOCKQUOTE:
            match = QUOTE_MARKER.match(line)
            return line if match is None else line[match.end() :]
        if line_no == self.start_line:
            return line[self.width :]
        spaces = len(line) - len(line.lstrip(" "))
        return line[min(spaces, self.width) :]


def _list_item_width(line: str) -> int:
    """Return the content offset of a list item opened on ``line``."""
    match = LIST_MARKER.match(line)
    if match is None:
        return 0
    after = line[match.end() :]
    spaces = len(after) - len(after.lstrip(" "))
    if not after.strip() or spaces > 4:
        return match.end() + 1
    return match.end() + spaces


def _strip_containers(
    line: str, line_no: int, containers: cabc.Sequence[_Container]
) -> str:
    for container in containers:
        line = container.strip(line, line_no)
    return line


@dc.dataclass(frozen=True, slots=True)
class FencedBlock:
    """One fenced code block and its position in the source.

    Attributes
    ----------
    start_line : int
        0-based index of the opening fence line.
    end_line : int
        Index one past the last line of the block.
    info : str
        Raw info string of the opening fence.
    fence : str
        Opening fence marker, e.g. ````` ``` `````.
    column : int
        Visual column of the fence within its innermost container.
    lead : str
        Text before the fence marker on the opening line.
    prefix : str
        Container prefix (list indentation and ``>`` markers) of every
        continuation line.
    body : str
        Inner lines, container prefixes removed, original indentation kept.
    closed : bool
        Whether a closing fence was found.
    source : str
        Fence text from the opening marker to the closing fence.
    line_ending : str
        Line terminator after the block's last line.
    newline : str
        Line terminator used inside the block (``\\n`` or ``\\r\\n``).
    """

    start_line: int
    end_line: int
    info: str
    fence: str
    column: int
    lead: str
    prefix: str
    body: str
    closed: bool
    source: str
    line_ending: str
    newline: str = "\n"

    @property
    def marker_column(self) -> int:
        """Visual column of the fence marker in the raw source line."""
        return len(self.lead.expandtabs(4))

    def splice(self, replacement: str) -> str:
        """Return the text replacing lines ``start_line:end_line``.

        The lead is kept on the first line; continuation lines get the
        container prefix back.
        """
        first, *rest = replacement.split("\n")
        blank_prefix = self.prefix.rstrip()
        lines = [self.lead + first]
        lines.extend(self.prefix + line if line else blank_prefix for line in rest)
        return self.newline.join(lines) + self.line_ending


def _is_closing_fence(line: str, fence: str) -> bool:
    marker = line.strip()
    return len(marker) >= len(fence) and set(marker) == {fence[0]}


def find_fenced_blocks(markdown: str) -> list[FencedBlock]:
    """Return every fenced code block of ``markdown`` in document order.

    Examples
    --------
    >>> [block.info for block in find_fenced_blocks("```admonish\\nHi\\n```\\n")]
    ['admonish']
    >>> (block,) = find_fenced_blocks("- > ```admonish\\n  > Hi\\n  > ```\\n")
    >>> block.lead, block.prefix, block.body
    ('- > ', '  > ', 'Hi')
    """
    lines = split_lines(markdown)
    blocks: list[FencedBlock] = []
    containers: list[_Container] = []
    for token in _PARSER.parse(markdown):
        if token.type in {"blockquote_close", "list_item_close"}:
            containers.pop()
        elif token.type == "blockquote_open" and token.map is not None:
            containers.append(_Container(BLOCKQUOTE, token.map[0]))
        elif token.type == "list_item_open" and token.map is not None:
            start = token.map[0]
            opening = _strip_containers(
                lines[start].rstrip("\r\n"), start, containers
            )
            containers.append(_Container(LIST_ITEM, start, _list_item_width(opening)))
        elif token.type == "fence" and token.map is not None:
            start, end = token.map
            blocks.append(_build_block(lines, start, end, token.markup, containers))
    return blocks


def _build_block(
    lines: list[str],
    start: int,
    end: int,
    fence: str,
    containers: cabc.Sequence[_Container],
) -> FencedBlock:
    raw_lines = [line.rstrip("\r\n") for line in lines[start:end]]
    stripped = [
        _strip_containers(line, start + offset, containers)
        for offset, line in enumerate(raw_lines)
    ]
    opening = stripped[0]
    marker_at = opening.find(fence)
    inner = stripped[1:]
    closed = bool(inner) and _is_closing_fence(inner[-1], fence)
    body_lines = inner[:-1] if closed else inner
    first, last = lines[start], lines[end - 1]
    newline = first[len(first.rstrip("\r\n")) :] or "\n"
    lead_length = len(raw_lines[0]) - len(opening) + marker_at
    return FencedBlock(
        start_line=start,
        end_line=end,
        info=opening[marker_at + len(fence) :].strip(),
        fence=fence,
        column=len(opening[:marker_at].expandtabs(4)),
        lead=raw_lines[0][:lead_length],
        prefix="".join(container.continuation for container in containers),
        body="\n".join(body_lines),
        closed=closed,
        source="\n".join([opening[marker_at:], *inner]),
        line_ending=last[len(last.rstrip("\r\n")) :],
        newline=newline,
    )


__all__ = ["FencedBlock", "find_fenced_blocks", "split_lines"]
