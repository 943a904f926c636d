"""Strip and restore the fence column of admonition content.

Content nested in lists is indented by the fence's column. It is dedented
before rendering and the emitted block is re-indented by the same amount so
the surrounding markdown container still owns it. Blank (or whitespace only)
lines are left untouched in both directions, which makes
``indent(dedent(text, n), n) == text`` for space-indented input.
"""

from __future__ import annotations

from mdbook_admonish.errors import UnbalancedIndentation

TAB_WIDTH = 4


def leading_columns(line: str) -> int:
    """Return the visual width of the leading whitespace of ``line``."""
    column = 0
    for char in line:
        if char == " ":
            column += 1
        elif char == "\t":
            column = (column // TAB_WIDTH + 1) * TAB_WIDTH
        else:
            break
    return column


def dedent(raw: str, column: int) -> str:
    """Remove ``column`` leading columns from every non-blank line.

    Tabs expand to the next multiple of :data:`TAB_WIDTH`; a tab straddling
    the cut leaves its remaining columns as spaces.

    Raises
    ------
    UnbalancedIndentation
        If a non-blank line is indented less than ``column``. The offset is
        the byte position of its first non-whitespace character in ``raw``.
    """
    if column <= 0:
        return raw
    lines = raw.split("\n")
    dedented: list[str] = []
    offset = 0
    for number, line in enumerate(lines, start=1):
        if line.strip():
            dedented.append(_strip_columns(line, column, number, offset))
        else:
            dedented.append(line)
        offset += len(line.encode("utf-8")) + 1
    return "\n".join(dedented)


def _strip_columns(line: str, column: int, number: int, offset: int) -> str:
    consumed = 0
    index = 0
    while consumed < column:
        char = line[index]
        if char == " ":
            consumed += 1
        elif char == "\t":
            consumed = (consumed // TAB_WIDTH + 1) * TAB_WIDTH
        else:
            msg = (
                f"content line {number} is indented {consumed} columns, "
                f"less than the fence's {column}"
            )
            position = offset + len(line[:index].encode("utf-8"))
            raise UnbalancedIndentation(msg, offset=position)
        index += 1
    return " " * (consumed - column) + line[index:]


def indent(text: str, column: int) -> str:
    """Prefix every non-blank line of ``text`` with ``column`` spaces."""
    if column <= 0:
        return text
    pad = " " * column
    return "\n".join(pad + line if line.strip() else line for line in text.split("\n"))


__all__ = ["TAB_WIDTH", "dedent", "indent", "leading_columns"]
