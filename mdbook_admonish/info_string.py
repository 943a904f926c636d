r"""Parse admonition fence info strings into raw annotations.

An admonition fence looks like ````admonish <config>````. The ``<config>``
part supports every historical syntax at once:

* ``warning`` / ``note.extra-class`` -- a bare directive with optional dotted
  classnames;
* ``warning title="Data loss", collapsible=true`` -- comma separated
  ``key=value`` options (the current syntax);
* ``warning "Data loss"`` -- a lone quoted title;
* ``title="Data loss" type="warning"`` -- whitespace separated options.

The grammars are tried in a fixed order (key-value first, then the legacy
forms) and the first success wins. When every attempt fails, the error of the
attempt that read furthest into the string is raised.

Example
-------
>>> annotation = parse_info_string('warning title="Data loss"')
>>> annotation.directive, annotation.option("title")
('warning', 'Data loss')
>>> parse_info_string('tip "Legacy"').title
'Legacy'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from mdbook_admonish._constants import ADMONISH_KEYWORD
from mdbook_admonish.directives import is_valid_directive
from mdbook_admonish.errors import MalformedAnnotation, ParseErrorKind

OptionValue = str | bool

OPTION_TYPES: dict[str, type] = {
    "title": str,
    "id": str,
    "class": str,
    "collapsible": bool,
    "type": str,
}
QUOTES = ('"', "'")
WORD_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
)
SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
UNICODE_ESCAPE_WIDTHS = {"u": 4, "U": 8}


class AnnotationSyntax(enum.Enum):
    """Which grammar produced an annotation."""

    KEY_VALUE = "key-value"
    LEGACY = "legacy"


@dc.dataclass(frozen=True, slots=True)
class RawBlockAnnotation:
    """Unresolved result of parsing one info string.

    Attributes
    ----------
    directive : str or None
        Bare directive token, ``None`` when absent.
    title : str or None
        Title given with the legacy lone quoted string.
    classnames : tuple[str, ...]
        Legacy ``.classname`` suffixes of the directive token.
    options : tuple[tuple[str, str | bool], ...]
        ``key=value`` pairs in input order; duplicates are kept.
    syntax : AnnotationSyntax
        Grammar that accepted the string.
    """

    directive: str | None = None
    title: str | None = None
    classnames: tuple[str, ...] = ()
    options: tuple[tuple[str, OptionValue], ...] = ()
    syntax: AnnotationSyntax = AnnotationSyntax.KEY_VALUE

    def option(self, key: str) -> OptionValue | None:
        """Return the last value given for ``key``."""
        found: OptionValue | None = None
        for name, value in self.options:
            if name == key:
                found = value
        return found

    def has_option(self, key: str) -> bool:
        """Return whether ``key`` was given at all."""
        return any(name == key for name, _ in self.options)


class _Scanner:
    """Cursor over the config string producing located parse errors."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return "" if self.at_end() else self.text[self.pos]

    def skip_ws(self) -> None:
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def read_word(self) -> str:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in WORD_CHARS:
            self.pos += 1
        return self.text[start : self.pos]

    def byte_offset(self, pos: int) -> int:
        # str indices always fall on code point boundaries.
        return len(self.text[:pos].encode("utf-8"))

    def error(
        self,
        kind: ParseErrorKind,
        detail: str,
        *,
        pos: int | None = None,
        key: str | None = None,
    ) -> MalformedAnnotation:
        offset = self.byte_offset(self.pos if pos is None else pos)
        return MalformedAnnotation(kind, detail, offset=offset, key=key)

    def read_string(self) -> str:
        """Read a quoted string starting at the opening quote."""
        quote = self.text[self.pos]
        start = self.pos
        self.pos += 1
        chars: list[str] = []
        while True:
            if self.at_end() or self.text[self.pos] == "\n":
                raise self.error(
                    ParseErrorKind.UNTERMINATED_STRING,
                    f"missing closing {quote} for string",
                    pos=start,
                )
            char = self.text[self.pos]
            if char == quote:
                self.pos += 1
                return "".join(chars)
            if char == "\\" and quote == '"':
                chars.append(self._read_escape())
                continue
            chars.append(char)
            self.pos += 1

    def _read_escape(self) -> str:
        start = self.pos
        self.pos += 1
        if self.at_end():
            raise self.error(
                ParseErrorKind.UNTERMINATED_STRING,
                "string ends inside an escape sequence",
                pos=start,
            )
        code = self.text[self.pos]
        if code in SIMPLE_ESCAPES:
            self.pos += 1
            return SIMPLE_ESCAPES[code]
        width = UNICODE_ESCAPE_WIDTHS.get(code)
        if width is not None:
            digits = self.text[self.pos + 1 : self.pos + 1 + width]
            valid = len(digits) == width and all(
                digit in "0123456789abcdefABCDEF" for digit in digits
            )
            codepoint = int(digits, 16) if valid else -1
            if not valid or codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
                raise self.error(
                    ParseErrorKind.UNKNOWN_ESCAPE,
                    f"invalid unicode escape '\\{code}{digits}'",
                    pos=start,
                )
            self.pos += 1 + width
            return chr(codepoint)
        raise self.error(
            ParseErrorKind.UNKNOWN_ESCAPE,
            f"'\\{code}' in quoted string",
            pos=start,
        )


def admonition_config_string(info_string: str) -> str | None:
    """Return the text after the ``admonish`` keyword, or ``None``.

    ``None`` means the fence is not an admonition and must pass through.

    >>> admonition_config_string("admonish warning")
    'warning'
    >>> admonition_config_string("rust") is None
    True
    """
    parts = info_string.strip().split(maxsplit=1)
    if not parts or parts[0] != ADMONISH_KEYWORD:
        return None
    return parts[1].strip() if len(parts) > 1 else ""


def parse_info_string(config_string: str) -> RawBlockAnnotation:
    """Parse the config part of an admonition info string.

    Parameters
    ----------
    config_string : str
        Everything after the ``admonish`` keyword.

    Returns
    -------
    RawBlockAnnotation
        The parsed, type-checked annotation.

    Raises
    ------
    MalformedAnnotation
        If no supported syntax accepts the string. Offsets are byte offsets
        into the stripped ``config_string``.
    """
    text = config_string.strip()
    failures: list[tuple[int, MalformedAnnotation]] = []
    for attempt in (_parse_key_value, _parse_legacy):
        scanner = _Scanner(text)
        try:
            return attempt(scanner)
        except MalformedAnnotation as error:
            failures.append((scanner.pos, error))
    _, error = max(failures, key=lambda failure: failure[0])
    raise error


def _parse_key_value(scanner: _Scanner) -> RawBlockAnnotation:
    scanner.skip_ws()
    directive, classnames = _read_directive(scanner)
    scanner.skip_ws()
    options: list[tuple[str, OptionValue]] = []
    while not scanner.at_end():
        options.append(_read_option(scanner))
        scanner.skip_ws()
        if scanner.at_end():
            break
        if scanner.peek() != ",":
            raise scanner.error(
                ParseErrorKind.BAD_SYNTAX,
                f"expected ',' between options, found {scanner.peek()!r}",
            )
        comma = scanner.pos
        scanner.pos += 1
        scanner.skip_ws()
        if scanner.at_end():
            raise scanner.error(
                ParseErrorKind.TRAILING_COMMA,
                "nothing follows the last ','",
                pos=comma,
            )
    return RawBlockAnnotation(
        directive=directive,
        classnames=classnames,
        options=tuple(options),
        syntax=AnnotationSyntax.KEY_VALUE,
    )


def _parse_legacy(scanner: _Scanner) -> RawBlockAnnotation:
    scanner.skip_ws()
    directive, classnames = _read_directive(scanner)
    scanner.skip_ws()
    if scanner.peek() in QUOTES and scanner.peek():
        title = scanner.read_string()
        scanner.skip_ws()
        if not scanner.at_end():
            raise scanner.error(
                ParseErrorKind.BAD_SYNTAX,
                f"unexpected {scanner.peek()!r} after the quoted title",
            )
        return RawBlockAnnotation(
            directive=directive,
            title=title,
            classnames=classnames,
            syntax=AnnotationSyntax.LEGACY,
        )

    options: list[tuple[str, OptionValue]] = []
    while not scanner.at_end():
        options.append(_read_option(scanner))
        boundary = scanner.pos
        scanner.skip_ws()
        if not scanner.at_end() and scanner.pos == boundary:
            raise scanner.error(
                ParseErrorKind.BAD_SYNTAX,
                f"expected whitespace between options, found {scanner.peek()!r}",
            )
    return RawBlockAnnotation(
        directive=directive,
        classnames=classnames,
        options=tuple(options),
        syntax=AnnotationSyntax.LEGACY,
    )


def _read_directive(scanner: _Scanner) -> tuple[str | None, tuple[str, ...]]:
    """Consume a leading bare directive token, if the string starts with one."""
    start = scanner.pos
    word = scanner.read_word()
    if not word:
        return None, ()
    end = scanner.pos
    scanner.skip_ws()
    if scanner.peek() == "=":
        scanner.pos = start
        return None, ()
    scanner.pos = end

    classnames: list[str] = []
    while scanner.peek() == ".":
        scanner.pos += 1
        classname = scanner.read_word()
        if classname:
            classnames.append(classname)
    if not scanner.at_end() and not scanner.peek().isspace():
        raise scanner.error(
            ParseErrorKind.BAD_SYNTAX,
            f"'{scanner.text[start : scanner.pos + 1]}' is not a valid directive "
            "or key-value pair",
            pos=start,
        )
    return word, tuple(classnames)


def _read_option(scanner: _Scanner) -> tuple[str, OptionValue]:
    key_pos = scanner.pos
    key = scanner.read_word()
    if not key:
        found = scanner.peek()
        raise scanner.error(
            ParseErrorKind.BAD_SYNTAX, f"expected an option key, found {found!r}"
        )
    scanner.skip_ws()
    if scanner.peek() != "=":
        raise scanner.error(
            ParseErrorKind.BAD_SYNTAX, f"expected '=' after {key!r}", key=key
        )
    if key not in OPTION_TYPES:
        known = ", ".join(sorted(OPTION_TYPES))
        raise scanner.error(
            ParseErrorKind.UNKNOWN_KEY,
            f"{key!r} (expected one of: {known})",
            pos=key_pos,
            key=key,
        )
    scanner.pos += 1
    scanner.skip_ws()
    return key, _read_value(scanner, key)


def _read_value(scanner: _Scanner, key: str) -> OptionValue:
    start = scanner.pos
    value: OptionValue
    if scanner.peek() in QUOTES and scanner.peek():
        value = scanner.read_string()
    else:
        word = scanner.read_word()
        if word == "true":
            value = True
        elif word == "false":
            value = False
        elif word:
            raise scanner.error(
                ParseErrorKind.INVALID_VALUE,
                f"invalid value {word!r} for {key!r}: expected a quoted string "
                "or true/false",
                pos=start,
                key=key,
            )
        else:
            raise scanner.error(
                ParseErrorKind.BAD_SYNTAX, f"missing value for {key!r}", key=key
            )

    expected = OPTION_TYPES[key]
    if not isinstance(value, expected):
        wanted = "a boolean (true/false)" if expected is bool else "a quoted string"
        raise scanner.error(
            ParseErrorKind.INVALID_VALUE,
            f"option {key!r} expects {wanted}",
            pos=start,
            key=key,
        )
    if key == "type" and not is_valid_directive(typ.cast("str", value)):
        raise scanner.error(
            ParseErrorKind.INVALID_VALUE,
            f"{value!r} is not a valid directive name",
            pos=start,
            key=key,
        )
    return value


__all__ = [
    "OPTION_TYPES",
    "AnnotationSyntax",
    "RawBlockAnnotation",
    "admonition_config_string",
    "parse_info_string",
]
