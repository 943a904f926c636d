"""Directive definitions and the keyword/alias lookup table.

The table is assembled once per run from the built-in directives plus any
custom directives declared in ``book.toml``, then shared read-only by every
block. Lookups are case-sensitive and resolve both canonical keywords and
aliases through a reverse index.

Examples
--------
>>> table = DirectiveTable.with_custom(())
>>> table.lookup("tldr").directive
'abstract'
>>> table.lookup("tldr").title_for("tldr")
'TL;DR'
>>> table.lookup("nope") is None
True
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import re

from mdbook_admonish._constants import CSS_CLASS_TEMPLATE, ICON_PROPERTY_TEMPLATE
from mdbook_admonish.errors import AdmonishConfigError

logger = logging.getLogger(__name__)

DIRECTIVE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
HEX_COLOR_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def is_valid_directive(directive: str) -> bool:
    """Return whether ``directive`` is usable as a keyword and class suffix."""
    return bool(DIRECTIVE_PATTERN.match(directive))


def titlecase(keyword: str) -> str:
    """Uppercase the first character of ``keyword``, leaving the rest alone."""
    if not keyword:
        return ""
    return keyword[0].upper() + keyword[1:]


@dc.dataclass(frozen=True, slots=True)
class Color:
    """An RGB tint colour."""

    red: int
    green: int
    blue: int

    @classmethod
    def parse(cls, value: object) -> Color:
        """Parse ``#rrggbb`` or ``rrggbb`` into a colour.

        Raises
        ------
        AdmonishConfigError
            If ``value`` is not a six digit hex colour string.
        """
        match = HEX_COLOR_PATTERN.match(value) if isinstance(value, str) else None
        if match is None:
            msg = f"Invalid color {value!r}: expected an rgb hex string like '#448aff'."
            raise AdmonishConfigError(msg)
        digits = match.group(1)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @property
    def hex(self) -> str:
        """Lowercase ``#rrggbb`` form."""
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    def rgba(self, alpha: float) -> str:
        """Return a CSS ``rgba()`` expression with the given alpha."""
        return f"rgba({self.red}, {self.green}, {self.blue}, {alpha})"


@dc.dataclass(frozen=True, slots=True)
class DirectiveDefinition:
    """Canonical description of one admonition type.

    Attributes
    ----------
    directive : str
        Canonical keyword; also forms the ``admonish-<directive>`` class.
    aliases : tuple[str, ...]
        Alternative keywords resolving to this definition.
    title : str or None
        Default display title; ``None`` titlecases the keyword used.
    icon : str or None
        Opaque icon reference (built-in icon name or SVG path for custom
        directives). ``None`` for unknown directives.
    color : Color or None
        Tint colour, ``None`` for unknown directives.
    classnames : tuple[str, ...]
        Extra CSS classes added to every block of this directive.
    alias_titles : tuple[tuple[str, str], ...]
        Per-alias default titles such as ``("tldr", "TL;DR")``.
    builtin : bool
        Whether the definition ships with the package.
    """

    directive: str
    aliases: tuple[str, ...] = ()
    title: str | None = None
    icon: str | None = None
    color: Color | None = None
    classnames: tuple[str, ...] = ()
    alias_titles: tuple[tuple[str, str], ...] = ()
    builtin: bool = False

    @property
    def class_name(self) -> str:
        """Container class identifying the directive."""
        return CSS_CLASS_TEMPLATE.format(directive=self.directive)

    @property
    def icon_property(self) -> str:
        """CSS custom property a theme sets to supply the icon."""
        return ICON_PROPERTY_TEMPLATE.format(directive=self.directive)

    @property
    def keywords(self) -> tuple[str, ...]:
        """Canonical keyword followed by the aliases."""
        return (self.directive, *self.aliases)

    @property
    def is_known(self) -> bool:
        """Whether this definition came from the table rather than a fallback."""
        return self.color is not None

    def title_for(self, keyword: str) -> str:
        """Return the default title for a block written as ``keyword``."""
        for alias, title in self.alias_titles:
            if alias == keyword:
                return title
        if self.title is not None and keyword == self.directive:
            return self.title
        if self.title is not None and keyword in self.aliases:
            return self.title
        return titlecase(keyword)

    @classmethod
    def unknown(cls, keyword: str) -> DirectiveDefinition:
        """Fallback for keywords absent from the table: no icon, no tint."""
        return cls(directive=keyword)


def _builtin(
    directive: str,
    aliases: tuple[str, ...],
    icon: str,
    color: str,
    alias_titles: tuple[tuple[str, str], ...] = (),
) -> DirectiveDefinition:
    return DirectiveDefinition(
        directive=directive,
        aliases=aliases,
        icon=icon,
        color=Color.parse(color),
        alias_titles=alias_titles,
        builtin=True,
    )


BUILTIN_DIRECTIVES: tuple[DirectiveDefinition, ...] = (
    _builtin("note", (), "pencil", "#448aff"),
    _builtin(
        "abstract", ("summary", "tldr"), "clipboard-text", "#00b0ff",
        (("tldr", "TL;DR"),),
    ),
    _builtin("info", ("todo",), "information", "#00b8d4", (("todo", "TODO"),)),
    _builtin("tip", ("hint", "important"), "fire", "#00bfa5"),
    _builtin("success", ("check", "done"), "check-bold", "#00c853"),
    _builtin(
        "question", ("help", "faq"), "help-circle", "#64dd17", (("faq", "FAQ"),)
    ),
    _builtin("warning", ("caution", "attention"), "alert", "#ff9100"),
    _builtin("failure", ("fail", "missing"), "close-thick", "#ff5252"),
    _builtin("danger", ("error",), "lightning-bold", "#ff1744"),
    _builtin("bug", (), "bug", "#f50057"),
    _builtin("example", (), "format-list-numbered", "#7c4dff"),
    _builtin("quote", ("cite",), "format-quote-close", "#9e9e9e"),
)


class DirectiveTable:
    """Keyword lookup over directive definitions with a reverse alias index."""

    def __init__(self, definitions: cabc.Iterable[DirectiveDefinition]) -> None:
        """Index ``definitions``, rejecting invalid or duplicated keywords.

        Raises
        ------
        AdmonishConfigError
            If a keyword is not a valid directive or is claimed twice.
        """
        self._definitions: dict[str, DirectiveDefinition] = {}
        self._index: dict[str, DirectiveDefinition] = {}
        for definition in definitions:
            for keyword in definition.keywords:
                if not is_valid_directive(keyword):
                    msg = (
                        f"Invalid directive {keyword!r}: must match "
                        f"{DIRECTIVE_PATTERN.pattern}"
                    )
                    raise AdmonishConfigError(msg)
                owner = self._index.get(keyword)
                if owner is not None:
                    msg = (
                        f"Directive keyword {keyword!r} of {definition.directive!r} "
                        f"is already used by {owner.directive!r}."
                    )
                    raise AdmonishConfigError(msg)
                self._index[keyword] = definition
            self._definitions[definition.directive] = definition

    @classmethod
    def with_custom(
        cls, custom: cabc.Sequence[DirectiveDefinition]
    ) -> DirectiveTable:
        """Build the table from built-ins plus ``custom`` definitions.

        A custom directive sharing a built-in's canonical keyword replaces
        that built-in entirely; every other overlap is an error.
        """
        seen: set[str] = set()
        for definition in custom:
            if definition.directive in seen:
                msg = f"Duplicate custom directive: {definition.directive!r}."
                raise AdmonishConfigError(msg)
            seen.add(definition.directive)

        definitions: list[DirectiveDefinition] = []
        for builtin in BUILTIN_DIRECTIVES:
            if builtin.directive in seen:
                logger.info(
                    "Custom directive '%s' overrides the built-in directive",
                    builtin.directive,
                )
                continue
            definitions.append(builtin)
        definitions.extend(custom)
        if custom:
            logger.info("Loaded %d custom directives", len(custom))
        return cls(definitions)

    def lookup(self, keyword: str) -> DirectiveDefinition | None:
        """Return the definition owning ``keyword`` (canonical or alias)."""
        return self._index.get(keyword)

    def get(self, directive: str) -> DirectiveDefinition | None:
        """Return the definition with canonical keyword ``directive``."""
        return self._definitions.get(directive)

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._index

    def __iter__(self) -> cabc.Iterator[DirectiveDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


__all__ = [
    "BUILTIN_DIRECTIVES",
    "Color",
    "DirectiveDefinition",
    "DirectiveTable",
    "is_valid_directive",
    "titlecase",
]
