"""Merge a parsed annotation with directive and book defaults."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from mdbook_admonish._constants import DEFAULT_DIRECTIVE
from mdbook_admonish.directives import DirectiveDefinition, DirectiveTable

if typ.TYPE_CHECKING:
    from mdbook_admonish.config.models import BookDefaults
    from mdbook_admonish.errors import SourceLocation
    from mdbook_admonish.info_string import RawBlockAnnotation

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ResolvedBlock:
    """Render-ready description of one admonition.

    Attributes
    ----------
    definition : DirectiveDefinition
        Table entry (or unknown fallback) for the block's keyword.
    keyword : str
        Keyword as written, possibly an alias.
    title : str
        Effective title; empty means no title bar.
    explicit_id : str or None
        ``id`` option, used verbatim when given.
    id_prefix : str
        Prefix for generated ids.
    collapsible : bool
        Render as a disclosure element.
    classnames : tuple[str, ...]
        Extra classes, directive-level first, without duplicates.
    content : str
        Reflowed inner markdown.
    location : SourceLocation or None
        Where the block came from.
    indent : int
        Fence column to restore on output.
    source : str
        Verbatim fence text, returned unchanged in preserve mode.
    anchor_id : str or None
        Id assigned by the anchor registry.
    """

    definition: DirectiveDefinition
    keyword: str
    title: str
    explicit_id: str | None
    id_prefix: str
    collapsible: bool
    classnames: tuple[str, ...] = ()
    content: str = ""
    location: SourceLocation | None = None
    indent: int = 0
    source: str = ""
    anchor_id: str | None = None

    @property
    def directive(self) -> str:
        """Canonical directive keyword."""
        return self.definition.directive

    def with_anchor(self, anchor_id: str) -> ResolvedBlock:
        """Return a copy carrying ``anchor_id``."""
        return dc.replace(self, anchor_id=anchor_id)


def _unique(classnames: typ.Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(name for name in classnames if name))


def resolve_block(
    annotation: RawBlockAnnotation,
    table: DirectiveTable,
    defaults: BookDefaults,
    *,
    location: SourceLocation | None = None,
    content: str = "",
    indent: int = 0,
    source: str = "",
) -> ResolvedBlock:
    """Resolve ``annotation`` against the directive table and book defaults.

    The directive is the bare token, else the ``type`` option, else
    ``note``. Unknown keywords fall back to an untinted definition instead
    of failing.

    Title precedence is the explicit option (the legacy quoted title counts
    as one), then ``default.title``, then the directive's own default, then
    the titlecased keyword. An explicit empty title suppresses the title bar.
    """
    type_option = annotation.option("type")
    keyword = annotation.directive or (
        type_option if isinstance(type_option, str) else DEFAULT_DIRECTIVE
    )
    definition = table.lookup(keyword)
    if definition is None:
        logger.warning(
            "Unknown directive '%s' at %s, rendering it without icon or tint",
            keyword,
            location if location is not None else "<unknown location>",
        )
        definition = DirectiveDefinition.unknown(keyword)

    explicit_title = annotation.option("title")
    if not isinstance(explicit_title, str):
        explicit_title = annotation.title
    if explicit_title is not None:
        title = explicit_title
    elif defaults.title is not None:
        title = defaults.title
    else:
        title = definition.title_for(keyword)

    collapsible = annotation.option("collapsible")
    class_option = annotation.option("class")
    block_classes = [
        *annotation.classnames,
        *(class_option.split() if isinstance(class_option, str) else ()),
    ]
    explicit_id = annotation.option("id")
    return ResolvedBlock(
        definition=definition,
        keyword=keyword,
        title=title,
        explicit_id=explicit_id if isinstance(explicit_id, str) else None,
        id_prefix=defaults.css_id_prefix,
        collapsible=(
            collapsible if isinstance(collapsible, bool) else defaults.collapsible
        ),
        classnames=_unique([*definition.classnames, *block_classes]),
        content=content,
        location=location,
        indent=indent,
        source=source,
    )


__all__ = ["ResolvedBlock", "resolve_block"]
