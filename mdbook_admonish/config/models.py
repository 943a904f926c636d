"""Typed dataclasses describing the ``[preprocessor.admonish]`` table."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from mdbook_admonish._constants import DEFAULT_CSS_ID_PREFIX
from mdbook_admonish.directives import Color, DirectiveDefinition
from mdbook_admonish.modes import OnFailure, RunMode

HTML_RENDERER = "html"


@dc.dataclass(frozen=True, slots=True)
class BookDefaults:
    """Book-wide fallbacks applied to every block."""

    title: str | None = None
    collapsible: bool = False
    css_id_prefix: str = DEFAULT_CSS_ID_PREFIX


@dc.dataclass(frozen=True, slots=True)
class RendererConfig:
    """Per-renderer settings from ``renderer.<name>``."""

    render_mode: RunMode | None = None


@dc.dataclass(frozen=True, slots=True)
class CustomDirectiveConfig:
    """A user-declared directive from a ``[[preprocessor.admonish.custom]]``."""

    directive: str
    icon: Path
    color: Color
    aliases: tuple[str, ...] = ()
    title: str | None = None
    classnames: tuple[str, ...] = ()

    def to_definition(self) -> DirectiveDefinition:
        """Return the table entry for this directive."""
        return DirectiveDefinition(
            directive=self.directive,
            aliases=self.aliases,
            title=self.title,
            icon=self.icon.as_posix(),
            color=self.color,
            classnames=self.classnames,
        )


@dc.dataclass(frozen=True, slots=True)
class AdmonishConfig:
    """Everything the preprocessor reads from ``book.toml``."""

    assets_version: str | None = None
    on_failure: OnFailure = OnFailure.CONTINUE
    defaults: BookDefaults = dc.field(default_factory=BookDefaults)
    renderers: dict[str, RendererConfig] = dc.field(default_factory=dict)
    custom: tuple[CustomDirectiveConfig, ...] = ()

    def render_mode_for(self, renderer: str) -> RunMode:
        """Return the run mode for the invoking renderer.

        An explicit ``renderer.<name>.render_mode`` wins; otherwise the
        ``html`` renderer gets :attr:`RunMode.HTML` and every other renderer
        :attr:`RunMode.PRESERVE`.
        """
        configured = self.renderers.get(renderer)
        if configured is not None and configured.render_mode is not None:
            return configured.render_mode
        return RunMode.HTML if renderer == HTML_RENDERER else RunMode.PRESERVE

    def directive_definitions(self) -> tuple[DirectiveDefinition, ...]:
        """Return the custom directives as table entries."""
        return tuple(custom.to_definition() for custom in self.custom)
