"""Generate the stylesheet fragment for custom directives.

Every ``[[preprocessor.admonish.custom]]`` entry gets an icon custom property
holding its SVG as a ``data:`` URL, a tinted border, and a title bar whose
``::before`` mask uses the icon. The fragment is rendered with Jinja2 and is
meant to be listed in ``[output.html] additional-css`` next to the bundled
stylesheet.
"""

from __future__ import annotations

import logging
import re
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from mdbook_admonish.config import load_admonish_config_from_book
from mdbook_admonish.errors import AdmonishConfigError

if typ.TYPE_CHECKING:
    from mdbook_admonish.config.models import AdmonishConfig, CustomDirectiveConfig

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "custom_directives.css.jinja"
SVG_NAMESPACE = "http://www.w3.org/2000/svg"
TITLE_TINT_ALPHA = 0.1
LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")
DATA_URL_ESCAPES = str.maketrans({"%": "%25", "#": "%23", "{": "%7B", "}": "%7D"})


def svg_to_data_url(svg: str) -> str:
    """Return ``svg`` as a CSS ``url()`` value.

    Line breaks are collapsed, double quotes become single quotes and the
    characters CSS ``url()`` chokes on are percent-encoded.

    >>> svg_to_data_url('<svg a="1">\\n  <g/>\\n</svg>')
    'url("data:image/svg+xml;charset=utf-8,<svg a=\\'1\\'><g/></svg>")'
    """
    collapsed = LINE_BREAKS.sub("", svg.strip()).replace('"', "'")
    return f'url("data:image/svg+xml;charset=utf-8,{collapsed.translate(DATA_URL_ESCAPES)}")'


class CustomStylesheetBuilder:
    """Render the custom directive stylesheet from configuration."""

    def __init__(
        self,
        book_dir: Path,
        config: AdmonishConfig,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the builder and Jinja environment."""
        self.book_dir = book_dir
        self.config = config
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(TEMPLATE_NAME)

    def render(self) -> str:
        """Return the stylesheet text.

        Raises
        ------
        AdmonishConfigError
            If no custom directives are configured.
        FileNotFoundError
            If an icon file cannot be read.
        """
        if not self.config.custom:
            msg = "No custom directives provided in book.toml."
            raise AdmonishConfigError(msg)
        directives = [self._directive_context(custom) for custom in self.config.custom]
        css = self.template.render(directives=directives)
        if not css.endswith("\n"):
            css += "\n"
        return css

    def write(self, output: Path) -> Path:
        """Render and write the stylesheet, returning ``output``."""
        css = self.render()
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(css, encoding="utf-8")
        logger.info("Wrote custom directive styles to '%s'", output)
        return output

    def _directive_context(self, custom: CustomDirectiveConfig) -> dict[str, str]:
        icon_path = self.book_dir / custom.icon
        try:
            svg = icon_path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Can't read icon file '{icon_path}' for '{custom.directive}'."
            raise FileNotFoundError(msg) from exc
        if SVG_NAMESPACE not in svg:
            logger.warning(
                "Icon '%s' has no xmlns='%s' declaration and may not display",
                icon_path,
                SVG_NAMESPACE,
            )
        definition = custom.to_definition()
        return {
            "class_name": definition.class_name,
            "icon_property": definition.icon_property,
            "data_url": svg_to_data_url(svg),
            "tint": custom.color.hex,
            "tint_faint": custom.color.rgba(TITLE_TINT_ALPHA),
        }


def css_from_config(book_dir: Path, config: AdmonishConfig) -> str:
    """Return the custom directive stylesheet for ``config``."""
    return CustomStylesheetBuilder(book_dir, config).render()


def generate_custom_css(book_dir: Path, output: Path) -> Path:
    """Read ``book_dir/book.toml`` and write the custom stylesheet to ``output``."""
    config = load_admonish_config_from_book(book_dir)
    return CustomStylesheetBuilder(book_dir, config).write(output)


__all__ = [
    "CustomStylesheetBuilder",
    "css_from_config",
    "generate_custom_css",
    "svg_to_data_url",
]
