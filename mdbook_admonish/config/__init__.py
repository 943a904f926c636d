"""Load and validate the ``[preprocessor.admonish]`` book configuration.

The table reaches the preprocessor either inside the mdbook context JSON or,
for CLI subcommands, straight from ``book.toml``. Both routes produce the same
immutable :class:`AdmonishConfig`.

Examples
--------
>>> from mdbook_admonish.config import load_admonish_config
>>> config = load_admonish_config({"default": {"collapsible": True}})
>>> config.defaults.collapsible
True
"""

from .loader import admonish_table, load_admonish_config, load_admonish_config_from_book
from .models import AdmonishConfig, BookDefaults, CustomDirectiveConfig, RendererConfig

__all__ = [
    "AdmonishConfig",
    "BookDefaults",
    "CustomDirectiveConfig",
    "RendererConfig",
    "admonish_table",
    "load_admonish_config",
    "load_admonish_config_from_book",
]
