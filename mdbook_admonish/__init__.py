"""mdbook preprocessor that turns ``admonish`` code fences into admonitions.

The package exposes the ``mdbook-admonish`` console command and the pipeline
it drives, so books can also be processed from Python.

Exports
-------
- ``app``: Cyclopts application with the preprocessor and its subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``AdmonitionPipeline``: Rewrites the admonitions of markdown documents.

Examples
--------
>>> from mdbook_admonish import AdmonitionPipeline
>>> from mdbook_admonish.config import load_admonish_config
>>> pipeline = AdmonitionPipeline(load_admonish_config({}), "html")
>>> 'class="admonition admonish-note"' in pipeline.process_document(
...     "```admonish\\nHello\\n```\\n"
... )
True
"""

from __future__ import annotations

from .cli import app, main
from .pipeline import AdmonitionPipeline

__all__ = ["AdmonitionPipeline", "app", "main"]
