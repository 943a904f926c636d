"""Drive every admonition fence of a document through parse, resolve and render.

A pipeline is built once per preprocessing run. Its run mode, directive
table and failure policy are fixed at construction; each document gets a
fresh :class:`~mdbook_admonish.anchors.AnchorRegistry`.

Examples
--------
>>> from mdbook_admonish.config import load_admonish_config
>>> pipeline = AdmonitionPipeline(load_admonish_config({}), "html")
>>> "admonish-tip" in pipeline.process_document("```admonish tip\\nHi\\n```\\n")
True
"""

from __future__ import annotations

import enum
import logging
import typing as typ

from mdbook_admonish._constants import ERROR_CARD_DIRECTIVE, ERROR_CARD_TITLE
from mdbook_admonish.anchors import AnchorRegistry
from mdbook_admonish.blocks import FencedBlock, find_fenced_blocks, split_lines
from mdbook_admonish.directives import DirectiveDefinition, DirectiveTable
from mdbook_admonish.errors import (
    ParseError,
    PipelineAborted,
    SourceLocation,
    UnbalancedIndentation,
)
from mdbook_admonish.info_string import admonition_config_string, parse_info_string
from mdbook_admonish.modes import OnFailure, RunMode
from mdbook_admonish.reflow import dedent
from mdbook_admonish.render import render_block
from mdbook_admonish.resolve import ResolvedBlock, resolve_block

if typ.TYPE_CHECKING:
    from mdbook_admonish.config.models import AdmonishConfig

logger = logging.getLogger(__name__)

ERROR_CARD_TEMPLATE = """Failed with:

```log
{message}
```

Original markdown input:

{fence}{info}
{content}
{fence}
"""


class RunState(enum.Enum):
    """Lifecycle of one preprocessing run."""

    INITIALIZING = "initializing"
    PROCESSING = "processing"
    DONE = "done"
    ABORTED = "aborted"


class AdmonitionPipeline:
    """Replace admonition fences in documents for one preprocessing run."""

    def __init__(self, config: AdmonishConfig, renderer: str) -> None:
        """Fix the run mode and directive table for ``renderer``.

        Raises
        ------
        AdmonishConfigError
            If the custom directives clash with each other or the built-ins.
        """
        self.state = RunState.INITIALIZING
        self.config = config
        self.mode = config.render_mode_for(renderer)
        self.table = DirectiveTable.with_custom(config.directive_definitions())
        self.blocks_processed = 0
        logger.debug("Rendering admonitions for '%s' in %s mode", renderer, self.mode)

    def process_document(self, markdown: str, *, path: str | None = None) -> str:
        """Return ``markdown`` with every admonition fence replaced.

        Raises
        ------
        PipelineAborted
            Under the ``bail`` policy, at the first malformed block.
        DuplicateIdCollisionExhausted
            If an anchor id cannot be made unique.
        """
        if self.state is RunState.ABORTED:
            msg = "Cannot process documents after the run was aborted."
            raise RuntimeError(msg)
        self.state = RunState.PROCESSING
        if self.mode is RunMode.PRESERVE:
            return markdown

        registry = AnchorRegistry()
        lines = split_lines(markdown)
        output: list[str] = []
        cursor = 0
        for block in find_fenced_blocks(markdown):
            replacement = self.process_block(block, registry, path=path)
            if replacement is None:
                continue
            output.extend(lines[cursor : block.start_line])
            output.append(replacement)
            cursor = block.end_line
        output.extend(lines[cursor:])
        return "".join(output)

    def process_block(
        self,
        block: FencedBlock,
        registry: AnchorRegistry,
        *,
        path: str | None = None,
    ) -> str | None:
        """Return the spliced replacement for ``block``, or ``None`` to keep it."""
        config_string = admonition_config_string(block.info)
        if config_string is None:
            return None
        location = SourceLocation(path, block.start_line + 1, block.marker_column)
        try:
            resolved = self._resolve(block, config_string, location)
        except ParseError as error:
            error.with_location(location)
            if self.config.on_failure is OnFailure.BAIL:
                self.state = RunState.ABORTED
                raise PipelineAborted(error) from error
            logger.warning(
                "Rendering error card for admonition at %s: %s",
                location,
                error.describe(),
            )
            resolved = self._error_card(block, error, location)

        resolved = resolved.with_anchor(registry.assign_block(resolved))
        self.blocks_processed += 1
        return block.splice(render_block(resolved, self.mode))

    def finish(self) -> None:
        """Mark the run as complete."""
        if self.state is not RunState.ABORTED:
            self.state = RunState.DONE

    def _resolve(
        self, block: FencedBlock, config_string: str, location: SourceLocation
    ) -> ResolvedBlock:
        annotation = parse_info_string(config_string)
        return resolve_block(
            annotation,
            self.table,
            self.config.defaults,
            location=location,
            content=dedent(block.body, block.column).rstrip(),
            indent=block.column,
            source=block.source,
        )

    def _error_card(
        self, block: FencedBlock, error: ParseError, location: SourceLocation
    ) -> ResolvedBlock:
        try:
            content = dedent(block.body, block.column).rstrip()
        except UnbalancedIndentation:
            content = block.body.rstrip()
        fence = block.fence[0] * (len(block.fence) + 1)
        body = ERROR_CARD_TEMPLATE.format(
            message=error.describe(),
            fence=fence,
            info=block.info,
            content=content,
        ).rstrip()
        definition = self.table.get(
            ERROR_CARD_DIRECTIVE
        ) or DirectiveDefinition.unknown(ERROR_CARD_DIRECTIVE)
        return ResolvedBlock(
            definition=definition,
            keyword=ERROR_CARD_DIRECTIVE,
            title=ERROR_CARD_TITLE,
            explicit_id=None,
            id_prefix=self.config.defaults.css_id_prefix,
            collapsible=False,
            content=body,
            location=location,
            indent=block.column,
            source=block.source,
        )


__all__ = ["AdmonitionPipeline", "RunState"]
