"""mdbook preprocessor protocol: decode the book, rewrite chapters, encode it.

mdbook writes ``[context, book]`` as JSON to the preprocessor's stdin and
expects the (possibly modified) book back on stdout. The context is decoded
into a typed :class:`PreprocessorContext`; the book stays plain JSON so that
fields this tool does not know about round-trip untouched.

Examples
--------
>>> context, book = parse_input(
...     b'[{"root": ".", "config": {}, "renderer": "html",'
...     b' "mdbook_version": "0.4.40"}, {"sections": []}]'
... )
>>> context.renderer
'html'
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ

import msgspec

from mdbook_admonish.config import admonish_table, load_admonish_config
from mdbook_admonish.errors import AdmonishError
from mdbook_admonish.install import ensure_compatible_assets_version
from mdbook_admonish.modes import RunMode
from mdbook_admonish.pipeline import AdmonitionPipeline

logger = logging.getLogger(__name__)

Book = dict[str, typ.Any]
Chapter = dict[str, typ.Any]


class PreprocessorInputError(AdmonishError, ValueError):
    """Raised when stdin does not hold a valid ``[context, book]`` payload."""


class PreprocessorContext(msgspec.Struct):
    """The part of mdbook's context this preprocessor reads."""

    root: str
    config: dict[str, typ.Any]
    renderer: str
    mdbook_version: str = ""


def parse_input(payload: bytes | str) -> tuple[PreprocessorContext, Book]:
    """Decode mdbook's ``[context, book]`` JSON array.

    Raises
    ------
    PreprocessorInputError
        If the payload is not valid JSON of the expected shape.
    """
    try:
        return msgspec.json.decode(payload, type=tuple[PreprocessorContext, Book])
    except msgspec.DecodeError as exc:
        msg = f"Unable to parse the mdbook preprocessor input: {exc}"
        raise PreprocessorInputError(msg) from exc


def encode_output(book: Book) -> bytes:
    """Encode the processed book for mdbook."""
    return msgspec.json.encode(book)


def supports_renderer(renderer: str) -> bool:
    """Return whether ``renderer`` is supported; the run mode handles the rest."""
    logger.debug("Asked whether renderer '%s' is supported", renderer)
    return True


def _book_items(book: Book) -> list[typ.Any]:
    items = book.get("sections")
    if items is None:
        items = book.get("items")
    return items if isinstance(items, list) else []


def _walk(items: cabc.Iterable[typ.Any]) -> cabc.Iterator[Chapter]:
    for item in items:
        if not isinstance(item, dict):
            continue
        chapter = item.get("Chapter")
        if not isinstance(chapter, dict):
            continue
        yield chapter
        sub_items = chapter.get("sub_items")
        if isinstance(sub_items, list):
            yield from _walk(sub_items)


def iter_chapters(book: Book) -> cabc.Iterator[Chapter]:
    """Yield every chapter depth-first, skipping separators and part titles."""
    return _walk(_book_items(book))


def _chapter_path(chapter: Chapter) -> str | None:
    for key in ("source_path", "path", "name"):
        value = chapter.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def run_preprocessor(context: PreprocessorContext, book: Book) -> Book:
    """Rewrite every chapter's admonitions and return the book.

    Raises
    ------
    AdmonishConfigError
        If the configuration is invalid or the assets are incompatible.
    PipelineAborted
        If a block is malformed under the ``bail`` policy.
    """
    config = load_admonish_config(admonish_table(context.config))
    ensure_compatible_assets_version(config)
    pipeline = AdmonitionPipeline(config, context.renderer)
    if pipeline.mode is RunMode.PRESERVE:
        logger.debug("Leaving book untouched for renderer '%s'", context.renderer)
        pipeline.finish()
        return book

    for chapter in iter_chapters(book):
        content = chapter.get("content")
        if not isinstance(content, str):
            continue
        chapter["content"] = pipeline.process_document(
            content, path=_chapter_path(chapter)
        )
    pipeline.finish()
    logger.debug("Processed %d admonitions", pipeline.blocks_processed)
    return book


def preprocess(payload: bytes | str) -> bytes:
    """Run the whole protocol on raw stdin bytes, returning stdout bytes."""
    context, book = parse_input(payload)
    return encode_output(run_preprocessor(context, book))


__all__ = [
    "PreprocessorContext",
    "PreprocessorInputError",
    "encode_output",
    "iter_chapters",
    "parse_input",
    "preprocess",
    "run_preprocessor",
    "supports_renderer",
]
