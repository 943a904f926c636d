"""Anchor id generation with per-document uniqueness.

Ids derive from the title (or, failing that, the directive keyword) and are
deduplicated with numeric suffixes starting at ``-2``. Each assigned id also
reserves its ``<id>-title`` and ``<id>-body`` companions used by the title
bar and body, so no generated id can clash with another block's inner
elements.
"""

from __future__ import annotations

import logging
import re
import typing as typ
import unicodedata

from mdbook_admonish._constants import ANCHOR_COMPANION_SUFFIXES, ANCHOR_ID_DEFAULT
from mdbook_admonish.errors import DuplicateIdCollisionExhausted

if typ.TYPE_CHECKING:
    from mdbook_admonish.resolve import ResolvedBlock

logger = logging.getLogger(__name__)

NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
MAX_SUFFIX_ATTEMPTS = 10_000


def slugify(value: str) -> str:
    """Return a lowercase ASCII slug for ``value``.

    Accented letters keep their base letter; other non-ASCII characters are
    dropped.

    >>> slugify("Data loss!")
    'data-loss'
    >>> slugify("Crème brûlée")
    'creme-brulee'
    """
    normalized = unicodedata.normalize("NFKD", value)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    return NON_SLUG_CHARS.sub("-", ascii_text.lower()).strip("-")


def anchor_candidate(block: ResolvedBlock) -> str:
    """Return the unsuffixed id a block would like to use."""
    slug = slugify(block.title) or slugify(block.keyword) or ANCHOR_ID_DEFAULT
    return f"{block.id_prefix}{slug}"


class AnchorRegistry:
    """Ids already emitted in one document."""

    def __init__(self, *, max_attempts: int = MAX_SUFFIX_ATTEMPTS) -> None:
        self._taken: set[str] = set()
        self._assigned: set[str] = set()
        self._max_attempts = max_attempts

    def __contains__(self, anchor_id: object) -> bool:
        return anchor_id in self._taken

    def __len__(self) -> int:
        return len(self._assigned)

    def reset(self) -> None:
        """Forget every id; called between documents."""
        self._taken.clear()
        self._assigned.clear()

    def _is_free(self, anchor_id: str) -> bool:
        return anchor_id not in self._taken and not any(
            f"{anchor_id}{suffix}" in self._taken
            for suffix in ANCHOR_COMPANION_SUFFIXES
        )

    def _claim(self, anchor_id: str) -> str:
        self._taken.add(anchor_id)
        self._taken.update(
            f"{anchor_id}{suffix}" for suffix in ANCHOR_COMPANION_SUFFIXES
        )
        self._assigned.add(anchor_id)
        return anchor_id

    def assign(self, candidate: str, *, verbatim: bool = False) -> str:
        """Claim ``candidate`` or the first free ``candidate-N`` (N >= 2).

        Parameters
        ----------
        candidate : str
            Preferred id.
        verbatim : bool
            Use ``candidate`` unchanged even when taken (explicit ``id``
            options). A clash is logged rather than resolved.

        Raises
        ------
        DuplicateIdCollisionExhausted
            If no suffix within the attempt bound is free.
        """
        if verbatim:
            if candidate in self._taken:
                logger.warning("Duplicate explicit admonition id '%s'", candidate)
            return self._claim(candidate)
        if self._is_free(candidate):
            return self._claim(candidate)
        for suffix in range(2, self._max_attempts + 2):
            suffixed = f"{candidate}-{suffix}"
            if self._is_free(suffixed):
                return self._claim(suffixed)
        msg = (
            f"Could not find a unique id for '{candidate}' after "
            f"{self._max_attempts} attempts."
        )
        raise DuplicateIdCollisionExhausted(msg)

    def assign_block(self, block: ResolvedBlock) -> str:
        """Assign the id for ``block``, honouring an explicit ``id`` option."""
        if block.explicit_id is not None:
            return self.assign(block.explicit_id, verbatim=True)
        return self.assign(anchor_candidate(block))


__all__ = ["AnchorRegistry", "anchor_candidate", "slugify"]
