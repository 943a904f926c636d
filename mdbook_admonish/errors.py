"""Exception types raised while resolving and rendering admonition blocks.

Parse failures carry enough context (failure kind, offending key, byte offset,
source location) to be rendered either as an inline error card or as the
diagnostic of an aborted run.
"""

from __future__ import annotations

import dataclasses as dc
import enum


@dc.dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a fenced block within a chapter.

    Attributes
    ----------
    path : str or None
        Chapter source path (or name) reported by mdbook, when known.
    line : int
        1-based line number of the opening fence.
    column : int
        0-based column of the fence marker within its container.
    """

    path: str | None
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Return ``path:line:column`` with a placeholder for unnamed chapters."""
        path = self.path or "<chapter>"
        return f"{path}:{self.line}:{self.column + 1}"


class ParseErrorKind(enum.Enum):
    """Reasons a block can fail to parse."""

    BAD_SYNTAX = "bad option syntax"
    UNKNOWN_ESCAPE = "unknown escape sequence"
    UNTERMINATED_STRING = "unterminated string"
    INVALID_VALUE = "invalid value type"
    UNKNOWN_KEY = "unknown option"
    TRAILING_COMMA = "trailing comma"
    UNBALANCED_INDENTATION = "unbalanced indentation"


class AdmonishError(Exception):
    """Base class for every error raised by mdbook_admonish."""


class AdmonishConfigError(AdmonishError, ValueError):
    """Raised when the ``[preprocessor.admonish]`` configuration is invalid."""


class IncompatibleAssetsError(AdmonishConfigError):
    """Raised when the installed stylesheet does not match this release."""


class ParseError(AdmonishError, ValueError):
    """A block could not be parsed or reflowed.

    Parameters
    ----------
    kind : ParseErrorKind
        What failed.
    detail : str
        Human-readable description of the problem.
    offset : int, optional
        Byte offset into the parsed text where the problem was detected.
    key : str, optional
        Option key involved in the failure, when there is one.
    location : SourceLocation, optional
        Where the block lives; attached by the orchestrator.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        detail: str,
        *,
        offset: int | None = None,
        key: str | None = None,
        location: SourceLocation | None = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.offset = offset
        self.key = key
        self.location = location
        super().__init__(self.describe())

    def describe(self) -> str:
        """Return the message shown on error cards and abort diagnostics."""
        message = f"{self.kind.value}: {self.detail}"
        if self.offset is not None:
            message = f"{message} (at byte {self.offset})"
        return message

    def with_location(self, location: SourceLocation) -> ParseError:
        """Attach ``location`` and return ``self`` for chaining."""
        self.location = location
        return self


class MalformedAnnotation(ParseError):
    """The fence info string does not follow any supported syntax."""


class UnbalancedIndentation(ParseError):
    """A content line is indented less than its opening fence."""

    def __init__(
        self,
        detail: str,
        *,
        offset: int | None = None,
        location: SourceLocation | None = None,
    ) -> None:
        super().__init__(
            ParseErrorKind.UNBALANCED_INDENTATION,
            detail,
            offset=offset,
            location=location,
        )


class DuplicateIdCollisionExhausted(AdmonishError, RuntimeError):
    """No free numeric suffix was found for an anchor id."""


class PipelineAborted(AdmonishError, RuntimeError):
    """The ``bail`` failure policy stopped the run at a malformed block."""

    def __init__(self, error: ParseError) -> None:
        self.error = error
        where = str(error.location) if error.location else "unknown location"
        msg = f"Error processing admonition at {where}, bailing:\n{error.describe()}"
        super().__init__(msg)


__all__ = [
    "AdmonishConfigError",
    "AdmonishError",
    "DuplicateIdCollisionExhausted",
    "IncompatibleAssetsError",
    "MalformedAnnotation",
    "ParseError",
    "ParseErrorKind",
    "PipelineAborted",
    "SourceLocation",
    "UnbalancedIndentation",
]
