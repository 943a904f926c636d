"""Install the bundled stylesheet into a book and keep ``book.toml`` in sync.

``install`` is safe to run repeatedly: it rewrites the stylesheet, pins the
assets version the preprocessor checks at build time and only saves
``book.toml`` when something changed. tomlkit preserves the user's
formatting and comments.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Array, Table

from mdbook_admonish._constants import (
    ASSETS_STYLESHEET,
    ASSETS_VERSION,
    ASSETS_VERSION_COMMENT,
    PREPROCESSOR_NAME,
    REQUIRED_ASSETS_MAJOR,
)
from mdbook_admonish.config.loader import BOOK_CONFIG_FILENAME
from mdbook_admonish.errors import AdmonishConfigError, IncompatibleAssetsError

if typ.TYPE_CHECKING:
    from tomlkit.toml_document import TOMLDocument

    from mdbook_admonish.config.models import AdmonishConfig

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parent / "assets"
PREPROCESSOR_COMMAND = "mdbook-admonish"
UPDATE_HINT = "Please run `mdbook-admonish install` to update installed assets."


@dc.dataclass(frozen=True, slots=True)
class InstallReport:
    """What an ``install`` run touched."""

    config_path: Path
    stylesheet_path: Path
    config_changed: bool


def bundled_stylesheet() -> str:
    """Return the stylesheet shipped with this release."""
    return (ASSETS_DIR / ASSETS_STYLESHEET).read_text(encoding="utf-8")


def _parse_version(version: str) -> tuple[int, int, int] | None:
    parts = version.strip().split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return None
    major, minor, patch = (int(part) for part in parts)
    return major, minor, patch


def ensure_compatible_assets_version(config: AdmonishConfig) -> None:
    """Check the installed assets satisfy ``^3.0.0``.

    Any ``3.x.y`` release is accepted; other majors and malformed versions
    ask the user to reinstall.

    Raises
    ------
    IncompatibleAssetsError
        If ``assets_version`` is missing, malformed or incompatible.
    """
    required = f"^{REQUIRED_ASSETS_MAJOR}.0.0"
    installed = config.assets_version
    if installed is None:
        msg = (
            "Incompatible assets installed: required mdbook-admonish assets "
            f"version '{required}', but did not find a version.\n{UPDATE_HINT}"
        )
        raise IncompatibleAssetsError(msg)
    version = _parse_version(installed)
    if version is None or version[0] != REQUIRED_ASSETS_MAJOR:
        msg = (
            "Incompatible assets installed: required mdbook-admonish assets "
            f"version '{required}', but found '{installed}'.\n{UPDATE_HINT}"
        )
        raise IncompatibleAssetsError(msg)


def _child_table(
    parent: TOMLDocument | Table, key: str, *, super_table: bool
) -> Table | None:
    """Return ``parent[key]``, creating it when absent; ``None`` on odd shapes."""
    existing = parent.get(key)
    if existing is None:
        created = tomlkit.table(is_super_table=super_table)
        parent[key] = created
        return typ.cast("Table", parent[key])
    if isinstance(existing, Table):
        return existing
    return None


def _update_preprocessor(document: TOMLDocument) -> None:
    preprocessors = _child_table(document, "preprocessor", super_table=True)
    admonish = (
        None
        if preprocessors is None
        else _child_table(preprocessors, PREPROCESSOR_NAME, super_table=False)
    )
    if admonish is None:
        logger.warning(
            "Unexpected configuration, not updating [preprocessor.%s]",
            PREPROCESSOR_NAME,
        )
        return
    if admonish.get("command") != PREPROCESSOR_COMMAND:
        admonish["command"] = PREPROCESSOR_COMMAND
    if admonish.get("assets_version") != ASSETS_VERSION:
        version = tomlkit.item(ASSETS_VERSION)
        version.comment(ASSETS_VERSION_COMMENT)
        admonish["assets_version"] = version


def _update_additional_css(document: TOMLDocument, stylesheet: str) -> None:
    output = _child_table(document, "output", super_table=True)
    html = None if output is None else _child_table(output, "html", super_table=False)
    if html is None:
        logger.warning("Unexpected configuration, not updating [output.html]")
        return
    additional_css = html.get("additional-css")
    if additional_css is None:
        additional_css = tomlkit.array()
        html["additional-css"] = additional_css
        additional_css = html["additional-css"]
    if not isinstance(additional_css, Array):
        logger.warning("Unexpected configuration, not updating 'additional-css'")
        return
    if any(str(entry) == stylesheet for entry in additional_css):
        return
    logger.info("Adding '%s' to 'additional-css'", stylesheet)
    additional_css.append(stylesheet)


def install_assets(book_dir: Path, css_dir: Path = Path()) -> InstallReport:
    """Copy the stylesheet into the book and update ``book.toml``.

    Parameters
    ----------
    book_dir : Path
        Root directory of the book, containing ``book.toml``.
    css_dir : Path
        Directory, relative to ``book_dir``, receiving the stylesheet.

    Returns
    -------
    InstallReport
        Paths written and whether the configuration changed.

    Raises
    ------
    FileNotFoundError
        If ``book.toml`` is missing.
    AdmonishConfigError
        If ``book.toml`` is not valid TOML.
    """
    config_path = book_dir / BOOK_CONFIG_FILENAME
    logger.info("Reading configuration file '%s'", config_path)
    if not config_path.exists():
        msg = f"Configuration file '{config_path}' not found."
        raise FileNotFoundError(msg)
    original = config_path.read_text(encoding="utf-8")
    try:
        document = tomlkit.parse(original)
    except TOMLKitError as exc:
        msg = f"Configuration file '{config_path}' is not valid TOML: {exc}"
        raise AdmonishConfigError(msg) from exc

    stylesheet_ref = (css_dir / ASSETS_STYLESHEET).as_posix()
    _update_preprocessor(document)
    _update_additional_css(document, stylesheet_ref)

    stylesheet_path = book_dir / css_dir / ASSETS_STYLESHEET
    stylesheet_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Copying '%s' to '%s'", ASSETS_STYLESHEET, stylesheet_path)
    stylesheet_path.write_text(bundled_stylesheet(), encoding="utf-8")

    updated = tomlkit.dumps(document)
    changed = updated != original
    if changed:
        logger.info("Saving changed configuration to '%s'", config_path)
        config_path.write_text(updated, encoding="utf-8")
    else:
        logger.info("Configuration '%s' already up to date", config_path)
    logger.info("mdbook-admonish is now installed. You can start using it in your book.")
    return InstallReport(
        config_path=config_path,
        stylesheet_path=stylesheet_path,
        config_changed=changed,
    )


__all__ = [
    "InstallReport",
    "bundled_stylesheet",
    "ensure_compatible_assets_version",
    "install_assets",
]
