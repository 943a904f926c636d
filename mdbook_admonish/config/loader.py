"""Load the ``[preprocessor.admonish]`` table into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from mdbook_admonish._constants import PREPROCESSOR_NAME
from mdbook_admonish.directives import Color, is_valid_directive
from mdbook_admonish.errors import AdmonishConfigError
from mdbook_admonish.modes import OnFailure, RunMode

from .helpers import (
    _expect_bool,
    _expect_mapping,
    _expect_str,
    _lookup,
    _normalize_classes,
    _optional_str,
    _parse_enum,
    _str_list,
)
from .models import AdmonishConfig, BookDefaults, CustomDirectiveConfig, RendererConfig

BOOK_CONFIG_FILENAME = "book.toml"


def admonish_table(
    book_config: typ.Mapping[str, typ.Any],
) -> typ.Mapping[str, typ.Any]:
    """Return ``preprocessor.admonish`` from a whole book configuration.

    Raises
    ------
    AdmonishConfigError
        If the book does not configure this preprocessor.
    """
    preprocessors = _expect_mapping(book_config.get("preprocessor"), key="preprocessor")
    table = preprocessors.get(PREPROCESSOR_NAME)
    if table is None:
        msg = f"No configuration for mdbook-admonish in {BOOK_CONFIG_FILENAME}."
        raise AdmonishConfigError(msg)
    return _expect_mapping(table, key=f"preprocessor.{PREPROCESSOR_NAME}")


def load_admonish_config(table: typ.Mapping[str, typ.Any] | None) -> AdmonishConfig:
    """Build an :class:`AdmonishConfig` from the preprocessor table.

    Parameters
    ----------
    table : Mapping or None
        Contents of ``[preprocessor.admonish]``, as plain Python values.

    Returns
    -------
    AdmonishConfig
        Immutable configuration with defaults applied.

    Raises
    ------
    AdmonishConfigError
        If a value has the wrong type, an enum value is unknown, or a custom
        directive is malformed.

    Examples
    --------
    >>> config = load_admonish_config({"on_failure": "bail"})
    >>> config.on_failure.value
    'bail'
    >>> config.render_mode_for("markdown").value
    'preserve'
    """
    raw = _expect_mapping(table, key=f"preprocessor.{PREPROCESSOR_NAME}")

    on_failure_raw = _lookup(raw, "on_failure", "on-failure")
    on_failure = (
        OnFailure.CONTINUE
        if on_failure_raw is None
        else _parse_enum(OnFailure, on_failure_raw, key="on_failure")
    )
    return AdmonishConfig(
        assets_version=_optional_str(
            _lookup(raw, "assets_version", "assets-version"), key="assets_version"
        ),
        on_failure=on_failure,
        defaults=_build_defaults(raw.get("default")),
        renderers=_build_renderers(raw.get("renderer")),
        custom=_build_custom(raw.get("custom")),
    )


def load_admonish_config_from_book(book_dir: Path) -> AdmonishConfig:
    """Read ``book_dir/book.toml`` and load its admonish table.

    Raises
    ------
    FileNotFoundError
        If ``book.toml`` does not exist.
    AdmonishConfigError
        If the file is not valid TOML or lacks ``[preprocessor.admonish]``.
    """
    path = book_dir / BOOK_CONFIG_FILENAME
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)
    try:
        document = tomlkit.parse(path.read_text(encoding="utf-8"))
    except TOMLKitError as exc:
        msg = f"Configuration file '{path}' is not valid TOML: {exc}"
        raise AdmonishConfigError(msg) from exc
    return load_admonish_config(admonish_table(document.unwrap()))


def _build_defaults(payload: object) -> BookDefaults:
    raw = _expect_mapping(payload, key="default")
    base = BookDefaults()
    prefix = _optional_str(
        _lookup(raw, "css_id_prefix", "css-id-prefix"), key="default.css_id_prefix"
    )
    return BookDefaults(
        title=_optional_str(raw.get("title"), key="default.title"),
        collapsible=_expect_bool(
            raw.get("collapsible"), key="default.collapsible", default=base.collapsible
        ),
        css_id_prefix=base.css_id_prefix if prefix is None else prefix,
    )


def _build_renderers(payload: object) -> dict[str, RendererConfig]:
    raw = _expect_mapping(payload, key="renderer")
    renderers: dict[str, RendererConfig] = {}
    for name, settings in raw.items():
        key = f"renderer.{name}"
        table = _expect_mapping(settings, key=key)
        mode_raw = _lookup(table, "render_mode", "render-mode")
        mode = (
            None
            if mode_raw is None
            else _parse_enum(RunMode, mode_raw, key=f"{key}.render_mode")
        )
        renderers[name] = RendererConfig(render_mode=mode)
    return renderers


def _build_custom(payload: object) -> tuple[CustomDirectiveConfig, ...]:
    if payload is None:
        return ()
    if not isinstance(payload, list):
        msg = f"'custom' must be an array of tables, got {payload!r}."
        raise AdmonishConfigError(msg)
    return tuple(
        _build_custom_directive(entry, index) for index, entry in enumerate(payload)
    )


def _build_custom_directive(entry: object, index: int) -> CustomDirectiveConfig:
    key = f"custom[{index}]"
    raw = _expect_mapping(entry, key=key)
    match raw:
        case {"directive": str() as directive, "icon": str() as icon, "color": color}:
            pass
        case _:
            msg = f"'{key}' requires string 'directive' and 'icon' and a 'color'."
            raise AdmonishConfigError(msg)
    if not is_valid_directive(directive):
        msg = f"Invalid directive {directive!r} in '{key}'."
        raise AdmonishConfigError(msg)
    return CustomDirectiveConfig(
        directive=directive,
        icon=Path(icon),
        color=Color.parse(_expect_str(color, key=f"{key}.color")),
        aliases=_str_list(raw.get("aliases"), key=f"{key}.aliases"),
        title=_optional_str(raw.get("title"), key=f"{key}.title"),
        classnames=_normalize_classes(raw.get("class"), key=f"{key}.class"),
    )
