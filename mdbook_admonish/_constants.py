"""Common literal values used across mdbook_admonish.

These constants keep the fence keyword, anchor defaults, and asset versioning
centralized so the parser, renderer, installer, and tests import the same
values without drifting. Intended for internal use within the package.

Examples
--------
>>> from mdbook_admonish import _constants
>>> _constants.ADMONISH_KEYWORD
'admonish'
>>> _constants.CSS_CLASS_TEMPLATE.format(directive="warning")
'admonish-warning'
"""

ADMONISH_KEYWORD = "admonish"
PREPROCESSOR_NAME = "admonish"
DEFAULT_DIRECTIVE = "note"
DEFAULT_CSS_ID_PREFIX = "admonition-"
ANCHOR_ID_DEFAULT = "default"
ANCHOR_TITLE_SUFFIX = "-title"
ANCHOR_BODY_SUFFIX = "-body"
ANCHOR_COMPANION_SUFFIXES = (ANCHOR_TITLE_SUFFIX, ANCHOR_BODY_SUFFIX)
CSS_CLASS_TEMPLATE = "admonish-{directive}"
ICON_PROPERTY_TEMPLATE = "--md-admonition-icon--admonish-{directive}"

ASSETS_VERSION = "3.0.2"
REQUIRED_ASSETS_MAJOR = 3
ASSETS_STYLESHEET = "mdbook-admonish.css"
ASSETS_VERSION_COMMENT = "do not edit: managed by `mdbook-admonish install`"

ERROR_CARD_DIRECTIVE = "bug"
ERROR_CARD_TITLE = "Error rendering admonishment"
