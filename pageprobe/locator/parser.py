"""Classification of caller-supplied locator values.

Pure parsing: nothing in here touches a document. The rules, in order:

- already-typed locators and compiled patterns pass through
- mappings must carry exactly one strict key (id, name, css, xpath, link, class)
- ``~pattern~flags`` strings become regex locators
- strings that look like XPath (leading slash, ``./``, axis syntax) become XPath
- everything else is a fuzzy text locator
"""
import re
from collections.abc import Mapping
from typing import Any

from ..core.errors import InvalidLocator
from .models import (
    STRICT_KINDS,
    CssLocator,
    Locator,
    RegexLocator,
    StrictLocator,
    TextLocator,
    XPathLocator,
)

REGEX_DELIMITER = "~"

REGEX_FLAGS: dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}

XPATH_PREFIXES: tuple[str, ...] = ("/", "./", ".//", "(/", "(./", "(.//")

_AXIS_RE = re.compile(
    r"\b(ancestor|ancestor-or-self|attribute|child|descendant|descendant-or-self|"
    r"following|following-sibling|namespace|parent|preceding|preceding-sibling|self)::"
)

_LOCATOR_TYPES = (CssLocator, XPathLocator, TextLocator, RegexLocator, StrictLocator)


def parse_locator(value: Any) -> Locator:
    """Classify a raw locator value.

    Args:
        value: String, mapping, compiled pattern or typed locator.

    Returns:
        The typed locator.

    Raises:
        InvalidLocator: Malformed strict mapping, unterminated regex or an
            unsupported value type.
    """
    if isinstance(value, _LOCATOR_TYPES):
        return value
    if isinstance(value, re.Pattern):
        return RegexLocator(value)
    if isinstance(value, Mapping):
        return _parse_strict(value)
    if not isinstance(value, str):
        raise InvalidLocator(value, f"unsupported type {type(value).__name__}")
    if not value.strip():
        raise InvalidLocator(value, "empty locator")
    if value.startswith(REGEX_DELIMITER):
        return parse_regex(value)
    if is_xpath(value):
        return XPathLocator(value)
    return TextLocator(value)


def is_xpath(value: str) -> bool:
    """Return True if the string reads as an XPath expression."""
    stripped = value.lstrip()
    return stripped.startswith(XPATH_PREFIXES) or bool(_AXIS_RE.search(stripped))


def parse_regex(value: str) -> RegexLocator:
    """Parse a ``~pattern~flags`` string."""
    end = value.rfind(REGEX_DELIMITER)
    if end <= 0:
        raise InvalidLocator(value, "unterminated regex delimiter")
    body, flag_chars = value[1:end], value[end + 1:]
    flags = 0
    for char in flag_chars:
        if char not in REGEX_FLAGS:
            raise InvalidLocator(value, f"unknown regex flag '{char}'")
        flags |= REGEX_FLAGS[char]
    try:
        return RegexLocator(re.compile(body, flags))
    except re.error as e:
        raise InvalidLocator(value, f"bad pattern: {e}") from e


def to_pattern(value: Any) -> re.Pattern:
    """Coerce a regex locator, compiled pattern or plain pattern string."""
    if isinstance(value, RegexLocator):
        return value.pattern
    if isinstance(value, re.Pattern):
        return value
    if isinstance(value, str) and value.startswith(REGEX_DELIMITER):
        return parse_regex(value).pattern
    if isinstance(value, str):
        try:
            return re.compile(value)
        except re.error as e:
            raise InvalidLocator(value, f"bad pattern: {e}") from e
    raise InvalidLocator(value, "expected a regular expression")


def _parse_strict(value: Mapping) -> StrictLocator:
    if len(value) != 1:
        raise InvalidLocator(dict(value), "strict locator needs exactly one key")
    kind, target = next(iter(value.items()))
    if kind not in STRICT_KINDS:
        raise InvalidLocator(
            dict(value), f"unknown strict key '{kind}', expected one of {', '.join(STRICT_KINDS)}"
        )
    if not isinstance(target, str) or not target:
        raise InvalidLocator(dict(value), f"strict '{kind}' needs a non-empty string")
    return StrictLocator(kind, target)
