"""Locator parsing: CSS, XPath, regex, fuzzy text and strict descriptors."""
from .models import (
    STRICT_KINDS,
    CssLocator,
    Locator,
    RegexLocator,
    StrictLocator,
    TextLocator,
    XPathLocator,
)
from .parser import is_xpath, parse_locator, parse_regex, to_pattern

__all__ = [
    "STRICT_KINDS",
    "CssLocator",
    "Locator",
    "RegexLocator",
    "StrictLocator",
    "TextLocator",
    "XPathLocator",
    "is_xpath",
    "parse_locator",
    "parse_regex",
    "to_pattern",
]
