"""Typed locator variants."""
import re
from dataclasses import dataclass
from typing import Literal, Union

StrictKind = Literal["id", "name", "css", "xpath", "link", "class"]

STRICT_KINDS: tuple[str, ...] = ("id", "name", "css", "xpath", "link", "class")


@dataclass(frozen=True)
class CssLocator:
    """CSS selector, resolved without fallback."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class XPathLocator:
    """XPath expression, resolved without fallback."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TextLocator:
    """Fuzzy string resolved through a fallback chain."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RegexLocator:
    """Pattern used for text extraction and URL checks."""
    pattern: re.Pattern

    def __str__(self) -> str:
        return f"~{self.pattern.pattern}~"


@dataclass(frozen=True)
class StrictLocator:
    """Structured descriptor bound to exactly one resolution strategy."""
    kind: StrictKind
    value: str

    def __str__(self) -> str:
        return f"{{{self.kind}: {self.value!r}}}"


Locator = Union[CssLocator, XPathLocator, TextLocator, RegexLocator, StrictLocator]
