"""Matching strategies and the fallback chains built from them.

Each strategy is a pure function ``(document, scopes, value) -> nodes``.
Chains are ordered tuples; resolution stops at the first strategy that
returns anything.
"""
import logging
from typing import Callable, Optional, Sequence

from lxml.html import HtmlElement

from ..dom.document import ParsedDocument, SelectorSyntaxError
from ..dom.text import label_text, node_text, normalize_space

logger = logging.getLogger(__name__)

Scopes = Optional[Sequence[HtmlElement]]
Strategy = Callable[[ParsedDocument, Scopes, str], list[HtmlElement]]

FIELD_TAGS: tuple[str, ...] = ("input", "select", "textarea")
BUTTON_INPUT_TYPES: frozenset[str] = frozenset({"submit", "button", "reset"})


def _candidates(document: ParsedDocument, scopes: Scopes, *tags: str) -> list[HtmlElement]:
    return document.within(document.root.iter(*tags), scopes)


def _input_type(node: HtmlElement) -> str:
    return (node.get("type") or "text").strip().lower()


def link_text(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """Anchors whose rendered text equals the value."""
    wanted = normalize_space(value)
    return [n for n in _candidates(document, scopes, "a") if node_text(n) == wanted]


def clickable_text(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """Anchors, buttons and button-like inputs whose visible text equals the value."""
    wanted = normalize_space(value)
    found = []
    for node in _candidates(document, scopes, "a", "button", "input"):
        if node.tag == "input":
            if _input_type(node) in BUTTON_INPUT_TYPES and normalize_space(node.get("value", "")) == wanted:
                found.append(node)
        elif node_text(node) == wanted:
            found.append(node)
    return found


def image_alt(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """Image inputs, and anchors wrapping an image, whose alt equals the value."""
    found = []
    for node in _candidates(document, scopes, "input", "a"):
        if node.tag == "input":
            if _input_type(node) == "image" and node.get("alt") == value:
                found.append(node)
        elif any(img.get("alt") == value for img in node.iter("img")):
            found.append(node)
    return found


def button_value(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """Buttons whose value attribute equals the value."""
    return [n for n in _candidates(document, scopes, "button") if n.get("value") == value]


def label_for(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """Form controls whose associated label text equals the value."""
    wanted = normalize_space(value)
    found = []
    for label in _candidates(document, scopes, "label"):
        if label_text(label) != wanted:
            continue
        target_id = label.get("for")
        if target_id:
            target = document.find_by_id(target_id)
            if target is not None and target.tag in FIELD_TAGS:
                found.append(target)
            continue
        nested = [n for n in label.iter(*FIELD_TAGS)]
        if nested:
            found.append(nested[0])
    return document.document_order(found)


def field_name(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """Form controls whose name attribute equals the value."""
    return [n for n in _candidates(document, scopes, *FIELD_TAGS) if n.get("name") == value]


def css(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """CSS selector; invalid syntax yields nothing so the chain can continue."""
    try:
        return document.css(value, scopes)
    except SelectorSyntaxError as e:
        logger.debug(f"Not a CSS selector: {e}")
        return []


def xpath(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    """XPath expression; invalid syntax yields nothing."""
    try:
        return document.xpath(value, scopes)
    except SelectorSyntaxError as e:
        logger.debug(f"Not an XPath expression: {e}")
        return []


def by_id(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    return document.within(document.root.xpath("//*[@id=$v]", v=value), scopes)


def by_name(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    return document.within(document.root.xpath("//*[@name=$v]", v=value), scopes)


def by_class(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    return [
        n for n in document.within(document.root.iter(), scopes)
        if isinstance(n.tag, str) and value in (n.get("class") or "").split()
    ]


def strict_css(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    return document.css(value, scopes)


def strict_xpath(document: ParsedDocument, scopes: Scopes, value: str) -> list[HtmlElement]:
    return document.xpath(value, scopes)


CLICK_CHAIN: tuple[Strategy, ...] = (clickable_text, image_alt, button_value, css, xpath)
LINK_CHAIN: tuple[Strategy, ...] = (link_text, image_alt, css, xpath)
FIELD_CHAIN: tuple[Strategy, ...] = (label_for, field_name, css, xpath)
ELEMENT_CHAIN: tuple[Strategy, ...] = (css, xpath)

STRICT_STRATEGIES: dict[str, Strategy] = {
    "id": by_id,
    "name": by_name,
    "css": strict_css,
    "xpath": strict_xpath,
    "link": link_text,
    "class": by_class,
}
