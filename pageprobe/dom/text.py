"""Rendered-text helpers for parsed nodes."""
from typing import Iterator

from lxml.html import HtmlElement

NON_RENDERED_TAGS: frozenset[str] = frozenset({"script", "style", "template", "noscript"})
CONTROL_TAGS: frozenset[str] = frozenset({"select", "textarea", "option", "datalist"})


def normalize_space(text: str) -> str:
    """Collapse runs of whitespace and strip the ends."""
    return " ".join(text.split())


def _iter_text(node: HtmlElement, skip: frozenset[str]) -> Iterator[str]:
    if not isinstance(node.tag, str) or node.tag in skip:
        return
    if node.text:
        yield node.text
    for child in node:
        yield from _iter_text(child, skip)
        if child.tail:
            yield child.tail


def node_text(node: HtmlElement) -> str:
    """Text a reader would see inside a node, whitespace-normalized."""
    return normalize_space("".join(_iter_text(node, NON_RENDERED_TAGS)))


def label_text(node: HtmlElement) -> str:
    """Like node_text but ignoring text that belongs to nested form controls."""
    return normalize_space("".join(_iter_text(node, NON_RENDERED_TAGS | CONTROL_TAGS)))
