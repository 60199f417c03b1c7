"""Parsed document wrapper over lxml with CSS and XPath evaluation."""
import logging
from typing import Iterable, Optional, Sequence, Union
from urllib.parse import urljoin

import lxml.html
from cssselect import SelectorError
from lxml import etree
from lxml.cssselect import CSSSelector
from lxml.html import HtmlElement

from .text import node_text

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT = "<html><head></head><body></body></html>"


class SelectorSyntaxError(ValueError):
    """CSS or XPath expression could not be compiled."""


class ParsedDocument:
    """Read-only view of a parsed HTML document.

    Nodes are never mutated after parsing, so document positions and node
    paths stay valid for the lifetime of the document.
    """

    def __init__(self, root: HtmlElement, source: str, url: str = "") -> None:
        self._root = root
        self._tree = root.getroottree()
        self._source = source
        self._url = url
        self._positions: Optional[dict[HtmlElement, int]] = None

    @property
    def root(self) -> HtmlElement:
        return self._root

    @property
    def source(self) -> str:
        """Original markup as received."""
        return self._source

    @property
    def title(self) -> str:
        titles = self._root.xpath("//title")
        return node_text(titles[0]) if titles else ""

    @property
    def body(self) -> HtmlElement:
        body = self._root.find("body")
        return body if body is not None else self._root

    @property
    def body_text(self) -> str:
        return node_text(self.body)

    def base_url(self, page_url: str) -> str:
        """URL relative links resolve against, honoring ``<base href>``."""
        bases = self._root.xpath("//base[@href]")
        if bases:
            return urljoin(page_url, bases[0].get("href").strip())
        return page_url

    def css(self, selector: str, scopes: Optional[Sequence[HtmlElement]] = None) -> list[HtmlElement]:
        """Evaluate a CSS selector.

        Args:
            selector: CSS selector text.
            scopes: Restrict matches to descendants of these nodes.

        Raises:
            SelectorSyntaxError: Selector cannot be translated.
        """
        try:
            compiled = CSSSelector(selector, translator="html")
        except SelectorError as e:
            raise SelectorSyntaxError(f"Invalid CSS selector '{selector}': {e}") from e
        return self.within(compiled(self._root), scopes)

    def xpath(self, expression: str, scopes: Optional[Sequence[HtmlElement]] = None) -> list[HtmlElement]:
        """Evaluate an XPath expression, keeping element results only.

        Relative expressions are evaluated once per scope node; absolute ones
        against the document and then restricted to the scopes.

        Raises:
            SelectorSyntaxError: Expression cannot be compiled or evaluated.
        """
        try:
            compiled = etree.XPath(expression)
        except etree.XPathError as e:
            raise SelectorSyntaxError(f"Invalid XPath '{expression}': {e}") from e

        try:
            if scopes is not None and expression.lstrip().startswith((".", "(.")):
                results: list = []
                for scope in scopes:
                    results.extend(_as_list(compiled(scope)))
                return self.document_order(_elements(results))
            return self.within(_elements(_as_list(compiled(self._root))), scopes)
        except etree.XPathError as e:
            raise SelectorSyntaxError(f"Invalid XPath '{expression}': {e}") from e

    def within(
        self, nodes: Iterable[HtmlElement], scopes: Optional[Sequence[HtmlElement]] = None
    ) -> list[HtmlElement]:
        """Keep nodes that are strict descendants of any scope, in document order."""
        if scopes is None:
            return self.document_order(nodes)
        scope_set = set(scopes)
        kept = [n for n in nodes if any(a in scope_set for a in n.iterancestors())]
        return self.document_order(kept)

    def document_order(self, nodes: Iterable[HtmlElement]) -> list[HtmlElement]:
        """Deduplicate nodes and sort them by position in the document."""
        if self._positions is None:
            self._positions = {node: i for i, node in enumerate(self._root.iter())}
        positions = self._positions
        unique = {node for node in nodes if node in positions}
        return sorted(unique, key=positions.__getitem__)

    def path_of(self, node: HtmlElement) -> str:
        """Stable key identifying a node within this document."""
        return self._tree.getpath(node)

    def find_by_id(self, element_id: str) -> Optional[HtmlElement]:
        found = self._root.xpath("//*[@id=$id]", id=element_id)
        return found[0] if found else None


class DocumentParser:
    """Parses markup into ParsedDocument instances."""

    def parse(self, content: Union[str, bytes, None], url: str = "") -> ParsedDocument:
        """Parse HTML markup.

        Args:
            content: Markup as text or bytes. Empty input yields an empty page.
            url: URL the markup was loaded from.

        Returns:
            Parsed document.
        """
        if isinstance(content, bytes):
            source = content.decode("utf-8", errors="replace")
            raw: Union[str, bytes] = content
        else:
            source = content or ""
            raw = source.encode("utf-8") if source.lstrip().startswith("<?xml") else source

        if not source.strip():
            raw = EMPTY_DOCUMENT
        try:
            root = lxml.html.document_fromstring(raw)
        except etree.ParserError as e:
            logger.warning(f"Could not parse document from {url or 'input'}: {e}")
            root = lxml.html.document_fromstring(EMPTY_DOCUMENT)
        return ParsedDocument(root, source, url)


def _as_list(result) -> list:
    return result if isinstance(result, list) else []


def _elements(results: Iterable) -> list[HtmlElement]:
    return [r for r in results if isinstance(r, etree._Element) and isinstance(r.tag, str)]
