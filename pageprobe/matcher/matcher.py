"""Locator resolution against the current page."""
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union

from lxml.html import HtmlElement

from ..core.errors import AmbiguousElement, ElementNotFound, InvalidLocator, StaleElement
from ..dom.document import SelectorSyntaxError
from ..dom.element import ElementHandle
from ..dom.text import node_text, normalize_space
from ..locator import (
    CssLocator,
    Locator,
    RegexLocator,
    StrictLocator,
    TextLocator,
    XPathLocator,
    parse_locator,
)
from .strategies import ELEMENT_CHAIN, STRICT_STRATEGIES, Strategy

if TYPE_CHECKING:
    from ..browser.page import PageState

logger = logging.getLogger(__name__)

Context = Union[ElementHandle, Locator, str, Mapping[str, str], None]

NEARBY_TAGS: tuple[str, ...] = ("a", "button", "label", "input")


class ElementMatcher:
    """Resolves locators into element handles for one page state.

    Matchers are cheap and built per operation; they never outlive the
    PageState they were created for.
    """

    def __init__(self, state: "PageState") -> None:
        self._state = state
        self._document = state.document

    def resolve(
        self,
        locator: Any,
        context: Context = None,
        chain: Sequence[Strategy] = ELEMENT_CHAIN,
    ) -> list[ElementHandle]:
        """Resolve a locator into handles in document order.

        Args:
            locator: Raw or typed locator.
            context: Narrow the search to descendants of this element or region.
            chain: Fallback chain used for fuzzy text locators.

        Returns:
            Matching handles, possibly empty.
        """
        if isinstance(locator, ElementHandle):
            self.check_handle(locator)
            return [locator]
        parsed = parse_locator(locator)
        scopes = self._scopes(context)
        nodes = self._match(parsed, scopes, chain)
        logger.debug(f"Locator '{parsed}' matched {len(nodes)} element(s)")
        return [self._handle(node) for node in nodes]

    def resolve_one(
        self,
        locator: Any,
        context: Context = None,
        chain: Sequence[Strategy] = ELEMENT_CHAIN,
        require_unique: bool = False,
    ) -> ElementHandle:
        """Resolve a locator into a single handle.

        Raises:
            ElementNotFound: Nothing matched.
            AmbiguousElement: Several matched and ``require_unique`` is set.
        """
        handles = self.resolve(locator, context, chain)
        if not handles:
            raise ElementNotFound(locator, candidates=self.nearby(locator))
        if require_unique and len(handles) > 1:
            raise AmbiguousElement(locator, len(handles))
        return handles[0]

    def check_handle(self, handle: ElementHandle) -> HtmlElement:
        """Return the node behind a handle, failing if it outlived its page."""
        if handle.generation != self._state.generation:
            raise StaleElement(handle.path, handle.generation, self._state.generation)
        return handle.node

    def is_present(self, handle: ElementHandle) -> bool:
        """Whether a matched element counts as seen.

        Markup-only pages treat every node in the tree as present. Drivers that
        render layout can override this to demand a non-empty box.
        """
        return True

    @staticmethod
    def filter_attributes(
        handles: Sequence[ElementHandle], attributes: Optional[Mapping[str, Any]]
    ) -> list[ElementHandle]:
        """Keep handles whose attributes include every given key/value pair."""
        if not attributes:
            return list(handles)
        wanted = {str(k).lower(): str(v) for k, v in attributes.items()}
        return [
            h for h in handles
            if all(h.attributes.get(k) == v for k, v in wanted.items())
        ]

    def nearby(self, locator: Any) -> list[str]:
        """Describe elements whose text loosely resembles a text locator."""
        if not isinstance(locator, str):
            return []
        needle = normalize_space(locator).lower()
        if not needle:
            return []
        found = []
        for node in self._document.root.iter(*NEARBY_TAGS):
            text = node_text(node) or node.get("value", "") or node.get("name", "")
            if needle in text.lower():
                found.append(self._handle(node).describe())
            if len(found) >= 5:
                break
        return found

    def _handle(self, node: HtmlElement) -> ElementHandle:
        return ElementHandle(node, self._state.generation, self._document.path_of(node))

    def _scopes(self, context: Context) -> Optional[list[HtmlElement]]:
        if context is None:
            return None
        if isinstance(context, ElementHandle):
            return [self.check_handle(context)]
        nodes = self._match(parse_locator(context), None, ELEMENT_CHAIN)
        if not nodes:
            raise ElementNotFound(context, f"Context '{context}' was not found")
        return nodes

    def _match(
        self,
        locator: Locator,
        scopes: Optional[list[HtmlElement]],
        chain: Sequence[Strategy],
    ) -> list[HtmlElement]:
        if isinstance(locator, RegexLocator):
            raise InvalidLocator(str(locator), "regex locators only extract text")
        if isinstance(locator, TextLocator):
            for strategy in chain:
                nodes = strategy(self._document, scopes, locator.value)
                if nodes:
                    logger.debug(f"'{locator}' resolved by {strategy.__name__}")
                    return nodes
            return []

        if isinstance(locator, CssLocator):
            strategy, value = STRICT_STRATEGIES["css"], locator.value
        elif isinstance(locator, XPathLocator):
            strategy, value = STRICT_STRATEGIES["xpath"], locator.value
        elif isinstance(locator, StrictLocator):
            strategy, value = STRICT_STRATEGIES[locator.kind], locator.value
        else:
            raise InvalidLocator(locator, "unsupported locator")
        try:
            return strategy(self._document, scopes, value)
        except SelectorSyntaxError as e:
            raise InvalidLocator(str(locator), str(e)) from e
