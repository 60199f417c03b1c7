"""Stateless predicates over the current page.

Every ``see_*``/``dont_see_*`` pair of the session evaluates exactly one of
these functions; the negative side calls ``negated()`` on the result.
"""
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union
from urllib.parse import urlsplit

from ..dom.text import node_text, normalize_space
from ..forms.state import FieldReader
from ..locator import to_pattern
from ..matcher import ELEMENT_CHAIN, FIELD_CHAIN, LINK_CHAIN, ElementMatcher
from .results import AssertionResult

if TYPE_CHECKING:
    from ..browser.page import PageState

logger = logging.getLogger(__name__)

Expected = Union[int, Sequence[int]]


def _preview(texts: Sequence[str], limit: int = 3) -> str:
    shown = [f"'{t[:80]}'" for t in texts[:limit]]
    more = f" and {len(texts) - limit} more" if len(texts) > limit else ""
    return ", ".join(shown) + more


def _reader(state: "PageState") -> FieldReader:
    return FieldReader(state.document, state.url, state.inputs)


def see_text(
    state: "PageState", matcher: ElementMatcher, text: str, selector: Any = None
) -> AssertionResult:
    """Text appears as a substring of the rendered text of the page or of ``selector``."""
    needle = normalize_space(text)
    if selector is None:
        body = state.document.body_text
        return AssertionResult(
            needle in body,
            f"page contains '{text}'",
            f"Page text starts with '{body[:120]}'",
        )
    handles = [h for h in matcher.resolve(selector, chain=ELEMENT_CHAIN) if matcher.is_present(h)]
    texts = [h.text for h in handles]
    found = f"Matched texts: {_preview(texts)}" if texts else f"No element matched '{selector}'"
    return AssertionResult(
        any(needle in t for t in texts),
        f"'{selector}' contains '{text}'",
        found,
    )


def see_link(
    state: "PageState", matcher: ElementMatcher, text: str, url: Optional[str] = None
) -> AssertionResult:
    """A link with this text exists, optionally pointing at exactly ``url``."""
    links = [h for h in matcher.resolve(text, chain=LINK_CHAIN) if h.tag == "a"]
    description = f"link '{text}' is on the page"
    if url is not None:
        description = f"link '{text}' to '{url}' is on the page"
        hrefs = [h.get("href") for h in links]
        return AssertionResult(
            url in hrefs,
            description,
            f"Links found point to: {_preview([str(h) for h in hrefs])}" if links else "No such link",
        )
    return AssertionResult(bool(links), description, "" if links else "No such link")


def _uri_for(state: "PageState", expected: str) -> str:
    return state.url if urlsplit(expected).scheme else state.uri


def see_in_current_url(state: "PageState", uri: str) -> AssertionResult:
    current = _uri_for(state, uri)
    return AssertionResult(uri in current, f"current url contains '{uri}'", f"Current url is '{current}'")


def see_current_url_equals(state: "PageState", uri: str) -> AssertionResult:
    current = _uri_for(state, uri)
    return AssertionResult(uri == current, f"current url equals '{uri}'", f"Current url is '{current}'")


def see_current_url_matches(state: "PageState", pattern: Any) -> AssertionResult:
    """Whole URI (or whole URL) matches the pattern."""
    compiled = to_pattern(pattern)
    matched = compiled.fullmatch(state.uri) or compiled.fullmatch(state.url)
    return AssertionResult(
        bool(matched),
        f"current url matches '{compiled.pattern}'",
        f"Current url is '{state.uri}'",
    )


def see_checkbox_is_checked(
    state: "PageState", matcher: ElementMatcher, checkbox: Any
) -> AssertionResult:
    handle = matcher.resolve_one(checkbox, chain=FIELD_CHAIN)
    checked = _reader(state).is_checked(handle.node)
    return AssertionResult(
        checked,
        f"checkbox '{checkbox}' is checked",
        f"Element {handle.describe()} is {'checked' if checked else 'not checked'}",
    )


def _value_matches(reader: FieldReader, handle, expected: Any) -> tuple[bool, str]:
    descriptor = reader.descriptor(handle.node)
    if descriptor is not None and descriptor.is_checkable:
        if isinstance(expected, bool):
            checked = reader.is_checked(handle.node)
            return checked == expected, f"checked={checked}"
        current = reader.value(handle.node)
    elif descriptor is not None and descriptor.is_select:
        selected = [o for o in descriptor.options if o.selected]
        if isinstance(expected, (list, tuple)):
            wanted = {str(v) for v in expected}
            return (
                wanted == {o.value for o in selected} or wanted == {o.label for o in selected},
                f"selected {[o.label for o in selected]}",
            )
        text = str(expected)
        ok = any(o.value == text or o.label == normalize_space(text) for o in selected)
        return ok, f"selected {[o.label for o in selected]}"
    else:
        current = reader.value(handle.node)
        if current is None and handle.tag not in ("input", "textarea", "select"):
            current = node_text(handle.node)

    if isinstance(current, list):
        if isinstance(expected, (list, tuple)):
            return sorted(current) == sorted(str(v) for v in expected), f"value {current}"
        return str(expected) in current, f"value {current}"
    if isinstance(expected, bool):
        return bool(current) == expected, f"value '{current}'"
    return current == str(expected), f"value '{current}'"


def see_in_field(
    state: "PageState", matcher: ElementMatcher, field: Any, value: Any
) -> AssertionResult:
    """Any matched control currently holds ``value``."""
    handles = matcher.resolve(field, chain=FIELD_CHAIN)
    if not handles:
        return AssertionResult(False, f"field '{field}' contains '{value}'", f"No field matched '{field}'")
    reader = _reader(state)
    observed = []
    for handle in handles:
        ok, seen = _value_matches(reader, handle, value)
        if ok:
            return AssertionResult(True, f"field '{field}' contains '{value}'", f"Field has {seen}")
        observed.append(seen)
    return AssertionResult(False, f"field '{field}' contains '{value}'", f"Field has {', '.join(observed)}")


def see_element(
    state: "PageState",
    matcher: ElementMatcher,
    selector: Any,
    attributes: Optional[Mapping[str, Any]] = None,
) -> AssertionResult:
    handles = [h for h in matcher.resolve(selector, chain=ELEMENT_CHAIN) if matcher.is_present(h)]
    kept = matcher.filter_attributes(handles, attributes)
    description = f"element '{selector}' is on the page"
    if attributes:
        description = f"element '{selector}' with {dict(attributes)} is on the page"
    found = f"Found {len(kept)} element(s)"
    if handles and not kept:
        found = f"Found {len(handles)} element(s) without those attributes: " + _preview(
            [h.describe() for h in handles]
        )
    return AssertionResult(bool(kept), description, found)


def see_number_of_elements(
    state: "PageState", matcher: ElementMatcher, selector: Any, expected: Expected
) -> AssertionResult:
    """Match count equals ``expected`` or lies in the inclusive ``[min, max]`` range."""
    count = len([h for h in matcher.resolve(selector, chain=ELEMENT_CHAIN) if matcher.is_present(h)])
    if isinstance(expected, bool):
        raise ValueError(f"Expected count must be an int or [min, max], got {expected!r}")
    if isinstance(expected, int):
        return AssertionResult(
            count == expected,
            f"'{selector}' matches {expected} element(s)",
            f"It matches {count}",
        )
    bounds = list(expected) if isinstance(expected, (list, tuple)) else []
    if len(bounds) != 2 or not all(isinstance(b, int) for b in bounds):
        raise ValueError(f"Expected count must be an int or [min, max], got {expected!r}")
    low, high = bounds
    return AssertionResult(
        low <= count <= high,
        f"'{selector}' matches between {low} and {high} element(s)",
        f"It matches {count}",
    )


def see_option_is_selected(
    state: "PageState", matcher: ElementMatcher, selector: Any, option_text: str
) -> AssertionResult:
    """The option (or radio) labelled or valued ``option_text`` is selected."""
    handle = matcher.resolve_one(selector, chain=FIELD_CHAIN)
    reader = _reader(state)
    description = f"option '{option_text}' of '{selector}' is selected"
    wanted = normalize_space(option_text)
    descriptor = reader.descriptor(handle.node)

    if descriptor is not None and descriptor.is_select:
        selected = [o for o in descriptor.options if o.selected]
        ok = any(o.value == option_text or o.label == wanted for o in selected)
        return AssertionResult(ok, description, f"Selected: {[o.label for o in selected]}")
    if descriptor is not None and descriptor.type == "radio":
        group = reader.group(handle.node)
        checked = [n for n in group if reader.is_checked(n)]
        ok = any(
            n.get("value") == option_text or wanted in reader.labels(n) for n in checked
        )
        return AssertionResult(ok, description, f"Checked: {[n.get('value') for n in checked]}")
    return AssertionResult(False, description, f"{handle.describe()} is not a select or radio")


def see_in_title(state: "PageState", title: str) -> AssertionResult:
    current = state.document.title
    return AssertionResult(
        normalize_space(title) in current, f"page title contains '{title}'", f"Title is '{current}'"
    )


def see_cookie(state: "PageState", name: str) -> AssertionResult:
    return AssertionResult(
        name in state.cookies,
        f"cookie '{name}' is set",
        f"Cookies set: {sorted(state.cookies)}",
    )


def see_response_code_is(state: "PageState", code: int) -> AssertionResult:
    return AssertionResult(
        state.status == code, f"response code is {code}", f"Response code is {state.status}"
    )
