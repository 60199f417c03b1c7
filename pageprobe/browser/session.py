"""Test session: owns the current page and exposes the browser-like API."""
import logging
import mimetypes
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import urldefrag, urljoin, urlsplit

from lxml.html import HtmlElement

from ..assertions import predicates
from ..assertions.results import AssertionResult
from ..core.config import Settings
from ..core.errors import AssertionFailed, ElementNotFound, FormNotFound, PageNotLoaded
from ..core.logging import setup_logging
from ..dom.document import DocumentParser
from ..dom.element import ElementHandle
from ..forms.extractor import FormExtractor, form_owner
from ..forms.merge import find_option
from ..forms.models import FileUpload, FormRequest
from ..forms.state import FieldReader
from ..forms.submitter import ButtonNames, FormSubmitter
from ..locator import RegexLocator, parse_locator, to_pattern
from ..matcher import CLICK_CHAIN, ELEMENT_CHAIN, FIELD_CHAIN, ElementMatcher
from .connection import RequestExecutor, build_executor
from .page import PageState, Response

logger = logging.getLogger(__name__)

TEXT_INPUT_EXCLUDED: frozenset[str] = frozenset(
    {"checkbox", "radio", "submit", "image", "button", "reset", "file"}
)
CLICKABLE_TAGS: tuple[str, ...] = ("a", "button", "input")

Locatable = Union[str, Mapping[str, str], ElementHandle]


class Session:
    """One acceptance-test session with exactly one live page.

    Operations run synchronously, one at a time. Navigation and form
    submission are the only calls that reach the request executor.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        base_url: Optional[str] = None,
        data_dir: Path = Path("tests/_data"),
        parser: Optional[DocumentParser] = None,
        matcher_class: type[ElementMatcher] = ElementMatcher,
    ) -> None:
        """Initialize session.

        Args:
            executor: Transport used for navigation and submissions.
            base_url: Resolves relative URLs before the first page is loaded.
            data_dir: Directory ``attach_file`` reads fixtures from.
            parser: Document parser, lxml-based by default.
            matcher_class: Matcher type, replaceable by drivers with layout.
        """
        self._executor = executor
        self._base_url = base_url
        self._data_dir = Path(data_dir)
        self._parser = parser or DocumentParser()
        self._matcher_class = matcher_class
        self._state = PageState.blank()
        self._submitter = FormSubmitter(self._send_form)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Session":
        """Build a session with the configured executor and log level."""
        setup_logging(settings.log_level)
        return cls(
            executor=build_executor(settings.executor),
            base_url=settings.base_url,
            data_dir=settings.data_dir,
        )

    @property
    def state(self) -> PageState:
        """Current page state."""
        return self._state

    def close(self) -> None:
        self._executor.close()

    # Navigation

    def am_on_page(self, url: str) -> PageState:
        """Open a page; relative URLs resolve against the current URL."""
        return self._navigate("GET", self._absolute(url))

    def _absolute(self, url: str) -> str:
        if urlsplit(url).scheme:
            return url
        if not self._state.is_blank:
            return urljoin(self._state.url, url)
        if self._base_url:
            return urljoin(self._base_url, url)
        raise PageNotLoaded(f"Cannot resolve relative URL '{url}': no page loaded and no base_url set")

    def _navigate(self, method: str, url: str, body: Optional[FormRequest] = None) -> PageState:
        target, fragment = urldefrag(url)
        logger.info(f"Navigating: {method} {target}")
        response = self._executor.execute(method, target, body, dict(self._state.cookies))
        self._load(response)
        if fragment and not urlsplit(self._state.url).fragment:
            self._state = self._state.with_fragment(fragment)
        return self._state

    def _load(self, response: Response) -> None:
        cookies = {**self._state.cookies, **response.cookies}
        self._state = PageState(
            url=response.final_url,
            document=self._parser.parse(response.body, response.final_url),
            cookies=cookies,
            status=response.status,
            generation=self._state.generation + 1,
        )
        logger.info(f"Loaded {response.final_url} ({response.status}), generation {self._state.generation}")

    def _send_form(self, request: FormRequest) -> PageState:
        body = request if request.method == "POST" else None
        return self._navigate(request.method, request.url, body)

    # Cookies

    def set_cookie(self, name: str, value: str) -> None:
        self._state.cookies[name] = value

    def reset_cookie(self, name: str) -> None:
        self._state.cookies.pop(name, None)

    def grab_cookie(self, name: str) -> Optional[str]:
        return self._state.cookies.get(name)

    def see_cookie(self, name: str) -> None:
        self._assert(predicates.see_cookie(self._state, name))

    def dont_see_cookie(self, name: str) -> None:
        self._assert(predicates.see_cookie(self._state, name).negated())

    # Resolution helpers

    def matcher(self) -> ElementMatcher:
        """Matcher bound to the current page."""
        return self._matcher_class(self._state)

    def find(self, locator: Locatable, context: Any = None) -> list[ElementHandle]:
        """Resolve a CSS/XPath/strict locator into handles on the current page."""
        return self.matcher().resolve(locator, context)

    def _field(self, locator: Locatable) -> ElementHandle:
        return self.matcher().resolve_one(locator, chain=FIELD_CHAIN)

    def _reader(self) -> FieldReader:
        return FieldReader(self._state.document, self._state.url, self._state.inputs)

    def _extractor(self) -> FormExtractor:
        return FormExtractor(self._state.document, self._state.url)

    def _assert(self, result: AssertionResult) -> None:
        if not result.passed:
            logger.debug(result.failure_message())
            raise AssertionFailed(result)

    # Actions

    def click(self, link: Locatable, context: Any = None) -> None:
        """Click a link or button found by text, alt, value, CSS or XPath.

        Links navigate to their href, submit buttons submit their form with
        their own name/value included. Other elements are left alone.
        """
        node = self.matcher().resolve_one(link, context, chain=CLICK_CHAIN).node

        target = node if node.tag in CLICKABLE_TAGS else next(node.iterancestors("a", "button"), None)
        if target is None:
            logger.debug(f"Click on <{node.tag}> has no effect")
            return
        if target.tag == "a":
            self._follow(target)
            return

        descriptor = self._extractor().describe(target)
        if descriptor is None or not descriptor.is_button:
            logger.debug(f"Click on <{target.tag}> has no effect")
            return
        form = form_owner(self._state.document, target)
        if form is None:
            logger.debug("Clicked button is not inside a form")
            return
        if descriptor.type == "reset":
            self._reset_form(form)
        elif descriptor.is_submit_button and not descriptor.disabled:
            model = self._extractor().extract(form, self._state.inputs)
            button = next(f for f in model.fields if f.path == descriptor.path)
            self._submitter.submit(model, buttons=button)

    def _follow(self, anchor: HtmlElement) -> None:
        href = anchor.get("href")
        if href is None:
            logger.debug("Clicked anchor has no href")
            return
        href = href.strip()
        if href.lower().startswith("javascript:"):
            logger.warning(f"Ignoring javascript link '{href}'")
            return
        if href.startswith("#"):
            self._state = self._state.with_fragment(href[1:])
            return
        base = self._state.document.base_url(self._state.url)
        self._navigate("GET", urljoin(base, href))

    def _reset_form(self, form: HtmlElement) -> None:
        document = self._state.document
        for node in self._extractor().controls(form):
            self._state.inputs.pop(document.path_of(node), None)

    def submit_form(
        self,
        selector: Locatable,
        params: Optional[Mapping[str, Any]] = None,
        buttons: ButtonNames = None,
    ) -> PageState:
        """Submit a form with overrides layered on its current values.

        Args:
            selector: Locator of the form or of an element inside it.
            params: Field name to value; bracketed names are given in full.
            buttons: Submit button name(s) to include; none means a
                JavaScript-style submission without any button pair.
        """
        handles = self.matcher().resolve(selector, chain=ELEMENT_CHAIN)
        form = None
        for handle in handles:
            form = form_owner(self._state.document, handle.node)
            if form is not None:
                break
        if form is None:
            raise FormNotFound(selector)
        model = self._extractor().extract(form, self._state.inputs)
        return self._submitter.submit(model, params, buttons)

    def fill_field(self, field: Locatable, value: Any) -> None:
        handle = self._field(field)
        input_type = (handle.get("type") or "text").lower()
        if handle.tag == "textarea" or (handle.tag == "input" and input_type not in TEXT_INPUT_EXCLUDED):
            self._state.inputs[handle.path] = "" if value is None else str(value)
            return
        raise ElementNotFound(field, f"Field '{field}' is not a text field: {handle.describe()}")

    def select_option(self, select: Locatable, option: Union[str, Sequence[str]]) -> None:
        """Select option(s) of a select, or a radio of a group, by value or label."""
        handle = self._field(select)
        reader = self._reader()
        descriptor = reader.descriptor(handle.node)
        values = [option] if isinstance(option, str) else list(option)

        if descriptor is not None and descriptor.is_select:
            if not descriptor.is_multiple and len(values) > 1:
                raise ValueError(f"Select '{select}' accepts a single option, got {len(values)}")
            self._state.inputs[handle.path] = [find_option(descriptor, v).value for v in values]
            return
        if descriptor is not None and descriptor.type == "radio":
            group = reader.group(handle.node)
            wanted = values[0]
            chosen = next(
                (n for n in group if n.get("value") == wanted or wanted in reader.labels(n)),
                None,
            )
            if chosen is None:
                raise ElementNotFound(
                    wanted,
                    f"Radio option '{wanted}' not found for '{select}'",
                    candidates=[n.get("value", "") for n in group],
                )
            document = self._state.document
            for node in group:
                self._state.inputs[document.path_of(node)] = node is chosen
            return
        raise ElementNotFound(select, f"'{select}' is not a select or radio: {handle.describe()}")

    def check_option(self, option: Locatable) -> None:
        handle = self._field(option)
        descriptor = self._reader().descriptor(handle.node)
        if descriptor is None or not descriptor.is_checkable:
            raise ElementNotFound(option, f"'{option}' is not a checkbox: {handle.describe()}")
        if descriptor.type == "radio":
            for node in self._reader().group(handle.node):
                self._state.inputs[self._state.document.path_of(node)] = False
        self._state.inputs[handle.path] = True

    def uncheck_option(self, option: Locatable) -> None:
        handle = self._field(option)
        descriptor = self._reader().descriptor(handle.node)
        if descriptor is None or descriptor.type != "checkbox":
            raise ElementNotFound(option, f"'{option}' is not a checkbox: {handle.describe()}")
        self._state.inputs[handle.path] = False

    def attach_file(self, field: Locatable, filename: str) -> None:
        """Attach a file from the data directory to a file input.

        Raises:
            FileNotFoundError: The file is not in the data directory.
        """
        path = self._data_dir / filename
        if not path.is_file():
            raise FileNotFoundError(f"File '{filename}' not found in {self._data_dir}")
        handle = self._field(field)
        if handle.tag != "input" or (handle.get("type") or "").lower() != "file":
            raise ElementNotFound(field, f"'{field}' is not a file input: {handle.describe()}")
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        self._state.inputs[handle.path] = FileUpload(
            filename=path.name, path=str(path), content_type=content_type
        )

    # Extraction

    def grab_text_from(self, locator: Any) -> str:
        """Text of the first matching element, or a regex capture from the page source."""
        parsed = parse_locator(locator)
        if isinstance(parsed, RegexLocator):
            match = parsed.pattern.search(self._state.document.source)
            if not match:
                raise ElementNotFound(locator, f"Pattern '{parsed}' not found in page source")
            return match.group(1) if match.re.groups else match.group(0)
        return self.matcher().resolve_one(parsed, chain=ELEMENT_CHAIN).text

    def grab_value_from(self, field: Locatable) -> Union[str, list[str], None]:
        handle = self._field(field)
        return self._reader().value(handle.node)

    def grab_attribute_from(self, locator: Locatable, attribute: str) -> Optional[str]:
        return self.matcher().resolve_one(locator, chain=ELEMENT_CHAIN).get(attribute)

    def grab_multiple(self, locator: Locatable, attribute: Optional[str] = None) -> list[Optional[str]]:
        """Text (or an attribute) of every matching element."""
        handles = self.matcher().resolve(locator, chain=ELEMENT_CHAIN)
        if attribute is None:
            return [h.text for h in handles]
        return [h.get(attribute) for h in handles]

    def grab_from_current_url(self, pattern: Any = None) -> str:
        """The current URI, or the first capture of ``pattern`` in it."""
        uri = self._state.uri
        if pattern is None:
            return uri
        compiled = to_pattern(pattern)
        match = compiled.search(uri)
        if not match:
            raise AssertionFailed(f"Couldn't match '{compiled.pattern}' in current url '{uri}'")
        return match.group(1) if compiled.groups else match.group(0)

    def grab_title(self) -> str:
        return self._state.document.title

    # Assertions

    def see(self, text: str, selector: Any = None) -> None:
        self._assert(predicates.see_text(self._state, self.matcher(), text, selector))

    def dont_see(self, text: str, selector: Any = None) -> None:
        self._assert(predicates.see_text(self._state, self.matcher(), text, selector).negated())

    def see_link(self, text: str, url: Optional[str] = None) -> None:
        self._assert(predicates.see_link(self._state, self.matcher(), text, url))

    def dont_see_link(self, text: str, url: Optional[str] = None) -> None:
        self._assert(predicates.see_link(self._state, self.matcher(), text, url).negated())

    def see_in_current_url(self, uri: str) -> None:
        self._assert(predicates.see_in_current_url(self._state, uri))

    def dont_see_in_current_url(self, uri: str) -> None:
        self._assert(predicates.see_in_current_url(self._state, uri).negated())

    def see_current_url_equals(self, uri: str) -> None:
        self._assert(predicates.see_current_url_equals(self._state, uri))

    def dont_see_current_url_equals(self, uri: str) -> None:
        self._assert(predicates.see_current_url_equals(self._state, uri).negated())

    def see_current_url_matches(self, pattern: Any) -> None:
        self._assert(predicates.see_current_url_matches(self._state, pattern))

    def dont_see_current_url_matches(self, pattern: Any) -> None:
        self._assert(predicates.see_current_url_matches(self._state, pattern).negated())

    def see_checkbox_is_checked(self, checkbox: Locatable) -> None:
        self._assert(predicates.see_checkbox_is_checked(self._state, self.matcher(), checkbox))

    def dont_see_checkbox_is_checked(self, checkbox: Locatable) -> None:
        self._assert(predicates.see_checkbox_is_checked(self._state, self.matcher(), checkbox).negated())

    def see_in_field(self, field: Locatable, value: Any) -> None:
        self._assert(predicates.see_in_field(self._state, self.matcher(), field, value))

    def dont_see_in_field(self, field: Locatable, value: Any) -> None:
        self._assert(predicates.see_in_field(self._state, self.matcher(), field, value).negated())

    def see_element(self, selector: Locatable, attributes: Optional[Mapping[str, Any]] = None) -> None:
        self._assert(predicates.see_element(self._state, self.matcher(), selector, attributes))

    def dont_see_element(self, selector: Locatable, attributes: Optional[Mapping[str, Any]] = None) -> None:
        self._assert(predicates.see_element(self._state, self.matcher(), selector, attributes).negated())

    def see_number_of_elements(self, selector: Locatable, expected: predicates.Expected) -> None:
        self._assert(predicates.see_number_of_elements(self._state, self.matcher(), selector, expected))

    def see_option_is_selected(self, selector: Locatable, option_text: str) -> None:
        self._assert(predicates.see_option_is_selected(self._state, self.matcher(), selector, option_text))

    def dont_see_option_is_selected(self, selector: Locatable, option_text: str) -> None:
        self._assert(
            predicates.see_option_is_selected(self._state, self.matcher(), selector, option_text).negated()
        )

    def see_in_title(self, title: str) -> None:
        self._assert(predicates.see_in_title(self._state, title))

    def dont_see_in_title(self, title: str) -> None:
        self._assert(predicates.see_in_title(self._state, title).negated())

    def see_response_code_is(self, code: int) -> None:
        self._assert(predicates.see_response_code_is(self._state, code))
