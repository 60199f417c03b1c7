"""Tests for element resolution strategies and fallback chains."""
import pytest

from conftest import make_state
from pageprobe.core.errors import AmbiguousElement, ElementNotFound, InvalidLocator, StaleElement
from pageprobe.locator import CssLocator
from pageprobe.matcher import CLICK_CHAIN, FIELD_CHAIN, LINK_CHAIN, ElementMatcher
from pageprobe.matcher.strategies import button_value, clickable_text, image_alt, label_for

PAGE = """
<html><head><title>Home</title></head><body>
  <div id="nav">
    <a href="/logout" alt="Logout">Logout</a>
    <a href="/home">Home</a>
  </div>
  <button value="Logout">Submit</button>
  <a href="/profile"><img src="p.png" alt="Profile"></a>
  <form id="f" action="/save">
    <label for="email">Email</label>
    <input id="email" name="email">
    <label>Name <input name="username"></label>
    <input type="image" name="map" src="m.png" alt="Map">
    <input type="submit" name="go" value="Save">
  </form>
  <div class="box note">One</div>
  <div class="box">Two</div>
  <script>var hidden = "Logout";</script>
</body></html>
"""


@pytest.fixture
def matcher() -> ElementMatcher:
    return ElementMatcher(make_state(PAGE))


class TestClickChain:
    def test_text_equality_precedes_button_value(self, matcher: ElementMatcher) -> None:
        handle = matcher.resolve_one("Logout", chain=CLICK_CHAIN)
        assert handle.tag == "a"
        assert handle.get("href") == "/logout"

    def test_button_text(self, matcher: ElementMatcher) -> None:
        handle = matcher.resolve_one("Submit", chain=CLICK_CHAIN)
        assert handle.tag == "button"

    def test_submit_input_by_value(self, matcher: ElementMatcher) -> None:
        handle = matcher.resolve_one("Save", chain=CLICK_CHAIN)
        assert handle.get("name") == "go"

    def test_image_link_by_alt(self, matcher: ElementMatcher) -> None:
        handle = matcher.resolve_one("Profile", chain=CLICK_CHAIN)
        assert handle.tag == "a"
        assert handle.get("href") == "/profile"

    def test_image_input_by_alt(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve_one("Map", chain=CLICK_CHAIN).get("name") == "map"

    def test_css_fallback(self, matcher: ElementMatcher) -> None:
        handles = matcher.resolve("#nav a", chain=CLICK_CHAIN)
        assert [h.text for h in handles] == ["Logout", "Home"]

    def test_xpath_fallback_for_invalid_css(self, matcher: ElementMatcher) -> None:
        handles = matcher.resolve("body/div[@class='box']", chain=CLICK_CHAIN)
        assert [h.text for h in handles] == ["Two"]

    def test_axis_syntax_is_xpath(self, matcher: ElementMatcher) -> None:
        handles = matcher.resolve("descendant::div[@class='box']", chain=CLICK_CHAIN)
        assert [h.text for h in handles] == ["Two"]

    def test_unmatched_text_resolves_to_nothing(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve("Sign Up", chain=CLICK_CHAIN) == []


class TestIndividualStrategies:
    def test_strategies_are_independent(self, matcher: ElementMatcher) -> None:
        document = make_state(PAGE).document
        assert [n.tag for n in button_value(document, None, "Logout")] == ["button"]
        assert [n.tag for n in clickable_text(document, None, "Logout")] == ["a"]
        assert image_alt(document, None, "Logout") == []

    def test_label_for_and_wrapping_label(self) -> None:
        document = make_state(PAGE).document
        assert [n.get("name") for n in label_for(document, None, "Email")] == ["email"]
        assert [n.get("name") for n in label_for(document, None, "Name")] == ["username"]


class TestFieldChain:
    def test_label_text(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve_one("Email", chain=FIELD_CHAIN).get("id") == "email"

    def test_name_attribute(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve_one("username", chain=FIELD_CHAIN).tag == "input"

    def test_css_then_xpath(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve_one("#f input[name=email]", chain=FIELD_CHAIN).get("id") == "email"
        assert matcher.resolve_one("//input[@name='username']", chain=FIELD_CHAIN).get("name") == "username"


class TestLinkChain:
    def test_link_text(self, matcher: ElementMatcher) -> None:
        assert [h.get("href") for h in matcher.resolve("Home", chain=LINK_CHAIN)] == ["/home"]


class TestStrictLocators:
    def test_missing_id_never_falls_back(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve({"id": "Logout"}, chain=CLICK_CHAIN) == []
        with pytest.raises(ElementNotFound):
            matcher.resolve_one({"id": "Logout"}, chain=CLICK_CHAIN)

    def test_class_membership(self, matcher: ElementMatcher) -> None:
        assert [h.text for h in matcher.resolve({"class": "box"})] == ["One", "Two"]
        assert [h.text for h in matcher.resolve({"class": "note"})] == ["One"]

    def test_link(self, matcher: ElementMatcher) -> None:
        assert [h.tag for h in matcher.resolve({"link": "Home"})] == ["a"]

    def test_name_and_xpath(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve_one({"name": "go"}).get("value") == "Save"
        assert matcher.resolve_one({"xpath": "//input[@id='email']"}).get("name") == "email"

    def test_invalid_css_is_reported(self, matcher: ElementMatcher) -> None:
        with pytest.raises(InvalidLocator):
            matcher.resolve({"css": "div["})
        with pytest.raises(InvalidLocator):
            matcher.resolve(CssLocator("div["))

    def test_regex_is_rejected_for_elements(self, matcher: ElementMatcher) -> None:
        with pytest.raises(InvalidLocator):
            matcher.resolve("~Logout~")


class TestContext:
    def test_context_narrows_search(self, matcher: ElementMatcher) -> None:
        handle = matcher.resolve_one("Logout", context="#nav", chain=CLICK_CHAIN)
        assert handle.tag == "a"
        assert matcher.resolve("Submit", context="#nav", chain=CLICK_CHAIN) == []

    def test_context_handle(self, matcher: ElementMatcher) -> None:
        form = matcher.resolve_one("#f")
        assert [h.get("name") for h in matcher.resolve("input", context=form)] == [
            "email", "username", "map", "go"
        ]

    def test_relative_xpath_in_context(self, matcher: ElementMatcher) -> None:
        assert len(matcher.resolve(".//a", context="#nav")) == 2

    def test_missing_context(self, matcher: ElementMatcher) -> None:
        with pytest.raises(ElementNotFound, match="Context"):
            matcher.resolve("Logout", context="#missing", chain=CLICK_CHAIN)


class TestSingleResult:
    def test_first_in_document_order(self, matcher: ElementMatcher) -> None:
        assert matcher.resolve_one(".box").text == "One"

    def test_require_unique(self, matcher: ElementMatcher) -> None:
        with pytest.raises(AmbiguousElement):
            matcher.resolve_one(".box", require_unique=True)

    def test_not_found_lists_nearby_elements(self, matcher: ElementMatcher) -> None:
        with pytest.raises(ElementNotFound) as excinfo:
            matcher.resolve_one("Log", chain=CLICK_CHAIN)
        assert "Nearby" in str(excinfo.value)
        assert excinfo.value.candidates


class TestAttributesAndHandles:
    def test_filter_attributes(self, matcher: ElementMatcher) -> None:
        handles = matcher.resolve("input")
        assert len(ElementMatcher.filter_attributes(handles, {"name": "email"})) == 1
        assert ElementMatcher.filter_attributes(handles, {}) == handles
        assert ElementMatcher.filter_attributes(handles, {"name": "nope"}) == []

    def test_stale_handle(self) -> None:
        old = ElementMatcher(make_state(PAGE, generation=1)).resolve_one("#email")
        current = ElementMatcher(make_state(PAGE, generation=2))
        with pytest.raises(StaleElement):
            current.resolve(old)
        with pytest.raises(ElementNotFound):
            current.resolve("input", context=old)

    def test_script_text_is_not_rendered(self, matcher: ElementMatcher) -> None:
        assert "hidden" not in matcher.resolve_one("body").text
