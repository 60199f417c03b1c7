"""Tests for assertion predicates and the see/dont_see pairs."""
import pytest

from conftest import BASE_URL, FakeExecutor, make_state, open_page
from pageprobe.assertions import AssertionResult, predicates
from pageprobe.browser.page import Response
from pageprobe.browser.session import Session
from pageprobe.core.errors import AssertionFailed
from pageprobe.matcher import ElementMatcher

PAGE = """
<html><head><title>User profile</title></head><body>
  <h1>Welcome, <b>davert</b></h1>
  <a href="/logout">Logout</a>
  <ul class="items"><li>one</li><li>two</li><li>three</li></ul>
  <form action="/save" method="post">
    <label for="name">Name</label><input id="name" name="name" value="Davert">
    <input type="checkbox" name="terms" checked>
    <select name="age">
      <option value="child">Under 18</option>
      <option value="adult" selected>18 or older</option>
    </select>
    <input type="submit" value="Save">
  </form>
  <script>var hidden = "Invisible";</script>
</body></html>
"""


@pytest.fixture
def loaded(session: Session, executor: FakeExecutor) -> Session:
    open_page(session, executor, PAGE, "/users/10?tab=info")
    return session


class TestAssertionResult:
    def test_negation_flips_outcome_and_message(self) -> None:
        result = AssertionResult(True, "page contains 'x'", "Page text starts with 'x'")
        negated = result.negated()
        assert result and not negated
        assert negated.failure_message() == "Failed asserting that not: page contains 'x'. Page text starts with 'x'"
        assert negated.negated() == result

    def test_failure_is_an_assertion_error(self) -> None:
        error = AssertionFailed(AssertionResult(False, "title contains 'x'"))
        assert isinstance(error, AssertionError)
        assert str(error) == "Failed asserting that title contains 'x'"


@pytest.mark.parametrize(
    "name,args",
    [
        ("see", ("Welcome, davert",)),
        ("see", ("Invisible",)),
        ("see", ("two", "ul.items")),
        ("see", ("davert", "//h1/b")),
        ("see_link", ("Logout",)),
        ("see_link", ("Logout", "/login")),
        ("see_in_current_url", ("/users/1",)),
        ("see_current_url_equals", ("/users/10?tab=info",)),
        ("see_current_url_matches", (r"~^/users/\d+\?tab=info$~",)),
        ("see_current_url_matches", ("~/users~",)),
        ("see_checkbox_is_checked", ("terms",)),
        ("see_in_field", ("Name", "Davert")),
        ("see_in_field", ("age", "18 or older")),
        ("see_element", ("li",)),
        ("see_element", ("input", {"name": "missing"})),
        ("see_option_is_selected", ("age", "Under 18")),
        ("see_in_title", ("profile",)),
        ("see_cookie", ("sid",)),
    ],
)
def test_positive_and_negative_disagree(loaded: Session, name: str, args: tuple) -> None:
    negative = "dont_" + name
    outcomes = []
    for method in (name, negative):
        try:
            getattr(loaded, method)(*args)
            outcomes.append(True)
        except AssertionFailed:
            outcomes.append(False)
    assert outcomes in ([True, False], [False, True])


class TestText:
    def test_script_text_is_not_visible(self, loaded: Session) -> None:
        loaded.dont_see("Invisible")
        loaded.see("Welcome, davert")

    def test_text_in_context(self, loaded: Session) -> None:
        loaded.see("three", ".items")
        loaded.dont_see("Logout", ".items")

    def test_failure_message_names_the_claim(self, loaded: Session) -> None:
        with pytest.raises(AssertionFailed, match="Failed asserting that page contains 'Goodbye'"):
            loaded.see("Goodbye")


class TestLinks:
    def test_link_with_url(self, loaded: Session) -> None:
        loaded.see_link("Logout", "/logout")
        loaded.dont_see_link("Logout", "/login")
        loaded.dont_see_link("Login")


class TestUrl:
    def test_equals_is_exact_but_contains_is_substring(self, loaded: Session) -> None:
        loaded.see_in_current_url("/users/1")
        with pytest.raises(AssertionFailed, match="Current url is '/users/10\\?tab=info'"):
            loaded.see_current_url_equals("/users/1")

    def test_absolute_expectation_compares_full_url(self, loaded: Session) -> None:
        loaded.see_current_url_equals(BASE_URL + "/users/10?tab=info")
        loaded.see_in_current_url("http://localhost/users")

    def test_matches_whole_uri(self, loaded: Session) -> None:
        loaded.see_current_url_matches(r"~/users/\d+\?tab=\w+~")
        loaded.dont_see_current_url_matches("~/users/\\d+~")

    def test_grab_from_current_url(self, loaded: Session) -> None:
        assert loaded.grab_from_current_url(r"~/users/(\d+)~") == "10"
        with pytest.raises(AssertionFailed):
            loaded.grab_from_current_url("~/posts/(\\d+)~")


class TestElements:
    def test_number_of_elements(self, loaded: Session) -> None:
        loaded.see_number_of_elements("li", 3)
        loaded.see_number_of_elements("li", [2, 5])
        with pytest.raises(AssertionFailed, match="It matches 3"):
            loaded.see_number_of_elements("li", [4, 6])

    @pytest.mark.parametrize("expected", [True, [1], [1, 2, 3], "3", [1, "2"]])
    def test_number_of_elements_rejects_bad_expectation(self, loaded: Session, expected) -> None:
        with pytest.raises(ValueError):
            loaded.see_number_of_elements("li", expected)

    def test_element_attributes(self, loaded: Session) -> None:
        loaded.see_element("input", {"name": "name", "value": "Davert"})
        loaded.dont_see_element("input", {"name": "name", "value": "Other"})
        loaded.see_element({"css": "ul.items li"})
        loaded.dont_see_element(".missing")


class TestFields:
    def test_in_field_tracks_interactions(self, loaded: Session) -> None:
        loaded.fill_field("Name", "Bob")
        loaded.see_in_field("Name", "Bob")
        loaded.dont_see_in_field("Name", "Davert")

    def test_checkbox_states(self, loaded: Session) -> None:
        loaded.see_checkbox_is_checked("terms")
        loaded.see_in_field("terms", True)
        loaded.uncheck_option("terms")
        loaded.dont_see_checkbox_is_checked("terms")
        loaded.see_in_field("terms", False)

    def test_option_selected(self, loaded: Session) -> None:
        loaded.see_option_is_selected("age", "18 or older")
        loaded.see_option_is_selected("age", "adult")
        loaded.select_option("age", "Under 18")
        loaded.see_option_is_selected("age", "Under 18")
        loaded.dont_see_option_is_selected("age", "adult")


class TestPage:
    def test_title(self, loaded: Session) -> None:
        loaded.see_in_title("User")
        loaded.dont_see_in_title("Admin")

    def test_response_code(self, session: Session, executor: FakeExecutor) -> None:
        executor.pages[BASE_URL + "/gone"] = Response(status=410, body="", final_url=BASE_URL + "/gone")
        session.am_on_page("/gone")
        session.see_response_code_is(410)
        with pytest.raises(AssertionFailed, match="Response code is 410"):
            session.see_response_code_is(200)


def test_predicates_work_without_a_session() -> None:
    state = make_state("<p class='note'>Saved</p>", url=BASE_URL + "/a?b=1")
    matcher = ElementMatcher(state)
    assert predicates.see_text(state, matcher, "Saved", ".note")
    assert not predicates.see_text(state, matcher, "Saved", ".other")
    assert predicates.see_current_url_equals(state, "/a?b=1")
    assert not predicates.see_response_code_is(state, 200)
