"""Tests for locator classification."""
import re

import pytest

from pageprobe.core.errors import InvalidLocator
from pageprobe.locator import (
    CssLocator,
    RegexLocator,
    StrictLocator,
    TextLocator,
    XPathLocator,
    is_xpath,
    parse_locator,
    to_pattern,
)


class TestXPathDetection:
    @pytest.mark.parametrize(
        "value",
        [
            "//a",
            "/html/body/h1",
            ".//div[@id='x']",
            "./span",
            "(//tr)[2]",
            "descendant-or-self::h1",
            "//form/*[@type='submit']",
        ],
    )
    def test_xpath_expressions(self, value: str) -> None:
        assert parse_locator(value) == XPathLocator(value)

    @pytest.mark.parametrize("value", ["#nav a", "Logout", "a::before", "form input[type=submit]"])
    def test_non_xpath_strings_are_fuzzy(self, value: str) -> None:
        assert isinstance(parse_locator(value), TextLocator)
        assert is_xpath(value) is False


class TestStrictLocators:
    @pytest.mark.parametrize("kind", ["id", "name", "css", "xpath", "link", "class"])
    def test_recognized_keys(self, kind: str) -> None:
        assert parse_locator({kind: "value"}) == StrictLocator(kind, "value")

    def test_unknown_key_is_invalid(self) -> None:
        with pytest.raises(InvalidLocator, match="unknown strict key"):
            parse_locator({"label": "Email"})

    def test_several_keys_are_invalid(self) -> None:
        with pytest.raises(InvalidLocator):
            parse_locator({"id": "a", "name": "b"})

    def test_non_string_value_is_invalid(self) -> None:
        with pytest.raises(InvalidLocator):
            parse_locator({"id": 5})


class TestRegexLocators:
    def test_delimited_regex_with_flags(self) -> None:
        locator = parse_locator("~<h1>(.*?)</h1>~is")
        assert isinstance(locator, RegexLocator)
        assert locator.pattern.pattern == "<h1>(.*?)</h1>"
        assert locator.pattern.flags & re.IGNORECASE
        assert locator.pattern.flags & re.DOTALL

    def test_delimiter_inside_pattern(self) -> None:
        locator = parse_locator("~a~b~")
        assert locator.pattern.pattern == "a~b"

    def test_unterminated_regex(self) -> None:
        with pytest.raises(InvalidLocator, match="unterminated"):
            parse_locator("~abc")

    def test_unknown_flag(self) -> None:
        with pytest.raises(InvalidLocator, match="unknown regex flag"):
            parse_locator("~abc~q")

    def test_compiled_pattern(self) -> None:
        pattern = re.compile(r"\d+")
        assert parse_locator(pattern) == RegexLocator(pattern)

    def test_to_pattern_accepts_plain_strings(self) -> None:
        assert to_pattern(r"/users/\d+").fullmatch("/users/10")
        assert to_pattern(r"~/USERS/\d+~i").fullmatch("/users/10")


class TestPassThroughAndErrors:
    def test_typed_locator_is_returned(self) -> None:
        locator = CssLocator("div > p")
        assert parse_locator(locator) is locator

    @pytest.mark.parametrize("value", ["", "   ", 42, None, ["a"]])
    def test_invalid_values(self, value) -> None:
        with pytest.raises(InvalidLocator):
            parse_locator(value)

    def test_str_is_readable(self) -> None:
        assert str(StrictLocator("id", "x")) == "{id: 'x'}"
