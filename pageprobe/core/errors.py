"""Error hierarchy raised by locator resolution, forms, navigation and assertions."""
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from ..assertions.results import AssertionResult


class WebError(Exception):
    """Base class for every error raised by pageprobe."""


class InvalidLocator(WebError):
    """Locator value could not be classified."""

    def __init__(self, value: Any, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid locator {value!r}: {reason}")


class ElementNotFound(WebError):
    """No element matched a locator."""

    def __init__(
        self,
        locator: Any,
        message: Optional[str] = None,
        candidates: Sequence[str] = (),
    ) -> None:
        self.locator = locator
        self.candidates = list(candidates)
        text = message or f"Element '{locator}' was not found"
        if self.candidates:
            text += ". Nearby: " + ", ".join(self.candidates[:5])
        super().__init__(text)


class StaleElement(ElementNotFound):
    """Handle was resolved against a document that is no longer loaded."""

    def __init__(self, locator: Any, generation: int, current: int) -> None:
        self.generation = generation
        self.current = current
        super().__init__(
            locator,
            f"Element '{locator}' belongs to page generation {generation}, "
            f"current generation is {current}",
        )


class AmbiguousElement(WebError):
    """More than one element matched where exactly one is required."""

    def __init__(self, locator: Any, count: int) -> None:
        self.locator = locator
        self.count = count
        super().__init__(f"Locator '{locator}' matched {count} elements, expected one")


class FormNotFound(WebError):
    """Form locator matched nothing."""

    def __init__(self, locator: Any) -> None:
        self.locator = locator
        super().__init__(f"Form '{locator}' was not found")


class ButtonNotFound(WebError):
    """Named submit button does not exist inside the form."""

    def __init__(self, button: str, form: Any, available: Sequence[str] = ()) -> None:
        self.button = button
        self.form = form
        self.available = list(available)
        text = f"Button '{button}' was not found in form '{form}'"
        if self.available:
            text += ". Available: " + ", ".join(self.available)
        super().__init__(text)


class NavigationFailed(WebError):
    """Request executor could not complete a request."""

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        self.url = url
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Navigation to {url} failed{detail}")


class AssertionFailed(WebError, AssertionError):
    """An assertion predicate did not hold."""

    def __init__(self, result: "AssertionResult | str") -> None:
        self.result = result
        message = result if isinstance(result, str) else result.failure_message()
        super().__init__(message)


class PageNotLoaded(WebError):
    """An operation needs a page but nothing was opened yet."""
