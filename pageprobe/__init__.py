"""PageProbe: locator resolution, form emulation and assertions for acceptance tests."""
from .browser import PageState, Response, RequestExecutor, Session
from .core import (
    AmbiguousElement,
    AssertionFailed,
    ButtonNotFound,
    ElementNotFound,
    FormNotFound,
    InvalidLocator,
    NavigationFailed,
    PageNotLoaded,
    Settings,
    StaleElement,
    WebError,
    setup_logging,
)

__all__ = [
    "PageState",
    "Response",
    "RequestExecutor",
    "Session",
    "Settings",
    "setup_logging",
    "WebError",
    "InvalidLocator",
    "ElementNotFound",
    "StaleElement",
    "AmbiguousElement",
    "FormNotFound",
    "ButtonNotFound",
    "NavigationFailed",
    "AssertionFailed",
    "PageNotLoaded",
]
