"""Core utilities: configuration, logging and errors."""
from .config import Settings, ExecutorConfig
from .errors import (
    AmbiguousElement,
    AssertionFailed,
    ButtonNotFound,
    ElementNotFound,
    FormNotFound,
    InvalidLocator,
    NavigationFailed,
    PageNotLoaded,
    StaleElement,
    WebError,
)
from .logging import setup_logging

__all__ = [
    "Settings",
    "ExecutorConfig",
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
