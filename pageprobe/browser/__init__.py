"""Page state, request executors and the session API."""
from .connection import HttpxExecutor, PlaywrightExecutor, RequestExecutor, build_executor
from .page import PageState, Response
from .session import Session

__all__ = [
    "HttpxExecutor",
    "PlaywrightExecutor",
    "RequestExecutor",
    "build_executor",
    "PageState",
    "Response",
    "Session",
]
