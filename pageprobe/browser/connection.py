"""Request executors: the transport behind navigation and form submission."""
import logging
from abc import ABC, abstractmethod
from http.cookies import CookieError, SimpleCookie
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from playwright.sync_api import APIRequestContext, Error as PlaywrightError, Playwright, sync_playwright

from ..core.config import ExecutorConfig
from ..core.errors import NavigationFailed
from ..forms.models import URLENCODED, FormRequest
from .page import Response

logger = logging.getLogger(__name__)


class RequestExecutor(ABC):
    """Performs one request, following redirects per its own policy."""

    @abstractmethod
    def execute(
        self,
        method: str,
        url: str,
        body: Optional[FormRequest] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Response:
        """Send a request.

        Args:
            method: GET or POST.
            url: Absolute URL.
            body: Form request carrying the POST payload, if any.
            cookies: Cookies to send.

        Returns:
            Response after redirects.

        Raises:
            NavigationFailed: Transport-level failure.
        """

    def close(self) -> None:
        """Release transport resources."""


def parse_set_cookie(values: list[str]) -> dict[str, str]:
    """Name/value pairs from raw Set-Cookie header values."""
    cookies: dict[str, str] = {}
    for raw in values:
        jar = SimpleCookie()
        try:
            jar.load(raw)
        except CookieError as e:
            logger.debug(f"Ignoring malformed Set-Cookie '{raw}': {e}")
            continue
        for name, morsel in jar.items():
            cookies[name] = morsel.value
    return cookies


def _grouped(pairs: list[tuple[str, str]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return grouped


class HttpxExecutor(RequestExecutor):
    """Executor backed by an ``httpx.Client``."""

    def __init__(
        self,
        timeout: float = 30.0,
        follow_redirects: bool = True,
        max_redirects: int = 20,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            timeout: Request timeout in seconds.
            follow_redirects: Whether to follow HTTP redirects.
            max_redirects: Redirect limit when following.
            headers: Headers sent with every request.
            client: Preconfigured client, mainly for tests with a mock transport.
        """
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=follow_redirects,
            max_redirects=max_redirects,
            headers=dict(headers or {}),
        )

    def execute(
        self,
        method: str,
        url: str,
        body: Optional[FormRequest] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Response:
        self._client.cookies.clear()
        for name, value in (cookies or {}).items():
            self._client.cookies.set(name, value)

        kwargs: dict[str, Any] = {}
        if body is not None and method == "POST":
            if body.is_multipart:
                kwargs["data"] = _grouped(body.fields)
                kwargs["files"] = [
                    (name, (upload.filename, Path(upload.path).read_bytes(), upload.content_type))
                    for name, upload in body.files
                ]
            else:
                kwargs["content"] = body.encoded_body
                kwargs["headers"] = {"Content-Type": URLENCODED}

        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NavigationFailed(url, e) from e

        received: dict[str, str] = {}
        for hop in [*response.history, response]:
            received.update(parse_set_cookie(hop.headers.get_list("set-cookie")))

        return Response(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.text,
            final_url=str(response.url),
            cookies=received,
        )

    def close(self) -> None:
        self._client.close()


class PlaywrightExecutor(RequestExecutor):
    """Executor backed by Playwright's APIRequestContext.

    The Playwright driver starts lazily on the first request.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        follow_redirects: bool = True,
        max_redirects: int = 20,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._timeout_ms = timeout * 1000
        self._max_redirects = max_redirects if follow_redirects else 0
        self._headers = dict(headers or {})
        self._playwright: Optional[Playwright] = None
        self._context: Optional[APIRequestContext] = None

    @property
    def context(self) -> APIRequestContext:
        """Get or create the request context."""
        if not self._context:
            self._playwright = sync_playwright().start()
            self._context = self._playwright.request.new_context(
                extra_http_headers=self._headers,
                timeout=self._timeout_ms,
            )
            logger.info("Started Playwright request context")
        return self._context

    def execute(
        self,
        method: str,
        url: str,
        body: Optional[FormRequest] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Response:
        headers: dict[str, str] = {}
        if cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())

        kwargs: dict[str, Any] = {}
        if body is not None and method == "POST":
            if body.is_multipart:
                multipart: dict[str, Any] = dict(body.fields)
                for name, upload in body.files:
                    multipart[name] = {
                        "name": upload.filename,
                        "mimeType": upload.content_type,
                        "buffer": Path(upload.path).read_bytes(),
                    }
                kwargs["multipart"] = multipart
            else:
                kwargs["data"] = body.encoded_body
                headers["Content-Type"] = URLENCODED

        try:
            response = self.context.fetch(
                url,
                method=method,
                headers=headers,
                max_redirects=self._max_redirects,
                **kwargs,
            )
        except PlaywrightError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NavigationFailed(url, e) from e

        try:
            set_cookies = [
                h["value"] for h in response.headers_array if h["name"].lower() == "set-cookie"
            ]
            return Response(
                status=response.status,
                headers=response.headers,
                body=response.text(),
                final_url=response.url,
                cookies=parse_set_cookie(set_cookies),
            )
        finally:
            response.dispose()

    def close(self) -> None:
        """Stop the request context and the Playwright driver."""
        if self._context:
            try:
                self._context.dispose()
            except PlaywrightError as e:
                logger.debug(f"Request context dispose failed: {e}")
        if self._playwright:
            self._playwright.stop()
        self._context = None
        self._playwright = None


def build_executor(config: ExecutorConfig) -> RequestExecutor:
    """Create the executor selected in configuration."""
    headers = {"User-Agent": config.user_agent, **config.headers}
    executor_class = PlaywrightExecutor if config.backend == "playwright" else HttpxExecutor
    logger.debug(f"Using {executor_class.__name__}")
    return executor_class(
        timeout=config.timeout,
        follow_redirects=config.follow_redirects,
        max_redirects=config.max_redirects,
        headers=headers,
    )
