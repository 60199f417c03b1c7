from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

import pytest

from pageprobe.browser.connection import RequestExecutor
from pageprobe.browser.page import PageState, Response
from pageprobe.browser.session import Session
from pageprobe.dom.document import DocumentParser
from pageprobe.forms.models import FormRequest

BASE_URL = "http://localhost"


@dataclass
class SentRequest:
    method: str
    url: str
    body: Optional[FormRequest]
    cookies: dict[str, str] = field(default_factory=dict)


class FakeExecutor(RequestExecutor):
    """Serves canned pages keyed by URL (query string ignored when no exact entry)."""

    def __init__(self, pages: Optional[Mapping[str, Union[str, Response]]] = None) -> None:
        self.pages: dict[str, Union[str, Response]] = dict(pages or {})
        self.requests: list[SentRequest] = []
        self.closed = False

    def execute(
        self,
        method: str,
        url: str,
        body: Optional[FormRequest] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Response:
        self.requests.append(SentRequest(method, url, body, dict(cookies or {})))
        page = self.pages.get(url, self.pages.get(url.split("?")[0]))
        if page is None:
            return Response(status=404, body="<html><body>Not found</body></html>", final_url=url)
        if isinstance(page, Response):
            return page
        return Response(status=200, body=page, final_url=url)

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> SentRequest:
        return self.requests[-1]


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def session(executor: FakeExecutor) -> Session:
    return Session(executor, base_url=BASE_URL)


def make_state(html: str, url: str = BASE_URL + "/", generation: int = 1) -> PageState:
    return PageState(
        url=url,
        document=DocumentParser().parse(html, url),
        generation=generation,
    )


def open_page(session: Session, executor: FakeExecutor, html: str, path: str = "/") -> None:
    executor.pages[BASE_URL + path] = html
    session.am_on_page(path)
