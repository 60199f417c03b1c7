"""Page state: the one live document, URL and cookie set of a session."""
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel

from ..dom.document import DocumentParser, ParsedDocument
from ..forms.extractor import InputValue

BLANK_URL = "about:blank"


class Response(BaseModel):
    """What a request executor returns."""

    status: int
    headers: dict[str, str] = {}
    body: str = ""
    final_url: str
    cookies: dict[str, str] = {}


@dataclass
class PageState:
    """Current page of a session.

    Replaced wholesale on navigation; ``cookies`` and ``inputs`` are mutated in
    place. ``generation`` increases with every loaded page and invalidates
    element handles taken from earlier pages.
    """
    url: str
    document: ParsedDocument
    cookies: dict[str, str] = field(default_factory=dict)
    status: int = 0
    generation: int = 0
    inputs: dict[str, InputValue] = field(default_factory=dict)

    @classmethod
    def blank(cls, cookies: Optional[dict[str, str]] = None) -> "PageState":
        """State before anything was loaded."""
        return cls(
            url=BLANK_URL,
            document=DocumentParser().parse("", BLANK_URL),
            cookies=dict(cookies or {}),
        )

    @property
    def is_blank(self) -> bool:
        return self.url == BLANK_URL

    @property
    def uri(self) -> str:
        """Path, query and fragment of the current URL."""
        parts = urlsplit(self.url)
        return urlunsplit(("", "", parts.path or "/", parts.query, parts.fragment))

    def with_fragment(self, fragment: str) -> "PageState":
        """Same page and generation, URL fragment replaced."""
        parts = urlsplit(self.url)
        url = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, fragment))
        return PageState(
            url=url,
            document=self.document,
            cookies=self.cookies,
            status=self.status,
            generation=self.generation,
            inputs=self.inputs,
        )
