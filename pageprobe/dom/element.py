"""Element handles: short-lived references into the current document."""
from dataclasses import dataclass, field
from typing import Optional

from lxml.html import HtmlElement

from .text import node_text


@dataclass(frozen=True)
class ElementHandle:
    """Reference to a node of the document loaded at ``generation``."""

    node: HtmlElement = field(repr=False)
    generation: int
    path: str

    @property
    def tag(self) -> str:
        return self.node.tag.lower()

    @property
    def text(self) -> str:
        return node_text(self.node)

    @property
    def attributes(self) -> dict[str, str]:
        return {str(k).lower(): v for k, v in self.node.attrib.items()}

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name.lower(), default)

    def describe(self) -> str:
        """Short markup-like summary used in failure messages."""
        attrs = self.attributes
        parts = [self.tag]
        for key in ("id", "name", "type", "class", "href", "value"):
            if key in attrs:
                parts.append(f'{key}="{attrs[key]}"')
        text = self.text
        if len(text) > 40:
            text = text[:37] + "..."
        return f"<{' '.join(parts)}>{text}"
