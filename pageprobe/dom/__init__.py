"""Document parsing, element handles and text helpers."""
from .document import DocumentParser, ParsedDocument, SelectorSyntaxError
from .element import ElementHandle
from .text import label_text, node_text, normalize_space

__all__ = [
    "DocumentParser",
    "ParsedDocument",
    "SelectorSyntaxError",
    "ElementHandle",
    "label_text",
    "node_text",
    "normalize_space",
]
