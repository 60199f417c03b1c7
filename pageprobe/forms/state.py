"""Current state of individual controls: markup defaults plus interactions."""
from typing import Mapping, Optional, Union

from lxml.html import HtmlElement

from ..dom.document import ParsedDocument
from ..dom.text import label_text
from .extractor import FormExtractor, InputValue, apply_input, form_owner
from .models import FieldDescriptor

FieldState = Union[str, list[str], None]


class FieldReader:
    """Reads control values the way a user would see them on the page."""

    def __init__(
        self,
        document: ParsedDocument,
        page_url: str,
        inputs: Optional[Mapping[str, InputValue]] = None,
    ) -> None:
        self._document = document
        self._extractor = FormExtractor(document, page_url)
        self._inputs = inputs or {}

    def descriptor(self, node: HtmlElement) -> Optional[FieldDescriptor]:
        descriptor = self._extractor.describe(node)
        if descriptor is not None and descriptor.path in self._inputs:
            apply_input(descriptor, self._inputs[descriptor.path])
        return descriptor

    def group(self, node: HtmlElement) -> list[HtmlElement]:
        """Controls sharing the node's name and type within the same form."""
        name = node.get("name")
        if not name:
            return [node]
        input_type = _input_type(node)
        owner = form_owner(self._document, node)
        scope = owner if owner is not None else self._document.root
        return [
            n for n in scope.iter(node.tag)
            if n.get("name") == name and _input_type(n) == input_type
            and form_owner(self._document, n) is owner
        ]

    def labels(self, node: HtmlElement) -> list[str]:
        """Texts of the labels associated with a control."""
        found = []
        node_id = node.get("id")
        if node_id:
            found.extend(
                label_text(label)
                for label in self._document.root.xpath("//label[@for=$id]", id=node_id)
            )
        for label in node.iterancestors("label"):
            found.append(label_text(label))
        return found

    def is_checked(self, node: HtmlElement) -> bool:
        descriptor = self.descriptor(node)
        return bool(descriptor and descriptor.is_checkable and descriptor.checked)

    def value(self, node: HtmlElement) -> FieldState:
        """Current value: text for inputs, selection for selects, checked value for groups."""
        descriptor = self.descriptor(node)
        if descriptor is None:
            return node.get("value")
        if descriptor.is_checkable:
            checked = [self.descriptor(n) for n in self.group(node)]
            values = [d.value for d in checked if d is not None and d.checked]
            if descriptor.type == "radio" or len(values) <= 1:
                return values[0] if values else None
            return values
        return descriptor.value


def _input_type(node: HtmlElement) -> str:
    return (node.get("type") or "text").strip().lower()
