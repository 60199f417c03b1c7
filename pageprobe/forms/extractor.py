"""Form extraction from a parsed document."""
import logging
from typing import Mapping, Optional, Union
from urllib.parse import urljoin

from lxml.html import HtmlElement

from ..dom.document import ParsedDocument
from ..dom.text import node_text, normalize_space
from .models import (
    URLENCODED,
    FieldDescriptor,
    FileUpload,
    FormModel,
    OptionDescriptor,
)

logger = logging.getLogger(__name__)

CONTROL_TAGS: tuple[str, ...] = ("input", "select", "textarea", "button")

InputValue = Union[str, bool, list[str], FileUpload]


def form_owner(document: ParsedDocument, node: HtmlElement) -> Optional[HtmlElement]:
    """The form a node belongs to: ``form`` attribute first, then nearest ancestor."""
    if node.tag == "form":
        return node
    owner_id = node.get("form")
    if owner_id and node.tag in CONTROL_TAGS:
        owner = document.find_by_id(owner_id)
        if owner is not None and owner.tag == "form":
            return owner
    for ancestor in node.iterancestors("form"):
        return ancestor
    return None


def is_disabled(node: HtmlElement) -> bool:
    """Disabled directly or through an ancestor ``<fieldset disabled>``.

    Controls inside the fieldset's first legend stay enabled.
    """
    if node.get("disabled") is not None:
        return True
    for fieldset in node.iterancestors("fieldset"):
        if fieldset.get("disabled") is None:
            continue
        legend = fieldset.find("legend")
        if legend is not None and any(a is legend for a in node.iterancestors("legend")):
            continue
        return True
    return False


def option_value(option: HtmlElement) -> str:
    value = option.get("value")
    return value if value is not None else node_text(option)


def option_label(option: HtmlElement) -> str:
    label = option.get("label")
    return normalize_space(label) if label else node_text(option)


class FormExtractor:
    """Reads a form's controls and their state out of a document."""

    def __init__(self, document: ParsedDocument, page_url: str) -> None:
        """Initialize form extractor.

        Args:
            document: Parsed page.
            page_url: URL the page was loaded from; relative actions resolve against it.
        """
        self._document = document
        self._page_url = page_url

    def controls(self, form: HtmlElement) -> list[HtmlElement]:
        """Controls owned by the form, in document order."""
        owned = [
            node for node in form.iter(*CONTROL_TAGS)
            if form_owner(self._document, node) is form
        ]
        form_id = form.get("id")
        if form_id:
            owned.extend(
                node for node in self._document.root.xpath("//*[@form=$id]", id=form_id)
                if node.tag in CONTROL_TAGS
            )
        return self._document.document_order(owned)

    def extract(
        self, form: HtmlElement, inputs: Optional[Mapping[str, InputValue]] = None
    ) -> FormModel:
        """Build the form model from markup defaults plus interaction state.

        Args:
            form: The ``<form>`` node.
            inputs: Values set by earlier interactions, keyed by node path.

        Returns:
            FormModel with fields in document order.
        """
        inputs = inputs or {}
        fields = []
        for node in self.controls(form):
            descriptor = self.describe(node)
            if descriptor is None:
                continue
            if descriptor.path in inputs:
                apply_input(descriptor, inputs[descriptor.path])
            fields.append(descriptor)

        method = (form.get("method") or "GET").strip().upper()
        model = FormModel(
            action=self.action_url(form),
            method=method if method in ("GET", "POST") else "GET",
            enctype=(form.get("enctype") or URLENCODED).strip().lower(),
            fields=fields,
            path=self._document.path_of(form),
        )
        logger.debug(f"Extracted form {model.path} with {len(fields)} field(s)")
        return model

    def action_url(self, form: HtmlElement) -> str:
        action = (form.get("action") or "").strip()
        if not action:
            return self._page_url
        return urljoin(self._document.base_url(self._page_url), action)

    def describe(self, node: HtmlElement) -> Optional[FieldDescriptor]:
        """Describe one control.

        Nameless controls are described too so their state can be read and
        changed; encoding leaves them out. Non-control nodes give None.
        """
        tag = node.tag
        if tag not in CONTROL_TAGS:
            return None
        name = node.get("name") or ""
        common = {
            "name": name,
            "tag": tag,
            "disabled": is_disabled(node),
            "path": self._document.path_of(node),
        }
        if tag == "button":
            button_type = (node.get("type") or "submit").strip().lower()
            return FieldDescriptor(
                type=button_type if button_type in ("submit", "reset", "button") else "submit",
                value=node.get("value", ""),
                label=node_text(node),
                **common,
            )
        if tag == "select":
            return self._describe_select(node, common)
        if tag == "textarea":
            text = node.text or ""
            if text.startswith("\n"):
                text = text[1:]
            return FieldDescriptor(type="textarea", value=text, **common)

        input_type = (node.get("type") or "text").strip().lower()
        descriptor = FieldDescriptor(type=input_type, **common)
        if descriptor.is_button:
            descriptor.value = node.get("value", "")
            descriptor.label = normalize_space(node.get("value") or node.get("alt") or "")
            return descriptor
        if descriptor.is_checkable:
            descriptor.value = node.get("value", "on")
            descriptor.checked = node.get("checked") is not None
        elif input_type == "file":
            descriptor.value = None
        else:
            descriptor.value = node.get("value", "")
        return descriptor

    def _describe_select(self, node: HtmlElement, common: dict) -> FieldDescriptor:
        multiple = node.get("multiple") is not None
        options = [
            OptionDescriptor(
                value=option_value(option),
                label=option_label(option),
                selected=option.get("selected") is not None,
                disabled=option.get("disabled") is not None,
            )
            for option in node.iter("option")
        ]
        if not multiple:
            _normalize_single_selection(options)
        descriptor = FieldDescriptor(
            type="select-multiple" if multiple else "select-one",
            options=options,
            **common,
        )
        sync_select_value(descriptor)
        return descriptor


def _normalize_single_selection(options: list[OptionDescriptor]) -> None:
    selected = [o for o in options if o.selected]
    if len(selected) > 1:
        for option in selected[:-1]:
            option.selected = False
    elif not selected:
        for option in options:
            if not option.disabled:
                option.selected = True
                break


def sync_select_value(descriptor: FieldDescriptor) -> None:
    values = descriptor.selected_values()
    if descriptor.is_multiple:
        descriptor.value = values
    else:
        descriptor.value = values[0] if values else None


def apply_input(descriptor: FieldDescriptor, value: InputValue) -> None:
    """Apply a recorded interaction to a descriptor."""
    if isinstance(value, FileUpload):
        descriptor.upload = value
        descriptor.value = value.filename
    elif isinstance(value, bool):
        descriptor.checked = value
    elif descriptor.is_select:
        chosen = value if isinstance(value, list) else [value]
        for option in descriptor.options:
            option.selected = option.value in chosen
        sync_select_value(descriptor)
    else:
        descriptor.value = value if isinstance(value, str) else ",".join(value)
