"""Turns form models into the request a browser would send."""
import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

from ..core.errors import ButtonNotFound
from ..dom.text import normalize_space
from .merge import apply_overrides
from .models import MULTIPART, FieldDescriptor, FileUpload, FormModel, FormRequest

logger = logging.getLogger(__name__)

ButtonRef = Union[str, FieldDescriptor]
ButtonNames = Union[ButtonRef, Sequence[ButtonRef], None]


def _button_refs(buttons: ButtonNames) -> list[ButtonRef]:
    if buttons is None:
        return []
    if isinstance(buttons, (str, FieldDescriptor)):
        return [buttons]
    return list(buttons)


def find_button(model: FormModel, name: str) -> FieldDescriptor:
    """Locate a submit button by name, falling back to its value or text.

    Raises:
        ButtonNotFound: No submit button of the form answers to ``name``.
    """
    buttons = model.buttons
    for button in buttons:
        if button.name and button.name == name:
            return button
    wanted = normalize_space(name)
    for button in buttons:
        if button.label == wanted or button.value == name:
            return button
    raise ButtonNotFound(
        name, model.path, available=[b.name or b.label for b in buttons if b.name or b.label]
    )


def field_pairs(field: FieldDescriptor, multipart: bool) -> tuple[list[tuple[str, str]], list[tuple[str, FileUpload]]]:
    """Name/value pairs and file parts a single enabled control contributes."""
    if field.is_checkable:
        return ([(field.name, field.value or "on")] if field.checked else []), []
    if field.is_select:
        return [(field.name, o.value) for o in field.options if o.selected and not o.disabled], []
    if field.type == "file":
        if multipart:
            return [], ([(field.name, field.upload)] if field.upload else [])
        return [(field.name, field.upload.filename if field.upload else (field.value or ""))], []
    value = field.value
    if isinstance(value, list):
        return [(field.name, v) for v in value], []
    return [(field.name, value or "")], []


def button_pairs(button: FieldDescriptor) -> list[tuple[str, str]]:
    if button.type == "image":
        prefix = f"{button.name}." if button.name else ""
        return [(f"{prefix}x", "0"), (f"{prefix}y", "0")]
    if not button.name:
        return []
    return [(button.name, button.value or "")]


def build_request(
    model: FormModel,
    buttons: ButtonNames = None,
    extras: Iterable[tuple[str, str]] = (),
) -> FormRequest:
    """Encode a form the way a browser submits it.

    Non-button fields come first in document order, then ``extras``, then the
    chosen buttons in document order. Without buttons the submission is
    JavaScript-style and carries no button pair at all.

    Raises:
        ButtonNotFound: A named button is not a submit button of the form.
    """
    multipart = model.method == "POST" and model.enctype == MULTIPART
    pairs: list[tuple[str, str]] = []
    files: list[tuple[str, FileUpload]] = []
    for field in model.fields:
        if field.disabled or field.is_button or not field.name:
            continue
        field_values, field_files = field_pairs(field, multipart)
        pairs.extend(field_values)
        files.extend(field_files)
    pairs.extend(extras)

    chosen = {
        ref.path if isinstance(ref, FieldDescriptor) else find_button(model, ref).path
        for ref in _button_refs(buttons)
    }
    for button in model.buttons:
        if button.path not in chosen:
            continue
        if button.disabled:
            logger.warning(f"Button '{button.name or button.label}' is disabled, not submitting it")
            continue
        pairs.extend(button_pairs(button))

    scheme, netloc, path, query, _ = urlsplit(model.action)
    if model.method == "GET":
        url = urlunsplit((scheme, netloc, path, urlencode(pairs), ""))
        return FormRequest(method="GET", url=url, fields=pairs, enctype=model.enctype)
    return FormRequest(
        method="POST",
        url=urlunsplit((scheme, netloc, path, query, "")),
        fields=pairs,
        files=files,
        enctype=model.enctype,
    )


class FormSubmitter:
    """Builds form requests and hands them to the session for sending."""

    def __init__(self, send: Callable[[FormRequest], Any]) -> None:
        """Initialize submitter.

        Args:
            send: Callable that performs the request and loads the result.
        """
        self._send = send

    def prepare(
        self,
        model: FormModel,
        params: Optional[Mapping[str, Any]] = None,
        buttons: ButtonNames = None,
    ) -> FormRequest:
        merged, extras = apply_overrides(model, params or {})
        return build_request(merged, buttons, extras)

    def submit(
        self,
        model: FormModel,
        params: Optional[Mapping[str, Any]] = None,
        buttons: ButtonNames = None,
    ) -> Any:
        request = self.prepare(model, params, buttons)
        logger.info(f"Submitting form {model.path}: {request.method} {request.url}")
        return self._send(request)
