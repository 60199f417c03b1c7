"""Layering caller overrides on top of extracted form state."""
import logging
from collections.abc import Mapping
from typing import Any

from ..core.errors import ElementNotFound
from ..dom.text import normalize_space
from .extractor import sync_select_value
from .models import FieldDescriptor, FileUpload, FormModel

logger = logging.getLogger(__name__)


def scalar(value: Any) -> str:
    """Render an override as the string a browser would send."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def apply_overrides(
    model: FormModel, overrides: Mapping[str, Any]
) -> tuple[FormModel, list[tuple[str, str]]]:
    """Apply caller-supplied values to a copy of the form model.

    Keys are matched against field names verbatim, so bracketed names such as
    ``user[login]`` must be given in full.

    Args:
        model: Extracted form.
        overrides: Field name to value.

    Returns:
        The updated copy and the extra pairs: keys naming no field, and list
        values beyond the number of same-named text fields.

    Raises:
        ElementNotFound: An option, radio or checkbox value does not exist.
        ValueError: A value is a mapping, or several values target a single select.
    """
    merged = model.model_copy(deep=True)
    extras: list[tuple[str, str]] = []

    for name, value in overrides.items():
        if isinstance(value, Mapping):
            raise ValueError(
                f"Nested value for '{name}': use the full bracketed field name instead"
            )
        fields = [f for f in merged.fields_named(name) if not f.is_button]
        if not fields:
            logger.debug(f"No field named '{name}' in form, sending it as an extra pair")
            values = value if isinstance(value, (list, tuple)) else [value]
            extras.extend((name, scalar(v)) for v in values)
            continue

        first = fields[0]
        if first.is_select:
            _select(first, value)
        elif first.type == "radio":
            _check_radio(name, [f for f in fields if f.type == "radio"], value)
        elif first.type == "checkbox":
            _check_boxes(name, [f for f in fields if f.type == "checkbox"], value)
        elif first.type == "file":
            _attach(first, value)
        elif isinstance(value, (list, tuple)):
            for field, item in zip(fields, value):
                field.value = scalar(item)
            extras.extend((name, scalar(v)) for v in value[len(fields):])
        else:
            first.value = scalar(value)
    return merged, extras


def find_option(field: FieldDescriptor, wanted: Any):
    text = scalar(wanted)
    for option in field.options:
        if option.value == text:
            return option
    for option in field.options:
        if option.label == normalize_space(text):
            return option
    raise ElementNotFound(
        text,
        f"Option '{text}' not found in select '{field.name}'",
        candidates=[o.label for o in field.options],
    )


def _select(field: FieldDescriptor, value: Any) -> None:
    values = list(value) if isinstance(value, (list, tuple)) else [value]
    if not field.is_multiple and len(values) > 1:
        raise ValueError(f"Select '{field.name}' accepts a single value, got {len(values)}")
    chosen = {id(find_option(field, v)) for v in values}
    for option in field.options:
        option.selected = id(option) in chosen
    sync_select_value(field)


def _check_radio(name: str, radios: list[FieldDescriptor], value: Any) -> None:
    if value is False or value is None:
        for radio in radios:
            radio.checked = False
        return
    text = scalar(value)
    if not any(r.value == text for r in radios):
        raise ElementNotFound(
            text,
            f"Radio option '{text}' not found for '{name}'",
            candidates=[scalar(r.value) for r in radios],
        )
    for radio in radios:
        radio.checked = radio.value == text


def _check_boxes(name: str, boxes: list[FieldDescriptor], value: Any) -> None:
    if isinstance(value, bool):
        for box in boxes:
            box.checked = value
        return
    wanted = [scalar(v) for v in (value if isinstance(value, (list, tuple)) else [value])]
    known = {box.value for box in boxes}
    missing = [w for w in wanted if w not in known]
    if missing:
        raise ElementNotFound(
            missing[0],
            f"Checkbox value '{missing[0]}' not found for '{name}'",
            candidates=sorted(scalar(k) for k in known),
        )
    for box in boxes:
        box.checked = box.value in wanted


def _attach(field: FieldDescriptor, value: Any) -> None:
    if isinstance(value, FileUpload):
        field.upload = value
        field.value = value.filename
    else:
        field.value = scalar(value)
