"""Data models for extracted forms and submission requests."""
from typing import Literal, Optional, Union
from urllib.parse import urlencode

from pydantic import BaseModel

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"

SUBMIT_INPUT_TYPES: frozenset[str] = frozenset({"submit", "image"})
CHECKABLE_TYPES: frozenset[str] = frozenset({"checkbox", "radio"})
NON_VALUE_TYPES: frozenset[str] = frozenset({"submit", "image", "button", "reset"})

FieldValue = Union[str, list[str], None]


class FileUpload(BaseModel):
    """A file attached to a file input."""

    filename: str
    path: str
    content_type: str = "application/octet-stream"


class OptionDescriptor(BaseModel):
    """A single <option> of a select."""

    value: str
    label: str
    selected: bool = False
    disabled: bool = False


class FieldDescriptor(BaseModel):
    """A form control with its current state."""

    name: str
    tag: str
    type: str = "text"
    value: FieldValue = None
    options: list[OptionDescriptor] = []
    checked: bool = False
    disabled: bool = False
    path: str = ""
    label: str = ""
    upload: Optional[FileUpload] = None

    @property
    def is_button(self) -> bool:
        return self.type in NON_VALUE_TYPES

    @property
    def is_submit_button(self) -> bool:
        return self.type in SUBMIT_INPUT_TYPES

    @property
    def is_checkable(self) -> bool:
        return self.type in CHECKABLE_TYPES

    @property
    def is_select(self) -> bool:
        return self.tag == "select"

    @property
    def is_multiple(self) -> bool:
        return self.type == "select-multiple"

    def selected_values(self) -> list[str]:
        return [o.value for o in self.options if o.selected]


class FormModel(BaseModel):
    """A form and its controls in document order."""

    action: str
    method: Literal["GET", "POST"] = "GET"
    enctype: str = URLENCODED
    fields: list[FieldDescriptor] = []
    path: str = ""

    def fields_named(self, name: str) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.name and f.name == name]

    @property
    def controls(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if not f.is_button]

    @property
    def buttons(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.is_submit_button]


class FormRequest(BaseModel):
    """What a browser would send for a submitted form."""

    method: Literal["GET", "POST"] = "GET"
    url: str
    fields: list[tuple[str, str]] = []
    files: list[tuple[str, FileUpload]] = []
    enctype: str = URLENCODED

    @property
    def is_multipart(self) -> bool:
        return self.method == "POST" and self.enctype == MULTIPART

    @property
    def encoded_body(self) -> str:
        return urlencode(self.fields)
