"""Form extraction, override merging and submission."""
from .extractor import FormExtractor, InputValue, form_owner, is_disabled
from .merge import apply_overrides, find_option
from .models import (
    MULTIPART,
    URLENCODED,
    FieldDescriptor,
    FileUpload,
    FormModel,
    FormRequest,
    OptionDescriptor,
)
from .state import FieldReader
from .submitter import FormSubmitter, build_request, find_button

__all__ = [
    "FormExtractor",
    "InputValue",
    "form_owner",
    "is_disabled",
    "apply_overrides",
    "find_option",
    "FieldReader",
    "MULTIPART",
    "URLENCODED",
    "FieldDescriptor",
    "FileUpload",
    "FormModel",
    "FormRequest",
    "OptionDescriptor",
    "FormSubmitter",
    "build_request",
    "find_button",
]
