import re
import uuid

from .templates import DEFAULT_TEMPLATE

DEFAULT_BASE_NAME = "CV"
MAX_BASE_LEN = 50
MAX_LABEL_LEN = 10
SUFFIX_LEN = 8
EXTENSION = ".pdf"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_name(text: str, max_len: int = MAX_BASE_LEN) -> str:
    """
    Reduce free text to a filename-safe fragment.

    Trims the text, collapses whitespace runs to a single underscore,
    strips anything outside [A-Za-z0-9_-] and truncates to max_len.

    Example:
        >>> sanitize_name("Jane  Doe!!")
        'Jane_Doe'
    """
    cleaned = _WHITESPACE.sub("_", text.strip())
    cleaned = _UNSAFE.sub("", cleaned)
    return cleaned[:max_len]


def template_label(template: str) -> str:
    """Capitalize the first character only, then sanitize."""
    label = template[:1].upper() + template[1:]
    return sanitize_name(label, MAX_LABEL_LEN)


def build_filename(person_name: str | None, template: str, suffix: str | None = None) -> str:
    """Build ``{base}_{Template}_{suffix}.pdf`` for a rendered document.

    The suffix is a slice of a fresh UUID4; it is not guaranteed unique.
    """
    base = ""
    if isinstance(person_name, str) and person_name.strip():
        base = sanitize_name(person_name)
    if not base:
        base = DEFAULT_BASE_NAME

    label = template_label(template) or template_label(DEFAULT_TEMPLATE)

    if suffix is None:
        suffix = str(uuid.uuid4())[:SUFFIX_LEN]
    return f"{base}_{label}_{suffix}{EXTENSION}"
