"""Translation of Kubernetes labels into GCE disk labels.

GCE label keys and values are much stricter than Kubernetes ones:

- Keys must start with a lowercase letter or international character
- Keys and values may only contain lowercase letters, digits, dashes
  and underscores (international characters allowed)
- Keys and values are at most 63 characters, UTF-8 encoded
- A resource carries at most 64 labels

Sanitizing is deterministic and idempotent, so the same Kubernetes label
always maps to the same disk label and re-applying it is a no-op.
"""

from __future__ import annotations

import itertools
import re
import unicodedata
from collections.abc import Iterable, Mapping

from .config import MAX_LABEL_LENGTH, MAX_LABELS_PER_DISK

_CHAR_REPLACEMENTS = str.maketrans(
    {
        # slash and dot are common, use different replacement chars
        "/": "_",
        ".": "-",
        # less common characters all become dashes
        " ": "-",
        ":": "-",
        ",": "-",
        ";": "-",
        "=": "-",
        "+": "-",
    }
)

_SEPARATORS = "-_"
_SEPARATOR_RUNS = re.compile(r"([-_])\1+")

KEY_PREFIX = "k"


def _is_valid_char(char: str) -> bool:
    """Letters, decimal digits, dash or underscore; international characters allowed."""
    return char.isalpha() or unicodedata.category(char) == "Nd" or char in _SEPARATORS


def _truncate(value: str) -> str:
    encoded = value.encode("utf-8")
    if len(encoded) <= MAX_LABEL_LENGTH:
        return value
    # A multi-byte character cut at the boundary is dropped
    value = encoded[:MAX_LABEL_LENGTH].decode("utf-8", errors="ignore")
    return value.rstrip(_SEPARATORS)


def _sanitize_component(value: str, *, is_key: bool) -> str:
    value = value.lower().translate(_CHAR_REPLACEMENTS)
    value = "".join(char for char in value if _is_valid_char(char))

    if is_key and value and not value[0].isalpha():
        value = KEY_PREFIX + value

    value = _SEPARATOR_RUNS.sub(r"\1", value)
    value = value.rstrip(_SEPARATORS)
    return _truncate(value)


def sanitize_key(key: str) -> str:
    """Sanitize a Kubernetes label key into a GCE label key.

    Returns an empty string when nothing usable is left, e.g. for
    ``"!@#"``. A key not starting with a letter is prefixed with ``k``.

    Examples:
        >>> sanitize_key("kubernetes.io/app=name:v1")
        'kubernetes-io_app-name-v1'
        >>> sanitize_key("123-app")
        'k123-app'
    """
    return _sanitize_component(key, is_key=True)


def sanitize_value(value: str) -> str:
    """Sanitize a Kubernetes label value into a GCE label value.

    Values may be empty and need not start with a letter.
    """
    return _sanitize_component(value, is_key=False)


def sanitize_labels(labels: Mapping[str, str]) -> dict[str, str]:
    """Sanitize a Kubernetes label map for a GCE disk.

    Only the first 64 entries in iteration order are considered. Entries
    whose key sanitizes to an empty string are dropped. When two keys
    sanitize to the same key the later one wins.
    """
    result: dict[str, str] = {}
    for key, value in itertools.islice(labels.items(), MAX_LABELS_PER_DISK):
        sanitized_key = sanitize_key(key)
        if sanitized_key:
            result[sanitized_key] = sanitize_value(value)
    return result


def sanitize_keys(keys: Iterable[str]) -> list[str]:
    """Sanitize label keys, dropping those that sanitize to an empty string."""
    return [sanitized for sanitized in map(sanitize_key, keys) if sanitized]
