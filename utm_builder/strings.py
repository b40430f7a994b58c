"""
String helpers shared by the builder and the CSV reader.

Column names and UTM values go through the same normalization, so a header
written "Campanha Mídia" matches a config entry "campanha midia".
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Callable, Dict, Mapping, Optional, Union

Rule = Union[str, re.Pattern, Callable[[str], bool]]

_WHITESPACE = re.compile(r"\s+")


def normalize(value: Optional[str]) -> str:
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def is_empty(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def replace_whitespace(value: str, replacement: str) -> str:
    return _WHITESPACE.sub(replacement, value)


def validate_string(value: str, rule: Rule) -> bool:
    """
    Check a value against a validation rule.

    A rule is either a regular expression (string or compiled), matched with
    re.search so patterns anchor themselves when they need to, or a predicate.
    """
    if callable(rule):
        return bool(rule(value))
    return re.search(rule, value) is not None


def normalize_keys(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    return {normalize(k): v for k, v in mapping.items()}


def check_separator(value: str) -> str:
    """Reject separators that normalization would rewrite or strip."""
    if value.isspace():
        raise ValueError("separator cannot be whitespace")
    if normalize(value) != value:
        raise ValueError(f"separator {value!r} changes under normalization")
    return value
