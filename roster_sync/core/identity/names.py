"""
Name key policies.

Three policies exist side by side and callers rely on their specific
tolerances. Each call site names the policy it needs.

- strict_key: Directory membership, person IDs, guest flag, tier lookup.
  Drops anything outside a-z and keeps only the first token of the first
  name, so "Smith, John Paul" and "Smith, John" are the same person.
- loose_key: cross-tab union and de-duplication. Keeps accented Latin
  letters and the whole first name.
- fallback_key: guest identification when a row carries only one name.

All functions are pure.
"""

from __future__ import annotations

import re
from typing import Any, Optional

_NOT_ASCII_LETTER = re.compile(r"[^a-z]")
_NOT_LATIN_LETTER = re.compile(r"[^A-Za-z\u00C0-\u024F]")
_CAPITALIZE = re.compile(r"\b(\w)|(-(\w))")
_ANNOTATION = re.compile(r"\([^)]*\)")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def strict_key(last: Any, first: Any) -> str:
    """
    Strict identity key: ``last_first`` over ASCII letters only.

    Examples:
        ("Smith", "John Paul") -> "smith_john"
        ("O'Neil", "Mary-Kate") -> "oneil_marykate"
        ("", "") -> ""

    Returns an empty string when both parts normalize to nothing.
    """
    last_part = _NOT_ASCII_LETTER.sub("", _text(last).lower())
    first_tokens = _text(first).lower().split()
    first_part = _NOT_ASCII_LETTER.sub("", first_tokens[0]) if first_tokens else ""
    if not last_part and not first_part:
        return ""
    return f"{last_part}_{first_part}"


def loose_key(last: Any, first: Any) -> Optional[str]:
    """
    Loose identity key: ``last|first`` keeping accented Latin letters.

    Examples:
        (" smith ", "JOHN ") -> "smith|john"
        ("Núñez", "José") -> "núñez|josé"
    """
    last_part = _NOT_LATIN_LETTER.sub("", _text(last).strip().lower())
    first_part = _NOT_LATIN_LETTER.sub("", _text(first).strip().lower())
    if not last_part and not first_part:
        return None
    return f"{last_part}|{first_part}"


def fallback_key(last: Any, first: Any) -> Optional[str]:
    """Key for a row that has only a last name or only a first name."""
    last_part = _text(last).strip().lower()
    first_part = _text(first).strip().lower()
    if last_part and not first_part:
        return last_part
    if first_part and not last_part:
        return first_part
    return None


def capitalize_name(value: Any) -> str:
    """
    Title-case each part of a name, hyphenated parts included.

    "arai-joseph" -> "Arai-Joseph", "mary ann" -> "Mary Ann"
    """
    text = _text(value).strip().lower()
    if not text:
        return ""

    def _upper(match: re.Match[str]) -> str:
        if match.group(1):
            return match.group(1).upper()
        return "-" + match.group(3).upper()

    return _CAPITALIZE.sub(_upper, text)


def display_name(last: Any, first: Any) -> str:
    return f"{_text(first).strip()} {_text(last).strip()}".strip()


def split_full_name(value: Any) -> tuple[str, str]:
    """
    (last, first) from a single name cell.

    "Smith, John" and "John Smith" both give ("Smith", "John"); a single word
    is taken as the first name. Annotations such as "(Guest)" are dropped.
    """
    text = " ".join(_ANNOTATION.sub(" ", _text(value)).split())
    if "," in text:
        last, _, first = text.partition(",")
        return last.strip(), first.strip()
    parts = text.split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return "", parts[0]
    return parts[-1], " ".join(parts[:-1])
