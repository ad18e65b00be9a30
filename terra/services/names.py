"""
Character name normalization and validation.

Names are checked against the campaign's alphabet (a regex character-class
body such as ``а-яё``), case-insensitively:

    name        [alphabet]{2,12}
    name_extra  [alphabet \\-']{0,20}
"""

import re
from functools import lru_cache
from typing import Optional

from terra.errors import InvalidInput

NAME_LENGTH = (2, 12)
NAME_EXTRA_LENGTH = (0, 20)


def _squash(raw: str) -> str:
    return " ".join(raw.split())


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def normalize_name(raw: str) -> str:
    """Collapse whitespace, trim, and capitalize each word."""
    return " ".join(_capitalize(w) for w in _squash(raw).split(" ") if w)


def normalize_name_extra(raw: Optional[str]) -> Optional[str]:
    """Collapse whitespace and trim; blank becomes None."""
    if raw is None:
        return None
    squashed = _squash(raw)
    return squashed or None


@lru_cache(maxsize=32)
def _patterns(alphabet: str):
    low, high = NAME_LENGTH
    extra_low, extra_high = NAME_EXTRA_LENGTH
    name = re.compile(rf"[{alphabet}]{{{low},{high}}}", re.IGNORECASE)
    extra = re.compile(rf"[{alphabet} \-']{{{extra_low},{extra_high}}}", re.IGNORECASE)
    return name, extra


def check_names(name: str, name_extra: Optional[str], alphabet: str) -> None:
    """Raise InvalidInput('name' | 'name_extra') when a normalized value doesn't fit."""
    name_re, extra_re = _patterns(alphabet)
    if not name_re.fullmatch(name):
        raise InvalidInput("name", f"{name!r} does not match {name_re.pattern}")
    if name_extra is not None and not extra_re.fullmatch(name_extra):
        raise InvalidInput("name_extra", f"{name_extra!r} does not match {extra_re.pattern}")
