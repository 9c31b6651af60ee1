"""Answer comparison helpers.

All comparisons go through `normalize_answer`, which is idempotent:
``normalize_answer(normalize_answer(x)) == normalize_answer(x)``.
"""

from __future__ import annotations

import re


# Tashkeel (fathatan..sukun), superscript alef and tatweel.
_DIACRITICS_RE = re.compile(r"[\u064B-\u0652\u0670\u0640]")
_WHITESPACE_RE = re.compile(r"\s+")
_ARTICLE = "ال"

_ARABIC_FOLD = str.maketrans(
    {
        "أ": "ا",
        "إ": "ا",
        "آ": "ا",
        "ٱ": "ا",
        "ة": "ه",
        "ى": "ي",
    }
)


def normalize_text(text: str | None) -> str:
    t = (text or "").strip().casefold()
    return _WHITESPACE_RE.sub(" ", t)


def normalize_arabic(text: str | None) -> str:
    # Marks go first so the spaces around them still collapse.
    t = normalize_text(_DIACRITICS_RE.sub("", text or ""))
    return t.translate(_ARABIC_FOLD)


def strip_article(word: str) -> str:
    """Drop a leading definite article: القاهرة is a qaf word."""
    if word.startswith(_ARTICLE) and len(word) > len(_ARTICLE):
        return word[len(_ARTICLE):]
    return word


def normalize_answer(text: str | None, arabic: bool = False) -> str:
    if arabic:
        return normalize_arabic(text)
    return normalize_text(text)


def answers_match(given: str | None, expected: str | None, arabic: bool = False) -> bool:
    expected_n = normalize_answer(expected, arabic=arabic)
    if not expected_n:
        return False
    return normalize_answer(given, arabic=arabic) == expected_n


def starts_with_letter(word: str | None, letter: str | None) -> bool:
    w = strip_article(normalize_arabic(word))
    lead = normalize_arabic(letter)
    if not w or not lead:
        return False
    return w.startswith(lead)
