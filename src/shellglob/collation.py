"""
Host-independent string ordering for glob results.

`collation_key()` approximates the root/`en` locale collation so sorted
output is the same on every machine, whatever the process locale:

- Primary: character class (whitespace, punctuation, symbols, digits, then
  letters), then the case-folded base character with accents removed.
- Secondary: accents. Letters NFD leaves whole (`ø`, `æ`, `ł`, `đ`, ...) are
  folded to the base letters they sort with and count as accented.
- Tertiary: lowercase before uppercase.
- The raw string breaks any remaining tie, so the order is total.
"""

from __future__ import annotations

import unicodedata

# Root collation order of ASCII punctuation and symbols.
_ASCII_ORDER = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"
_ASCII_RANK = {c: i for i, c in enumerate(_ASCII_ORDER)}

# Letters without a canonical decomposition, and the base letters they sort with.
_LETTER_FOLDS = {
    "ø": "o",
    "Ø": "O",
    "æ": "ae",
    "Æ": "AE",
    "œ": "oe",
    "Œ": "OE",
    "ł": "l",
    "Ł": "L",
    "đ": "d",
    "Đ": "D",
    "ħ": "h",
    "Ħ": "H",
    "þ": "th",
    "Þ": "TH",
}

_SPACE, _PUNCT, _SYMBOL, _DIGIT, _LETTER = range(5)

_Key = tuple[tuple[tuple[int, int, int], ...], tuple[tuple[int, ...], ...], tuple[bool, ...], str]


def collation_key(text: str) -> _Key:
    primary: list[tuple[int, int, int]] = []
    accents: list[list[int]] = []
    case: list[bool] = []
    for char in unicodedata.normalize("NFD", text):
        if unicodedata.combining(char) and accents:
            accents[-1].append(ord(char))
            continue
        base = _LETTER_FOLDS.get(char, char)
        for c in base:
            folded = c.casefold()[:1] or c
            primary.append((_char_class(c), _ASCII_RANK.get(c, len(_ASCII_ORDER)), ord(folded)))
            accents.append([])
            case.append(c != folded)
        if base != char:
            accents[-1].append(ord(char))
    return (tuple(primary), tuple(tuple(a) for a in accents), tuple(case), text)


def _char_class(char: str) -> int:
    category = unicodedata.category(char)
    if category.startswith("Z") or char in "\t\n\r":
        return _SPACE
    if category.startswith("P"):
        return _PUNCT
    if category.startswith("S"):
        return _SYMBOL
    if category.startswith("N"):
        return _DIGIT
    return _LETTER
