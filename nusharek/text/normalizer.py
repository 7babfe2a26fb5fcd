"""Digit and symbol normalization for Arabic report text.

Runs before shaping and reordering. Western digits become Arabic-Indic
digits, percent markers are moved behind their number and replaced by the
Arabic percent sign, and parenthesized percentages are isolated so the
parenthesis pair survives bidi reordering.
"""

from __future__ import annotations

import re

ARABIC_PERCENT = '٪'
RLI = '\u2067'
PDI = '\u2069'

_DIGIT_TABLE = str.maketrans('0123456789', '٠١٢٣٤٥٦٧٨٩')

# Strings that leak out of the web layer when a value is missing
_DENYLIST = ('[object Object]', 'undefined', 'null', 'NaN', 'Infinity')
_DENYLIST_PATTERN = re.compile(
    r'(?<!\w)(?:' + '|'.join(re.escape(token) for token in _DENYLIST) + r')(?!\w)'
)
_WHITESPACE_PATTERN = re.compile(r'\s+')

_NUMBER = r'\d+(?:[.,٫]\d+)?'
_TRAILING_PERCENT_PATTERN = re.compile(r'(' + _NUMBER + r')%')
_LEADING_PERCENT_PATTERN = re.compile(r'(?<!\d)[%٪](' + _NUMBER + r')')
_PERCENT_GROUP_PATTERN = re.compile(
    r'(?<!\u2067)(\([^()]*[%٪][^()]*\))(?!\u2069)'
)


def strip_technical_tokens(text: str) -> str:
    stripped = _DENYLIST_PATTERN.sub(' ', text)
    return _WHITESPACE_PATTERN.sub(' ', stripped).strip()


def canonical_percent(text: str) -> str:
    text = _TRAILING_PERCENT_PATTERN.sub(lambda m: m.group(1) + ARABIC_PERCENT, text)
    return _LEADING_PERCENT_PATTERN.sub(lambda m: m.group(1) + ARABIC_PERCENT, text)


def to_arabic_digits(text: str) -> str:
    return text.translate(_DIGIT_TABLE)


def isolate_percent_groups(text: str) -> str:
    return _PERCENT_GROUP_PATTERN.sub(lambda m: RLI + m.group(1) + PDI, text)


def normalize(text: str | None) -> str | None:
    """Return ``text`` with tokens stripped, percents and digits canonical.

    Total on every input: ``None`` and the empty string come back unchanged.
    """
    if not text:
        return text
    text = strip_technical_tokens(text)
    text = canonical_percent(text)
    text = to_arabic_digits(text)
    return isolate_percent_groups(text)
