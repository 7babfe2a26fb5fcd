"""Contextual Arabic shaping onto presentation-form code points.

Only what a report needs: the four positional forms of the Arabic letters
(plus the common Persian additions) and the mandatory Lam-Alef ligatures.
Everything that is not an Arabic letter passes through untouched.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field

ISOLATED, FINAL, INITIAL, MEDIAL = 0, 1, 2, 3

# Joining types
DUAL = 'D'
RIGHT = 'R'
CAUSING = 'C'
NONE = 'U'
TRANSPARENT = 'T'

TATWEEL = 'ـ'
ZWJ = '\u200d'
LAM = 'ل'

# (letter, first presentation form, number of forms); forms run
# isolated, final, initial, medial in the presentation-form blocks
_FORM_RANGES = (
    (0x0621, 0xFE80, 1),  # hamza
    (0x0622, 0xFE81, 2),  # alef with madda
    (0x0623, 0xFE83, 2),  # alef with hamza above
    (0x0624, 0xFE85, 2),  # waw with hamza
    (0x0625, 0xFE87, 2),  # alef with hamza below
    (0x0626, 0xFE89, 4),  # yeh with hamza
    (0x0627, 0xFE8D, 2),  # alef
    (0x0628, 0xFE8F, 4),  # beh
    (0x0629, 0xFE93, 2),  # teh marbuta
    (0x062A, 0xFE95, 4),  # teh
    (0x062B, 0xFE99, 4),  # theh
    (0x062C, 0xFE9D, 4),  # jeem
    (0x062D, 0xFEA1, 4),  # hah
    (0x062E, 0xFEA5, 4),  # khah
    (0x062F, 0xFEA9, 2),  # dal
    (0x0630, 0xFEAB, 2),  # thal
    (0x0631, 0xFEAD, 2),  # reh
    (0x0632, 0xFEAF, 2),  # zain
    (0x0633, 0xFEB1, 4),  # seen
    (0x0634, 0xFEB5, 4),  # sheen
    (0x0635, 0xFEB9, 4),  # sad
    (0x0636, 0xFEBD, 4),  # dad
    (0x0637, 0xFEC1, 4),  # tah
    (0x0638, 0xFEC5, 4),  # zah
    (0x0639, 0xFEC9, 4),  # ain
    (0x063A, 0xFECD, 4),  # ghain
    (0x0641, 0xFED1, 4),  # feh
    (0x0642, 0xFED5, 4),  # qaf
    (0x0643, 0xFED9, 4),  # kaf
    (0x0644, 0xFEDD, 4),  # lam
    (0x0645, 0xFEE1, 4),  # meem
    (0x0646, 0xFEE5, 4),  # noon
    (0x0647, 0xFEE9, 4),  # heh
    (0x0648, 0xFEED, 2),  # waw
    (0x0649, 0xFEEF, 2),  # alef maksura, initial/medial added below
    (0x064A, 0xFEF1, 4),  # yeh
    (0x0671, 0xFB50, 2),  # alef wasla
    (0x067E, 0xFB56, 4),  # peh
    (0x0686, 0xFB7A, 4),  # tcheh
    (0x0698, 0xFB8A, 2),  # jeh
    (0x06A9, 0xFB8E, 4),  # keheh
    (0x06AF, 0xFB92, 4),  # gaf
    (0x06CC, 0xFBFC, 4),  # farsi yeh
)


def _build_forms() -> dict[str, tuple[str | None, ...]]:
    table: dict[str, tuple[str | None, ...]] = {}
    for letter, first, count in _FORM_RANGES:
        forms: list[str | None] = [chr(first + offset) for offset in range(count)]
        forms.extend([None] * (4 - count))
        table[chr(letter)] = tuple(forms)
    table['ى'] = (table['ى'][ISOLATED], table['ى'][FINAL], '\ufbe8', '\ufbe9')
    return table


# letter -> (isolated, final, initial, medial); None where the form does not exist
_FORMS = _build_forms()

# alef variant following lam -> (isolated, final) ligature
_LAM_ALEF: dict[str, tuple[str, str]] = {
    'آ': ('ﻵ', 'ﻶ'),
    'أ': ('ﻷ', 'ﻸ'),
    'إ': ('ﻹ', 'ﻺ'),
    'ا': ('ﻻ', 'ﻼ'),
}


def joining_type(ch: str) -> str:
    forms = _FORMS.get(ch)
    if forms is not None:
        if forms[INITIAL] is not None:
            return DUAL
        if forms[FINAL] is not None:
            return RIGHT
        return NONE
    if ch in (TATWEEL, ZWJ):
        return CAUSING
    if unicodedata.category(ch) in ('Mn', 'Me'):
        return TRANSPARENT
    return NONE


@dataclass
class _Unit:
    char: str
    joining: str
    forms: tuple[str | None, ...] | None
    marks: list[str] = field(default_factory=list)

    def joins_next(self) -> bool:
        return self.joining in (DUAL, CAUSING)

    def joins_prev(self) -> bool:
        return self.joining in (DUAL, RIGHT, CAUSING)

    def render(self, form: int) -> str:
        glyph = self.char
        if self.forms is not None:
            picked = self.forms[form]
            if picked is None and form == MEDIAL:
                picked = self.forms[FINAL]
            elif picked is None and form == INITIAL:
                picked = self.forms[ISOLATED]
            glyph = picked or self.char
        return glyph + ''.join(self.marks)


def _build_units(text: str) -> list[_Unit]:
    units: list[_Unit] = []
    for ch in text:
        kind = joining_type(ch)
        if kind == TRANSPARENT and units:
            units[-1].marks.append(ch)
            continue
        if ch in _LAM_ALEF and units and units[-1].char == LAM:
            lam = units[-1]
            isolated, final = _LAM_ALEF[ch]
            # the ligature behaves as a right-joining letter
            lam.forms = (isolated, final, None, None)
            lam.joining = RIGHT
            lam.char = LAM + ch
            continue
        if kind == TRANSPARENT:
            kind = NONE
        units.append(_Unit(char=ch, joining=kind, forms=_FORMS.get(ch)))
    return units


def shape(text: str) -> str:
    """Replace Arabic letters by their contextual presentation forms.

    Must be applied to the logical string exactly once; shaping an already
    shaped string is not meaningful.
    """
    if not text:
        return text
    units = _build_units(text)
    out: list[str] = []
    for index, unit in enumerate(units):
        if unit.forms is None:
            out.append(unit.char + ''.join(unit.marks))
            continue
        prev_unit = units[index - 1] if index > 0 else None
        next_unit = units[index + 1] if index + 1 < len(units) else None
        after_prev = prev_unit is not None and prev_unit.joins_next() and unit.joins_prev()
        before_next = next_unit is not None and unit.joins_next() and next_unit.joins_prev()
        if after_prev and before_next:
            form = MEDIAL
        elif after_prev:
            form = FINAL
        elif before_next:
            form = INITIAL
        else:
            form = ISOLATED
        out.append(unit.render(form))
    return ''.join(out)
