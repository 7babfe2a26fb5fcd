"""Bidirectional reordering (UAX #9) for single-line report strings.

The PDF canvas draws glyphs strictly left to right, so every RTL string is
converted to visual order before it is drawn. Paragraph direction defaults
to right-to-left. Explicit formatting characters (embeddings, overrides and
isolates) take part in level resolution and are dropped from the output.
"""

from __future__ import annotations

import unicodedata
from functools import lru_cache
from typing import NamedTuple

MAX_DEPTH = 125
RTL_LEVEL = 1
LTR_LEVEL = 0

_ISOLATE_INITIATORS = frozenset({'LRI', 'RLI', 'FSI'})
_EMBEDDING_INITIATORS = frozenset({'LRE', 'RLE', 'LRO', 'RLO'})
# X9: removed from level runs
_REMOVED = _EMBEDDING_INITIATORS | {'PDF', 'BN'}
_FORMATTING = _REMOVED | _ISOLATE_INITIATORS | {'PDI'}
_NEUTRAL_OR_ISOLATE = frozenset({'B', 'S', 'WS', 'ON', 'LRI', 'RLI', 'FSI', 'PDI'})
_TRAILING_WHITESPACE = frozenset({'WS', 'LRI', 'RLI', 'FSI', 'PDI'}) | _REMOVED

_MIRRORS = {
    '(': ')', ')': '(',
    '[': ']', ']': '[',
    '{': '}', '}': '{',
    '<': '>', '>': '<',
    '«': '»', '»': '«',
    '‹': '›', '›': '‹',
    '≤': '≥', '≥': '≤',
}
_OPENING_BRACKETS = {'(': ')', '[': ']', '{': '}'}
_CLOSING_BRACKETS = frozenset(_OPENING_BRACKETS.values())
_BRACKET_STACK_LIMIT = 63


class _Status(NamedTuple):
    level: int
    override: str | None
    isolate: bool


@lru_cache(maxsize=4096)
def bidi_class(ch: str) -> str:
    return unicodedata.bidirectional(ch) or 'L'


def _next_level(level: int, rtl: bool) -> int:
    if rtl:
        return (level + 1) | 1
    return (level + 2) & ~1


def _direction_of_level(level: int) -> str:
    return 'R' if level % 2 else 'L'


def _strong_direction(kind: str) -> str | None:
    if kind == 'L':
        return 'L'
    if kind in ('R', 'AL', 'EN', 'AN'):
        return 'R'
    return None


def _match_isolates(classes: list[str]) -> dict[int, int]:
    matching: dict[int, int] = {}
    openers: list[int] = []
    for index, kind in enumerate(classes):
        if kind in _ISOLATE_INITIATORS:
            openers.append(index)
        elif kind == 'PDI' and openers:
            matching[openers.pop()] = index
    return matching


def _first_strong(classes: list[str], start: int, end: int, matching: dict[int, int]) -> str | None:
    index = start
    while index < end:
        kind = classes[index]
        if kind == 'L':
            return 'L'
        if kind in ('R', 'AL'):
            return 'R'
        if kind in _ISOLATE_INITIATORS:
            index = matching.get(index, end)
        index += 1
    return None


def _explicit_levels(
    classes: list[str],
    types: list[str],
    base_level: int,
    matching: dict[int, int],
) -> list[int]:
    size = len(classes)
    levels = [base_level] * size
    stack = [_Status(base_level, None, False)]
    overflow_isolates = 0
    overflow_embeddings = 0
    valid_isolates = 0

    for index, kind in enumerate(classes):
        top = stack[-1]
        if kind in _EMBEDDING_INITIATORS:
            levels[index] = top.level
            level = _next_level(top.level, kind in ('RLE', 'RLO'))
            if level <= MAX_DEPTH and not overflow_isolates and not overflow_embeddings:
                override = {'RLO': 'R', 'LRO': 'L'}.get(kind)
                stack.append(_Status(level, override, False))
            elif not overflow_isolates:
                overflow_embeddings += 1
        elif kind in _ISOLATE_INITIATORS:
            levels[index] = top.level
            if top.override:
                types[index] = top.override
            if kind == 'FSI':
                end = matching.get(index, size)
                rtl = _first_strong(classes, index + 1, end, matching) == 'R'
            else:
                rtl = kind == 'RLI'
            level = _next_level(top.level, rtl)
            if level <= MAX_DEPTH and not overflow_isolates and not overflow_embeddings:
                valid_isolates += 1
                stack.append(_Status(level, None, True))
            else:
                overflow_isolates += 1
        elif kind == 'PDI':
            if overflow_isolates:
                overflow_isolates -= 1
            elif valid_isolates:
                overflow_embeddings = 0
                while not stack[-1].isolate:
                    stack.pop()
                stack.pop()
                valid_isolates -= 1
            top = stack[-1]
            levels[index] = top.level
            if top.override:
                types[index] = top.override
        elif kind == 'PDF':
            levels[index] = top.level
            if overflow_isolates:
                pass
            elif overflow_embeddings:
                overflow_embeddings -= 1
            elif not top.isolate and len(stack) >= 2:
                stack.pop()
        elif kind == 'B':
            levels[index] = base_level
        else:
            levels[index] = top.level
            if top.override and kind != 'BN':
                types[index] = top.override
    return levels


def _isolating_run_sequences(
    classes: list[str],
    levels: list[int],
    matching: dict[int, int],
) -> list[list[int]]:
    runs: list[list[int]] = []
    for index, kind in enumerate(classes):
        if kind in _REMOVED:
            continue
        if runs and levels[runs[-1][-1]] == levels[index]:
            runs[-1].append(index)
        else:
            runs.append([index])

    run_starting_at = {run[0]: run for run in runs}
    matched_pdis = set(matching.values())
    sequences: list[list[int]] = []
    for run in runs:
        if classes[run[0]] == 'PDI' and run[0] in matched_pdis:
            continue
        sequence = list(run)
        while classes[sequence[-1]] in _ISOLATE_INITIATORS and sequence[-1] in matching:
            continuation = run_starting_at.get(matching[sequence[-1]])
            if continuation is None:
                break
            sequence.extend(continuation)
        sequences.append(sequence)
    return sequences


def _resolve_weak(types: list[str], classes: list[str], sos: str) -> None:
    size = len(types)

    # W1
    for k in range(size):
        if types[k] != 'NSM':
            continue
        if k == 0:
            types[k] = sos
        elif classes[k - 1] in _ISOLATE_INITIATORS or classes[k - 1] == 'PDI':
            types[k] = 'ON'
        else:
            types[k] = types[k - 1]

    # W2
    last_strong = sos
    for k in range(size):
        if types[k] in ('L', 'R', 'AL'):
            last_strong = types[k]
        elif types[k] == 'EN' and last_strong == 'AL':
            types[k] = 'AN'

    # W3
    for k in range(size):
        if types[k] == 'AL':
            types[k] = 'R'

    # W4
    for k in range(1, size - 1):
        before, after = types[k - 1], types[k + 1]
        if types[k] == 'ES' and before == 'EN' and after == 'EN':
            types[k] = 'EN'
        elif types[k] == 'CS' and before == after and before in ('EN', 'AN'):
            types[k] = before

    # W5
    k = 0
    while k < size:
        if types[k] != 'ET':
            k += 1
            continue
        start = k
        while k < size and types[k] == 'ET':
            k += 1
        if (start > 0 and types[start - 1] == 'EN') or (k < size and types[k] == 'EN'):
            for j in range(start, k):
                types[j] = 'EN'

    # W6
    for k in range(size):
        if types[k] in ('ES', 'ET', 'CS'):
            types[k] = 'ON'

    # W7
    last_strong = sos
    for k in range(size):
        if types[k] in ('L', 'R'):
            last_strong = types[k]
        elif types[k] == 'EN' and last_strong == 'L':
            types[k] = 'L'


def _bracket_pairs(chars: list[str], types: list[str]) -> list[tuple[int, int]]:
    pairs: list[tuple[int, int]] = []
    openers: list[tuple[str, int]] = []
    for k, ch in enumerate(chars):
        if types[k] != 'ON':
            continue
        if ch in _OPENING_BRACKETS:
            if len(openers) == _BRACKET_STACK_LIMIT:
                break
            openers.append((_OPENING_BRACKETS[ch], k))
        elif ch in _CLOSING_BRACKETS:
            for depth in range(len(openers) - 1, -1, -1):
                if openers[depth][0] == ch:
                    pairs.append((openers[depth][1], k))
                    del openers[depth:]
                    break
    return sorted(pairs)


def _resolve_brackets(
    chars: list[str],
    types: list[str],
    classes: list[str],
    sos: str,
    embedding: str,
) -> None:
    # N0
    for opening, closing in _bracket_pairs(chars, types):
        found_embedding = False
        found_opposite = False
        for k in range(opening + 1, closing):
            direction = _strong_direction(types[k])
            if direction is None:
                continue
            if direction == embedding:
                found_embedding = True
                break
            found_opposite = True

        if found_embedding:
            resolved = embedding
        elif found_opposite:
            context = sos
            for k in range(opening - 1, -1, -1):
                direction = _strong_direction(types[k])
                if direction is not None:
                    context = direction
                    break
            resolved = context if context != embedding else embedding
        else:
            continue

        for bracket in (opening, closing):
            types[bracket] = resolved
            k = bracket + 1
            while k < len(types) and classes[k] == 'NSM':
                types[k] = resolved
                k += 1


def _resolve_neutrals(types: list[str], sos: str, eos: str, embedding: str) -> None:
    # N1, N2
    size = len(types)
    k = 0
    while k < size:
        if types[k] not in _NEUTRAL_OR_ISOLATE:
            k += 1
            continue
        start = k
        while k < size and types[k] in _NEUTRAL_OR_ISOLATE:
            k += 1
        before = sos if start == 0 else _strong_direction(types[start - 1])
        after = eos if k == size else _strong_direction(types[k])
        resolved = before if before == after else embedding
        for j in range(start, k):
            types[j] = resolved


def _resolve_levels(text: str, base_level: int) -> tuple[list[int], list[str]]:
    chars = list(text)
    classes = [bidi_class(ch) for ch in chars]
    types = list(classes)
    matching = _match_isolates(classes)
    levels = _explicit_levels(classes, types, base_level, matching)

    kept = [index for index, kind in enumerate(classes) if kind not in _REMOVED]
    position = {index: k for k, index in enumerate(kept)}

    for sequence in _isolating_run_sequences(classes, levels, matching):
        level = levels[sequence[0]]
        first_pos = position[sequence[0]]
        before_level = levels[kept[first_pos - 1]] if first_pos > 0 else base_level
        last = sequence[-1]
        last_pos = position[last]
        if classes[last] in _ISOLATE_INITIATORS or last_pos + 1 >= len(kept):
            after_level = base_level
        else:
            after_level = levels[kept[last_pos + 1]]
        sos = _direction_of_level(max(level, before_level))
        eos = _direction_of_level(max(level, after_level))
        embedding = _direction_of_level(level)

        seq_types = [types[index] for index in sequence]
        seq_classes = [classes[index] for index in sequence]
        seq_chars = [chars[index] for index in sequence]

        _resolve_weak(seq_types, seq_classes, sos)
        _resolve_brackets(seq_chars, seq_types, seq_classes, sos, embedding)
        _resolve_neutrals(seq_types, sos, eos, embedding)

        # I1, I2
        for index, kind in zip(sequence, seq_types):
            types[index] = kind
            if level % 2 == 0:
                if kind == 'R':
                    levels[index] = level + 1
                elif kind in ('AN', 'EN'):
                    levels[index] = level + 2
            elif kind in ('L', 'EN', 'AN'):
                levels[index] = level + 1

    # Removed characters inherit the level before them
    for index, kind in enumerate(classes):
        if kind in _REMOVED:
            levels[index] = levels[index - 1] if index > 0 else base_level

    # L1
    trailing = True
    for index in range(len(classes) - 1, -1, -1):
        kind = classes[index]
        if kind in ('S', 'B'):
            levels[index] = base_level
            trailing = True
        elif trailing and kind in _TRAILING_WHITESPACE:
            levels[index] = base_level
        else:
            trailing = False
    return levels, classes


def embedding_levels(text: str, base_level: int = RTL_LEVEL) -> list[int]:
    """Resolved embedding level of every character of a single line."""
    levels, _ = _resolve_levels(text, base_level)
    return levels


def _reorder_line(line: str, base_level: int) -> str:
    if not line:
        return line
    levels, classes = _resolve_levels(line, base_level)
    order = list(range(len(line)))
    highest = max(levels)
    lowest_odd = min(levels) | 1
    for level in range(highest, lowest_odd - 1, -1):
        k = 0
        while k < len(order):
            if levels[order[k]] < level:
                k += 1
                continue
            start = k
            while k < len(order) and levels[order[k]] >= level:
                k += 1
            order[start:k] = order[start:k][::-1]

    out: list[str] = []
    for index in order:
        if classes[index] in _FORMATTING:
            continue
        ch = line[index]
        if levels[index] % 2:
            ch = _MIRRORS.get(ch, ch)
        out.append(ch)
    return ''.join(out)


def reorder(text: str, *, base_level: int = RTL_LEVEL) -> str:
    """Return ``text`` in visual (left-to-right drawing) order.

    Each ``\\n``-separated line is treated as its own paragraph.
    """
    if not text:
        return text
    return '\n'.join(_reorder_line(line, base_level) for line in text.split('\n'))
