from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from nusharek.text.bidi import reorder
from nusharek.text.normalizer import normalize
from nusharek.text.shaper import shape


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextRun:
    logical: str
    visual: str


def render_text(logical: str, fallback_mode: bool) -> str:
    """Turn a logical string into the string handed to the drawing surface.

    In fallback mode only normalization runs: presentation forms and visual
    order would come out garbled in a font that cannot display them.
    """
    normalized = normalize(logical) or ''
    if fallback_mode:
        return normalized
    return reorder(shape(normalized))


class TextRunComposer:
    """Per-render text pipeline with a memo of already resolved runs."""

    def __init__(self, *, fallback_mode: bool):
        self.fallback_mode = fallback_mode
        self._runs: dict[str, TextRun] = {}

    def run(self, logical: str) -> TextRun:
        cached = self._runs.get(logical)
        if cached is not None:
            return cached
        resolved = TextRun(logical=logical, visual=render_text(logical, self.fallback_mode))
        self._runs[logical] = resolved
        return resolved

    def visual(self, logical: str) -> str:
        return self.run(logical).visual

    def wrap(
        self,
        logical: str,
        max_width: float,
        measure: Callable[[str], float],
    ) -> list[str]:
        """Split ``logical`` into logical lines whose visual width fits.

        Words are never broken; a single word wider than ``max_width`` gets a
        line of its own.
        """
        words = str(logical or '').split()
        if not words:
            return ['']

        lines: list[str] = []
        current = words[0]
        for word in words[1:]:
            candidate = f'{current} {word}'
            if measure(self.visual(candidate)) <= max_width:
                current = candidate
                continue
            lines.append(current)
            current = word
        lines.append(current)
        if len(lines) > 1:
            logger.debug('Wrapped text into %d lines at %.1f', len(lines), max_width)
        return lines
