from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from nusharek.report.surface import DrawingSurface


logger = logging.getLogger(__name__)


class PageState(str, Enum):
    WRITING = 'writing'
    PAGE_FULL = 'page_full'


@dataclass(frozen=True)
class PageCursor:
    page_index: int
    offset: float
    page_height: float
    footer_reserve: float
    top_margin: float

    @property
    def content_bottom(self) -> float:
        """First offset of the reserved footer zone."""
        return self.page_height - self.footer_reserve

    @property
    def remaining(self) -> float:
        return self.content_bottom - self.offset

    @property
    def capacity(self) -> float:
        """Height available on an empty page."""
        return self.content_bottom - self.top_margin


class Paginator:
    """Owns the write cursor of one render.

    Producers declare the height of the block they are about to draw with
    ``check_break`` and move past it with ``advance``. Overflow is never
    detected after the fact.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        *,
        page_height: float,
        top_margin: float,
        footer_reserve: float,
    ):
        if footer_reserve < 0 or top_margin < 0:
            raise ValueError('margins must be non-negative')
        if top_margin >= page_height - footer_reserve:
            raise ValueError('top margin leaves no room for content')
        self.surface = surface
        self._cursor = PageCursor(
            page_index=surface.page_index,
            offset=top_margin,
            page_height=page_height,
            footer_reserve=footer_reserve,
            top_margin=top_margin,
        )

    @property
    def cursor(self) -> PageCursor:
        return self._cursor

    @property
    def y(self) -> float:
        return self._cursor.offset

    def state_for(self, needed_height: float) -> PageState:
        if self._cursor.offset + needed_height > self._cursor.content_bottom:
            return PageState.PAGE_FULL
        return PageState.WRITING

    def check_break(self, needed_height: float) -> bool:
        if self.state_for(needed_height) is PageState.WRITING:
            return False
        if self._cursor.offset <= self._cursor.top_margin:
            # A block taller than a whole page would break forever
            logger.warning(
                'Block of %.1f mm does not fit an empty page (%.1f mm available)',
                needed_height,
                self._cursor.remaining,
            )
            return False
        self.new_page()
        return True

    def advance(self, height: float) -> PageCursor:
        self._cursor = replace(self._cursor, offset=self._cursor.offset + height)
        return self._cursor

    def seek(self, offset: float) -> PageCursor:
        if offset < self._cursor.offset:
            raise ValueError(f'cannot move cursor backwards from {self._cursor.offset:.2f} to {offset:.2f}')
        self._cursor = replace(self._cursor, offset=offset)
        return self._cursor

    def new_page(self) -> PageCursor:
        self.surface.new_page()
        self._cursor = replace(
            self._cursor,
            page_index=self.surface.page_index,
            offset=self._cursor.top_margin,
        )
        logger.debug('Started page %d', self._cursor.page_index + 1)
        return self._cursor
