from __future__ import annotations

import pytest

from nusharek.report.pagination import PageState, Paginator
from nusharek.report.surface import DrawingSurface


def _paginator(**overrides) -> Paginator:
    options = {'page_height': 297.0, 'top_margin': 20.0, 'footer_reserve': 18.0}
    options.update(overrides)
    return Paginator(DrawingSurface(), **options)


class TestState:
    def test_fits(self):
        paginator = _paginator()
        assert paginator.state_for(100.0) is PageState.WRITING

    def test_would_enter_footer_zone(self):
        paginator = _paginator()
        paginator.advance(250.0)
        assert paginator.state_for(10.0) is PageState.PAGE_FULL

    def test_exact_fit_is_writing(self):
        paginator = _paginator()
        # 20 + 259 == 297 - 18
        assert paginator.state_for(259.0) is PageState.WRITING
        assert paginator.state_for(259.01) is PageState.PAGE_FULL


class TestCheckBreak:
    def test_no_break_when_block_fits(self):
        paginator = _paginator()
        assert paginator.check_break(30.0) is False
        assert paginator.cursor.page_index == 0
        assert paginator.y == 20.0

    def test_break_resets_cursor_to_top_margin(self):
        paginator = _paginator()
        paginator.advance(240.0)
        assert paginator.check_break(30.0) is True
        assert paginator.cursor.page_index == 1
        assert paginator.y == 20.0
        assert paginator.surface.page_count == 2

    def test_oversized_block_on_empty_page_does_not_loop(self):
        paginator = _paginator()
        assert paginator.check_break(400.0) is False
        assert paginator.cursor.page_index == 0


class TestCursor:
    def test_advance_never_breaks(self):
        paginator = _paginator()
        paginator.advance(500.0)
        assert paginator.cursor.page_index == 0
        assert paginator.y == 520.0

    def test_cursor_is_replaced_not_mutated(self):
        paginator = _paginator()
        before = paginator.cursor
        after = paginator.advance(5.0)
        assert before.offset == 20.0
        assert after.offset == 25.0
        assert after is paginator.cursor

    def test_seek_forward(self):
        paginator = _paginator()
        paginator.seek(60.0)
        assert paginator.y == 60.0

    def test_seek_backwards_is_rejected(self):
        paginator = _paginator()
        paginator.advance(40.0)
        with pytest.raises(ValueError):
            paginator.seek(30.0)

    def test_cursor_geometry(self):
        cursor = _paginator().cursor
        assert cursor.content_bottom == 279.0
        assert cursor.remaining == 259.0
        assert cursor.capacity == 259.0

    def test_capacity_does_not_shrink_with_offset(self):
        paginator = _paginator()
        paginator.advance(100.0)
        assert paginator.cursor.remaining == 159.0
        assert paginator.cursor.capacity == 259.0

    def test_invalid_margins(self):
        with pytest.raises(ValueError):
            _paginator(top_margin=290.0)
