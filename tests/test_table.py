from __future__ import annotations

import pytest

from nusharek.report.pagination import Paginator
from nusharek.report.surface import DrawingSurface, ShapeStyle
from nusharek.report.table import CellBox, ColumnSpec, TableRenderer, TableSpec, TableStyle
from nusharek.text.runs import TextRunComposer


def _renderer() -> tuple[TableRenderer, Paginator, DrawingSurface]:
    surface = DrawingSurface()
    paginator = Paginator(surface, page_height=surface.page_height, top_margin=20.0, footer_reserve=18.0)
    renderer = TableRenderer(surface, paginator, TextRunComposer(fallback_mode=True), margin=18.0)
    return renderer, paginator, surface


def _sample_spec(rows: int, *, repeat_header: bool = True, hooks=None) -> TableSpec:
    return TableSpec(
        columns=(ColumnSpec(1.0, 'center'), ColumnSpec(3.0, 'start'), ColumnSpec(2.0, 'end')),
        header_row=('#', 'Name', 'Value'),
        body_rows=tuple((str(i + 1), f'Row {i + 1}', f'{i}%') for i in range(rows)),
        cell_hooks=hooks or {},
        style=TableStyle(repeat_header=repeat_header),
    )


class TestLayout:
    def test_columns_run_right_to_left(self):
        renderer, _, surface = _renderer()
        bounds = renderer.column_bounds(_sample_spec(1))
        right_edge = surface.page_width - 18.0
        assert bounds[0][0] + bounds[0][1] == pytest.approx(right_edge)
        assert bounds[2][0] == pytest.approx(18.0)
        assert bounds[1][1] == pytest.approx(3 * bounds[0][1])

    def test_rows_alternate_fills(self):
        renderer, _, surface = _renderer()
        spec = _sample_spec(4)
        renderer.render_table(spec, 30.0)
        fills = [
            record.fill
            for record in surface.records
            if record.op == 'fill_rect' and record.tag and record.tag.startswith('table.body.')
        ]
        assert fills == [spec.style.row_fills[i % 2] for i in range(4)]

    def test_returns_final_offset(self):
        renderer, paginator, _ = _renderer()
        spec = _sample_spec(3)
        final_y = renderer.render_table(spec, 30.0)
        assert final_y == pytest.approx(30.0 + spec.style.header_height + 3 * spec.style.row_height)
        assert final_y == paginator.y

    def test_body_row_count(self):
        renderer, _, surface = _renderer()
        renderer.render_table(_sample_spec(7), 30.0)
        rows = {
            record.tag.split('.')[2]
            for record in surface.records
            if record.op == 'text' and record.tag and record.tag.startswith('table.body.')
        }
        assert len(rows) == 7


class TestHooks:
    def test_hook_runs_after_cell_text(self):
        seen: list[CellBox] = []

        def hook(surface: DrawingSurface, box: CellBox) -> None:
            seen.append(box)
            surface.circle(box.x + 2, box.y + box.height / 2, 1.0, ShapeStyle(fill='#FF0000'))

        renderer, _, surface = _renderer()
        renderer.render_table(_sample_spec(2, hooks={(1, 2): hook}), 30.0)

        assert len(seen) == 1
        assert seen[0].row == 1 and seen[0].col == 2 and seen[0].text == '1%'
        tags = [record.tag for record in surface.records]
        assert tags.index('table.hook.1.2') > tags.index('table.body.1.2')


class TestPageBreaks:
    def _header_pages(self, surface: DrawingSurface) -> list[int]:
        return [
            record.page_index
            for record in surface.records
            if record.op == 'fill_rect' and record.tag == 'table.header'
        ]

    def test_header_repeats_on_continuation_pages(self):
        renderer, paginator, surface = _renderer()
        renderer.render_table(_sample_spec(60), 30.0)
        assert paginator.cursor.page_index >= 1
        assert self._header_pages(surface) == list(range(paginator.cursor.page_index + 1))

    def test_header_drawn_once_when_not_repeated(self):
        renderer, paginator, surface = _renderer()
        renderer.render_table(_sample_spec(60, repeat_header=False), 30.0)
        assert paginator.cursor.page_index >= 1
        assert self._header_pages(surface) == [0]

    def test_rows_stay_out_of_footer_zone(self):
        renderer, _, surface = _renderer()
        renderer.render_table(_sample_spec(80), 30.0)
        limit = surface.page_height - 18.0
        assert all(record.bottom <= limit + 1e-6 for record in surface.records)


class TestSpecValidation:
    def test_row_width_must_match_columns(self):
        with pytest.raises(ValueError):
            TableSpec(columns=(ColumnSpec(1.0),), header_row=('a',), body_rows=(('a', 'b'),))

    def test_columns_required(self):
        with pytest.raises(ValueError):
            TableSpec(columns=(), header_row=(), body_rows=())
