from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping

from nusharek.report.pagination import Paginator
from nusharek.report.surface import PT_TO_MM, DrawingSurface, ShapeStyle
from nusharek.text.runs import TextRunComposer


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellBox:
    row: int
    col: int
    x: float
    y: float
    width: float
    height: float
    text: str


CellHook = Callable[[DrawingSurface, CellBox], None]


@dataclass(frozen=True)
class ColumnSpec:
    # Relative width; columns share the content width in proportion
    width: float
    alignment: str = 'start'


@dataclass(frozen=True)
class TableStyle:
    header_fill: str = '#1E3A5F'
    header_text: str = '#FFFFFF'
    row_fills: tuple[str, str] = ('#FFFFFF', '#F5F3FF')
    text_color: str = '#1F2937'
    border: str = '#E5E7EB'
    header_height: float = 9.0
    row_height: float = 8.0
    header_font_size: float = 10.0
    font_size: float = 9.5
    cell_padding: float = 2.5
    repeat_header: bool = True


@dataclass(frozen=True)
class TableSpec:
    columns: tuple[ColumnSpec, ...]
    header_row: tuple[str, ...]
    body_rows: tuple[tuple[str, ...], ...]
    # (body row index, column index) -> hook drawn over the cell
    cell_hooks: Mapping[tuple[int, int], CellHook] = field(default_factory=dict)
    style: TableStyle = field(default_factory=TableStyle)

    def __post_init__(self) -> None:
        if not self.columns:
            raise ValueError('table needs at least one column')
        if any(column.width <= 0 for column in self.columns):
            raise ValueError('column widths must be positive')
        expected = len(self.columns)
        if self.header_row and len(self.header_row) != expected:
            raise ValueError(f'header has {len(self.header_row)} cells, expected {expected}')
        for index, row in enumerate(self.body_rows):
            if len(row) != expected:
                raise ValueError(f'row {index} has {len(row)} cells, expected {expected}')


class TableRenderer:
    """Fixed-column grid laid out right-to-left across the content width."""

    def __init__(
        self,
        surface: DrawingSurface,
        paginator: Paginator,
        runs: TextRunComposer,
        *,
        margin: float = 18.0,
    ):
        self.surface = surface
        self.paginator = paginator
        self.runs = runs
        self.left = margin
        self.width = surface.page_width - 2 * margin

    def column_bounds(self, spec: TableSpec) -> list[tuple[float, float]]:
        """(x, width) per column, column 0 against the right edge."""
        total = sum(column.width for column in spec.columns)
        bounds: list[tuple[float, float]] = []
        right = self.left + self.width
        for column in spec.columns:
            width = self.width * column.width / total
            right -= width
            bounds.append((right, width))
        return bounds

    def render_table(self, spec: TableSpec, start_y: float) -> float:
        style = spec.style
        self.paginator.seek(start_y)
        bounds = self.column_bounds(spec)
        has_header = bool(spec.header_row)

        first_block = (style.header_height if has_header else 0.0) + (style.row_height if spec.body_rows else 0.0)
        self.paginator.check_break(first_block)
        if has_header:
            self._draw_header(spec, bounds)

        for row_index, row in enumerate(spec.body_rows):
            if self.paginator.check_break(style.row_height) and has_header and style.repeat_header:
                logger.debug('Repeating table header on page %d', self.paginator.cursor.page_index + 1)
                self._draw_header(spec, bounds)
            self._draw_row(spec, bounds, row_index, row)
        return self.paginator.y

    def _text_anchor(self, x: float, width: float, alignment: str, padding: float) -> float:
        if alignment == 'center':
            return x + width / 2
        if alignment == 'end':
            return x + padding
        return x + width - padding

    def _baseline(self, top: float, height: float, font_size: float) -> float:
        return top + height / 2 + font_size * PT_TO_MM * 0.35

    def _draw_header(self, spec: TableSpec, bounds: list[tuple[float, float]]) -> None:
        style = spec.style
        top = self.paginator.y
        with self.surface.tagged('table.header'):
            self.surface.fill_rect(self.left, top, self.width, style.header_height, ShapeStyle(fill=style.header_fill))
            for col, (text, (x, width)) in enumerate(zip(spec.header_row, bounds)):
                alignment = spec.columns[col].alignment
                self.surface.draw_text(
                    self.runs.visual(text),
                    self._text_anchor(x, width, alignment, style.cell_padding),
                    self._baseline(top, style.header_height, style.header_font_size),
                    style.header_font_size,
                    alignment,
                    color=style.header_text,
                )
        self.paginator.advance(style.header_height)

    def _draw_row(
        self,
        spec: TableSpec,
        bounds: list[tuple[float, float]],
        row_index: int,
        row: tuple[str, ...],
    ) -> None:
        style = spec.style
        top = self.paginator.y
        fill = style.row_fills[row_index % 2]
        with self.surface.tagged(f'table.body.{row_index}'):
            self.surface.fill_rect(self.left, top, self.width, style.row_height, ShapeStyle(fill=fill))
            self.surface.line(
                self.left,
                top + style.row_height,
                self.left + self.width,
                top + style.row_height,
                ShapeStyle(stroke=style.border, line_width=0.3),
            )
        for col, (text, (x, width)) in enumerate(zip(row, bounds)):
            alignment = spec.columns[col].alignment
            with self.surface.tagged(f'table.body.{row_index}.{col}'):
                if text:
                    self.surface.draw_text(
                        self.runs.visual(text),
                        self._text_anchor(x, width, alignment, style.cell_padding),
                        self._baseline(top, style.row_height, style.font_size),
                        style.font_size,
                        alignment,
                        color=style.text_color,
                    )
            hook = spec.cell_hooks.get((row_index, col))
            if hook is not None:
                box = CellBox(row=row_index, col=col, x=x, y=top, width=width, height=style.row_height, text=text)
                with self.surface.tagged(f'table.hook.{row_index}.{col}'):
                    hook(self.surface, box)
        self.paginator.advance(style.row_height)
