"""Stateful drawing surface over a ReportLab canvas.

Coordinates are millimetres measured from the top-left corner of the page,
which is how the layout code thinks about a page; the surface converts them
to PDF points with the origin at the bottom-left. Text handed to the surface
must already be in visual order (see ``nusharek.text.runs``).
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas

PT_TO_MM = 25.4 / 72
# Fractions of the font size above and below the baseline
TEXT_ASCENT = 0.8
TEXT_DESCENT = 0.25

ALIGNMENTS = ('start', 'center', 'end')


@dataclass(frozen=True)
class ShapeStyle:
    fill: str | None = None
    stroke: str | None = None
    line_width: float = 0.5


@dataclass(frozen=True)
class DrawRecord:
    page_index: int
    op: str
    x: float
    y: float
    width: float
    height: float
    text: str | None = None
    fill: str | None = None
    tag: str | None = None

    @property
    def bottom(self) -> float:
        return self.y + self.height


FooterPainter = Callable[['DrawingSurface', int, int], None]


class _DeferredPageCanvas(Canvas):
    """Canvas that keeps finished pages open until ``finish``.

    Page footers need the final page count, so every page is snapshotted on
    ``showPage`` and only emitted once the footer pass has run.
    """

    def __init__(self, *args, **kwargs):
        Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states: list[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    @property
    def saved_page_count(self) -> int:
        return len(self._saved_page_states)

    def finish(self, on_page: Callable[[int, int], None]) -> None:
        total = len(self._saved_page_states)
        for index, state in enumerate(self._saved_page_states):
            self.__dict__.update(state)
            on_page(index, total)
            Canvas.showPage(self)
        Canvas.save(self)


def _color(value: str) -> colors.Color:
    return colors.HexColor(value)


class DrawingSurface:
    def __init__(
        self,
        *,
        font_name: str = 'Helvetica',
        pagesize: tuple[float, float] = A4,
        direction: str = 'rtl',
        title: str | None = None,
        author: str | None = None,
    ):
        self.font_name = font_name
        self.direction = direction
        self.page_width = pagesize[0] / mm
        self.page_height = pagesize[1] / mm
        self.records: list[DrawRecord] = []
        self._buffer = io.BytesIO()
        self._canvas = _DeferredPageCanvas(self._buffer, pagesize=pagesize, invariant=1)
        if title:
            self._canvas.setTitle(title)
        if author:
            self._canvas.setAuthor(author)
        self._canvas.setProducer('Nusharek Report Renderer')
        self._page_index = 0
        self._tag: str | None = None
        self._finished = False

    @property
    def page_index(self) -> int:
        return self._page_index

    @property
    def page_count(self) -> int:
        return self._canvas.saved_page_count + (0 if self._finished else 1)

    @contextmanager
    def tagged(self, tag: str) -> Iterator[None]:
        previous = self._tag
        self._tag = tag
        try:
            yield
        finally:
            self._tag = previous

    def new_page(self) -> None:
        self._canvas.showPage()
        self._page_index += 1

    # -- geometry ----------------------------------------------------------

    def _px(self, x: float) -> float:
        return x * mm

    def _py(self, y: float) -> float:
        return (self.page_height - y) * mm

    def _record(self, op: str, x: float, y: float, width: float, height: float, **extra) -> None:
        self.records.append(
            DrawRecord(
                page_index=self._page_index,
                op=op,
                x=x,
                y=y,
                width=width,
                height=height,
                tag=self._tag,
                **extra,
            )
        )

    def _apply_style(self, style: ShapeStyle) -> tuple[int, int]:
        if style.fill:
            self._canvas.setFillColor(_color(style.fill))
        if style.stroke:
            self._canvas.setStrokeColor(_color(style.stroke))
            self._canvas.setLineWidth(style.line_width)
        return (1 if style.stroke else 0), (1 if style.fill else 0)

    # -- text --------------------------------------------------------------

    def measure_text_width(self, visual: str, font_size: float) -> float:
        return pdfmetrics.stringWidth(visual, self.font_name, font_size) * PT_TO_MM

    def _anchor(self, alignment: str) -> str:
        if alignment not in ALIGNMENTS:
            raise ValueError(f'unknown alignment: {alignment!r}')
        if alignment == 'center':
            return 'center'
        if self.direction == 'rtl':
            return 'right' if alignment == 'start' else 'left'
        return 'left' if alignment == 'start' else 'right'

    def draw_text(
        self,
        visual: str,
        x: float,
        y: float,
        font_size: float,
        alignment: str = 'start',
        *,
        color: str = '#111827',
    ) -> None:
        """Draw ``visual`` with its baseline at ``y``.

        ``start`` is the reading start of the base direction: for a
        right-to-left page the text's right edge sits at ``x``.
        """
        anchor = self._anchor(alignment)
        width = self.measure_text_width(visual, font_size)
        self._canvas.setFont(self.font_name, font_size)
        self._canvas.setFillColor(_color(color))
        if anchor == 'right':
            self._canvas.drawRightString(self._px(x), self._py(y), visual)
            left = x - width
        elif anchor == 'center':
            self._canvas.drawCentredString(self._px(x), self._py(y), visual)
            left = x - width / 2
        else:
            self._canvas.drawString(self._px(x), self._py(y), visual)
            left = x
        size_mm = font_size * PT_TO_MM
        self._record(
            'text',
            left,
            y - size_mm * TEXT_ASCENT,
            width,
            size_mm * (TEXT_ASCENT + TEXT_DESCENT),
            text=visual,
            fill=color,
        )

    # -- shapes ------------------------------------------------------------

    def fill_rect(self, x: float, y: float, w: float, h: float, style: ShapeStyle) -> None:
        self._apply_style(style)
        self._canvas.rect(self._px(x), self._py(y + h), w * mm, h * mm, stroke=0, fill=1)
        self._record('fill_rect', x, y, w, h, fill=style.fill)

    def stroke_rect(self, x: float, y: float, w: float, h: float, style: ShapeStyle) -> None:
        self._apply_style(style)
        self._canvas.rect(self._px(x), self._py(y + h), w * mm, h * mm, stroke=1, fill=0)
        self._record('stroke_rect', x, y, w, h)

    def rounded_rect(self, x: float, y: float, w: float, h: float, radius: float, style: ShapeStyle) -> None:
        stroke, fill = self._apply_style(style)
        self._canvas.roundRect(self._px(x), self._py(y + h), w * mm, h * mm, radius * mm, stroke=stroke, fill=fill)
        self._record('rounded_rect', x, y, w, h, fill=style.fill)

    def circle(self, cx: float, cy: float, r: float, style: ShapeStyle) -> None:
        stroke, fill = self._apply_style(style)
        self._canvas.circle(self._px(cx), self._py(cy), r * mm, stroke=stroke, fill=fill)
        self._record('circle', cx - r, cy - r, 2 * r, 2 * r, fill=style.fill)

    def line(self, x1: float, y1: float, x2: float, y2: float, style: ShapeStyle | None = None) -> None:
        self._apply_style(style or ShapeStyle(stroke='#D1D5DB'))
        self._canvas.line(self._px(x1), self._py(y1), self._px(x2), self._py(y2))
        self._record('line', min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    def filled_polygon(self, points: Sequence[tuple[float, float]], style: ShapeStyle) -> None:
        if len(points) < 3:
            return
        stroke, fill = self._apply_style(style)
        path = self._canvas.beginPath()
        first_x, first_y = points[0]
        path.moveTo(self._px(first_x), self._py(first_y))
        for px, py in points[1:]:
            path.lineTo(self._px(px), self._py(py))
        path.close()
        self._canvas.drawPath(path, stroke=stroke, fill=fill or 1)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        self._record('polygon', min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys), fill=style.fill)

    # -- output ------------------------------------------------------------

    def finish(self, footer_painter: FooterPainter | None = None) -> bytes:
        """Run the footer pass over every page and return the PDF bytes."""
        if self._finished:
            raise RuntimeError('surface already finished')
        self._canvas.showPage()
        self._finished = True

        def on_page(index: int, total: int) -> None:
            self._page_index = index
            if footer_painter is not None:
                footer_painter(self, index, total)

        self._canvas.finish(on_page)
        return self._buffer.getvalue()
