"""Assessment report composition.

One composer drives every report style: the style only switches sections
on and off and sets list caps. All text goes through the per-render
``TextRunComposer`` before it reaches the surface, and every block declares
its height to the paginator before it is drawn.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Callable, Sequence

import httpx

from nusharek.config import Settings, get_settings
from nusharek.report.fonts import (
    FontResource,
    FontResourceCache,
    FontUnavailableError,
    default_font_cache,
    register_font,
    resolve_fallback_font,
)
from nusharek.report.insights import select_insights
from nusharek.report.pagination import Paginator
from nusharek.report.styles import ReportStyle, ReportStyleName, get_report_style
from nusharek.report.surface import PT_TO_MM, TEXT_DESCENT, DrawingSurface, ShapeStyle
from nusharek.report.table import CellBox, CellHook, ColumnSpec, TableRenderer, TableSpec, TableStyle
from nusharek.report.tiers import TIER_BANDS, TierBand, band_for, band_of, rounded_percent
from nusharek.text.runs import TextRunComposer
from nusharek.types import DimensionScore, Insight, Organization, RenderedReport, ReportInput


logger = logging.getLogger(__name__)

PRIMARY = '#6C3AED'
NAVY = '#1E3A5F'
TEXT = '#111827'
MUTED = '#6B7280'
TRACK = '#E5E7EB'
CARD_FILL = '#F9FAFB'
WHITE = '#FFFFFF'

STRENGTH_COLOR = '#22C55E'
OPPORTUNITY_COLOR = '#F97316'
RECOMMENDATION_COLOR = '#3B82F6'

HEADING_SIZE = 15.0
BODY_SIZE = 10.5
SMALL_SIZE = 9.0
FOOTER_SIZE = 8.0

HEADING_HEIGHT = 12.0
LINE_HEIGHT = 6.0
ITEM_GAP = 2.0
SECTION_GAP = 8.0
CARD_HEIGHT = 26.0
CHART_ROW_HEIGHT = 8.0
CHART_LABEL_WIDTH = 55.0
RADAR_HEIGHT = 100.0
RADAR_RADIUS = 36.0
RADAR_RINGS = (25.0, 50.0, 75.0, 100.0)
RADAR_FILL = '#DDD6FE'
RADAR_NAMED_AXES = 8

MAX_CELL_CHARS = 48

SCORE_COLUMNS = (
    ColumnSpec(0.6, 'center'),
    ColumnSpec(3.2, 'start'),
    ColumnSpec(1.2, 'center'),
    ColumnSpec(1.0, 'center'),
    ColumnSpec(1.4, 'start'),
    ColumnSpec(2.0, 'center'),
)
SCORE_HEADER = ('#', 'المعيار', 'الدرجة', 'النسبة', 'المستوى', 'التقدم')


class ReportRenderError(RuntimeError):
    """Rendering failed; no document was produced. Safe to retry."""


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f'{value:.1f}'


def percent_label(percentage: float) -> str:
    return f'{rounded_percent(percentage)}%'


def _slugify(value: str) -> str:
    slug = re.sub(r'[^\w]+', '-', value.strip().lower())
    return slug.strip('-_')


def suggested_filename(
    organization: Organization | None,
    today: date,
    *,
    assessment_id: str | None = None,
) -> str:
    slug = ''
    if organization is not None:
        slug = _slugify(organization.name_en or '') or _slugify(organization.name)
    if not slug and assessment_id:
        slug = _slugify(assessment_id[:8])
    return f'assessment-report-{slug or "organization"}-{today.isoformat()}.pdf'


def _truncate(text: str, limit: int = MAX_CELL_CHARS) -> str:
    text = ' '.join(str(text).split())
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + '…'


def status_dot_hook(color: str) -> CellHook:
    def hook(surface: DrawingSurface, box: CellBox) -> None:
        surface.circle(box.x + 3.5, box.y + box.height / 2, 1.6, ShapeStyle(fill=color))

    return hook


def progress_bar_hook(percentage: float, color: str) -> CellHook:
    fraction = max(0.0, min(100.0, percentage)) / 100.0

    def hook(surface: DrawingSurface, box: CellBox) -> None:
        track_width = box.width - 4.0
        top = box.y + box.height / 2 - 1.5
        surface.rounded_rect(box.x + 2.0, top, track_width, 3.0, 1.5, ShapeStyle(fill=TRACK))
        filled = track_width * fraction
        if filled > 0:
            # Bars grow from the right edge of the cell
            surface.fill_rect(box.x + 2.0 + track_width - filled, top, filled, 3.0, ShapeStyle(fill=color))

    return hook


def score_table_spec(
    dimensions: Sequence[DimensionScore],
    *,
    repeat_header: bool = True,
    truncate: Callable[[str], str] = _truncate,
) -> TableSpec:
    """Dimension score table: one body row per dimension in ``order_index`` order."""
    rows: list[tuple[str, ...]] = []
    hooks: dict[tuple[int, int], CellHook] = {}
    ordered = sorted(dimensions, key=lambda item: item.order_index)
    for index, dimension in enumerate(ordered):
        band = band_of(dimension.percentage)
        rows.append(
            (
                str(index + 1),
                truncate(dimension.dimension_name),
                f'{_format_number(dimension.raw_score)}/{_format_number(dimension.max_score)}',
                percent_label(dimension.percentage),
                band.label_ar,
                '',
            )
        )
        hooks[(index, 4)] = status_dot_hook(band.color)
        hooks[(index, 5)] = progress_bar_hook(dimension.percentage, band.color)
    return TableSpec(
        columns=SCORE_COLUMNS,
        header_row=SCORE_HEADER,
        body_rows=tuple(rows),
        cell_hooks=hooks,
        style=TableStyle(repeat_header=repeat_header),
    )


def band_range_label(band: TierBand) -> str:
    upper = int(band.upper) if band.upper >= 100.0 else int(math.ceil(band.upper)) - 1
    return f'{band.label_ar} ({int(band.lower)}-{upper}%)'


def _wedge_points(cx: float, cy: float, r: float, fraction: float, steps: int = 72) -> list[tuple[float, float]]:
    """Pie wedge starting at twelve o'clock, sweeping clockwise."""
    count = max(2, int(steps * fraction) + 1)
    points = [(cx, cy)]
    for step in range(count):
        angle = -math.pi / 2 + 2 * math.pi * fraction * step / (count - 1)
        points.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return points


def radar_points(
    cx: float,
    cy: float,
    radius: float,
    percentages: Sequence[float],
) -> list[tuple[float, float]]:
    """One vertex per axis, first axis at twelve o'clock, clockwise."""
    count = len(percentages)
    points = []
    for index, percentage in enumerate(percentages):
        angle = -math.pi / 2 + 2 * math.pi * index / count
        reach = radius * max(0.0, min(100.0, percentage)) / 100.0
        points.append((cx + reach * math.cos(angle), cy + reach * math.sin(angle)))
    return points


class DocumentComposer:
    def __init__(
        self,
        report: ReportInput,
        *,
        style: ReportStyle,
        font_name: str,
        fallback_mode: bool,
        settings: Settings,
    ):
        self.report = report
        self.style = style
        self.settings = settings
        self.fallback_mode = fallback_mode
        self.runs = TextRunComposer(fallback_mode=fallback_mode)
        self.surface = DrawingSurface(
            font_name=font_name,
            title=settings.report_title,
            author=settings.brand_name,
        )
        self.paginator = Paginator(
            self.surface,
            page_height=self.surface.page_height,
            top_margin=settings.pdf_top_margin,
            footer_reserve=settings.pdf_footer_reserve,
        )
        self.margin = settings.pdf_page_margin
        self.right = self.surface.page_width - self.margin
        self.content_width = self.surface.page_width - 2 * self.margin
        self.tables = TableRenderer(self.surface, self.paginator, self.runs, margin=self.margin)

    @property
    def dimensions(self) -> list[DimensionScore]:
        return sorted(self.report.dimensions, key=lambda item: item.order_index)

    # -- primitives --------------------------------------------------------

    def _text(
        self,
        logical: str,
        x: float,
        y: float,
        size: float,
        alignment: str = 'start',
        *,
        color: str = TEXT,
    ) -> None:
        self.surface.draw_text(self.runs.visual(logical), x, y, size, alignment, color=color)

    def _measure(self, size: float) -> Callable[[str], float]:
        return lambda visual: self.surface.measure_text_width(visual, size)

    def _fit(self, logical: str, width: float, size: float) -> str:
        """Drop trailing words until the visual form fits ``width``."""
        text = ' '.join(str(logical).split())
        measure = self._measure(size)
        if measure(self.runs.visual(text)) <= width:
            return text
        words = text.split(' ')
        while len(words) > 1:
            words.pop()
            candidate = ' '.join(words) + '…'
            if measure(self.runs.visual(candidate)) <= width:
                return candidate
        return _truncate(text, 24)

    def _baseline(self, top: float, height: float, size: float) -> float:
        # Keeps the descender inside the block
        return top + height - size * PT_TO_MM * TEXT_DESCENT - 1.0

    def _heading(self, title: str, *, color: str = PRIMARY, keep_with: float = LINE_HEIGHT) -> None:
        self.paginator.check_break(HEADING_HEIGHT + keep_with)
        top = self.paginator.y
        with self.surface.tagged('heading'):
            self._text(title, self.right, self._baseline(top, HEADING_HEIGHT - 2.0, HEADING_SIZE), HEADING_SIZE, color=color)
            self.surface.line(
                self.margin,
                top + HEADING_HEIGHT - 1.0,
                self.right,
                top + HEADING_HEIGHT - 1.0,
                ShapeStyle(stroke=color, line_width=0.6),
            )
        self.paginator.advance(HEADING_HEIGHT)

    # -- sections ----------------------------------------------------------

    def _cover(self) -> None:
        summary = self.report.summary
        organization = self.report.organization
        band = band_for(summary.maturity)
        center = self.surface.page_width / 2

        with self.surface.tagged('cover.band'):
            self.surface.fill_rect(0.0, 0.0, self.surface.page_width, 60.0, ShapeStyle(fill=PRIMARY))
            self._text(self.settings.brand_name, center, 24.0, 14.0, 'center', color=WHITE)
            self._text(self.settings.report_title, center, 42.0, 20.0, 'center', color=WHITE)

        if organization is not None:
            with self.surface.tagged('cover.organization'):
                self._text(organization.name, center, 82.0, 18.0, 'center', color=NAVY)
                details = ' • '.join(item for item in (organization.type, organization.sector, organization.city) if item)
                if details:
                    self._text(details, center, 92.0, 11.0, 'center', color=MUTED)

        cx, cy, outer, inner = center, 145.0, 32.0, 25.0
        with self.surface.tagged('cover.badge'):
            self.surface.circle(cx, cy, outer, ShapeStyle(fill=TRACK))
            fraction = max(0.0, min(100.0, summary.overall_score)) / 100.0
            if fraction > 0:
                self.surface.filled_polygon(_wedge_points(cx, cy, outer, fraction), ShapeStyle(fill=band.color))
            self.surface.circle(cx, cy, inner, ShapeStyle(fill=WHITE))
            self._text(percent_label(summary.overall_score), cx, cy + 4.0, 26.0, 'center', color=band.color)
        with self.surface.tagged('cover.tier-label'):
            self._text(band.label_ar, cx, cy + outer + 14.0, 16.0, 'center', color=band.color)
            self._text(band.label_en, cx, cy + outer + 22.0, 11.0, 'center', color=MUTED)

        completed = summary.completed_at.strftime('%Y-%m-%d') if summary.completed_at else '—'
        with self.surface.tagged('cover.meta'):
            self._text(f'تاريخ التقييم: {completed}', center, 215.0, 11.0, 'center', color=MUTED)

    def _title_block(self) -> None:
        """Compact replacement for the cover page."""
        organization = self.report.organization
        height = 20.0 if organization is not None else 12.0
        self.paginator.check_break(height)
        top = self.paginator.y
        with self.surface.tagged('title'):
            self._text(self.settings.report_title, self.right, top + 7.0, 16.0, color=PRIMARY)
            if organization is not None:
                self._text(organization.name, self.right, top + 15.0, 11.0, color=MUTED)
        self.paginator.advance(height)

    def _summary(self) -> None:
        self._heading('الملخص التنفيذي', keep_with=CARD_HEIGHT)
        summary = self.report.summary
        band = band_for(summary.maturity)
        gap = 5.0
        width = (self.content_width - 2 * gap) / 3
        cards = (
            ('summary.score-card', 'الدرجة الكلية', percent_label(summary.overall_score), CARD_FILL, PRIMARY, TEXT),
            ('summary.tier-card', 'مستوى النضج', band.label_ar, band.color, WHITE, WHITE),
            ('summary.count-card', 'عدد المعايير', str(len(self.report.dimensions)), CARD_FILL, NAVY, TEXT),
        )
        self.paginator.check_break(CARD_HEIGHT)
        top = self.paginator.y
        for index, (tag, label, value, fill, value_color, label_color) in enumerate(cards):
            x = self.right - (index + 1) * width - index * gap
            with self.surface.tagged(tag):
                self.surface.rounded_rect(x, top, width, CARD_HEIGHT, 3.0, ShapeStyle(fill=fill, stroke=TRACK))
                self._text(label, x + width / 2, top + 9.0, SMALL_SIZE, 'center', color=label_color)
                self._text(value, x + width / 2, top + 20.0, 18.0, 'center', color=value_color)
        self.paginator.advance(CARD_HEIGHT + SECTION_GAP)

        if self.dimensions:
            ranked = sorted(self.dimensions, key=lambda item: item.percentage, reverse=True)
            count = min(self.style.highlight_count, len(ranked))
            self._highlights('أعلى المعايير أداءً', ranked[:count], 'summary.top')
            self._highlights('المعايير الأدنى أداءً', list(reversed(ranked))[:count], 'summary.bottom')

    def _highlights(self, title: str, items: Sequence[DimensionScore], tag: str) -> None:
        self.paginator.check_break(LINE_HEIGHT * 2)
        with self.surface.tagged(tag):
            self._text(title, self.right, self._baseline(self.paginator.y, LINE_HEIGHT, BODY_SIZE), BODY_SIZE, color=NAVY)
        self.paginator.advance(LINE_HEIGHT + 1.0)
        for dimension in items:
            self.paginator.check_break(LINE_HEIGHT)
            top = self.paginator.y
            band = band_of(dimension.percentage)
            baseline = self._baseline(top, LINE_HEIGHT, BODY_SIZE)
            with self.surface.tagged(tag):
                self.surface.circle(self.right - 1.5, top + LINE_HEIGHT / 2, 1.5, ShapeStyle(fill=band.color))
                self._text(_truncate(dimension.dimension_name), self.right - 5.0, baseline, BODY_SIZE)
                self._text(percent_label(dimension.percentage), self.margin, baseline, BODY_SIZE, 'end', color=band.color)
            self.paginator.advance(LINE_HEIGHT)
        self.paginator.advance(SECTION_GAP / 2)

    def _bar_chart(self) -> None:
        self._heading('مقارنة المعايير', keep_with=CHART_ROW_HEIGHT)
        region_right = self.right - CHART_LABEL_WIDTH - 4.0
        # room on the left for the value label
        region_width = region_right - self.margin - 14.0
        for dimension in self.dimensions:
            self.paginator.check_break(CHART_ROW_HEIGHT)
            top = self.paginator.y
            band = band_of(dimension.percentage)
            bar_width = region_width * dimension.percentage / 100.0
            baseline = self._baseline(top, CHART_ROW_HEIGHT, SMALL_SIZE)
            with self.surface.tagged('chart.label'):
                self._text(_truncate(dimension.dimension_name, 32), self.right, baseline, SMALL_SIZE)
            with self.surface.tagged('chart.bar'):
                self.surface.fill_rect(region_right - region_width, top + 1.5, region_width, CHART_ROW_HEIGHT - 3.0, ShapeStyle(fill=CARD_FILL))
                if bar_width > 0:
                    self.surface.rounded_rect(
                        region_right - bar_width,
                        top + 1.5,
                        bar_width,
                        CHART_ROW_HEIGHT - 3.0,
                        min(1.0, bar_width / 2),
                        ShapeStyle(fill=band.color),
                    )
            with self.surface.tagged('chart.value'):
                self._text(percent_label(dimension.percentage), region_right - bar_width - 2.0, baseline, SMALL_SIZE, color=band.color)
            self.paginator.advance(CHART_ROW_HEIGHT)
        self.paginator.advance(SECTION_GAP)

    def _radar_chart(self) -> None:
        dimensions = self.dimensions
        self._heading('خريطة النضج', keep_with=RADAR_HEIGHT)
        self.paginator.check_break(RADAR_HEIGHT)
        top = self.paginator.y
        cx = self.surface.page_width / 2
        cy = top + RADAR_HEIGHT / 2
        count = len(dimensions)

        with self.surface.tagged('radar.grid'):
            for ring in reversed(RADAR_RINGS):
                ring_points = radar_points(cx, cy, RADAR_RADIUS, [ring] * count)
                self.surface.filled_polygon(ring_points, ShapeStyle(fill=WHITE, stroke=TRACK, line_width=0.4))
            for x, y in radar_points(cx, cy, RADAR_RADIUS, [100.0] * count):
                self.surface.line(cx, cy, x, y, ShapeStyle(stroke=TRACK, line_width=0.4))

        vertices = radar_points(cx, cy, RADAR_RADIUS, [item.percentage for item in dimensions])
        with self.surface.tagged('radar.area'):
            self.surface.filled_polygon(vertices, ShapeStyle(fill=RADAR_FILL, stroke=PRIMARY, line_width=1.0))
            for (x, y), dimension in zip(vertices, dimensions):
                self.surface.circle(x, y, 1.1, ShapeStyle(fill=band_of(dimension.percentage).color))

        # Axis labels match the "#" column of the score table when names would crowd
        named = count <= RADAR_NAMED_AXES
        label_ring = radar_points(cx, cy, RADAR_RADIUS + 6.0, [100.0] * count)
        with self.surface.tagged('radar.label'):
            for index, ((x, y), dimension) in enumerate(zip(label_ring, dimensions)):
                label = _truncate(dimension.dimension_name, 18) if named else str(index + 1)
                if x > cx + 1.0:
                    alignment = 'end'
                elif x < cx - 1.0:
                    alignment = 'start'
                else:
                    alignment = 'center'
                self._text(label, x, y + SMALL_SIZE * PT_TO_MM * 0.3, SMALL_SIZE, alignment, color=MUTED)
        self.paginator.advance(RADAR_HEIGHT + SECTION_GAP)

    def _score_table(self) -> None:
        self._heading('نتائج المعايير', keep_with=TableStyle().header_height + TableStyle().row_height)
        table_style = TableStyle()
        name_width = self.content_width * SCORE_COLUMNS[1].width / sum(column.width for column in SCORE_COLUMNS)
        spec = score_table_spec(
            self.dimensions,
            repeat_header=self.style.repeat_table_header,
            truncate=lambda text: self._fit(text, name_width - 2 * table_style.cell_padding, table_style.font_size),
        )
        self.tables.render_table(spec, self.paginator.y)
        self.paginator.advance(4.0)

    def _legend(self) -> None:
        self.paginator.check_break(LINE_HEIGHT)
        top = self.paginator.y
        baseline = self._baseline(top, LINE_HEIGHT, SMALL_SIZE)
        x = self.right
        with self.surface.tagged('legend'):
            for band in TIER_BANDS:
                self.surface.circle(x - 1.5, top + LINE_HEIGHT / 2, 1.5, ShapeStyle(fill=band.color))
                label = band_range_label(band)
                self._text(label, x - 5.0, baseline, SMALL_SIZE, color=MUTED)
                x -= 5.0 + self.surface.measure_text_width(self.runs.visual(label), SMALL_SIZE) + 8.0
        self.paginator.advance(LINE_HEIGHT + SECTION_GAP)

    def _insights(self, kind: str, title: str, items: Sequence[Insight], color: str, *, descending: bool) -> None:
        selected = select_insights(
            items,
            cap=self.style.insight_cap,
            prioritized=self.style.prioritize_insights,
            descending=descending,
        )
        if not selected:
            return
        text_width = self.content_width - 6.0
        wrapped = [self.runs.wrap(insight.text, text_width, self._measure(BODY_SIZE)) for insight in selected]
        capacity = self.paginator.cursor.capacity
        first_block = min(LINE_HEIGHT * len(wrapped[0]), capacity - HEADING_HEIGHT)
        self._heading(title, color=color, keep_with=max(LINE_HEIGHT, first_block))
        for index, lines in enumerate(wrapped):
            block = LINE_HEIGHT * len(lines)
            if block <= capacity:
                # keep short items together
                self.paginator.check_break(block)
            with self.surface.tagged(f'insights.{kind}.{index}'):
                for line_no, line in enumerate(lines):
                    self.paginator.check_break(LINE_HEIGHT)
                    top = self.paginator.y
                    if line_no == 0:
                        self.surface.circle(self.right - 1.2, top + LINE_HEIGHT / 2, 1.2, ShapeStyle(fill=color))
                    self._text(line, self.right - 5.0, self._baseline(top, LINE_HEIGHT, BODY_SIZE), BODY_SIZE)
                    self.paginator.advance(LINE_HEIGHT)
            self.paginator.advance(ITEM_GAP)
        self.paginator.advance(SECTION_GAP)

    def _paint_footer(self, surface: DrawingSurface, page_index: int, page_count: int) -> None:
        if page_index == 0 and self.style.include_cover and self.style.cover_footer_exempt:
            return
        zone_top = surface.page_height - self.settings.pdf_footer_reserve
        with surface.tagged('footer'):
            surface.line(self.margin, zone_top + 4.0, self.right, zone_top + 4.0, ShapeStyle(stroke=TRACK, line_width=0.4))
            self._text(f'صفحة {page_index + 1} من {page_count}', self.right, zone_top + 10.0, FOOTER_SIZE, color=MUTED)
            self._text(self.settings.brand_name, self.margin, zone_top + 10.0, FOOTER_SIZE, 'end', color=MUTED)

    # -- driver ------------------------------------------------------------

    def compose(self) -> bytes:
        """Lay out every section and return the finished PDF bytes."""
        try:
            if self.style.include_cover:
                self._cover()
                self.paginator.new_page()
            else:
                self._title_block()
            self._summary()
            if self.style.include_chart and self.dimensions:
                self._bar_chart()
            if self.style.include_chart and len(self.dimensions) >= 3:
                self._radar_chart()
            self._score_table()
            self._legend()
            self._insights(
                'strengths', 'نقاط القوة', self.report.strengths, STRENGTH_COLOR, descending=True
            )
            self._insights(
                'opportunities', 'فرص التحسين', self.report.opportunities, OPPORTUNITY_COLOR, descending=False
            )
            self._insights(
                'recommendations', 'التوصيات', self.report.recommendations, RECOMMENDATION_COLOR, descending=False
            )
            return self.surface.finish(self._paint_footer)
        except Exception as exc:
            raise ReportRenderError(f'Failed to render assessment report: {exc}') from exc


def _resolve_style(style: ReportStyle | ReportStyleName | str | None, settings: Settings) -> ReportStyle:
    if isinstance(style, ReportStyle):
        return style
    return get_report_style(style or settings.report_style)


def build_report(
    report: ReportInput,
    *,
    font: FontResource | None = None,
    style: ReportStyle | ReportStyleName | str | None = None,
    settings: Settings | None = None,
    today: date | None = None,
) -> RenderedReport:
    """Render synchronously with an already acquired font (``None`` = fallback mode)."""
    settings = settings or get_settings()
    resolved_style = _resolve_style(style, settings)
    font_name: str | None = None
    if font is not None:
        try:
            font_name = register_font(font)
        except FontUnavailableError as exc:
            logger.warning('Shaping font %s unusable, rendering in fallback mode: %s', font.source, exc)
    fallback_mode = font_name is None
    if font_name is None:
        font_name = resolve_fallback_font(settings.fallback_fonts())

    composer = DocumentComposer(
        report,
        style=resolved_style,
        font_name=font_name,
        fallback_mode=fallback_mode,
        settings=settings,
    )
    content = composer.compose()
    organization = report.organization
    filename = suggested_filename(
        organization,
        today or date.today(),
        assessment_id=report.summary.assessment_id,
    )
    page_count = composer.surface.page_count
    logger.info(
        'Rendered %s report: %d page(s), %d bytes, font=%s, fallback=%s',
        resolved_style.name.value,
        page_count,
        len(content),
        font_name,
        fallback_mode,
    )
    return RenderedReport(
        content=content,
        filename=filename,
        page_count=page_count,
        fallback_mode=fallback_mode,
        style=resolved_style.name.value,
    )


async def render_report(
    report: ReportInput,
    *,
    style: ReportStyle | ReportStyleName | str | None = None,
    settings: Settings | None = None,
    font_cache: FontResourceCache | None = None,
    font_locations: Sequence[str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    today: date | None = None,
) -> RenderedReport:
    """Acquire the shaping font (once per process) and render the report."""
    settings = settings or get_settings()
    cache = font_cache or default_font_cache()
    locations = list(font_locations) if font_locations is not None else settings.font_locations()
    font = await cache.acquire(
        locations,
        timeout=settings.font_fetch_timeout_seconds,
        transport=transport,
    )
    return build_report(report, font=font, style=style, settings=settings, today=today)
