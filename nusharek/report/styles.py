from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ReportStyleName(str, Enum):
    standard = 'standard'
    compact = 'compact'


@dataclass(frozen=True)
class ReportStyle:
    name: ReportStyleName
    include_cover: bool
    cover_footer_exempt: bool
    include_chart: bool
    repeat_table_header: bool
    prioritize_insights: bool
    insight_cap: int
    highlight_count: int


_STYLES: dict[ReportStyleName, ReportStyle] = {
    ReportStyleName.standard: ReportStyle(
        name=ReportStyleName.standard,
        include_cover=True,
        cover_footer_exempt=True,
        include_chart=True,
        repeat_table_header=True,
        prioritize_insights=True,
        insight_cap=5,
        highlight_count=3,
    ),
    ReportStyleName.compact: ReportStyle(
        name=ReportStyleName.compact,
        include_cover=False,
        cover_footer_exempt=False,
        include_chart=False,
        repeat_table_header=False,
        prioritize_insights=False,
        insight_cap=3,
        highlight_count=2,
    ),
}


def get_report_style(name: ReportStyleName | str) -> ReportStyle:
    try:
        key = ReportStyleName(str(name.value if isinstance(name, ReportStyleName) else name).strip().lower())
    except ValueError as exc:
        options = ', '.join(item.value for item in ReportStyleName)
        raise ValueError(f'Unknown report style {name!r}; expected one of: {options}') from exc
    return _STYLES[key]
