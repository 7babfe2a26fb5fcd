from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from nusharek.report.tiers import rounded_percent
from nusharek.types import DimensionScore, Insight


logger = logging.getLogger(__name__)

STRENGTH_THRESHOLD = 75.0
OPPORTUNITY_THRESHOLD = 50.0
FOUNDATION_THRESHOLD = 25.0

_GENERAL_BASIC = (
    'تشكيل فريق متخصص للمشاركة المجتمعية مع صلاحيات واضحة',
    'إعداد استراتيجية شاملة للمشاركة المجتمعية على مستوى المنظمة',
    'بناء القدرات الأساسية وتدريب الفريق على ممارسات المشاركة',
)
_GENERAL_EMERGING = (
    'تعزيز آليات المتابعة والتقييم للممارسات الحالية',
    'بناء شراكات استراتيجية مع أصحاب المصلحة الرئيسيين',
    'توثيق أفضل الممارسات ومشاركتها داخل المنظمة',
)
_GENERAL_IDEAL = (
    'مشاركة التجارب الناجحة مع المنظمات الأخرى كنموذج يُحتذى به',
    'الاستثمار في الابتكار والتقنيات الحديثة لتعزيز المشاركة المجتمعية',
)


@dataclass
class InsightLists:
    strengths: list[Insight] = field(default_factory=list)
    opportunities: list[Insight] = field(default_factory=list)
    recommendations: list[Insight] = field(default_factory=list)


def _linked(text: str, dimension: DimensionScore) -> Insight:
    return Insight(text=text, dimension_name=dimension.dimension_name, percentage=dimension.percentage)


def derive_insights(dimensions: Sequence[DimensionScore]) -> InsightLists:
    """Build strengths, opportunities and recommendations from dimension scores.

    Every dimension yields either a strength or an opportunity with a matching
    recommendation. General recommendations chosen by the average percentage
    are appended without a linked percentage.
    """
    lists = InsightLists()
    ordered = sorted(dimensions, key=lambda item: item.order_index)
    for dimension in ordered:
        name = dimension.dimension_name
        percentage = dimension.percentage
        shown = rounded_percent(percentage)
        if percentage >= STRENGTH_THRESHOLD:
            lists.strengths.append(_linked(f'أداء متميز في "{name}" بنسبة {shown}%', dimension))
        elif percentage >= OPPORTUNITY_THRESHOLD:
            lists.opportunities.append(_linked(f'تحسين "{name}" من {shown}% إلى مستوى أعلى', dimension))
            lists.recommendations.append(
                _linked(f'وضع خطة تطويرية لمعيار "{name}" تتضمن أهدافًا واضحة ومؤشرات قياس', dimension)
            )
        elif percentage >= FOUNDATION_THRESHOLD:
            lists.opportunities.append(_linked(f'تطوير ممارسات "{name}" الحالية ({shown}%)', dimension))
            lists.recommendations.append(
                _linked(f'إجراء تقييم تفصيلي للفجوات في "{name}" ووضع برنامج تدريبي مكثف', dimension)
            )
        else:
            lists.opportunities.append(_linked(f'بناء أساسيات "{name}" ({shown}%)', dimension))
            lists.recommendations.append(
                _linked(f'البدء بتأسيس إطار عمل واضح لـ "{name}" مع الاستفادة من الممارسات الناجحة', dimension)
            )

    if not ordered:
        return lists

    average = sum(item.percentage for item in ordered) / len(ordered)
    if average < OPPORTUNITY_THRESHOLD:
        general = _GENERAL_BASIC
    elif average < STRENGTH_THRESHOLD:
        general = _GENERAL_EMERGING
    else:
        general = _GENERAL_IDEAL
    lists.recommendations.extend(Insight(text=text) for text in general)
    logger.debug(
        'Derived %d strengths, %d opportunities, %d recommendations (average %.1f)',
        len(lists.strengths),
        len(lists.opportunities),
        len(lists.recommendations),
        average,
    )
    return lists


def prioritize(items: Sequence[Insight], *, descending: bool) -> list[Insight]:
    """Stable sort on the linked percentage; unlinked items keep input order last."""
    linked = [item for item in items if item.percentage is not None]
    unlinked = [item for item in items if item.percentage is None]
    linked.sort(key=lambda item: item.percentage, reverse=descending)
    return linked + unlinked


def select_insights(
    items: Sequence[Insight],
    *,
    cap: int,
    prioritized: bool,
    descending: bool = False,
) -> list[Insight]:
    ordered = prioritize(items, descending=descending) if prioritized else list(items)
    return ordered[: max(0, cap)]
