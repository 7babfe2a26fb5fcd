from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class MaturityTier(str, Enum):
    basic = 'basic'
    emerging = 'emerging'
    ideal = 'ideal'


class Organization(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str
    name_en: str | None = None
    type: str | None = None
    sector: str | None = None
    city: str | None = None


class AssessmentSummary(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    overall_score: float
    maturity: MaturityTier
    completed_at: datetime | None = None
    assessment_id: str | None = None


class DimensionScore(BaseModel):
    """Score of one evaluation dimension.

    ``percentage`` is derived from the raw and maximum scores; a ``percentage``
    key in the incoming payload is ignored.
    """

    model_config = ConfigDict(frozen=True, extra='ignore')

    dimension_name: str
    dimension_name_en: str | None = None
    order_index: int
    raw_score: float
    max_score: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percentage(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return max(0.0, min(100.0, self.raw_score / self.max_score * 100.0))


class Insight(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    text: str
    dimension_name: str | None = None
    # Percentage of the dimension the insight talks about; drives prioritization
    percentage: float | None = None

    @model_validator(mode='before')
    @classmethod
    def _coerce_plain_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {'text': data}
        return data


class ReportInput(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    summary: AssessmentSummary
    organization: Organization | None = None
    dimensions: tuple[DimensionScore, ...] = ()
    strengths: tuple[Insight, ...] = ()
    opportunities: tuple[Insight, ...] = ()
    recommendations: tuple[Insight, ...] = ()

    @classmethod
    def from_scores(
        cls,
        summary: AssessmentSummary,
        dimensions: list[DimensionScore] | tuple[DimensionScore, ...],
        organization: Organization | None = None,
    ) -> ReportInput:
        from nusharek.report.insights import derive_insights

        insights = derive_insights(dimensions)
        return cls(
            summary=summary,
            organization=organization,
            dimensions=tuple(dimensions),
            strengths=tuple(insights.strengths),
            opportunities=tuple(insights.opportunities),
            recommendations=tuple(insights.recommendations),
        )


class RenderedReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: bytes = Field(repr=False)
    filename: str
    page_count: int
    fallback_mode: bool
    style: str
