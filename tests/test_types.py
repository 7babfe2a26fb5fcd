from __future__ import annotations

import pytest
from pydantic import ValidationError

from nusharek.types import AssessmentSummary, DimensionScore, Insight, MaturityTier, ReportInput


def _sample_payload() -> dict:
    return {
        'summary': {'overall_score': 64, 'maturity': 'emerging', 'completed_at': '2026-01-15T10:00:00Z'},
        'organization': {'name': 'جمعية البر', 'city': 'الرياض'},
        'dimensions': [
            {'dimension_name': 'الحوكمة', 'order_index': 1, 'raw_score': 12, 'max_score': 20, 'percentage': 99},
        ],
        'strengths': ['نص حر'],
        'opportunities': [{'text': 'فرصة', 'percentage': 30}],
    }


class TestDimensionScore:
    def test_percentage_is_derived(self):
        dimension = DimensionScore(dimension_name='x', order_index=0, raw_score=12, max_score=20)
        assert dimension.percentage == pytest.approx(60.0)

    def test_incoming_percentage_is_ignored(self):
        report = ReportInput.model_validate(_sample_payload())
        assert report.dimensions[0].percentage == pytest.approx(60.0)

    def test_clamped(self):
        assert DimensionScore(dimension_name='x', order_index=0, raw_score=30, max_score=20).percentage == 100.0
        assert DimensionScore(dimension_name='x', order_index=0, raw_score=5, max_score=0).percentage == 0.0


class TestReportInput:
    def test_plain_strings_become_insights(self):
        report = ReportInput.model_validate(_sample_payload())
        assert report.strengths == (Insight(text='نص حر'),)
        assert report.opportunities[0].percentage == 30
        assert report.recommendations == ()
        assert report.summary.maturity is MaturityTier.emerging

    def test_frozen(self):
        report = ReportInput.model_validate(_sample_payload())
        with pytest.raises(ValidationError):
            report.strengths = ()

    def test_from_scores(self):
        summary = AssessmentSummary(overall_score=70, maturity=MaturityTier.emerging)
        dimensions = [
            DimensionScore(dimension_name='أ', order_index=0, raw_score=8, max_score=10),
            DimensionScore(dimension_name='ب', order_index=1, raw_score=3, max_score=10),
        ]
        report = ReportInput.from_scores(summary, dimensions)
        assert len(report.strengths) == 1
        assert report.strengths[0].percentage == pytest.approx(80.0)
        assert report.opportunities[0].dimension_name == 'ب'
        assert report.organization is None
