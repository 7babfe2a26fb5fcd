"""The one percentage -> maturity tier mapping used by every report section."""

from __future__ import annotations

import math
from dataclasses import dataclass

from nusharek.types import MaturityTier


@dataclass(frozen=True)
class TierBand:
    tier: MaturityTier
    label_ar: str
    label_en: str
    color: str
    # Half-open [lower, upper); the last band also includes its upper bound
    lower: float
    upper: float

    def contains(self, percentage: float) -> bool:
        if self.upper >= 100.0:
            return self.lower <= percentage <= self.upper
        return self.lower <= percentage < self.upper


TIER_BANDS: tuple[TierBand, ...] = (
    TierBand(MaturityTier.basic, 'أساسي', 'Basic', '#F97316', 0.0, 50.0),
    TierBand(MaturityTier.emerging, 'ناشئ', 'Emerging', '#F59E0B', 50.0, 75.0),
    TierBand(MaturityTier.ideal, 'مثالي', 'Ideal', '#14B8A6', 75.0, 100.0),
)

_BY_TIER = {band.tier: band for band in TIER_BANDS}


def tier_of(percentage: float) -> MaturityTier:
    """Classify an exact percentage. Values outside [0, 100] are clamped."""
    value = max(0.0, min(100.0, float(percentage)))
    for band in TIER_BANDS:
        if band.contains(value):
            return band.tier
    return TIER_BANDS[-1].tier


def band_for(tier: MaturityTier | str) -> TierBand:
    return _BY_TIER[MaturityTier(tier)]


def band_of(percentage: float) -> TierBand:
    return band_for(tier_of(percentage))


def rounded_percent(percentage: float) -> int:
    """Display rounding, half up. Never used for classification."""
    return int(math.floor(float(percentage) + 0.5))
