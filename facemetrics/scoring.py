import math
from typing import Iterable, List, Mapping, Optional, Tuple

from .schemas import MetricDefinition, MetricKey, MetricResult, ScoringRule, TierRating

MAX_SCORE = 10.0
MIN_SCORE = 0.1

# nose-to-mouth peak plateau
PLATEAU_FLOOR = 8.5
UNDERSHOOT_RATE = 2.0
OVERSHOOT_RATE = 0.8


def _finish(score: float) -> float:
    return round(max(MIN_SCORE, min(MAX_SCORE, score)), 1)


def score_standard(value: float, ideal_min: float, ideal_max: float) -> float:
    """10 inside [ideal_min, ideal_max], exponential decay outside.

    The deviation is normalized by half the width of the ideal band, so a
    metric one half-band outside its range scores 10 * e^-0.5.
    """
    if ideal_min <= value <= ideal_max:
        return MAX_SCORE
    deviation = ideal_min - value if value < ideal_min else value - ideal_max
    normalized = deviation / ((ideal_max - ideal_min) * 0.5)
    return _finish(MAX_SCORE * math.exp(-0.5 * normalized))


def score_peak_plateau(value: float, ideal_min: float, peak: float, ideal_max: float) -> float:
    """Asymmetric rule: flat 10 up to the peak, linear fade to 8.5 at ideal_max,
    fast decay below the band and slower decay from the 8.5 ceiling above it."""
    if ideal_min <= value <= peak:
        return MAX_SCORE
    if peak < value <= ideal_max:
        fade = (value - peak) / (ideal_max - peak) if ideal_max > peak else 1.0
        return _finish(MAX_SCORE - fade * (MAX_SCORE - PLATEAU_FLOOR))
    if value < ideal_min:
        return _finish(MAX_SCORE * math.exp(-UNDERSHOOT_RATE * (ideal_min - value)))
    return _finish(PLATEAU_FLOOR * math.exp(-OVERSHOOT_RATE * (value - ideal_max)))


def score_metric(defn: MetricDefinition, value: float) -> float:
    v = abs(value) if defn.absolute else value
    if defn.scoring_rule is ScoringRule.nose_to_mouth_peak_plateau:
        return score_peak_plateau(v, defn.ideal_min, defn.peak, defn.ideal_max)
    return score_standard(v, defn.ideal_min, defn.ideal_max)


def overall_score(results: Mapping[MetricKey, MetricResult],
                  catalog: Iterable[MetricDefinition]) -> float:
    """Weighted mean over every entry in `results`, rounded to one decimal.

    Profile-absent entries keep their score of 0 and pull the mean down.
    """
    weights = {d.key: d.weight for d in catalog}
    total = weight_sum = 0.0
    for key, r in results.items():
        w = weights.get(key, 1.0)
        total += w * r.score
        weight_sum += w
    if weight_sum == 0.0:
        return 0.0
    return round(total / weight_sum, 1)


# ordered high to low; the last band catches everything
TIER_BANDS: List[Tuple[Optional[float], TierRating]] = [
    (10.0, TierRating(rank=8, tier_label="Apex", percentile_label="Top 0.0001%",
                      description="Perfect facial harmony. Exceptional in every metric.")),
    (9.0, TierRating(rank=7, tier_label="Elite", percentile_label="Top 1%",
                     description="Elite facial aesthetics. Outstanding proportions.")),
    (8.5, TierRating(rank=6, tier_label="Excellent", percentile_label="Top 5%",
                     description="Excellent facial structure with strong appeal.")),
    (7.5, TierRating(rank=5, tier_label="High", percentile_label="Top 20%",
                     description="Above average aesthetics.")),
    (6.0, TierRating(rank=4, tier_label="Average", percentile_label="50th Percentile",
                     description="Average facial proportions.")),
    (5.0, TierRating(rank=3, tier_label="Below Average", percentile_label="30th Percentile",
                     description="Below average proportions in several areas.")),
    (4.0, TierRating(rank=2, tier_label="Low", percentile_label="10th Percentile",
                     description="Significant areas for improvement.")),
    (2.0, TierRating(rank=1, tier_label="Very Low", percentile_label="2nd Percentile",
                     description="Major proportion differences from the ideal ranges.")),
    (None, TierRating(rank=0, tier_label="Bottom", percentile_label="Bottom 1%",
                      description="Most measurements fall far outside the ideal ranges.")),
]

BOTTOM_TIER = TIER_BANDS[-1][1]


def classify_tier(overall: float) -> TierRating:
    for threshold, tier in TIER_BANDS:
        if threshold is None or overall >= threshold:
            return tier
