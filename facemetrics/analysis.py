import logging
from typing import Any, List, Optional, Sequence

from .catalog import CATALOG
from .config import MM_PER_UNIT
from .errors import LandmarkExtractionError
from .landmarks import extract_landmarks
from .metrics import compute_metrics, zero_result
from .schemas import AnalysisResult, LandmarkSet, MetricDefinition
from .scoring import BOTTOM_TIER, classify_tier, overall_score

logger = logging.getLogger(__name__)


def not_detected_result(catalog: Optional[List[MetricDefinition]] = None) -> AnalysisResult:
    """Zeroed result used when no face was found. Never raises."""
    catalog = catalog or CATALOG
    return AnalysisResult(
        face_detected=False,
        landmarks=None,
        metrics={d.key: zero_result(d) for d in catalog},
        overall_score=0.0,
        tier=BOTTOM_TIER,
    )


def compute_analysis(front: LandmarkSet, profile: Optional[LandmarkSet] = None,
                     catalog: Optional[List[MetricDefinition]] = None,
                     mm_per_unit: Optional[float] = None) -> AnalysisResult:
    """Score one front capture and an optional profile capture.

    `front` must come from a detected face; callers with no detection use
    not_detected_result(). MissingLandmarkError and DegenerateGeometryError
    propagate to the caller and no partial result is returned.
    """
    catalog = catalog or CATALOG
    mm = MM_PER_UNIT if mm_per_unit is None else mm_per_unit
    metrics = compute_metrics(catalog, front, profile, mm)
    overall = overall_score(metrics, catalog)
    logger.debug("Overall score %.1f over %d metrics", overall, len(metrics))
    return AnalysisResult(
        face_detected=True,
        landmarks=front,
        profile_landmarks=profile,
        metrics=metrics,
        overall_score=overall,
        tier=classify_tier(overall),
    )


def analyze_points(front_points: Optional[Sequence[Any]],
                   profile_points: Optional[Sequence[Any]] = None,
                   catalog: Optional[List[MetricDefinition]] = None,
                   mm_per_unit: Optional[float] = None) -> AnalysisResult:
    """Detector output to result: handles the no-face path and extraction failures."""
    if not front_points:
        logger.info("No face detected in front capture")
        return not_detected_result(catalog)
    try:
        front = extract_landmarks(front_points, is_lateral_view=False)
    except LandmarkExtractionError as e:
        logger.info("Front landmark extraction failed: %s", e)
        return not_detected_result(catalog)

    profile = None
    if profile_points:
        try:
            profile = extract_landmarks(profile_points, is_lateral_view=True)
        except LandmarkExtractionError as e:
            logger.info("Profile landmark extraction failed, scoring front only: %s", e)
    return compute_analysis(front, profile, catalog=catalog, mm_per_unit=mm_per_unit)
