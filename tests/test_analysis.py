"""End-to-end tests for compute_analysis and the no-face path."""

import pytest
from pydantic import ValidationError

from conftest import FRONT, PROFILE, make_front, make_mesh, make_profile
from facemetrics.analysis import analyze_points, compute_analysis, not_detected_result
from facemetrics.catalog import CATALOG
from facemetrics.errors import DegenerateGeometryError, MissingLandmarkError
from facemetrics.schemas import MetricKey
from facemetrics.scoring import BOTTOM_TIER

PROFILE_KEYS = [d.key for d in CATALOG if d.requires_profile]
FRONT_KEYS = [d.key for d in CATALOG if not d.requires_profile]


def test_thirds_sum_to_100(front):
    m = compute_analysis(front).metrics
    total = sum(m[k].raw_value for k in (MetricKey.topThird, MetricKey.middleThird, MetricKey.lowerThird))
    assert total == pytest.approx(100.0)


@pytest.mark.parametrize("forehead,chin", [((0.5, 0.05), (0.5, 0.95)), ((0.45, 0.2), (0.52, 0.7))])
def test_thirds_sum_to_100_other_faces(forehead, chin):
    m = compute_analysis(make_front(forehead=forehead, chin=chin)).metrics
    parts = [float(m[k].formatted_value.rstrip("%"))
             for k in (MetricKey.topThird, MetricKey.middleThird, MetricKey.lowerThird)]
    assert sum(parts) == pytest.approx(100.0, abs=0.15)


def test_full_analysis(front, profile):
    result = compute_analysis(front, profile)
    assert result.face_detected is True
    assert list(result.metrics) == [d.key for d in CATALOG]
    assert all(0.1 <= r.score <= 10.0 for r in result.metrics.values())
    assert result.profile_landmarks is profile
    assert 0.1 <= result.overall_score <= 10.0
    assert result.tier.rank >= 0


def test_missing_profile_degrades(front):
    result = compute_analysis(front, None)
    for key in PROFILE_KEYS:
        assert result.metrics[key].score == 0
        assert result.metrics[key].raw_value == 0.0
    for key in FRONT_KEYS:
        assert result.metrics[key].score >= 0.1
    assert result.metrics[MetricKey.gonialAngle].formatted_value == "0.0°"
    assert result.metrics[MetricKey.nasalProjection].formatted_value == "0.0mm"


def test_missing_profile_lowers_overall(front):
    front_only = compute_analysis(front, None)
    scores = [r.score for r in front_only.metrics.values()]
    assert len(scores) == len(CATALOG)
    assert front_only.overall_score == round(sum(scores) / len(scores), 1)
    front_mean = sum(front_only.metrics[k].score for k in FRONT_KEYS) / len(FRONT_KEYS)
    assert front_only.overall_score < round(front_mean, 1)


def test_not_detected_sentinel():
    result = not_detected_result()
    assert result.face_detected is False
    assert result.landmarks is None
    assert result.overall_score == 0
    assert result.tier == BOTTOM_TIER
    assert list(result.metrics) == [d.key for d in CATALOG]
    assert all(r.score == 0 for r in result.metrics.values())
    assert result.metrics[MetricKey.gonialAngle].formatted_value == "0.0°"
    assert result.metrics[MetricKey.noseToMouthRatio].formatted_value == "0.00"
    assert result.metrics[MetricKey.topThird].formatted_value == "0.0%"
    assert result.metrics[MetricKey.interpupillaryDistance].formatted_value == "0.0mm"


def test_interpupillary_worked_example():
    front = make_front(leftEye=(0.40, 0.40), rightEye=(0.60, 0.40))
    ipd = compute_analysis(front).metrics[MetricKey.interpupillaryDistance]
    assert ipd.raw_value == pytest.approx(64.0)
    assert ipd.formatted_value == "64.0mm"
    assert ipd.score == 10.0


def test_mm_scale_is_configurable():
    front = make_front(leftEye=(0.40, 0.40), rightEye=(0.60, 0.40))
    ipd = compute_analysis(front, mm_per_unit=100.0).metrics[MetricKey.interpupillaryDistance]
    assert ipd.raw_value == pytest.approx(20.0)
    assert ipd.score < 10.0


def test_gonial_angle_uses_vertical_reference(front, profile):
    g = compute_analysis(front, profile).metrics[MetricKey.gonialAngle]
    assert g.raw_value == pytest.approx(122.6, abs=0.1)
    assert g.score == 10.0


def test_convexity_angles_at_nose_tip(front, profile):
    m = compute_analysis(front, profile).metrics
    assert m[MetricKey.facialConvexityGlabella].raw_value == pytest.approx(132.46, abs=0.05)
    assert m[MetricKey.facialConvexityNasion].raw_value == pytest.approx(122.14, abs=0.05)
    assert m[MetricKey.totalFacialConvexity].raw_value == pytest.approx(127.30, abs=0.05)


def test_nasal_projection_is_nasion_to_tip_distance(front, profile):
    proj = compute_analysis(front, profile).metrics[MetricKey.nasalProjection]
    assert proj.raw_value == pytest.approx(72.97, abs=0.01)
    scaled = compute_analysis(front, profile, mm_per_unit=100.0).metrics[MetricKey.nasalProjection]
    assert scaled.raw_value == pytest.approx(22.80, abs=0.01)


def test_missing_landmark_names_metric(front):
    points = {k: v for k, v in front.points.items() if k != "chin"}
    broken = front.model_copy(update={"points": points})
    with pytest.raises(MissingLandmarkError) as exc:
        compute_analysis(broken)
    assert exc.value.landmark == "chin"
    assert exc.value.metric == "topThird"
    assert "chin" in str(exc.value) and "topThird" in str(exc.value)


def test_missing_profile_landmark(front):
    profile = make_profile()
    points = {k: v for k, v in profile.points.items() if k != "jawAngle"}
    with pytest.raises(MissingLandmarkError, match="jawAngle"):
        compute_analysis(front, profile.model_copy(update={"points": points}))


def test_degenerate_angle_raises(front):
    profile = make_profile(jawAngle=PROFILE["chin"])
    with pytest.raises(DegenerateGeometryError):
        compute_analysis(front, profile)


def test_result_is_immutable(front):
    result = compute_analysis(front)
    with pytest.raises(ValidationError):
        result.overall_score = 10.0


def test_analyze_points_no_face():
    assert analyze_points(None).face_detected is False
    assert analyze_points([]).face_detected is False


def test_analyze_points_bad_front_is_not_detected():
    result = analyze_points([(0.5, 0.5)] * 10)
    assert result.face_detected is False
    assert result.tier == BOTTOM_TIER


def test_analyze_points_full(front_mesh, profile_mesh):
    result = analyze_points(front_mesh, profile_mesh)
    assert result.face_detected is True
    assert result.landmarks.is_lateral_view is False
    assert result.profile_landmarks.is_lateral_view is True
    assert all(r.score > 0 for r in result.metrics.values())


def test_analyze_points_bad_profile_degrades(front_mesh):
    bad_profile = make_mesh({**PROFILE, "chin": (2.0, 0.9)})
    result = analyze_points(front_mesh, bad_profile)
    assert result.face_detected is True
    assert result.profile_landmarks is None
    assert all(result.metrics[k].score == 0 for k in PROFILE_KEYS)


def test_independent_runs_do_not_share_state(front):
    a = compute_analysis(front)
    b = compute_analysis(make_front(chin=(0.5, 0.95)))
    assert a.metrics[MetricKey.lowerThird].raw_value != b.metrics[MetricKey.lowerThird].raw_value
    assert a == compute_analysis(front)
