import logging
import math
from typing import Callable, Dict, Iterable, Optional

from .geometry import angle, distance, line_tilt, midpoint, ratio
from .schemas import LandmarkSet, MetricDefinition, MetricKey, MetricResult, Point2D
from .scoring import score_metric

logger = logging.getLogger(__name__)

K = MetricKey
Points = Dict[str, Point2D]
Formula = Callable[[Points, float], float]


def _thirds(p: Points):
    top = distance(p["forehead"], p["noseTop"])
    middle = distance(p["noseTop"], p["noseBottom"])
    lower = distance(p["noseBottom"], p["chin"])
    return top, middle, lower, top + middle + lower


def _third_percent(which: int) -> Formula:
    def f(p: Points, mm: float) -> float:
        parts = _thirds(p)
        return ratio(parts[which], parts[3], "total face height") * 100.0
    return f


def _bizygomatic(p: Points) -> float:
    return distance(p["leftCheekbone"], p["rightCheekbone"])


def _eye_length(p: Points) -> float:
    return (distance(p["leftEyeOuter"], p["leftEyeInner"]) +
            distance(p["rightEyeOuter"], p["rightEyeInner"])) / 2.0


def _canthal_tilt(p: Points, mm: float) -> float:
    return line_tilt(p["leftEyeOuter"], p["rightEyeOuter"])


def _brow_rise(inner: Point2D, outer: Point2D) -> float:
    # image y grows downward, so a raised outer end has the smaller y
    return math.degrees(math.atan2(inner.y - outer.y, abs(outer.x - inner.x)))


def _eyebrow_tilt(p: Points, mm: float) -> float:
    return (_brow_rise(p["leftBrowInner"], p["leftBrowOuter"]) +
            _brow_rise(p["rightBrowInner"], p["rightBrowOuter"])) / 2.0


def _yaw_symmetry(p: Points, mm: float) -> float:
    dl = abs(p["leftCheekbone"].x - p["noseTip"].x)
    dr = abs(p["rightCheekbone"].x - p["noseTip"].x)
    return (1.0 - ratio(abs(dl - dr), max(dl, dr), "cheekbone offset")) * 100.0


def _gonial(p: Points, mm: float) -> float:
    jaw = p["jawAngle"]
    # vertical reference approximating the ramus line
    ramus_ref = Point2D(x=jaw.x, y=p["forehead"].y)
    return angle(p["chin"], jaw, ramus_ref)


def _convexity_glabella(p: Points, mm: float) -> float:
    return angle(p["glabella"], p["noseTip"], p["chin"])


def _convexity_nasion(p: Points, mm: float) -> float:
    return angle(p["noseTop"], p["noseTip"], p["chin"])


FORMULAS: Dict[MetricKey, Formula] = {
    K.interpupillaryDistance: lambda p, mm: distance(p["leftEye"], p["rightEye"]) * mm,
    K.intercanthalDistance: lambda p, mm: distance(p["leftEyeInner"], p["rightEyeInner"]) * mm,
    K.biocularWidth: lambda p, mm: distance(p["leftEyeOuter"], p["rightEyeOuter"]) * mm,
    K.canthalIndex: lambda p, mm: ratio(distance(p["leftEyeInner"], p["rightEyeInner"]),
                                        distance(p["leftEye"], p["rightEye"]),
                                        "interpupillary distance") * 100.0,
    K.palpebralFissureLength: lambda p, mm: (distance(p["leftEyeTop"], p["leftEyeBottom"]) +
                                             distance(p["rightEyeTop"], p["rightEyeBottom"])) / 2.0 * mm,
    K.topThird: _third_percent(0),
    K.middleThird: _third_percent(1),
    K.lowerThird: _third_percent(2),
    K.midfaceRatio: lambda p, mm: ratio(distance(p["faceCenter"], p["mouthTop"]),
                                        distance(p["forehead"], p["chin"]), "face height") * 100.0,
    K.lowerThirdToMidfaceRatio: lambda p, mm: ratio(distance(p["noseBottom"], p["chin"]),
                                                    distance(p["noseTop"], p["noseBottom"]), "middle third"),
    K.totalFacialWidthToHeightRatio: lambda p, mm: ratio(_bizygomatic(p), distance(p["noseTop"], p["chin"]),
                                                         "nasion-chin height"),
    K.facialWidthToHeightRatio: lambda p, mm: ratio(
        _bizygomatic(p),
        distance(midpoint(p["leftBrowInner"], p["rightBrowInner"]), p["upperLipTop"]),
        "brow-lip height"),
    K.bigonialToBizygomaticRatio: lambda p, mm: ratio(distance(p["jawLeft"], p["jawRight"]),
                                                      _bizygomatic(p), "bizygomatic width") * 100.0,
    K.jawToCheekboneRatio: lambda p, mm: ratio(distance(p["mandibleLeft"], p["mandibleRight"]),
                                               _bizygomatic(p), "bizygomatic width"),
    K.templeToJawRatio: lambda p, mm: ratio(distance(p["leftTemple"], p["rightTemple"]),
                                            distance(p["jawLeft"], p["jawRight"]), "bigonial width"),
    K.eyeSeparationRatio: lambda p, mm: ratio(distance(p["leftEye"], p["rightEye"]),
                                              _bizygomatic(p), "bizygomatic width") * 100.0,
    K.eyeToEyeSeparation: lambda p, mm: ratio(distance(p["leftEyeInner"], p["rightEyeInner"]),
                                              _eye_length(p), "eye length"),
    K.noseToMouthRatio: lambda p, mm: ratio(distance(p["leftMouth"], p["rightMouth"]),
                                            distance(p["noseLeft"], p["noseRight"]), "nose width"),
    K.mouthToNoseWidthRatio: lambda p, mm: ratio(distance(p["leftMouth"], p["rightMouth"]),
                                                 distance(p["alarLeft"], p["alarRight"]), "alar width"),
    K.nasalHeightToWidthRatio: lambda p, mm: ratio(distance(p["noseTop"], p["noseBottom"]),
                                                   distance(p["noseLeft"], p["noseRight"]), "nose width"),
    K.nasalIndexRatio: lambda p, mm: ratio(distance(p["alarLeft"], p["alarRight"]),
                                           distance(p["noseTop"], p["noseBottom"]), "nose height") * 100.0,
    K.lipThicknessRatio: lambda p, mm: ratio(distance(p["upperLipTop"], p["mouthTop"]),
                                             distance(p["mouthBottom"], p["lowerLipBottom"]), "lower lip"),
    K.chinToPhiltrumRatio: lambda p, mm: ratio(distance(p["lowerLipBottom"], p["chin"]),
                                               distance(p["noseBottom"], p["upperLipTop"]), "philtrum"),
    K.gonialAngle: _gonial,
    K.cantalTilt: _canthal_tilt,
    K.eyebrowTilt: _eyebrow_tilt,
    K.yawSymmetry: _yaw_symmetry,
    K.nasalProjection: lambda p, mm: distance(p["noseTop"], p["noseTip"]) * mm,
    K.nasalTipAngle: lambda p, mm: angle(p["noseTop"], p["noseTip"], p["mouthTop"]),
    K.nasofrontalAngle: lambda p, mm: angle(p["forehead"], p["noseTop"], p["noseTip"]),
    K.nasolabialAngle: lambda p, mm: angle(p["noseTip"], p["noseBottom"], p["mouthTop"]),
    K.facialConvexityGlabella: _convexity_glabella,
    K.facialConvexityNasion: _convexity_nasion,
    K.totalFacialConvexity: lambda p, mm: (_convexity_glabella(p, mm) + _convexity_nasion(p, mm)) / 2.0,
    K.faceWidthToHeightRatio: lambda p, mm: ratio(distance(p["leftTemple"], p["rightTemple"]),
                                                  distance(p["forehead"], p["noseTop"]), "forehead height"),
}

_missing = set(MetricKey) - set(FORMULAS)
if _missing:
    raise RuntimeError(f"No formula for metrics: {sorted(m.value for m in _missing)}")


def _gather(defn: MetricDefinition, lm: LandmarkSet) -> Points:
    return {role: lm.require(role, defn.key.value) for role in defn.landmarks}


def zero_result(defn: MetricDefinition) -> MetricResult:
    """Sentinel entry: metric not computable for this run."""
    return MetricResult(key=defn.key, raw_value=0.0, formatted_value=defn.unit.format(0.0), score=0.0)


def compute_metric(defn: MetricDefinition, lm: LandmarkSet, mm_per_unit: float) -> MetricResult:
    value = FORMULAS[defn.key](_gather(defn, lm), mm_per_unit)
    return MetricResult(key=defn.key, raw_value=value,
                        formatted_value=defn.unit.format(value),
                        score=score_metric(defn, value))


def compute_metrics(catalog: Iterable[MetricDefinition], front: LandmarkSet,
                    profile: Optional[LandmarkSet], mm_per_unit: float) -> Dict[MetricKey, MetricResult]:
    results: Dict[MetricKey, MetricResult] = {}
    skipped = []
    for defn in catalog:
        if defn.requires_profile:
            if profile is None:
                results[defn.key] = zero_result(defn)
                skipped.append(defn.key.value)
                continue
            results[defn.key] = compute_metric(defn, profile, mm_per_unit)
        else:
            results[defn.key] = compute_metric(defn, front, mm_per_unit)
    if skipped:
        logger.info("No profile capture; %d profile metrics left unscored", len(skipped))
    return results
