import json
import logging
from typing import Dict, List, Mapping, Optional

from .schemas import MetricDefinition, MetricDisplay, MetricKey, ScoringRule, UnitFormat

logger = logging.getLogger(__name__)

K = MetricKey
MM, DEG, PCT, RATIO = UnitFormat.mm, UnitFormat.deg, UnitFormat.percent, UnitFormat.ratio

_THIRDS = ("forehead", "noseTop", "noseBottom", "chin")
_EYE_CORNERS = ("leftEyeOuter", "leftEyeInner", "rightEyeOuter", "rightEyeInner")


def _d(key, title, unit, lo, hi, landmarks, **kw) -> MetricDefinition:
    return MetricDefinition(key=key, display_title=title, unit=unit,
                            ideal_min=lo, ideal_max=hi, landmarks=tuple(landmarks), **kw)


CATALOG: List[MetricDefinition] = [
    _d(K.interpupillaryDistance, "Interpupillary Distance (IPD)", MM, 58, 72,
       ("leftEye", "rightEye")),
    _d(K.intercanthalDistance, "Intercanthal Distance", MM, 28, 35,
       ("leftEyeInner", "rightEyeInner")),
    _d(K.biocularWidth, "Biocular Width", MM, 85, 105,
       ("leftEyeOuter", "rightEyeOuter")),
    _d(K.canthalIndex, "Canthal Index", PCT, 45, 55,
       ("leftEyeInner", "rightEyeInner", "leftEye", "rightEye")),
    _d(K.palpebralFissureLength, "Palpebral Fissure Length", MM, 8, 12,
       ("leftEyeTop", "leftEyeBottom", "rightEyeTop", "rightEyeBottom")),
    _d(K.topThird, "Top Third (Forehead)", PCT, 30, 35, _THIRDS),
    _d(K.middleThird, "Middle Third (Midface)", PCT, 30, 35, _THIRDS),
    _d(K.lowerThird, "Lower Third Proportion", PCT, 32, 37, _THIRDS),
    _d(K.midfaceRatio, "Midface Ratio", PCT, 30, 35,
       ("faceCenter", "mouthTop", "forehead", "chin")),
    _d(K.lowerThirdToMidfaceRatio, "Lower Third to Midface Ratio", RATIO, 0.95, 1.05,
       ("noseBottom", "chin", "noseTop", "noseBottom")),
    _d(K.totalFacialWidthToHeightRatio, "Total Facial Width to Height Ratio", RATIO, 1.12, 1.57,
       ("leftCheekbone", "rightCheekbone", "noseTop", "chin")),
    _d(K.facialWidthToHeightRatio, "Facial Width to Height Ratio (FWHR)", RATIO, 1.75, 1.95,
       ("leftCheekbone", "rightCheekbone", "leftBrowInner", "rightBrowInner", "upperLipTop")),
    _d(K.bigonialToBizygomaticRatio, "Bigonial to Bizygomatic Ratio", PCT, 70, 85,
       ("jawLeft", "jawRight", "leftCheekbone", "rightCheekbone")),
    _d(K.jawToCheekboneRatio, "Jaw to Cheekbone Ratio", RATIO, 0.75, 0.90,
       ("mandibleLeft", "mandibleRight", "leftCheekbone", "rightCheekbone")),
    _d(K.templeToJawRatio, "Temple to Jaw Ratio", RATIO, 0.85, 1.05,
       ("leftTemple", "rightTemple", "jawLeft", "jawRight")),
    _d(K.eyeSeparationRatio, "Eye Separation Ratio", PCT, 40, 50,
       ("leftEye", "rightEye", "leftCheekbone", "rightCheekbone")),
    _d(K.eyeToEyeSeparation, "Eye to Eye Separation", RATIO, 0.88, 0.95, _EYE_CORNERS),
    _d(K.noseToMouthRatio, "Nose to Mouth Width Ratio", RATIO, 1.20, 1.35,
       ("leftMouth", "rightMouth", "noseLeft", "noseRight"),
       scoring_rule=ScoringRule.nose_to_mouth_peak_plateau, peak=1.30),
    _d(K.mouthToNoseWidthRatio, "Mouth to Nose Width Ratio (Outer)", RATIO, 1.40, 1.60,
       ("leftMouth", "rightMouth", "alarLeft", "alarRight")),
    _d(K.nasalHeightToWidthRatio, "Nasal Height to Width Ratio", RATIO, 1.00, 1.20,
       ("noseTop", "noseBottom", "noseLeft", "noseRight")),
    _d(K.nasalIndexRatio, "Nasal Index", PCT, 60, 85,
       ("alarLeft", "alarRight", "noseTop", "noseBottom")),
    _d(K.lipThicknessRatio, "Lip Thickness Ratio", RATIO, 0.80, 1.20,
       ("upperLipTop", "mouthTop", "mouthBottom", "lowerLipBottom")),
    _d(K.chinToPhiltrumRatio, "Chin to Philtrum Ratio", RATIO, 1.80, 2.20,
       ("lowerLipBottom", "chin", "noseBottom", "upperLipTop")),
    _d(K.gonialAngle, "Gonial Angle (Jaw Angle)", DEG, 120, 130,
       ("chin", "jawAngle", "forehead"), requires_profile=True),
    _d(K.cantalTilt, "Canthal Tilt", DEG, 5, 8,
       ("leftEyeOuter", "rightEyeOuter"), absolute=True),
    _d(K.eyebrowTilt, "Eyebrow Tilt", DEG, 2, 5,
       ("leftBrowInner", "leftBrowOuter", "rightBrowInner", "rightBrowOuter"), absolute=True),
    _d(K.yawSymmetry, "Yaw Symmetry", PCT, 95, 100,
       ("leftCheekbone", "noseTip", "rightCheekbone")),
    _d(K.nasalProjection, "Nasal Projection", MM, 12, 18,
       ("noseTop", "noseTip"), requires_profile=True),
    _d(K.nasalTipAngle, "Nasal Tip Angle", DEG, 95, 115,
       ("noseTop", "noseTip", "mouthTop"), requires_profile=True),
    _d(K.nasofrontalAngle, "Nasofrontal Angle", DEG, 115, 135,
       ("forehead", "noseTop", "noseTip"), requires_profile=True),
    _d(K.nasolabialAngle, "Nasolabial Angle", DEG, 90, 120,
       ("noseTip", "noseBottom", "mouthTop"), requires_profile=True),
    _d(K.facialConvexityGlabella, "Facial Convexity (Glabella)", DEG, 165, 175,
       ("glabella", "noseTip", "chin"), requires_profile=True),
    _d(K.facialConvexityNasion, "Facial Convexity (Nasion)", DEG, 160, 170,
       ("noseTop", "noseTip", "chin"), requires_profile=True),
    _d(K.totalFacialConvexity, "Total Facial Convexity", DEG, 165, 175,
       ("glabella", "noseTop", "noseTip", "chin"), requires_profile=True),
    _d(K.faceWidthToHeightRatio, "Face Width to Height at Eye Level", RATIO, 1.58, 2.36,
       ("leftTemple", "rightTemple", "forehead", "noseTop")),
]

DESCRIPTIONS: Dict[MetricKey, str] = {
    K.interpupillaryDistance: "The distance between the centers of your pupils. Average adult IPD is around 63mm.",
    K.intercanthalDistance: "The distance between the inner corners of your eyes. Affects the perception of eye width.",
    K.biocularWidth: "The distance between the outer corners of your eyes, the horizontal span of the eyes.",
    K.canthalIndex: "Intercanthal distance as a percentage of interpupillary distance.",
    K.palpebralFissureLength: "The height of the eye opening, which shapes overall eye appearance.",
    K.topThird: "Forehead height as a percentage of total face height.",
    K.middleThird: "Brow line to nose bottom as a percentage of total face height.",
    K.lowerThird: "Nose bottom to chin as a percentage of total face height.",
    K.midfaceRatio: "Eye line to mouth as a percentage of forehead-to-chin height.",
    K.lowerThirdToMidfaceRatio: "Lower third height compared to midface height.",
    K.totalFacialWidthToHeightRatio: "Widest part of the face compared to nasion-to-chin height.",
    K.facialWidthToHeightRatio: "Cheekbone width compared to brow-to-upper-lip height.",
    K.bigonialToBizygomaticRatio: "Jaw width as a percentage of cheekbone width. Lower values read as more tapered.",
    K.jawToCheekboneRatio: "Lower jaw width compared to cheekbone width.",
    K.templeToJawRatio: "Temple width compared to jaw width.",
    K.eyeSeparationRatio: "Pupil distance as a percentage of cheekbone width.",
    K.eyeToEyeSeparation: "Inner eye gap compared to the average eye length.",
    K.noseToMouthRatio: "Mouth width compared to nose width.",
    K.mouthToNoseWidthRatio: "Mouth width compared to outer alar width.",
    K.nasalHeightToWidthRatio: "Nose length compared to nose width from the front.",
    K.nasalIndexRatio: "Alar width as a percentage of nose length.",
    K.lipThicknessRatio: "Upper lip thickness compared to lower lip thickness.",
    K.chinToPhiltrumRatio: "Chin height compared to philtrum height.",
    K.gonialAngle: "The jaw angle measured at the mandible corner against a vertical reference.",
    K.cantalTilt: "Angle of the line through the outer eye corners relative to horizontal.",
    K.eyebrowTilt: "Rise of the eyebrows from their inner to outer ends.",
    K.yawSymmetry: "How evenly the nose tip sits between the cheekbones.",
    K.nasalProjection: "How far the nose tip extends forward from the nasion in profile.",
    K.nasalTipAngle: "Angle at the nose tip between the bridge and the upper lip.",
    K.nasofrontalAngle: "Transition from forehead to nose bridge.",
    K.nasolabialAngle: "Angle between the columella and the upper lip.",
    K.facialConvexityGlabella: "Glabella to nose tip to chin profile angle.",
    K.facialConvexityNasion: "Nasion to nose tip to chin profile angle.",
    K.totalFacialConvexity: "Average of the glabella and nasion convexity angles.",
    K.faceWidthToHeightRatio: "Face width at eye level compared to forehead height.",
}


def _fmt_bound(v: float, unit: UnitFormat) -> str:
    return f"{v:.2f}" if unit is UnitFormat.ratio else f"{v:g}"


def ideal_label(defn: MetricDefinition) -> str:
    lo, hi = _fmt_bound(defn.ideal_min, defn.unit), _fmt_bound(defn.ideal_max, defn.unit)
    return f"{lo}-{hi}{defn.unit.suffix}"


def display_table(catalog: Optional[List[MetricDefinition]] = None) -> List[MetricDisplay]:
    return [
        MetricDisplay(key=d.key, title=d.display_title, ideal=ideal_label(d),
                      description=DESCRIPTIONS[d.key], requires_profile=d.requires_profile)
        for d in (catalog or CATALOG)
    ]


def with_overrides(overrides: Mapping[str, Mapping[str, float]],
                   catalog: Optional[List[MetricDefinition]] = None) -> List[MetricDefinition]:
    """Return a copy of the catalog with ideal bounds / weights replaced per key."""
    base = catalog or CATALOG
    known = {d.key.value for d in base}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown metric keys in overrides: {sorted(unknown)}")
    allowed = {"ideal_min", "ideal_max", "peak", "weight"}
    out = []
    for d in base:
        patch = dict(overrides.get(d.key.value, {}))
        bad = set(patch) - allowed
        if bad:
            raise ValueError(f"{d.key.value}: cannot override {sorted(bad)}")
        if patch:
            # re-validate so bad bands are rejected
            d = MetricDefinition.model_validate({**d.model_dump(), **patch})
        out.append(d)
    return out


def load_catalog(path: Optional[str] = None) -> List[MetricDefinition]:
    if not path:
        return CATALOG
    with open(path, encoding="utf-8") as f:
        overrides = json.load(f)
    logger.info("Applying ideal-range overrides for %d metrics from %s", len(overrides), path)
    return with_overrides(overrides)


def _check_exhaustive():
    missing = set(MetricKey) - {d.key for d in CATALOG}
    if missing or set(DESCRIPTIONS) != set(MetricKey):
        raise RuntimeError(f"Catalog out of sync with MetricKey: {sorted(m.value for m in missing)}")


_check_exhaustive()
