from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import MissingLandmarkError


class Point2D(BaseModel):
    # normalized image coordinates
    model_config = ConfigDict(frozen=True)
    x: float = Field(..., ge=0.0, le=1.0, allow_inf_nan=False)
    y: float = Field(..., ge=0.0, le=1.0, allow_inf_nan=False)


class LandmarkSet(BaseModel):
    model_config = ConfigDict(frozen=True)
    points: Dict[str, Point2D]
    is_lateral_view: bool = False

    def __contains__(self, role: str) -> bool:
        return role in self.points

    def require(self, role: str, metric: str) -> Point2D:
        try:
            return self.points[role]
        except KeyError:
            raise MissingLandmarkError(role, metric) from None


class MetricKey(str, Enum):
    interpupillaryDistance = "interpupillaryDistance"
    intercanthalDistance = "intercanthalDistance"
    biocularWidth = "biocularWidth"
    canthalIndex = "canthalIndex"
    palpebralFissureLength = "palpebralFissureLength"
    topThird = "topThird"
    middleThird = "middleThird"
    lowerThird = "lowerThird"
    midfaceRatio = "midfaceRatio"
    lowerThirdToMidfaceRatio = "lowerThirdToMidfaceRatio"
    totalFacialWidthToHeightRatio = "totalFacialWidthToHeightRatio"
    facialWidthToHeightRatio = "facialWidthToHeightRatio"
    bigonialToBizygomaticRatio = "bigonialToBizygomaticRatio"
    jawToCheekboneRatio = "jawToCheekboneRatio"
    templeToJawRatio = "templeToJawRatio"
    eyeSeparationRatio = "eyeSeparationRatio"
    eyeToEyeSeparation = "eyeToEyeSeparation"
    noseToMouthRatio = "noseToMouthRatio"
    mouthToNoseWidthRatio = "mouthToNoseWidthRatio"
    nasalHeightToWidthRatio = "nasalHeightToWidthRatio"
    nasalIndexRatio = "nasalIndexRatio"
    lipThicknessRatio = "lipThicknessRatio"
    chinToPhiltrumRatio = "chinToPhiltrumRatio"
    gonialAngle = "gonialAngle"
    cantalTilt = "cantalTilt"
    eyebrowTilt = "eyebrowTilt"
    yawSymmetry = "yawSymmetry"
    nasalProjection = "nasalProjection"
    nasalTipAngle = "nasalTipAngle"
    nasofrontalAngle = "nasofrontalAngle"
    nasolabialAngle = "nasolabialAngle"
    facialConvexityGlabella = "facialConvexityGlabella"
    facialConvexityNasion = "facialConvexityNasion"
    totalFacialConvexity = "totalFacialConvexity"
    faceWidthToHeightRatio = "faceWidthToHeightRatio"


class UnitFormat(str, Enum):
    mm = "mm"
    deg = "deg"
    percent = "percent"
    ratio = "ratio"

    def format(self, value: float) -> str:
        if self is UnitFormat.mm:
            return f"{value:.1f}mm"
        if self is UnitFormat.deg:
            return f"{value:.1f}°"
        if self is UnitFormat.percent:
            return f"{value:.1f}%"
        return f"{value:.2f}"

    @property
    def suffix(self) -> str:
        return {"mm": "mm", "deg": "°", "percent": "%", "ratio": "×"}[self.value]


class ScoringRule(str, Enum):
    standard_decay = "standard-decay"
    nose_to_mouth_peak_plateau = "nose-to-mouth-peak-plateau"


class MetricDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)
    key: MetricKey
    display_title: str
    unit: UnitFormat
    ideal_min: float
    ideal_max: float
    requires_profile: bool = False
    scoring_rule: ScoringRule = ScoringRule.standard_decay
    peak: Optional[float] = None
    # score the absolute value (signed angles)
    absolute: bool = False
    weight: float = Field(1.0, gt=0.0)
    landmarks: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_band(self):
        if self.scoring_rule is ScoringRule.standard_decay:
            if not self.ideal_min < self.ideal_max:
                raise ValueError(f"{self.key.value}: ideal_min must be below ideal_max")
        else:
            if self.peak is None or not self.ideal_min <= self.peak <= self.ideal_max:
                raise ValueError(f"{self.key.value}: peak must lie inside the ideal band")
        return self


class MetricResult(BaseModel):
    model_config = ConfigDict(frozen=True)
    key: MetricKey
    raw_value: float
    formatted_value: str
    score: float = Field(..., ge=0.0, le=10.0)


class TierRating(BaseModel):
    model_config = ConfigDict(frozen=True)
    rank: int
    tier_label: str
    percentile_label: str
    description: str


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)
    face_detected: bool
    landmarks: Optional[LandmarkSet] = None
    profile_landmarks: Optional[LandmarkSet] = None
    metrics: Dict[MetricKey, MetricResult]
    overall_score: float
    tier: TierRating


class MetricDisplay(BaseModel):
    key: MetricKey
    title: str
    ideal: str
    description: str
    requires_profile: bool


class LandmarksRequest(BaseModel):
    front: Optional[List[Tuple[float, float]]] = None
    profile: Optional[List[Tuple[float, float]]] = None


class AnalyzeResponse(BaseModel):
    result: AnalysisResult
    display: List[MetricDisplay]
    overlay_png_b64: Optional[str] = None
    pdf_report_b64: Optional[str] = None

