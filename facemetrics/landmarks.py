from typing import Any, Dict, Sequence, Tuple

from pydantic import ValidationError

from .errors import LandmarkExtractionError
from .geometry import midpoint
from .schemas import LandmarkSet, Point2D

# MediaPipe Face Mesh canonical indices
MESH_SIZE = 468

LANDMARK_INDICES: Dict[str, int] = {
    "leftEyeOuter": 33,
    "leftEyeInner": 133,
    "rightEyeOuter": 263,
    "rightEyeInner": 362,
    "leftEyeTop": 159,
    "leftEyeBottom": 145,
    "rightEyeTop": 386,
    "rightEyeBottom": 374,
    "leftBrowInner": 107,
    "leftBrowOuter": 70,
    "rightBrowInner": 336,
    "rightBrowOuter": 300,
    "forehead": 10,
    "glabella": 9,
    "noseTop": 168,
    "noseTip": 1,
    "noseBottom": 2,
    "noseLeft": 98,
    "noseRight": 327,
    "alarLeft": 64,
    "alarRight": 294,
    "upperLipTop": 0,
    "mouthTop": 13,
    "mouthBottom": 14,
    "lowerLipBottom": 17,
    "leftMouth": 61,
    "rightMouth": 291,
    "leftCheekbone": 234,
    "rightCheekbone": 454,
    "leftTemple": 127,
    "rightTemple": 356,
    "jawLeft": 172,
    "jawRight": 397,
    "mandibleLeft": 136,
    "mandibleRight": 365,
    "chin": 152,
}

# the jaw corner sits at a different mesh point once the head is turned
JAW_ANGLE_FRONTAL = 234
JAW_ANGLE_LATERAL = 172


def _xy(pt: Any) -> Tuple[float, float]:
    if hasattr(pt, "x") and hasattr(pt, "y"):
        return float(pt.x), float(pt.y)
    x, y = pt[0], pt[1]
    return float(x), float(y)


def _point(points: Sequence[Any], idx: int, role: str) -> Point2D:
    try:
        x, y = _xy(points[idx])
    except (TypeError, ValueError, IndexError) as e:
        raise LandmarkExtractionError(f"point {idx} ({role}) is not an (x, y) pair") from e
    try:
        return Point2D(x=x, y=y)
    except ValidationError as e:
        raise LandmarkExtractionError(
            f"point {idx} ({role}) is not a finite normalized coordinate: ({x}, {y})") from e


def extract_landmarks(points: Sequence[Any], is_lateral_view: bool = False) -> LandmarkSet:
    """Map an ordered face-mesh point list to named landmarks.

    Must only be called once the detector has reported a face.
    """
    if len(points) < MESH_SIZE:
        raise LandmarkExtractionError(
            f"expected at least {MESH_SIZE} mesh points, got {len(points)}")

    named = {role: _point(points, idx, role) for role, idx in LANDMARK_INDICES.items()}
    jaw_idx = JAW_ANGLE_LATERAL if is_lateral_view else JAW_ANGLE_FRONTAL
    named["jawAngle"] = _point(points, jaw_idx, "jawAngle")

    named["leftEye"] = midpoint(named["leftEyeOuter"], named["leftEyeInner"])
    named["rightEye"] = midpoint(named["rightEyeOuter"], named["rightEyeInner"])
    named["faceCenter"] = midpoint(named["leftEye"], named["rightEye"])
    return LandmarkSet(points=named, is_lateral_view=is_lateral_view)
