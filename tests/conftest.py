import pytest

from facemetrics.landmarks import LANDMARK_INDICES, MESH_SIZE
from facemetrics.schemas import LandmarkSet, Point2D

FRONT = {
    "leftEyeOuter": (0.30, 0.40), "leftEyeInner": (0.43, 0.40),
    "rightEyeInner": (0.57, 0.40), "rightEyeOuter": (0.70, 0.40),
    "leftEyeTop": (0.365, 0.385), "leftEyeBottom": (0.365, 0.415),
    "rightEyeTop": (0.635, 0.385), "rightEyeBottom": (0.635, 0.415),
    "leftBrowInner": (0.44, 0.34), "leftBrowOuter": (0.29, 0.33),
    "rightBrowInner": (0.56, 0.34), "rightBrowOuter": (0.71, 0.33),
    "forehead": (0.50, 0.15), "glabella": (0.50, 0.33),
    "noseTop": (0.50, 0.37), "noseTip": (0.50, 0.55), "noseBottom": (0.50, 0.60),
    "noseLeft": (0.45, 0.58), "noseRight": (0.55, 0.58),
    "alarLeft": (0.44, 0.57), "alarRight": (0.56, 0.57),
    "upperLipTop": (0.50, 0.66), "mouthTop": (0.50, 0.69),
    "mouthBottom": (0.50, 0.71), "lowerLipBottom": (0.50, 0.74),
    "leftMouth": (0.43, 0.70), "rightMouth": (0.57, 0.70),
    "leftCheekbone": (0.22, 0.45), "rightCheekbone": (0.78, 0.45),
    "leftTemple": (0.23, 0.38), "rightTemple": (0.77, 0.38),
    "jawLeft": (0.28, 0.72), "jawRight": (0.72, 0.72),
    "mandibleLeft": (0.33, 0.80), "mandibleRight": (0.67, 0.80),
    "chin": (0.50, 0.88),
}

# subject facing image right
PROFILE = {
    "forehead": (0.55, 0.15), "glabella": (0.60, 0.32), "noseTop": (0.58, 0.37),
    "noseTip": (0.72, 0.55), "noseBottom": (0.64, 0.60), "mouthTop": (0.63, 0.69),
    "chin": (0.60, 0.88), "jawLeft": (0.35, 0.72),
}


def _set(roles, lateral=False, **extra):
    pts = {k: Point2D(x=x, y=y) for k, (x, y) in {**roles, **extra}.items()}
    return LandmarkSet(points=pts, is_lateral_view=lateral)


def make_front(**overrides) -> LandmarkSet:
    roles = dict(FRONT)
    roles.update({
        "leftEye": (0.365, 0.40), "rightEye": (0.635, 0.40),
        "faceCenter": (0.50, 0.40), "jawAngle": FRONT["leftCheekbone"],
    })
    roles.update(overrides)
    return _set(roles)


def make_profile(**overrides) -> LandmarkSet:
    roles = dict(PROFILE)
    roles["jawAngle"] = PROFILE["jawLeft"]
    roles.update(overrides)
    return _set(roles, lateral=True)


def make_mesh(roles, size=MESH_SIZE):
    pts = [(0.5, 0.5)] * size
    for role, xy in roles.items():
        pts[LANDMARK_INDICES[role]] = xy
    return pts


@pytest.fixture
def front():
    return make_front()


@pytest.fixture
def profile():
    return make_profile()


@pytest.fixture
def front_mesh():
    return make_mesh(FRONT)


@pytest.fixture
def profile_mesh():
    return make_mesh(PROFILE)
