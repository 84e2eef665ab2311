import numpy as np

from .errors import DegenerateGeometryError
from .schemas import Point2D


def _vec(p: Point2D) -> np.ndarray:
    return np.array([p.x, p.y], dtype=float)


def distance(p1: Point2D, p2: Point2D) -> float:
    return float(np.linalg.norm(_vec(p2) - _vec(p1)))


def midpoint(p1: Point2D, p2: Point2D) -> Point2D:
    return Point2D(x=(p1.x + p2.x) / 2.0, y=(p1.y + p2.y) / 2.0)


def angle(p1: Point2D, vertex: Point2D, p2: Point2D) -> float:
    """Angle at `vertex` between the rays to `p1` and `p2`, in degrees (0-180).

    Raises DegenerateGeometryError when either ray has zero length instead of
    returning NaN.
    """
    v1 = _vec(p1) - _vec(vertex)
    v2 = _vec(p2) - _vec(vertex)
    n1, n2 = np.linalg.norm(v1), np.linalg.norm(v2)
    if n1 == 0.0 or n2 == 0.0:
        raise DegenerateGeometryError(
            f"angle vertex ({vertex.x}, {vertex.y}) coincides with a reference point")
    cosine = float(np.clip(np.dot(v1, v2) / (n1 * n2), -1.0, 1.0))
    return float(np.degrees(np.arccos(cosine)))


def line_tilt(p_from: Point2D, p_to: Point2D) -> float:
    # image y grows downward
    return float(np.degrees(np.arctan2(p_to.y - p_from.y, p_to.x - p_from.x)))


def ratio(num: float, den: float, what: str) -> float:
    if den == 0.0:
        raise DegenerateGeometryError(f"{what}: zero-length denominator")
    return num / den
