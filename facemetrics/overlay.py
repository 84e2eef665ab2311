import base64
from typing import Optional, Tuple

import cv2
import numpy as np

from .catalog import CATALOG
from .schemas import LandmarkSet, MetricKey, Point2D

DOT = (255, 255, 0)
LINE = (255, 0, 255)
GUIDE = (255, 255, 0)

_THIRDS = {MetricKey.topThird, MetricKey.middleThird, MetricKey.lowerThird}


def _px(p: Point2D, w: int, h: int) -> Tuple[int, int]:
    return int(round(p.x * w)), int(round(p.y * h))


def _draw_thirds(img: np.ndarray, lm: LandmarkSet) -> None:
    h, w = img.shape[:2]
    cx = int(round(lm.points["faceCenter"].x * w)) if "faceCenter" in lm else w // 2
    cv2.line(img, (cx, int(h * 0.05)), (cx, int(h * 0.95)), GUIDE, 2)
    for role in ("noseTop", "noseBottom"):
        if role in lm:
            y = int(round(lm.points[role].y * h))
            cv2.line(img, (int(w * 0.1), y), (int(w * 0.9), y), LINE, 2)


def draw_overlay(img_bgr: np.ndarray, lm: LandmarkSet,
                 metric: Optional[MetricKey] = None) -> np.ndarray:
    """Copy of the image with landmark dots and, for `metric`, its measurement lines.

    Three-landmark metrics are angles and are drawn as a polyline through the
    vertex; other metrics are drawn as consecutive landmark pairs.
    """
    img = img_bgr.copy()
    h, w = img.shape[:2]
    for p in lm.points.values():
        cv2.circle(img, _px(p, w, h), 2, DOT, -1)
    if metric is None:
        return img
    if metric in _THIRDS:
        _draw_thirds(img, lm)
        return img

    defn = next(d for d in CATALOG if d.key == metric)
    pts = [_px(lm.points[r], w, h) for r in defn.landmarks if r in lm]
    if metric is MetricKey.gonialAngle and len(pts) == 3:
        # vertical reference through the jaw corner at forehead height
        jaw, forehead = lm.points["jawAngle"], lm.points["forehead"]
        pts[2] = _px(Point2D(x=jaw.x, y=forehead.y), w, h)
    if len(pts) == 3:
        cv2.polylines(img, [np.array(pts, dtype=np.int32)], False, LINE, 2)
    else:
        for a, b in zip(pts[0::2], pts[1::2]):
            cv2.line(img, a, b, LINE, 2)
    return img


def to_png_b64(img: np.ndarray) -> str:
    _, buf = cv2.imencode(".png", img)
    return base64.b64encode(buf).decode("utf-8")
