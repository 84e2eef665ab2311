"""Tests for overlay rendering and the PDF report."""

import base64

import cv2
import numpy as np

from facemetrics.analysis import compute_analysis, not_detected_result
from facemetrics.overlay import draw_overlay, to_png_b64
from facemetrics.report import make_pdf
from facemetrics.schemas import MetricKey


def blank(h=200, w=160):
    return np.zeros((h, w, 3), dtype=np.uint8)


def test_overlay_draws_landmarks_without_mutating(front):
    img = blank()
    out = draw_overlay(img, front)
    assert out.shape == img.shape
    assert out.any()
    assert not img.any()


def test_overlay_metric_lines(front, profile):
    base = draw_overlay(blank(), front)
    ipd = draw_overlay(blank(), front, MetricKey.interpupillaryDistance)
    assert (ipd != base).any()
    gonial = draw_overlay(blank(), profile, MetricKey.gonialAngle)
    assert gonial.any()


def test_overlay_gonial_uses_vertical_reference(profile):
    out = draw_overlay(blank(), profile, MetricKey.gonialAngle)
    # jaw corner (0.35, 0.72) up to (0.35, forehead.y) is the column x=56
    assert out[90, 56].any()
    # nothing on the jaw-to-forehead diagonal
    assert not out[87, 72].any()


def test_overlay_thirds_guides(front):
    out = draw_overlay(blank(), front, MetricKey.middleThird)
    y = int(round(front.points["noseTop"].y * 200))
    assert out[y, 80].any()


def test_png_roundtrip(front):
    data = base64.b64decode(to_png_b64(draw_overlay(blank(), front)))
    decoded = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (200, 160, 3)


def test_pdf_report(front, profile):
    pdf = base64.b64decode(make_pdf(compute_analysis(front, profile)))
    assert pdf.startswith(b"%PDF")


def test_pdf_report_no_face():
    pdf = base64.b64decode(make_pdf(not_detected_result()))
    assert pdf.startswith(b"%PDF")
