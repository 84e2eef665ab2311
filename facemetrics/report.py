import base64
import io
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .catalog import CATALOG, ideal_label
from .schemas import AnalysisResult, MetricDefinition


def make_pdf(result: AnalysisResult, catalog: Optional[List[MetricDefinition]] = None) -> str:
    catalog = catalog or CATALOG
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setFont("Helvetica-Bold", 16)
    c.drawString(40, 800, "Facial Proportion Report")
    c.setFont("Helvetica", 11)
    if not result.face_detected:
        c.drawString(40, 775, "No face detected. All scores set to 0.")
    c.drawString(40, 760, f"Overall: {result.overall_score:.1f} / 10")
    c.drawString(40, 744, f"Tier: {result.tier.tier_label} ({result.tier.percentile_label})")
    y = 716
    c.setFont("Helvetica", 9)
    for d in catalog:
        r = result.metrics.get(d.key)
        if r is None:
            continue
        c.drawString(40, y, f"{d.display_title}: {r.formatted_value}  (ideal {ideal_label(d)})  score {r.score:.1f}")
        y -= 14
        if y < 40:
            c.showPage()
            c.setFont("Helvetica", 9)
            y = 800
    c.showPage(); c.save()
    return base64.b64encode(buf.getvalue()).decode("utf-8")
