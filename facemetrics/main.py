import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from .analysis import analyze_points
from .catalog import display_table, load_catalog
from .config import IDEALS_PATH, MM_PER_UNIT, setup_logging
from .detector import FaceMeshDetector, decode_image
from .errors import FaceMetricsError
from .overlay import draw_overlay, to_png_b64
from .report import make_pdf
from .schemas import AnalyzeResponse, LandmarksRequest, MetricDisplay, MetricKey

setup_logging()
logger = logging.getLogger(__name__)

catalog = load_catalog(IDEALS_PATH)
PROFILE_METRICS = {d.key for d in catalog if d.requires_profile}


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.detector = None
    yield
    if app.state.detector is not None:
        app.state.detector.close()


app = FastAPI(title="Facial Proportion Analysis", version="1.0.0", lifespan=lifespan)


def get_detector(request: Request) -> FaceMeshDetector:
    # one model per app, loaded on first image request
    if getattr(request.app.state, "detector", None) is None:
        request.app.state.detector = FaceMeshDetector()
    return request.app.state.detector


@app.exception_handler(FaceMetricsError)
async def _core_error(request: Request, exc: FaceMetricsError):
    logger.warning("Analysis failed: %s", exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/", response_class=JSONResponse)
def root():
    return {"ok": True, "name": "Facial Proportion Analysis", "docs": "/docs", "metrics": len(catalog)}


@app.get("/catalog", response_model=List[MetricDisplay])
def get_catalog():
    return display_table(catalog)


@app.post("/analyze-landmarks", response_model=AnalyzeResponse)
def analyze_landmarks(body: LandmarksRequest, include_report: bool = False):
    result = analyze_points(body.front, body.profile, catalog=catalog, mm_per_unit=MM_PER_UNIT)
    return AnalyzeResponse(
        result=result,
        display=display_table(catalog),
        pdf_report_b64=make_pdf(result, catalog) if include_report else None,
    )


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    front: UploadFile = File(..., description="Frontal face photo"),
    profile: Optional[UploadFile] = File(None, description="Side profile photo (optional)"),
    include_report: bool = Form(False),
    include_overlay: bool = Form(False),
    overlay_metric: Optional[MetricKey] = Form(None),
    detector: FaceMeshDetector = Depends(get_detector),
):
    try:
        front_img = decode_image(await front.read())
        profile_img = decode_image(await profile.read()) if profile is not None else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    front_pts = detector.detect(front_img)
    profile_pts = detector.detect(profile_img) if profile_img is not None else None
    if profile_img is not None and profile_pts is None:
        logger.info("No face found in profile photo, scoring front only")

    result = analyze_points(front_pts, profile_pts, catalog=catalog, mm_per_unit=MM_PER_UNIT)

    overlay_b64 = None
    if include_overlay and result.landmarks is not None:
        img, lm = front_img, result.landmarks
        if overlay_metric in PROFILE_METRICS and result.profile_landmarks is not None:
            img, lm = profile_img, result.profile_landmarks
        overlay_b64 = to_png_b64(draw_overlay(img, lm, overlay_metric))
    return AnalyzeResponse(
        result=result,
        display=display_table(catalog),
        overlay_png_b64=overlay_b64,
        pdf_report_b64=make_pdf(result, catalog) if include_report else None,
    )
