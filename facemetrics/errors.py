class FaceMetricsError(Exception):
    """Base class for errors raised by the analysis core."""


class MissingLandmarkError(FaceMetricsError):
    def __init__(self, landmark: str, metric: str):
        self.landmark = landmark
        self.metric = metric
        super().__init__(f"Landmark '{landmark}' required by metric '{metric}' is missing")


class DegenerateGeometryError(FaceMetricsError):
    """Angle vertex coincides with a reference point, or a ratio has a zero-length denominator."""


class LandmarkExtractionError(FaceMetricsError):
    """Detector output could not be mapped to a landmark set."""
