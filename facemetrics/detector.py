import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

MeshPoints = List[Tuple[float, float]]


def decode_image(img_bytes: bytes) -> np.ndarray:
    arr = np.frombuffer(img_bytes, np.uint8)
    im = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if im is None:
        raise ValueError("Invalid image data")
    return im


class FaceMeshDetector:
    """MediaPipe Face Mesh wrapper returning normalized (x, y) mesh points.

    Construct once per process and pass it to whoever needs landmarks; the
    scoring core never holds a reference to it.
    """

    def __init__(self, refine_landmarks: bool = True):
        import mediapipe as mp

        self._mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=True, max_num_faces=1, refine_landmarks=refine_landmarks)
        logger.info("Face mesh model loaded (refine_landmarks=%s)", refine_landmarks)

    def detect(self, img_bgr: np.ndarray) -> Optional[MeshPoints]:
        rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
        res = self._mesh.process(rgb)
        if not res.multi_face_landmarks:
            return None
        return [(lm.x, lm.y) for lm in res.multi_face_landmarks[0].landmark]

    def close(self) -> None:
        self._mesh.close()
