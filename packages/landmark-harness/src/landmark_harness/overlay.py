from __future__ import annotations

from collections.abc import Iterable

import cv2
import numpy as np

from .types import ANNOTATION_SLOTS, LandmarkRecord, Point, Rect

# BGR
ANNOTATION_COLOR = (0, 30, 255)
DETECTION_COLOR = (250, 30, 0)
FACE_RECT_COLOR = (0, 128, 0)
FEATURE_RECT_COLOR = (0xA0, 0x52, 0x2D)
NEUTRAL_COLOR = (40, 40, 190)

MARKER_RADIUS = 5

DETECTED_POINT_ORDER = (
    "eye_left_pupil",
    "eye_right_pupil",
    "eye_left_corner",
    "eye_right_corner",
    "nose_tip",
    "lip_left_corner",
    "lip_right_corner",
    "crown_point",
    "chin_point",
)


def _rect(image: np.ndarray, rect: Rect | None, color: tuple[int, int, int], thickness: int) -> None:
    if rect is None:
        return
    # Rect overload: the far edge is x + w - 1.
    cv2.rectangle(image, rect, color, thickness)


def _markers(
    image: np.ndarray,
    points: Iterable[Point | None],
    color: tuple[int, int, int],
    thickness: int = 2,
) -> None:
    for pt in points:
        if pt is None:
            continue
        cv2.circle(image, pt, MARKER_RADIUS, color, thickness)


def _draw_detection(image: np.ndarray, lm: LandmarkRecord) -> None:
    _rect(image, lm.face_rect, FACE_RECT_COLOR, 2)
    _rect(image, lm.left_eye_rect, FEATURE_RECT_COLOR, 3)
    _rect(image, lm.right_eye_rect, FEATURE_RECT_COLOR, 3)

    contours = [
        np.array(c, dtype=np.int32).reshape((-1, 1, 2)) for c in (lm.lip_contour_1st, lm.lip_contour_2nd) if c
    ]
    if contours:
        cv2.polylines(image, contours, isClosed=True, color=DETECTION_COLOR)
    _rect(image, lm.mouth_rect, FEATURE_RECT_COLOR, 3)

    _markers(image, (getattr(lm, name) for name in DETECTED_POINT_ORDER), DETECTION_COLOR)
    _markers(image, lm.all_landmarks, NEUTRAL_COLOR, thickness=1)


def render_landmarks(image: np.ndarray, record: LandmarkRecord) -> np.ndarray:
    out = image.copy()
    _draw_detection(out, record)
    return out


def render_ground_truth(image: np.ndarray, record: LandmarkRecord) -> np.ndarray:
    out = image.copy()
    _markers(out, (getattr(record, name) for name in ANNOTATION_SLOTS.values()), ANNOTATION_COLOR)
    return out


def annotate(image: np.ndarray, ground_truth: LandmarkRecord, detected: LandmarkRecord) -> np.ndarray:
    """Ground truth in the annotation colour under the detection overlay, on a copy of ``image``."""
    return render_landmarks(render_ground_truth(image, ground_truth), detected)
