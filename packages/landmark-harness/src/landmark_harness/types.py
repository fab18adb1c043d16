from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import math
from typing import Any

import numpy as np

Point = tuple[int, int]
Rect = tuple[int, int, int, int]  # x, y, width, height

# Annotation slot index -> LandmarkRecord field.
ANNOTATION_SLOTS: dict[int, str] = {
    0: "crown_point",
    1: "chin_point",
    2: "eye_left_pupil",
    3: "eye_right_pupil",
    4: "lip_left_corner",
    5: "lip_right_corner",
}

POINT_FIELDS = (
    "crown_point",
    "chin_point",
    "eye_left_pupil",
    "eye_right_pupil",
    "lip_left_corner",
    "lip_right_corner",
    "eye_left_corner",
    "eye_right_corner",
    "nose_tip",
)
RECT_FIELDS = ("face_rect", "left_eye_rect", "right_eye_rect", "mouth_rect")
SEQUENCE_FIELDS = ("lip_contour_1st", "lip_contour_2nd", "all_landmarks")


def _as_point(value: Any, name: str) -> Point | None:
    if value is None:
        return None
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape[0] != 2:
        raise ValueError(f"{name} must have 2 coordinates, got {arr.shape[0]}")
    if not np.isfinite(arr).all():
        raise ValueError(f"{name} has non-finite coordinates: {value!r}")
    return int(round(arr[0])), int(round(arr[1]))


def _as_rect(value: Any, name: str) -> Rect | None:
    if value is None:
        return None
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape[0] != 4:
        raise ValueError(f"{name} must have 4 values (x, y, w, h), got {arr.shape[0]}")
    if not np.isfinite(arr).all():
        raise ValueError(f"{name} has non-finite values: {value!r}")
    x, y, w, h = (int(round(v)) for v in arr)
    return x, y, w, h


@dataclass(frozen=True, slots=True)
class LandmarkRecord:
    crown_point: Point | None = None
    chin_point: Point | None = None
    eye_left_pupil: Point | None = None
    eye_right_pupil: Point | None = None
    lip_left_corner: Point | None = None
    lip_right_corner: Point | None = None
    eye_left_corner: Point | None = None
    eye_right_corner: Point | None = None
    nose_tip: Point | None = None
    face_rect: Rect | None = None
    left_eye_rect: Rect | None = None
    right_eye_rect: Rect | None = None
    mouth_rect: Rect | None = None
    lip_contour_1st: tuple[Point, ...] = field(default_factory=tuple)
    lip_contour_2nd: tuple[Point, ...] = field(default_factory=tuple)
    all_landmarks: tuple[Point, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Normalize whatever the detector handed us (lists, numpy, floats) to int tuples.
        for name in POINT_FIELDS:
            object.__setattr__(self, name, _as_point(getattr(self, name), name))
        for name in RECT_FIELDS:
            object.__setattr__(self, name, _as_rect(getattr(self, name), name))
        for name in SEQUENCE_FIELDS:
            raw = getattr(self, name)
            if raw is None:
                raw = ()
            elif isinstance(raw, np.ndarray):
                raw = raw.reshape(-1, 2)
            pts = tuple(_as_point(p, f"{name}[{i}]") for i, p in enumerate(raw))
            if any(p is None for p in pts):
                raise ValueError(f"{name} must not contain unset points")
            object.__setattr__(self, name, pts)

    def with_point(self, index: int, point: Point) -> LandmarkRecord:
        name = ANNOTATION_SLOTS.get(index)
        if name is None:
            raise KeyError(index)
        return replace(self, **{name: point})

    def is_empty(self) -> bool:
        return all(not getattr(self, f.name) for f in fields(self))

    def validate_bounds(self, width: int, height: int) -> list[str]:
        issues: list[str] = []
        for name in POINT_FIELDS:
            pt = getattr(self, name)
            if pt is not None and not (0 <= pt[0] < width and 0 <= pt[1] < height):
                issues.append(f"{name} outside {width}x{height}: {pt}")
        for name in SEQUENCE_FIELDS:
            for i, pt in enumerate(getattr(self, name)):
                if not (0 <= pt[0] < width and 0 <= pt[1] < height):
                    issues.append(f"{name}[{i}] outside {width}x{height}: {pt}")
        return issues

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in POINT_FIELDS:
            pt = getattr(self, name)
            out[name] = None if pt is None else {"x": pt[0], "y": pt[1]}
        for name in RECT_FIELDS:
            r = getattr(self, name)
            out[name] = None if r is None else {"x": r[0], "y": r[1], "width": r[2], "height": r[3]}
        for name in SEQUENCE_FIELDS:
            out[name] = [{"x": p[0], "y": p[1]} for p in getattr(self, name)]
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> LandmarkRecord:
        kwargs: dict[str, Any] = {}
        for name in POINT_FIELDS:
            pt = payload.get(name)
            kwargs[name] = None if pt is None else (pt["x"], pt["y"])
        for name in RECT_FIELDS:
            r = payload.get(name)
            kwargs[name] = None if r is None else (r["x"], r["y"], r["width"], r["height"])
        for name in SEQUENCE_FIELDS:
            kwargs[name] = tuple((p["x"], p["y"]) for p in payload.get(name) or [])
        return cls(**kwargs)


AnnotationSet = dict[str, LandmarkRecord]


@dataclass(frozen=True, slots=True)
class ResultRecord:
    image_id: str
    ground_truth: LandmarkRecord
    detected: LandmarkRecord
    success: bool


def point_distance(a: Point, b: Point) -> float:
    return math.hypot(float(a[0] - b[0]), float(a[1] - b[1]))
