from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from .types import LandmarkRecord

_REQUIRED = (
    "crown_point",
    "chin_point",
    "eye_left_pupil",
    "eye_right_pupil",
    "lip_left_corner",
    "lip_right_corner",
)


@dataclass(frozen=True, slots=True)
class CrownChinCoefficients:
    chin_crown: float
    chin_frown: float
    num_samples: int


def crown_chin_ratios(lm: LandmarkRecord) -> tuple[float, float]:
    missing = [name for name in _REQUIRED if getattr(lm, name) is None]
    if missing:
        raise ValueError(f"landmark record is missing {missing}")

    eye_l = np.asarray(lm.eye_left_pupil, dtype=np.float64)
    eye_r = np.asarray(lm.eye_right_pupil, dtype=np.float64)
    frown = (eye_l + eye_r) / 2.0
    mouth_center = (np.asarray(lm.lip_left_corner, dtype=np.float64) + np.asarray(lm.lip_right_corner, dtype=np.float64)) / 2.0
    crown = np.asarray(lm.crown_point, dtype=np.float64)
    chin = np.asarray(lm.chin_point, dtype=np.float64)

    ref_dist = float(np.linalg.norm(eye_l - eye_r) + np.linalg.norm(frown - mouth_center))
    if ref_dist <= 0.0:
        raise ValueError("reference distance is zero; pupils and mouth coincide")

    chin_crown = float(np.linalg.norm(crown - chin))
    chin_frown = float(np.linalg.norm(frown - chin))
    return chin_crown / ref_dist, chin_frown / ref_dist


def crown_chin_coefficients(records: Iterable[LandmarkRecord]) -> CrownChinCoefficients:
    c1: list[float] = []
    c2: list[float] = []
    for lm in records:
        r1, r2 = crown_chin_ratios(lm)
        c1.append(r1)
        c2.append(r2)
    if not c1:
        raise ValueError("no ground truth records to compute coefficients from")
    # Median keeps a few mis-annotated samples from dragging the result.
    return CrownChinCoefficients(
        chin_crown=float(np.median(c1)),
        chin_frown=float(np.median(c2)),
        num_samples=len(c1),
    )
