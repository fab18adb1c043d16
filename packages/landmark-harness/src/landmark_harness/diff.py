from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

import cv2
import numpy as np

from .errors import BenchmarkMissing, ImageMismatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageComparison:
    equal: bool
    size_mismatch: bool
    differing_pixels: int


def compare_images(expected: np.ndarray, actual: np.ndarray) -> ImageComparison:
    if expected.shape != actual.shape:
        return ImageComparison(equal=False, size_mismatch=True, differing_pixels=0)
    diff = expected != actual
    if diff.ndim == 3:
        # A pixel differs if any of its channels does.
        diff = diff.any(axis=2)
    count = int(np.count_nonzero(diff))
    return ImageComparison(equal=count == 0, size_mismatch=False, differing_pixels=count)


def verify_equal_images(expected: np.ndarray, actual: np.ndarray) -> None:
    result = compare_images(expected, actual)
    if result.size_mismatch:
        raise ImageMismatch(f"Images have different sizes: {expected.shape} vs {actual.shape}")
    if not result.equal:
        raise ImageMismatch(
            f"Images are not the same pixel by pixel: {result.differing_pixels} pixels differ",
            differing_pixels=result.differing_pixels,
        )


def benchmark_path(benchmarks_dir: Path, test_name: str, suffix: str = "") -> Path:
    return benchmarks_dir / f"{test_name}{suffix}.png"


def benchmark_validate(actual: np.ndarray, reference_path: Path) -> None:
    """Compare ``actual`` against the stored benchmark image.

    A missing benchmark is written from ``actual`` and still fails, so every new
    reference gets looked at by a human before it starts guarding anything.
    """
    reference_path = Path(reference_path)
    if not reference_path.exists():
        reference_path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(reference_path), actual):
            raise OSError(f"failed to write benchmark image {reference_path}")
        logger.warning("wrote new benchmark image %s", reference_path)
        raise BenchmarkMissing(reference_path)

    expected = cv2.imread(str(reference_path), cv2.IMREAD_UNCHANGED)
    if expected is None:
        raise ImageMismatch(f"cannot read benchmark image {reference_path}", reference_path=reference_path)
    if expected.shape != actual.shape:
        raise ImageMismatch(
            f"Actual image size {actual.shape} differs from {expected.shape} in file {reference_path}",
            reference_path=reference_path,
        )
    abs_diff = np.abs(expected.astype(np.int32) - actual.astype(np.int32))
    if int(abs_diff.sum()) != 0:
        per_pixel = abs_diff if abs_diff.ndim == 2 else abs_diff.sum(axis=2)
        count = int(np.count_nonzero(per_pixel))
        raise ImageMismatch(
            f"Actual image differs to image in file {reference_path} ({count} pixels)",
            differing_pixels=count,
            reference_path=reference_path,
        )
