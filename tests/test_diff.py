from __future__ import annotations

import numpy as np
import pytest

from landmark_harness import (
    BenchmarkMissing,
    ImageMismatch,
    benchmark_path,
    benchmark_validate,
    compare_images,
    verify_equal_images,
)


def _gradient() -> np.ndarray:
    img = np.zeros((24, 32, 3), dtype=np.uint8)
    img[..., 0] = np.arange(32, dtype=np.uint8)[None, :] * 4
    img[..., 1] = np.arange(24, dtype=np.uint8)[:, None] * 8
    return img


def test_compare_images_is_reflexive() -> None:
    img = _gradient()
    result = compare_images(img, img.copy())
    assert result.equal
    assert result.differing_pixels == 0
    verify_equal_images(img, img.copy())


def test_single_pixel_difference_is_counted_once() -> None:
    a = _gradient()
    b = a.copy()
    b[3, 4] = (255, 255, 255)

    result = compare_images(a, b)
    assert not result.equal
    assert result.differing_pixels == 1

    with pytest.raises(ImageMismatch) as excinfo:
        verify_equal_images(a, b)
    assert excinfo.value.differing_pixels == 1


def test_size_mismatch_is_reported_explicitly() -> None:
    a = _gradient()
    b = np.zeros((10, 10, 3), dtype=np.uint8)

    assert compare_images(a, b).size_mismatch
    with pytest.raises(ImageMismatch, match="different sizes"):
        verify_equal_images(a, b)


def test_benchmark_bootstraps_then_passes(tmp_path) -> None:
    actual = _gradient()
    ref = benchmark_path(tmp_path / "benchmarks", "RenderLandmarks", "_overlay")
    assert ref.name == "RenderLandmarks_overlay.png"

    with pytest.raises(BenchmarkMissing):
        benchmark_validate(actual, ref)
    assert ref.exists()

    benchmark_validate(actual, ref)


def test_benchmark_mismatch_names_reference(tmp_path) -> None:
    ref = tmp_path / "case.png"
    with pytest.raises(BenchmarkMissing):
        benchmark_validate(_gradient(), ref)

    changed = _gradient()
    changed[0, 0, 2] = 1
    with pytest.raises(ImageMismatch) as excinfo:
        benchmark_validate(changed, ref)
    assert excinfo.value.reference_path == ref
    assert excinfo.value.differing_pixels == 1
    assert str(ref) in str(excinfo.value)
