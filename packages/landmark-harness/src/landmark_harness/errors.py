from __future__ import annotations

from pathlib import Path


class HarnessError(Exception):
    """Base class for harness errors."""


class FormatError(HarnessError, ValueError):
    """Malformed annotation or fixture file. Aborts the batch."""


class DetectorConfigError(HarnessError, RuntimeError):
    pass


class DetectorFailure(HarnessError, RuntimeError):
    """Detection failed for a single image; recorded, never raised out of a run."""

    def __init__(self, image_id: str, message: str) -> None:
        super().__init__(f"{image_id}: {message}")
        self.image_id = image_id


class ImageMismatch(AssertionError):
    def __init__(
        self,
        message: str,
        *,
        differing_pixels: int | None = None,
        reference_path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.differing_pixels = differing_pixels
        self.reference_path = reference_path


class BenchmarkMissing(AssertionError):
    def __init__(self, reference_path: Path) -> None:
        super().__init__(f"Benchmark file did not exist, wrote new reference: {reference_path}")
        self.reference_path = reference_path
