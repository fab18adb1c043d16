from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from typing import Callable

import cv2
import numpy as np

from .annotations import parse_annotations
from .engine import DetectionContext
from .errors import DetectorFailure, FormatError
from .fixtures import FixtureCache, load_or_detect
from .overlay import annotate as render_overlay
from .types import AnnotationSet, LandmarkRecord, ResultRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DetectionOutcome:
    success: bool
    image: np.ndarray | None
    detected: LandmarkRecord


DetectionCallback = Callable[[str, LandmarkRecord], DetectionOutcome]


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    ITERATING = "iterating"
    COMPLETED = "completed"
    ABORTED = "aborted"


def _image_name(image_id: str) -> str:
    return image_id.replace("\\", "/").rsplit("/", 1)[-1]


class RegressionRunner:
    """Runs a detector over every annotated image and collects one result per image.

    Exclusions match either the full image identifier or its file name. Detector
    errors are recorded as failed results and never abort the run.
    A ``FormatError`` raised mid-run, such as a corrupt fixture, propagates and
    leaves the runner in ``RunState.ABORTED``.
    """

    def __init__(
        self,
        detect: DetectionCallback,
        *,
        exclusions: Iterable[str] = (),
        annotate: bool = False,
        overlay_dir: Path | None = None,
    ) -> None:
        self.detect = detect
        self.exclusions = frozenset(exclusions)
        self.annotate = annotate
        self.overlay_dir = overlay_dir
        self.state = RunState.NOT_STARTED
        self.current_index: int | None = None

    def is_excluded(self, image_id: str) -> bool:
        return image_id in self.exclusions or _image_name(image_id) in self.exclusions

    def run(self, annotation_path: Path | str) -> list[ResultRecord]:
        return self.run_annotations(parse_annotations(annotation_path))

    def run_annotations(self, annotations: AnnotationSet) -> list[ResultRecord]:
        self.state = RunState.ITERATING
        results: list[ResultRecord] = []
        try:
            for idx, (image_id, ground_truth) in enumerate(annotations.items()):
                self.current_index = idx
                if self.is_excluded(image_id):
                    logger.debug("skipping excluded image %s", image_id)
                    continue

                outcome = self._detect_one(image_id, ground_truth)
                if self.annotate and outcome.image is not None:
                    self._write_overlay(image_id, outcome.image, ground_truth, outcome.detected)

                results.append(ResultRecord(image_id, ground_truth, outcome.detected, outcome.success))
        except BaseException:
            self.state = RunState.ABORTED
            raise
        finally:
            self.current_index = None

        self.state = RunState.COMPLETED
        failed = sum(1 for r in results if not r.success)
        logger.info("processed %d images, %d failed", len(results), failed)
        return results

    def _detect_one(self, image_id: str, ground_truth: LandmarkRecord) -> DetectionOutcome:
        try:
            return self.detect(image_id, ground_truth)
        except FormatError:
            raise
        except Exception as exc:
            logger.warning("detection failed for %s: %s", image_id, exc)
            return DetectionOutcome(success=False, image=None, detected=LandmarkRecord())

    def _write_overlay(
        self,
        image_id: str,
        image: np.ndarray,
        ground_truth: LandmarkRecord,
        detected: LandmarkRecord,
    ) -> None:
        overlay = render_overlay(image, ground_truth, detected)
        if self.overlay_dir is None:
            return
        self.overlay_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.overlay_dir / f"{Path(_image_name(image_id)).stem}_overlay.png"
        cv2.imwrite(str(out_path), overlay)


def _read_image(image_id: str) -> np.ndarray:
    img = cv2.imread(image_id, cv2.IMREAD_COLOR)
    if img is None:
        raise DetectorFailure(image_id, "cannot read image")
    return img


def engine_callback(context: DetectionContext) -> DetectionCallback:
    def detect(image_id: str, ground_truth: LandmarkRecord) -> DetectionOutcome:
        image = _read_image(image_id)
        detected = context.detect(image_id)
        if detected is None:
            return DetectionOutcome(success=False, image=image, detected=LandmarkRecord())
        return DetectionOutcome(success=True, image=image, detected=detected)

    return detect


def fixture_callback(cache: FixtureCache, context: DetectionContext | None = None) -> DetectionCallback:
    def detect(image_id: str, ground_truth: LandmarkRecord) -> DetectionOutcome:
        image = _read_image(image_id)
        if context is None:
            cached = cache.load(image_id)
            if cached is None:
                raise DetectorFailure(image_id, f"no fixture at {cache.path_for(image_id)} and no detector")
            return DetectionOutcome(success=True, image=image, detected=cached)
        return DetectionOutcome(success=True, image=image, detected=load_or_detect(image_id, cache, context))

    return detect
