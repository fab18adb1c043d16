from __future__ import annotations

import json
import logging
from pathlib import Path

from .engine import DetectionContext
from .errors import DetectorFailure, FormatError
from .types import LandmarkRecord

logger = logging.getLogger(__name__)

FIXTURE_SUFFIX = ".json"


class FixtureCache:
    """Previously detected landmarks, one JSON file per image base name."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, image_id: str) -> Path:
        # Split on both separators so Windows-style ids map to the same fixture.
        name = image_id.replace("\\", "/").rsplit("/", 1)[-1]
        return self.root / f"{name}{FIXTURE_SUFFIX}"

    def load(self, image_id: str) -> LandmarkRecord | None:
        path = self.path_for(image_id)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return LandmarkRecord.from_dict(payload)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise FormatError(f"corrupt landmark fixture {path}: {exc}") from exc

    def store(self, image_id: str, record: LandmarkRecord) -> Path:
        path = self.path_for(image_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        return path

    def refresh(self, image_id: str, context: DetectionContext) -> LandmarkRecord:
        record = _detect(image_id, context)
        path = self.store(image_id, record)
        logger.info("refreshed fixture %s", path)
        return record


def _detect(image_id: str, context: DetectionContext) -> LandmarkRecord:
    record = context.detect(image_id)
    if record is None:
        raise DetectorFailure(image_id, "detector returned no landmarks")
    return record


def load_or_detect(image_id: str, cache: FixtureCache, context: DetectionContext) -> LandmarkRecord:
    cached = cache.load(image_id)
    if cached is not None:
        return cached
    record = _detect(image_id, context)
    path = cache.store(image_id, record)
    logger.info("fixture miss for %s, stored %s", image_id, path)
    return record
