from __future__ import annotations

from dataclasses import dataclass
import importlib
import logging
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from .errors import DetectorConfigError
from .types import LandmarkRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class Detector(Protocol):
    def configure(self, config: str) -> bool: ...

    def set_image(self, path: str) -> str: ...

    def detect_landmarks(self, image_key: str) -> LandmarkRecord | None: ...


@dataclass(frozen=True, slots=True)
class DetectionContext:
    """Holds a detector that has already been configured once.

    Build it with :meth:`create`; nothing downstream calls ``configure`` again.
    """

    detector: Detector

    @classmethod
    def create(cls, detector: Detector, config_text: str) -> DetectionContext:
        if not detector.configure(config_text):
            raise DetectorConfigError(f"detector {type(detector).__name__} rejected its configuration")
        logger.info("configured detector %s", type(detector).__name__)
        return cls(detector=detector)

    def detect(self, image_path: str) -> LandmarkRecord | None:
        key = self.detector.set_image(image_path)
        return self.detector.detect_landmarks(key)


def read_engine_config(path: Path | str) -> str:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"engine config not found: {config_path}")
    return config_path.read_text(encoding="utf-8")


def load_detector(spec: str) -> Detector:
    """Instantiate a detector from ``"package.module:factory"``."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"detector spec must look like 'module:factory', got {spec!r}")
    module = importlib.import_module(module_name)
    factory: Callable[[], Any] = getattr(module, attr)
    detector = factory()
    if not isinstance(detector, Detector):
        raise TypeError(f"{spec} did not produce a detector (missing configure/set_image/detect_landmarks)")
    return detector
