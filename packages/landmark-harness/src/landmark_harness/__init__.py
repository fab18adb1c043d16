"""Ground-truth driven regression harness for passport-photo landmark detection."""

from .annotations import load_point_matrix, parse_annotations
from .diff import ImageComparison, benchmark_path, benchmark_validate, compare_images, verify_equal_images
from .engine import DetectionContext, Detector, load_detector, read_engine_config
from .errors import BenchmarkMissing, DetectorConfigError, DetectorFailure, FormatError, HarnessError, ImageMismatch
from .fixtures import FixtureCache, load_or_detect
from .overlay import annotate, render_ground_truth, render_landmarks
from .reporting import aggregate_results, landmark_errors, write_reports
from .runner import DetectionOutcome, RegressionRunner, RunState, engine_callback, fixture_callback
from .statistics import CrownChinCoefficients, crown_chin_coefficients, crown_chin_ratios
from .types import AnnotationSet, LandmarkRecord, ResultRecord

__all__ = [
    "AnnotationSet",
    "BenchmarkMissing",
    "CrownChinCoefficients",
    "DetectionContext",
    "DetectionOutcome",
    "Detector",
    "DetectorConfigError",
    "DetectorFailure",
    "FixtureCache",
    "FormatError",
    "HarnessError",
    "ImageComparison",
    "ImageMismatch",
    "LandmarkRecord",
    "RegressionRunner",
    "ResultRecord",
    "RunState",
    "aggregate_results",
    "annotate",
    "benchmark_path",
    "benchmark_validate",
    "compare_images",
    "crown_chin_coefficients",
    "crown_chin_ratios",
    "engine_callback",
    "fixture_callback",
    "landmark_errors",
    "load_detector",
    "load_or_detect",
    "load_point_matrix",
    "parse_annotations",
    "read_engine_config",
    "render_ground_truth",
    "render_landmarks",
    "verify_equal_images",
    "write_reports",
]
