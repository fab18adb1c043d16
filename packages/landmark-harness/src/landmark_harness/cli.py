from __future__ import annotations

import argparse
import logging
from pathlib import Path

from harness_config import build_layout, load_harness_config

from .annotations import parse_annotations
from .engine import DetectionContext, load_detector, read_engine_config
from .fixtures import FixtureCache
from .reporting import aggregate_results, write_reports
from .runner import RegressionRunner, engine_callback, fixture_callback
from .statistics import crown_chin_coefficients


def _fmt_float(v: float | None, digits: int = 4) -> str:
    if v is None:
        return "n/a"
    return f"{float(v):.{digits}f}"


def _parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=Path("harness.json"))
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main() -> None:
    args = _parser("Run the landmark detector against annotated ground truth").parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    shared = load_harness_config(args.config)
    layout = build_layout(
        test_data_dir=shared.paths["test_data_dir"],
        fixtures_dir=shared.paths["fixtures_dir"],
        benchmarks_dir=shared.paths["benchmarks_dir"],
        overlays_dir=shared.paths["overlays_dir"],
        reports_dir=shared.paths["reports_dir"],
    )

    rc = shared.run
    context = None
    if rc["detector"] is not None:
        if shared.paths["engine_config"] is None:
            raise SystemExit("paths.engine_config is required when run.detector is set")
        context = DetectionContext.create(
            load_detector(rc["detector"]),
            read_engine_config(shared.paths["engine_config"]),
        )

    if rc["use_fixtures"]:
        detect = fixture_callback(FixtureCache(layout.fixtures_root), context)
    elif context is not None:
        detect = engine_callback(context)
    else:
        raise SystemExit("run.detector must be set when run.use_fixtures is false")

    runner = RegressionRunner(
        detect,
        exclusions=rc["exclude"],
        annotate=rc["annotate"],
        overlay_dir=layout.overlays_root,
    )
    results = runner.run(shared.paths["annotations"])
    aggregate = aggregate_results(results)

    print("Regression")
    print(f"- annotations: {shared.paths['annotations']}")
    print(f"- images_processed: {aggregate['num_images']}")
    print(f"- succeeded: {aggregate['num_succeeded']}")
    print(f"- failed: {aggregate['num_failed']}")
    print(f"- success_rate: {_fmt_float(aggregate['success_rate'])}")
    for name, row in aggregate["landmarks"].items():
        print(f"- {name}_error_px_median: {_fmt_float(row['error_px_median'], 2)}")

    if shared.report["enabled"]:
        reports = write_reports(layout.reports_root, results, aggregate)
        print("")
        print("Artifacts")
        print(f"- summary_json: {reports['summary_json']}")
        print(f"- sample_jsonl: {reports['sample_jsonl']}")
        print(f"- summary_md: {reports['summary_md']}")

    success_rate = aggregate["success_rate"] or 0.0
    if success_rate < rc["min_success_rate"]:
        print(f"CHECK FAILED: success_rate={success_rate:.4f} below min={rc['min_success_rate']}")
        raise SystemExit(2)


def coefficients_main() -> None:
    args = _parser("Compute crown/chin normalization coefficients from ground truth").parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    shared = load_harness_config(args.config)
    annotations = parse_annotations(shared.paths["annotations"])
    coeffs = crown_chin_coefficients(annotations.values())
    print(f"samples: {coeffs.num_samples}")
    print(f"Chin-crown normalization: {coeffs.chin_crown}")
    print(f"Chin-frown normalization: {coeffs.chin_frown}")


if __name__ == "__main__":
    main()
