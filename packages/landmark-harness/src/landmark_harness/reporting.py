from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from .types import ANNOTATION_SLOTS, LandmarkRecord, ResultRecord, point_distance


def landmark_errors(ground_truth: LandmarkRecord, detected: LandmarkRecord) -> dict[str, float | None]:
    out: dict[str, float | None] = {}
    for name in ANNOTATION_SLOTS.values():
        gt = getattr(ground_truth, name)
        det = getattr(detected, name)
        out[name] = None if gt is None or det is None else point_distance(gt, det)
    return out


def _safe_div(num: float, den: float) -> float | None:
    if den <= 0:
        return None
    return float(num / den)


def sample_row(result: ResultRecord) -> dict[str, Any]:
    return {
        "image_id": result.image_id,
        "success": result.success,
        "errors_px": landmark_errors(result.ground_truth, result.detected),
        "ground_truth": result.ground_truth.to_dict(),
        "detected": result.detected.to_dict(),
    }


def aggregate_results(results: list[ResultRecord]) -> dict[str, Any]:
    succeeded = [r for r in results if r.success]
    per_slot: dict[str, list[float]] = {name: [] for name in ANNOTATION_SLOTS.values()}
    for r in succeeded:
        for name, err in landmark_errors(r.ground_truth, r.detected).items():
            if err is not None:
                per_slot[name].append(err)

    slot_rows: dict[str, dict[str, Any]] = {}
    for name, errs in per_slot.items():
        slot_rows[name] = {
            "num_measured": len(errs),
            "error_px_mean": float(np.mean(errs)) if errs else None,
            "error_px_median": float(np.median(errs)) if errs else None,
            "error_px_max": float(np.max(errs)) if errs else None,
        }

    return {
        "num_images": len(results),
        "num_succeeded": len(succeeded),
        "num_failed": len(results) - len(succeeded),
        "success_rate": _safe_div(len(succeeded), len(results)),
        "landmarks": slot_rows,
        "failed_images": [r.image_id for r in results if not r.success],
    }


def write_reports(reports_dir: Path, results: list[ResultRecord], aggregate: dict[str, Any]) -> dict[str, str]:
    reports_dir.mkdir(parents=True, exist_ok=True)
    summary_json = reports_dir / "regression_report.json"
    sample_jsonl = reports_dir / "regression_samples.jsonl"
    summary_md = reports_dir / "regression_summary.md"

    summary_json.write_text(json.dumps({"aggregate": aggregate}, indent=2), encoding="utf-8")

    with sample_jsonl.open("w", encoding="utf-8") as f:
        for r in results:
            f.write(json.dumps(sample_row(r), ensure_ascii=True) + "\n")

    lines = [
        "# Landmark Regression Summary",
        "",
        f"- images: {aggregate['num_images']}",
        f"- succeeded: {aggregate['num_succeeded']}",
        f"- failed: {aggregate['num_failed']}",
        f"- success rate: {aggregate['success_rate']}",
        "",
        "## Landmark Errors (px)",
    ]
    for name, row in aggregate["landmarks"].items():
        lines.append(
            f"- {name}: mean={row['error_px_mean']}, median={row['error_px_median']}, "
            f"max={row['error_px_max']} (n={row['num_measured']})"
        )
    if aggregate["failed_images"]:
        lines.append("")
        lines.append("## Failed Images")
        lines.extend(f"- `{image_id}`" for image_id in aggregate["failed_images"])
    summary_md.write_text("\n".join(lines) + "\n", encoding="utf-8")

    return {
        "summary_json": str(summary_json),
        "sample_jsonl": str(sample_jsonl),
        "summary_md": str(summary_md),
    }
