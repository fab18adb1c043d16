from __future__ import annotations

import json

from helpers import face
from landmark_harness import LandmarkRecord, ResultRecord, aggregate_results, landmark_errors, write_reports


def _results() -> list[ResultRecord]:
    return [
        ResultRecord("a.jpg", face(), face(), True),
        ResultRecord("b.jpg", face(), face(offset=3), True),
        ResultRecord("c.jpg", face(), LandmarkRecord(), False),
    ]


def test_landmark_errors_measure_pixel_distance() -> None:
    errs = landmark_errors(face(), face(offset=3))
    assert errs["crown_point"] == 3.0
    assert errs["lip_right_corner"] == 3.0
    assert landmark_errors(face(), LandmarkRecord())["chin_point"] is None


def test_aggregate_results_counts_and_medians() -> None:
    agg = aggregate_results(_results())
    assert agg["num_images"] == 3
    assert agg["num_failed"] == 1
    assert agg["failed_images"] == ["c.jpg"]
    assert abs(agg["success_rate"] - 2 / 3) < 1e-9
    assert agg["landmarks"]["chin_point"]["num_measured"] == 2
    assert agg["landmarks"]["chin_point"]["error_px_median"] == 1.5
    assert agg["landmarks"]["chin_point"]["error_px_max"] == 3.0


def test_aggregate_results_empty_run() -> None:
    agg = aggregate_results([])
    assert agg["success_rate"] is None
    assert agg["landmarks"]["crown_point"]["error_px_mean"] is None


def test_write_reports_emits_all_artifacts(tmp_path) -> None:
    results = _results()
    paths = write_reports(tmp_path / "reports", results, aggregate_results(results))

    payload = json.loads((tmp_path / "reports" / "regression_report.json").read_text(encoding="utf-8"))
    assert payload["aggregate"]["num_images"] == 3
    lines = (tmp_path / "reports" / "regression_samples.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(l)["image_id"] for l in lines] == ["a.jpg", "b.jpg", "c.jpg"]
    summary = (tmp_path / "reports" / "regression_summary.md").read_text(encoding="utf-8")
    assert "`c.jpg`" in summary
    assert set(paths) == {"summary_json", "sample_jsonl", "summary_md"}
