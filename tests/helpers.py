from __future__ import annotations

import csv
import json
from pathlib import Path

from landmark_harness import LandmarkRecord

HEADER = [
    "filename",
    "file_size",
    "file_attributes",
    "region_count",
    "region_id",
    "region_shape_attributes",
    "region_attributes",
]

SLOT_ORDER = ("crown_point", "chin_point", "eye_left_pupil", "eye_right_pupil", "lip_left_corner", "lip_right_corner")


def via_rows(filename: str, record: LandmarkRecord) -> list[list[str]]:
    rows: list[list[str]] = []
    for idx, name in enumerate(SLOT_ORDER):
        pt = getattr(record, name)
        shape = json.dumps({"name": "point", "cx": pt[0], "cy": pt[1]}, separators=(",", ":"))
        rows.append([filename, "1024", "{}", "6", str(idx), shape, "{}"])
    return rows


def write_via_csv(path: Path, rows: list[list[str]], *, header: bool = True) -> Path:
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        if header:
            writer.writerow(["#" + HEADER[0], *HEADER[1:]])
        writer.writerows(rows)
    return path


def face(offset: int = 0) -> LandmarkRecord:
    return LandmarkRecord(
        crown_point=(50 + offset, 5),
        chin_point=(50 + offset, 95),
        eye_left_pupil=(35 + offset, 40),
        eye_right_pupil=(65 + offset, 40),
        lip_left_corner=(40 + offset, 75),
        lip_right_corner=(60 + offset, 75),
    )


class FakeDetector:
    def __init__(self, results: dict[str, LandmarkRecord] | None = None, accept: bool = True) -> None:
        self.results = results or {}
        self.accept = accept
        self.configure_calls: list[str] = []
        self.detect_calls: list[str] = []

    def configure(self, config: str) -> bool:
        self.configure_calls.append(config)
        return self.accept

    def set_image(self, path: str) -> str:
        return f"key:{path}"

    def detect_landmarks(self, image_key: str) -> LandmarkRecord | None:
        path = image_key.removeprefix("key:")
        self.detect_calls.append(path)
        return self.results.get(path)
