"""Ground-truth annotation loading.

Annotations come from VIA (VGG Image Annotator) CSV exports where every image
carries six point regions, one per landmark slot::

    filename,file_size,file_attributes,region_count,region_id,region_shape_attributes,region_attributes
    001_frontal.jpg,51234,"{}",6,0,"{""name"":""point"",""cx"":310,""cy"":42}","{}"
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
import io
import json
import logging
from pathlib import Path

import numpy as np

from .errors import FormatError
from .types import ANNOTATION_SLOTS, AnnotationSet, LandmarkRecord

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".bmp"}
NUM_COLUMNS = 7


@dataclass(slots=True)
class AnnotationRow:
    line_no: int
    filename: str
    region_count: str
    region_id: str
    shape_attributes: str


def _tokenize(text: str) -> list[AnnotationRow]:
    rows: list[AnnotationRow] = []
    reader = csv.reader(io.StringIO(text))
    for fields in reader:
        line_no = reader.line_num
        if not fields or not any(f.strip() for f in fields):
            continue
        first = fields[0].strip()
        if first.startswith("#") or first == "filename":
            continue
        if len(fields) < NUM_COLUMNS:
            raise FormatError(f"line {line_no}: expected {NUM_COLUMNS} columns, got {len(fields)}")
        rows.append(
            AnnotationRow(
                line_no=line_no,
                filename=first,
                region_count=fields[3].strip(),
                region_id=fields[4].strip(),
                shape_attributes=fields[5].strip(),
            )
        )
    return rows


def _parse_point(row: AnnotationRow) -> tuple[int, int] | None:
    try:
        shape = json.loads(row.shape_attributes or "{}")
    except json.JSONDecodeError as exc:
        raise FormatError(f"line {row.line_no}: invalid region_shape_attributes: {exc}") from exc
    if not isinstance(shape, dict):
        raise FormatError(f"line {row.line_no}: region_shape_attributes must be an object")
    if "cx" not in shape or "cy" not in shape:
        return None
    try:
        return int(shape["cx"]), int(shape["cy"])
    except (TypeError, ValueError) as exc:
        raise FormatError(f"line {row.line_no}: point coordinates must be integers: {shape}") from exc


def _parse_slot(row: AnnotationRow) -> int:
    try:
        idx = int(row.region_id)
    except ValueError as exc:
        raise FormatError(f"line {row.line_no}: region_id is not an integer: {row.region_id!r}") from exc
    if idx not in ANNOTATION_SLOTS:
        raise FormatError(f"Invalid landmark index {idx} at line {row.line_no}, expected 0-{len(ANNOTATION_SLOTS) - 1}")
    return idx


def parse_annotations(path: Path | str) -> AnnotationSet:
    csv_path = Path(path)
    try:
        text = csv_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FormatError(f"cannot read annotation file {csv_path}: {exc}") from exc

    image_dir = csv_path.parent
    landmarks: AnnotationSet = {}
    matched = 0
    for row in _tokenize(text):
        if Path(row.filename).suffix.lower() not in IMAGE_SUFFIXES:
            logger.debug("skipping line %d: not an image entry (%s)", row.line_no, row.filename)
            continue
        point = _parse_point(row)
        if point is None:
            logger.debug("skipping line %d: no point region for %s", row.line_no, row.filename)
            continue
        slot = _parse_slot(row)
        image_path = str(image_dir / row.filename)
        current = landmarks.get(image_path, LandmarkRecord())
        landmarks[image_path] = current.with_point(slot, point)
        matched += 1

    if matched == 0:
        raise FormatError(f"no landmark annotations found in {csv_path}")
    logger.info("loaded %d annotations for %d images from %s", matched, len(landmarks), csv_path)
    return landmarks


def load_point_matrix(path: Path | str) -> np.ndarray:
    """Load a whitespace separated float matrix, e.g. SCFace ``.pos`` landmark files.

    Reading stops at the first empty line after the first row.
    """
    txt_path = Path(path)
    try:
        lines = txt_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise FormatError(f"cannot read landmark matrix {txt_path}: {exc}") from exc

    rows: list[list[float]] = []
    for line_no, line in enumerate(lines, start=1):
        try:
            values = [float(v) for v in line.split()]
        except ValueError as exc:
            raise FormatError(f"invalid number at {txt_path}:{line_no}: {exc}") from exc
        if not values:
            if rows:
                break
            continue
        if rows and len(values) != len(rows[0]):
            raise FormatError(
                f"inconsistent column count at {txt_path}:{line_no}: expected {len(rows[0])}, got {len(values)}"
            )
        rows.append(values)
    if not rows:
        return np.zeros((0, 0), dtype=np.float32)
    return np.array(rows, dtype=np.float32)
