from __future__ import annotations

import numpy as np
import pytest

from helpers import face, via_rows, write_via_csv
from landmark_harness import FormatError, load_point_matrix, parse_annotations


def test_parse_annotations_one_record_per_image(tmp_path) -> None:
    rows = via_rows("001_frontal.jpg", face()) + via_rows("002_frontal.JPG", face(offset=3))
    csv_path = write_via_csv(tmp_path / "via_region_data.csv", rows)

    annotations = parse_annotations(csv_path)

    assert list(annotations) == [str(tmp_path / "001_frontal.jpg"), str(tmp_path / "002_frontal.JPG")]
    first = annotations[str(tmp_path / "001_frontal.jpg")]
    assert first == face()
    second = annotations[str(tmp_path / "002_frontal.JPG")]
    assert second.eye_right_pupil == (68, 40)
    assert second.nose_tip is None


def test_parse_annotations_resolves_names_relative_to_csv(tmp_path) -> None:
    sub = tmp_path / "research" / "mugshots"
    sub.mkdir(parents=True)
    csv_path = write_via_csv(sub / "ann.csv", via_rows("a.jpg", face()))

    annotations = parse_annotations(csv_path)

    assert list(annotations) == [str(sub / "a.jpg")]


def test_parse_annotations_skips_images_without_regions(tmp_path) -> None:
    rows = [["empty.jpg", "10", "{}", "0", "0", "{}", "{}"]] + via_rows("a.jpg", face())
    csv_path = write_via_csv(tmp_path / "ann.csv", rows)

    annotations = parse_annotations(csv_path)

    assert list(annotations) == [str(tmp_path / "a.jpg")]


@pytest.mark.parametrize("bad_index", ["6", "-1"])
def test_parse_annotations_rejects_out_of_range_index(tmp_path, bad_index: str) -> None:
    rows = via_rows("a.jpg", face())
    rows[2][4] = bad_index
    csv_path = write_via_csv(tmp_path / "ann.csv", rows)

    with pytest.raises(FormatError, match="Invalid landmark index"):
        parse_annotations(csv_path)


def test_parse_annotations_rejects_file_without_landmarks(tmp_path) -> None:
    csv_path = write_via_csv(tmp_path / "ann.csv", [])

    with pytest.raises(FormatError, match="no landmark annotations"):
        parse_annotations(csv_path)


def test_parse_annotations_rejects_missing_file(tmp_path) -> None:
    with pytest.raises(FormatError, match="cannot read"):
        parse_annotations(tmp_path / "missing.csv")


def test_parse_annotations_rejects_undecodable_file(tmp_path) -> None:
    csv_path = tmp_path / "ann.csv"
    csv_path.write_bytes(b"\xff\xfe#filename,file_size\n\x80\x81,1\n")

    with pytest.raises(FormatError, match="cannot read annotation file"):
        parse_annotations(csv_path)


def test_parse_annotations_rejects_truncated_row(tmp_path) -> None:
    csv_path = write_via_csv(tmp_path / "ann.csv", [["a.jpg", "10", "{}", "6"]])

    with pytest.raises(FormatError, match="expected 7 columns"):
        parse_annotations(csv_path)


def test_load_point_matrix_reads_until_blank_line(tmp_path) -> None:
    pos = tmp_path / "001_frontal.pos"
    pos.write_text("1.5 2.0\n3 4\n\n9 9 9\n", encoding="utf-8")

    mat = load_point_matrix(pos)

    assert mat.shape == (2, 2)
    assert mat.dtype == np.float32
    assert np.allclose(mat, [[1.5, 2.0], [3.0, 4.0]])


def test_load_point_matrix_rejects_ragged_rows(tmp_path) -> None:
    pos = tmp_path / "bad.pos"
    pos.write_text("1 2\n3 4 5\n", encoding="utf-8")

    with pytest.raises(FormatError, match="inconsistent column count"):
        load_point_matrix(pos)


def test_load_point_matrix_rejects_undecodable_file(tmp_path) -> None:
    pos = tmp_path / "bad.pos"
    pos.write_bytes(b"1 2\n\xff\xfe\x80\n")

    with pytest.raises(FormatError, match="cannot read landmark matrix"):
        load_point_matrix(pos)
