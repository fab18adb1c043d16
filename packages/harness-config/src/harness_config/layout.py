from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class HarnessLayout:
    test_data_dir: Path
    fixtures_root: Path
    benchmarks_root: Path
    overlays_root: Path
    reports_root: Path


def build_layout(
    *,
    test_data_dir: Path,
    fixtures_dir: Path | None = None,
    benchmarks_dir: Path | None = None,
    overlays_dir: Path | None = None,
    reports_dir: Path | None = None,
) -> HarnessLayout:
    # Fixtures and benchmarks sit next to the test data unless overridden.
    return HarnessLayout(
        test_data_dir=test_data_dir,
        fixtures_root=fixtures_dir if fixtures_dir is not None else test_data_dir,
        benchmarks_root=benchmarks_dir if benchmarks_dir is not None else test_data_dir,
        overlays_root=overlays_dir if overlays_dir is not None else test_data_dir / "overlays",
        reports_root=reports_dir if reports_dir is not None else test_data_dir / "reports",
    )
