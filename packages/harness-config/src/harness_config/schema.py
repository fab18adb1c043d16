from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any


_ALLOWED_TOP = {
    "paths",
    "run",
    "report",
}
_PATH_KEYS = {
    "annotations",
    "test_data_dir",
    "engine_config",
    "fixtures_dir",
    "benchmarks_dir",
    "reports_dir",
    "overlays_dir",
}


@dataclass(frozen=True, slots=True)
class HarnessConfig:
    config_path: Path
    config_root: Path
    paths: dict[str, Any]
    run: dict[str, Any]
    report: dict[str, Any]


def _section(payload: Any, where: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"harness config: {where} must be a JSON object, got {type(payload).__name__}")
    return payload


def _check_keys(
    section: dict[str, Any],
    where: str,
    allowed: set[str],
    required: frozenset[str] = frozenset(),
) -> None:
    unknown = sorted(set(section) - allowed)
    if unknown:
        raise ValueError(f"harness config: unknown keys in {where}: {unknown}")
    missing = sorted(required - set(section))
    if missing:
        raise ValueError(f"harness config: missing required keys in {where}: {missing}")


def _config_path(config_root: Path, raw: Any) -> Path:
    # Joining onto an absolute entry yields the entry itself.
    return (config_root / str(raw)).resolve()


def _normalize_run(run: dict[str, Any]) -> dict[str, Any]:
    exclude = run.get("exclude") or []
    if not isinstance(exclude, list):
        raise ValueError("run.exclude must be a list of image identifiers")
    detector = run.get("detector")
    if detector is not None and ":" not in str(detector):
        raise ValueError(f"run.detector must look like 'module:factory', got {detector!r}")
    min_success_rate = float(run.get("min_success_rate", 0.0))
    if min_success_rate < 0.0 or min_success_rate > 1.0:
        raise ValueError("run.min_success_rate must be in [0,1]")
    return {
        "exclude": [str(e) for e in exclude],
        "annotate": bool(run.get("annotate", False)),
        "detector": None if detector is None else str(detector),
        "use_fixtures": bool(run.get("use_fixtures", True)),
        "min_success_rate": min_success_rate,
    }


def load_harness_config(path: Path | str = "harness.json") -> HarnessConfig:
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"config not found: {config_path}")

    payload = json.loads(config_path.read_text(encoding="utf-8"))
    payload = _section(payload, "config")
    _check_keys(payload, "config", _ALLOWED_TOP, frozenset({"paths", "run"}))

    config_root = config_path.parent

    paths = _section(payload.get("paths", {}), "paths")
    _check_keys(paths, "paths", _PATH_KEYS, frozenset({"annotations", "test_data_dir"}))

    annotations = _config_path(config_root, paths["annotations"])
    test_data_dir = _config_path(config_root, paths["test_data_dir"])
    engine_config = (
        _config_path(config_root, paths["engine_config"]) if paths.get("engine_config") else None
    )

    run = _section(payload.get("run", {}), "run")
    _check_keys(run, "run", {"exclude", "annotate", "detector", "use_fixtures", "min_success_rate"})
    run_norm = _normalize_run(run)

    report = _section(payload.get("report", {}), "report")
    _check_keys(report, "report", {"enabled"})
    report_norm = {"enabled": bool(report.get("enabled", True))}

    paths_norm: dict[str, Any] = {
        "annotations": annotations,
        "test_data_dir": test_data_dir,
        "engine_config": engine_config,
    }
    for key in ("fixtures_dir", "benchmarks_dir", "reports_dir", "overlays_dir"):
        raw = paths.get(key)
        paths_norm[key] = _config_path(config_root, raw) if raw else None

    return HarnessConfig(
        config_path=config_path,
        config_root=config_root,
        paths=paths_norm,
        run=run_norm,
        report=report_norm,
    )
