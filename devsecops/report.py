"""Run report: the PipelineResult as JSON plus a plain-text summary."""

import json
from dataclasses import asdict
from pathlib import Path

from devsecops.console import format_run_summary


def build_report(result) -> dict:
    return {
        "stage": result.stage,
        "passed": result.passed,
        "timestamp": result.timestamp,
        "total_time_s": result.total_time_s,
        "planned": list(result.planned),
        "completed": result.completed,
        "failed_action": result.failed_action,
        "error": str(result.error) if result.error else None,
        "error_type": type(result.error).__name__ if result.error else None,
        "actions": [asdict(r) for r in result.results],
    }


def save_report(result, path, include_summary: bool = True) -> dict:
    """Save the run report to disk.

    Creates:
    - {path}: machine-readable JSON
    - {path}.txt: human-readable summary (uncoloured)

    Returns dict with file paths.
    """
    json_path = Path(path)
    json_path.parent.mkdir(parents=True, exist_ok=True)

    with open(json_path, "w") as f:
        json.dump(build_report(result), f, indent=2, default=str)

    paths = {"json": str(json_path)}

    if include_summary:
        txt_path = json_path.with_name(json_path.name + ".txt")
        with open(txt_path, "w") as f:
            f.write(format_run_summary(result, color=False) + "\n")
        paths["summary"] = str(txt_path)

    return paths
