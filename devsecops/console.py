"""
DevSecOps Pipeline: Terminal Output

Timestamped log lines and the end-of-run summary. Colour is only used when
the output stream is a terminal.
"""

import sys
from datetime import datetime
from typing import Optional


# ANSI escape codes
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"
GREEN = "\033[32m"
RED = "\033[31m"
YELLOW = "\033[33m"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def log_info(message: str) -> None:
    """Print `message` as an INFO line, e.g. ``2025-01-01 12:00:00 [INFO] ...``."""
    print(f"{timestamp()} [INFO] {message}", flush=True)


def log_error(message: str) -> None:
    print(f"{timestamp()} [ERROR] {message}", flush=True)


def use_color(stream=None) -> bool:
    stream = stream or sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def _paint(text: str, code: str, color: bool) -> str:
    return f"{code}{text}{RESET}" if color else text


def format_run_summary(result, color: bool = False) -> str:
    """Render a PipelineResult as a status table.

    Actions that never ran (after a failure) are listed as SKIPPED.
    """
    lines = []
    lines.append("=" * 60)
    lines.append(_paint(f"PIPELINE SUMMARY: stage '{result.stage}'", BOLD, color))
    lines.append("=" * 60)

    ran = {r.name: r for r in result.results}
    for name in result.planned:
        r = ran.get(name)
        if r is None:
            label, code = "SKIPPED", DIM
            detail = ""
        elif r.success:
            label, code = "OK", GREEN
            detail = f"{r.duration_s:.2f}s"
        else:
            label, code = "FAILED", RED
            detail = f"{r.duration_s:.2f}s  {r.error}"
        # Pad before painting; escape codes would count towards the width
        status = _paint(f"{label:>7s}", code, color)
        lines.append(f"  [{status}] {name:<12s} {detail}".rstrip())

    lines.append("-" * 60)
    if result.passed:
        lines.append(_paint(
            f"PASSED: {len(result.results)} action(s) in {result.total_time_s:.2f}s",
            GREEN, color,
        ))
    else:
        lines.append(_paint(
            f"FAILED at '{result.failed_action}': {result.error}",
            RED, color,
        ))
    return "\n".join(lines)
