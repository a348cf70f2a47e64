#!/usr/bin/env python3
"""
DevSecOps Pipeline: Main Entry Point

Secret scan, dependency scan, tests, IaC, config management, code quality,
container build and scan, SAST/DAST, Jenkins, monitoring, Kubernetes deploy.
One stage or all of them, in a fixed order, stopping at the first failure.

Usage:
    python main.py                        # All stages
    python main.py -s terraform           # One stage
    python main.py -s docker --dry-run    # Print commands only
    python main.py --check-tools          # Which tools are missing?
    python main.py -h
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment before the config layer reads DEVSECOPS_* values
load_dotenv()

from devsecops.config import PipelineConfig, load_config
from devsecops.console import format_run_summary, log_error, log_info, use_color
from devsecops.errors import ConfigError, UnknownStageError
from devsecops.orchestrator import run_pipeline
from devsecops.report import save_report
from devsecops.stages import STAGE_DESCRIPTIONS, resolve
from devsecops.tools import format_preflight, run_preflight


HELP_FLAGS = ("-h", "--help")


class UsageError(Exception):
    pass


class PipelineArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments through UsageError instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def usage_text(prog: Optional[str] = None) -> str:
    prog = prog or os.path.basename(sys.argv[0]) or "main.py"
    lines = [
        f"Usage: {prog} [-h|--help] [-s|--stage stage] [--config FILE] [--no-install]",
        f"       {' ' * len(prog)} [--dry-run] [--check-tools] [--report FILE] [--workdir DIR]",
        "",
        "Options:",
        "  -h, --help            Show this help message and exit.",
        "  -s, --stage stage     Execute a specific stage of the pipeline.",
        "                        Available stages:",
    ]
    for name, description in STAGE_DESCRIPTIONS.items():
        lines.append(f"                          {name:<11s} {description}")
    lines += [
        "  --config FILE         YAML file overriding tool arguments (image tag, target URL, ...).",
        "  --no-install          Do not try to install missing tools; fail instead.",
        "  --dry-run             Print each command instead of running it.",
        "  --check-tools         Report which tools the stage needs and exit.",
        "  --report FILE         Write a JSON run report (and FILE.txt summary).",
        "  --workdir DIR         Directory the tools run in (default: current directory).",
        "",
    ]
    return "\n".join(lines)


def build_parser() -> PipelineArgumentParser:
    parser = PipelineArgumentParser(add_help=False, allow_abbrev=False)
    parser.add_argument("-s", "--stage", default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--no-install", action="store_true")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--check-tools", action="store_true")
    parser.add_argument("--report", type=Path, default=None)
    parser.add_argument("--workdir", type=Path, default=None)
    return parser


def display_config(config: PipelineConfig) -> None:
    """Show the settings that differ from the stock pipeline."""
    defaults = PipelineConfig()
    changed = {
        k: v for k, v in config.__dict__.items()
        if k != "stage" and v != getattr(defaults, k)
    }
    if not changed:
        return
    print("Configuration overrides:")
    for key, value in changed.items():
        print(f"  {key:<18s} = {value}")


def display_plan(actions) -> None:
    print("\n" + "=" * 60)
    print(f"PLAN: {len(actions)} action(s)")
    print("=" * 60)
    for i, action in enumerate(actions, 1):
        print(f"  {i:>2d}. {action.name:<11s} {action.description}")
        for argv in action.commands:
            print(f"        $ {' '.join(argv)}")
    print("=" * 60)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)

    # Help wins over everything else on the command line
    if any(a in HELP_FLAGS for a in argv):
        print(usage_text())
        return 0

    parser = build_parser()
    try:
        args, extras = parser.parse_known_args(argv)
    except UsageError as e:
        print(f"Error: {e}")
        print(usage_text())
        return 0
    if extras:
        print(f"Unknown option: {extras[0]}")
        print(usage_text())
        return 0

    try:
        config = load_config(
            args.config,
            stage=args.stage,
            workdir=args.workdir,
            auto_install=False if args.no_install else None,
            dry_run=True if args.dry_run else None,
        )
    except ConfigError as e:
        log_error(str(e))
        return 1

    log_info("Starting CI/CD pipeline execution...")
    display_config(config)

    try:
        actions = resolve(config.stage, config)
    except UnknownStageError as e:
        print(e)
        print(usage_text())
        return 0

    if args.check_tools:
        preflight = run_preflight(actions)
        print(format_preflight(preflight))
        return 0 if preflight.all_passed else 1

    if config.dry_run:
        display_plan(actions)

    try:
        result = run_pipeline(actions, config)
    except KeyboardInterrupt:
        print("\nInterrupted. Pipeline aborted.")
        return 130

    print()
    print(format_run_summary(result, color=use_color()))

    if args.report:
        paths = save_report(result, args.report)
        print(f"\nReport saved to: {paths['json']}")

    if not result.passed:
        log_error(str(result.error))
        return 1

    log_info("CI/CD pipeline execution completed.")
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
