"""
DevSecOps Pipeline: Run Configuration

One immutable PipelineConfig per run. Values are layered, later wins:

    defaults → YAML file → DEVSECOPS_* environment → CLI flags

Defaults are the stock command-line values, so an empty configuration runs
exactly the fixed command lines.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Mapping, Optional

import yaml

from devsecops.errors import ConfigError


ENV_PREFIX = "DEVSECOPS_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PipelineConfig:
    stage: str = "all"
    workdir: Path = field(default_factory=lambda: Path("."))

    # Command-line literals, one per external tool invocation
    project_name: str = "My Project"
    dependency_report: str = "./dependency-check-report.html"
    tests_dir: str = "tests"
    plan_file: str = "tfplan.out"
    inventory: str = "inventory.ini"
    playbook: str = "playbook.yml"
    image_tag: str = "myapp:latest"
    target_url: str = "http://localhost"
    manifest: str = "k8s/deployment.yml"

    # Runner behaviour
    auto_install: bool = True
    dry_run: bool = False
    install_settle_s: float = 2.0


def _field_types() -> dict:
    return {f.name: f.type for f in fields(PipelineConfig)}


def _coerce(name: str, value, source: str):
    """Convert a raw YAML/env value to the type of field `name`."""
    expected = _field_types()[name]
    try:
        if expected in (bool, "bool"):
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if expected in (float, "float"):
            if isinstance(value, bool):
                raise ValueError(f"not a number: {value!r}")
            number = float(value)
            if number < 0:
                raise ValueError(f"must be >= 0: {value!r}")
            return number
        if expected in (Path, "Path"):
            return Path(str(value))
        if isinstance(value, (dict, list)) or value is None:
            raise ValueError(f"not a string: {value!r}")
        return str(value)
    except ValueError as e:
        raise ConfigError(f"{source}: invalid value for '{name}': {e}") from e


def load_yaml(path) -> dict:
    """Read a YAML config file. Top level must be a mapping of known fields."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path}: not valid UTF-8 text: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    known = _field_types()
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        raise ConfigError(f"{path}: unknown key(s): {', '.join(unknown)}")

    return {k: _coerce(k, v, str(path)) for k, v in data.items()}


def load_env(environ: Optional[Mapping[str, str]] = None) -> dict:
    """Collect DEVSECOPS_<FIELD> overrides from the environment."""
    environ = os.environ if environ is None else environ
    values = {}
    for name in _field_types():
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None or raw.strip() == "":
            continue
        values[name] = _coerce(name, raw, f"{ENV_PREFIX}{name.upper()}")
    return values


def load_config(
    path=None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> PipelineConfig:
    """Build the run configuration from all layers.

    Args:
        path: Optional YAML file.
        environ: Environment mapping (default: os.environ).
        **overrides: CLI values. None means "not given" and is skipped.
    """
    known = _field_types()
    bad = sorted(k for k in overrides if k not in known)
    if bad:
        raise ConfigError(f"Unknown config override(s): {', '.join(bad)}")

    values = {}
    if path is not None:
        values.update(load_yaml(path))
    values.update(load_env(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    config = replace(PipelineConfig(), **values)
    if not Path(config.workdir).is_dir():
        raise ConfigError(f"Working directory does not exist: {config.workdir}")
    return config
