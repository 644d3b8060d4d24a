"""Load the simulator configuration from YAML.

Falls back to the packaged ``default.yml`` when no path is given.  The
policy list is validated here, so a bad definition fails at load time with
the file name, but kept as raw definitions so the pipeline can be built
later against whichever clock the simulator ends up using.
"""

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import structlog
import yaml

from analyzer.policies.loader import build_policies

logger = structlog.get_logger()

DEFAULT_CONFIG = Path(__file__).resolve().parent / "default.yml"

_REQUIRED_FIELDS = ("enforcer", "policies")
_REQUIRED_ENFORCER = ("max_requests", "window_seconds")


@dataclass(frozen=True)
class SimulatorConfig:
    max_requests: int
    window: timedelta
    policies: tuple[dict, ...]


def load_config(path: str | Path | None = None) -> SimulatorConfig:
    path = Path(path) if path else DEFAULT_CONFIG
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    config = _parse_and_validate(data, path.name)
    logger.debug("loaded_config", path=str(path),
                 max_requests=config.max_requests,
                 policies=len(config.policies))
    return config


def _parse_and_validate(data: dict, source: str) -> SimulatorConfig:
    if not isinstance(data, dict):
        raise ValueError(f"{source}: top level must be a mapping")

    for field in _REQUIRED_FIELDS:
        if field not in data:
            raise ValueError(f"{source}: missing required field '{field}'")

    enforcer = data["enforcer"]
    if not isinstance(enforcer, dict):
        raise ValueError(f"{source}: 'enforcer' must be a mapping")

    for field in _REQUIRED_ENFORCER:
        if field not in enforcer:
            raise ValueError(
                f"{source}: missing required enforcer field '{field}'"
            )
        value = enforcer[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{source}: enforcer.{field} must be a number")
        if value <= 0:
            raise ValueError(f"{source}: enforcer.{field} must be positive")

    policies = data["policies"]
    if not isinstance(policies, list):
        raise ValueError(f"{source}: 'policies' must be a list")
    build_policies(policies, source=source)

    return SimulatorConfig(
        max_requests=int(enforcer["max_requests"]),
        window=timedelta(seconds=enforcer["window_seconds"]),
        policies=tuple(policies),
    )
