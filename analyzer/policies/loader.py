"""Build a policy pipeline from YAML definitions.

Each definition is a mapping with a ``type`` plus that policy's parameters,
durations given in seconds (or milliseconds where the key says so):

    - type: burst_detection
      burst_threshold: 4
      window_seconds: 3

Order in the list is the order the analyzer runs them, which is the order
violations appear in the report.
"""

from datetime import timedelta

from limiter.clock import Clock, system_clock
from analyzer.policies import (
    AbnormalPattern,
    BurstDetection,
    FixedWindow,
    Policy,
    RetryAbuse,
    SlidingWindow,
)

# type -> required parameter names
_REQUIRED = {
    "fixed_window": ("max_requests", "window_seconds"),
    "sliding_window": ("max_requests", "window_seconds"),
    "burst_detection": ("burst_threshold", "window_seconds"),
    "abnormal_pattern": (),
    "retry_abuse": ("max_consecutive", "window_seconds"),
}

# type -> optional parameter names, zero allowed
_OPTIONAL = {
    "abnormal_pattern": ("unusual_hour_threshold", "uniform_tolerance_ms"),
}


def build_policy(definition: dict, clock: Clock = system_clock,
                 source: str = "<config>") -> Policy:
    """Turn one validated definition into a policy instance."""
    _validate(definition, source)
    kind = definition["type"]

    if kind == "fixed_window":
        return FixedWindow(definition["max_requests"],
                           _seconds(definition["window_seconds"]), clock=clock)
    elif kind == "sliding_window":
        return SlidingWindow(definition["max_requests"],
                             _seconds(definition["window_seconds"]))
    elif kind == "burst_detection":
        return BurstDetection(definition["burst_threshold"],
                              _seconds(definition["window_seconds"]))
    elif kind == "abnormal_pattern":
        return AbnormalPattern(
            definition.get("unusual_hour_threshold", 3),
            timedelta(milliseconds=definition.get("uniform_tolerance_ms", 1000)),
        )
    else:
        return RetryAbuse(definition["max_consecutive"],
                          _seconds(definition["window_seconds"]))


def build_policies(definitions: list[dict], clock: Clock = system_clock,
                   source: str = "<config>") -> list[Policy]:
    if not isinstance(definitions, list):
        raise ValueError(f"{source}: 'policies' must be a list")
    return [build_policy(d, clock, source) for d in definitions]


def _validate(definition, source):
    if not isinstance(definition, dict):
        raise ValueError(f"{source}: policy definition must be a mapping")
    if "type" not in definition:
        raise ValueError(f"{source}: policy definition missing 'type'")

    kind = definition["type"]
    if not isinstance(kind, str) or kind not in _REQUIRED:
        raise ValueError(f"{source}: unknown policy type '{kind}'")

    for field in _REQUIRED[kind]:
        if field not in definition:
            raise ValueError(f"{source}: {kind} missing required field '{field}'")
        if _number(definition[field], f"{kind}.{field}", source) <= 0:
            raise ValueError(f"{source}: {kind}.{field} must be positive")

    for field in _OPTIONAL.get(kind, ()):
        if field not in definition:
            continue
        if _number(definition[field], f"{kind}.{field}", source) < 0:
            raise ValueError(f"{source}: {kind}.{field} must not be negative")


def _number(value, label, source):
    # YAML booleans are ints to isinstance
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{source}: {label} must be a number")
    return value


def _seconds(value) -> timedelta:
    return timedelta(seconds=value)
