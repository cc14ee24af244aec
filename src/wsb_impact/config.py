"""
Configuration
=============

Tunable constants for the solver, the grid search and the estimator.

Defaults reproduce the published algorithm: 31 Newton-Raphson iterations,
a 1e-8 convergence threshold, a 0.1..12.0 starting-guess grid and a single
retry at step 0.1.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Tuple

DAYS_PER_INTERVAL = 365

# Mean references per new paper in the field.
DEFAULT_M = 30.0


@dataclass(frozen=True)
class SolverConfig:
    """Newton-Raphson termination settings."""

    max_iterations: int = 31
    tolerance: float = 1e-8
    initial_tolerance: float = 0.1
    singularity_threshold: float = 1e-11

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ValueError("max_iterations must be >= 0")
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")
        if self.initial_tolerance < self.tolerance:
            raise ValueError("initial_tolerance must not be below tolerance")


@dataclass(frozen=True)
class SearchConfig:
    """Grid of starting guesses and the dedup/retry policy."""

    start: float = 0.1
    stop: float = 12.0
    dedup_tolerance: float = 1e-2
    retry_step: float = 0.1
    retry: bool = True

    def __post_init__(self) -> None:
        if self.stop <= self.start:
            raise ValueError("stop must be greater than start")
        if self.retry_step <= 0:
            raise ValueError("retry_step must be positive")
        if self.dedup_tolerance < 0:
            raise ValueError("dedup_tolerance must be >= 0")


@dataclass(frozen=True)
class EstimatorConfig:
    """Settings for a full estimation over one or more training windows.

    A window of 0 means "all available years".
    """

    m: float = DEFAULT_M
    step: float = 1.0
    windows: Tuple[int, ...] = (5, 10, 0)
    solver: SolverConfig = field(default_factory=SolverConfig)
    search: SearchConfig = field(default_factory=SearchConfig)

    def __post_init__(self) -> None:
        if self.m < 0:
            raise ValueError("m must be >= 0")
        if self.step <= 0:
            raise ValueError("step must be positive")
        if any(w < 0 for w in self.windows):
            raise ValueError("training windows must be >= 0")

    def with_overrides(self, **overrides: Any) -> "EstimatorConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "windows" in changes:
            changes["windows"] = tuple(int(w) for w in changes["windows"])
        return replace(self, **changes)


def _build(cls, data: Dict[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {section} setting(s): {', '.join(sorted(unknown))}")
    return cls(**data)


def config_from_dict(data: Dict[str, Any]) -> EstimatorConfig:
    """Build an EstimatorConfig from a plain (JSON-style) dictionary."""
    data = dict(data)
    solver = _build(SolverConfig, data.pop("solver", {}), "solver")
    search = _build(SearchConfig, data.pop("search", {}), "search")
    if "windows" in data:
        data["windows"] = tuple(int(w) for w in data["windows"])
    return _build(EstimatorConfig, dict(data, solver=solver, search=search), "estimator")


def load_config(path: str) -> EstimatorConfig:
    """Load estimator settings from a JSON file.

    Args:
        path: JSON file with optional keys ``m``, ``step``, ``windows``,
            ``solver`` and ``search``.

    Returns:
        The parsed configuration.
    """
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return config_from_dict(data)
