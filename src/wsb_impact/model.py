"""
WSB Citation Model
==================

Cumulative citations predicted by the Wang-Song-Barabási model:

    c(t) = m (exp(lambda Φ((ln t - mu) / sigma)) - 1)

and the ultimate impact ``m (e^lambda - 1)`` reached as t grows without bound.
"""

from typing import Tuple

import numpy as np

from wsb_impact.config import DAYS_PER_INTERVAL
from wsb_impact.distribution import pnorm
from wsb_impact.solver import Solution


def predicted_citations(t_days, lambda_: float, mu: float, sigma: float, m: float):
    """Cumulative citations at ``t_days`` (scalar or array, days > 0)."""
    t = np.asarray(t_days, dtype=float)
    with np.errstate(divide="ignore"):
        x = (np.log(t) - mu) / sigma
    return m * np.expm1(lambda_ * pnorm(x))


def ultimate_impact(lambda_: float, m: float) -> float:
    """Total citations a paper collects over its lifetime."""
    return float(m * np.expm1(lambda_))


def forecast_curve(
    solution: Solution,
    m: float,
    last_day: float,
    extra_years: float = 3.0,
    step_years: float = 0.025,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fitted curve from the first day to ``extra_years`` past the data.

    Args:
        solution: Converged (lambda, mu, sigma).
        m: Mean number of references per new paper.
        last_day: Last observed citation time in days.
        extra_years: How far to extend past the data.
        step_years: Spacing of the returned points.

    Returns:
        (years, cumulative citations) arrays.
    """
    if step_years <= 0:
        raise ValueError("step_years must be positive")
    end_year = last_day / DAYS_PER_INTERVAL + extra_years
    years = np.arange(step_years, end_year + step_years / 2, step_years)
    citations = predicted_citations(
        years * DAYS_PER_INTERVAL, solution.lambda_, solution.mu, solution.sigma, m
    )
    return years, citations
