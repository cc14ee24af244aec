"""
Lambda Estimator
================

Closed-form relative fitness for a converged (mu, sigma):

    lambda = 1 / ((1 + mhat) Φ(xt) - E[Φ(x)])
"""

import math

import numpy as np

from wsb_impact.distribution import pnorm
from wsb_impact.statistics import IterationStatistics, evaluate_statistics
from wsb_impact.timeline import Timeline


def lambda_from_statistics(stats: IterationStatistics) -> float:
    """Lambda from statistics already evaluated at the converged point.

    A zero denominator gives ``inf``; callers reject it with
    :func:`is_valid_lambda`.
    """
    with np.errstate(all="ignore"):
        denominator = (1.0 + stats.mhat) * float(pnorm(stats.xt)) - stats.mean_cdf
        return float(np.divide(1.0, denominator))


def estimate_lambda(timeline: Timeline, mu: float, sigma: float, m: float) -> float:
    """Estimate lambda for a timeline at (mu, sigma)."""
    return lambda_from_statistics(evaluate_statistics(timeline, mu, sigma, m))


def is_valid_lambda(value: float) -> bool:
    """Only finite, non-negative fitness values are meaningful solutions."""
    return math.isfinite(value) and value >= 0
