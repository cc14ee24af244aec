"""
Iteration Statistics
====================
Sufficient statistics for one Newton-Raphson iteration.

For a trial (mu, sigma) every citation time ``ti`` is standardised as
``xi = (ln ti - mu) / sigma`` and the evaluator averages the transforms of
``xi`` that the residual equations and their partials are built from.
"""

import math
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import numpy as np

from wsb_impact.distribution import dnorm, pnorm
from wsb_impact.exceptions import EmptyTimelineError
from wsb_impact.timeline import Timeline


@dataclass(frozen=True)
class TrialParameters:
    """A (mu, sigma) hypothesis the evaluator is run against."""

    mu: float
    sigma: float


@dataclass(frozen=True)
class IterationStatistics:
    """Means over all citation events for one trial (mu, sigma).

    ``t`` is the reference time (last citation), ``n`` the number of
    citations, ``xt`` the standardised reference time and ``mhat = m / n``.
    Every ``mean_*`` field is a sum over events divided by ``n``.
    """

    mu: float
    sigma: float
    m: float
    t: float
    n: int
    mhat: float
    xt: float
    mean_ln_t: float
    mean_ln_t_sqrd: float
    mean_x: float
    mean_x_sqrd: float
    mean_cdf: float
    mean_pdf: float
    mean_x_pdf: float
    mean_x_sqrd_pdf: float
    mean_x_cubed_pdf: float

    @property
    def trial(self) -> TrialParameters:
        return TrialParameters(self.mu, self.sigma)

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in asdict(self).values())

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def evaluate_statistics(
    timeline: Timeline,
    mu: float,
    sigma: float,
    m: float,
    t: Optional[float] = None,
    n: Optional[int] = None,
) -> IterationStatistics:
    """Compute the iteration statistics of a timeline at (mu, sigma).

    Args:
        timeline: Citation events; every timestamp is strictly positive.
        mu: Trial immediacy.
        sigma: Trial longevity.
        m: Mean number of references per new paper in the field.
        t: Reference time in days (default: the last citation).
        n: Citation count used for ``mhat`` and the means (default: all).

    Returns:
        IterationStatistics for this trial.
    """
    if timeline.is_empty:
        raise EmptyTimelineError()

    if t is None:
        t = timeline.last_timestamp
    if n is None:
        n = timeline.n

    if not 1 <= n <= timeline.n:
        raise ValueError(f"n must be between 1 and {timeline.n}, got {n}")

    ln_t = timeline.log_timestamps[:n]

    with np.errstate(all="ignore"):
        xt = (np.log(t) - mu) / np.float64(sigma)
        x = (ln_t - mu) / sigma
        x_sqrd = x * x
        pdf = dnorm(x)

        return IterationStatistics(
            mu=float(mu),
            sigma=float(sigma),
            m=float(m),
            t=float(t),
            n=int(n),
            mhat=m / n,
            xt=float(xt),
            mean_ln_t=float(np.sum(ln_t) / n),
            mean_ln_t_sqrd=float(np.sum(ln_t * ln_t) / n),
            mean_x=float(np.sum(x) / n),
            mean_x_sqrd=float(np.sum(x_sqrd) / n),
            mean_cdf=float(np.sum(pnorm(x)) / n),
            mean_pdf=float(np.sum(pdf) / n),
            mean_x_pdf=float(np.sum(x * pdf) / n),
            mean_x_sqrd_pdf=float(np.sum(x_sqrd * pdf) / n),
            mean_x_cubed_pdf=float(np.sum(x_sqrd * x * pdf) / n),
        )
