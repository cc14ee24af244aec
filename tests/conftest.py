"""Shared fixtures for wsb-impact tests."""

import math

import numpy as np
import pytest
from scipy.special import ndtr, ndtri

from wsb_impact.timeline import Timeline

# Known WSB parameters for the synthetic paper.
TRUE_MU = 7.0
TRUE_SIGMA = 1.0
TRUE_LAMBDA = 2.0
TRUE_M = 300.0


def sample_wsb_timeline(mu, sigma, lambda_, m, x_end=2.0):
    """Place citation i where the WSB cumulative curve reaches i - 0.5.

    Observation stops at ``ln t = mu + sigma * x_end``.
    """
    n = int(math.floor(m * math.expm1(lambda_ * ndtr(x_end))))
    levels = np.arange(1, n + 1) - 0.5
    x = ndtri(np.log1p(levels / m) / lambda_)
    return Timeline.from_timestamps(np.exp(mu + sigma * x))


@pytest.fixture(scope="session")
def synthetic_timeline():
    return sample_wsb_timeline(TRUE_MU, TRUE_SIGMA, TRUE_LAMBDA, TRUE_M)


@pytest.fixture
def small_timeline():
    from wsb_impact.timeline import timeline_from_counts

    return timeline_from_counts([5, 12, 20, 15, 9, 6])
