"""
Standard Normal Functions
=========================

Stateless standard normal CDF (Φ) and PDF (φ), safe to call from any
number of solver runs at once. Both accept scalars or numpy arrays.
"""

import math

import numpy as np
from scipy.special import ndtr

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def pnorm(x):
    """Standard normal cumulative distribution Φ(x)."""
    return ndtr(x)


def dnorm(x):
    """Standard normal density φ(x)."""
    x = np.asarray(x, dtype=float)
    return _INV_SQRT_2PI * np.exp(-0.5 * x * x)
