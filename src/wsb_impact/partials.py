"""
Residuals and Jacobian
======================

The two estimating equations for (mu, sigma) and their analytic partial
derivatives, assembled from one set of iteration statistics.

With ``D = (1 + mhat) Φ(xt) - E[Φ(x)]``:

    fn = D E[x] - E[φ(x)] + (1 + mhat) φ(xt)
    gn = D (E[x²] - 1) - E[x φ(x)] + (1 + mhat) xt φ(xt)
"""

import math
from dataclasses import dataclass

import numpy as np

from wsb_impact.distribution import dnorm, pnorm
from wsb_impact.statistics import IterationStatistics


@dataclass(frozen=True)
class ResidualSystem:
    """Residual vector F = [fn, gn] and Jacobian J at one (mu, sigma)."""

    fn: float
    gn: float
    df_dmu: float
    df_dsigma: float
    dg_dmu: float
    dg_dsigma: float

    @property
    def residual(self) -> np.ndarray:
        return np.array([self.fn, self.gn])

    @property
    def jacobian(self) -> np.ndarray:
        return np.array([
            [self.df_dmu, self.df_dsigma],
            [self.dg_dmu, self.dg_dsigma],
        ])

    @property
    def is_finite(self) -> bool:
        return all(
            math.isfinite(v)
            for v in (self.fn, self.gn, self.df_dmu, self.df_dsigma, self.dg_dmu, self.dg_dsigma)
        )


def evaluate_partials(stats: IterationStatistics) -> ResidualSystem:
    """Evaluate fn, gn and the 2x2 Jacobian from iteration statistics."""
    scale = 1.0 + stats.mhat
    xt = np.float64(stats.xt)
    sigma = np.float64(stats.sigma)

    with np.errstate(all="ignore"):
        cdf_t = float(pnorm(xt))
        pdf_t = float(dnorm(xt))

        ex = stats.mean_x
        ex2 = stats.mean_x_sqrd
        e_cdf = stats.mean_cdf
        e_pdf = stats.mean_pdf
        e_x_pdf = stats.mean_x_pdf
        e_x2_pdf = stats.mean_x_sqrd_pdf
        e_x3_pdf = stats.mean_x_cubed_pdf

        d = scale * cdf_t - e_cdf

        fn = d * ex - e_pdf + scale * pdf_t
        gn = d * (ex2 - 1) - e_x_pdf + scale * xt * pdf_t

        df_dmu = (
            scale * ((xt - ex) * pdf_t - cdf_t)
            + ex * e_pdf - e_x_pdf + e_cdf
        ) / sigma

        df_dsigma = (
            scale * ((xt - ex) * xt * pdf_t - ex * cdf_t)
            + ex * (e_x_pdf + e_cdf) - e_x2_pdf
        ) / sigma

        dg_dmu = (
            scale * (2 * ex * cdf_t + (ex2 - xt ** 2) * pdf_t)
            - (2 * ex * e_cdf + ex2 * e_pdf - e_x2_pdf)
        ) / (-sigma)

        dg_dsigma = (
            scale * (xt ** 3 * pdf_t - ex2 * xt * pdf_t - 2 * ex2 * cdf_t)
            + 2 * ex2 * e_cdf + ex2 * e_x_pdf - e_x3_pdf
        ) / sigma

    return ResidualSystem(
        fn=float(fn),
        gn=float(gn),
        df_dmu=float(df_dmu),
        df_dsigma=float(df_dsigma),
        dg_dmu=float(dg_dmu),
        dg_dsigma=float(dg_dsigma),
    )
