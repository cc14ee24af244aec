"""
Newton-Raphson Solver
=====================
Solve the two WSB estimating equations for (mu, sigma) from one starting
guess.

Each step evaluates the residuals F and Jacobian J at the current point and
moves to ``X - J⁻¹ F``. A run ends in exactly one of three states:

- CONVERGED: the step length dropped below the tolerance
- DIVERGED: the iteration cap was exceeded (or the values stopped being finite)
- SINGULAR_JACOBIAN: J could not be inverted
"""

import logging
import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from wsb_impact.config import SolverConfig
from wsb_impact.exceptions import EmptyTimelineError
from wsb_impact.fitness import lambda_from_statistics
from wsb_impact.partials import evaluate_partials
from wsb_impact.statistics import evaluate_statistics
from wsb_impact.timeline import Timeline

logger = logging.getLogger(__name__)


class SolverStatus(str, Enum):
    CONVERGED = "converged"
    DIVERGED = "diverged"
    SINGULAR_JACOBIAN = "singular_jacobian"


@dataclass(frozen=True)
class Solution:
    """One converged WSB root."""

    lambda_: float
    mu: float
    sigma: float
    iterations: int

    def to_dict(self) -> Dict[str, float]:
        return {
            "lambda": self.lambda_,
            "mu": self.mu,
            "sigma": self.sigma,
            "iterations": self.iterations,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Solution":
        return cls(
            lambda_=float(data["lambda"]),
            mu=float(data["mu"]),
            sigma=float(data["sigma"]),
            iterations=int(data["iterations"]),
        )


@dataclass
class IterationState:
    """Mutable state carried from one Newton-Raphson step to the next."""

    mu: float
    sigma: float
    iteration: int
    tolerance: float


@dataclass(frozen=True)
class SolverOutcome:
    """Terminal state of one solver run.

    ``solution`` is set only for CONVERGED runs; ``mu``, ``sigma`` and
    ``iterations`` always hold the last state reached.
    """

    status: SolverStatus
    mu: float
    sigma: float
    iterations: int
    solution: Optional[Solution] = None

    @property
    def converged(self) -> bool:
        return self.status is SolverStatus.CONVERGED


class NewtonRaphsonSolver:
    """Newton-Raphson iteration for the WSB (mu, sigma) equations."""

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self.config = config or SolverConfig()

    def solve(self, timeline: Timeline, mu0: float, sigma0: float, m: float) -> SolverOutcome:
        """Run the solver from the starting guess (mu0, sigma0).

        Args:
            timeline: Citation events to fit; must not be empty.
            mu0: Initial immediacy guess.
            sigma0: Initial longevity guess.
            m: Mean number of references per new paper.

        Returns:
            The terminal outcome of the run.
        """
        if timeline.is_empty:
            raise EmptyTimelineError()

        config = self.config
        state = IterationState(
            mu=float(mu0),
            sigma=float(sigma0),
            iteration=0,
            tolerance=config.initial_tolerance,
        )

        while True:
            if state.iteration > config.max_iterations:
                logger.debug("Does not converge from (%g, %g)", mu0, sigma0)
                return self._outcome(SolverStatus.DIVERGED, state)

            if state.tolerance < config.tolerance:
                stats = evaluate_statistics(timeline, state.mu, state.sigma, m)
                solution = Solution(
                    lambda_=lambda_from_statistics(stats),
                    mu=state.mu,
                    sigma=state.sigma,
                    iterations=state.iteration,
                )
                logger.debug(
                    "Converged from (%g, %g) to mu=%.6f sigma=%.6f in %d iterations",
                    mu0, sigma0, state.mu, state.sigma, state.iteration,
                )
                return self._outcome(SolverStatus.CONVERGED, state, solution)

            stats = evaluate_statistics(timeline, state.mu, state.sigma, m)
            system = evaluate_partials(stats)
            if not (stats.is_finite and system.is_finite):
                logger.debug(
                    "Non-finite values at %s (start %g, %g)", stats.trial, mu0, sigma0
                )
                return self._outcome(SolverStatus.DIVERGED, state)

            delta = self._newton_step(system.jacobian, system.residual)
            if delta is None:
                logger.debug(
                    "Singular Jacobian at mu=%g sigma=%g (start %g, %g)",
                    state.mu, state.sigma, mu0, sigma0,
                )
                return self._outcome(SolverStatus.SINGULAR_JACOBIAN, state)

            state.mu -= float(delta[0])
            state.sigma -= float(delta[1])
            state.tolerance = float(np.linalg.norm(delta))
            state.iteration += 1

            if not math.isfinite(state.tolerance):
                return self._outcome(SolverStatus.DIVERGED, state)

    def _newton_step(self, jacobian: np.ndarray, residual: np.ndarray) -> Optional[np.ndarray]:
        """Solve J·Δ = F, or return None when J is singular."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", LinAlgWarning)
            lu, piv = lu_factor(jacobian, check_finite=False)

        if np.min(np.abs(np.diag(lu))) < self.config.singularity_threshold:
            return None
        return lu_solve((lu, piv), residual, check_finite=False)

    @staticmethod
    def _outcome(
        status: SolverStatus,
        state: IterationState,
        solution: Optional[Solution] = None,
    ) -> SolverOutcome:
        return SolverOutcome(
            status=status,
            mu=state.mu,
            sigma=state.sigma,
            iterations=state.iteration,
            solution=solution,
        )
