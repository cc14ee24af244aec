"""
Convergence Grid Search
=======================
Find every distinct WSB root of a timeline:
- Run the solver from each (mu0, sigma0) on a regular grid
- Keep converged roots with a valid, not yet seen lambda
- Log every run for diagnostics
- Retry once on a finer grid when nothing is found
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from wsb_impact.config import SearchConfig
from wsb_impact.exceptions import EmptyTimelineError, SearchCancelledError
from wsb_impact.fitness import is_valid_lambda
from wsb_impact.solver import NewtonRaphsonSolver, Solution, SolverOutcome
from wsb_impact.timeline import Timeline

logger = logging.getLogger(__name__)

INVALID_LAMBDA = "invalid_lambda"
DUPLICATE = "duplicate"
ACCEPTED = "accepted"


@dataclass(frozen=True)
class RunRecord:
    """One grid cell: where the solver started and how it ended."""

    mu0: float
    sigma0: float
    step: float
    status: str
    lambda_: Optional[float]
    mu: float
    sigma: float
    iterations: int
    accepted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mu0": self.mu0,
            "sigma0": self.sigma0,
            "step": self.step,
            "status": self.status,
            "lambda": self.lambda_,
            "mu": self.mu,
            "sigma": self.sigma,
            "iterations": self.iterations,
            "accepted": self.accepted,
        }


@dataclass
class SearchResult:
    """Distinct solutions of one grid search plus its run-log."""

    solutions: List[Solution]
    runs: List[RunRecord]
    step: float
    retried: bool = False

    @property
    def found(self) -> bool:
        return bool(self.solutions)

    @property
    def lambdas(self) -> List[float]:
        """Every lambda a converged run produced, in scan order."""
        return [r.lambda_ for r in self.runs if r.lambda_ is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "solutions": [s.to_dict() for s in self.solutions],
            "step": self.step,
            "retried": self.retried,
            "runs": len(self.runs),
            "converged_runs": len(self.lambdas),
        }

    def to_dataframe(self):
        """Run-log as a pandas DataFrame, one row per grid cell."""
        import pandas as pd

        columns = ["mu0", "sigma0", "step", "status", "lambda", "mu", "sigma", "iterations", "accepted"]
        return pd.DataFrame([r.to_dict() for r in self.runs], columns=columns)


def grid_values(start: float, stop: float, step: float) -> List[float]:
    """Starting guesses ``start + k * step`` strictly below ``stop``."""
    if step <= 0:
        raise ValueError("step must be positive")
    count = max(0, math.ceil((stop - start) / step - 1e-9))
    return [start + k * step for k in range(count)]


class ConvergenceGridSearch:
    """Sweep a grid of starting guesses and collect the distinct roots."""

    def __init__(
        self,
        solver: Optional[NewtonRaphsonSolver] = None,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self.solver = solver or NewtonRaphsonSolver()
        self.config = config or SearchConfig()

    def run(self, timeline: Timeline, step: float, m: float, cancel=None) -> SearchResult:
        """Search the grid for every distinct solution.

        Args:
            timeline: Citation events to fit.
            step: Grid spacing for mu0 and sigma0.
            m: Mean number of references per new paper.
            cancel: Optional object with ``is_set()`` (e.g. threading.Event),
                checked between grid cells.

        Returns:
            SearchResult; its solution list may be empty.
        """
        if timeline.is_empty:
            raise EmptyTimelineError()
        if step <= 0:
            raise ValueError("step must be positive")
        if timeline.is_degenerate:
            logger.warning("Timeline has %d citation(s); the fit is degenerate", timeline.n)

        runs: List[RunRecord] = []
        solutions = self._sweep(timeline, step, m, runs, cancel)

        if solutions or not self._should_retry(step):
            return SearchResult(solutions=solutions, runs=runs, step=step)

        retry_step = self.config.retry_step
        logger.warning("No solution with step=%g; retrying with step=%g", step, retry_step)
        solutions = self._sweep(timeline, retry_step, m, runs, cancel)
        return SearchResult(solutions=solutions, runs=runs, step=retry_step, retried=True)

    def _should_retry(self, step: float) -> bool:
        return self.config.retry and step > self.config.retry_step

    def _sweep(
        self,
        timeline: Timeline,
        step: float,
        m: float,
        runs: List[RunRecord],
        cancel,
    ) -> List[Solution]:
        config = self.config
        values = grid_values(config.start, config.stop, step)
        solutions: List[Solution] = []
        completed = 0

        for mu0 in values:
            for sigma0 in values:
                if cancel is not None and cancel.is_set():
                    raise SearchCancelledError(completed)

                outcome = self.solver.solve(timeline, mu0, sigma0, m)
                runs.append(self._record(outcome, mu0, sigma0, step, solutions))
                completed += 1

        logger.info(
            "Swept %d cells with step=%g: %d distinct solution(s)",
            completed, step, len(solutions),
        )
        return solutions

    def _record(
        self,
        outcome: SolverOutcome,
        mu0: float,
        sigma0: float,
        step: float,
        solutions: List[Solution],
    ) -> RunRecord:
        """Log one cell and accept its solution when it is new and valid."""
        candidate = outcome.solution
        status = outcome.status.value
        accepted = False

        if candidate is not None:
            if not is_valid_lambda(candidate.lambda_):
                status = INVALID_LAMBDA
                logger.warning(
                    "Rejected lambda=%s from (%g, %g)", candidate.lambda_, mu0, sigma0
                )
            elif self._is_unique(candidate, solutions):
                status = ACCEPTED
                accepted = True
                solutions.append(candidate)
            else:
                status = DUPLICATE

        return RunRecord(
            mu0=mu0,
            sigma0=sigma0,
            step=step,
            status=status,
            lambda_=candidate.lambda_ if candidate is not None else None,
            mu=outcome.mu,
            sigma=outcome.sigma,
            iterations=outcome.iterations,
            accepted=accepted,
        )

    def _is_unique(self, candidate: Solution, solutions: List[Solution]) -> bool:
        tolerance = self.config.dedup_tolerance
        return all(abs(s.lambda_ - candidate.lambda_) >= tolerance for s in solutions)
