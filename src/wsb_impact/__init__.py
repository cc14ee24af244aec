"""
wsb-impact - Citation Longevity and Impact Estimation
=====================================================

Estimate the Wang-Song-Barabasi parameters of a paper from a partial
citation history:

- mu: immediacy, the time for a paper to reach its citation peak
- sigma: longevity, the decay rate of its relevance
- lambda: relative fitness, which scales its ultimate impact

mu and sigma are solved by Newton-Raphson; lambda follows in closed form.
A grid of starting guesses enumerates every distinct root.

Usage:
    # Command line
    wsb-impact estimate --input papers.csv --m 30 --step 1
    wsb-impact report --input results.json

    # Python API
    from wsb_impact import ConvergenceGridSearch, build_timeline

    timeline = build_timeline([(0, 2), (1, 3), (2, 7)])
    result = ConvergenceGridSearch().run(timeline, step=1.0, m=30.0)
    for solution in result.solutions:
        print(solution.lambda_, solution.mu, solution.sigma)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

from wsb_impact.config import EstimatorConfig, SearchConfig, SolverConfig
from wsb_impact.estimator import WSBEstimator
from wsb_impact.exceptions import (
    CitationDataError,
    EmptyTimelineError,
    SearchCancelledError,
    WSBError,
)
from wsb_impact.fitness import estimate_lambda
from wsb_impact.partials import ResidualSystem, evaluate_partials
from wsb_impact.search import ConvergenceGridSearch, RunRecord, SearchResult
from wsb_impact.solver import NewtonRaphsonSolver, Solution, SolverOutcome, SolverStatus
from wsb_impact.statistics import IterationStatistics, TrialParameters, evaluate_statistics
from wsb_impact.timeline import CitationEvent, Timeline, build_timeline, timeline_from_counts

__all__ = [
    "__version__",
    "CitationEvent",
    "Timeline",
    "build_timeline",
    "timeline_from_counts",
    "IterationStatistics",
    "TrialParameters",
    "evaluate_statistics",
    "ResidualSystem",
    "evaluate_partials",
    "NewtonRaphsonSolver",
    "Solution",
    "SolverOutcome",
    "SolverStatus",
    "estimate_lambda",
    "ConvergenceGridSearch",
    "RunRecord",
    "SearchResult",
    "WSBEstimator",
    "EstimatorConfig",
    "SearchConfig",
    "SolverConfig",
    "WSBError",
    "EmptyTimelineError",
    "SearchCancelledError",
    "CitationDataError",
]
