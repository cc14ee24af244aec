"""
WSB Estimator
=============

Facade that turns a paper's coarse citation history into WSB solutions,
one grid search per training window (by default the first 5 years, the
first 10 years and all available years).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from wsb_impact.config import EstimatorConfig
from wsb_impact.exceptions import EmptyTimelineError
from wsb_impact.reader import PaperHistory
from wsb_impact.search import ConvergenceGridSearch, SearchResult
from wsb_impact.solver import NewtonRaphsonSolver
from wsb_impact.timeline import build_timeline

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_NO_SOLUTION = "no_solution"
STATUS_EMPTY_TIMELINE = "empty_timeline"


@dataclass
class WindowEstimate:
    """Result of estimating one training window."""

    window: int
    citations: int
    status: str
    result: Optional[SearchResult] = None

    @property
    def label(self) -> str:
        return window_label(self.window)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "window": self.window,
            "citations": self.citations,
            "status": self.status,
            "solutions": [],
        }
        if self.result is not None:
            data.update(self.result.to_dict())
        return data


def window_label(window: int) -> str:
    return "all" if window == 0 else str(window)


class WSBEstimator:
    """Estimate WSB parameters for citation histories."""

    def __init__(self, config: Optional[EstimatorConfig] = None) -> None:
        self.config = config or EstimatorConfig()
        self.search = ConvergenceGridSearch(
            solver=NewtonRaphsonSolver(self.config.solver),
            config=self.config.search,
        )

    def estimate(
        self,
        series: Sequence[Tuple[int, int]],
        limit: int = 0,
        cancel=None,
    ) -> SearchResult:
        """Run the grid search on the first ``limit`` intervals of a series.

        Raises:
            EmptyTimelineError: The window holds no citations.
        """
        timeline = build_timeline(series, limit=limit)
        if timeline.is_empty:
            raise EmptyTimelineError(f"No citations in the first {limit or 'all'} interval(s)")
        return self.search.run(timeline, self.config.step, self.config.m, cancel=cancel)

    def estimate_windows(
        self,
        series: Sequence[Tuple[int, int]],
        windows: Optional[Iterable[int]] = None,
        cancel=None,
    ) -> Dict[str, WindowEstimate]:
        """Estimate every training window, keyed by window label."""
        if windows is None:
            windows = self.config.windows

        estimates: Dict[str, WindowEstimate] = {}
        for window in dict.fromkeys(windows):
            timeline = build_timeline(series, limit=window)
            if timeline.is_empty:
                logger.warning("Window %s has no citations; skipping", window_label(window))
                estimates[window_label(window)] = WindowEstimate(
                    window=window, citations=0, status=STATUS_EMPTY_TIMELINE
                )
                continue

            result = self.search.run(timeline, self.config.step, self.config.m, cancel=cancel)
            estimates[window_label(window)] = WindowEstimate(
                window=window,
                citations=timeline.n,
                status=STATUS_OK if result.found else STATUS_NO_SOLUTION,
                result=result,
            )
        return estimates

    def estimate_paper(self, paper: PaperHistory, cancel=None) -> Dict[str, Any]:
        """Estimate all windows for one paper, as a JSON-ready dictionary."""
        logger.info("Estimating paper #%d (%s)", paper.number, paper.paper_id)
        estimates = self.estimate_windows(paper.series(), cancel=cancel)
        return self.summarize(paper, estimates)

    def summarize(self, paper: PaperHistory, estimates: Dict[str, WindowEstimate]) -> Dict[str, Any]:
        """JSON-ready summary of one paper's window estimates."""
        return {
            "number": paper.number,
            "paper_id": paper.paper_id,
            "publish_year": paper.publish_year,
            "m": self.config.m,
            "step": self.config.step,
            "windows": {label: est.to_dict() for label, est in estimates.items()},
        }
