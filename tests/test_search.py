"""Tests for the convergence grid search."""

import threading

import pytest

from conftest import TRUE_M, TRUE_MU


class FakeSolver:
    """Return scripted outcomes in grid order; DIVERGED once exhausted."""

    def __init__(self, lambdas=()):
        self.lambdas = list(lambdas)
        self.calls = []

    def solve(self, timeline, mu0, sigma0, m):
        from wsb_impact.solver import Solution, SolverOutcome, SolverStatus

        self.calls.append((mu0, sigma0))
        if not self.lambdas:
            return SolverOutcome(SolverStatus.DIVERGED, mu0, sigma0, 32)
        value = self.lambdas.pop(0)
        if value is None:
            return SolverOutcome(SolverStatus.SINGULAR_JACOBIAN, mu0, sigma0, 0)
        solution = Solution(lambda_=value, mu=mu0, sigma=sigma0, iterations=5)
        return SolverOutcome(SolverStatus.CONVERGED, mu0, sigma0, 5, solution)


def _search(solver, **config):
    from wsb_impact.config import SearchConfig
    from wsb_impact.search import ConvergenceGridSearch

    return ConvergenceGridSearch(solver=solver, config=SearchConfig(**config))


class TestGridValues:
    """Test cases for grid_values."""

    def test_unit_step(self):
        from wsb_impact.search import grid_values

        values = grid_values(0.1, 12.0, 1.0)

        assert len(values) == 12
        assert values[0] == 0.1
        assert values[-1] == pytest.approx(11.1)

    def test_fine_step(self):
        from wsb_impact.search import grid_values

        values = grid_values(0.1, 12.0, 0.1)

        assert len(values) == 119
        assert values[-1] == pytest.approx(11.9)
        assert all(v < 12.0 for v in values)

    def test_invalid_step(self):
        from wsb_impact.search import grid_values

        with pytest.raises(ValueError):
            grid_values(0.1, 12.0, 0.0)


class TestConvergenceGridSearch:
    """Test cases for ConvergenceGridSearch."""

    def test_small_paper_runs_every_cell(self):
        """Two years of citations: 144 cells, each run terminates."""
        from wsb_impact.config import SearchConfig
        from wsb_impact.search import ACCEPTED, ConvergenceGridSearch
        from wsb_impact.timeline import build_timeline

        timeline = build_timeline([(0, 2), (1, 3)])
        search = ConvergenceGridSearch(config=SearchConfig(retry=False))

        result = search.run(timeline, step=1.0, m=10.0)

        assert len(result.runs) == 144
        assert all(r.iterations <= 32 for r in result.runs)
        assert [r.mu0 for r in result.runs[:13]] == pytest.approx([0.1] * 12 + [1.1])
        assert result.runs[1].sigma0 == pytest.approx(1.1)
        assert len(result.solutions) == sum(1 for r in result.runs if r.status == ACCEPTED)
        for s in result.solutions:
            assert s.lambda_ >= 0

    def test_is_deterministic(self, small_timeline):
        from wsb_impact.config import SearchConfig
        from wsb_impact.search import ConvergenceGridSearch

        search = ConvergenceGridSearch(config=SearchConfig(retry=False))

        first = search.run(small_timeline, step=2.0, m=30.0)
        second = search.run(small_timeline, step=2.0, m=30.0)

        assert first.solutions == second.solutions
        assert first.runs == second.runs

    def test_deduplicates_against_accepted_solutions(self, small_timeline):
        from wsb_impact.search import ACCEPTED, DUPLICATE

        solver = FakeSolver([1.0, 1.005, 1.5, 1.015])
        search = _search(solver, start=0.1, stop=1.1, retry=False)

        result = search.run(small_timeline, step=0.5, m=30.0)

        assert [c for cell in solver.calls for c in cell] == pytest.approx(
            [0.1, 0.1, 0.1, 0.6, 0.6, 0.1, 0.6, 0.6]
        )
        assert [s.lambda_ for s in result.solutions] == [1.0, 1.5, 1.015]
        assert [r.status for r in result.runs] == [ACCEPTED, DUPLICATE, ACCEPTED, ACCEPTED]
        assert result.lambdas == [1.0, 1.005, 1.5, 1.015]

    def test_exact_tolerance_is_distinct(self, small_timeline):
        solver = FakeSolver([1.0, 1.25])
        search = _search(solver, start=0.1, stop=1.1, dedup_tolerance=0.25, retry=False)

        result = search.run(small_timeline, step=0.5, m=30.0)

        assert [s.lambda_ for s in result.solutions] == [1.0, 1.25]

    def test_invalid_lambda_does_not_block_later_solution(self, small_timeline):
        """A rejected lambda never counts as seen."""
        from wsb_impact.search import ACCEPTED, INVALID_LAMBDA

        solver = FakeSolver([-0.5, float("inf"), -0.499])
        search = _search(solver, start=0.1, stop=1.1, retry=False)

        result = search.run(small_timeline, step=0.5, m=30.0)

        assert result.solutions == []
        assert [r.status for r in result.runs[:3]] == [INVALID_LAMBDA] * 3

        solver = FakeSolver([-0.004, 0.0])
        result = _search(solver, start=0.1, stop=1.1, retry=False).run(
            small_timeline, step=0.5, m=30.0
        )

        assert [s.lambda_ for s in result.solutions] == [0.0]
        assert [r.status for r in result.runs[:2]] == [INVALID_LAMBDA, ACCEPTED]

    def test_non_converged_runs_are_logged(self, small_timeline):
        from wsb_impact.solver import SolverStatus

        solver = FakeSolver([None])
        result = _search(solver, start=0.1, stop=1.1, retry=False).run(
            small_timeline, step=0.5, m=30.0
        )

        assert [r.status for r in result.runs] == [
            SolverStatus.SINGULAR_JACOBIAN.value,
            SolverStatus.DIVERGED.value,
            SolverStatus.DIVERGED.value,
            SolverStatus.DIVERGED.value,
        ]
        assert all(r.lambda_ is None for r in result.runs)
        assert not result.found

    def test_retries_once_on_finer_grid(self, small_timeline):
        solver = FakeSolver()
        search = _search(solver, start=0.1, stop=0.35)

        result = search.run(small_timeline, step=1.0, m=30.0)

        assert result.retried
        assert result.step == 0.1
        assert len(result.runs) == 1 + 9
        assert result.runs[0].step == 1.0
        assert all(r.step == 0.1 for r in result.runs[1:])
        assert not result.found

    def test_retry_keeps_finer_solutions(self, small_timeline):
        solver = FakeSolver([None, 2.0])
        search = _search(solver, start=0.1, stop=0.35)

        result = search.run(small_timeline, step=1.0, m=30.0)

        assert result.retried
        assert [s.lambda_ for s in result.solutions] == [2.0]

    def test_no_retry_when_found(self, small_timeline):
        solver = FakeSolver([2.0])
        result = _search(solver, start=0.1, stop=0.35).run(small_timeline, step=1.0, m=30.0)

        assert not result.retried
        assert len(result.runs) == 1

    @pytest.mark.parametrize("step,retry", [(0.1, True), (0.05, True), (1.0, False)])
    def test_no_retry(self, small_timeline, step, retry):
        solver = FakeSolver()
        result = _search(solver, start=0.1, stop=0.35, retry=retry).run(
            small_timeline, step=step, m=30.0
        )

        assert not result.retried
        assert result.step == step

    def test_cancel_before_start(self, small_timeline):
        from wsb_impact.exceptions import SearchCancelledError

        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SearchCancelledError) as excinfo:
            _search(FakeSolver()).run(small_timeline, step=1.0, m=30.0, cancel=cancel)

        assert excinfo.value.completed_cells == 0

    def test_cancel_between_cells(self, small_timeline):
        from wsb_impact.exceptions import SearchCancelledError

        class StopAfter:
            def __init__(self, cells):
                self.checks = 0
                self.cells = cells

            def is_set(self):
                self.checks += 1
                return self.checks > self.cells

        solver = FakeSolver()
        with pytest.raises(SearchCancelledError) as excinfo:
            _search(solver).run(small_timeline, step=1.0, m=30.0, cancel=StopAfter(5))

        assert excinfo.value.completed_cells == 5
        assert len(solver.calls) == 5

    def test_empty_timeline(self):
        from wsb_impact.exceptions import EmptyTimelineError
        from wsb_impact.timeline import Timeline

        with pytest.raises(EmptyTimelineError):
            _search(FakeSolver()).run(Timeline(), step=1.0, m=30.0)

    def test_invalid_step(self, small_timeline):
        with pytest.raises(ValueError):
            _search(FakeSolver()).run(small_timeline, step=0.0, m=30.0)

    def test_degenerate_timeline_is_searched(self, caplog):
        from wsb_impact.timeline import timeline_from_counts

        solver = FakeSolver()
        with caplog.at_level("WARNING", logger="wsb_impact.search"):
            result = _search(solver, start=0.1, stop=1.1, retry=False).run(
                timeline_from_counts([1]), step=0.5, m=30.0
            )

        assert len(result.runs) == 4
        assert "degenerate" in caplog.text

    def test_run_log_dataframe(self, small_timeline):
        solver = FakeSolver([1.0, 1.0])
        result = _search(solver, start=0.1, stop=1.1, retry=False).run(
            small_timeline, step=0.5, m=30.0
        )

        frame = result.to_dataframe()

        assert list(frame.columns) == [
            "mu0", "sigma0", "step", "status", "lambda", "mu", "sigma", "iterations", "accepted"
        ]
        assert len(frame) == 4
        assert frame["accepted"].sum() == 1
        assert result.to_dict()["converged_runs"] == 2

    def test_finds_known_root(self, synthetic_timeline):
        from wsb_impact.config import SearchConfig
        from wsb_impact.search import ConvergenceGridSearch

        search = ConvergenceGridSearch(config=SearchConfig(retry=False))

        result = search.run(synthetic_timeline, step=1.0, m=TRUE_M)

        assert result.found
        assert any(abs(s.mu - TRUE_MU) < 1e-3 for s in result.solutions)
