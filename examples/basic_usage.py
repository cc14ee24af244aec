#!/usr/bin/env python3
"""
Basic Usage Example
===================

This example demonstrates how to use wsb-impact to estimate the WSB
parameters of a paper from its yearly citation counts and forecast its
future citations.
"""

from wsb_impact import EstimatorConfig, SearchConfig, WSBEstimator
from wsb_impact.model import forecast_curve, ultimate_impact


def main():
    """Run a basic estimation."""

    # Yearly citation counts, year 0 being the publication year
    counts = [3, 11, 19, 22, 18, 15, 12, 9, 7, 6, 4, 3]
    series = list(enumerate(counts))

    print("=" * 60)
    print("wsb-impact - Basic Usage Example")
    print("=" * 60)

    config = EstimatorConfig(
        m=30.0,
        step=1.0,
        windows=(5, 0),
        search=SearchConfig(retry=False),  # Skip the slow fine-grid retry
    )
    estimator = WSBEstimator(config)

    # 1. Estimate from the first 5 years and from the full history
    estimates = estimator.estimate_windows(series)

    # 2. Show the distinct solutions of each window
    for label, estimate in estimates.items():
        print(f"\nTraining window: {label} ({estimate.citations} citations)")
        if estimate.result is None or not estimate.result.found:
            print("  No solution found")
            continue
        for s in estimate.result.solutions:
            impact = ultimate_impact(s.lambda_, config.m)
            print(f"  lambda={s.lambda_:.4f} mu={s.mu:.4f} sigma={s.sigma:.4f} "
                  f"(ultimate impact: {impact:,.0f})")

    # 3. Forecast from the 5-year fit and compare with what happened
    five_years = estimates["5"]
    if five_years.result is not None and five_years.result.found:
        solution = five_years.result.solutions[0]
        years, citations = forecast_curve(solution, config.m, last_day=5 * 365, extra_years=7)

        print("\nForecast vs observed (cumulative):")
        observed = 0
        for year, count in enumerate(counts, start=1):
            observed += count
            idx = min(range(len(years)), key=lambda i: abs(years[i] - year))
            print(f"  year {year:>2}: {citations[idx]:8.1f}  observed {observed}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
