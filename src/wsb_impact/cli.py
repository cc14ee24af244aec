#!/usr/bin/env python3
"""
wsb-impact CLI
==============

Command-line interface for the WSB citation impact estimator.

Usage:
    wsb-impact estimate [options]
    wsb-impact report [options]
    wsb-impact timeline [options]
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from wsb_impact import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="wsb-impact",
        description="Estimate Wang-Song-Barabasi (mu, sigma, lambda) from citation histories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Estimate the third paper of a file with m=30 and a unit grid step
  wsb-impact estimate --input papers.csv --paper 3 --m 30 --step 1

  # Every paper, 5-year and full-history training windows
  wsb-impact estimate --input papers.csv --windows 5,0 --output results.json

  # Render saved results
  wsb-impact report --input results.json --format markdown

  # Inspect the per-citation timeline built from yearly counts
  wsb-impact timeline --counts 2,3
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show solver diagnostics"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Estimate command
    estimate_parser = subparsers.add_parser(
        "estimate",
        help="Estimate WSB parameters for papers in a CSV file"
    )
    estimate_parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="CSV file: paper id, publish year, yearly citation counts"
    )
    estimate_parser.add_argument(
        "--paper", "-p",
        type=int,
        action="append",
        default=None,
        help="Paper number to estimate, 1-based (repeatable; default: all)"
    )
    estimate_parser.add_argument(
        "--header",
        action="store_true",
        help="The CSV file starts with a header row"
    )
    estimate_parser.add_argument(
        "--m",
        type=float,
        default=None,
        help="Mean references per new paper (default: 30)"
    )
    estimate_parser.add_argument(
        "--step", "-s",
        type=float,
        default=None,
        help="Grid step for the starting guesses (default: 1)"
    )
    estimate_parser.add_argument(
        "--windows", "-w",
        type=str,
        default=None,
        help="Comma-separated training windows in years, 0 = all (default: 5,10,0)"
    )
    estimate_parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="JSON file with estimator settings"
    )
    estimate_parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output JSON file (default: stdout)"
    )
    estimate_parser.add_argument(
        "--runs-csv",
        type=str,
        default=None,
        help="Write the per-cell run-log of every search to this CSV file"
    )

    # Report command
    report_parser = subparsers.add_parser(
        "report",
        help="Generate a report from saved estimation results"
    )
    report_parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="JSON results written by 'estimate'"
    )
    report_parser.add_argument(
        "--format", "-f",
        type=str,
        choices=["markdown", "json", "text"],
        default="markdown",
        help="Output format (default: markdown)"
    )
    report_parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file (default: stdout)"
    )

    # Timeline command
    timeline_parser = subparsers.add_parser(
        "timeline",
        help="Print the per-citation timeline for yearly counts"
    )
    timeline_parser.add_argument(
        "--counts",
        type=str,
        required=True,
        help="Comma-separated citation counts per year"
    )
    timeline_parser.add_argument(
        "--limit", "-l",
        type=int,
        default=0,
        help="Only use the first N years (default: all)"
    )

    return parser


def _parse_int_list(value: str) -> List[int]:
    return [int(v.strip()) for v in value.split(",") if v.strip()]


def cmd_estimate(args: argparse.Namespace) -> int:
    """Execute the estimate command."""
    from wsb_impact.config import EstimatorConfig, load_config
    from wsb_impact.estimator import WSBEstimator
    from wsb_impact.reader import read_citation_histories

    print(f"wsb-impact v{__version__}", file=sys.stderr)
    print("=" * 60, file=sys.stderr)

    config = load_config(args.config) if args.config else EstimatorConfig()
    config = config.with_overrides(
        m=args.m,
        step=args.step,
        windows=_parse_int_list(args.windows) if args.windows else None,
    )

    papers = read_citation_histories(args.input, has_header=args.header)
    print(f"Loaded {len(papers):,} papers from: {args.input}", file=sys.stderr)

    if args.paper:
        selected = [p for p in papers if p.number in set(args.paper)]
        missing = sorted(set(args.paper) - {p.number for p in selected})
        if missing:
            raise ValueError(f"No paper number(s) {missing} in {args.input}")
        papers = selected

    estimator = WSBEstimator(config)
    results = []
    run_frames = []
    for paper in papers:
        print(f"  Paper #{paper.number} ({paper.paper_id})...", file=sys.stderr)
        estimates = estimator.estimate_windows(paper.series())
        results.append(estimator.summarize(paper, estimates))
        for label, est in estimates.items():
            if est.result is not None:
                frame = est.result.to_dataframe()
                frame.insert(0, "window", label)
                frame.insert(0, "paper", paper.number)
                run_frames.append(frame)

    output = json.dumps({"papers": results}, indent=2)
    if args.output:
        with open(args.output, "w") as f:
            f.write(output)
        print(f"Results saved to: {args.output}", file=sys.stderr)
    else:
        print(output)

    if args.runs_csv:
        import pandas as pd

        runs = pd.concat(run_frames, ignore_index=True) if run_frames else pd.DataFrame()
        runs.to_csv(args.runs_csv, index=False)
        print(f"Run-log saved to: {args.runs_csv}", file=sys.stderr)

    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Execute the report command."""
    from wsb_impact.reporter import ReportGenerator

    if not os.path.exists(args.input):
        raise FileNotFoundError(f"No results file: {args.input}")

    generator = ReportGenerator.from_file(args.input)
    report = generator.generate(format=args.format)

    if args.output:
        with open(args.output, "w") as f:
            f.write(report)
        print(f"Report saved to: {args.output}")
    else:
        print(report)

    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    """Execute the timeline command."""
    from wsb_impact.timeline import timeline_from_counts

    timeline = timeline_from_counts(_parse_int_list(args.counts), limit=args.limit)
    print(f"{timeline.n} citation(s)")
    for event in timeline:
        print(f"{event.index:>6}  {event.timestamp:12.2f}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "estimate":
            return cmd_estimate(args)
        elif args.command == "report":
            return cmd_report(args)
        elif args.command == "timeline":
            return cmd_timeline(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
