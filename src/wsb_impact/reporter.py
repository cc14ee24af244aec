"""
Report Generator
================

Render WSB estimation results in various formats.
"""

import json
from datetime import datetime
from typing import Any, Dict, List

from wsb_impact.model import ultimate_impact


class ReportGenerator:
    """Generate estimation reports in various formats."""

    def __init__(self, results: List[Dict[str, Any]]) -> None:
        """Initialize the report generator.

        Args:
            results: Per-paper result dictionaries as produced by
                ``WSBEstimator.estimate_paper``.
        """
        self.results = results

    @classmethod
    def from_file(cls, path: str) -> "ReportGenerator":
        """Load results previously saved by ``wsb-impact estimate``."""
        with open(path, "r") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("papers", [])
        return cls(data)

    def generate(self, format: str = "markdown") -> str:
        """Generate a report in the specified format.

        Args:
            format: Output format ('markdown', 'json', 'text').

        Returns:
            Report content as a string.
        """
        if format == "markdown":
            return self._generate_markdown()
        elif format == "json":
            return json.dumps(self.results, indent=2, default=str)
        elif format == "text":
            return self._generate_text()
        else:
            raise ValueError(f"Unknown format: {format}")

    def _generate_markdown(self) -> str:
        """Generate markdown report."""
        lines = [
            "# WSB Citation Impact Report",
            "",
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
            "",
            "---",
            "",
            "## Overview",
            "",
            f"- **Papers Estimated**: {len(self.results):,}",
            f"- **Windows With Solutions**: {self._count_status('ok')}",
            f"- **Windows Without Solutions**: {self._count_status('no_solution')}",
            f"- **Empty Windows**: {self._count_status('empty_timeline')}",
            "",
        ]

        for paper in self.results:
            m = paper.get("m", 0.0)
            lines.extend([
                f"## Paper #{paper.get('number', '?')}: {paper.get('paper_id', '')}",
                "",
                f"m={m}, step={paper.get('step')}",
                "",
                "| Training | Citations | Status | lambda | mu | sigma | Iterations | Ultimate Impact |",
                "|----------|-----------|--------|--------|----|-------|------------|-----------------|",
            ])
            for label, window in paper.get("windows", {}).items():
                training = "all years" if label == "all" else f"{label} years"
                solutions = window.get("solutions", [])
                if not solutions:
                    lines.append(
                        f"| {training} | {window.get('citations', 0)} | {window['status']} | - | - | - | - | - |"
                    )
                for s in solutions:
                    impact = ultimate_impact(s["lambda"], m)
                    lines.append(
                        f"| {training} | {window.get('citations', 0)} | {window['status']} "
                        f"| {s['lambda']:.4f} | {s['mu']:.4f} | {s['sigma']:.4f} "
                        f"| {s['iterations']} | {impact:,.1f} |"
                    )
            lines.append("")

        lines.extend([
            "---",
            "",
            "*Report generated by wsb-impact*",
        ])

        return "\n".join(lines)

    def _generate_text(self) -> str:
        """One line per paper and training window."""
        lines = []
        for paper in self.results:
            for label, window in paper.get("windows", {}).items():
                solutions = ", ".join(
                    f"{{lambda={s['lambda']}, mu={s['mu']}, sigma={s['sigma']}}}"
                    for s in window.get("solutions", [])
                )
                lines.append(f"P#{paper.get('number', '?')}(train={label}):: [{solutions}]")
        return "\n".join(lines)

    def _count_status(self, status: str) -> int:
        return sum(
            1
            for paper in self.results
            for window in paper.get("windows", {}).values()
            if window.get("status") == status
        )
