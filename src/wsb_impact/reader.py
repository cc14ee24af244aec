"""
Citation History Reader
=======================

Load yearly citation histories from CSV. Each row holds one paper::

    paper_id, publish_year, citations_year0, citations_year1, ...

Rows may have different lengths; blank trailing cells are ignored.
"""

import csv
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from wsb_impact.exceptions import CitationDataError


@dataclass(frozen=True)
class PaperHistory:
    """Yearly citation counts of one paper, year 0 being publication."""

    number: int
    paper_id: str
    publish_year: Optional[int]
    counts: Tuple[int, ...]

    @property
    def total_citations(self) -> int:
        return sum(self.counts)

    def series(self) -> List[Tuple[int, int]]:
        """The (interval, count) pairs the timeline builder expects."""
        return list(enumerate(self.counts))


def _parse_count(value: str, row_number: int) -> int:
    try:
        count = float(value)
    except ValueError:
        raise CitationDataError(f"Row {row_number}: '{value}' is not a citation count")
    if not math.isfinite(count) or count < 0 or count != int(count):
        raise CitationDataError(f"Row {row_number}: invalid citation count {value}")
    return int(count)


def parse_row(row: List[str], number: int) -> PaperHistory:
    """Parse one CSV row into a PaperHistory."""
    cells = [c.strip() for c in row]
    while cells and not cells[-1]:
        cells.pop()
    if len(cells) < 2:
        raise CitationDataError(f"Row {number}: expected a paper id and a publish year")

    year = cells[1]
    try:
        publish_year = int(float(year)) if year else None
    except (ValueError, OverflowError):
        raise CitationDataError(f"Row {number}: '{year}' is not a year")

    counts = tuple(_parse_count(value or "0", number) for value in cells[2:])
    return PaperHistory(number=number, paper_id=cells[0], publish_year=publish_year, counts=counts)


def read_citation_histories(path: str, has_header: bool = False) -> List[PaperHistory]:
    """Read every paper's citation history from a CSV file.

    Args:
        path: CSV file path.
        has_header: Skip the first row.

    Returns:
        Papers in file order, numbered from 1.
    """
    papers = []
    with open(path, "r", newline="") as f:
        reader = csv.reader(f)
        if has_header:
            next(reader, None)
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            papers.append(parse_row(row, len(papers) + 1))
    return papers
