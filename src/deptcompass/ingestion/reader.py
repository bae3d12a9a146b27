"""
Reader Module - Stream rows out of the school × department admissions CSV.
==========================================================================

The source is the yearly KEDI export ("고등 학교별X학과별 입학정원 지원 입학"),
one row per (school, department) with a block of preamble lines on top.
Fields are read by fixed position; rows that are too short are reported as
malformed and skipped by the caller.
"""

import csv
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence

from deptcompass.shared.config import ColumnsConfig, get_settings
from deptcompass.shared.logging import get_logger

logger = get_logger(__name__)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass
class SourceRow:
    """One (school, department) record of the source dataset."""

    year: str
    school_type: str
    university: str
    location_raw: str
    institution_type: str
    program_type: str
    category_broad: str
    category_fine: str
    department: str
    seats: float = 0.0
    applicants: float = 0.0

    @property
    def location(self) -> str:
        """First token of the raw location ('강원 강릉시' -> '강원')."""
        parts = self.location_raw.split()
        return parts[0] if parts else ""

    @property
    def fine_category(self) -> str:
        """'broad - fine' when both levels are present, else broad alone."""
        if self.category_broad and self.category_fine:
            return f"{self.category_broad} - {self.category_fine}"
        return self.category_broad


def parse_number(text: Optional[str]) -> float:
    """
    Parse a count cell, tolerating thousands separators and blanks.

    Example:
        >>> parse_number("1,234")
        1234.0
        >>> parse_number("")
        0.0
    """
    if not text:
        return 0.0
    match = _NUMBER_RE.search(text.replace(",", ""))
    return float(match.group()) if match else 0.0


def _cell(cells: Sequence[str], index: int) -> str:
    if index < 0 or index >= len(cells):
        return ""
    return (cells[index] or "").strip()


def parse_row(
    cells: Sequence[str],
    columns: Optional[ColumnsConfig] = None,
    min_columns: int = 22,
) -> Optional[SourceRow]:
    """
    Map raw CSV cells to a SourceRow.

    Returns:
        SourceRow, or None when the row has fewer than ``min_columns`` fields
    """
    if len(cells) < min_columns:
        return None

    columns = columns or ColumnsConfig()

    return SourceRow(
        year=_cell(cells, columns.year),
        school_type=_cell(cells, columns.school_type),
        university=_cell(cells, columns.university),
        location_raw=_cell(cells, columns.location),
        institution_type=_cell(cells, columns.institution_type),
        program_type=_cell(cells, columns.program_type),
        category_broad=_cell(cells, columns.category_broad),
        category_fine=_cell(cells, columns.category_fine),
        department=_cell(cells, columns.department),
        seats=parse_number(_cell(cells, columns.seats)),
        applicants=parse_number(_cell(cells, columns.applicants)),
    )


class SourceReader:
    """
    Iterate over the raw cell lists of the admissions CSV.

    Example:
        >>> reader = SourceReader(Path("data/raw/admissions.csv"))
        >>> for cells in reader:
        ...     row = parse_row(cells)
    """

    def __init__(
        self,
        path: Path,
        header_rows: Optional[int] = None,
        encoding: Optional[str] = None,
    ):
        settings = get_settings()
        self.path = Path(path)
        self.header_rows = (
            header_rows if header_rows is not None else settings.catalog.header_rows
        )
        self.encoding = encoding or settings.catalog.encoding

    def __iter__(self) -> Iterator[list[str]]:
        logger.info(f"Reading source rows from {self.path}")

        with open(self.path, encoding=self.encoding, newline="") as f:
            reader = csv.reader(f)
            for line_num, cells in enumerate(reader, 1):
                if line_num <= self.header_rows:
                    continue
                if not cells or not any(c.strip() for c in cells):
                    continue
                yield [c.strip() for c in cells]
