"""
Catalog Module - Normalize source rows into a per-university catalog.
=====================================================================

Groups admission rows by university and records, per university:
- the college/category -> departments mapping
- the department -> fine category mapping
- per-department recruitment statistics (seats, applicants, rate)
- a prestige tier and metric from a fixed, ordered override table

The catalog is built once and saved as a JSON artifact; the search core
loads it at startup and never mutates it.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from deptcompass.ingestion.reader import SourceReader, SourceRow, parse_row
from deptcompass.shared.config import ColumnsConfig, get_settings
from deptcompass.shared.logging import get_logger
from deptcompass.shared.schemas import Catalog, RecruitmentStats, Tier, University
from deptcompass.shared.utils import load_json, save_json

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Row Filters
# ─────────────────────────────────────────────────────────────────────────────

DEGREE_PROGRAM = "대학과정"
NO_DEPARTMENT = "소속학과없음"
DEFAULT_CATEGORY = "기타"


def is_degree_granting(school_type: str) -> bool:
    """
    Accredited degree-granting school types only.

    Universities (대학교), education universities (교육대학), science and
    technology institutes (과학기술원) and the national arts conservatory
    (예술종합학교). Vocational colleges (전문대학 etc.) are rejected.
    """
    return (
        school_type.endswith("대학교")
        or school_type.endswith("교육대학")
        or "과학기술원" in school_type
        or "예술종합학교" in school_type
    )


# ─────────────────────────────────────────────────────────────────────────────
# Tier Table
# ─────────────────────────────────────────────────────────────────────────────

TOP3 = ("서울대학교", "연세대학교", "고려대학교")
SCIENCE_INSTITUTES = (
    "한국과학기술원",
    "울산과학기술원",
    "광주과학기술원",
    "대구경북과학기술원",
    "포항공과대학교",
    "한국에너지공과대학교",
)
ELITE_PRIVATES = (
    "서강대학교",
    "성균관대학교",
    "한양대학교",
    "이화여자대학교",
    "중앙대학교",
    "경희대학교",
    "한국외국어대학교",
    "서울시립대학교",
    "건국대학교",
    "동국대학교",
    "홍익대학교",
)
ARTS_CONSERVATORY = "한국예술종합학교"
TEACHERS_COLLEGE = "한국교원대학교"
METRO_REGIONS = ("경기", "인천")
NATIONAL_TYPES = ("국립", "국립대법인", "특별법국립", "특별법법인")


@dataclass(frozen=True)
class TierRule:
    """One row of the tier override table (first match wins)."""

    name: str
    applies: Callable[[University], bool]
    tier: Tier
    prestige_metric: int


TIER_RULES: list[TierRule] = [
    TierRule("top3", lambda u: u.name in TOP3, Tier.SKY, 1),
    TierRule("science_institute", lambda u: u.name in SCIENCE_INSTITUTES, Tier.SKY, 0),
    TierRule("elite_private", lambda u: u.name in ELITE_PRIVATES, Tier.TOP15, 10),
    TierRule("arts_conservatory", lambda u: u.name == ARTS_CONSERVATORY, Tier.TOP15, 5),
    TierRule(
        "education",
        lambda u: (
            u.school_type == "교육대학"
            or u.type == "교육대학"
            or u.name.endswith("교육대학교")
            or u.name == TEACHERS_COLLEGE
        ),
        Tier.EDU,
        15,
    ),
    TierRule("capital", lambda u: u.location == "서울", Tier.IN_SEOUL, 20),
    TierRule("metro", lambda u: u.location in METRO_REGIONS, Tier.METRO, 30),
    TierRule("national", lambda u: u.type in NATIONAL_TYPES, Tier.NATIONAL, 40),
]

DEFAULT_TIER = (Tier.REGIONAL, 99)


def assign_tier(university: University) -> tuple[Tier, int]:
    """
    Resolve a university's tier and prestige metric.

    Pure function of name, location and institutional type.
    """
    for rule in TIER_RULES:
        if rule.applies(university):
            return rule.tier, rule.prestige_metric
    return DEFAULT_TIER


# ─────────────────────────────────────────────────────────────────────────────
# Builder
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class BuildReport:
    """Counters collected while building a catalog."""

    rows_read: int = 0
    rows_accepted: int = 0
    skipped: dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    @property
    def rows_skipped(self) -> int:
        return sum(self.skipped.values())

    def summary(self) -> str:
        reasons = ", ".join(f"{k}={v}" for k, v in sorted(self.skipped.items()))
        return (
            f"read={self.rows_read} accepted={self.rows_accepted} "
            f"skipped={self.rows_skipped} ({reasons or 'none'})"
        )


class CatalogBuilder:
    """
    Accumulate source rows into University records.

    Example:
        >>> builder = CatalogBuilder(target_year=2025)
        >>> for row in rows:
        ...     builder.add_row(row)
        >>> catalog = builder.build()
    """

    def __init__(self, target_year: Optional[int] = None, filter_year: Optional[bool] = None):
        settings = get_settings()
        self.target_year = (
            target_year if target_year is not None else settings.get_effective_target_year()
        )
        self.filter_year = (
            filter_year if filter_year is not None else settings.catalog.filter_year
        )
        self.report = BuildReport()
        self._universities: dict[str, University] = {}

    def _skip_reason(self, row: SourceRow) -> Optional[str]:
        if self.filter_year and row.year != str(self.target_year):
            return "year"
        if not is_degree_granting(row.school_type):
            return "school_type"
        if row.program_type != DEGREE_PROGRAM:
            return "program_type"
        if not row.department or row.department == NO_DEPARTMENT:
            return "no_department"
        if not row.university:
            return "no_university"
        return None

    def add_row(self, row: Optional[SourceRow]) -> bool:
        """
        Fold one row into the catalog.

        Returns:
            True if the row was accepted
        """
        self.report.rows_read += 1

        if row is None:
            self.report.skip("malformed")
            return False

        reason = self._skip_reason(row)
        if reason:
            self.report.skip(reason)
            logger.debug(f"Skipped row ({reason}): {row.university} / {row.department}")
            return False

        univ = self._universities.get(row.university)
        if univ is None:
            univ = University(
                name=row.university,
                location=row.location,
                type=row.institution_type,
                school_type=row.school_type,
            )
            self._universities[row.university] = univ

        category = row.category_broad or DEFAULT_CATEGORY
        departments = univ.colleges.setdefault(category, [])
        if row.department not in departments:
            departments.append(row.department)

        fine = row.fine_category
        if fine:
            univ.dept_categories[row.department] = fine

        # Day/night splits repeat a department; the last row wins, as in the source export
        univ.stats[row.department] = RecruitmentStats.from_counts(row.seats, row.applicants)

        self.report.rows_accepted += 1
        return True

    def add_cells(
        self,
        rows: Iterable[Sequence[str]],
        columns: Optional[ColumnsConfig] = None,
        min_columns: Optional[int] = None,
    ) -> None:
        """Parse and fold raw CSV cell lists."""
        settings = get_settings()
        columns = columns or settings.catalog.columns
        min_columns = min_columns if min_columns is not None else settings.catalog.min_columns

        for cells in rows:
            self.add_row(parse_row(cells, columns, min_columns))

    def build(self, source_file: str = "") -> Catalog:
        """Assign tiers and return the finished catalog."""
        for univ in self._universities.values():
            univ.tier, univ.prestige_metric = assign_tier(univ)

        catalog = Catalog(
            target_year=self.target_year,
            universities=dict(self._universities),
            source_file=source_file,
        )

        logger.info(
            f"Built catalog: {len(catalog)} universities "
            f"[{self.report.summary()}]"
        )
        return catalog


# ─────────────────────────────────────────────────────────────────────────────
# Persistence
# ─────────────────────────────────────────────────────────────────────────────


class CatalogNotFoundError(FileNotFoundError):
    """Raised when the catalog artifact has not been built yet."""


def build_catalog(
    csv_path: Optional[Path] = None,
    target_year: Optional[int] = None,
    filter_year: Optional[bool] = None,
) -> tuple[Catalog, BuildReport]:
    """
    Build a catalog straight from the source CSV.

    Args:
        csv_path: Source CSV (default from config)
        target_year: Year to keep (default from config)
        filter_year: Whether to drop rows of other years

    Returns:
        (catalog, build report)
    """
    settings = get_settings()
    csv_path = Path(csv_path) if csv_path else settings.resolved_paths.csv_file

    builder = CatalogBuilder(target_year=target_year, filter_year=filter_year)
    builder.add_cells(SourceReader(csv_path))
    return builder.build(source_file=str(csv_path)), builder.report


def save_catalog(catalog: Catalog, path: Optional[Path] = None) -> Path:
    """Write the catalog artifact as JSON."""
    path = Path(path) if path else get_settings().resolved_paths.catalog_file
    save_json(path, catalog.model_dump(mode="json"))
    logger.info(f"Saved catalog ({len(catalog)} universities) to {path}")
    return path


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """
    Load a catalog artifact.

    Raises:
        CatalogNotFoundError: If the artifact does not exist
    """
    path = Path(path) if path else get_settings().resolved_paths.catalog_file
    if not path.exists():
        raise CatalogNotFoundError(f"Catalog not found: {path}. Run 'deptcompass build' first.")

    catalog = Catalog.model_validate(load_json(path))
    logger.debug(f"Loaded catalog with {len(catalog)} universities from {path}")
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Process-wide catalog, loaded once from the configured artifact."""
    return load_catalog()
