"""
Matcher Module - Free-text query to candidate departments.
==========================================================

Candidate assembly for one search:
1. empty query -> suggestion set
2. university-name matching (full name, short name, "대" abbreviation)
3. department remainder filtering inside matched universities
4. global department / field scan over the other universities
5. regulated-profession exclusivity filter

Ranking and truncation happen afterwards in the search service.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from deptcompass.search.flattener import flatten_university
from deptcompass.search.professions import Profession, detect_query_mode, matches_mode
from deptcompass.shared.config import SearchConfig, get_settings
from deptcompass.shared.logging import get_logger
from deptcompass.shared.schemas import Catalog, DepartmentRecord, University

logger = get_logger(__name__)

UNIVERSITY_ABBREVIATION = "대"
_UNIVERSITY_SUFFIX_RE = re.compile(r"(대학교|대학|대)$")


@dataclass
class Candidate:
    """A department record together with the university it came from."""

    university: University
    record: DepartmentRecord

    @property
    def id(self) -> str:
        return self.record.id


def short_university_name(name: str) -> str:
    """
    Drop the trailing university suffix.

    Example:
        >>> short_university_name("서울대학교")
        '서울'
        >>> short_university_name("서울대")
        '서울'
    """
    return _UNIVERSITY_SUFFIX_RE.sub("", name.strip())


def normalize_query(query: str) -> str:
    """Strip a trailing bare "대" abbreviation ("서울대" -> "서울")."""
    if query.endswith(UNIVERSITY_ABBREVIATION):
        return query[: -len(UNIVERSITY_ABBREVIATION)]
    return query


def university_matches(university: University, query: str) -> bool:
    """Whether a query names this university."""
    if not query:
        return False
    name = university.name
    if query in name or name in query:
        return True
    normalized = normalize_query(query)
    return len(normalized) > 1 and normalized in name


def department_remainder(university: University, query: str) -> str:
    """
    What is left of the query once the university's name is removed.

    Example:
        >>> department_remainder(seoul, "서울대 컴퓨터")
        '컴퓨터'
        >>> department_remainder(seoul, "서울대학교")
        ''
    """
    short = short_university_name(university.name)
    remainder = query
    for surface in (university.name, short + "대학교", short + "대", short):
        if surface and surface in remainder:
            remainder = remainder.replace(surface, "", 1)
            break
    return remainder.strip()


class QueryMatcher:
    """
    Assemble search candidates from the catalog.

    Flattened departments are cached per university for the matcher's
    lifetime; the catalog is static reference data.

    Example:
        >>> matcher = QueryMatcher(catalog)
        >>> [c.record.department_name for c in matcher.match("서울대 컴퓨터")]
        ['컴퓨터공학부']
    """

    def __init__(self, catalog: Catalog, config: Optional[SearchConfig] = None):
        self.catalog = catalog
        self.config = config or get_settings().search
        self._flattened: dict[str, list[DepartmentRecord]] = {}

    def departments(self, university: University) -> list[DepartmentRecord]:
        """Flattened departments of one university (cached)."""
        if university.name not in self._flattened:
            self._flattened[university.name] = flatten_university(university)
        return self._flattened[university.name]

    def _candidates(self, university: University) -> Iterator[Candidate]:
        for record in self.departments(university):
            yield Candidate(university=university, record=record)

    # ─────────────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────────────

    def suggestions(self) -> list[Candidate]:
        """Curated starting set shown for an empty query."""
        keywords = self.config.suggestion_keywords
        universities = self.catalog.all()[: self.config.suggestion_university_count]
        return [
            candidate
            for university in universities
            for candidate in self._candidates(university)
            if any(k in candidate.record.department_name for k in keywords)
        ]

    def matched_universities(self, query: str) -> list[University]:
        """Universities named by the query or by its leading token."""
        tokens = query.split()
        lead = tokens[0] if len(tokens) > 1 else None
        return [
            university
            for university in self.catalog.all()
            if university_matches(university, query)
            or (lead is not None and university_matches(university, lead))
        ]

    def _within_university(self, university: University, query: str) -> list[Candidate]:
        if short_university_name(query) == short_university_name(university.name):
            return list(self._candidates(university))

        remainder = department_remainder(university, query)
        if not remainder:
            return list(self._candidates(university))

        remainder_mode = detect_query_mode(remainder)
        return [
            candidate
            for candidate in self._candidates(university)
            if remainder in candidate.record.department_name
            or (
                remainder_mode is not None
                and matches_mode(candidate.record.department_name, remainder_mode)
            )
        ]

    def _global_match(
        self, record: DepartmentRecord, query: str, mode: Optional[Profession]
    ) -> bool:
        name = record.department_name
        if query in name or name in query:
            return True
        if query in record.field:
            return True
        return mode is not None and matches_mode(name, mode)

    def _global_scan(
        self, query: str, skip: set[str], mode: Optional[Profession]
    ) -> list[Candidate]:
        return [
            candidate
            for university in self.catalog.all()
            if university.name not in skip
            for candidate in self._candidates(university)
            if self._global_match(candidate.record, query, mode)
        ]

    # ─────────────────────────────────────────────────────────────────────
    # Entry point
    # ─────────────────────────────────────────────────────────────────────

    def match(self, query: str) -> list[Candidate]:
        """
        Assemble the full, unranked candidate list for a query.

        Args:
            query: Free-text query

        Returns:
            Candidates deduplicated by identity, first occurrence kept
        """
        query = (query or "").strip()
        if not query:
            return self.suggestions()

        mode = detect_query_mode(query)
        candidates: list[Candidate] = []

        matched = self.matched_universities(query)
        for university in matched:
            candidates.extend(self._within_university(university, query))

        if len(query) >= self.config.min_global_query_length:
            skip = {u.name for u in matched}
            # profession aliases only widen a query that names no university
            alias_mode = None if matched else mode
            candidates.extend(self._global_scan(query, skip, alias_mode))

        unique: dict[str, Candidate] = {}
        for candidate in candidates:
            unique.setdefault(candidate.id, candidate)
        results = list(unique.values())

        if mode is not None:
            results = [c for c in results if matches_mode(c.record.department_name, mode)]

        logger.debug(
            f"Query '{query}': {len(matched)} universities matched, "
            f"{len(results)} candidates (mode={mode.value if mode else None})"
        )
        return results
