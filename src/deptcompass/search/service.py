"""
Search Service - Search and detail calls over the catalog.
==========================================================

Ties together:
- QueryMatcher (candidate assembly)
- RankingScorer (ordering)
- DetailEnricher (single-record detail view)

Candidate assembly completes before scoring; truncation happens only after
the full sort.
"""

from typing import Optional

from deptcompass.search.matcher import Candidate, QueryMatcher
from deptcompass.search.ranking import RankingScorer
from deptcompass.shared.config import get_settings
from deptcompass.shared.logging import get_logger
from deptcompass.shared.schemas import Catalog, DepartmentRecord, SearchResponse

logger = get_logger(__name__)


class DepartmentSearchService:
    """
    Search departments by free text.

    Example:
        >>> service = DepartmentSearchService(catalog)
        >>> response = service.search("서울대")
        >>> response.results[0].university_name
        '서울대학교'
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        scorer: Optional[RankingScorer] = None,
        max_results: Optional[int] = None,
        enricher=None,
    ):
        if catalog is None:
            from deptcompass.ingestion.catalog import get_catalog

            catalog = get_catalog()

        settings = get_settings()
        self.catalog = catalog
        self.matcher = QueryMatcher(catalog, settings.search)
        self.scorer = scorer or RankingScorer()
        self.max_results = max_results if max_results is not None else settings.search.max_results
        self._enricher = enricher

    @property
    def enricher(self):
        """Detail enricher (created lazily)."""
        if self._enricher is None:
            from deptcompass.enrichment.enricher import DetailEnricher

            self._enricher = DetailEnricher(self.catalog)
        return self._enricher

    def rank(self, candidates: list[Candidate], query: Optional[str] = None) -> list[Candidate]:
        """Sort candidates by descending ranking score."""
        scored = [
            (self.scorer.score(c.university, c.record.department_name, query), c)
            for c in candidates
        ]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [c for _, c in scored]

    def search(self, query: str) -> SearchResponse:
        """
        Run one search.

        An empty query returns the suggestion set, unranked.

        Args:
            query: Free-text query

        Returns:
            SearchResponse with at most max_results records and the number
            of candidates before truncation
        """
        query = (query or "").strip()
        candidates = self.matcher.match(query)

        if not query:
            records = [c.record for c in candidates]
            return SearchResponse(
                query=query,
                reported_match_count=len(records),
                results=records[: self.max_results],
            )

        ranked = self.rank(candidates, query)
        results = [c.record for c in ranked[: self.max_results]]

        logger.info(f"Search '{query}': {len(candidates)} matches, returning {len(results)}")
        return SearchResponse(query=query, reported_match_count=len(candidates), results=results)

    def get_department_details(
        self,
        university_name: str,
        department_name: str,
        use_enrichment: Optional[bool] = None,
    ) -> DepartmentRecord:
        """Detail view for one department (see DetailEnricher.enrich)."""
        return self.enricher.enrich(
            university_name, department_name, use_enrichment=use_enrichment
        )


def merge_into_results(
    results: list[DepartmentRecord], updated: DepartmentRecord
) -> list[DepartmentRecord]:
    """
    Overlay an enriched record onto the result with the same identity.

    Populated fields of ``updated`` replace those of the matching record;
    fields it leaves empty keep their current value. Returns a new list.
    """
    from deptcompass.enrichment.enricher import apply_detail

    return [apply_detail(record, updated) if record.id == updated.id else record for record in results]


def search_departments(query: str) -> SearchResponse:
    """Convenience function over the process-wide catalog."""
    return DepartmentSearchService().search(query)
