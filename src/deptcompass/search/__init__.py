"""
Search Module - Classification, matching and ranking of departments.
====================================================================

This module implements the search workflow:

- professions: regulated-profession detection shared by filter and scorer
- classifier: ordered keyword rules for field tags
- flattener: University -> searchable DepartmentRecords
- matcher: free-text query -> candidate departments
- estimator: heuristic admission-cut estimates
- ranking: deterministic composite ranking score
- service: search / detail calls

Search Flow:
    Query → QueryMatcher → Candidates → RankingScorer → sorted, top N
"""

from deptcompass.search.professions import (
    Profession,
    department_profession,
    detect_query_mode,
    matches_mode,
)
from deptcompass.search.classifier import classify_field
from deptcompass.search.flattener import clean_department_name, flatten_university
from deptcompass.search.estimator import AdmissionEstimate, AdmissionEstimator, estimate_steady
from deptcompass.search.ranking import PrestigeResolver, RankingScorer, calculate_ranking_score
from deptcompass.search.matcher import Candidate, QueryMatcher
from deptcompass.search.service import (
    DepartmentSearchService,
    merge_into_results,
    search_departments,
)

__all__ = [
    # Professions
    "Profession",
    "department_profession",
    "detect_query_mode",
    "matches_mode",
    # Classifier
    "classify_field",
    # Flattener
    "clean_department_name",
    "flatten_university",
    # Estimator
    "AdmissionEstimate",
    "AdmissionEstimator",
    "estimate_steady",
    # Ranking
    "PrestigeResolver",
    "RankingScorer",
    "calculate_ranking_score",
    # Matcher
    "Candidate",
    "QueryMatcher",
    # Service
    "DepartmentSearchService",
    "merge_into_results",
    "search_departments",
]
