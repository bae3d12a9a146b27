"""
Ranking Module - Deterministic composite score per search result.
=================================================================

score = institutional prestige
      + regulated-profession / popular-program bonus
      + teaching-hospital / pharmacy-stronghold affiliation bonus
      + capital-region bonus
      + admissions-difficulty proxy
      + query-exclusivity penalty
      + hash tie-break in [0, 1)

Higher scores rank first. Every term is a pure function of the university,
the department name and the query, so repeated searches sort identically.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Optional

from deptcompass.search.estimator import estimate_steady, is_popular
from deptcompass.search.professions import (
    Profession,
    department_profession,
    detect_query_mode,
    matches_mode,
)
from deptcompass.shared.config import get_settings
from deptcompass.shared.schemas import University
from deptcompass.shared.utils import load_data_table, stable_fraction

CATEGORY_BONUS: dict[Profession, float] = {
    Profession.MEDICINE: 60.0,
    Profession.DENTISTRY: 52.0,
    Profession.KOREAN_MEDICINE: 48.0,
    Profession.VETERINARY: 44.0,
    Profession.PHARMACY: 40.0,
    Profession.NURSING: 20.0,
}
POPULAR_BONUS = 5.0

HOSPITAL_BONUS = 20.0
PHARMACY_STRONGHOLD_BONUS = 15.0
CAPITAL_BONUS = 5.0
CAPITAL_REGION = "서울"

DIFFICULTY_THRESHOLD = 90.0
DIFFICULTY_WEIGHT = 3.0
EXCLUSIVITY_PENALTY = -1000.0


# ─────────────────────────────────────────────────────────────────────────────
# Prestige Resolver
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class PrestigeResolver:
    """
    Layered name -> prestige lookup.

    1. exact name
    2. substring match against table keys, in table order
    3. heuristic markers (과학기술원, 교육대학교)
    4. default
    """

    scores: dict[str, float]
    heuristics: list[tuple[str, float]] = field(default_factory=list)
    default_score: float = 50.0

    @classmethod
    def from_table(cls, table: dict[str, Any]) -> "PrestigeResolver":
        return cls(
            scores={k: float(v) for k, v in (table.get("scores") or {}).items()},
            heuristics=[
                (h["contains"], float(h["score"])) for h in table.get("heuristics") or []
            ],
            default_score=float(table.get("default_score", 50)),
        )

    def resolve(self, university_name: str) -> float:
        if university_name in self.scores:
            return self.scores[university_name]

        for key, score in self.scores.items():
            if key in university_name or university_name in key:
                return score

        for marker, score in self.heuristics:
            if marker in university_name:
                return score

        return self.default_score


@dataclass
class AffiliationTable:
    """Universities that earn affiliation bonuses."""

    major_hospitals: frozenset[str]
    major_pharmacy: frozenset[str]


@lru_cache(maxsize=1)
def _load_prestige() -> tuple[PrestigeResolver, AffiliationTable]:
    table = load_data_table("prestige.yaml")
    affiliations = AffiliationTable(
        major_hospitals=frozenset(table.get("major_hospitals") or []),
        major_pharmacy=frozenset(table.get("major_pharmacy") or []),
    )
    return PrestigeResolver.from_table(table), affiliations


# ─────────────────────────────────────────────────────────────────────────────
# Scorer
# ─────────────────────────────────────────────────────────────────────────────


class RankingScorer:
    """
    Compute ranking scores.

    Example:
        >>> scorer = RankingScorer()
        >>> scorer.score(snu, "컴퓨터공학부", "서울대") > scorer.score(snu, "국어국문학과", "서울대")
        True
    """

    def __init__(
        self,
        resolver: Optional[PrestigeResolver] = None,
        affiliations: Optional[AffiliationTable] = None,
        target_year: Optional[int] = None,
    ):
        default_resolver, default_affiliations = _load_prestige()
        self.resolver = resolver or default_resolver
        self.affiliations = affiliations or default_affiliations
        self.target_year = (
            target_year
            if target_year is not None
            else get_settings().get_effective_target_year()
        )

    def category_bonus(self, department_name: str) -> float:
        profession = department_profession(department_name)
        if profession is not None:
            return CATEGORY_BONUS.get(profession, 0.0)
        if is_popular(department_name):
            return POPULAR_BONUS
        return 0.0

    def affiliation_bonus(self, university: University, department_name: str) -> float:
        profession = department_profession(department_name)
        if (
            profession in (Profession.MEDICINE, Profession.NURSING)
            and university.name in self.affiliations.major_hospitals
        ):
            return HOSPITAL_BONUS
        if (
            profession is Profession.PHARMACY
            and university.name in self.affiliations.major_pharmacy
        ):
            return PHARMACY_STRONGHOLD_BONUS
        return 0.0

    def difficulty_bonus(self, university: University, department_name: str) -> float:
        estimate = estimate_steady(university.tier, department_name, self.target_year)
        if estimate.jeongsi > DIFFICULTY_THRESHOLD:
            return (estimate.jeongsi - DIFFICULTY_THRESHOLD) * DIFFICULTY_WEIGHT
        return 0.0

    def exclusivity_penalty(self, department_name: str, query: Optional[str]) -> float:
        """Push departments of other professions out of a profession query."""
        if not query:
            return 0.0
        mode = detect_query_mode(query)
        if mode is None or matches_mode(department_name, mode):
            return 0.0
        return EXCLUSIVITY_PENALTY

    @staticmethod
    def tie_break(university: University, department_name: str) -> float:
        return stable_fraction(university.name + department_name)

    def score(
        self,
        university: University,
        department_name: str,
        query: Optional[str] = None,
    ) -> float:
        """Composite ranking score; higher ranks first."""
        score = self.resolver.resolve(university.name)
        score += self.category_bonus(department_name)
        score += self.affiliation_bonus(university, department_name)
        if CAPITAL_REGION in university.location:
            score += CAPITAL_BONUS
        score += self.difficulty_bonus(university, department_name)
        score += self.exclusivity_penalty(department_name, query)
        score += self.tie_break(university, department_name)
        return score


def calculate_ranking_score(
    university: University,
    department_name: str,
    query: Optional[str] = None,
) -> float:
    """Convenience wrapper around a default RankingScorer."""
    return RankingScorer().score(university, department_name, query)
