"""
Enricher Module - Detail view for one department.
=================================================

Builds a fully populated DepartmentRecord for (university, department):
- field tag against the department's actual college
- tuition / employment from the reference table or tier/field bands
- keyword-selected fallback description
- three-year admission trend from the estimator
- optional external enrichment under a timeout, merged field by field

Enrichment failures never surface to the caller; the local defaults stay.
"""

import concurrent.futures
from functools import lru_cache
from typing import Any, Optional

from deptcompass.enrichment.cache import EnrichmentCache, get_enrichment_cache
from deptcompass.enrichment.provider import EnrichmentProvider, get_provider
from deptcompass.search.classifier import classify_field
from deptcompass.search.estimator import AdmissionEstimator
from deptcompass.search.flattener import clean_department_name
from deptcompass.shared.config import get_settings
from deptcompass.shared.logging import get_logger
from deptcompass.shared.schemas import (
    CONTENT_FIELDS,
    PLACEHOLDER,
    AdmissionYearEntry,
    Catalog,
    DepartmentRecord,
    EnrichmentPayload,
    FieldTag,
    RecruitmentStats,
    Tier,
    University,
)
from deptcompass.shared.utils import load_data_table, stable_fraction

logger = get_logger(__name__)

NOT_FOUND_DESCRIPTION = "정보 없음"

# Provenance tags by recency
PROJECTED = "예상"
ESTIMATED = "추정"
CONFIRMED = "결과"

# Holistic-track offset over the category-based early value, per trend slot
HOLISTIC_OFFSETS = (0.5, 0.3, 0.4)


# ─────────────────────────────────────────────────────────────────────────────
# Fallback Descriptions
# ─────────────────────────────────────────────────────────────────────────────


DESCRIPTION_TEMPLATES: list[tuple[tuple[str, ...], str]] = [
    (("의예", "의학"), "생명 존중의 가치를 바탕으로 인류 건강에 기여하는 우수한 의료인을 양성합니다."),
    (
        ("컴퓨터", "소프트웨어", "AI", "인공지능"),
        "4차 산업혁명을 선도하는 창의적이고 혁신적인 소프트웨어 전문 인재를 배출합니다.",
    ),
    (("전자", "전기"), "첨단 전자 기술을 선도하며 미래 사회를 이끌어갈 창의적인 공학 인재를 육성합니다."),
    (("경영",), "글로벌 비즈니스 환경을 이끌어갈 리더십과 실무 능력을 겸비한 전문 경영인을 육성합니다."),
    (("경제",), "경제 현상에 대한 통찰력과 분석력을 갖춘 글로벌 경제 전문가를 양성합니다."),
    (
        ("국어", "국문"),
        "우리말과 글에 대한 깊이 있는 연구를 통해 민족 문화 창달에 기여하는 인재를 기릅니다.",
    ),
    (
        ("영어", "영문"),
        "글로벌 시대의 필수 역량인 영어 능력과 인문학적 소양을 갖춘 국제적 인재를 교육합니다.",
    ),
    (
        ("간호",),
        "인간에 대한 사랑과 봉사 정신을 바탕으로 국민 건강 증진에 이바지하는 전문 간호사를 양성합니다.",
    ),
    (("교육",), "올바른 교육관과 전문 지식을 갖춘 미래 사회의 참된 스승을 양성하는 요람입니다."),
    (
        ("디자인", "미술"),
        "독창적인 예술 감각과 실무 능력을 함양하여 문화 예술계를 이끌어갈 전문가를 양성합니다.",
    ),
]

REPUTATION_PHRASES = ("우수한 교육 환경", "체계적인 커리큘럼", "높은 경쟁력", "창의적 인재 양성")


def fallback_description(university_name: str, department_name: str) -> str:
    """
    Keyword-selected one-sentence description.

    The generic template's phrase is chosen from a hash of the identity,
    so repeated calls return the same sentence.

    Example:
        >>> fallback_description("서울대학교", "간호학과")
        '서울대학교 간호학과는 인간에 대한 사랑과 ...'
    """
    for keywords, sentence in DESCRIPTION_TEMPLATES:
        if any(k in department_name for k in keywords):
            return f"{university_name} {department_name}는 {sentence}"

    index = int(stable_fraction(f"{university_name}-{department_name}") * len(REPUTATION_PHRASES))
    reputation = REPUTATION_PHRASES[index]
    return (
        f"{university_name} {department_name}은(는) {reputation}을 바탕으로 해당 분야의 "
        f"전문가를 양성하며, 국내에서 꾸준한 인지도를 유지하고 있습니다."
    )


# ─────────────────────────────────────────────────────────────────────────────
# Tuition / Employment
# ─────────────────────────────────────────────────────────────────────────────


LOW_TUITION_TIERS = (Tier.NATIONAL, Tier.REGIONAL, Tier.EDU)
HIGH_EMPLOYMENT_TIERS = (Tier.SKY, Tier.TOP15)


MEDICAL_FIELDS = frozenset(
    tag.value
    for tag in (
        FieldTag.MEDICAL,
        FieldTag.ALLIED_HEALTH,
        FieldTag.MEDICINE,
        FieldTag.DENTISTRY,
        FieldTag.KOREAN_MEDICINE,
        FieldTag.VETERINARY,
        FieldTag.PHARMACY,
        FieldTag.NURSING,
    )
)


def _is_medical(field: str) -> bool:
    return field in MEDICAL_FIELDS or "의학" in field or "의약" in field


def _is_engineering(field: str) -> bool:
    return FieldTag.ENGINEERING.value in field


@lru_cache(maxsize=1)
def load_reference_stats() -> dict[str, Any]:
    """Packaged per-university tuition and employment figures."""
    return load_data_table("reference_stats.yaml").get("universities") or {}


def approximate_specs(university_name: str, tier: Optional[Tier], field: str) -> tuple[str, str]:
    """
    Baseline (tuition, employment) strings.

    Reference figures win; otherwise tier/field bands apply.
    """
    reference = load_reference_stats()
    if university_name in reference:
        entry = reference[university_name]
        return entry["tuition"], entry["employment"]

    medical = _is_medical(field)
    engineering = _is_engineering(field)

    if tier in LOW_TUITION_TIERS:
        tuition = "400~450만원 (예상)"
    elif engineering or medical or FieldTag.ARTS.value in field:
        tuition = "900~950만원 (예상)"
    elif FieldTag.NATURAL.value in field:
        tuition = "800~850만원 (예상)"
    else:
        tuition = "700~780만원 (예상)"

    if tier in HIGH_EMPLOYMENT_TIERS or medical or engineering:
        employment = "70~80% (예상)"
    elif tier == Tier.EDU:
        employment = "60~70% (임용 포함)"
    else:
        employment = "60~70% (예상)"

    return tuition, employment


# ─────────────────────────────────────────────────────────────────────────────
# Admission Trend
# ─────────────────────────────────────────────────────────────────────────────


def year_label(year: int) -> str:
    return f"{year}학년도"


def admission_trend(
    tier: Optional[Tier],
    department_name: str,
    target_year: int,
    estimator: Optional[AdmissionEstimator] = None,
) -> list[AdmissionYearEntry]:
    """
    Three-year trend: target year (projected), previous (estimated),
    two years back (confirmed).
    """
    estimator = estimator or AdmissionEstimator()
    slots = zip(
        (target_year, target_year - 1, target_year - 2),
        (PROJECTED, ESTIMATED, CONFIRMED),
        HOLISTIC_OFFSETS,
    )

    trend = []
    for year, tag, offset in slots:
        est = estimator.estimate(tier, department_name, year)
        trend.append(
            AdmissionYearEntry(
                year=year_label(year),
                susi_gyogwa=f"{est.susi_text} ({tag})",
                susi_jonghap=f"{est.susi + offset:.2f} ({tag})",
                jeongsi=f"{est.jeongsi_text} ({tag})",
            )
        )
    return trend


# ─────────────────────────────────────────────────────────────────────────────
# Merging
# ─────────────────────────────────────────────────────────────────────────────


MIDDLE_YEAR_INDEX = 1


def merge_enrichment(
    base: DepartmentRecord,
    patch: Optional[EnrichmentPayload],
    min_description_length: Optional[int] = None,
) -> DepartmentRecord:
    """
    Overlay an enrichment payload on a record.

    Only fields present in the payload are written: the description when it
    is longer than ``min_description_length``, the summary, and the
    middle-year admission entry sub-field by sub-field. Nothing is ever
    cleared.

    Returns:
        A new record; ``base`` is not modified
    """
    merged = base.model_copy(deep=True)
    if patch is None or patch.is_empty():
        return merged

    if min_description_length is None:
        min_description_length = get_settings().enrichment.min_description_length

    if patch.description and len(patch.description) > min_description_length:
        merged.description = patch.description

    if patch.summary:
        merged.ai_summary = patch.summary

    admission = patch.admission_prev_year
    if admission is not None and len(merged.admission_data) > MIDDLE_YEAR_INDEX:
        entry = merged.admission_data[MIDDLE_YEAR_INDEX]
        updates = {
            "susi_gyogwa": admission.susi_gyogwa,
            "susi_jonghap": admission.susi_jonghap,
            "jeongsi": admission.jeongsi,
        }
        merged.admission_data[MIDDLE_YEAR_INDEX] = entry.model_copy(
            update={k: v for k, v in updates.items() if v}
        )

    return merged


def apply_detail(base: DepartmentRecord, detail: DepartmentRecord) -> DepartmentRecord:
    """Copy every populated content field of ``detail`` onto ``base``."""
    updates = {name: getattr(detail, name) for name in CONTENT_FIELDS if detail.is_populated(name)}
    return base.model_copy(update=updates, deep=True)


# ─────────────────────────────────────────────────────────────────────────────
# Detail Enricher
# ─────────────────────────────────────────────────────────────────────────────


def not_found_record(university_name: str, department_name: str) -> DepartmentRecord:
    """Placeholder returned when the university is not in the catalog."""
    return DepartmentRecord(
        university_name=university_name,
        department_name=department_name,
        location="",
        field="",
        description=NOT_FOUND_DESCRIPTION,
        tuition_fee=PLACEHOLDER,
        employment_rate=PLACEHOLDER,
        department_ranking=PLACEHOLDER,
        not_found=True,
    )


class DetailEnricher:
    """
    Produce detail records, optionally refined by an external provider.

    Example:
        >>> enricher = DetailEnricher(catalog, provider=None)
        >>> record = enricher.enrich("서울대학교", "컴퓨터공학부")
        >>> [entry.year for entry in record.admission_data]
        ['2025학년도', '2024학년도', '2023학년도']
    """

    def __init__(
        self,
        catalog: Catalog,
        provider: Optional[EnrichmentProvider] = None,
        cache: Optional[EnrichmentCache] = None,
        estimator: Optional[AdmissionEstimator] = None,
        timeout: Optional[float] = None,
        target_year: Optional[int] = None,
    ):
        settings = get_settings()
        self.catalog = catalog
        if provider is None and settings.is_enrichment_enabled():
            provider = get_provider()
        self.provider = provider
        self.cache = cache if cache is not None else get_enrichment_cache()
        self.estimator = estimator or AdmissionEstimator()
        self.timeout = timeout if timeout is not None else settings.enrichment.timeout_seconds
        self.target_year = (
            target_year
            if target_year is not None
            else settings.get_effective_target_year()
        )
        self.min_description_length = settings.enrichment.min_description_length

    @staticmethod
    def _resolve_department(university: University, department_name: str) -> tuple[str, str]:
        """(college, raw department name) for a possibly cleaned name."""
        college = university.college_of(department_name)
        if college is not None:
            return college, department_name
        for college, raw in university.iter_departments():
            if clean_department_name(raw) == department_name:
                return college, raw
        return "", department_name

    def _fetch(
        self,
        university_name: str,
        department_name: str,
        stats: Optional[RecruitmentStats],
    ) -> Optional[EnrichmentPayload]:
        """Call the provider on a worker thread, waiting at most ``timeout``."""
        cached = self.cache.get(university_name, department_name)
        if cached is not None:
            logger.debug(f"Enrichment cache hit: {university_name}-{department_name}")
            return cached

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.provider.fetch, university_name, department_name, stats)
        try:
            payload = future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError:
            logger.warning(
                f"Enrichment timed out after {self.timeout}s: {university_name} {department_name}"
            )
            return None
        except Exception as e:
            logger.warning(f"Enrichment failed: {university_name} {department_name}: {e}")
            return None
        finally:
            executor.shutdown(wait=False)

        if payload is not None:
            self.cache.set(university_name, department_name, payload)
        return payload

    def build_base(self, university: University, department_name: str) -> DepartmentRecord:
        """Detail record from local data only."""
        college, raw_name = self._resolve_department(university, department_name)
        field = classify_field(
            raw_name,
            college,
            university.tier,
            university.dept_categories.get(raw_name),
        )
        tuition, employment = approximate_specs(university.name, university.tier, field)

        return DepartmentRecord(
            university_name=university.name,
            department_name=department_name,
            location=university.location,
            field=field,
            description=fallback_description(university.name, department_name),
            tuition_fee=tuition,
            employment_rate=employment,
            department_ranking=PLACEHOLDER,
            admission_data=admission_trend(
                university.tier, department_name, self.target_year, self.estimator
            ),
        )

    def enrich(
        self,
        university_name: str,
        department_name: str,
        use_enrichment: Optional[bool] = None,
    ) -> DepartmentRecord:
        """
        Build the detail record for one department.

        Args:
            university_name: Exact university name
            department_name: Department name (as shown in search results)
            use_enrichment: Force the external call on/off (default: on when
                a provider is configured)

        Returns:
            Populated record, or a not-found placeholder
        """
        university = self.catalog.get(university_name)
        if university is None:
            logger.info(f"University not found: {university_name}")
            return not_found_record(university_name, department_name)

        record = self.build_base(university, department_name)

        if use_enrichment is None:
            use_enrichment = self.provider is not None
        if not use_enrichment or self.provider is None:
            return record

        _, raw_name = self._resolve_department(university, department_name)
        payload = self._fetch(university.name, department_name, university.stats.get(raw_name))
        return merge_enrichment(record, payload, self.min_description_length)


def get_department_details(
    catalog: Catalog,
    university_name: str,
    department_name: str,
    provider: Optional[EnrichmentProvider] = None,
) -> DepartmentRecord:
    """Convenience function around DetailEnricher."""
    return DetailEnricher(catalog, provider=provider).enrich(university_name, department_name)
