"""
Schemas Module - Pydantic data models for the application.
==========================================================

Defines all data contracts used across the application:
- University catalog models (built once from the source dataset)
- Flattened, searchable department records
- Admission trend entries and enrichment payloads
- Search responses
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

# Display value for a field nobody has filled in yet
PLACEHOLDER = "-"

CONTENT_FIELDS = (
    "location",
    "field",
    "description",
    "tuition_fee",
    "employment_rate",
    "department_ranking",
    "admission_data",
    "ai_summary",
)


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class Tier(str, Enum):
    """Prestige bucket assigned to a university at catalog build time."""

    SKY = "SKY"  # top-tier
    TOP15 = "Top15"  # elite-15
    IN_SEOUL = "InSeoul"  # in-capital
    METRO = "Metro"
    NATIONAL = "National"  # national flagship
    REGIONAL = "Regional"
    EDU = "Edu"  # education-focused


class FieldTag(str, Enum):
    """Coarse academic field assigned to a department."""

    ENGINEERING = "공학"
    HUMANITIES = "인문"
    SOCIAL = "사회"
    NATURAL = "자연"
    MEDICAL = "의학"
    ALLIED_HEALTH = "보건"
    ARTS = "예체능"
    EDUCATION = "교육"
    # Regulated professions never share the generic MEDICAL bucket
    MEDICINE = "의예"
    DENTISTRY = "치의예"
    KOREAN_MEDICINE = "한의예"
    VETERINARY = "수의예"
    PHARMACY = "약학"
    NURSING = "간호"
    OTHER = "기타"


# ─────────────────────────────────────────────────────────────────────────────
# Catalog Models
# ─────────────────────────────────────────────────────────────────────────────


class RecruitmentStats(BaseModel):
    """Seats offered vs. applicants for one department in the target year."""

    recruit: float = Field(default=0.0, description="Seats offered")
    applicants: float = Field(default=0.0, description="Number of applicants")
    rate: float = Field(default=0.0, description="Competition ratio (applicants / seats)")

    @classmethod
    def from_counts(cls, recruit: float, applicants: float) -> "RecruitmentStats":
        """Build stats, deriving the competition rate (0 when no seats)."""
        rate = round(applicants / recruit, 2) if recruit > 0 else 0.0
        return cls(recruit=recruit, applicants=applicants, rate=rate)


class University(BaseModel):
    """
    One university in the catalog.

    Built once from source rows grouped by university name and treated as
    read-only reference data afterwards.
    """

    name: str = Field(..., description="University name (unique key)")
    location: str = Field(default="", description="Region token, e.g. '서울'")
    type: str = Field(default="", description="Institutional type, e.g. '사립', '국립'")
    school_type: str = Field(default="", description="School type label from the dataset")
    tier: Tier = Field(default=Tier.REGIONAL, description="Prestige bucket")
    prestige_metric: int = Field(default=99, description="Lower is more prestigious")
    colleges: dict[str, list[str]] = Field(
        default_factory=dict, description="College/category name -> department names"
    )
    dept_categories: dict[str, str] = Field(
        default_factory=dict, description="Department name -> fine category"
    )
    stats: dict[str, RecruitmentStats] = Field(
        default_factory=dict, description="Department name -> recruitment stats"
    )

    model_config = {"use_enum_values": False}

    def college_of(self, department_name: str) -> Optional[str]:
        """Return the college a department belongs to, if any."""
        for college, departments in self.colleges.items():
            if department_name in departments:
                return college
        return None

    def iter_departments(self):
        """Yield (college, department) pairs in insertion order."""
        for college, departments in self.colleges.items():
            for department in departments:
                yield college, department


class Catalog(BaseModel):
    """Build artifact: every university keyed by name."""

    target_year: int = Field(..., description="Reference year rows were filtered to")
    universities: dict[str, University] = Field(default_factory=dict)
    source_file: str = Field(default="", description="Dataset the catalog was built from")
    built_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def get(self, name: str) -> Optional[University]:
        """Look up a university by exact name."""
        return self.universities.get(name)

    def __len__(self) -> int:
        return len(self.universities)

    def all(self) -> list[University]:
        """All universities in source order."""
        return list(self.universities.values())


# ─────────────────────────────────────────────────────────────────────────────
# Department Records
# ─────────────────────────────────────────────────────────────────────────────


class AdmissionYearEntry(BaseModel):
    """Admission estimates for one academic year (formatted strings)."""

    year: str = Field(..., description="Academic year label, e.g. '2025학년도'")
    susi_gyogwa: str = Field(default=PLACEHOLDER, description="Early track, category based")
    susi_jonghap: str = Field(default=PLACEHOLDER, description="Early track, holistic")
    jeongsi: str = Field(default=PLACEHOLDER, description="Regular track percentile")


class DepartmentRecord(BaseModel):
    """
    Flattened, searchable department of one university.

    Recomputed per search; enriched once by the detail enricher.
    """

    university_name: str = Field(..., description="Owning university")
    department_name: str = Field(..., description="Cleaned department name")
    location: str = Field(default="", description="University region token")
    field: str = Field(default=FieldTag.OTHER.value, description="Coarse field tag")
    description: Optional[str] = Field(default=None, description="Short description")
    tuition_fee: str = Field(default=PLACEHOLDER, description="Annual tuition estimate")
    employment_rate: str = Field(default=PLACEHOLDER, description="Employment rate estimate")
    department_ranking: str = Field(default=PLACEHOLDER, description="Standing estimate")
    admission_data: list[AdmissionYearEntry] = Field(default_factory=list)
    ai_summary: Optional[str] = Field(default=None, description="Two-line recruitment summary")
    is_curated: bool = Field(default=False, description="Hand-curated record")
    not_found: bool = Field(default=False, description="University was not in the catalog")

    @computed_field
    @property
    def id(self) -> str:
        """Stable identity: university + department."""
        return f"{self.university_name}-{self.department_name}"

    def is_populated(self, name: str) -> bool:
        """Whether a field holds a real (non-placeholder) value."""
        value = getattr(self, name)
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip() not in ("", PLACEHOLDER)
        if isinstance(value, list):
            return len(value) > 0
        return True

    def populated_fields(self) -> set[str]:
        """Names of all content fields that hold real values."""
        return {name for name in CONTENT_FIELDS if self.is_populated(name)}


# ─────────────────────────────────────────────────────────────────────────────
# Enrichment Payload
# ─────────────────────────────────────────────────────────────────────────────


def _text_or_none(value: Any) -> Optional[str]:
    """Keep non-empty strings; anything else counts as not returned."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class AdmissionPatch(BaseModel):
    """Prior-year admission figures returned by the enrichment service."""

    susi_gyogwa: Optional[str] = Field(default=None, alias="susiGyogwa")
    susi_jonghap: Optional[str] = Field(default=None, alias="susiJonghap")
    jeongsi: Optional[str] = None

    model_config = {"populate_by_name": True}

    @field_validator("susi_gyogwa", "susi_jonghap", "jeongsi", mode="before")
    @classmethod
    def _clean(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    def is_empty(self) -> bool:
        return not (self.susi_gyogwa or self.susi_jonghap or self.jeongsi)


class EnrichmentPayload(BaseModel):
    """
    Structured result of an external enrichment call.

    Every field is optional; malformed values are dropped rather than
    rejected so a partly-useful response still contributes.
    """

    admission_prev_year: Optional[AdmissionPatch] = Field(default=None, alias="admissionPrevYear")
    summary: Optional[str] = None
    description: Optional[str] = None

    model_config = {"populate_by_name": True}

    @field_validator("admission_prev_year", mode="before")
    @classmethod
    def _admission(cls, v: Any) -> Any:
        if isinstance(v, AdmissionPatch):
            return None if v.is_empty() else v
        if not isinstance(v, dict):
            return None
        patch = AdmissionPatch.model_validate(v)
        return None if patch.is_empty() else patch

    @field_validator("summary", "description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    def is_empty(self) -> bool:
        return not (self.admission_prev_year or self.summary or self.description)


# ─────────────────────────────────────────────────────────────────────────────
# Search Response
# ─────────────────────────────────────────────────────────────────────────────


class SearchResponse(BaseModel):
    """Result of one search call."""

    query: str = Field(default="", description="Original query")
    reported_match_count: int = Field(default=0, description="Candidates before truncation")
    results: list[DepartmentRecord] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """The distinguishable 'no results' outcome."""
        return len(self.results) == 0
