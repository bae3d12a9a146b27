"""
Flattener Module - Expand a university into searchable department records.
==========================================================================

Walks the college -> departments mapping of one University and emits one
DepartmentRecord per undergraduate department:
- curated records for the university come first and win over generated ones
- graduate-school entries and sub-major ("전공") entries are dropped
- cosmetic suffixes such as "(4년제)" are stripped from names

Order is insertion order only; ranking is a separate stage.
"""

import re
from functools import lru_cache
from typing import Optional

from deptcompass.search.classifier import classify_field
from deptcompass.shared.logging import get_logger
from deptcompass.shared.schemas import PLACEHOLDER, DepartmentRecord, University
from deptcompass.shared.utils import clean_whitespace, load_data_table

logger = get_logger(__name__)

GRADUATE_MARKER = "대학원"
MAJOR_MARKER = "전공"
# Open-major undergraduate units that happen to contain the sub-major marker
OPEN_MAJOR_NAMES = ("자율전공", "자유전공")

DEFAULT_TUITION = "700~900만원 (예상)"
DEFAULT_EMPLOYMENT = "60~70% (예상)"

# Trailing program-length notes: (4년제), (2+4학제), (6년), (4-year)
_PROGRAM_LENGTH_RE = re.compile(
    r"\s*\(\s*\d+(?:\s*\+\s*\d+)?\s*(?:년제|학제|년|-?\s*years?)\s*\)\s*$",
    re.IGNORECASE,
)
_PLACEHOLDER_CHARS_RE = re.compile(r"[\u200b\u200c\u200d\ufeff*※_]+")


def clean_department_name(name: str) -> str:
    """
    Normalize a department name for display and identity.

    Example:
        >>> clean_department_name("  의예과(6년제) ")
        '의예과'
        >>> clean_department_name("약학과 (2+4학제)")
        '약학과'
    """
    cleaned = _PLACEHOLDER_CHARS_RE.sub(" ", name)
    cleaned = clean_whitespace(cleaned)
    previous = None
    while previous != cleaned:
        previous = cleaned
        cleaned = _PROGRAM_LENGTH_RE.sub("", cleaned).strip()
    return cleaned


def is_sub_major(department_name: str) -> bool:
    """A track inside a department rather than a department of its own."""
    if MAJOR_MARKER not in department_name:
        return False
    return not any(name in department_name for name in OPEN_MAJOR_NAMES)


@lru_cache(maxsize=1)
def load_curated_departments() -> tuple[DepartmentRecord, ...]:
    """Hand-curated records shipped in data/curated_departments.yaml."""
    table = load_data_table("curated_departments.yaml")
    records = tuple(
        DepartmentRecord.model_validate({**item, "is_curated": True})
        for item in table.get("departments", [])
    )
    logger.debug(f"Loaded {len(records)} curated department records")
    return records


def flatten_university(
    university: University,
    curated: Optional[list[DepartmentRecord]] = None,
) -> list[DepartmentRecord]:
    """
    Expand one university into department records.

    Args:
        university: Catalog entry
        curated: Curated records (default: the packaged table)

    Returns:
        Records in insertion order (curated first)
    """
    if GRADUATE_MARKER in university.name:
        return []

    if curated is None:
        curated = list(load_curated_departments())

    results = [
        record.model_copy(deep=True)
        for record in curated
        if record.university_name == university.name
    ]
    seen = {record.department_name for record in results}

    for college, department in university.iter_departments():
        if GRADUATE_MARKER in college or GRADUATE_MARKER in department:
            continue
        if is_sub_major(department):
            continue
        if department in seen:
            continue

        name = clean_department_name(department)
        if not name or name in seen:
            continue
        seen.add(department)
        seen.add(name)

        field = classify_field(
            department,
            college,
            university.tier,
            university.dept_categories.get(department),
        )

        results.append(
            DepartmentRecord(
                university_name=university.name,
                department_name=name,
                location=university.location,
                field=field,
                description=f"{university.name} {college} {name}",
                tuition_fee=DEFAULT_TUITION,
                employment_rate=DEFAULT_EMPLOYMENT,
                department_ranking=PLACEHOLDER,
            )
        )

    return results
