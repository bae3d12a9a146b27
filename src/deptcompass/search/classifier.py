"""
Classifier Module - Assign a coarse academic field to a department.
===================================================================

Layered heuristics, each layer an ordered list of keyword rules evaluated
top to bottom with early exit:

1. fine category from the dataset, used verbatim
2. college/category-name rules
3. education-focused universities -> 교육
4. regulated-profession overrides by department name (always applied)
5. department-name rules, only while the field is still 기타

The rule tables are module-level data so they can be reviewed and tested
on their own.
"""

from dataclasses import dataclass
from typing import Optional

from deptcompass.search.professions import profession_field_tag
from deptcompass.shared.schemas import FieldTag, Tier

UNCATEGORIZED = FieldTag.OTHER.value


@dataclass(frozen=True)
class KeywordRule:
    """Assign ``tag`` when any keyword occurs in the inspected text."""

    tag: FieldTag
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


COLLEGE_RULES: list[KeywordRule] = [
    KeywordRule(FieldTag.ENGINEERING, ("공과", "공학", "소프트웨어", "IT")),
    KeywordRule(FieldTag.HUMANITIES, ("인문",)),
    KeywordRule(FieldTag.SOCIAL, ("사회", "경영", "경제")),
    KeywordRule(FieldTag.NATURAL, ("자연", "과학")),
    KeywordRule(FieldTag.MEDICAL, ("의과", "의약", "간호", "약학")),
    KeywordRule(FieldTag.ARTS, ("예술", "체육", "미술", "예체능")),
]

DEPARTMENT_RULES: list[KeywordRule] = [
    KeywordRule(
        FieldTag.ALLIED_HEALTH,
        ("물리치료", "작업치료", "임상병리", "방사선", "치위생", "응급구조"),
    ),
    KeywordRule(
        FieldTag.ENGINEERING,
        ("컴퓨터", "소프트웨어", "전기", "전자", "기계", "건축", "토목"),
    ),
    KeywordRule(FieldTag.SOCIAL, ("경영", "경제", "행정")),
    KeywordRule(FieldTag.ARTS, ("디자인", "체육", "음악", "미술")),
]


def first_match(rules: list[KeywordRule], text: str) -> Optional[FieldTag]:
    """Return the tag of the first rule matching ``text``."""
    for rule in rules:
        if rule.matches(text):
            return rule.tag
    return None


def classify_field(
    department_name: str,
    college_name: str = "",
    tier: Optional[Tier] = None,
    fine_category: Optional[str] = None,
) -> str:
    """
    Classify a department into a field tag.

    Args:
        department_name: Department name as in the catalog
        college_name: Owning college/category label
        tier: Tier of the owning university
        fine_category: Dataset category for this department, if any

    Returns:
        Field tag string; never empty (defaults to 기타)

    Example:
        >>> classify_field("치의예과", "의약계열")
        '치의예'
        >>> classify_field("컴퓨터공학과", "공과대학")
        '공학'
    """
    field = UNCATEGORIZED

    if fine_category and fine_category.strip():
        field = fine_category.strip()

    if field == UNCATEGORIZED:
        tag = first_match(COLLEGE_RULES, college_name or "")
        if tag is not None:
            field = tag.value
        if tier == Tier.EDU:
            field = FieldTag.EDUCATION.value

    profession_tag = profession_field_tag(department_name)
    if profession_tag is not None:
        field = profession_tag.value

    if field == UNCATEGORIZED:
        tag = first_match(DEPARTMENT_RULES, department_name)
        if tag is not None:
            field = tag.value

    return field
