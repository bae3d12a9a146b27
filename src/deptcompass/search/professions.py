"""
Professions Module - Regulated-profession detection.
====================================================

Medicine, dentistry, Korean (traditional) medicine, veterinary medicine,
pharmacy and nursing are separately licensed programs. Naive substring
search conflates them ("의학과" is inside "한의학과", "치의학과" and
"수의학과"; "약" is inside "제약공학"), so every stage that needs to tell
them apart goes through the two predicates below:

- department_profession(name): which profession a department trains for
- detect_query_mode(query): which single profession a query asks for

The query filter and the ranking penalty both use ``matches_mode``.
"""

from enum import Enum
from typing import Optional

from deptcompass.shared.schemas import FieldTag


class Profession(str, Enum):
    """Regulated professions plus the pharmaceutical-engineering query mode."""

    MEDICINE = "medicine"
    DENTISTRY = "dentistry"
    KOREAN_MEDICINE = "korean_medicine"
    VETERINARY = "veterinary"
    PHARMACY = "pharmacy"
    NURSING = "nursing"
    PHARMA_ENGINEERING = "pharma_engineering"


PHARMA_ENGINEERING_KEYWORD = "제약"

# Department-name keywords, checked in this priority order (first match wins)
DEPARTMENT_KEYWORDS: list[tuple[Profession, tuple[str, ...]]] = [
    (Profession.KOREAN_MEDICINE, ("한의",)),
    (Profession.VETERINARY, ("수의",)),
    (Profession.DENTISTRY, ("치의",)),
    (Profession.PHARMACY, ("약학",)),
    (Profession.NURSING, ("간호",)),
    (Profession.MEDICINE, ("의예", "의학과", "의학부")),
]

# Query keywords per mode (matched against the whitespace-stripped query)
QUERY_KEYWORDS: dict[Profession, tuple[str, ...]] = {
    Profession.MEDICINE: ("의대", "의예", "의학과", "의학부"),
    Profession.KOREAN_MEDICINE: ("한의",),
    Profession.VETERINARY: ("수의",),
    Profession.DENTISTRY: ("치의", "치대"),
    Profession.PHARMACY: ("약대", "약학"),
    Profession.PHARMA_ENGINEERING: (PHARMA_ENGINEERING_KEYWORD,),
}

PROFESSION_FIELD_TAGS: dict[Profession, FieldTag] = {
    Profession.MEDICINE: FieldTag.MEDICINE,
    Profession.DENTISTRY: FieldTag.DENTISTRY,
    Profession.KOREAN_MEDICINE: FieldTag.KOREAN_MEDICINE,
    Profession.VETERINARY: FieldTag.VETERINARY,
    Profession.PHARMACY: FieldTag.PHARMACY,
    Profession.NURSING: FieldTag.NURSING,
}


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def department_profession(department_name: str) -> Optional[Profession]:
    """
    Classify a department name into a regulated profession.

    Pharmacy excludes pharmaceutical engineering ("제약공학과", "제약학과").

    Example:
        >>> department_profession("한의예과")
        <Profession.KOREAN_MEDICINE: 'korean_medicine'>
        >>> department_profession("컴퓨터공학과") is None
        True
    """
    for profession, keywords in DEPARTMENT_KEYWORDS:
        if not _contains_any(department_name, keywords):
            continue
        if profession is Profession.PHARMACY and PHARMA_ENGINEERING_KEYWORD in department_name:
            continue
        return profession
    return None


def detect_query_mode(query: str) -> Optional[Profession]:
    """
    Detect which single regulated-profession program a query asks for.

    General medicine requires a medicine keyword and none of the other
    professions' keywords ("한의대" contains "의대" but is Korean medicine).
    Pharmacy requires the absence of the pharmaceutical-engineering keyword.
    A query naming two different professions has no mode.

    Example:
        >>> detect_query_mode("의예과")
        <Profession.MEDICINE: 'medicine'>
        >>> detect_query_mode("치대")
        <Profession.DENTISTRY: 'dentistry'>
        >>> detect_query_mode("컴퓨터") is None
        True
    """
    q = "".join(query.split())
    if not q:
        return None

    specific: set[Profession] = set()
    if PHARMA_ENGINEERING_KEYWORD in q:
        specific.add(Profession.PHARMA_ENGINEERING)
    elif _contains_any(q, QUERY_KEYWORDS[Profession.PHARMACY]):
        specific.add(Profession.PHARMACY)
    for profession in (Profession.KOREAN_MEDICINE, Profession.VETERINARY, Profession.DENTISTRY):
        if _contains_any(q, QUERY_KEYWORDS[profession]):
            specific.add(profession)

    if len(specific) == 1:
        return specific.pop()
    if specific:
        return None

    if _contains_any(q, QUERY_KEYWORDS[Profession.MEDICINE]):
        return Profession.MEDICINE
    return None


def matches_mode(department_name: str, mode: Profession) -> bool:
    """Whether a department belongs to the profession a query mode asks for."""
    if mode is Profession.PHARMA_ENGINEERING:
        return PHARMA_ENGINEERING_KEYWORD in department_name
    return department_profession(department_name) is mode


def profession_field_tag(department_name: str) -> Optional[FieldTag]:
    """Dedicated field tag for a regulated-profession department, if any."""
    profession = department_profession(department_name)
    if profession is None:
        return None
    return PROFESSION_FIELD_TAGS.get(profession)
