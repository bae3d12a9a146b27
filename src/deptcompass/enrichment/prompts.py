"""
Prompts Module - Enrichment prompt templates.
=============================================

Provides the prompt for the external department analysis call:
- Local recruitment figures as context (may be missing)
- Prior-year admission cuts per track
- A two-line recruitment summary in a fixed format
- A short, department-specific description
- Strict JSON output
"""

from typing import Optional

from deptcompass.shared.config import get_settings
from deptcompass.shared.schemas import RecruitmentStats

UNKNOWN = "Unknown"


# ─────────────────────────────────────────────────────────────────────────────
# System Prompt
# ─────────────────────────────────────────────────────────────────────────────


SYSTEM_PROMPT = """Act as a Korean university admissions expert.

RULES:

1. RESEARCH/ESTIMATE: If the local context is zero or unknown, use valid recent data (previous-year results or current-year plans) from official admissions sources such as the University Anywhere (Adiga) portal. Do NOT return 0 or "Unknown".

2. DEPARTMENT ANALYSIS: Summarize the department's own introduction text (curriculum, educational goals) from the university's official homepage into a single sentence under {max_description_chars} characters. Avoid generic descriptions.

3. OUTPUT: Respond with a single JSON object and nothing else."""


OUTPUT_FORMAT = """OUTPUT JSON STRICTLY:
{{
  "admissionPrevYear": {{
    "susiGyogwa": "e.g. 1.54 (70% cut)",
    "susiJonghap": "e.g. 2.11 (50% cut)",
    "jeongsi": "e.g. 94.2 (Avg)"
  }},
  "summary": "Exactly 2 lines.\\nFormat:\\n{year}(예상/확정): 모집 A명 / 지원 B명 / 경쟁률 C:1\\n{prev_year}(결과): 모집 X명 / 지원 Y명 / 경쟁률 Z:1",
  "description": "Under {max_description_chars} characters specific summary of the department introduction."
}}"""


# ─────────────────────────────────────────────────────────────────────────────
# Prompt Builder
# ─────────────────────────────────────────────────────────────────────────────


def _format_figure(value: Optional[float]) -> str:
    if not value:
        return UNKNOWN
    return f"{value:g}"


class PromptBuilder:
    """
    Builds the enrichment prompt for one department.

    Example:
        >>> builder = PromptBuilder(target_year=2025)
        >>> system, user = builder.build_prompt("서울대학교", "컴퓨터공학부", stats)
    """

    def __init__(self, target_year: Optional[int] = None, max_description_chars: int = 150):
        self.target_year = (
            target_year
            if target_year is not None
            else get_settings().get_effective_target_year()
        )
        self.max_description_chars = max_description_chars

    def build_context(self, stats: Optional[RecruitmentStats]) -> str:
        """Local recruitment figures block."""
        recruit = stats.recruit if stats else None
        applicants = stats.applicants if stats else None
        rate = stats.rate if stats else None
        return (
            "Context (Local Data - might be empty):\n"
            f"- {self.target_year} Recruit: {_format_figure(recruit)}\n"
            f"- {self.target_year} Applicants: {_format_figure(applicants)}\n"
            f"- {self.target_year} Rate: {_format_figure(rate)} : 1"
        )

    def build_prompt(
        self,
        university_name: str,
        department_name: str,
        stats: Optional[RecruitmentStats] = None,
    ) -> tuple[str, str]:
        """
        Build (system prompt, user prompt).

        Args:
            university_name: University to research
            department_name: Department to research
            stats: Local recruitment stats, if the catalog has them

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        system_prompt = SYSTEM_PROMPT.format(max_description_chars=self.max_description_chars)

        user_prompt = "\n\n".join(
            [
                f'Research the department "{department_name}" at "{university_name}".',
                self.build_context(stats),
                OUTPUT_FORMAT.format(
                    year=self.target_year,
                    prev_year=self.target_year - 1,
                    max_description_chars=self.max_description_chars,
                ),
            ]
        )
        return system_prompt, user_prompt


def build_enrichment_prompt(
    university_name: str,
    department_name: str,
    stats: Optional[RecruitmentStats] = None,
) -> str:
    """Convenience function returning the combined single-string prompt."""
    system_prompt, user_prompt = PromptBuilder().build_prompt(
        university_name, department_name, stats
    )
    return f"{system_prompt}\n\n{user_prompt}"
