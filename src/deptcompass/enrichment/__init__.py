"""
Enrichment Module - Detail records and external department analysis.
=====================================================================

- enricher: local detail record + merge of external results
- provider: Gemini-backed enrichment provider
- prompts: enrichment prompt templates
- cache: process-scoped memo of enrichment results

Detail Flow:
    (university, department) → local defaults → provider (timeout) → merge
"""

from deptcompass.enrichment.cache import EnrichmentCache, get_enrichment_cache
from deptcompass.enrichment.prompts import PromptBuilder, build_enrichment_prompt
from deptcompass.enrichment.provider import (
    EnrichmentProvider,
    GeminiEnrichmentProvider,
    get_provider,
    parse_payload,
)
from deptcompass.enrichment.enricher import (
    DetailEnricher,
    admission_trend,
    apply_detail,
    approximate_specs,
    fallback_description,
    get_department_details,
    merge_enrichment,
    not_found_record,
)

__all__ = [
    # Cache
    "EnrichmentCache",
    "get_enrichment_cache",
    # Prompts
    "PromptBuilder",
    "build_enrichment_prompt",
    # Provider
    "EnrichmentProvider",
    "GeminiEnrichmentProvider",
    "get_provider",
    "parse_payload",
    # Enricher
    "DetailEnricher",
    "admission_trend",
    "apply_detail",
    "approximate_specs",
    "fallback_description",
    "get_department_details",
    "merge_enrichment",
    "not_found_record",
]
