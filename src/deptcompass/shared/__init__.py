"""
Shared Module - Common utilities, configuration, schemas, and logging.
======================================================================

This module provides foundational components used across all other modules:

- config: Configuration loading and management
- logging: Structured logging setup
- schemas: Pydantic data models
- utils: Utility functions (hashing, file I/O, text normalization)
"""

from deptcompass.shared.config import get_settings, reload_settings, Settings
from deptcompass.shared.logging import get_logger, setup_logging
from deptcompass.shared.schemas import (
    PLACEHOLDER,
    AdmissionPatch,
    AdmissionYearEntry,
    Catalog,
    DepartmentRecord,
    EnrichmentPayload,
    FieldTag,
    RecruitmentStats,
    SearchResponse,
    Tier,
    University,
)
from deptcompass.shared.utils import (
    clean_whitespace,
    compute_hash,
    load_json,
    save_json,
    stable_fraction,
)

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    "Settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Schemas
    "PLACEHOLDER",
    "AdmissionPatch",
    "AdmissionYearEntry",
    "Catalog",
    "DepartmentRecord",
    "EnrichmentPayload",
    "FieldTag",
    "RecruitmentStats",
    "SearchResponse",
    "Tier",
    "University",
    # Utils
    "clean_whitespace",
    "compute_hash",
    "load_json",
    "save_json",
    "stable_fraction",
]
