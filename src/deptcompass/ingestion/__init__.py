"""
Ingestion Module - Read the admissions dataset and build the catalog.
=====================================================================

- reader: CSV streaming and fixed-position row parsing
- catalog: grouping, tier assignment and catalog persistence

Pipeline flow:
    CSV → SourceReader → SourceRow → CatalogBuilder → Catalog (JSON artifact)
"""

from deptcompass.ingestion.reader import SourceReader, SourceRow, parse_number, parse_row
from deptcompass.ingestion.catalog import (
    BuildReport,
    CatalogBuilder,
    CatalogNotFoundError,
    assign_tier,
    build_catalog,
    get_catalog,
    is_degree_granting,
    load_catalog,
    save_catalog,
)

__all__ = [
    # Reader
    "SourceReader",
    "SourceRow",
    "parse_number",
    "parse_row",
    # Catalog
    "BuildReport",
    "CatalogBuilder",
    "CatalogNotFoundError",
    "assign_tier",
    "build_catalog",
    "get_catalog",
    "is_degree_granting",
    "load_catalog",
    "save_catalog",
]
