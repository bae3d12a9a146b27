"""
DeptCompass - Korean University Department Search
=================================================

Builds a catalog of universities and undergraduate departments from the
national admissions dataset and supports:

- free-text department search with regulated-profession disambiguation
- deterministic ranking by prestige, program and difficulty
- detail views with a three-year admission trend, optionally refined by
  Gemini
"""

__version__ = "0.1.0"
__author__ = "DeptCompass Team"
__license__ = "MIT"

# Public API - lazy imports to avoid circular dependencies and speed up startup
__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Main modules (imported on demand)
    "shared",
    "ingestion",
    "search",
    "enrichment",
    "cli",
]
