"""
Tests Package - Unit and integration tests for DeptCompass.
===========================================================

Test modules:
- test_ingestion: CSV reader, row filters, catalog build and persistence
- test_classifier: Profession detection and field classification
- test_flattener: Department name cleaning and flattening
- test_estimator: Heuristic admission estimates
- test_ranking: Prestige lookup and composite ranking score
- test_search: Query matching and the search service
- test_enrichment: Detail enricher, provider parsing, prompts, cache
- test_cli: Typer commands
- test_config: Settings and shared helpers

Run tests with:
    pytest tests/
    pytest tests/ -v --cov=src/deptcompass
"""
