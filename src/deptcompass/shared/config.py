"""
Configuration Module - Load and validate application settings.
==============================================================

Loads configuration from:
1. config/settings.yaml (defaults)
2. Environment variables from .env file
3. Environment variables from system

Environment variables override YAML defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early
load_dotenv()


def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    # Fallback to current working directory
    return Path.cwd()


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Nested Configuration Models
# ─────────────────────────────────────────────────────────────────────────────


class ColumnsConfig(BaseModel):
    """Zero-based column positions in the source admissions CSV."""

    year: int = 0
    school_type: int = 1
    university: int = 4
    location: int = 7
    institution_type: int = 9
    program_type: int = 16
    category_broad: int = 17
    category_fine: int = 18
    department: int = 21
    seats: int = 23
    applicants: int = 24


class CatalogConfig(BaseModel):
    """Catalog build settings."""

    target_year: int = 2025
    filter_year: bool = True
    header_rows: int = 15
    encoding: str = "utf-8-sig"
    min_columns: int = 22
    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)


class SearchConfig(BaseModel):
    """Search and ranking settings."""

    max_results: int = 100
    suggestion_university_count: int = 10
    suggestion_keywords: list[str] = Field(default_factory=lambda: ["컴퓨터", "경영"])
    min_global_query_length: int = 2


class EnrichmentConfig(BaseModel):
    """External (Gemini) enrichment settings."""

    enabled: bool = True
    model_name: str = "gemini-1.5-flash"
    temperature: float = 0.2
    max_output_tokens: int = 1024
    timeout_seconds: float = 8.0
    max_retries: int = 2
    min_description_length: int = 5


class PathsConfig(BaseModel):
    """Data paths configuration."""

    data_dir: str = "data"
    csv_file: str = "data/raw/school_department_admissions.csv"
    catalog_file: str = "data/processed/catalog.json"

    def resolve(self, base_path: Path) -> "ResolvedPaths":
        """Resolve paths relative to a base path."""
        return ResolvedPaths(
            data_dir=base_path / self.data_dir,
            csv_file=base_path / self.csv_file,
            catalog_file=base_path / self.catalog_file,
        )


class ResolvedPaths(BaseModel):
    """Resolved absolute paths."""

    data_dir: Path
    csv_file: Path
    catalog_file: Path

    model_config = {"arbitrary_types_allowed": True}


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    rich_console: bool = True
    file: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Class
# ─────────────────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """
    Main application settings.

    Loads from:
    1. config/settings.yaml (defaults)
    2. Environment variables

    Environment variables override YAML settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys (from environment only)
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")

    # Top-level environment overrides
    gemini_model: Optional[str] = Field(default=None, validation_alias="GEMINI_MODEL")
    target_year: Optional[int] = Field(default=None, validation_alias="TARGET_YEAR")
    enrichment_enabled: Optional[bool] = Field(
        default=None, validation_alias="ENRICHMENT_ENABLED"
    )
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # Nested configurations (from YAML)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Computed properties
    _project_root: Path = PROJECT_ROOT
    _resolved_paths: Optional[ResolvedPaths] = None

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v: Any) -> str:
        """Allow empty API key; enrichment is skipped without one."""
        if v is None:
            return ""
        return str(v)

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return self._project_root

    @property
    def resolved_paths(self) -> ResolvedPaths:
        """Get resolved absolute paths."""
        if self._resolved_paths is None:
            self._resolved_paths = self.paths.resolve(self._project_root)
        return self._resolved_paths

    def get_effective_target_year(self) -> int:
        """Get the effective target (reference) year (env override or config)."""
        if self.target_year is not None:
            return self.target_year
        return self.catalog.target_year

    def get_effective_model(self) -> str:
        """Get the effective Gemini model name (env override or config)."""
        if self.gemini_model:
            return self.gemini_model
        return self.enrichment.model_name

    def is_enrichment_enabled(self) -> bool:
        """Whether external enrichment should be attempted at all."""
        enabled = (
            self.enrichment_enabled
            if self.enrichment_enabled is not None
            else self.enrichment.enabled
        )
        return enabled and bool(self.gemini_api_key)

    def get_effective_log_level(self) -> str:
        """Get the effective log level (env override or config)."""
        if self.log_level:
            return self.log_level.upper()
        return self.logging.level.upper()


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def _create_settings(config_path: Optional[Path] = None) -> Settings:
    """Create settings instance by merging YAML defaults with environment."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    yaml_config = _load_yaml_config(config_path)

    return Settings(**yaml_config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the singleton settings instance.

    Returns:
        Settings instance with merged configuration

    Example:
        >>> settings = get_settings()
        >>> print(settings.search.max_results)
        100
    """
    return _create_settings()


def reload_settings() -> Settings:
    """
    Force reload of settings (clears cache).

    Returns:
        Fresh Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
