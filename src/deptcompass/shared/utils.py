"""
Utilities Module - Common helper functions.
==========================================

Provides utility functions for:
- Hashing (SHA256 for deterministic tie-breaks)
- File I/O (JSON, YAML reference tables)
- Directory management
- Text normalization
"""

import hashlib
import json
import re
import unicodedata
from pathlib import Path
from typing import Any

import yaml

from deptcompass.shared.logging import get_logger

logger = get_logger(__name__)

# Reference tables shipped with the package
DATA_DIR = Path(__file__).resolve().parent.parent / "data"


# ─────────────────────────────────────────────────────────────────────────────
# Hashing Functions
# ─────────────────────────────────────────────────────────────────────────────


def compute_hash(text: str, algorithm: str = "sha256") -> str:
    """
    Compute hash of text content.

    Args:
        text: Text to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Hexadecimal hash string
    """
    hasher = hashlib.new(algorithm)
    hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()


def stable_fraction(text: str) -> float:
    """
    Map a string to a reproducible number in [0, 1).

    Uses the first 32 bits of the SHA256 digest, so the value is the same
    across processes and Python versions (unlike the builtin ``hash``).

    Example:
        >>> 0.0 <= stable_fraction("서울대학교컴퓨터공학부") < 1.0
        True
    """
    return int(compute_hash(text)[:8], 16) / 0x100000000


# ─────────────────────────────────────────────────────────────────────────────
# Directory Management
# ─────────────────────────────────────────────────────────────────────────────


def ensure_parent_directory(file_path: Path) -> Path:
    """Ensure the parent directory of a file exists."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return file_path


# ─────────────────────────────────────────────────────────────────────────────
# JSON File I/O
# ─────────────────────────────────────────────────────────────────────────────


def load_json(file_path: Path) -> Any:
    """
    Load data from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file is not valid JSON
    """
    file_path = Path(file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    Save data to a JSON file.

    Args:
        file_path: Path to JSON file
        data: Data to save (must be JSON serializable)
        indent: Indentation level (default: 2)
    """
    file_path = Path(file_path)
    ensure_parent_directory(file_path)

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False, default=str)

    logger.debug(f"Saved JSON to {file_path}")


def load_yaml(file_path: Path) -> Any:
    """Load a YAML file; an empty file yields an empty dict."""
    with open(file_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def load_data_table(name: str) -> Any:
    """
    Load one of the packaged reference tables.

    Example:
        >>> load_data_table("prestige.yaml")["default_score"]
        50
    """
    return load_yaml(DATA_DIR / name)


# ─────────────────────────────────────────────────────────────────────────────
# Text Utilities
# ─────────────────────────────────────────────────────────────────────────────


def clean_whitespace(text: str) -> str:
    """
    Normalize unicode and collapse whitespace runs to single spaces.

    NFKC folds full-width brackets and ideographic spaces that show up in
    the source dataset into their ASCII forms.
    """
    text = unicodedata.normalize("NFKC", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def strip_code_fences(text: str) -> str:
    """Remove Markdown ``` fences an LLM may wrap around JSON output."""
    text = re.sub(r"```(?:json)?", "", text, flags=re.IGNORECASE)
    return text.strip()
