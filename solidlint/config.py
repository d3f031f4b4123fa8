"""Configuration management for solidlint.

Loads environment variables (optionally from a .env file) and the JSON
rules file that selects and tunes detectors.
"""
import json
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from solidlint.analyzer.walker import DEFAULT_MAX_DEPTH
from solidlint.rules.catalog import RuleSetting, default_settings, parse_rule_settings

__version__ = "1.0.0"

DEFAULT_RULES_FILE = ".solidlint.json"


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_path: .env file to load (defaults to ./.env); variables
                already set in the environment win
        """
        load_dotenv(env_path if env_path is not None else Path.cwd() / ".env")

    @property
    def rules_file(self) -> str:
        """Path of the JSON rules file.

        Returns:
            SOLIDLINT_CONFIG, or .solidlint.json
        """
        return os.getenv("SOLIDLINT_CONFIG", DEFAULT_RULES_FILE)

    @property
    def log_level(self) -> str:
        return os.getenv("SOLIDLINT_LOG_LEVEL", "WARNING").upper()

    @property
    def max_depth(self) -> int:
        """Traversal depth bound.

        Raises:
            ValueError: If SOLIDLINT_MAX_DEPTH is not a positive integer
        """
        raw = os.getenv("SOLIDLINT_MAX_DEPTH")
        if raw is None:
            return DEFAULT_MAX_DEPTH
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"SOLIDLINT_MAX_DEPTH must be an integer, got {raw!r}")
        if value < 1:
            raise ValueError(f"SOLIDLINT_MAX_DEPTH must be positive, got {value}")
        return value


def load_rule_settings(path: Optional[str | Path] = None,
                       required: bool = False) -> Dict[str, RuleSetting]:
    """Read and validate a rules file.

    Args:
        path: Rules file; a missing file means "all defaults" unless required
        required: Raise instead of falling back when the file is missing

    Returns:
        Settings for every known rule

    Raises:
        FileNotFoundError: If required and the file does not exist
        ValueError: If the file is not valid JSON or fails validation
    """
    if path is None:
        return default_settings()

    path = Path(path)
    if not path.is_file():
        if required:
            raise FileNotFoundError(f"Rules file not found: {path}")
        return default_settings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object, got {type(data).__name__}")
    unknown = set(data) - {'rules'}
    if unknown:
        raise ValueError(f"{path}: unknown top-level keys: {', '.join(sorted(unknown))}")

    rules = data.get('rules', {})
    if not isinstance(rules, dict):
        raise ValueError(f"{path}: 'rules' must be an object")
    return parse_rule_settings(rules)


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
