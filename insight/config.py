"""Load and validate configuration from YAML with env var substitution."""

from __future__ import annotations

import copy
import os
import re
from pathlib import Path
from typing import Any

import yaml

DEFAULT_STRUGGLE_KEYWORDS = [
    "performance",
    "speed",
    "reliability",
    "usability",
    "complexity",
    "cost",
    "pricing",
    "support",
    "documentation",
    "integration",
    "scalability",
    "security",
]

DEFAULT_STRATEGIC_BETS = [
    {"label": "Automation & Workflow", "keywords": ["automation", "automate", "workflow"]},
    {"label": "User Experience", "keywords": ["ux", "user experience", "interface", "design"]},
    {"label": "Compliance & Trust", "keywords": ["compliance", "security", "trust", "governance"]},
    {"label": "Integration & Connectivity", "keywords": ["integration", "api", "connect", "sync"]},
    {"label": "Pricing & Packaging", "keywords": ["pricing", "cost", "value", "packaging"]},
    {"label": "Distribution & Channels", "keywords": ["distribution", "channel", "partnership"]},
]

DEFAULTS: dict[str, Any] = {
    "compress": {
        "similarity_threshold": 0.6,
        "min_token_length": 3,
        "summary_chars": 160,
    },
    "coverage": {
        "max_depth": 64,
    },
    "assumptions": {
        "max_items": 15,
        "top_n": 3,
    },
    "readout": {
        "top_n": 3,
        "max_bullets": 5,
    },
    "frames": {
        "struggle_keywords": DEFAULT_STRUGGLE_KEYWORDS,
        "strategic_bets": DEFAULT_STRATEGIC_BETS,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")
        match = pattern.search(value)
        if match:
            env_key = match.group(1)
            env_val = os.environ.get(env_key, "")
            # A value that is exactly one reference resolves to the raw env value
            if match.group(0) == value:
                return env_val
            return pattern.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into a copy of base; nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path | None = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file, resolve environment variables, fill defaults.

    ``path=None`` skips the file and returns the built-in defaults.
    """
    if path is None:
        return copy.deepcopy(DEFAULTS)

    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _deep_merge(DEFAULTS, _resolve_env_vars(raw))


def _section(config: dict | None, name: str) -> dict:
    section = (config or {}).get(name)
    return section if isinstance(section, dict) else {}


def get_similarity_threshold(config: dict | None) -> float:
    """Jaccard threshold at or above which two opportunities merge."""
    return float(_section(config, "compress").get("similarity_threshold", 0.6))


def get_min_token_length(config: dict | None) -> int:
    return int(_section(config, "compress").get("min_token_length", 3))


def get_summary_chars(config: dict | None) -> int:
    return int(_section(config, "compress").get("summary_chars", 160))


def get_max_walk_depth(config: dict | None) -> int:
    """Nesting depth bound for the citation walk."""
    return int(_section(config, "coverage").get("max_depth", 64))


def get_max_assumptions(config: dict | None) -> int:
    return int(_section(config, "assumptions").get("max_items", 15))


def get_assumption_top_n(config: dict | None) -> int:
    return int(_section(config, "assumptions").get("top_n", 3))


def get_readout_top_n(config: dict | None) -> int:
    return int(_section(config, "readout").get("top_n", 3))


def get_readout_max_bullets(config: dict | None) -> int:
    return int(_section(config, "readout").get("max_bullets", 5))


def get_struggle_keywords(config: dict | None) -> list[str]:
    """Keyword vocabulary for clustering customer struggles, in match order."""
    keywords = _section(config, "frames").get("struggle_keywords")
    if not keywords:
        return list(DEFAULT_STRUGGLE_KEYWORDS)
    return [str(k).lower() for k in keywords]


def get_strategic_bet_families(config: dict | None) -> list[dict]:
    """Return strategic bet families as ``[{"label", "keywords"}]``, in match order."""
    families = _section(config, "frames").get("strategic_bets")
    if not families:
        families = DEFAULT_STRATEGIC_BETS

    result = []
    for family in families:
        if not isinstance(family, dict) or not family.get("label"):
            continue
        result.append({
            "label": str(family["label"]),
            "keywords": [str(k).lower() for k in family.get("keywords") or []],
        })
    return result


def get_log_settings(config: dict | None) -> dict:
    """Log level name and optional rotating log file path."""
    cfg = _section(config, "logging")
    return {
        "level": str(cfg.get("level") or "INFO").upper(),
        "file": cfg.get("file") or None,
    }
