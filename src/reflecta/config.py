"""Configuration management for reflecta."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG = {
    "embedding_model": "sentence-transformers/all-MiniLM-L6-v2",
    "sentiment_model": "distilbert-base-uncased-finetuned-sst-2-english",
    "generation": {
        "backend": "claude",  # claude | transformers | none
        "claude_model": "claude-sonnet-4-20250514",
        "local_model": "MBZUAI/LaMini-Flan-T5-77M",
        "fallback_model": "google/flan-t5-base",
    },
    "snapshot_path": "~/.reflecta/themes.json",
    "summary": {
        "max_chars": 220,
        "allow_two_sentences": True,
        "mmr_lambda": 0.75,
        "position_bonus": 0.03,
    },
    "themes": {
        "join_threshold": 0.78,
        "merge_threshold": 0.87,
        "ema_alpha": 0.2,
        "max_matches": 3,
        "softmax_beta": 10.0,
        "tag_limit": 4,
        "tag_floor": 0.25,
        "tag_join_threshold": 0.86,
        "tag_bonus": 0.25,
        "new_tag_weight": 0.3,
        "evidence_sentences": 3,
        "default_label": "Theme",
        "augment": True,
    },
    "sentiment": {
        "mode": "full",
        "temperature": 3.0,
        "gamma": 1.15,
        "neutral_min": 0.05,
        "min_tokens": 3,
        "anchor_temperature": 0.55,
        "low_margin": 0.03,
        "blend_anchors": False,
    },
}

_ENV_OVERRIDES = {
    "REFLECTA_EMBEDDING_MODEL": ("embedding_model",),
    "REFLECTA_SENTIMENT_MODEL": ("sentiment_model",),
    "REFLECTA_GENERATION_BACKEND": ("generation", "backend"),
}


def _find_config_file() -> Path | None:
    """Look for config.yaml in standard locations."""
    candidates = [
        Path.cwd() / "config" / "config.yaml",
        Path.cwd() / "config.yaml",
        Path.home() / ".reflecta" / "config.yaml",
    ]
    for p in candidates:
        if p.exists():
            return p
    return None


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration, merging defaults with file and env vars."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else _find_config_file()
    if path and path.exists():
        with open(path) as f:
            file_cfg = yaml.safe_load(f) or {}
        _deep_merge(cfg, file_cfg)

    # Env overrides
    if api_key := os.environ.get("ANTHROPIC_API_KEY"):
        cfg["claude_api_key"] = api_key
    for env_name, keys in _ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            target = cfg
            for key in keys[:-1]:
                target = target.setdefault(key, {})
            target[keys[-1]] = value

    cfg["snapshot_path"] = str(Path(cfg["snapshot_path"]).expanduser().resolve())

    return cfg


def _deep_merge(base: dict, override: dict) -> None:
    """Merge override into base in-place."""
    for k, v in override.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
