# src/refmatch_lib/config.py
"""Configuration loader with caching and basic validation."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .matching import IN_LIBRARY_THRESHOLD, MATCH_THRESHOLD
from .refs import INCOMPLETE_THRESHOLD

ROOT = Path(__file__).resolve().parents[2]
CONFIG_PATH = ROOT / "config" / "config.yaml"

# Required config structure for minimal operation
REQUIRED_KEYS: Dict[str, List[str]] = {
    "paths": ["outputs_dir", "pdf_dir", "library_path"],
    "matching": ["threshold", "in_library_threshold"],
}


class ConfigError(ValueError):
    """Raised when required configuration values are missing or invalid."""


@dataclass(frozen=True)
class MatchSettings:
    threshold: float = MATCH_THRESHOLD
    in_library_threshold: float = IN_LIBRARY_THRESHOLD
    incomplete_threshold: int = INCOMPLETE_THRESHOLD


def _read_config(path: Path) -> Dict:
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    cfg = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    for section, keys in REQUIRED_KEYS.items():
        if section not in cfg:
            raise ConfigError(f"Missing required section '{section}' in {path}")
        missing = [k for k in keys if k not in (cfg.get(section) or {})]
        if missing:
            raise ConfigError(
                f"Missing required key(s) {missing} in section '{section}' of {path}"
            )
    return cfg


@lru_cache(maxsize=1)
def load_config() -> Dict:
    """Load and cache config/config.yaml with basic validation."""
    return _read_config(CONFIG_PATH)


def load_config_from(path: str | Path) -> Dict:
    """Uncached variant for alternate config files (tests, one-off runs)."""
    return _read_config(Path(path))


def matching_settings(cfg: Optional[Dict] = None) -> MatchSettings:
    """Build :class:`MatchSettings` from the ``matching``/``extraction`` sections."""
    if cfg is None:
        cfg = load_config()
    matching = cfg.get("matching") or {}
    extraction = cfg.get("extraction") or {}
    settings = MatchSettings(
        threshold=float(matching.get("threshold", MATCH_THRESHOLD)),
        in_library_threshold=float(
            matching.get("in_library_threshold", IN_LIBRARY_THRESHOLD)
        ),
        incomplete_threshold=int(
            extraction.get("incomplete_threshold", INCOMPLETE_THRESHOLD)
        ),
    )
    for name in ("threshold", "in_library_threshold"):
        value = getattr(settings, name)
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"matching.{name} must be within [0, 1], got {value}")
    return settings
