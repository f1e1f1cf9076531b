"""
Seed decay configurations.

Loads the default decay intervals from Backend/config/decay_configs.yml.
These are used when the caller does not supply the admin-managed configs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from app.core.config import get_decay_presets_path
from app.core.logging import get_logger
from app.models.profile import DecayConfig

logger = get_logger()

# Cached presets per resolved path
_PRESETS: Dict[Path, List[DecayConfig]] = {}


def _load_presets_file(path: Path) -> Dict[str, Any]:
    """Load decay_configs.yml file."""
    if not path.exists():
        raise FileNotFoundError(f"Decay presets config not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict) or "decay_configs" not in data:
        raise ValueError("decay_configs.yml is invalid: missing 'decay_configs' root key")

    return data.get("decay_configs") or {}


def _parse_presets(raw: Dict[str, Any]) -> List[DecayConfig]:
    presets: List[DecayConfig] = []
    for key, cfg in raw.items():
        if not isinstance(cfg, dict):
            logger.warning("decay_preset_skipped_not_a_mapping", config_key=key)
            continue
        fields = {k: v for k, v in cfg.items() if k != "config_key"}
        try:
            presets.append(DecayConfig(config_key=str(key), **fields))
        except (ValidationError, TypeError) as e:
            logger.warning("decay_preset_invalid", config_key=key, error=str(e))
    return presets


def get_decay_presets(path: Optional[Path] = None) -> List[DecayConfig]:
    """
    Get the seed decay configs, ordered by interval (never-decaying last).
    """
    resolved = Path(path) if path is not None else get_decay_presets_path()
    cached = _PRESETS.get(resolved)
    if cached is not None:
        return list(cached)

    presets = _parse_presets(_load_presets_file(resolved))
    presets.sort(key=lambda c: (c.interval_days is None, c.interval_days or 0, c.config_key))
    _PRESETS[resolved] = presets
    logger.debug("decay_presets_loaded", path=str(resolved), count=len(presets))
    return list(presets)


def clear_cache() -> None:
    """Clear cached presets (useful for testing or hot-reload scenarios)."""
    _PRESETS.clear()
