"""YAML/dict config loader for frame-extractor.

Supports loading from a YAML file or a plain dict (for embedding in a
larger service config).

Example YAML:

    frame_extractor:
      search:
        delimiter: SOH/ETX        # preset name, or a custom pair:
        # custom_start: "0x01"    # always hex, quoted or not
        # custom_end: 17          # 0x17 (ETB)
        min_length: 1
        max_length: 10000
        ascii_only: false
      methods:
        - signalingFlexible     # hybridMode = all five
      max_workers: null
      filter:
        ban_enabled: true
        repetition_enabled: true
        threshold: 0.6
        ban_list:
          - spam
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

import yaml

from .delimiters import custom_pair, lookup_delimiter
from .extractor import DEFAULT_METHODS
from .filter_engine import DEFAULT_THRESHOLD
from .pipeline import ExtractionPipeline
from .types import SearchConfig

logger = logging.getLogger(__name__)


def _number(kind: type, value: Any, default: Any) -> Any:
    """``kind(value)``, or ``default`` for a missing/null value."""
    if value is None:
        return default
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ValueError(f"expected a number, got {value!r}") from None


def _hex_text(value: Any) -> str | None:
    # YAML `17` and JSON 17 arrive as ints but still mean hex 0x17
    return None if value is None else str(value)


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "frame_extractor" key or flat
    if "frame_extractor" in data:
        data = data["frame_extractor"] or {}

    search = data.get("search") or {}
    filt = data.get("filter") or {}
    methods = data.get("methods")
    if isinstance(methods, str):
        methods = [methods]

    return {
        "delimiter": search.get("delimiter"),
        "custom_start": _hex_text(search.get("custom_start")),
        "custom_end": _hex_text(search.get("custom_end")),
        "min_length": _number(int, search.get("min_length"), 1),
        "max_length": _number(int, search.get("max_length"), 10000),
        "ascii_only": bool(search.get("ascii_only", False)),
        "methods": list(methods) if methods else [m.value for m in DEFAULT_METHODS],
        "max_workers": data.get("max_workers"),
        "ban_enabled": filt.get("ban_enabled", True),
        "repetition_enabled": filt.get("repetition_enabled", True),
        "threshold": _number(float, filt.get("threshold"), DEFAULT_THRESHOLD),
        "ban_list": list(filt.get("ban_list") or []),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    path = Path(path).expanduser()
    with open(path) as f:
        cfg = load_config(yaml.safe_load(f))
    logger.debug("loaded config from %s", path)
    return cfg


def build_search_config(cfg: dict[str, Any]) -> SearchConfig:
    """SearchConfig from a normalized config.

    A preset name wins over a custom pair; with neither, the SOH/STX →
    ETX/EOT defaults apply.
    """
    bounds = {
        "min_length": cfg["min_length"],
        "max_length": cfg["max_length"],
        "ascii_only": cfg["ascii_only"],
    }
    if cfg.get("delimiter"):
        return SearchConfig.from_delimiter(lookup_delimiter(cfg["delimiter"]), **bounds)
    if cfg.get("custom_start") is not None and cfg.get("custom_end") is not None:
        pair = custom_pair(cfg["custom_start"], cfg["custom_end"])
        return SearchConfig.from_delimiter(pair, **bounds)
    return SearchConfig(**bounds)


def create_pipeline(config: dict[str, Any] | None = None) -> ExtractionPipeline:
    """Create a fully configured pipeline from a config dict."""
    config = config or {}
    cfg = config if "ban_list" in config else load_config(config)

    return ExtractionPipeline.create(
        config=build_search_config(cfg),
        methods=cfg["methods"],
        banned=cfg["ban_list"],
        max_workers=cfg["max_workers"],
        ban_enabled=cfg["ban_enabled"],
        repetition_enabled=cfg["repetition_enabled"],
        threshold=cfg["threshold"],
    )
