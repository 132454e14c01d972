"""
Render configuration.

All tunable layout parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file ($XDG_CONFIG_HOME/ascii-view/config.toml, [render] table)
3. Environment variables (ASCII_VIEW_*)
4. CLI flags override everything
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Layout and sampling settings for one render."""
    display_width: int = 80
    viewport_width_px: int = 1024
    cell_width_px: float = 8.4
    line_height_px: float = 19.6
    max_indent_ratio: float = 0.25  # deepest indent allowed, as a share of display width
    contrast_threshold: float = 1.15  # below this, text is treated as hidden
    image_min_size_px: int = 4  # tracking pixels
    max_art_width: int = 140
    max_art_height: int = 150
    charset: str = "standard"
    sampler_workers: int = 4

    def __post_init__(self):
        if self.display_width < 20:
            raise ValueError(f"display_width must be at least 20, got {self.display_width}")
        if self.cell_width_px <= 0 or self.line_height_px <= 0:
            raise ValueError("cell_width_px and line_height_px must be positive")
        if not 0 < self.max_indent_ratio < 1:
            raise ValueError(f"max_indent_ratio must be in (0, 1), got {self.max_indent_ratio}")
        if self.sampler_workers < 1:
            raise ValueError("sampler_workers must be at least 1")

    @property
    def max_indent(self) -> int:
        return int(self.display_width * self.max_indent_ratio)

    def with_overrides(self, **overrides: Any) -> "RenderConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "ascii-view" / "config.toml"
    return Path.home() / ".config" / "ascii-view" / "config.toml"


def _coerce(config: RenderConfig, values: Dict[str, Any], source: str) -> RenderConfig:
    types = {f.name: f.type for f in fields(RenderConfig)}
    updates = {}
    for key, raw in values.items():
        key = key.lower()
        if key not in types:
            logger.warning("Ignoring unknown setting %r from %s", key, source)
            continue
        conv = types[key] if types[key] in (int, float, str) else str
        try:
            updates[key] = conv(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring bad value %r for %s from %s", raw, key, source)
    return replace(config, **updates)


def load_config() -> RenderConfig:
    """Load config from file if it exists, then apply env overrides."""
    config = RenderConfig()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
        else:
            config = _coerce(config, data.get("render", {}), str(path))

    prefix = "ASCII_VIEW_"
    env = {k[len(prefix):]: v for k, v in os.environ.items() if k.startswith(prefix)}
    if env:
        config = _coerce(config, env, "environment")

    return config
