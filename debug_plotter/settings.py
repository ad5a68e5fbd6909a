from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping

from debug_plotter.errors import ConfigurationError


ENABLED_ENV_VAR = "DEBUG_PLOTTER_ENABLED"
OUTPUT_DIR_ENV_VAR = "DEBUG_PLOTTER_OUTPUT_DIR"
LIVE_FPS_ENV_VAR = "DEBUG_PLOTTER_LIVE_FPS"

DEFAULT_OUTPUT_DIR = Path("plots")
DEFAULT_LIVE_FPS = 30


@dataclass(frozen=True)
class Settings:
    """Process-wide switches read once from the environment."""

    enabled: bool = True
    output_dir: Path = DEFAULT_OUTPUT_DIR
    live_fps: int = DEFAULT_LIVE_FPS


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    raw_enabled = env.get(ENABLED_ENV_VAR, "1").strip()
    if raw_enabled not in {"0", "1"}:
        raise ConfigurationError(f"{ENABLED_ENV_VAR} must be 0 or 1, got {raw_enabled!r}")

    raw_dir = env.get(OUTPUT_DIR_ENV_VAR, "").strip()
    output_dir = Path(raw_dir) if raw_dir else DEFAULT_OUTPUT_DIR

    raw_fps = env.get(LIVE_FPS_ENV_VAR, "").strip()
    live_fps = DEFAULT_LIVE_FPS
    if raw_fps:
        try:
            live_fps = int(raw_fps)
        except ValueError as exc:
            raise ConfigurationError(f"{LIVE_FPS_ENV_VAR} must be an integer, got {raw_fps!r}") from exc
        if live_fps <= 0:
            raise ConfigurationError(f"{LIVE_FPS_ENV_VAR} must be > 0")

    return Settings(enabled=raw_enabled == "1", output_dir=output_dir, live_fps=live_fps)
