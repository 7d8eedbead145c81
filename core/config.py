"""
Configuration Module
Loads runtime settings from the environment (and an optional .env file).
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

DEFAULT_ROOT = Path(tempfile.gettempdir()) / 'ui_diff'


@dataclass(frozen=True)
class Settings:
    port: int = 3001
    target_width: int = 800
    threshold: float = 0.1
    output_dir: Path = DEFAULT_ROOT / 'extracted'
    navigation_timeout_ms: int = 60000
    selector_timeout_ms: int = 30000
    viewport: Tuple[int, int] = (1920, 1080)
    allowed_origin: str = '*'
    gemini_api_key: Optional[str] = None
    gemini_model: str = 'gemini-2.0-flash'
    log_level: str = 'INFO'


def _int(env: Mapping[str, str], key: str, default: int, minimum: int = 1) -> int:
    raw = env.get(key)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def _threshold(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == '':
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{key} must be between 0 and 1, got {value}")
    return value


def parse_viewport(raw: str) -> Tuple[int, int]:
    """Parse a WIDTHxHEIGHT string such as '1920x1080'."""
    parts = raw.lower().split('x')
    if len(parts) != 2:
        raise ValueError(f"viewport must look like 1920x1080, got {raw!r}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"viewport must look like 1920x1080, got {raw!r}")
    if width <= 0 or height <= 0:
        raise ValueError(f"viewport dimensions must be positive, got {raw!r}")
    return width, height


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    When ``env`` is None the process environment is used, after loading a
    ``.env`` file from the working directory if one exists.
    """
    if env is None:
        load_dotenv()
        env = os.environ
    defaults = Settings()
    return Settings(
        port=_int(env, 'PORT', defaults.port),
        target_width=_int(env, 'UI_DIFF_TARGET_WIDTH', defaults.target_width),
        threshold=_threshold(env, 'UI_DIFF_THRESHOLD', defaults.threshold),
        output_dir=Path(env.get('UI_DIFF_OUTPUT_DIR') or defaults.output_dir),
        navigation_timeout_ms=_int(env, 'UI_DIFF_NAV_TIMEOUT_MS', defaults.navigation_timeout_ms),
        selector_timeout_ms=_int(env, 'UI_DIFF_SELECTOR_TIMEOUT_MS', defaults.selector_timeout_ms),
        viewport=parse_viewport(env['UI_DIFF_VIEWPORT']) if env.get('UI_DIFF_VIEWPORT') else defaults.viewport,
        allowed_origin=env.get('UI_DIFF_ALLOWED_ORIGIN') or defaults.allowed_origin,
        gemini_api_key=env.get('GEMINI_API_KEY') or None,
        gemini_model=env.get('GEMINI_MODEL') or defaults.gemini_model,
        log_level=(env.get('UI_DIFF_LOG_LEVEL') or defaults.log_level).upper(),
    )
