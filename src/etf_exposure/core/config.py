"""Application configuration, read from config.json at the project root.

Environment variables ETF_EXPOSURE_SUPABASE_URL and
ETF_EXPOSURE_SUPABASE_ANON_KEY override the file values.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ENV_URL = "ETF_EXPOSURE_SUPABASE_URL"
ENV_ANON_KEY = "ETF_EXPOSURE_SUPABASE_ANON_KEY"


@dataclass
class AppConfig:
    supabase_url: str = ""
    supabase_anon_key: str = ""
    request_timeout: float = 10.0
    max_positions: int = 5
    default_benchmark: str = ""  # empty = pick from the mix
    log_level: str = "WARNING"


_DEFAULTS = AppConfig()
# values as stored in config.json, without env overrides
_file_cached: Optional[AppConfig] = None
_cached: Optional[AppConfig] = None


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where pyproject.toml lives)."""
    current = Path(__file__).resolve().parent
    for _ in range(10):
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    # Fallback: current working directory
    return Path.cwd()


def _config_path() -> Path:
    return _find_project_root() / "config.json"


def _apply_env(cfg: AppConfig) -> AppConfig:
    """Copy of cfg with env overrides applied. cfg itself is not touched."""
    overrides = {}
    url = os.environ.get(ENV_URL)
    key = os.environ.get(ENV_ANON_KEY)
    if url:
        overrides["supabase_url"] = url
    if key:
        overrides["supabase_anon_key"] = key
    return replace(cfg, **overrides)


def _load_file_config() -> AppConfig:
    global _file_cached
    if _file_cached is not None:
        return _file_cached
    path = _config_path()
    if not path.exists():
        _file_cached = AppConfig()
        return _file_cached
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        _file_cached = AppConfig(
            supabase_url=data.get("supabase_url", _DEFAULTS.supabase_url),
            supabase_anon_key=data.get("supabase_anon_key", _DEFAULTS.supabase_anon_key),
            request_timeout=float(data.get("request_timeout", _DEFAULTS.request_timeout)),
            max_positions=int(data.get("max_positions", _DEFAULTS.max_positions)),
            default_benchmark=data.get("default_benchmark", _DEFAULTS.default_benchmark),
            log_level=data.get("log_level", _DEFAULTS.log_level),
        )
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning("Ignoring unreadable config at %s: %s", path, e)
        _file_cached = AppConfig()
    return _file_cached


def get_config() -> AppConfig:
    """Effective configuration: config.json values with env overrides on top."""
    global _cached
    if _cached is None:
        _cached = _apply_env(_load_file_config())
    return _cached


def save_config(cfg: AppConfig) -> None:
    global _file_cached, _cached
    _file_cached = cfg
    _cached = _apply_env(cfg)
    _config_path().write_text(json.dumps(asdict(cfg), indent=2, ensure_ascii=False), encoding="utf-8")


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the file."""
    global _file_cached, _cached
    _file_cached = None
    _cached = None


def config_keys() -> list[str]:
    return [f.name for f in fields(AppConfig)]


def update_config(key: str, raw_value: str) -> AppConfig:
    """Set one field from a CLI string, converting to the field's type.

    Only config.json values are written back; env overrides stay in the env.
    """
    if key not in config_keys():
        raise KeyError(key)
    cfg = replace(_load_file_config())
    current = getattr(cfg, key)
    if isinstance(current, float):
        value = float(raw_value)
    elif isinstance(current, int):
        value = int(raw_value)
    else:
        value = raw_value
    setattr(cfg, key, value)
    save_config(cfg)
    return get_config()
