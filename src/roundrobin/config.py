"""
Configuration for RoundRobin.

Settings come from three layers, later ones winning: built-in defaults,
``config/config.json`` (or the file named by ``$ROUNDROBIN_CONFIG``), and
environment variables.  The ``DB_*`` variables used by the original
deployment compose a PostgreSQL URL when ``DATABASE_URL`` is not set.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy.engine import URL

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "config.json"


class Settings(BaseModel):
    database_url: str = "sqlite:///roundrobin.db"
    host: str = "0.0.0.0"
    port: int = 3000
    # Reject self-matches and missing scores on POST /matches.
    strict_match_validation: bool = False
    cors_origins: List[str] = ["*"]
    # Player photos travel inline as base64.
    max_body_bytes: int = 50 * 1024 * 1024
    pool_size: int = 5
    pool_timeout: float = 30.0
    connect_timeout: int = 10
    log_level: str = "INFO"
    echo_sql: bool = False


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read the JSON config file. A missing file gives an empty dict."""
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info(f"Configuration file '{cfg_path}' not found. Using defaults.")
        return {}
    except json.JSONDecodeError as e:
        raise ConfigError(f"Error parsing configuration file '{cfg_path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file '{cfg_path}' must contain a JSON object")
    return data


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}

    if environ.get("DATABASE_URL"):
        overrides["database_url"] = environ["DATABASE_URL"]
    elif environ.get("DB_HOST"):
        port = environ.get("DB_PORT")
        overrides["database_url"] = URL.create(
            "postgresql+psycopg2",
            username=environ.get("DB_USER") or None,
            password=environ.get("DB_PASSWORD") or None,
            host=environ["DB_HOST"],
            port=int(port) if port else None,
            database=environ.get("DB_NAME") or None,
        ).render_as_string(hide_password=False)

    if environ.get("HOST"):
        overrides["host"] = environ["HOST"]
    if environ.get("PORT"):
        overrides["port"] = environ["PORT"]
    if environ.get("STRICT_MATCH_VALIDATION"):
        overrides["strict_match_validation"] = _as_bool(environ["STRICT_MATCH_VALIDATION"])
    if environ.get("CORS_ORIGINS"):
        overrides["cors_origins"] = [o.strip() for o in environ["CORS_ORIGINS"].split(",") if o.strip()]
    if environ.get("MAX_BODY_BYTES"):
        overrides["max_body_bytes"] = environ["MAX_BODY_BYTES"]
    if environ.get("LOG_LEVEL"):
        overrides["log_level"] = environ["LOG_LEVEL"]
    return overrides


def load_settings(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from defaults, the config file, and the environment."""
    if environ is None:
        environ = os.environ
    if path is None and environ.get("ROUNDROBIN_CONFIG"):
        path = Path(environ["ROUNDROBIN_CONFIG"])

    values = load_config(path)
    values.update(env_overrides(environ))
    try:
        return Settings(**values)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
