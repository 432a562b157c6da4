"""Configuration: ServerConfig loaded from genlayer-mcp.yaml.

Every field has a default, so the server runs with no config file at all.
Lookup order for the file: explicit path, then GENLAYER_MCP_CONFIG, then
./genlayer-mcp.yaml. A missing file yields the defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GENLAYER_MCP_CONFIG"
DEFAULT_CONFIG_NAME = "genlayer-mcp.yaml"

# Validation thresholds shared by the tool layer
MIN_REQUIREMENTS_LENGTH = 10
MIN_DESCRIPTION_LENGTH = 10
MIN_CRITERIA_LENGTH = 20

DEFAULT_URL_TEMPLATE = "https://api.example.com/data"
DEFAULT_WEB_SOURCE = "https://api.coindesk.com/v1/bpi/currentprice.json"

GENLAYER_DOCS_URL = "https://docs.genlayer.com/"
GENLAYER_STUDIO_URL = "https://studio.genlayer.com/"
GENLAYER_GITHUB_URL = "https://github.com/genlayer-protocol"
GENLAYER_API_DOCS_URL = "https://docs.genlayer.com/api-references/genlayer-py"


@dataclass
class ServerConfig:
    """Server-wide settings."""
    server_name: str = "genlayer-mcp-server"
    server_version: str = "1.2.0"

    min_requirements_length: int = MIN_REQUIREMENTS_LENGTH
    min_description_length: int = MIN_DESCRIPTION_LENGTH
    min_criteria_length: int = MIN_CRITERIA_LENGTH

    default_url_template: str = DEFAULT_URL_TEMPLATE
    default_web_source: str = DEFAULT_WEB_SOURCE

    docs_url: str = GENLAYER_DOCS_URL
    studio_url: str = GENLAYER_STUDIO_URL
    api_docs_url: str = GENLAYER_API_DOCS_URL

    # Docs lookup
    request_timeout: float = 30.0
    max_docs_chars: int = 15000

    # Reject localhost URLs in web-access tools
    production: bool = False

    log_level: str = "INFO"


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR, "")
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def load_config(config_path: str | Path | None = None) -> ServerConfig:
    """Load server config from YAML, falling back to defaults."""
    path = _resolve_config_path(config_path)
    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return ServerConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(raw).__name__}")

    known = {f.name for f in fields(ServerConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))

    defaults = ServerConfig()
    return ServerConfig(
        server_name=raw.get("server_name", defaults.server_name),
        server_version=raw.get("server_version", defaults.server_version),
        min_requirements_length=raw.get("min_requirements_length", MIN_REQUIREMENTS_LENGTH),
        min_description_length=raw.get("min_description_length", MIN_DESCRIPTION_LENGTH),
        min_criteria_length=raw.get("min_criteria_length", MIN_CRITERIA_LENGTH),
        default_url_template=raw.get("default_url_template", DEFAULT_URL_TEMPLATE),
        default_web_source=raw.get("default_web_source", DEFAULT_WEB_SOURCE),
        docs_url=raw.get("docs_url", GENLAYER_DOCS_URL),
        studio_url=raw.get("studio_url", GENLAYER_STUDIO_URL),
        api_docs_url=raw.get("api_docs_url", GENLAYER_API_DOCS_URL),
        request_timeout=float(raw.get("request_timeout", defaults.request_timeout)),
        max_docs_chars=raw.get("max_docs_chars", defaults.max_docs_chars),
        production=raw.get("production", False),
        log_level=str(raw.get("log_level", defaults.log_level)).upper(),
    )
