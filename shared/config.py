"""
Application settings loaded from environment variables.

Settings are read once when the function host starts. Every missing or malformed
value is collected and reported together so a misconfigured deployment fails at
startup instead of on the first request.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = ("development", "production", "test")

DEFAULT_HTTP_TIMEOUT = 5.0
DEFAULT_SIGNED_URL_EXPIRES_IN = 600  # 10 minutes


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


@dataclass(frozen=True)
class Settings:
    """Validated runtime configuration."""

    supabase_url: str
    rest_url: str
    jwks_url: str
    anon_key: str = field(repr=False)
    service_role_key: str = field(repr=False)
    environment: str = "development"
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    signed_url_expires_in: int = DEFAULT_SIGNED_URL_EXPIRES_IN
    log_level: str = "INFO"


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Validated Settings instance

    Raises:
        ConfigError: If any required value is missing or any value is malformed
    """
    env = os.environ if environ is None else environ
    problems: List[str] = []

    def required(name: str) -> str:
        value = (env.get(name) or "").strip()
        if not value:
            problems.append(f"{name} is required")
        return value

    def required_url(name: str) -> str:
        value = required(name)
        if value and not _is_http_url(value):
            problems.append(f"{name} must be an http(s) URL")
        return value.rstrip("/")

    supabase_url = required_url("SUPABASE_URL")
    rest_url = required_url("SUPABASE_REST_URL")
    jwks_url = required_url("SUPABASE_JWKS_URL")
    anon_key = required("SUPABASE_ANON_KEY")
    service_role_key = required("SUPABASE_SERVICE_ROLE_KEY")

    environment = (env.get("APP_ENV") or "development").strip().lower()
    if environment not in VALID_ENVIRONMENTS:
        problems.append(f"APP_ENV must be one of {', '.join(VALID_ENVIRONMENTS)}")

    http_timeout = DEFAULT_HTTP_TIMEOUT
    raw_timeout = env.get("HTTP_TIMEOUT_SECONDS")
    if raw_timeout:
        try:
            http_timeout = float(raw_timeout)
            if http_timeout <= 0:
                raise ValueError(raw_timeout)
        except ValueError:
            problems.append("HTTP_TIMEOUT_SECONDS must be a positive number")

    expires_in = DEFAULT_SIGNED_URL_EXPIRES_IN
    raw_expires = env.get("SIGNED_URL_EXPIRES_IN")
    if raw_expires:
        try:
            expires_in = int(raw_expires)
            if expires_in <= 0:
                raise ValueError(raw_expires)
        except ValueError:
            problems.append("SIGNED_URL_EXPIRES_IN must be a positive integer")

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        problems.append(f"LOG_LEVEL {log_level} is not a valid logging level")

    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems))

    return Settings(
        supabase_url=supabase_url,
        rest_url=rest_url,
        jwks_url=jwks_url,
        anon_key=anon_key,
        service_role_key=service_role_key,
        environment=environment,
        http_timeout=http_timeout,
        signed_url_expires_in=expires_in,
        log_level=log_level,
    )
