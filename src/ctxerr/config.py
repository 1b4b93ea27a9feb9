"""
Configuration — typed settings loaded from the environment.

Uses pydantic-settings so every knob can be overridden with a CTXERR_*
environment variable (CTXERR_CHAIN_SEPARATOR, CTXERR_LOG_LEVEL, ...).
Defaults reproduce the documented formatting exactly, so most applications
never set anything. No .env file is read: ctxerr is imported into other
applications and must not pick up whatever .env sits in their working
directory.

Settings are loaded once and cached; call clear_settings_cache() after
changing the environment (tests do this through a fixture).

get_settings() never raises. fmt_err(), str(error) and attempt() all read
settings, and they must keep working while an application is already
failing, so invalid CTXERR_* values are reported as a warning and the
defaults are used instead. Construct CtxErrSettings() directly to validate
the environment strictly.
"""

from __future__ import annotations

from functools import lru_cache

import structlog
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)


class CtxErrSettings(BaseSettings):
    """
    Package settings.

    Load order (highest priority first):
      1. Environment variables (CTXERR_ prefix)
      2. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CTXERR_",
        extra="ignore",
    )

    chain_separator: str = Field(
        default=" -> ",
        description="Separator placed between segments of a formatted cause chain",
    )
    unknown_error_message: str = Field(
        default="Unknown error",
        min_length=1,
        description="Returned by fmt_err() when every segment of the chain is blank",
    )
    no_stack_message: str = Field(
        default="<no stack>",
        min_length=1,
        description="Returned by root_stack when no error in the chain has a trace",
    )
    log_level: str = Field(
        default="INFO",
        description="Level used by configure_structlog(); unknown names fall back to INFO there",
    )
    log_attempts: bool = Field(
        default=False,
        description="Emit a debug event every time attempt() converts an exception",
    )


@lru_cache(maxsize=1)
def get_settings() -> CtxErrSettings:
    """Return the cached settings instance, or the defaults if the environment is invalid."""
    try:
        return CtxErrSettings()
    except ValidationError as e:
        invalid = sorted(f"CTXERR_{'_'.join(map(str, error['loc'])).upper()}" for error in e.errors())
        logger.warning("ctxerr.settings_invalid", invalid=invalid, fallback="defaults")
        return CtxErrSettings.model_construct()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
