"""
Shared test fixtures for the ctxerr test suite.

Every test starts from default settings and default structlog
configuration, so environment overrides and configure_structlog() calls
never leak between tests.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from ctxerr import clear_settings_cache


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop cached settings and any CTXERR_* variables from the environment."""
    for name in (
        "CTXERR_CHAIN_SEPARATOR",
        "CTXERR_UNKNOWN_ERROR_MESSAGE",
        "CTXERR_NO_STACK_MESSAGE",
        "CTXERR_LOG_LEVEL",
        "CTXERR_LOG_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class CustomError(Exception):
    """Exception with a non-default name, rendered with a prefix in chains."""


def raises(exc: BaseException):
    """Return a zero-argument callable that raises exc."""

    def fn():
        raise exc

    return fn
