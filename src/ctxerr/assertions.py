"""
Test assertions for Result values.

Expressive assert helpers that produce clear failure messages and hand back
the narrowed value, so a test reads top to bottom:

    from ctxerr import ErrAssertions

    def test_missing_user():
        error = ErrAssertions.assert_err(find_user("nobody"))
        assert error.get("user_id") == "nobody"

    def test_bad_config():
        result = load_config("broken.toml")
        ErrAssertions.assert_chain_equals(result, "failed to read config -> FileNotFoundError: ...")
"""

from __future__ import annotations

from typing import Any, TypeVar

from ctxerr.error import CtxError

T = TypeVar("T")


class ErrAssertions:
    """Expressive test assertions for Result values."""

    @staticmethod
    def assert_ok(result: T | CtxError, message: str = "") -> T:
        """
        Assert the Result is not an error and return the value.

            value = ErrAssertions.assert_ok(result)
        """
        context = f" — {message}" if message else ""
        assert not isinstance(result, CtxError), (
            f"Expected a value but got CtxError({result.fmt_err()!r}){context}"
        )
        return result

    @staticmethod
    def assert_err(result: Any, message: str = "") -> CtxError:
        """
        Assert the Result is a CtxError and return it.

            error = ErrAssertions.assert_err(result)
        """
        context = f" — {message}" if message else ""
        assert isinstance(result, CtxError), f"Expected CtxError but got {result!r}{context}"
        return result

    @staticmethod
    def assert_chain_equals(result: Any, expected_chain: str) -> None:
        """Assert the Result is a CtxError whose formatted chain equals expected_chain."""
        error = ErrAssertions.assert_err(result)
        chain = error.fmt_err()
        assert chain == expected_chain, (
            f"Expected error chain {expected_chain!r} but got {chain!r}"
        )

    @staticmethod
    def assert_chain_contains(result: Any, substring: str) -> None:
        """Assert the formatted chain contains substring (case-insensitive)."""
        error = ErrAssertions.assert_err(result)
        chain = error.fmt_err()
        assert substring.lower() in chain.lower(), (
            f"Expected error chain to contain {substring!r} but chain was: {chain!r}"
        )

    @staticmethod
    def assert_context(result: Any, key: str, expected_value: Any) -> None:
        """Assert the deepest context value for key equals expected_value."""
        error = ErrAssertions.assert_err(result)
        assert key in _keys(error), f"Expected context key {key!r} in chain {error.fmt_err()!r}"
        value = error.get(key)
        assert value == expected_value, (
            f"Expected context {key}={expected_value!r} but got {value!r}"
        )


def _keys(error: CtxError) -> set[str]:
    keys: set[str] = set()
    for link in error.iter_chain():
        if not isinstance(link, CtxError):
            break
        keys.update(link.context or {})
    return keys
