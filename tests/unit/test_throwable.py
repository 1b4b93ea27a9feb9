"""Tests for throwable classification and normalization."""

from __future__ import annotations

import pytest

from ctxerr.throwable import ThrowableKind, classify, normalize


class TestClassify:
    @pytest.mark.parametrize(
        ("value", "kind"),
        [
            (ValueError("x"), ThrowableKind.EXCEPTION),
            (KeyboardInterrupt(), ThrowableKind.EXCEPTION),
            ("string error", ThrowableKind.STRING),
            ("", ThrowableKind.STRING),
            (None, ThrowableKind.NULL),
            (42, ThrowableKind.OTHER),
            ({"code": 7}, ThrowableKind.OTHER),
            (False, ThrowableKind.OTHER),
        ],
    )
    def test_kinds(self, value, kind):
        assert classify(value) is kind

    def test_four_kinds_exist(self):
        assert len(list(ThrowableKind)) == 4


class TestNormalize:
    def test_exception_is_kept(self):
        exc = ValueError("x")
        assert normalize(exc) is exc

    def test_string_becomes_exception_message(self):
        normalized = normalize("string error")
        assert type(normalized) is Exception
        assert str(normalized) == "string error"

    def test_none_becomes_none_text(self):
        assert str(normalize(None)) == "None"

    def test_other_values_use_str(self):
        assert str(normalize(42)) == "42"
        assert str(normalize({"code": 7})) == "{'code': 7}"
