"""
Throwable normalization — one explicit mapping from "whatever ended up in an
error channel" to a canonical exception.

Python only lets you raise BaseException instances, but a cause handed to
err() can be anything: a string, None, a number, a dict. Instead of probing
shapes at every call site, values are classified into a closed set of kinds
and each kind has exactly one normalization:

    EXCEPTION  → kept as-is
    STRING     → Exception(value)
    NULL       → Exception("None")
    OTHER      → Exception(str(value))
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any


@unique
class ThrowableKind(Enum):
    """Closed classification of values that may appear in an error channel."""

    EXCEPTION = "EXCEPTION"
    STRING = "STRING"
    NULL = "NULL"
    OTHER = "OTHER"


def classify(value: Any) -> ThrowableKind:
    """Classify a value into its ThrowableKind."""
    match value:
        case BaseException():
            return ThrowableKind.EXCEPTION
        case str():
            return ThrowableKind.STRING
        case None:
            return ThrowableKind.NULL
        case _:
            return ThrowableKind.OTHER


def normalize(value: Any) -> BaseException:
    """
    Map any value to a canonical exception.

        >>> normalize("disk full")
        Exception('disk full')
        >>> normalize(None)
        Exception('None')
    """
    match classify(value):
        case ThrowableKind.EXCEPTION:
            return value
        case ThrowableKind.STRING:
            return Exception(value)
        case ThrowableKind.NULL:
            return Exception("None")
        case ThrowableKind.OTHER:
            return Exception(str(value))
    raise TypeError("unreachable")  # pragma: no cover
