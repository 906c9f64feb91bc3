"""Outcome of a tolerant document read.

Bulk history loading must keep going past a missing or corrupt checkpoint,
but callers still need to know which of the three things happened.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Valid(Generic[T]):
    name: str
    value: T


@dataclass(frozen=True)
class Missing:
    name: str


@dataclass(frozen=True)
class Malformed:
    name: str
    reason: str


ParseOutcome = Union[Valid[T], Missing, Malformed]


def parse_document(name: str, text: str | None, decode: Callable[[Any], T]) -> ParseOutcome:
    """Decode ``text`` as JSON and pass it through ``decode``.

    ``decode`` signals structural problems with ``ValueError``, ``KeyError``
    or ``TypeError``; any of those becomes ``Malformed``.
    """
    if text is None:
        return Missing(name)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return Malformed(name, f"invalid JSON: {e}")
    try:
        return Valid(name, decode(data))
    except (ValueError, KeyError, TypeError) as e:
        return Malformed(name, str(e))
