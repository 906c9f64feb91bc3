"""Stable identity keys for compact results.

A key names a finding by content rather than by position, so the same
logical finding gets the same key in two snapshots even when its rule or
file sits at a different dictionary index:

    "<rule id>|<file path or ''>|<sl:sc-el:ec or ''>|<effective message>"

Two findings with identical rule, file, range and message collapse to one
key.  Producers are expected not to emit such duplicates; nothing here
enforces it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .models import CompactResult, NormalizedSnapshot, RuleDefinition


def derive_result_key(
    result: CompactResult,
    rules: Sequence[RuleDefinition],
    files: Sequence[str],
) -> str:
    """Return the index-independent key for ``result``.

    ``rules`` and ``files`` must be the dictionaries the result was built
    against.
    """
    rule = rules[result.rule]
    file_path = files[result.file] if result.file is not None else ""
    if result.range is not None:
        sl, sc, el, ec = result.range
        range_str = f"{sl}:{sc}-{el}:{ec}"
    else:
        range_str = ""
    message = result.message if result.message is not None else rule.message
    return f"{rule.id}|{file_path}|{range_str}|{message}"


def derive_result_keys(snapshot: NormalizedSnapshot) -> dict[int, str]:
    """Map every result position in ``snapshot`` to its stable key."""
    return {
        pos: derive_result_key(result, snapshot.rules, snapshot.files)
        for pos, result in enumerate(snapshot.results)
    }


@dataclass
class KeyDiff:
    """Finding keys added, removed and kept between two snapshots."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)


def diff_result_keys(before: NormalizedSnapshot, after: NormalizedSnapshot) -> KeyDiff:
    """Compare two snapshots by stable key.  Each list is sorted."""
    keys_before = set(derive_result_keys(before).values())
    keys_after = set(derive_result_keys(after).values())
    return KeyDiff(
        added=sorted(keys_after - keys_before),
        removed=sorted(keys_before - keys_after),
        unchanged=sorted(keys_before & keys_after),
    )
