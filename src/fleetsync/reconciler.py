"""Computes the minimal add/remove plan between two unordered record collections."""

from collections import Counter
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Reconciliation:
    """Records to add and to remove. Order is not meaningful."""

    to_add: list[Any] = field(default_factory=list)
    to_remove: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


@dataclass(frozen=True)
class _FrozenMapping:
    items: frozenset


def freeze(record: Any) -> Hashable:
    """Return a hashable stand-in for ``record`` that compares by value.

    Mappings compare independently of key order and are tagged so they never
    equal a set of pairs; lists and sets are frozen element-wise.
    Already-hashable values are returned as they are.
    """
    if isinstance(record, Mapping):
        return _FrozenMapping(frozenset((key, freeze(value)) for key, value in record.items()))
    if isinstance(record, (list, tuple)):
        return tuple(freeze(item) for item in record)
    if isinstance(record, (set, frozenset)):
        return frozenset(freeze(item) for item in record)
    return record


def _unmatched(records: list[Any], keys: list[Hashable], against: Counter) -> list[Any]:
    remaining = Counter(against)
    result = []
    for record, key in zip(records, keys):
        if remaining[key] > 0:
            remaining[key] -= 1
        else:
            result.append(record)
    return result


def reconcile(
    old: Iterable[Any],
    new: Iterable[Any],
    key: Callable[[Any], Hashable] | None = None,
) -> Reconciliation:
    """Diff two collections of records as multisets using whole-record equality.

    ``to_add`` holds records of ``new`` with no equal counterpart left in
    ``old``, ``to_remove`` the converse. A record whose fields changed shows
    up as one removal plus one addition.
    """
    key = key or freeze
    old_records = list(old)
    new_records = list(new)
    old_keys = [key(r) for r in old_records]
    new_keys = [key(r) for r in new_records]

    return Reconciliation(
        to_add=_unmatched(new_records, new_keys, Counter(old_keys)),
        to_remove=_unmatched(old_records, old_keys, Counter(new_keys)),
    )
