"""
Header lookup for the free-text column.

Matching is exact after trimming and lower-casing; no substring or fuzzy
matching. When a name repeats in a header the first occurrence wins.
"""

from collections.abc import Mapping, Sequence


def _key(name) -> str:
    if name is None:
        return ''
    return str(name).strip().lower()


def resolve(header: Sequence, target_name: str) -> int | None:
    target = _key(target_name)
    for i, name in enumerate(header):
        if _key(name) == target:
            return i
    return None


class ColumnMap(Mapping):
    """Read-only lower-cased column name -> first ordinal, one per sheet."""

    def __init__(self, header: Sequence):
        self.header = tuple(header)
        self._names = tuple(dict.fromkeys(_key(name) for name in self.header))

    def index_of(self, name: str) -> int | None:
        return resolve(self.header, name)

    def __getitem__(self, name):
        i = self.index_of(name)
        if i is None:
            raise KeyError(name)
        return i

    def __iter__(self):
        return iter(self._names)

    def __len__(self):
        return len(self._names)
