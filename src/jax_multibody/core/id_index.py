"""Hashable id -> dense index mapping."""

from collections import Counter
from typing import Iterable, Iterator, Mapping, Tuple


class IdIndex(Mapping[int, int]):
    """Read-only map from caller-assigned ids to positions in a sequence.

    Built with one scan over the ids in storage order. When an id appears
    more than once the last position wins; ``duplicates()`` reports such ids.
    Instances hash and compare by their id sequence so they can live in the
    static part of a pytree.
    """

    __slots__ = ("_ids", "_lookup")

    def __init__(self, ids: Iterable[int] = ()):
        self._ids: Tuple[int, ...] = tuple(int(i) for i in ids)
        self._lookup = {id_: index for index, id_ in enumerate(self._ids)}

    @property
    def ids(self) -> Tuple[int, ...]:
        """Ids in storage order, duplicates included."""
        return self._ids

    def duplicates(self) -> Tuple[int, ...]:
        counts = Counter(self._ids)
        return tuple(id_ for id_, n in counts.items() if n > 1)

    def __getitem__(self, id_: int) -> int:
        return self._lookup[id_]

    def __iter__(self) -> Iterator[int]:
        return iter(self._lookup)

    def __len__(self) -> int:
        return len(self._lookup)

    def __contains__(self, id_) -> bool:
        return id_ in self._lookup

    def __hash__(self) -> int:
        return hash(self._ids)

    def __eq__(self, other) -> bool:
        if isinstance(other, IdIndex):
            return self._ids == other._ids
        return NotImplemented

    def __repr__(self) -> str:
        return f"IdIndex({self._lookup!r})"
