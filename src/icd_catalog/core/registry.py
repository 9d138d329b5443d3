from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

V = TypeVar('V')


class CatalogIndex(Generic[V]):
    """
    Insertion-ordered collection with a hash index on a lookup key.

    With unique=True the first value registered for a key wins and later
    values for the same key are rejected (add() returns False). With
    unique=False every value is kept and get() returns the first one.
    An optional group key gives O(1) access to all values sharing it,
    e.g. every attribute of one DOType.
    """

    def __init__(self, key: Callable[[V], Hashable], unique: bool = True,
                 group: Optional[Callable[[V], Hashable]] = None):
        self._key = key
        self._group = group
        self._unique = unique
        self._items: List[V] = []
        self._index: Dict[Hashable, List[V]] = {}
        self._groups: Dict[Hashable, List[V]] = {}

    def add(self, value: V) -> bool:
        """Register a value. Returns False when a unique key is already taken."""
        k = self._key(value)
        bucket = self._index.get(k)
        if bucket is not None and self._unique:
            return False
        if bucket is None:
            bucket = self._index[k] = []
        bucket.append(value)
        self._items.append(value)
        if self._group is not None:
            self._groups.setdefault(self._group(value), []).append(value)
        return True

    def get(self, key: Hashable) -> Optional[V]:
        bucket = self._index.get(key)
        return bucket[0] if bucket else None

    def get_all(self, key: Hashable) -> List[V]:
        return list(self._index.get(key, ()))

    def in_group(self, group: Hashable) -> List[V]:
        return list(self._groups.get(group, ()))

    def __contains__(self, key: Hashable) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[V]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def clear(self):
        self._items.clear()
        self._index.clear()
        self._groups.clear()
