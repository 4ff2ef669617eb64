import copy
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, List, Optional, TypeVar, Union

from entity_store.domain.repository import Repository

E = TypeVar("E")
K = TypeVar("K", bound=Hashable)


class GroupIndex(Generic[K, E]):
    """
    Derived, non-authoritative view grouping entities by a foreign key.

    The grouping is only ever replaced wholesale by ``rebuild``; it goes stale
    as soon as the source repository is mutated.
    """

    def __init__(self, key: Callable[[E], K]):
        self._key = key
        self._groups: Dict[K, List[E]] = {}

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key: K) -> bool:
        return key in self._groups

    def rebuild(self, source: Union[Repository[E], Iterable[E]]) -> None:
        """Regroups every entity of ``source`` in its listing order."""
        if isinstance(source, Repository):
            entities = source.get_all()
        else:
            entities = [copy.deepcopy(entity) for entity in source]

        groups: Dict[K, List[E]] = {}
        for entity in entities:
            groups.setdefault(self._key(entity), []).append(entity)
        self._groups = groups

    def lookup(
        self,
        key: K,
        sort_by: Optional[Callable[[E], Any]] = None,
        descending: bool = False,
    ) -> List[E]:
        """
        Returns a copy of the group for ``key``, or an empty list if the key
        is unknown. Sorting applies to the returned copy only.
        """
        entities = [copy.deepcopy(entity) for entity in self._groups.get(key, [])]
        if sort_by is not None:
            entities.sort(key=sort_by, reverse=descending)
        return entities

    def keys(self) -> List[K]:
        return list(self._groups)

    def count(self) -> int:
        """Total number of entities across all groups."""
        return sum(len(group) for group in self._groups.values())
