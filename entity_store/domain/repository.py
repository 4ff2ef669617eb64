import copy
import logging
from operator import attrgetter
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, Iterator, List, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from entity_store.domain.exceptions import (
    DuplicateKeyException,
    InvalidValueException,
    NotFoundException,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Repository(Generic[E]):
    """
    In-memory store of entities keyed by identity.

    Uniqueness is enforced at the single insertion point (``add``), so every
    other operation can assume at most one entity per id. Entities are copied
    on the way in and on the way out, so callers can never bypass the
    invariant checks by mutating stored state directly.

    The store is generic: any object works as long as ``key`` can extract a
    hashable id from it (defaults to the ``id`` attribute). ``update_field``
    additionally requires pydantic models, since updates are re-validated.
    """

    def __init__(self, key: Callable[[E], Hashable] = attrgetter("id"), name: str = "repository"):
        self._key = key
        self._entities: Dict[Hashable, E] = {}
        self.name = name

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: Hashable) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[E]:
        return iter(self.get_all())

    def contains(self, entity_id: Hashable) -> bool:
        return entity_id in self._entities

    def add(self, entity: E) -> None:
        """
        Inserts an entity.

        Raises:
            DuplicateKeyException: if an entity with the same id is already stored.
                The repository is left unchanged.
            InvalidValueException: if ``entity`` is None.
        """
        if entity is None:
            raise InvalidValueException("Cannot add None to a repository.")

        entity_id = self._key(entity)
        if entity_id in self._entities:
            raise DuplicateKeyException(entity_id)

        self._entities[entity_id] = copy.deepcopy(entity)
        logger.debug(f"[{self.name}] Added entity {entity_id!r}. Size: {len(self._entities)}.")

    def extend(self, entities: Iterable[E]) -> None:
        """Adds entities one by one, stopping at the first failure."""
        for entity in entities:
            self.add(entity)

    def get_by_id(self, entity_id: Hashable) -> E:
        """
        Returns a copy of the entity stored under ``entity_id``.

        Raises:
            NotFoundException: if no entity has that id.
        """
        try:
            entity = self._entities[entity_id]
        except KeyError:
            raise NotFoundException(entity_id) from None
        return copy.deepcopy(entity)

    def get_all(self) -> List[E]:
        """Returns an independent snapshot of every entity, in insertion order."""
        return [copy.deepcopy(entity) for entity in self._entities.values()]

    def remove(self, entity_id: Hashable) -> None:
        """
        Deletes the entity stored under ``entity_id``.

        Raises:
            NotFoundException: if no entity has that id.
        """
        if entity_id not in self._entities:
            raise NotFoundException(entity_id, f"Cannot remove: no entity found with id {entity_id!r}.")
        del self._entities[entity_id]
        logger.debug(f"[{self.name}] Removed entity {entity_id!r}. Size: {len(self._entities)}.")

    def remove_first(self, predicate: Callable[[E], bool]) -> bool:
        """Removes the first entity matching ``predicate``. Returns whether one was removed."""
        for entity_id, entity in self._entities.items():
            if predicate(entity):
                del self._entities[entity_id]
                logger.debug(f"[{self.name}] Removed entity {entity_id!r} by predicate.")
                return True
        return False

    def update_field(self, entity_id: Hashable, field: str, value: Any) -> E:
        """
        Replaces the stored entity with a re-validated copy where ``field`` is
        set to ``value``. The entity keeps its position in listing order.

        Returns:
            A copy of the updated entity.

        Raises:
            NotFoundException: if no entity has that id.
            InvalidValueException: if the field is unknown, is the identity, or
                the new value violates the model's constraints.
        """
        try:
            current = self._entities[entity_id]
        except KeyError:
            raise NotFoundException(entity_id) from None

        if not isinstance(current, BaseModel):
            raise InvalidValueException(
                f"Entities of type {type(current).__name__} do not support field updates.", field=field
            )
        model_cls = type(current)
        if field not in model_cls.model_fields:
            raise InvalidValueException(f"{model_cls.__name__} has no field {field!r}.", field=field)

        data = current.model_dump()
        data[field] = value
        try:
            updated = model_cls.model_validate(data)
        except ValidationError as exc:
            raise InvalidValueException(
                f"Invalid value {value!r} for {model_cls.__name__}.{field}: {exc.errors()[0]['msg']}",
                field=field,
            ) from exc

        if self._key(updated) != entity_id:
            raise InvalidValueException(f"The id of entity {entity_id!r} cannot be changed.", field=field)

        self._entities[entity_id] = updated
        logger.debug(f"[{self.name}] Updated {field} of entity {entity_id!r}.")
        return copy.deepcopy(updated)

    def find_first(self, predicate: Callable[[E], bool]) -> Optional[E]:
        """Returns a copy of the first entity (in insertion order) matching ``predicate``, or None."""
        for entity in self._entities.values():
            if predicate(entity):
                return copy.deepcopy(entity)
        return None

    def find_all(self, predicate: Callable[[E], bool]) -> List[E]:
        return [copy.deepcopy(entity) for entity in self._entities.values() if predicate(entity)]

    def clear(self) -> None:
        """Drops every entity, e.g. to simulate a new session before a load."""
        self._entities.clear()
        logger.debug(f"[{self.name}] Cleared.")
