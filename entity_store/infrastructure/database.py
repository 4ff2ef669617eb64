import logging
import os
import sqlite3
from typing import Generic, Iterable, List, Type, TypeVar, Union
from urllib.request import pathname2url

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError
from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, delete, insert, select
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import DatabaseError, SQLAlchemyError

from entity_store.domain.exceptions import (
    DeserializationException,
    IOFailureException,
    SerializationException,
)
from entity_store.domain.repository import Repository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# SQLAlchemy core Table definition
metadata = MetaData()
snapshots_table = Table(
    'entity_snapshots', metadata,
    Column('position', Integer, primary_key=True),
    Column('entity_id', String, nullable=False),
    Column('payload', Text, nullable=False),
)


class SqliteSnapshotStore(Generic[M]):
    """
    Persistence adapter keeping a repository snapshot in a SQLite file.
    Each entity is one row holding its JSON encoding; ``position`` preserves
    listing order. A save replaces the whole table in a single transaction,
    so readers see either the previous snapshot or the new one.
    """

    def __init__(self, model: Type[M], path: str):
        self.model = model
        self.path = path

    def _engine(self, read_only: bool = False) -> Engine:
        path = os.path.abspath(self.path)
        if read_only:
            # Read-only needs a sqlite "file:" URI; the path is percent-encoded
            # so characters such as "#" or "%" stay part of the file name.
            uri = f"file:{pathname2url(path)}?mode=ro"
            return create_engine("sqlite://", creator=lambda: sqlite3.connect(uri, uri=True), echo=False)
        return create_engine(URL.create("sqlite", database=path), echo=False)

    def save(self, entities: Union[Repository[M], Iterable[M]]) -> None:
        """
        Replaces the stored snapshot with ``entities``.

        Args:
            entities: a Repository or any iterable of model instances.
        """
        snapshot = entities.get_all() if isinstance(entities, Repository) else list(entities)

        try:
            values = [
                {   'position': position,
                    'entity_id': str(entity.id),
                    'payload': entity.model_dump_json(),
                } for position, entity in enumerate(snapshot)
            ]
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise SerializationException(self.path, "Could not encode entities") from exc

        engine = None
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            engine = self._engine()
            with engine.begin() as conn:
                metadata.create_all(conn)
                conn.execute(delete(snapshots_table))
                if values:
                    conn.execute(insert(snapshots_table), values)
        except (OSError, SQLAlchemyError) as exc:
            logger.error(f"Failed to save snapshot to {self.path}: {exc}")
            raise IOFailureException(self.path, "Could not write snapshot") from exc
        finally:
            if engine is not None:
                engine.dispose()

        logger.info(f"Saved {len(values)} {self.model.__name__} row(s) to {self.path}.")

    def load(self) -> List[M]:
        """Reads the snapshot in stored order; a missing database file yields an empty list."""
        if not os.path.exists(self.path):
            logger.info(f"Database file not found: {self.path}. Starting empty.")
            return []
        if not os.access(self.path, os.R_OK):
            raise IOFailureException(self.path, "Could not read snapshot: permission denied")

        engine = self._engine(read_only=True)
        try:
            with engine.connect() as conn:
                rows = conn.execute(
                    select(snapshots_table.c.position, snapshots_table.c.payload)
                    .order_by(snapshots_table.c.position)
                ).all()
        except DatabaseError as exc:
            logger.error(f"Data format error while loading {self.path}: {exc.orig}")
            raise DeserializationException(self.path, f"Not a valid snapshot database: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise IOFailureException(self.path, "Could not read snapshot") from exc
        finally:
            engine.dispose()

        entities: List[M] = []
        for position, payload in rows:
            try:
                entities.append(self.model.model_validate_json(payload))
            except ValidationError as exc:
                error = exc.errors()[0]
                loc = error.get("loc") or ()
                where = f"row {position}"
                if loc:
                    where += ", field " + ".".join(str(part) for part in loc)
                raise DeserializationException(self.path, error["msg"], location=where) from exc

        logger.info(f"Loaded {len(entities)} {self.model.__name__} row(s) from {self.path}.")
        return entities
