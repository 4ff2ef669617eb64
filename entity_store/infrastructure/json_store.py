import contextlib
import logging
import os
import tempfile
from typing import Generic, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from entity_store.domain.exceptions import (
    DeserializationException,
    IOFailureException,
    SerializationException,
)
from entity_store.domain.repository import Repository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

JSON_INDENT = 2


def describe_validation_error(exc: ValidationError) -> tuple[str, Optional[str]]:
    """
    Reduces a pydantic ValidationError to (message, location).

    Malformed JSON carries its line/column in the message itself; shape errors
    are located as ``record <index>, field <name>``.
    """
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    if not loc:
        return error["msg"], None
    location = f"record {loc[0]}"
    if len(loc) > 1:
        location += ", field " + ".".join(str(part) for part in loc[1:])
    return error["msg"], location


def write_atomically(destination: str, payload: bytes) -> None:
    """
    Writes ``payload`` to a temporary file beside ``destination`` and renames
    it into place, creating missing parent directories. On failure the
    destination keeps its prior content (or stays absent).

    Raises:
        IOFailureException: on permission or device errors.
    """
    directory = os.path.dirname(os.path.abspath(destination))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".entity-store-", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(payload)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.replace(tmp_path, destination)
    except OSError as exc:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
        logger.error(f"I/O error while writing {destination}: {exc}")
        raise IOFailureException(destination, f"Could not write file: {exc.strerror or exc}") from exc


class JsonFileStore(Generic[M]):
    """
    Persistence adapter writing a repository snapshot as an indented JSON
    array of records, one object per entity with its fields by name.

    Dates are written as ISO-8601 calendar dates and Decimals as string
    literals, so nothing is lossily converted to floating point.
    """

    def __init__(self, model: Type[M], path: Optional[str] = None):
        self.model = model
        self.path = path
        self._adapter = TypeAdapter(List[model])

    def _destination(self, path: Optional[str]) -> str:
        destination = path or self.path
        if not destination:
            raise ValueError("A destination path is required.")
        return destination

    def save(self, entities: Union[Repository[M], Iterable[M]], path: Optional[str] = None) -> None:
        """
        Writes the snapshot to a temporary file beside the destination and
        atomically renames it into place. On failure the destination keeps its
        prior content (or stays absent).

        Raises:
            SerializationException: if an entity cannot be encoded.
            IOFailureException: on permission or device errors.
        """
        destination = self._destination(path)
        snapshot = entities.get_all() if isinstance(entities, Repository) else list(entities)

        try:
            payload = self._adapter.dump_json(snapshot, indent=JSON_INDENT)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            logger.error(f"Could not encode {len(snapshot)} entities for {destination}: {exc}")
            raise SerializationException(destination, "Could not encode entities") from exc

        write_atomically(destination, payload)
        logger.info(f"Saved {len(snapshot)} {self.model.__name__} record(s) to {destination}.")

    def load(self, path: Optional[str] = None) -> List[M]:
        """
        Reads the snapshot back in stored order. A missing file means there
        was no prior session and yields an empty list.

        Raises:
            IOFailureException: if the file exists but cannot be read.
            DeserializationException: if the content is not a list of valid records.
        """
        destination = self._destination(path)
        if not os.path.exists(destination):
            logger.info(f"Data file not found: {destination}. Starting empty.")
            return []

        try:
            with open(destination, "rb") as f:
                raw = f.read()
        except OSError as exc:
            logger.error(f"I/O error while loading {destination}: {exc}")
            raise IOFailureException(destination, f"Could not read snapshot: {exc.strerror or exc}") from exc

        try:
            entities = self._adapter.validate_json(raw)
        except ValidationError as exc:
            message, location = describe_validation_error(exc)
            logger.error(f"Data format error while loading {destination}: {message} ({location or 'document'})")
            raise DeserializationException(destination, message, location=location) from exc

        logger.info(f"Loaded {len(entities)} {self.model.__name__} record(s) from {destination}.")
        return entities
