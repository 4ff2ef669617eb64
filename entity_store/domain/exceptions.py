from typing import Any, Optional


class EntityStoreException(Exception):
    """Base exception for all entity store errors."""
    pass

class DuplicateKeyException(EntityStoreException):
    """Raised when an entity is added under an id that is already stored."""
    def __init__(self, entity_id: Any, message: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message or f"An entity with id {entity_id!r} already exists.")

class NotFoundException(EntityStoreException):
    """Raised when a lookup, removal or update targets an absent id."""
    def __init__(self, entity_id: Any, message: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message or f"No entity found with id {entity_id!r}.")

class InvalidValueException(EntityStoreException):
    """Raised when a value violates a domain rule (e.g. a negative quantity)."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

class MissingFieldException(InvalidValueException):
    """Raised when a text record lacks a required field or has a malformed id."""
    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"Line {line_number}: {message}")

class InvalidScoreFormatException(InvalidValueException):
    """Raised when a score token is not an integer or is out of range."""
    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"Line {line_number}: {message}", field="score")

class PersistenceException(EntityStoreException):
    """Base for failures while saving or loading a snapshot."""
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{message} ({path})")

class IOFailureException(PersistenceException):
    """Raised on permission, device or other storage medium errors."""
    pass

class SerializationException(PersistenceException):
    """Raised when an entity cannot be encoded."""
    pass

class DeserializationException(PersistenceException):
    """Raised when persisted content cannot be parsed into entities."""
    def __init__(self, path: str, message: str, location: Optional[str] = None):
        self.location = location
        detail = f"{message} at {location}" if location else message
        super().__init__(path, detail)
