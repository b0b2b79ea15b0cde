from __future__ import annotations


class BeanBindError(Exception):
    """Base class for all beanbind exceptions."""

    def __init__(self, msg: str, location: str | None = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.msg
        return f'{self.location}: {self.msg}'


class RegistrationError(BeanBindError):
    """Raised for invalid or ambiguous type registrations."""


class MappingError(BeanBindError):
    """Base class for errors raised while walking a document or object graph."""


class DocumentShapeError(MappingError):
    """Raised when a document value does not have the required shape."""


class UnresolvedTypeTag(MappingError):
    """Raised when a type tag cannot be resolved to a type.

    The decoder absorbs this error and keeps the expected type.
    """

    def __init__(self, tag: str, location: str | None = None) -> None:
        super().__init__(f'unresolved type tag: {tag!r}', location)
        self.tag = tag


class UnknownProperty(MappingError):
    """Raised for a document key that has no matching bean property."""

    def __init__(self, cls: type, key: str, location: str | None = None) -> None:
        super().__init__(f'no bean property for key {key!r} in {cls.__qualname__}', location)
        self.cls = cls
        self.key = key


class ConstructionError(MappingError):
    """Raised when an instance of a bean type cannot be created."""


class PropertyWriteError(MappingError):
    """Raised when a decoded value cannot be assigned to a property."""


class PropertyReadError(MappingError):
    """Raised when a property getter fails during encoding."""


class UncatalogableType(MappingError):
    """Raised when the properties of a type cannot be introspected."""


class EncodeError(BeanBindError):
    """Adds context for errors raised when packing a document."""


class DecodeError(BeanBindError):
    """Adds context for errors raised when unpacking a document."""
