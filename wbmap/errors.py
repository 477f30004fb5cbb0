"""Exception hierarchy for the Wikibase mapping client."""

from __future__ import annotations

from typing import Any


class WikibaseError(Exception):
    """Base class for every error raised by wbmap."""


class PreconditionError(WikibaseError, ValueError):
    """Raised when arguments are unusable, before any request is made."""


class UnmappedPropertyError(PreconditionError):
    """A property label has no entry in the client's property map."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"No property map for property label '{label}'")


class ResolutionError(WikibaseError):
    """A label could not be resolved to exactly one entity."""

    def __init__(self, kind: str, label: str, message: str) -> None:
        self.kind = kind
        self.label = label
        super().__init__(message)


class LabelNotFoundError(ResolutionError):
    def __init__(self, kind: str, label: str) -> None:
        super().__init__(kind, label, f"No {kind} ID was found for '{label}'")


class AmbiguousLabelError(ResolutionError):
    def __init__(self, kind: str, label: str, ids: list[str]) -> None:
        self.ids = ids
        super().__init__(kind, label, f"Multiple {kind} IDs found for '{label}': {ids}")


class APIError(WikibaseError):
    """Structured error returned by the MediaWiki API."""

    def __init__(self, code: str, info: str) -> None:
        self.code = code
        self.info = info
        super().__init__(f"{code}: {info}")


class ResponseShapeError(WikibaseError):
    """The server answered, but not with the shape we expected."""

    def __init__(self, message: str, response: Any = None) -> None:
        self.response = response
        if response is not None:
            message = f"{message}: {response!r}"
        super().__init__(message)


class EncodingError(WikibaseError, ValueError):
    """A field value cannot be turned into a claim payload."""

    def __init__(self, message: str, value: Any = None, label: str | None = None) -> None:
        self.value = value
        self.label = None
        super().__init__(message)
        if label:
            self.with_label(label)

    def with_label(self, label: str) -> EncodingError:
        """Name the property this error came from and return the error."""
        if self.label is None:
            self.label = label
            self.args = (f"Failed to encode property '{label}': {self.args[0]}",)
        return self


class UnsupportedTypeError(EncodingError):
    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Tried to encode property of unrecognised type {type_name}", value=type_name)


class InvalidEntityReferenceError(EncodingError):
    def __init__(self, value: Any, reason: str) -> None:
        super().__init__(f"Invalid entity reference {value!r}: {reason}", value=value)


class ClaimUploadError(WikibaseError):
    """Creating or updating a claim failed; the cause is chained."""

    def __init__(self, label: str, property_id: str, entity_id: str, reason: Any) -> None:
        self.label = label
        self.property_id = property_id
        self.entity_id = entity_id
        super().__init__(
            f"Failed to upload claim for '{label}' ({property_id}) on {entity_id}: {reason}"
        )


class TransportError(WikibaseError):
    """The HTTP exchange itself failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
