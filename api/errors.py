"""Domain exceptions, mapped to HTTP responses in ``api.main``."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single violated constraint."""

    field: str
    message: str


class RecordValidationError(Exception):
    """Caller input violates one or more record constraints (HTTP 400)."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__(self.message)

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    @property
    def message(self) -> str:
        return "; ".join(f"{e.field}: {e.message}" for e in self.errors)


class InvalidCursorError(ValueError):
    """A pagination token could not be decoded for this listing (HTTP 400)."""


class RecordNotFoundError(Exception):
    """No record exists for the given key (HTTP 404)."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} not found")


class StoreError(Exception):
    """The document store call failed (HTTP 500)."""


class AuthenticationError(Exception):
    """Missing, invalid or expired admin credentials (HTTP 401)."""
