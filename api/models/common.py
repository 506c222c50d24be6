"""Shared model bases and the paginated response envelope."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire and in stored documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageMetadata(CamelModel):
    """Continuation info for one page of a listing.

    ``total`` counts the items in this page only, not the whole collection.
    """

    has_next_page: bool
    next_token: str | None = None
    total: int

    @model_serializer(mode="wrap")
    def _omit_missing_token(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        if self.next_token is None:
            data.pop("nextToken", None)
            data.pop("next_token", None)
        return data


class Page(CamelModel, Generic[T]):
    """A page of records plus its continuation metadata."""

    items: list[T]
    metadata: PageMetadata


class CountStats(BaseModel):
    """Aggregate counts computed by a full collection scan."""

    total: int = 0
