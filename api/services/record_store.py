"""Azure Blob Storage document store, one container per entity kind.

Every record is stored as ``<id>.json`` in its kind's container. Fields
listed as indexed are mirrored into blob index tags, which serve as the
secondary indexes for status listings and slug lookups.
"""

import json
import logging
import re
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from azure.identity import ManagedIdentityCredential
from azure.storage.blob import ContainerClient, ContentSettings

from api.config import get_settings
from api.errors import RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)

JSON_CONTENT = ContentSettings(content_type="application/json")

_SAFE_PATH_SEGMENT_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9._-]*$")
# Characters Azure accepts in blob index tag values
_TAG_VALUE_RE = re.compile(r"^[a-zA-Z0-9 +\-./:=_]{0,256}$")

BLOG_INDEXES = ("status", "slug")
PROJECT_INDEXES = ("status",)


class ContainerNotFoundError(StoreError):
    """The entity container has not been provisioned yet."""


def validate_blob_path_segment(segment: str) -> str:
    """Validate a user-supplied blob path segment.

    Rejects inputs containing path traversal sequences (..), slashes,
    backslashes, or other unsafe characters. Returns the segment unchanged
    if valid; raises ValueError otherwise.
    """
    if not segment or not _SAFE_PATH_SEGMENT_RE.match(segment):
        raise ValueError(f"Invalid blob path segment: {segment!r}")
    return segment


def new_record_id() -> str:
    return str(uuid.uuid4())


def new_blog_id() -> str:
    return f"blog_{uuid.uuid4().hex}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def tag_filter(where: dict[str, str]) -> str:
    """Build a blob index tag filter expression for exact matches."""
    clauses = []
    for name, value in sorted(where.items()):
        if not _TAG_VALUE_RE.match(value) or "'" in value:
            raise ValueError(f"Unsupported index value for {name}: {value!r}")
        clauses.append(f"\"{name}\" = '{value}'")
    return " AND ".join(clauses)


class RecordStore:
    """CRUD and paged listing for one entity kind.

    Records are plain dicts in wire (camelCase) layout. The store assigns
    ``id`` (from the kind's *id_factory*) and ``createdAt``/``updatedAt``.
    A field set to None is removed from the stored document.
    """

    def __init__(
        self,
        client: ContainerClient,
        kind: str,
        indexed_fields: tuple[str, ...] = (),
        id_factory: Callable[[], str] = new_record_id,
    ) -> None:
        self._client = client
        self.kind = kind
        self.indexed_fields = indexed_fields
        self._id_factory = id_factory

    # -- internals ---------------------------------------------------------

    @staticmethod
    def _blob_name(record_id: str) -> str:
        return f"{validate_blob_path_segment(record_id)}.json"

    def _tags(self, record: dict[str, Any]) -> dict[str, str]:
        tags = {}
        for name in self.indexed_fields:
            value = str(record.get(name) or "")
            if _TAG_VALUE_RE.match(value):
                tags[name] = value
            else:
                logger.warning(
                    "Not indexing %s %s on %s: unsupported tag value",
                    self.kind,
                    record.get("id"),
                    name,
                )
        return tags

    def _write(self, record: dict[str, Any]) -> None:
        blob = self._client.get_blob_client(self._blob_name(record["id"]))
        blob.upload_blob(
            json.dumps(record, indent=2),
            overwrite=True,
            content_settings=JSON_CONTENT,
            tags=self._tags(record),
        )

    def _read(self, blob_name: str) -> dict[str, Any] | None:
        blob = self._client.get_blob_client(blob_name)
        try:
            return json.loads(blob.download_blob().readall())
        except ResourceNotFoundError:
            return None

    def _read_many(self, blob_names: list[str]) -> list[dict[str, Any]]:
        records = []
        for name in blob_names:
            record = self._read(name)
            # Deleted between listing and read
            if record is not None:
                records.append(record)
        return records

    # -- operations --------------------------------------------------------

    def ensure_container(self) -> bool:
        """Create the backing container if needed. Returns True if created."""
        try:
            self._client.create_container()
        except ResourceExistsError:
            return False
        logger.info("Created %s container", self.kind)
        return True

    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        """Write a new record and return it as stored.

        A fresh id is assigned unless *record* already carries one (seeding
        and data imports keep their ids). The write is unconditional.
        """
        now = utc_now_iso()
        stored = {k: v for k, v in record.items() if v is not None}
        stored["id"] = stored.get("id") or self._id_factory()
        stored["createdAt"] = now
        stored["updatedAt"] = now
        try:
            self._write(stored)
        except AzureError as e:
            logger.error("Azure error creating %s %s: %s", self.kind, stored["id"], e)
            raise StoreError(f"Failed to create {self.kind}") from e
        logger.info("Created %s %s", self.kind, stored["id"])
        return stored

    async def get_by_id(self, record_id: str) -> dict[str, Any] | None:
        """Point lookup. Returns None when the record does not exist."""
        try:
            blob_name = self._blob_name(record_id)
        except ValueError:
            return None
        try:
            return self._read(blob_name)
        except AzureError as e:
            logger.warning("Azure error reading %s %s: %s", self.kind, record_id, e)
            raise StoreError(f"Failed to read {self.kind}") from e

    async def get_by_index(self, field: str, value: str) -> list[dict[str, Any]]:
        """Return every record whose indexed *field* equals *value*.

        Results come back in index order. Secondary keys are not unique, so
        choosing among several matches is left to the caller.
        """
        if field not in self.indexed_fields:
            raise ValueError(f"{field!r} is not indexed for {self.kind}")
        try:
            expression = tag_filter({field: value})
        except ValueError:
            # No record can carry a value the index cannot hold
            return []
        try:
            names = [b.name for b in self._client.find_blobs_by_tags(expression)]
            return self._read_many(names)
        except AzureError as e:
            logger.warning(
                "Azure error querying %s by %s=%r: %s", self.kind, field, value, e
            )
            raise StoreError(f"Failed to query {self.kind}") from e

    async def update(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge *fields* into an existing record and refresh ``updatedAt``.

        Last write wins per field; there is no concurrency check.

        Raises:
            RecordNotFoundError: if no record has this id.
        """
        existing = await self.get_by_id(record_id)
        if existing is None:
            raise RecordNotFoundError(self.kind, record_id)

        merged = {**existing, **fields}
        merged["id"] = existing["id"]
        merged["createdAt"] = existing.get("createdAt", utc_now_iso())
        merged["updatedAt"] = max(utc_now_iso(), merged["createdAt"])
        stored = {k: v for k, v in merged.items() if v is not None}
        try:
            self._write(stored)
        except AzureError as e:
            logger.error("Azure error updating %s %s: %s", self.kind, record_id, e)
            raise StoreError(f"Failed to update {self.kind}") from e
        logger.info("Updated %s %s (%s)", self.kind, record_id, ", ".join(fields))
        return stored

    async def delete(self, record_id: str) -> None:
        """Remove a record. Deleting a missing record is not an error."""
        try:
            blob_name = self._blob_name(record_id)
        except ValueError:
            return
        try:
            self._client.get_blob_client(blob_name).delete_blob()
        except ResourceNotFoundError:
            logger.debug("Delete of missing %s %s ignored", self.kind, record_id)
            return
        except AzureError as e:
            logger.error("Azure error deleting %s %s: %s", self.kind, record_id, e)
            raise StoreError(f"Failed to delete {self.kind}") from e
        logger.info("Deleted %s %s", self.kind, record_id)

    async def query_page(
        self,
        *,
        limit: int,
        continuation: str | None = None,
        where: dict[str, str] | None = None,
    ) -> tuple[list[dict[str, Any]], str | None]:
        """Fetch one native page of records.

        Uses the tag index when *where* is given, otherwise an unindexed
        container listing. Returns the records in store order and the
        store's continuation token (None on the last page).
        """
        try:
            if where:
                pager = self._client.find_blobs_by_tags(
                    tag_filter(where), results_per_page=limit
                )
            else:
                pager = self._client.list_blobs(results_per_page=limit)
            pages = pager.by_page(continuation_token=continuation)
            try:
                page = next(pages)
            except StopIteration:
                return [], None
            names = [b.name for b in page if b.name.endswith(".json")]
            records = self._read_many(names)
            return records, pages.continuation_token or None
        except ResourceNotFoundError as e:
            raise ContainerNotFoundError(f"{self.kind} container not found") from e
        except AzureError as e:
            logger.warning("Azure error listing %s: %s", self.kind, e)
            raise StoreError(f"Failed to list {self.kind}") from e

    async def scan(self) -> list[dict[str, Any]]:
        """Read the whole collection (unindexed full scan)."""
        try:
            names = [
                b.name for b in self._client.list_blobs() if b.name.endswith(".json")
            ]
            return self._read_many(names)
        except ResourceNotFoundError as e:
            raise ContainerNotFoundError(f"{self.kind} container not found") from e
        except AzureError as e:
            logger.warning("Azure error scanning %s: %s", self.kind, e)
            raise StoreError(f"Failed to scan {self.kind}") from e


# Lazy singletons, live for the process lifetime
_blog_store: RecordStore | None = None
_project_store: RecordStore | None = None


def _get_credential() -> ManagedIdentityCredential:
    """Return Managed Identity credential."""
    settings = get_settings()
    return ManagedIdentityCredential(
        client_id=settings.managed_identity_client_id or None
    )


def create_container_client(container_name: str) -> ContainerClient:
    """Create a ContainerClient for the given container.

    A configured connection string (e.g. Azurite) wins over the managed
    identity.
    """
    settings = get_settings()
    if settings.azure_storage_connection_string:
        return ContainerClient.from_connection_string(
            settings.azure_storage_connection_string, container_name
        )
    account_url = f"https://{settings.azure_storage_account}.blob.core.windows.net"
    return ContainerClient(
        account_url=account_url,
        container_name=container_name,
        credential=_get_credential(),
    )


def get_blog_store() -> RecordStore:
    """Return the shared blog post store (lazy singleton)."""
    global _blog_store
    if _blog_store is None:
        _blog_store = RecordStore(
            create_container_client(get_settings().azure_blog_container),
            kind="blog post",
            indexed_fields=BLOG_INDEXES,
            id_factory=new_blog_id,
        )
    return _blog_store


def get_project_store() -> RecordStore:
    """Return the shared project store (lazy singleton)."""
    global _project_store
    if _project_store is None:
        _project_store = RecordStore(
            create_container_client(get_settings().azure_project_container),
            kind="project",
            indexed_fields=PROJECT_INDEXES,
        )
    return _project_store


def check_storage_connectivity() -> bool:
    """Lightweight storage connectivity check: lists 1 blob."""
    try:
        client = create_container_client(get_settings().azure_blog_container)
        next(client.list_blobs(results_per_page=1).__iter__())
        return True
    except StopIteration:
        # Container exists but is empty; still connected
        return True
    except Exception:
        return False
