"""Record constraints checked before every write.

This module is the single definition of what a valid blog post or project
looks like. The write path calls it authoritatively and the ``/validate``
endpoints expose it to interactive clients for early feedback.

Validators take the wire (camelCase) representation of a record and collect
every violation rather than stopping at the first one.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from api.errors import FieldError, RecordValidationError

BLOG_STATUSES = ("draft", "published")
PROJECT_STATUSES = ("ongoing", "completed")

TITLE_MAX_LENGTH = 200
MIN_START_YEAR = 2000
START_YEAR_LEAD = 5  # projects may be announced up to 5 years ahead

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)

_YEAR_RE = re.compile(r"[0-9]{1,4}")


@dataclass
class ValidationResult:
    """Outcome of validating one record."""

    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def raise_for_errors(self) -> None:
        """Raise ``RecordValidationError`` if any constraint was violated."""
        if self.errors:
            raise RecordValidationError(list(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "errors": [asdict(e) for e in self.errors]}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_year(value: Any) -> int | None:
    """Return *value* as an integer year, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _YEAR_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _check_string_list(
    result: ValidationResult, data: Mapping[str, Any], name: str
) -> None:
    value = data.get(name)
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        result.add(name, f"{name} must be a list of strings")


def validate_coordinates(value: Any) -> list[FieldError]:
    """Check a ``[latitude, longitude]`` pair."""
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(_is_number(v) for v in value)
    ):
        return [
            FieldError(
                "coordinates",
                "Coordinates must be an array of two numbers [latitude, longitude]",
            )
        ]

    lat, lng = value
    errors = []
    if not LATITUDE_RANGE[0] <= lat <= LATITUDE_RANGE[1]:
        errors.append(FieldError("coordinates", "Latitude must be between -90 and 90"))
    if not LONGITUDE_RANGE[0] <= lng <= LONGITUDE_RANGE[1]:
        errors.append(
            FieldError("coordinates", "Longitude must be between -180 and 180")
        )
    return errors


def validate_blog_post(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a complete blog post (create payload or merged update)."""
    result = ValidationResult()

    for name in ("title", "content", "author"):
        if _is_blank(data.get(name)):
            result.add(name, f"{name} is required")

    title = data.get("title")
    if isinstance(title, str) and len(title) > TITLE_MAX_LENGTH:
        result.add("title", f"Title must be at most {TITLE_MAX_LENGTH} characters")

    if data.get("status") not in BLOG_STATUSES:
        result.add("status", 'Status must be either "draft" or "published"')

    _check_string_list(result, data, "tags")

    cover_image = data.get("coverImage")
    if not _is_blank(cover_image):
        parsed = urlparse(cover_image) if isinstance(cover_image, str) else None
        if (
            parsed is None
            or parsed.scheme not in ("http", "https")
            or not parsed.netloc
        ):
            result.add("coverImage", "Cover image must be an http(s) URL")

    published_at = data.get("publishedAt")
    if published_at is not None and _parse_timestamp(published_at) is None:
        result.add("publishedAt", "Published date must be an ISO 8601 timestamp")

    return result


def validate_project(
    data: Mapping[str, Any], current_year: int | None = None
) -> ValidationResult:
    """Validate a complete project (create payload or merged update).

    Args:
        data: Project fields in wire (camelCase) form.
        current_year: Override for the reference year; defaults to the
            current UTC year.
    """
    if current_year is None:
        current_year = datetime.now(timezone.utc).year
    result = ValidationResult()

    for name in ("title", "client", "coordinates", "status", "startYear"):
        if _is_blank(data.get(name)):
            result.add(name, f"{name} is required")

    status = data.get("status")
    if not _is_blank(status) and status not in PROJECT_STATUSES:
        result.add("status", 'Status must be either "completed" or "ongoing"')

    if data.get("coordinates") is not None:
        result.errors.extend(validate_coordinates(data["coordinates"]))

    latest_start = current_year + START_YEAR_LEAD
    start_year = parse_year(data.get("startYear"))
    if not _is_blank(data.get("startYear")) and (
        start_year is None or not MIN_START_YEAR <= start_year <= latest_start
    ):
        result.add(
            "startYear",
            f"Start year must be between {MIN_START_YEAR} and {latest_start}",
        )
        start_year = None

    if status == "completed":
        end_year_value = data.get("endYear")
        if _is_blank(end_year_value):
            result.add("endYear", "End year is required for completed projects")
        else:
            end_year = parse_year(end_year_value)
            lowest_end = start_year if start_year is not None else MIN_START_YEAR
            if end_year is None or not lowest_end <= end_year <= current_year:
                result.add(
                    "endYear",
                    "End year must be between start year and current year",
                )

    _check_string_list(result, data, "images")
    _check_string_list(result, data, "impact")

    return result
