"""URL slug derivation for blog post titles."""

import re

_NON_SLUG_RUN_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Convert a title to a URL-safe slug.

    Lower-cases the title, collapses every run of characters outside
    ``[a-z0-9]`` into a single hyphen and trims hyphens from both ends.
    Distinct titles may produce the same slug; callers do not dedupe.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'
        >>> slugify("  Wetland -- Restoration 2024 ")
        'wetland-restoration-2024'
        >>> slugify("Café")
        'caf'

    """
    return _NON_SLUG_RUN_RE.sub("-", title.lower()).strip("-")
