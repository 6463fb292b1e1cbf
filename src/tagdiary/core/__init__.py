"""Functional core - pure diary logic with no I/O."""

from .dates import (
    is_today,
    normalize_date_key,
    offset_date,
    parse_date_key,
    resolve_date,
    sort_date_keys,
    to_date_key,
    today_in,
)
from .tags import END_OF_CONTENT, TagOccurrence, content_slice, index_tags, split_lines
from .catalog import TagLocationCatalog, TagSpan, spans_for_content

__all__ = [
    # Dates
    "is_today",
    "normalize_date_key",
    "offset_date",
    "parse_date_key",
    "resolve_date",
    "sort_date_keys",
    "to_date_key",
    "today_in",
    # Tags
    "END_OF_CONTENT",
    "TagOccurrence",
    "content_slice",
    "index_tags",
    "split_lines",
    # Catalog
    "TagLocationCatalog",
    "TagSpan",
    "spans_for_content",
]
