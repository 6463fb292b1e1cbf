"""Tag location catalog - where each tag appears across all dated entries."""

import logging
from dataclasses import dataclass

from .tags import DEFAULT_MARKER, END_OF_CONTENT, index_tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagSpan:
    """Body lines belonging to one tag occurrence.

    Covers lines [tag_line + 1, next_tag_line) of the entry for ``date``.
    ``next_tag_line`` is END_OF_CONTENT for the last tag of an entry.
    """

    date: str
    tag_line: int
    next_tag_line: int | None = END_OF_CONTENT

    @property
    def body_start(self) -> int:
        return self.tag_line + 1


def spans_for_content(date_key: str, content: str | None, marker: str = DEFAULT_MARKER) -> dict[str, list[TagSpan]]:
    """Group one entry's tag spans by tag name, in ascending line order."""
    occurrences = index_tags(content, marker)
    spans: dict[str, list[TagSpan]] = {}
    for i, occ in enumerate(occurrences):
        next_line = occurrences[i + 1].line if i + 1 < len(occurrences) else END_OF_CONTENT
        spans.setdefault(occ.tag, []).append(TagSpan(date=date_key, tag_line=occ.line, next_tag_line=next_line))
    return spans


class TagLocationCatalog:
    """
    Mapping from tag name to the spans tagged with it, across all dates.

    Rebuilt one date at a time: rebuilding a date replaces that date's
    previous spans and leaves every other date alone.
    """

    def __init__(self, marker: str = DEFAULT_MARKER):
        self.marker = marker
        self._spans_by_tag: dict[str, dict[str, list[TagSpan]]] = {}
        self._tags_by_date: dict[str, set[str]] = {}

    def rebuild_for_date(self, date_key: str, content: str | None) -> None:
        """Recompute the spans contributed by one date's content."""
        self.forget_date(date_key)

        spans = spans_for_content(date_key, content, self.marker)
        for tag, tag_spans in spans.items():
            self._spans_by_tag.setdefault(tag, {})[date_key] = tag_spans
        if spans:
            self._tags_by_date[date_key] = set(spans)

        logger.debug(f"Catalog rebuilt for {date_key}: {sorted(spans)}")

    def forget_date(self, date_key: str) -> None:
        """Drop every span contributed by a date."""
        for tag in self._tags_by_date.pop(date_key, set()):
            by_date = self._spans_by_tag.get(tag)
            if by_date is None:
                continue
            by_date.pop(date_key, None)
            if not by_date:
                del self._spans_by_tag[tag]

    def spans_for_tag(self, tag: str) -> tuple[TagSpan, ...]:
        """Snapshot of all spans for a tag. Unknown tags give an empty tuple."""
        by_date = self._spans_by_tag.get(tag, {})
        return tuple(span for spans in by_date.values() for span in spans)

    def tag_names(self) -> list[str]:
        return sorted(self._spans_by_tag)

    def tag_counts(self) -> dict[str, int]:
        """Number of spans per tag, keyed by tag name in sorted order."""
        return {
            tag: sum(len(spans) for spans in self._spans_by_tag[tag].values())
            for tag in self.tag_names()
        }

    def dates(self) -> list[str]:
        """Date keys that currently contribute at least one span."""
        return list(self._tags_by_date)

    def clear(self) -> None:
        self._spans_by_tag.clear()
        self._tags_by_date.clear()

    def __contains__(self, tag: str) -> bool:
        return tag in self._spans_by_tag

    def __len__(self) -> int:
        return len(self._spans_by_tag)
