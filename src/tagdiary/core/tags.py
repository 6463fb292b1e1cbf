"""Pure tag indexing logic - no I/O dependencies."""

from dataclasses import dataclass

DEFAULT_MARKER = "#"

# Sentinel for "through the end of the entry" in line ranges.
END_OF_CONTENT = None


@dataclass(frozen=True)
class TagOccurrence:
    """A tag marker found on a given line of an entry."""

    tag: str
    line: int


def split_lines(content: str | None) -> list[str]:
    """Split entry content into lines.

    Indexing and slicing both go through this function so that line numbers
    always refer to the same lines.
    """
    if not content:
        return []
    return content.split("\n")


def parse_tag_line(line: str, marker: str = DEFAULT_MARKER) -> str | None:
    """Return the tag name if the line is a tag marker line, else None.

    "#work" and "  #work notes" are tags, and "##work" is the tag "#work";
    "# Heading", "## Heading" and a bare "#" are not.
    """
    stripped = line.strip()
    if not marker or not stripped.startswith(marker):
        return None

    rest = stripped[len(marker):]
    if not rest or rest[0].isspace():
        return None
    return rest.split()[0]


def index_tags(content: str | None, marker: str = DEFAULT_MARKER) -> list[TagOccurrence]:
    """Find tag occurrences in content, in ascending line order."""
    occurrences = []
    for line_number, line in enumerate(split_lines(content)):
        tag = parse_tag_line(line, marker)
        if tag is not None:
            occurrences.append(TagOccurrence(tag=tag, line=line_number))
    return occurrences


def content_slice(content: str | None, start_line: int, end_line: int | None = END_OF_CONTENT) -> str:
    """Return lines [start_line, end_line) of content joined by newlines.

    end_line of END_OF_CONTENT reads through the last line. Out-of-range
    bounds yield an empty string.
    """
    lines = split_lines(content)
    start_line = max(start_line, 0)
    if start_line >= len(lines):
        return ""
    if end_line is END_OF_CONTENT:
        return "\n".join(lines[start_line:])
    if end_line <= start_line:
        return ""
    return "\n".join(lines[start_line:end_line])
