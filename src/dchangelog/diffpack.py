"""Diff line classification for dchangelog."""

import enum
import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)


class LineKind(enum.Enum):
    """How a unified diff line is colored in the document."""

    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"


def classify_line(line: str) -> LineKind:
    """Classify a diff line by its first character."""
    if line.startswith("+"):
        return LineKind.ADDITION
    if line.startswith("-"):
        return LineKind.DELETION
    return LineKind.CONTEXT


@dataclass
class DiffLine:
    """A single line of a unified diff."""

    kind: LineKind
    text: str


@dataclass
class ProcessedDiff:
    """A file's diff split into classified lines."""

    path: str
    lines: List[DiffLine] = field(default_factory=list)
    added: int = 0
    deleted: int = 0
    is_binary: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.lines


class DiffProcessor:
    """Processes unified diff text into classified lines."""

    def process(self, path: str, unified_diff: str) -> ProcessedDiff:
        """Process one file's diff."""
        processed = ProcessedDiff(path=path)
        if not unified_diff:
            return processed

        lines = unified_diff.split("\n")
        # A trailing newline terminates the last line, it is not a line itself.
        if lines and lines[-1] == "":
            lines.pop()

        in_hunk = False
        for line in lines:
            kind = classify_line(line)
            if line.startswith("diff --git "):
                in_hunk = False
            elif line.startswith("@@"):
                in_hunk = True

            # "+++ "/"--- " are file headers only before the first hunk
            is_header = not in_hunk and line.startswith(("+++ ", "--- "))
            if kind is LineKind.ADDITION and not is_header:
                processed.added += 1
            elif kind is LineKind.DELETION and not is_header:
                processed.deleted += 1
            elif line.startswith("Binary files ") and line.endswith(" differ"):
                processed.is_binary = True
            processed.lines.append(DiffLine(kind=kind, text=line))

        logger.debug(
            "Processed diff",
            extra={
                "path": path,
                "lines": len(processed.lines),
                "added": processed.added,
                "deleted": processed.deleted,
                "binary": processed.is_binary,
            },
        )
        return processed
