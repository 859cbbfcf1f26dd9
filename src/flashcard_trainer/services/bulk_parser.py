"""Parsing of bulk vocabulary text: one `front;back` pair per line."""

from dataclasses import dataclass, field
from typing import List, Tuple

from flashcard_trainer.managers.logging_manager import get_logger

logger = get_logger(prefix="[BulkParser]")


@dataclass
class BulkParseResult:
    pairs: List[Tuple[str, str]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def parse_bulk_text(data: str, delimiter: str = ";") -> BulkParseResult:
    """
    Split `data` into `(front, back)` pairs.

    Lines are separated by `\\n` only; a trailing `\\r` is trimmed with the rest of the
    whitespace. Blank lines are ignored. Each remaining line is split on `delimiter`; the first two
    parts are trimmed and kept when both are non-empty. Anything else is recorded in
    `skipped`. Parts after the second are ignored.
    """
    result = BulkParseResult()

    for line in data.split("\n"):
        if not line.strip():
            continue

        parts = [part.strip() for part in line.split(delimiter)]
        front = parts[0] if parts else ""
        back = parts[1] if len(parts) > 1 else ""

        if front and back:
            result.pairs.append((front, back))
        else:
            logger.warning("Skipping malformed line: %r", line)
            result.skipped.append(line)

    return result
