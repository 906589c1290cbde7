"""
Manifest parser.

Reads a manifest line by line, turns every recognised line into a probed
ChecksumEntry and totals the bytes still to be hashed.
"""

import io
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from sfvforge.checksum.formats import COMMENT_PREFIX, classify_line
from sfvforge.checksum.models import ChecksumEntry, EntryStatus
from sfvforge.checksum.probe import apply_probe
from sfvforge.core.exceptions import ManifestReadError
from sfvforge.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ParseResult:
    """Entries parsed from a manifest plus the bytes they cover."""

    entries: List[ChecksumEntry] = field(default_factory=list)
    total_size: int = 0  # Sum of file sizes for entries that probed OK
    skipped_lines: int = 0  # Non-comment, non-empty lines matching no format


def parse_lines(lines: Iterable[str]) -> ParseResult:
    """
    Parse manifest lines into probed entries.

    Comment lines (leading ';'), empty lines and lines matching none of the
    four formats are skipped. Every matching line yields an entry, even when
    its file is missing; filenames are probed relative to the working
    directory.

    Args:
        lines: Manifest lines, with or without trailing newlines

    Returns:
        ParseResult in manifest order
    """
    result = ParseResult()

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        classified = classify_line(line)
        if classified is None:
            if line and not line.startswith(COMMENT_PREFIX):
                result.skipped_lines += 1
                logger.debug("Skipping unrecognised line", line=lineno)
            continue

        algorithm, filename, digest = classified
        entry = ChecksumEntry(
            algorithm=algorithm,
            filename=filename,
            expected_digest=digest,
        )
        apply_probe(entry, filename)
        if entry.status is EntryStatus.OK:
            result.total_size += entry.file_size

        result.entries.append(entry)

    return result


def parse_manifest(manifest_path: Optional[Path] = None) -> ParseResult:
    """
    Parse a manifest file, or standard input when no path is given.

    Raises:
        ManifestReadError: If the manifest cannot be opened or read.
    """
    if manifest_path is None:
        logger.debug("Reading manifest from standard input")
        return _parse_stdin()

    try:
        with open(
            manifest_path, "r", encoding="utf-8", errors="replace", newline=""
        ) as f:
            result = parse_lines(f)
    except OSError as e:
        raise ManifestReadError(
            f"Cannot read manifest {manifest_path}: {e}", path=manifest_path
        ) from e

    logger.debug(
        "Parsed manifest",
        manifest=manifest_path,
        entries=len(result.entries),
        skipped=result.skipped_lines,
    )
    return result


def _parse_stdin() -> ParseResult:
    """Parse standard input as UTF-8, replacing undecodable bytes."""
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        # Text-only stream with no byte layer
        return parse_lines(sys.stdin)

    stream = io.TextIOWrapper(buffer, encoding="utf-8", errors="replace", newline="")
    try:
        return parse_lines(stream)
    finally:
        # Leave sys.stdin's buffer open
        stream.detach()
