"""
Manifest writer.

Serializes hashed entries in their algorithm's line format, after a header
comment naming the build that produced the file.
"""

import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, TextIO

from sfvforge.checksum.formats import (
    COMMENT_PREFIX,
    FORMATS_BY_ALGORITHM,
    classify_line,
)
from sfvforge.checksum.models import ChecksumEntry, EntryStatus
from sfvforge.core.exceptions import ManifestWriteError
from sfvforge.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildInfo:
    """Identity of the tool build, stamped into manifest headers."""

    tool: str = "sfvforge"
    version: str = "unknown"
    commit: str = "unknown"


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """RFC 3339 UTC timestamp, e.g. 2024-01-01T12:00:00Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_entry(entry: ChecksumEntry) -> str:
    """Render one entry as a manifest line (no trailing newline)."""
    fmt = FORMATS_BY_ALGORITHM[entry.algorithm]
    return fmt.render(entry.filename, entry.computed_digest)


class ManifestWriter:
    """
    Write manifests for a given build.

    Example:
        writer = ManifestWriter(BuildInfo("sfvforge", "1.0.0", "abc1234"))
        writer.write(entries, Path("release.sfv"))
    """

    def __init__(self, build: Optional[BuildInfo] = None) -> None:
        self.build = build or BuildInfo()

    def header(self, moment: Optional[datetime] = None) -> str:
        b = self.build
        return (
            f"{COMMENT_PREFIX} Generated by {b.tool} version "
            f"{b.version}({b.commit}) at {format_timestamp(moment)}"
        )

    def write_stream(
        self,
        entries: Iterable[ChecksumEntry],
        stream: TextIO,
        moment: Optional[datetime] = None,
    ) -> int:
        """
        Write header and CHECKSUM_OK entries to an open text stream.

        Returns:
            Number of entry lines written

        Raises:
            ManifestWriteError: On the first failed write.
        """
        written = 0
        try:
            stream.write(self.header(moment) + "\n")
            for entry in entries:
                if entry.status is not EntryStatus.CHECKSUM_OK:
                    continue
                line = format_entry(entry)
                if classify_line(line) is None:
                    logger.warning(
                        "Manifest line will not parse back", file=entry.filename
                    )
                stream.write(line + "\n")
                written += 1
            stream.flush()
        except OSError as e:
            raise ManifestWriteError(f"Failed writing manifest: {e}") from e
        return written

    def write(
        self,
        entries: Iterable[ChecksumEntry],
        output_path: Optional[Path] = None,
        moment: Optional[datetime] = None,
    ) -> int:
        """
        Write a manifest to output_path, or standard output when None.

        Returns:
            Number of entry lines written

        Raises:
            ManifestWriteError: If the output cannot be created or written.
        """
        if output_path is None:
            return self.write_stream(entries, sys.stdout, moment)

        try:
            with open(output_path, "w", encoding="utf-8", newline="\n") as f:
                written = self.write_stream(entries, f, moment)
        except ManifestWriteError as e:
            e.path = output_path
            raise
        except OSError as e:
            raise ManifestWriteError(
                f"Cannot write manifest {output_path}: {e}", path=output_path
            ) from e

        logger.info("Manifest written", output=output_path, entries=written)
        return written
