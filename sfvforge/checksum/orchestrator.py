"""
Create and verify workflows.

    create:  probe every path -> hash every OK entry -> hand off to the writer
    verify:  parse + probe manifest lines -> hash OK entries -> compare digests

Files are processed one at a time, in input order. Per-file problems end up
as entry statuses; only manifest read/write failures raise.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from sfvforge.checksum.digest import digest_stream
from sfvforge.checksum.models import ChecksumAlgorithm, ChecksumEntry, EntryStatus
from sfvforge.checksum.parser import parse_manifest
from sfvforge.checksum.probe import apply_probe
from sfvforge.checksum.writer import BuildInfo, ManifestWriter
from sfvforge.core.config import DEFAULT_CHUNK_SIZE
from sfvforge.core.exceptions import UnknownAlgorithmError
from sfvforge.core.logging import get_logger

logger = get_logger(__name__)


class ProgressSink(Protocol):
    """Receives byte-level progress while files are hashed."""

    def start(self, total: int) -> None:
        """Called once with the total bytes about to be hashed."""
        ...

    def update(self, advance: int) -> None:
        """Called after every chunk with the bytes just read."""
        ...

    def finish(self) -> None:
        """Called once hashing is over."""
        ...


class ChecksumOrchestrator:
    """
    Drives probe, hash and compare over a batch of entries.

    Args:
        chunk_size: Target read size for hashing
        progress: Optional sink for byte progress
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress: Optional[ProgressSink] = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.progress = progress

    def create(
        self, algorithm: ChecksumAlgorithm, files: Iterable[str]
    ) -> List[ChecksumEntry]:
        """
        Hash every path with one algorithm.

        Returns:
            One entry per path, in input order, including failed ones

        Raises:
            UnknownAlgorithmError: If algorithm is UNKNOWN (before any I/O).
        """
        if algorithm is ChecksumAlgorithm.UNKNOWN:
            raise UnknownAlgorithmError(algorithm.value)

        entries: List[ChecksumEntry] = []
        total_size = 0
        for filename in files:
            entry = ChecksumEntry(algorithm=algorithm, filename=str(filename))
            apply_probe(entry, entry.filename)
            total_size += entry.file_size
            entries.append(entry)

        self._hash_all(entries, total_size)
        return entries

    def verify(self, manifest_path: Optional[Path] = None) -> List[ChecksumEntry]:
        """
        Verify files against a manifest (standard input when no path).

        Raises:
            ManifestReadError: If the manifest cannot be read.
        """
        parsed = parse_manifest(manifest_path)
        self._hash_all(parsed.entries, parsed.total_size)

        for entry in parsed.entries:
            if not entry.compare():
                logger.warning(
                    "Checksum mismatch",
                    file=entry.filename,
                    expected=entry.expected_digest,
                    actual=entry.computed_digest,
                )
        return parsed.entries

    def _hash_all(self, entries: List[ChecksumEntry], total_size: int) -> None:
        if self.progress:
            self.progress.start(total_size)
        try:
            for entry in entries:
                self.hash_entry(entry)
        finally:
            if self.progress:
                self.progress.finish()

    def hash_entry(self, entry: ChecksumEntry) -> None:
        """
        Hash one entry in place if it probed OK; otherwise leave it untouched.

        A read error, or the file vanishing since the probe, marks the entry
        CHECKSUM_FAILED with no digest.
        """
        if entry.status is not EntryStatus.OK:
            return

        on_bytes = self.progress.update if self.progress else None
        try:
            with open(entry.filename, "rb") as f:
                digest = digest_stream(entry.algorithm, f, self.chunk_size, on_bytes)
        except OSError as e:
            logger.warning(
                "Checksum calculation failed", file=entry.filename, error=str(e)
            )
            entry.advance(EntryStatus.CHECKSUM_FAILED)
            return

        entry.record_digest(digest)
        logger.debug(
            "Hashed file",
            file=entry.filename,
            algorithm=entry.algorithm.value,
            digest=digest,
        )


# Convenience functions
def create(
    algorithm: ChecksumAlgorithm,
    files: Iterable[str],
    progress: Optional[ProgressSink] = None,
) -> List[ChecksumEntry]:
    """Hash files for a new manifest."""
    return ChecksumOrchestrator(progress=progress).create(algorithm, files)


def verify(
    manifest_path: Optional[Path] = None,
    progress: Optional[ProgressSink] = None,
) -> List[ChecksumEntry]:
    """Verify files listed in a manifest."""
    return ChecksumOrchestrator(progress=progress).verify(manifest_path)


def write_manifest(
    entries: Iterable[ChecksumEntry],
    output_path: Optional[Path] = None,
    build: Optional[BuildInfo] = None,
) -> int:
    """Write CHECKSUM_OK entries as a manifest; returns lines written."""
    return ManifestWriter(build).write(entries, output_path)
