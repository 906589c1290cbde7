"""
Checksum manifest engine.

Provides creation and verification of SFV-style manifests:
- CRC32, MD5, SHA-1 and SHA-256 digests over streamed file contents
- Four fixed line formats, parsed and written symmetrically
- Per-file status tracking from probe to verified result
"""

# Models
from sfvforge.checksum.models import (
    ChecksumAlgorithm,
    ChecksumEntry,
    EntryStatus,
)

# Digest engine
from sfvforge.checksum.digest import (
    Crc32Digest,
    Digest,
    HashlibDigest,
    digest_bytes,
    digest_stream,
    new_digest,
)

# Line formats, probe, parser, writer
from sfvforge.checksum.formats import classify_line, is_manifest_filename
from sfvforge.checksum.probe import ProbeResult, probe_file
from sfvforge.checksum.parser import ParseResult, parse_lines, parse_manifest
from sfvforge.checksum.writer import BuildInfo, ManifestWriter

# Orchestration
from sfvforge.checksum.orchestrator import (
    ChecksumOrchestrator,
    ProgressSink,
    create,
    verify,
    write_manifest,
)

__all__ = [
    # Enums
    "ChecksumAlgorithm",
    "EntryStatus",
    # Models
    "ChecksumEntry",
    "ProbeResult",
    "ParseResult",
    "BuildInfo",
    # Classes
    "Digest",
    "HashlibDigest",
    "Crc32Digest",
    "ManifestWriter",
    "ChecksumOrchestrator",
    "ProgressSink",
    # Functions
    "new_digest",
    "digest_stream",
    "digest_bytes",
    "probe_file",
    "classify_line",
    "is_manifest_filename",
    "parse_lines",
    "parse_manifest",
    "create",
    "verify",
    "write_manifest",
]
