"""
Data models for checksum manifests.

Defines the algorithm and status enums, and the ChecksumEntry record that
carries one file through probe, hash and compare.

Status machine
--------------
    UNKNOWN ──> OK ──> CHECKSUM_OK ──> CHECKSUM_MISMATCH
       │         └───> CHECKSUM_FAILED
       ├──> NOT_FOUND
       ├──> NOT_A_FILE
       └──> STAT_FAILED

Statuses only move forward along these edges. ChecksumEntry.advance() is the
single place a status changes; anything else raises StatusTransitionError.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet

from sfvforge.core.exceptions import StatusTransitionError, UnknownAlgorithmError


class ChecksumAlgorithm(Enum):
    """Supported checksum algorithms."""

    UNKNOWN = "unknown"
    CRC32 = "crc32"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"

    @classmethod
    def from_string(cls, value: str) -> "ChecksumAlgorithm":
        """Map a selector string to an algorithm; anything unrecognised is UNKNOWN."""
        for algorithm in cls:
            if algorithm is not cls.UNKNOWN and algorithm.value == value:
                return algorithm
        return cls.UNKNOWN

    @classmethod
    def require(cls, value: str) -> "ChecksumAlgorithm":
        """Like from_string, but reject UNKNOWN with UnknownAlgorithmError."""
        algorithm = cls.from_string(value)
        if algorithm is cls.UNKNOWN:
            raise UnknownAlgorithmError(value)
        return algorithm

    @classmethod
    def names(cls) -> list[str]:
        """Selector strings of every concrete algorithm."""
        return [a.value for a in cls if a is not cls.UNKNOWN]


class EntryStatus(Enum):
    """Lifecycle stage of a checksum entry."""

    UNKNOWN = "unknown"
    OK = "ok"  # Probed, ready to hash
    CHECKSUM_OK = "checksum_ok"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    CHECKSUM_FAILED = "checksum_failed"
    NOT_FOUND = "not_found"
    NOT_A_FILE = "not_a_file"
    STAT_FAILED = "stat_failed"

    @property
    def label(self) -> str:
        """Human-readable status text."""
        return _STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    @property
    def is_failure(self) -> bool:
        return self in FAILURE_STATUSES


_STATUS_LABELS: Dict[EntryStatus, str] = {
    EntryStatus.UNKNOWN: "Unknown",
    EntryStatus.OK: "OK",
    EntryStatus.CHECKSUM_OK: "Checksum OK",
    EntryStatus.CHECKSUM_MISMATCH: "Checksum doesn't match",
    EntryStatus.CHECKSUM_FAILED: "Checksum calculation failed",
    EntryStatus.NOT_FOUND: "File not found",
    EntryStatus.NOT_A_FILE: "File not a file",
    EntryStatus.STAT_FAILED: "File stat failed",
}

_TRANSITIONS: Dict[EntryStatus, FrozenSet[EntryStatus]] = {
    EntryStatus.UNKNOWN: frozenset(
        {
            EntryStatus.OK,
            EntryStatus.NOT_FOUND,
            EntryStatus.NOT_A_FILE,
            EntryStatus.STAT_FAILED,
        }
    ),
    EntryStatus.OK: frozenset({EntryStatus.CHECKSUM_OK, EntryStatus.CHECKSUM_FAILED}),
    EntryStatus.CHECKSUM_OK: frozenset({EntryStatus.CHECKSUM_MISMATCH}),
    EntryStatus.CHECKSUM_MISMATCH: frozenset(),
    EntryStatus.CHECKSUM_FAILED: frozenset(),
    EntryStatus.NOT_FOUND: frozenset(),
    EntryStatus.NOT_A_FILE: frozenset(),
    EntryStatus.STAT_FAILED: frozenset(),
}

FAILURE_STATUSES: FrozenSet[EntryStatus] = frozenset(
    {
        EntryStatus.CHECKSUM_MISMATCH,
        EntryStatus.CHECKSUM_FAILED,
        EntryStatus.NOT_FOUND,
        EntryStatus.NOT_A_FILE,
        EntryStatus.STAT_FAILED,
    }
)


def can_transition(current: EntryStatus, requested: EntryStatus) -> bool:
    """Check whether the status machine allows current -> requested."""
    return requested in _TRANSITIONS[current]


@dataclass
class ChecksumEntry:
    """One file under consideration, from creation to final status."""

    algorithm: ChecksumAlgorithm
    filename: str
    status: EntryStatus = EntryStatus.UNKNOWN
    file_size: int = 0
    computed_digest: str = ""
    expected_digest: str = ""  # Only set for entries parsed from a manifest

    def advance(self, status: EntryStatus) -> None:
        """Move to a new status.

        Raises:
            StatusTransitionError: If the status machine has no such edge.
        """
        if not can_transition(self.status, status):
            raise StatusTransitionError(self.filename, self.status, status)
        self.status = status

    def record_digest(self, digest: str) -> None:
        """Store the computed digest and mark the hash stage complete."""
        self.advance(EntryStatus.CHECKSUM_OK)
        self.computed_digest = digest

    def compare(self) -> bool:
        """Compare computed and expected digests, demoting on mismatch.

        Hex case is ignored. Entries without both digests are left alone.

        Returns:
            False only if the entry was demoted to CHECKSUM_MISMATCH.
        """
        if self.status is not EntryStatus.CHECKSUM_OK:
            return True
        if not self.computed_digest or not self.expected_digest:
            return True
        # Case-insensitive on purpose: manifest digests may be uppercase hex
        if self.computed_digest.lower() == self.expected_digest.lower():
            return True
        self.advance(EntryStatus.CHECKSUM_MISMATCH)
        return False

    @property
    def passed(self) -> bool:
        """True when the entry ended in CHECKSUM_OK."""
        return self.status is EntryStatus.CHECKSUM_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "algorithm": self.algorithm.value,
            "status": self.status.value,
            "status_label": self.status.label,
            "file_size": self.file_size,
            "computed_digest": self.computed_digest,
            "expected_digest": self.expected_digest,
        }
