"""
Digest engine.

One streaming interface over the four manifest algorithms:

    digest = new_digest(ChecksumAlgorithm.SHA1)
    digest.write(b"chunk one")
    digest.write(b"chunk two")
    digest.finalize()  # lowercase hex

digest_stream() drives a Digest over a binary stream in fixed-size reads so
memory use stays bounded regardless of file size.
"""

import hashlib
import zlib
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Dict, Optional

from sfvforge.checksum.models import ChecksumAlgorithm
from sfvforge.core.config import DEFAULT_CHUNK_SIZE
from sfvforge.core.exceptions import UnknownAlgorithmError


class Digest(ABC):
    """Incremental digest producing a lowercase hex string."""

    algorithm: ChecksumAlgorithm
    block_size: int
    digest_size: int

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Feed a chunk of input."""

    @abstractmethod
    def finalize(self) -> str:
        """Return the lowercase hex digest of everything written so far."""


class HashlibDigest(Digest):
    """MD5, SHA-1 and SHA-256 via hashlib."""

    def __init__(self, algorithm: ChecksumAlgorithm) -> None:
        self.algorithm = algorithm
        self._hash = hashlib.new(algorithm.value)
        self.block_size = self._hash.block_size
        self.digest_size = self._hash.digest_size

    def write(self, data: bytes) -> None:
        self._hash.update(data)

    def finalize(self) -> str:
        return self._hash.hexdigest()


class Crc32Digest(Digest):
    """CRC-32 with the IEEE polynomial, rendered as 8 hex characters."""

    algorithm = ChecksumAlgorithm.CRC32
    block_size = 1
    digest_size = 4

    def __init__(self) -> None:
        self._crc = 0

    def write(self, data: bytes) -> None:
        self._crc = zlib.crc32(data, self._crc)

    def finalize(self) -> str:
        return f"{self._crc & 0xFFFFFFFF:08x}"


_DIGEST_FACTORIES: Dict[ChecksumAlgorithm, Callable[[], Digest]] = {
    ChecksumAlgorithm.CRC32: Crc32Digest,
    ChecksumAlgorithm.MD5: lambda: HashlibDigest(ChecksumAlgorithm.MD5),
    ChecksumAlgorithm.SHA1: lambda: HashlibDigest(ChecksumAlgorithm.SHA1),
    ChecksumAlgorithm.SHA256: lambda: HashlibDigest(ChecksumAlgorithm.SHA256),
}


def new_digest(algorithm: ChecksumAlgorithm) -> Digest:
    """Create a fresh Digest for the algorithm.

    Raises:
        UnknownAlgorithmError: For ChecksumAlgorithm.UNKNOWN.
    """
    factory = _DIGEST_FACTORIES.get(algorithm)
    if factory is None:
        raise UnknownAlgorithmError(algorithm.value)
    return factory()


def read_size(digest: Digest, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Largest whole number of digest blocks that fits in chunk_size (min one block)."""
    blocks = max(1, chunk_size // digest.block_size)
    return blocks * digest.block_size


def digest_stream(
    algorithm: ChecksumAlgorithm,
    stream: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_bytes: Optional[Callable[[int], None]] = None,
) -> str:
    """
    Hash a binary stream to completion.

    Args:
        algorithm: Algorithm to use
        stream: Readable binary stream, consumed until EOF
        chunk_size: Target read size in bytes
        on_bytes: Optional callback(bytes_in_chunk) after each read

    Returns:
        Lowercase hex digest

    Raises:
        OSError: Propagated from stream.read()
    """
    digest = new_digest(algorithm)
    size = read_size(digest, chunk_size)

    for chunk in iter(lambda: stream.read(size), b""):
        digest.write(chunk)
        if on_bytes:
            on_bytes(len(chunk))

    return digest.finalize()


def digest_bytes(algorithm: ChecksumAlgorithm, data: bytes) -> str:
    """Quick single-shot digest of in-memory data."""
    digest = new_digest(algorithm)
    digest.write(data)
    return digest.finalize()
