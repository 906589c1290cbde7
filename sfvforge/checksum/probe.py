"""
File probe: existence, type and size of a path before hashing.

Never raises for filesystem problems; every outcome is an EntryStatus.
"""

import os
import stat
from typing import NamedTuple, Union

from sfvforge.checksum.models import ChecksumEntry, EntryStatus

PathLike = Union[str, os.PathLike]


class ProbeResult(NamedTuple):
    status: EntryStatus
    size: int = 0


def probe_file(path: PathLike) -> ProbeResult:
    """
    Open and stat a path.

    - open fails              -> NOT_FOUND
    - stat fails              -> STAT_FAILED
    - path is a directory     -> NOT_A_FILE
    - anything else           -> OK with the byte size

    The descriptor is closed before returning; the hash stage reopens the file.
    """
    try:
        fd = os.open(path, os.O_RDONLY)
    except IsADirectoryError:
        # Platforms that refuse to open directories read-only
        return ProbeResult(EntryStatus.NOT_A_FILE)
    except (OSError, ValueError):
        return ProbeResult(EntryStatus.NOT_FOUND)

    try:
        info = os.fstat(fd)
    except OSError:
        return ProbeResult(EntryStatus.STAT_FAILED)
    finally:
        os.close(fd)

    if stat.S_ISDIR(info.st_mode):
        return ProbeResult(EntryStatus.NOT_A_FILE)

    return ProbeResult(EntryStatus.OK, info.st_size)


def apply_probe(entry: ChecksumEntry, path: PathLike) -> ProbeResult:
    """Probe path and advance entry to the resulting status."""
    result = probe_file(path)
    entry.advance(result.status)
    entry.file_size = result.size
    return result
