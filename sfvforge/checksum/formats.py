"""
Manifest line formats.

One row per algorithm, in parser priority order. Each row both matches a
line and renders one, so written manifests of plain names parse back.

    CRC32    archive.zip 89abcdef
    MD5      MD5 (archive.zip) = 9e107d9d372bb6826bd81d3542a419d6
    SHA-1    <40 hex>  archive.zip
    SHA-256  <64 hex>  archive.zip
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sfvforge.checksum.models import ChecksumAlgorithm

COMMENT_PREFIX = ";"

# ASCII word characters and dots only
_NAME = r"(?P<name>[\w.]+)"
_NAME_PATTERN = re.compile(r"[\w.]+", re.ASCII)


def _hex(length: int) -> str:
    return rf"(?P<digest>[0-9A-Fa-f]{{{length}}})"


@dataclass(frozen=True)
class LineFormat:
    """How one algorithm's manifest line is laid out."""

    algorithm: ChecksumAlgorithm
    pattern: "re.Pattern[str]"
    template: str  # str.format() with {name} and {digest}

    def match(self, line: str) -> Optional[Tuple[str, str]]:
        """Return (filename, digest) if the whole line has this shape."""
        m = self.pattern.fullmatch(line)
        if m is None:
            return None
        return m.group("name"), m.group("digest")

    def render(self, filename: str, digest: str) -> str:
        return self.template.format(name=filename, digest=digest)


LINE_FORMATS: Tuple[LineFormat, ...] = (
    LineFormat(
        ChecksumAlgorithm.CRC32,
        re.compile(rf"{_NAME} {_hex(8)}", re.ASCII),
        "{name} {digest}",
    ),
    LineFormat(
        ChecksumAlgorithm.MD5,
        re.compile(rf"MD5 \({_NAME}\) = {_hex(32)}", re.ASCII),
        "MD5 ({name}) = {digest}",
    ),
    LineFormat(
        ChecksumAlgorithm.SHA1,
        re.compile(rf"{_hex(40)}  {_NAME}", re.ASCII),
        "{digest}  {name}",
    ),
    LineFormat(
        ChecksumAlgorithm.SHA256,
        re.compile(rf"{_hex(64)}  {_NAME}", re.ASCII),
        "{digest}  {name}",
    ),
)

FORMATS_BY_ALGORITHM: Dict[ChecksumAlgorithm, LineFormat] = {
    fmt.algorithm: fmt for fmt in LINE_FORMATS
}


def classify_line(line: str) -> Optional[Tuple[ChecksumAlgorithm, str, str]]:
    """
    Match a manifest line against the formats in priority order.

    Returns:
        (algorithm, filename, digest), or None for comments, empty lines
        and lines matching no format.
    """
    if not line or line.startswith(COMMENT_PREFIX):
        return None

    for fmt in LINE_FORMATS:
        found = fmt.match(line)
        if found is not None:
            filename, digest = found
            return fmt.algorithm, filename, digest
    return None


def is_manifest_filename(filename: str) -> bool:
    """True if filename survives a write/parse round trip unchanged.

    Paths with separators, spaces or non-ASCII letters are written as given
    but no line format reads them back.
    """
    return _NAME_PATTERN.fullmatch(filename) is not None
