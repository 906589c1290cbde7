"""
Tests for the Manifest Writer.

Test Strategy
-------------
- Header layout with injected build identity and a fixed clock
- Only CHECKSUM_OK entries are written, in input order
- Write failures surface as ManifestWriteError carrying the output path
- Lines that would not parse back are logged as warnings

Organization
------------
- TestFormatting: format_timestamp and format_entry
- TestManifestWriter: ManifestWriter to streams and files
"""

import io
from datetime import datetime, timedelta, timezone

import pytest

from sfvforge.checksum import writer as writer_module
from sfvforge.checksum.models import ChecksumAlgorithm, ChecksumEntry, EntryStatus
from sfvforge.checksum.writer import (
    BuildInfo,
    ManifestWriter,
    format_entry,
    format_timestamp,
)
from sfvforge.core.exceptions import ManifestWriteError

MOMENT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _entry(
    filename: str,
    digest: str,
    algorithm: ChecksumAlgorithm = ChecksumAlgorithm.CRC32,
) -> ChecksumEntry:
    entry = ChecksumEntry(algorithm=algorithm, filename=filename)
    entry.advance(EntryStatus.OK)
    entry.record_digest(digest)
    return entry


def _missing(filename: str) -> ChecksumEntry:
    entry = ChecksumEntry(algorithm=ChecksumAlgorithm.CRC32, filename=filename)
    entry.advance(EntryStatus.NOT_FOUND)
    return entry


# ============================================================================
# Test Classes
# ============================================================================


class TestFormatting:
    """Tests for formatting helpers."""

    def test_timestamp_utc(self):
        """Test RFC 3339 rendering in UTC."""
        assert format_timestamp(MOMENT) == "2024-01-02T03:04:05Z"

    def test_timestamp_converts_offset(self):
        """Test non-UTC moments are converted to UTC."""
        local = datetime(2024, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(local) == "2024-01-02T03:04:05Z"

    def test_timestamp_default_now(self):
        """Test the default is the current UTC time."""
        stamp = format_timestamp()

        assert stamp.endswith("Z")
        assert len(stamp) == len("2024-01-02T03:04:05Z")

    @pytest.mark.parametrize(
        "algorithm,digest,expected",
        [
            (ChecksumAlgorithm.CRC32, "414fa339", "fox.txt 414fa339"),
            (
                ChecksumAlgorithm.MD5,
                "9e107d9d372bb6826bd81d3542a419d6",
                "MD5 (fox.txt) = 9e107d9d372bb6826bd81d3542a419d6",
            ),
            (
                ChecksumAlgorithm.SHA1,
                "2fd4e1c67a2d28fced849ee1bb76e7391b93eb12",
                "2fd4e1c67a2d28fced849ee1bb76e7391b93eb12  fox.txt",
            ),
        ],
    )
    def test_format_entry(self, algorithm, digest, expected):
        """Test each algorithm's line layout."""
        assert format_entry(_entry("fox.txt", digest, algorithm)) == expected


class TestManifestWriter:
    """Tests for ManifestWriter."""

    def test_header(self):
        """Test the generated-by header line."""
        writer = ManifestWriter(BuildInfo("sfvforge", "1.2.3", "abc1234"))

        assert writer.header(MOMENT) == (
            "; Generated by sfvforge version 1.2.3(abc1234) at 2024-01-02T03:04:05Z"
        )

    def test_default_build_info(self):
        """Test defaults when no build identity is injected."""
        writer = ManifestWriter()

        assert writer.header(MOMENT).startswith(
            "; Generated by sfvforge version unknown(unknown) at "
        )

    def test_write_stream_skips_failed(self):
        """Test only CHECKSUM_OK entries are written, in order."""
        entries = [
            _entry("a.bin", "00000001"),
            _missing("gone.bin"),
            _entry("b.bin", "00000002"),
        ]
        out = io.StringIO()

        written = ManifestWriter().write_stream(entries, out, MOMENT)

        lines = out.getvalue().splitlines()
        assert written == 2
        assert lines[0].startswith("; Generated by")
        assert lines[1:] == ["a.bin 00000001", "b.bin 00000002"]
        assert out.getvalue().endswith("\n")

    def test_write_stream_no_entries(self):
        """Test a header-only manifest when nothing hashed."""
        out = io.StringIO()

        written = ManifestWriter().write_stream([_missing("gone.bin")], out, MOMENT)

        assert written == 0
        assert out.getvalue().count("\n") == 1

    def test_write_to_file(self, temp_dir):
        """Test writing to a path."""
        output = temp_dir / "out.sfv"

        written = ManifestWriter(BuildInfo("sfvforge", "1.0.0", "deadbee")).write(
            [_entry("a.bin", "00000001")], output, MOMENT
        )

        assert written == 1
        assert output.read_text(encoding="utf-8") == (
            "; Generated by sfvforge version 1.0.0(deadbee) at 2024-01-02T03:04:05Z\n"
            "a.bin 00000001\n"
        )

    def test_write_to_stdout(self, capsys):
        """Test None writes to standard output."""
        ManifestWriter().write([_entry("a.bin", "00000001")], None, MOMENT)

        captured = capsys.readouterr()
        assert "a.bin 00000001\n" in captured.out

    def test_write_missing_directory(self, temp_dir):
        """Test an uncreatable output raises ManifestWriteError."""
        with pytest.raises(ManifestWriteError) as exc_info:
            ManifestWriter().write(
                [_entry("a.bin", "00000001")], temp_dir / "no" / "out.sfv"
            )

        assert exc_info.value.error_code == "SFV-MAN-002"

    def test_write_stream_failure(self):
        """Test a failing stream raises ManifestWriteError."""

        class FullDisk(io.StringIO):
            def write(self, s):
                raise OSError(28, "No space left on device")

        with pytest.raises(ManifestWriteError) as exc_info:
            ManifestWriter().write_stream([_entry("a.bin", "00000001")], FullDisk())

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_write_error_names_output(self, temp_dir):
        """Test the error keeps the output path for display."""
        output = temp_dir / "no" / "out.sfv"

        with pytest.raises(ManifestWriteError) as exc_info:
            ManifestWriter().write([_entry("a.bin", "00000001")], output)

        assert exc_info.value.path == output
        assert "out.sfv" in str(exc_info.value)

    def test_warns_on_unparseable_name(self, monkeypatch):
        """Test a subdirectory path is written but logged as unreadable."""
        warnings = []
        monkeypatch.setattr(
            writer_module.logger,
            "warning",
            lambda message, **kwargs: warnings.append((message, kwargs)),
        )
        out = io.StringIO()

        written = ManifestWriter().write_stream(
            [_entry("sub/a.bin", "00000001"), _entry("b.bin", "00000002")],
            out,
            MOMENT,
        )

        assert written == 2
        assert "sub/a.bin 00000001\n" in out.getvalue()
        assert warnings == [
            ("Manifest line will not parse back", {"file": "sub/a.bin"})
        ]
