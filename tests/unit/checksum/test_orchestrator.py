"""
Tests for the Create and Verify Workflows.

Test Strategy
-------------
- create -> write -> verify round trips for every algorithm
- Per-file failures become statuses, never exceptions
- Progress sink sees start/update/finish with the right byte counts
- Uses the workdir fixture since manifest filenames are bare names

Organization
------------
- TestCreate: ChecksumOrchestrator.create
- TestVerify: ChecksumOrchestrator.verify
- TestProgress: ProgressSink notifications
- TestConvenienceFunctions: module-level create/verify/write_manifest
"""

import hashlib
import zlib

import pytest

from sfvforge.checksum import orchestrator as orchestrator_module
from sfvforge.checksum.models import ChecksumAlgorithm, EntryStatus
from sfvforge.checksum.orchestrator import (
    ChecksumOrchestrator,
    create,
    verify,
    write_manifest,
)
from sfvforge.checksum.writer import BuildInfo
from sfvforge.core.exceptions import ManifestReadError, UnknownAlgorithmError


class FakeProgress:
    """Records ProgressSink calls."""

    def __init__(self):
        self.started_with = None
        self.updates = []
        self.finished = 0

    def start(self, total):
        self.started_with = total

    def update(self, advance):
        self.updates.append(advance)

    def finish(self):
        self.finished += 1


# ============================================================================
# Test Classes
# ============================================================================


class TestCreate:
    """Tests for ChecksumOrchestrator.create."""

    def test_create_hashes_files(self, sample_files):
        """Test every file gets a digest in input order."""
        names = ["fox.txt", "digits.dat", "large.bin"]

        entries = ChecksumOrchestrator().create(ChecksumAlgorithm.SHA256, names)

        assert [e.filename for e in entries] == names
        for entry in entries:
            assert entry.status is EntryStatus.CHECKSUM_OK
            assert entry.computed_digest == hashlib.sha256(
                sample_files[entry.filename]
            ).hexdigest()
            assert entry.file_size == len(sample_files[entry.filename])

    def test_create_crc32_empty_file(self, sample_files):
        """Test an empty file hashes to the empty digest."""
        entries = ChecksumOrchestrator().create(ChecksumAlgorithm.CRC32, ["empty.bin"])

        assert entries[0].status is EntryStatus.CHECKSUM_OK
        assert entries[0].computed_digest == "00000000"

    def test_create_small_chunks(self, sample_files):
        """Test chunk size does not change the digest."""
        entries = ChecksumOrchestrator(chunk_size=1).create(
            ChecksumAlgorithm.CRC32, ["large.bin"]
        )

        expected = f"{zlib.crc32(sample_files['large.bin']):08x}"
        assert entries[0].computed_digest == expected

    def test_create_missing_and_directory(self, workdir):
        """Test missing paths and directories are reported, not hashed."""
        (workdir / "subdir").mkdir()
        (workdir / "ok.bin").write_bytes(b"abc")

        entries = ChecksumOrchestrator().create(
            ChecksumAlgorithm.MD5, ["missing.bin", "subdir", "ok.bin"]
        )

        assert [e.status for e in entries] == [
            EntryStatus.NOT_FOUND,
            EntryStatus.NOT_A_FILE,
            EntryStatus.CHECKSUM_OK,
        ]
        assert entries[0].computed_digest == ""
        assert entries[2].computed_digest == hashlib.md5(b"abc").hexdigest()

    def test_create_unknown_algorithm(self, workdir):
        """Test UNKNOWN is rejected before touching any file."""
        progress = FakeProgress()

        with pytest.raises(UnknownAlgorithmError):
            ChecksumOrchestrator(progress=progress).create(
                ChecksumAlgorithm.UNKNOWN, ["whatever.bin"]
            )

        assert progress.started_with is None

    def test_create_no_files(self):
        """Test an empty file list gives no entries."""
        assert ChecksumOrchestrator().create(ChecksumAlgorithm.SHA1, []) == []

    def test_invalid_chunk_size(self):
        """Test non-positive chunk sizes are rejected."""
        with pytest.raises(ValueError):
            ChecksumOrchestrator(chunk_size=0)

    def test_file_vanishes_before_hash(self, workdir):
        """Test a file removed after probing ends CHECKSUM_FAILED."""
        (workdir / "brief.bin").write_bytes(b"now you see me")
        orch = ChecksumOrchestrator()

        original_hash_entry = orch.hash_entry

        def delete_then_hash(entry):
            (workdir / entry.filename).unlink()
            original_hash_entry(entry)

        orch.hash_entry = delete_then_hash
        result = orch.create(ChecksumAlgorithm.SHA1, ["brief.bin"])

        assert result[0].status is EntryStatus.CHECKSUM_FAILED
        assert result[0].computed_digest == ""

    def test_read_error_marks_failed(self, sample_files, monkeypatch):
        """Test a read error mid-hash ends CHECKSUM_FAILED."""

        def broken_digest_stream(*args, **kwargs):
            raise OSError(5, "Input/output error")

        monkeypatch.setattr(
            orchestrator_module, "digest_stream", broken_digest_stream
        )

        entries = ChecksumOrchestrator().create(ChecksumAlgorithm.MD5, ["fox.txt"])

        assert entries[0].status is EntryStatus.CHECKSUM_FAILED
        assert entries[0].file_size == len(sample_files["fox.txt"])

    def test_hash_entry_skips_non_ok(self, workdir):
        """Test hash_entry leaves failed entries untouched."""
        entries = ChecksumOrchestrator().create(ChecksumAlgorithm.MD5, ["nope.bin"])
        entry = entries[0]

        ChecksumOrchestrator().hash_entry(entry)

        assert entry.status is EntryStatus.NOT_FOUND


class TestVerify:
    """Tests for ChecksumOrchestrator.verify."""

    @pytest.mark.parametrize(
        "algorithm",
        [
            ChecksumAlgorithm.CRC32,
            ChecksumAlgorithm.MD5,
            ChecksumAlgorithm.SHA1,
            ChecksumAlgorithm.SHA256,
        ],
    )
    def test_round_trip(self, sample_files, workdir, algorithm):
        """Test a freshly created manifest verifies clean."""
        names = sorted(sample_files)
        manifest = workdir / "check.sfv"

        entries = create(algorithm, names)
        write_manifest(entries, manifest, BuildInfo("sfvforge", "1.0.0", "test"))
        verified = verify(manifest)

        assert [e.filename for e in verified] == names
        assert all(e.status is EntryStatus.CHECKSUM_OK for e in verified)
        assert all(e.algorithm is algorithm for e in verified)
        assert [e.expected_digest for e in verified] == [
            e.computed_digest for e in entries
        ]

    def test_mismatch(self, workdir):
        """Test a wrong digest demotes to CHECKSUM_MISMATCH."""
        (workdir / "hello.txt").write_bytes(b"hello")
        manifest = workdir / "check.sfv"
        manifest.write_text("hello.txt 00000000\n", encoding="utf-8")

        entries = ChecksumOrchestrator().verify(manifest)

        assert entries[0].status is EntryStatus.CHECKSUM_MISMATCH
        assert entries[0].computed_digest == "3610a686"
        assert entries[0].expected_digest == "00000000"

    def test_uppercase_expected_digest(self, workdir):
        """Test uppercase digests in a manifest still verify."""
        (workdir / "hello.txt").write_bytes(b"hello")
        manifest = workdir / "check.sfv"
        manifest.write_text("hello.txt 3610A686\n", encoding="utf-8")

        entries = ChecksumOrchestrator().verify(manifest)

        assert entries[0].status is EntryStatus.CHECKSUM_OK

    def test_modified_file_detected(self, sample_files, workdir):
        """Test changing a file after creation is caught."""
        manifest = workdir / "check.sfv"
        write_manifest(create(ChecksumAlgorithm.SHA1, ["fox.txt", "digits.dat"]), manifest)
        (workdir / "fox.txt").write_bytes(b"The quick brown fox jumps over the lazy cog")

        entries = verify(manifest)

        assert entries[0].status is EntryStatus.CHECKSUM_MISMATCH
        assert entries[1].status is EntryStatus.CHECKSUM_OK

    def test_missing_file_in_manifest(self, workdir):
        """Test files listed but absent are NOT_FOUND."""
        manifest = workdir / "check.sfv"
        manifest.write_text("gone.bin 12345678\n", encoding="utf-8")

        entries = ChecksumOrchestrator().verify(manifest)

        assert entries[0].status is EntryStatus.NOT_FOUND
        assert not entries[0].passed

    def test_verify_is_repeatable(self, sample_files, workdir):
        """Test verifying twice gives identical results."""
        manifest = workdir / "check.sfv"
        write_manifest(create(ChecksumAlgorithm.MD5, ["fox.txt"]), manifest)

        first = [e.to_dict() for e in verify(manifest)]
        second = [e.to_dict() for e in verify(manifest)]

        assert first == second

    def test_subdirectory_path_not_read_back(self, workdir):
        """Test a created path with a separator is written but not verified."""
        (workdir / "sub").mkdir()
        (workdir / "sub" / "a.bin").write_bytes(b"hello")
        manifest = workdir / "check.sha1"

        entries = create(ChecksumAlgorithm.SHA1, ["sub/a.bin"])
        written = write_manifest(entries, manifest)
        verified = verify(manifest)

        assert entries[0].passed
        assert written == 1
        assert "sub/a.bin" in manifest.read_text(encoding="utf-8")
        assert verified == []

    def test_missing_manifest_raises(self, workdir):
        """Test an unreadable manifest is a hard error."""
        with pytest.raises(ManifestReadError):
            ChecksumOrchestrator().verify(workdir / "absent.sfv")


class TestProgress:
    """Tests for ProgressSink notifications."""

    def test_create_progress(self, sample_files, workdir):
        """Test start gets total OK bytes and updates sum to it."""
        progress = FakeProgress()
        names = ["fox.txt", "large.bin", "missing.bin"]
        expected_total = len(sample_files["fox.txt"]) + len(sample_files["large.bin"])

        ChecksumOrchestrator(chunk_size=4096, progress=progress).create(
            ChecksumAlgorithm.SHA256, names
        )

        assert progress.started_with == expected_total
        assert sum(progress.updates) == expected_total
        assert progress.finished == 1

    def test_verify_progress(self, sample_files, workdir):
        """Test verify reports the manifest's OK bytes."""
        manifest = workdir / "check.sfv"
        write_manifest(create(ChecksumAlgorithm.CRC32, ["digits.dat"]), manifest)
        progress = FakeProgress()

        ChecksumOrchestrator(progress=progress).verify(manifest)

        assert progress.started_with == 9
        assert sum(progress.updates) == 9
        assert progress.finished == 1

    def test_finish_called_on_error(self, sample_files, monkeypatch):
        """Test finish() runs even when hashing blows up."""
        progress = FakeProgress()
        orch = ChecksumOrchestrator(progress=progress)

        def explode(entry):
            raise RuntimeError("boom")

        monkeypatch.setattr(orch, "hash_entry", explode)

        with pytest.raises(RuntimeError):
            orch.create(ChecksumAlgorithm.MD5, ["fox.txt"])

        assert progress.finished == 1


class TestConvenienceFunctions:
    """Tests for module-level helpers."""

    def test_create_with_progress(self, sample_files):
        """Test create() forwards the progress sink."""
        progress = FakeProgress()

        entries = create(ChecksumAlgorithm.MD5, ["fox.txt"], progress=progress)

        assert entries[0].computed_digest == "9e107d9d372bb6826bd81d3542a419d6"
        assert progress.finished == 1

    def test_write_manifest_skips_failures(self, sample_files, workdir):
        """Test write_manifest returns lines written."""
        entries = create(ChecksumAlgorithm.CRC32, ["fox.txt", "missing.bin"])

        written = write_manifest(entries, workdir / "out.sfv")

        assert written == 1
        assert "fox.txt 414fa339" in (workdir / "out.sfv").read_text(encoding="utf-8")
