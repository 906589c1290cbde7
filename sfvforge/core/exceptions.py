"""
Centralized Exception Hierarchy for sfvforge.

Every error raised by sfvforge inherits from SfvForgeError, so callers can
catch one type for any hard failure.

Per-file outcomes (missing file, read failure, digest mismatch) are NOT
exceptions. They are recorded as EntryStatus values on each ChecksumEntry.
Exceptions are reserved for failures that abort a whole operation.

Each exception includes:
- error_code: Unique identifier for documentation lookup (e.g., "SFV-MAN-002")
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue

Exception Hierarchy
-------------------
    SfvForgeError (base)
    ├── ValidationError
    │   ├── UnknownAlgorithmError
    │   └── ConfigValidationError
    ├── ManifestError
    │   ├── ManifestReadError
    │   └── ManifestWriteError
    └── StatusTransitionError

Usage
-----
    from sfvforge.core.exceptions import ManifestWriteError, SfvForgeError

    try:
        writer.write(entries, output_path)
    except ManifestWriteError as e:
        logger.error(f"Could not write manifest: {e}")
"""

import builtins
from typing import Any, List, Optional


def get_root_cause(exc: BaseException) -> BaseException:
    """Extract the root cause from a chain of exceptions.

    Follows nested __cause__ and __context__ attributes to find
    the original error that started the chain.

    Args:
        exc: Exception to analyze

    Returns:
        Root cause exception (may be the same as input)
    """
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        # Prefer explicit cause over implicit context
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class SfvForgeError(Exception):
    """
    Base exception for all sfvforge errors.

    Example
    -------
        try:
            entries = verify(manifest_path)
        except SfvForgeError as e:
            logger.error(f"Verification aborted: {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    # Default error info - subclasses should override
    error_code: str = "SFV-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize SfvForgeError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "SFV-MAN-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(message)

        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(SfvForgeError):
    """
    Raised when validation fails.

    This can occur when:
    - An algorithm selector is not recognised
    - Configuration values are out of range
    """

    error_code = "SFV-VAL-000"
    why_it_happened = "Validation failed for input data or configuration"
    how_to_fix = [
        "Check the error message for specific validation failures",
        "Review the expected format or value constraints",
    ]


class UnknownAlgorithmError(ValidationError):
    """
    Raised when an algorithm selector is not one of the supported names.

    Example
    -------
        ChecksumAlgorithm.require("sha512")
        # Raises: UnknownAlgorithmError("Unknown algorithm: sha512")
    """

    error_code = "SFV-VAL-001"
    why_it_happened = (
        "Only crc32, md5, sha1 and sha256 manifests can be created or verified"
    )
    how_to_fix = [
        "Pass one of: crc32, md5, sha1, sha256",
        "Algorithm names are lowercase (use 'sha1', not 'SHA1')",
    ]

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Unknown algorithm: {algorithm}")
        self.algorithm = algorithm


class ConfigValidationError(ValidationError):
    """
    Raised when configuration validation fails.

    Attributes
    ----------
    field : str
        The configuration field that failed validation
    value : any
        The invalid value
    """

    error_code = "SFV-VAL-002"
    why_it_happened = (
        "A configuration value is invalid. "
        "The sfvforge.yaml file or an SFVFORGE_* variable may be wrong"
    )
    how_to_fix = [
        "Check sfvforge.yaml for syntax errors",
        "Verify the value type matches what's expected",
        "Unset SFVFORGE_* environment variables to fall back to defaults",
    ]

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


# ============================================================================
# Manifest Exceptions
# ============================================================================


class ManifestError(SfvForgeError):
    """Base exception for manifest input/output failures."""

    error_code = "SFV-MAN-000"
    why_it_happened = "The checksum manifest could not be processed"
    how_to_fix = ["Check that the manifest path is correct and accessible"]

    def __init__(self, message: str, path: Any = None) -> None:
        super().__init__(message)
        self.path = path


class ManifestReadError(ManifestError):
    """
    Raised when the manifest to verify cannot be opened or read.
    """

    error_code = "SFV-MAN-001"
    why_it_happened = "The manifest file could not be opened for reading"
    how_to_fix = [
        "Check that the manifest path is correct",
        "Ensure you have read permission for the manifest",
        "Omit --file to read the manifest from standard input",
    ]


class ManifestWriteError(ManifestError):
    """
    Raised when the manifest output cannot be created or written.

    Writing stops at the first failure; the output may be incomplete.
    """

    error_code = "SFV-MAN-002"
    why_it_happened = "The manifest output could not be created or written"
    how_to_fix = [
        "Check that the output directory exists and is writable",
        "Check free disk space",
        "Omit --file to write the manifest to standard output",
    ]


# ============================================================================
# State Exceptions
# ============================================================================


class StatusTransitionError(SfvForgeError):
    """
    Raised when a ChecksumEntry is moved along an edge its status
    machine does not allow (e.g. out of a terminal failure state).

    This indicates a programming error, not a bad input file.
    """

    error_code = "SFV-STATE-001"
    why_it_happened = "A checksum entry was asked to move to an unreachable status"
    how_to_fix = ["Report the issue with the command line that triggered it"]

    def __init__(self, filename: str, current: Any, requested: Any) -> None:
        super().__init__(
            f"Illegal status transition for {filename}: {current} -> {requested}"
        )
        self.filename = filename
        self.current = current
        self.requested = requested


# ============================================================================
# Error Info Lookup
# ============================================================================


# Mapping from standard exceptions to helpful error info
# Used by ErrorRenderer to provide context for non-sfvforge exceptions
STANDARD_ERROR_INFO: dict[type, dict[str, Any]] = {
    builtins.FileNotFoundError: {
        "error_code": "SFV-FILE-001",
        "why_it_happened": "The specified file or directory could not be found",
        "how_to_fix": [
            "Check that the file path is correct",
            "Ensure you have read permissions for the file",
        ],
    },
    builtins.PermissionError: {
        "error_code": "SFV-FILE-002",
        "why_it_happened": "You don't have permission to access this file or directory",
        "how_to_fix": [
            "Check file permissions: ls -la <file>",
            "Ensure you own the file or have read/write access",
        ],
    },
    OSError: {
        "error_code": "SFV-SYS-001",
        "why_it_happened": "A system-level error occurred",
        "how_to_fix": [
            "Check disk space and permissions",
            "Review system logs for more details",
        ],
    },
}


def get_error_info(exc: BaseException) -> dict[str, Any]:
    """Get helpful error information for any exception.

    Looks up the exception type in STANDARD_ERROR_INFO or extracts
    info from SfvForgeError subclasses.

    Args:
        exc: Exception to get info for

    Returns:
        Dict with error_code, why_it_happened, how_to_fix
    """
    if isinstance(exc, SfvForgeError):
        return {
            "error_code": exc.error_code,
            "why_it_happened": exc.why_it_happened,
            "how_to_fix": exc.how_to_fix,
        }

    exc_type = type(exc)
    if exc_type in STANDARD_ERROR_INFO:
        return STANDARD_ERROR_INFO[exc_type]

    for parent_type, info in STANDARD_ERROR_INFO.items():
        if isinstance(exc, parent_type):
            return info

    return {
        "error_code": "SFV-ERR-999",
        "why_it_happened": "An unexpected error occurred",
        "how_to_fix": [
            "Check the error message for details",
            "Run again with --verbose to see the traceback",
        ],
    }
