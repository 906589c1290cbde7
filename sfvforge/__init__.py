"""sfvforge - Create and verify SFV-style checksum manifests.

Supports CRC32, MD5, SHA-1 and SHA-256 manifest lines.
"""

__version__ = "1.0.0"

# Replaced by the release build with the short commit hash.
__commit__ = "unknown"

__all__ = ["__version__", "__commit__"]
