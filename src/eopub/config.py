"""
eopub - Codec Configuration
===========================

Options shared by the decoder and encoder. Configuration can come from:
- Default values (defined here)
- Keyword arguments
- Environment variables (``PubConfig.from_env()``, used by the CLI)

The library never reads the environment on its own; callers pass a
PubConfig explicitly or get the defaults.
"""

from dataclasses import dataclass
import os

from eopub.pub.numbers import OverflowPolicy

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class PubConfig:
    """
    Configuration for pub encoding and decoding.

    Attributes:
        overflow: What to do with numeric values wider than their field
            (default: WRAP, which logs a warning)
        verify_checksum: Check the stored header checksum when decoding
            (default: False)
        encoding: Text encoding for record names and chants (default: utf-8).
            Undecodable bytes are replaced, never raised.
        version: Version byte written for newly created files (default: 1)
    """

    overflow: OverflowPolicy = OverflowPolicy.WRAP
    verify_checksum: bool = False
    encoding: str = "utf-8"
    version: int = 1

    @classmethod
    def from_env(cls) -> "PubConfig":
        """
        Create a PubConfig from environment variables.

        Environment variables (all optional):
            EOPUB_OVERFLOW: "wrap" or "strict"
            EOPUB_VERIFY_CHECKSUM: 1/true/yes/on to enable
            EOPUB_ENCODING: Python codec name (e.g. "cp1252")
            EOPUB_VERSION: Version byte for new files (0-255)

        Invalid values are ignored and the default is kept.
        """
        config = cls()

        if overflow := os.environ.get("EOPUB_OVERFLOW"):
            try:
                config.overflow = OverflowPolicy.from_name(overflow)
            except ValueError:
                pass  # Ignore invalid values

        if verify := os.environ.get("EOPUB_VERIFY_CHECKSUM"):
            config.verify_checksum = verify.strip().lower() in _TRUE_VALUES

        if encoding := os.environ.get("EOPUB_ENCODING"):
            try:
                "".encode(encoding)
                config.encoding = encoding
            except LookupError:
                pass

        if version := os.environ.get("EOPUB_VERSION"):
            try:
                value = int(version)
            except ValueError:
                value = -1
            if 0 <= value <= 255:
                config.version = value

        return config

    def replace(self, **changes) -> "PubConfig":
        """Copy with some options changed."""
        values = {
            "overflow": self.overflow,
            "verify_checksum": self.verify_checksum,
            "encoding": self.encoding,
            "version": self.version,
        }
        values.update(changes)
        return PubConfig(**values)
