"""Classification of reference-text entries (full text, header, alternate)."""

from __future__ import annotations

from enum import Enum


class LicenseType(Enum):
    """The type of a license entry in a catalog of reference texts."""

    # The canonical text of the license.
    ORIGINAL = "original text"
    # A license header. A license may have more than one.
    HEADER = "license header"
    # An alternate format of the same license (not a variant with different
    # meaning).
    ALTERNATE = "alternate text"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> LicenseType:
        """Look up a member by name, case-insensitively (``"header"``)."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(m.name.lower() for m in cls)
            raise ValueError(
                f"Unknown license type {name!r} (expected one of: {valid})"
            ) from None
