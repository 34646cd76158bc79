"""Content fingerprints used to audit file changes."""

from __future__ import annotations

import hashlib


def fingerprint(content: str) -> str:
    """Return the SHA-1 hex digest of ``content`` encoded as UTF-8."""

    return hashlib.sha1(content.encode("utf-8")).hexdigest()


__all__ = ["fingerprint"]
