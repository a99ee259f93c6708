"""
Canonical keys: parcel keys for duplicate detection, and caller identities.

The parcel key is re-derived the same way on every registration:
  1. Normalise each of the five descriptive fields
     (strip, collapse whitespace, casefold)
  2. Length-prefix each one so "ab"+"c" never collides with "a"+"bc"
  3. SHA-256 the result in fixed field order

"Plot 7 ", "plot  7" and "PLOT 7" therefore describe the same parcel.
"""

from __future__ import annotations

import hashlib
import re

from .models import NULL_IDENTITY

_WHITESPACE = re.compile(r"\s+")
_HEX_ADDRESS = re.compile(r"^0x[0-9a-f]{40}$", re.IGNORECASE)


def normalize_field(value: str) -> str:
    """'  Andheri   West ' → 'andheri west'."""
    return _WHITESPACE.sub(" ", value.strip()).casefold()


def parcel_key(plot_number: str, area: str, district: str, city: str, state: str) -> str:
    """Derive the canonical key for a parcel's descriptive fields.

    Returns:
        64-character SHA-256 hex digest.
    """
    digest = hashlib.sha256()
    for value in (plot_number, area, district, city, state):
        encoded = normalize_field(value).encode("utf-8")
        digest.update(len(encoded).to_bytes(4, "big"))
        digest.update(encoded)
    return digest.hexdigest()


def canonical_identity(identity: str | None) -> str:
    """Canonicalise a caller identity.

    Hex addresses are case-insensitive, so they are lower-cased; any other
    principal is compared exactly once surrounding whitespace is gone.
    Blank or missing identities collapse to the null identity.
    """
    if identity is None:
        return NULL_IDENTITY
    identity = identity.strip()
    if not identity:
        return NULL_IDENTITY
    if _HEX_ADDRESS.match(identity):
        return identity.lower()
    return identity
