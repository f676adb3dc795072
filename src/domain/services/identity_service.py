from __future__ import annotations

import uuid


def allocate_identity() -> str:
    """Return a new opaque image identity (128 random bits, hex, no dashes)."""
    return uuid.uuid4().hex
