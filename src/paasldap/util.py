"""General utility functions."""

from __future__ import annotations

import base64
import os

__all__ = ["random_128_bits"]


def random_128_bits() -> str:
    """Generate random 128 bits encoded in base64 without padding."""
    return base64.urlsafe_b64encode(os.urandom(16)).decode().rstrip("=")
