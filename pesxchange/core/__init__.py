"""Core module exports."""

from .security import (
    create_access_token,
    decode_token,
    ALGORITHM,
)

__all__ = [
    "create_access_token",
    "decode_token",
    "ALGORITHM",
]
