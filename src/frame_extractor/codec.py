"""Hex/base64 → bytes conversion at the request boundary."""

from __future__ import annotations
import base64
import binascii

from .types import DecodeError

ENCODINGS = ("hex", "base64")


def decode(text: str, encoding: str = "hex") -> bytes:
    """Decode ``text`` using ``encoding`` ("hex" or "base64", case-insensitive)."""
    enc = encoding.strip().lower()
    if enc == "hex":
        return decode_hex(text)
    if enc == "base64":
        return decode_base64(text)
    raise DecodeError(f"Invalid encoding type {encoding!r}. Use 'hex' or 'base64'")


def decode_hex(text: str) -> bytes:
    """Decode hex digits, ignoring whitespace.  ``"01 48 45"`` and ``"014845"`` agree."""
    cleaned = "".join(text.split())
    if len(cleaned) % 2:
        raise DecodeError("Invalid hex encoding: odd number of digits")
    try:
        return bytes.fromhex(cleaned)
    except ValueError as e:
        raise DecodeError(f"Invalid hex encoding: {e}") from None


def decode_base64(text: str) -> bytes:
    """Decode standard-alphabet base64; bad padding or characters fail."""
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 encoding: {e}") from None


def encode_hex(data: bytes) -> str:
    """Upper-case, space separated: ``b"\\x01H"`` → ``"01 48"``."""
    return data.hex(" ").upper()
