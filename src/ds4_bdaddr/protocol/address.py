"""Conversion between printed Bluetooth addresses and controller byte order.

Addresses are printed most-significant byte first (``AA:BB:CC:DD:EE:FF``).
The controller stores them the other way round, so the wire form of an
address is its canonical bytes reversed.
"""

from __future__ import annotations

import string
from typing import Sequence

from ..errors import InvalidFormat

ADDRESS_LENGTH = 6
SEPARATORS = ":-"

_HEX_DIGITS = frozenset(string.hexdigits)


def to_wire(canonical: Sequence[int]) -> bytes:
    """Reverse canonical-order address bytes into controller order."""
    return bytes(reversed(bytes(canonical)))


def from_wire(wire: Sequence[int]) -> bytes:
    """Reverse controller-order address bytes into canonical order."""
    return bytes(reversed(bytes(wire)))


def parse_address(text: str) -> bytes:
    """Parse a printed address into 6 wire-order bytes.

    Accepts ``00:11:22:33:44:55``, ``00-11-22-33-44-55`` and
    ``001122334455``, in either case.

    Raises:
        InvalidFormat: If the text is not 12 hex digits once ``:`` and
            ``-`` are removed.
    """
    if not isinstance(text, str):
        raise InvalidFormat(f"Address must be a string, got {type(text).__name__}")

    cleaned = text.translate({ord(c): None for c in SEPARATORS})
    if len(cleaned) != ADDRESS_LENGTH * 2:
        raise InvalidFormat(
            f"Invalid address {text!r}: expected 12 hex digits, got {len(cleaned)}"
        )
    if not _HEX_DIGITS.issuperset(cleaned):
        raise InvalidFormat(f"Invalid address {text!r}: non-hex characters")

    canonical = bytes.fromhex(cleaned)
    return to_wire(canonical)


def format_address(data: Sequence[int]) -> str:
    """Render 6 byte values as ``AA:BB:CC:DD:EE:FF``, in the order given."""
    if len(data) != ADDRESS_LENGTH:
        raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(data)}")
    if any(not 0 <= b <= 0xFF for b in data):
        raise ValueError(f"Address byte out of range: {list(data)}")
    return ":".join(f"{b:02X}" for b in data)
