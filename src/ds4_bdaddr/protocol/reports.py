"""Byte layout of the DualShock 4 pairing feature reports.

Read report (GET_REPORT, ID 0x12), 16 bytes::

    +--------+-----------------+---------+-----------------------+
    | 0      | 1..6            | 7..9    | 10..15                |
    | opaque | controller UID  | opaque  | paired host address   |
    +--------+-----------------+---------+-----------------------+

Write report (SET_REPORT, ID 0x13), 23 bytes::

    +-----------+-----------------------+-------------------------+
    | 0         | 1..6                  | 7..22                   |
    | 0x13      | new host address      | fixed trailer (16 B)    |
    +-----------+-----------------------+-------------------------+

Both addresses are stored in wire order (least-significant byte first).
The trailer is opaque key material and is sent as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

from .address import ADDRESS_LENGTH, format_address, from_wire


class RequestType(IntEnum):
    """bmRequestType values for class requests to interface 0."""

    CLASS_INTERFACE_IN = 0xA1  # USB_DIR_IN | USB_TYPE_CLASS | USB_RECIP_INTERFACE
    CLASS_INTERFACE_OUT = 0x21  # USB_DIR_OUT | USB_TYPE_CLASS | USB_RECIP_INTERFACE


class HIDRequest(IntEnum):
    """HID class bRequest codes."""

    GET_REPORT = 0x01
    SET_REPORT = 0x09


class ReportID(IntEnum):
    PAIRING_INFO = 0x12
    SET_PAIRING = 0x13


FEATURE_REPORT_TYPE = 0x03
HID_INTERFACE = 0

READ_REPORT_SIZE = 16
WRITE_REPORT_TRAILER = bytes([
    0x56, 0xE8, 0x81, 0x38, 0x08, 0x06, 0x51, 0x41,
    0xC0, 0x7F, 0x12, 0xAA, 0xD9, 0x66, 0x3C, 0xCE,
])
WRITE_REPORT_SIZE = 1 + ADDRESS_LENGTH + len(WRITE_REPORT_TRAILER)

UID_OFFSET = 1
PAIRED_ADDRESS_OFFSET = 10


@dataclass(frozen=True)
class PairingInfo:
    """Addresses read from report 0x12, in canonical printed form."""

    controller_uid: str
    paired_address: str


def report_value(report_id: int) -> int:
    """wValue for a feature report: report type in the high byte, ID in the low."""
    return (FEATURE_REPORT_TYPE << 8) | report_id


def parse_read_report(data: Sequence[int]) -> PairingInfo:
    """Extract the controller UID and paired host address from report 0x12.

    Raises:
        ValueError: If fewer than 16 bytes are given.
    """
    if len(data) < READ_REPORT_SIZE:
        raise ValueError(
            f"Pairing report must be {READ_REPORT_SIZE} bytes, got {len(data)}"
        )
    raw = bytes(data)
    uid = from_wire(raw[UID_OFFSET : UID_OFFSET + ADDRESS_LENGTH])
    paired = from_wire(raw[PAIRED_ADDRESS_OFFSET : PAIRED_ADDRESS_OFFSET + ADDRESS_LENGTH])
    return PairingInfo(
        controller_uid=format_address(uid),
        paired_address=format_address(paired),
    )


def build_write_report(wire_address: Sequence[int]) -> bytes:
    """Build report 0x13 for a wire-order host address.

    Raises:
        ValueError: If the address is not 6 values in 0-255.
    """
    if len(wire_address) != ADDRESS_LENGTH:
        raise ValueError(
            f"Address must be {ADDRESS_LENGTH} bytes, got {len(wire_address)}"
        )
    if any(not 0 <= b <= 0xFF for b in wire_address):
        raise ValueError(f"Address byte out of range: {list(wire_address)}")

    return bytes([ReportID.SET_PAIRING]) + bytes(wire_address) + WRITE_REPORT_TRAILER
