"""Tests for the pairing protocol client."""

import asyncio

import pytest

from ds4_bdaddr.errors import TransferError
from ds4_bdaddr.protocol.client import read_paired_address, write_paired_address
from ds4_bdaddr.protocol.reports import WRITE_REPORT_TRAILER


class FakeHandle:
    """Records control transfers and replays a canned response."""

    def __init__(self, response=b"", error=None):
        self.response = response
        self.error = error
        self.calls = []

    def control_transfer(self, bm_request_type, b_request, w_value, w_index, data_or_length):
        self.calls.append((bm_request_type, b_request, w_value, w_index, data_or_length))
        if self.error is not None:
            raise self.error
        if isinstance(data_or_length, int):
            return self.response
        return len(data_or_length)


def _read_report(uid: bytes, paired: bytes) -> bytes:
    return bytes([0x12]) + uid + bytes(3) + paired


def test_read_issues_get_report():
    """Reading sends GET_REPORT for feature report 0x12."""
    handle = FakeHandle(response=bytes(16))
    asyncio.run(read_paired_address(handle))
    assert handle.calls == [(0xA1, 0x01, 0x0312, 0x0000, 16)]


def test_read_extracts_both_addresses():
    """The UID and paired address come back in printed order."""
    handle = FakeHandle(
        response=_read_report(
            bytes([0x06, 0x05, 0x04, 0x03, 0x02, 0x01]),
            bytes([0x55, 0x44, 0x33, 0x22, 0x11, 0x00]),
        )
    )
    info = asyncio.run(read_paired_address(handle))
    assert info.controller_uid == "01:02:03:04:05:06"
    assert info.paired_address == "00:11:22:33:44:55"


def test_read_accepts_array_response():
    """pyusb hands back array('B') rather than bytes."""
    from array import array

    handle = FakeHandle(response=array("B", [0] * 10 + [1, 2, 3, 4, 5, 6]))
    info = asyncio.run(read_paired_address(handle))
    assert info.paired_address == "06:05:04:03:02:01"


def test_read_rejects_byte_count_result():
    """An IN transfer must hand back data, not a byte count."""
    handle = FakeHandle(response=16)
    with pytest.raises(TransferError, match="instead of data"):
        asyncio.run(read_paired_address(handle))


def test_read_rejects_missing_result():
    """A handle returning nothing is a failed read, not an all-zero report."""
    handle = FakeHandle(response=None)
    with pytest.raises(TransferError, match="instead of data"):
        asyncio.run(read_paired_address(handle))


def test_read_short_response():
    """Fewer than 16 bytes is a transfer error."""
    handle = FakeHandle(response=bytes(8))
    with pytest.raises(TransferError, match="Short read"):
        asyncio.run(read_paired_address(handle))


def test_read_transfer_error_propagates():
    """Transfer errors propagate after a single attempt."""
    handle = FakeHandle(error=TransferError("Pipe error"))
    with pytest.raises(TransferError, match="Pipe error"):
        asyncio.run(read_paired_address(handle))
    assert len(handle.calls) == 1


def test_read_wraps_os_error():
    """Raw backend I/O errors surface as TransferError with their text."""
    handle = FakeHandle(error=OSError(13, "Access denied"))
    with pytest.raises(TransferError, match="Access denied") as excinfo:
        asyncio.run(read_paired_address(handle))
    assert isinstance(excinfo.value.__cause__, OSError)


def test_write_issues_set_report():
    """Writing sends SET_REPORT 0x13 with address and trailer."""
    handle = FakeHandle()
    wire = bytes([0x55, 0x44, 0x33, 0x22, 0x11, 0x00])
    result = asyncio.run(write_paired_address(handle, wire))

    assert result is None
    assert len(handle.calls) == 1
    bm_request_type, b_request, w_value, w_index, payload = handle.calls[0]
    assert (bm_request_type, b_request, w_value, w_index) == (0x21, 0x09, 0x0313, 0x0000)
    assert payload == bytes([0x13]) + wire + WRITE_REPORT_TRAILER


def test_write_rejects_bad_address_before_transfer():
    """A malformed address never reaches the device."""
    handle = FakeHandle()
    with pytest.raises(ValueError):
        asyncio.run(write_paired_address(handle, bytes(4)))
    assert handle.calls == []


def test_write_transfer_error_propagates():
    """Write failures propagate after a single attempt."""
    handle = FakeHandle(error=TransferError("No such device"))
    with pytest.raises(TransferError, match="No such device"):
        asyncio.run(write_paired_address(handle, bytes(6)))
    assert len(handle.calls) == 1
