"""Read and write the paired host address over USB control transfers.

The handle passed to these functions only needs a blocking
``control_transfer(bm_request_type, b_request, w_value, w_index,
data_or_length)`` method, as provided by
:class:`~ds4_bdaddr.transport.usb_connection.USBConnection`. Each call runs
in a worker thread and is awaited before anything else happens, so at most
one transfer is in flight per handle.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from ..errors import TransferError
from .reports import (
    HID_INTERFACE,
    READ_REPORT_SIZE,
    HIDRequest,
    PairingInfo,
    ReportID,
    RequestType,
    build_write_report,
    parse_read_report,
    report_value,
)

logger = logging.getLogger(__name__)


class ControlTransferHandle(Protocol):
    def control_transfer(
        self,
        bm_request_type: int,
        b_request: int,
        w_value: int,
        w_index: int,
        data_or_length: bytes | int,
    ) -> bytes | int: ...


async def _transfer(
    handle: ControlTransferHandle,
    bm_request_type: int,
    b_request: int,
    w_value: int,
    data_or_length: bytes | int,
):
    try:
        return await asyncio.to_thread(
            handle.control_transfer,
            bm_request_type,
            b_request,
            w_value,
            HID_INTERFACE,
            data_or_length,
        )
    except TransferError:
        raise
    except OSError as e:
        raise TransferError(str(e)) from e


async def read_paired_address(handle: ControlTransferHandle) -> PairingInfo:
    """Fetch report 0x12 and return the controller UID and paired address.

    Raises:
        TransferError: If the transfer fails or returns a short report.
    """
    data = await _transfer(
        handle,
        RequestType.CLASS_INTERFACE_IN,
        HIDRequest.GET_REPORT,
        report_value(ReportID.PAIRING_INFO),
        READ_REPORT_SIZE,
    )
    if data is None or isinstance(data, int):
        raise TransferError(f"Report 0x12 read returned {data!r} instead of data")
    data = bytes(data)
    logger.debug("Report 0x12: %s", data.hex(" "))

    if len(data) < READ_REPORT_SIZE:
        raise TransferError(
            f"Short read of report 0x12: expected {READ_REPORT_SIZE} bytes, got {len(data)}"
        )
    return parse_read_report(data)


async def write_paired_address(
    handle: ControlTransferHandle, wire_address: Sequence[int]
) -> None:
    """Send report 0x13, overwriting the controller's paired host address.

    The controller is not read back afterwards.

    Args:
        handle: Open device handle.
        wire_address: New host address in wire order, as returned by
            :func:`~ds4_bdaddr.protocol.address.parse_address`.

    Raises:
        ValueError: If ``wire_address`` is not 6 bytes.
        TransferError: If the transfer fails.
    """
    report = build_write_report(wire_address)
    logger.debug("Report 0x13: %s", report.hex(" "))

    await _transfer(
        handle,
        RequestType.CLASS_INTERFACE_OUT,
        HIDRequest.SET_REPORT,
        report_value(ReportID.SET_PAIRING),
        report,
    )
