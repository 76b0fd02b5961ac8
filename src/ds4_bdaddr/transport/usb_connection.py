"""USB connection to a DualShock 4 controller.

Supports both ``pyusb`` (preferred) and ``hidapi`` backends. The pairing
reports are HID feature reports on interface 0, reached with class
control transfers on the default endpoint. With ``pyusb`` those transfers
are issued directly; ``hidapi`` only exposes feature report calls, so the
two GET_REPORT/SET_REPORT feature requests are mapped onto those.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import DeviceConfig
from ..errors import DeviceNotFound, TransferError
from ..protocol.reports import (
    FEATURE_REPORT_TYPE,
    HID_INTERFACE,
    HIDRequest,
    RequestType,
)

logger = logging.getLogger(__name__)

TRANSFER_TIMEOUT_MS = 1000


@dataclass
class DeviceInfo:
    """Basic device identification from USB descriptors."""

    vendor_id: int
    product_id: int
    manufacturer: str = ""
    product: str = ""
    backend: str = ""


class USBConnection:
    """Owns the open handle to one controller.

    Usage::

        with USBConnection(DeviceConfig()) as conn:
            data = conn.control_transfer(0xA1, 0x01, 0x0312, 0, 16)

    The handle is closed exactly once, however the block exits.
    """

    def __init__(self, config: DeviceConfig | None = None) -> None:
        self._config = config or DeviceConfig()
        self._device = None
        self._backend: str = ""
        self._connected = False
        self._detached_kernel_driver = False
        self._device_info = DeviceInfo(
            vendor_id=self._config.vendor_id,
            product_id=self._config.product_id,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    def __enter__(self) -> USBConnection:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> DeviceInfo:
        """Open the controller, trying pyusb first, then hidapi.

        Returns:
            DeviceInfo with USB descriptor information.

        Raises:
            DeviceNotFound: If no matching device is present or it cannot
                be opened with any backend.
        """
        last_error: Exception | None = None
        for name, opener in (("pyusb", self._open_pyusb), ("hidapi", self._open_hidapi)):
            try:
                return opener()
            except DeviceNotFound:
                raise
            except Exception as e:
                logger.debug("%s backend failed: %s", name, e)
                last_error = e

        raise DeviceNotFound(
            f"Could not open DualShock 4 controller ({self._config}). "
            f"Ensure the controller is connected over USB and you have permissions. "
            f"Last error: {last_error}"
        ) from last_error

    def _open_pyusb(self) -> DeviceInfo:
        """Open using pyusb + libusb."""
        import usb.core
        import usb.util

        dev = usb.core.find(
            idVendor=self._config.vendor_id, idProduct=self._config.product_id
        )
        if dev is None:
            raise DeviceNotFound(
                f"Unable to find DualShock 4 controller ({self._config})."
            )

        self._device = dev
        self._backend = "pyusb"
        self._connected = True
        try:
            try:
                if dev.is_kernel_driver_active(HID_INTERFACE):
                    dev.detach_kernel_driver(HID_INTERFACE)
                    self._detached_kernel_driver = True
            except NotImplementedError:
                # Kernel driver handling is Linux-only in libusb
                pass

            self._device_info = DeviceInfo(
                vendor_id=self._config.vendor_id,
                product_id=self._config.product_id,
                manufacturer=_usb_string(dev, dev.iManufacturer),
                product=_usb_string(dev, dev.iProduct),
                backend=self._backend,
            )
        except Exception:
            self.close()
            raise
        self._log_connected()
        return self._device_info

    def _open_hidapi(self) -> DeviceInfo:
        """Open using the hidapi library."""
        import hid

        if not hid.enumerate(self._config.vendor_id, self._config.product_id):
            raise DeviceNotFound(
                f"Unable to find DualShock 4 controller ({self._config})."
            )

        device = hid.device()
        device.open(self._config.vendor_id, self._config.product_id)

        self._device = device
        self._backend = "hidapi"
        self._connected = True
        try:
            device.set_nonblocking(False)
            self._device_info = DeviceInfo(
                vendor_id=self._config.vendor_id,
                product_id=self._config.product_id,
                manufacturer=device.get_manufacturer_string() or "",
                product=device.get_product_string() or "",
                backend=self._backend,
            )
        except Exception:
            self.close()
            raise
        self._log_connected()
        return self._device_info

    def _log_connected(self) -> None:
        logger.info(
            "Connected via %s: %s %s [%s, %s]",
            self._backend,
            self._device_info.manufacturer,
            self._device_info.product,
            self._config,
            self._config.model_name,
        )

    def close(self) -> None:
        """Close the USB connection. Safe to call more than once."""
        if not self._connected:
            return

        try:
            if self._backend == "pyusb":
                import usb.util

                usb.util.dispose_resources(self._device)
                if self._detached_kernel_driver:
                    self._device.attach_kernel_driver(HID_INTERFACE)
            elif self._backend == "hidapi":
                self._device.close()
        except Exception as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._connected = False
            self._detached_kernel_driver = False
            logger.info("Disconnected")

    def control_transfer(
        self,
        bm_request_type: int,
        b_request: int,
        w_value: int,
        w_index: int,
        data_or_length: bytes | int,
    ) -> bytes | int:
        """Perform a control transfer on the default endpoint.

        Args:
            bm_request_type: Direction, type and recipient bitmask.
            b_request: Request code.
            w_value: 16-bit value field.
            w_index: 16-bit index field.
            data_or_length: Payload for OUT transfers, or the number of
                bytes to receive for IN transfers.

        Returns:
            The received bytes for IN transfers, the number of bytes sent
            for OUT transfers.

        Raises:
            TransferError: If not connected or the transfer fails.
        """
        if not self._connected:
            raise TransferError("Not connected to device")

        logger.debug(
            "Control transfer: bmRequestType=0x%02X bRequest=0x%02X "
            "wValue=0x%04X wIndex=0x%04X",
            bm_request_type, b_request, w_value, w_index,
        )

        try:
            if self._backend == "pyusb":
                result = self._device.ctrl_transfer(
                    bm_request_type,
                    b_request,
                    w_value,
                    w_index,
                    data_or_length,
                    timeout=TRANSFER_TIMEOUT_MS,
                )
                return result if isinstance(result, int) else bytes(result)
            elif self._backend == "hidapi":
                return self._hidapi_feature_transfer(
                    bm_request_type, b_request, w_value, data_or_length
                )
            else:
                raise RuntimeError(f"Unknown backend: {self._backend}")
        except TransferError:
            raise
        except (OSError, ValueError) as e:
            raise TransferError(f"Control transfer failed: {e}") from e

    def _hidapi_feature_transfer(
        self,
        bm_request_type: int,
        b_request: int,
        w_value: int,
        data_or_length: bytes | int,
    ) -> bytes | int:
        report_type, report_id = w_value >> 8, w_value & 0xFF
        if report_type != FEATURE_REPORT_TYPE:
            raise TransferError(
                f"hidapi backend only supports feature reports, got type {report_type}"
            )

        if (bm_request_type, b_request) == (
            RequestType.CLASS_INTERFACE_IN,
            HIDRequest.GET_REPORT,
        ):
            return bytes(self._device.get_feature_report(report_id, data_or_length))

        if (bm_request_type, b_request) == (
            RequestType.CLASS_INTERFACE_OUT,
            HIDRequest.SET_REPORT,
        ):
            data = bytes(data_or_length)
            if not data or data[0] != report_id:
                raise TransferError(
                    f"Payload must start with report ID 0x{report_id:02X}"
                )
            written = self._device.send_feature_report(data)
            if written < 0:
                raise TransferError(f"send_feature_report failed for 0x{report_id:02X}")
            return written

        raise TransferError(
            f"hidapi backend cannot issue request 0x{b_request:02X} "
            f"with bmRequestType 0x{bm_request_type:02X}"
        )


def _usb_string(dev, index: int) -> str:
    import usb.core
    import usb.util

    if not index:
        return ""
    try:
        return usb.util.get_string(dev, index) or ""
    except (usb.core.USBError, ValueError) as e:
        logger.debug("Could not read string descriptor %d: %s", index, e)
        return ""
