"""Transport layer: USB discovery, handle lifecycle, and control transfers."""

from .usb_connection import DeviceInfo, USBConnection
