"""Read and override the paired host address stored in a DualShock 4 controller."""

from .config import DeviceConfig
from .errors import BDAddrError, DeviceNotFound, InvalidFormat, TransferError, UsageError
from .protocol.address import format_address, parse_address
from .protocol.client import read_paired_address, write_paired_address
from .protocol.reports import PairingInfo
from .transport.usb_connection import USBConnection

__version__ = "0.1.0"
