"""Error kinds raised by the codec, the transport, and the command line."""

from __future__ import annotations


class BDAddrError(Exception):
    """Base class for every error this package raises on purpose."""


class InvalidFormat(BDAddrError, ValueError):
    """An address string is not 12 hex digits once separators are removed."""


class DeviceNotFound(BDAddrError, ConnectionError):
    """No USB device matches the configured vendor/product identity."""


class TransferError(BDAddrError, IOError):
    """A control transfer failed at the USB layer."""


class UsageError(BDAddrError):
    """The command line arguments do not form a valid request."""
