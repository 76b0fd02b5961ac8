"""Device identity and runtime settings, resolved once at startup."""

from __future__ import annotations

import logging
import os
import string
from dataclasses import dataclass
from typing import Mapping

from .errors import UsageError

SONY_VENDOR_ID = 0x054C
DEFAULT_PRODUCT_ID = 0x09CC

PRODUCT_ID_ENV = "DS4_BDADDR_PRODUCT_ID"
LOG_LEVEL_ENV = "DS4_BDADDR_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

_HEX_DIGITS = frozenset(string.hexdigits)

# USB product IDs of DualShock 4 hardware, used to name the device in logs
KNOWN_PRODUCT_IDS: dict[int, str] = {
    0x05C4: "DualShock 4 (CUH-ZCT1)",
    0x09CC: "DualShock 4 (CUH-ZCT2)",
    0x0BA0: "DualShock 4 USB Wireless Adapter",
}


def parse_product_id(text: str) -> int:
    """Parse a USB product ID as hex, the way ``lsusb`` prints it.

    The ``0x`` prefix is optional: ``0x05C4``, ``05c4`` and ``5c4`` are the same ID.
    """
    value = text.strip().lower()
    digits = value[2:] if value.startswith("0x") else value
    if not digits or not _HEX_DIGITS.issuperset(digits):
        raise UsageError(f"Invalid product ID: {text!r}")

    product_id = int(digits, 16)
    if not 0 <= product_id <= 0xFFFF:
        raise UsageError(f"Product ID out of range: {text!r}")
    return product_id


@dataclass(frozen=True)
class DeviceConfig:
    """USB identity of the controller to open."""

    vendor_id: int = SONY_VENDOR_ID
    product_id: int = DEFAULT_PRODUCT_ID

    @property
    def model_name(self) -> str:
        return KNOWN_PRODUCT_IDS.get(self.product_id, "unknown model")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DeviceConfig:
        """Build the config from ``DS4_BDADDR_PRODUCT_ID`` if it is set."""
        if environ is None:
            environ = os.environ
        raw = environ.get(PRODUCT_ID_ENV, "").strip()
        if not raw:
            return cls()
        return cls(product_id=parse_product_id(raw))

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


def log_level_from_env(environ: Mapping[str, str] | None = None) -> int:
    """Resolve ``DS4_BDADDR_LOG_LEVEL`` to a ``logging`` level number."""
    if environ is None:
        environ = os.environ
    name = environ.get(LOG_LEVEL_ENV, "").strip().upper() or DEFAULT_LOG_LEVEL
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise UsageError(f"Invalid log level: {name!r}")
    return level
