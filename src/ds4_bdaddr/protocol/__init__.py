"""Protocol layer: address codec, report layouts, and the pairing client."""

from .address import format_address, parse_address
from .client import read_paired_address, write_paired_address
from .reports import PairingInfo, build_write_report, parse_read_report
