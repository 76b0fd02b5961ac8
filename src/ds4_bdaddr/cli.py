"""Command line entry point.

Exactly one of ``-h``, ``-r`` or ``-w ADDR`` is accepted per invocation.
Arguments and the address are validated before the controller is looked up.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import LOG_LEVEL_ENV, PRODUCT_ID_ENV, DeviceConfig, log_level_from_env
from .errors import BDAddrError, UsageError
from .protocol.address import format_address, from_wire, parse_address
from .protocol.client import read_paired_address, write_paired_address
from .transport.usb_connection import USBConnection

logger = logging.getLogger(__name__)

DESCRIPTION = "Override the PS4 BDADDR inside a DualShock 4 controller."

EPILOG = f"""\
addresses:
  00:11:22:33:44:55, 00-11-22-33-44-55 or 001122334455

environment:
  {PRODUCT_ID_ENV}   USB product ID of the controller, always hex with
                          an optional 0x prefix (default 09cc, use 05c4 for
                          the CUH-ZCT1 revision)
  {LOG_LEVEL_ENV}     logging level (default WARNING)
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="ds4-bdaddr",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "-h", dest="help", action="store_true", help="Display this help message."
    )
    group.add_argument(
        "-r",
        dest="read",
        action="store_true",
        help="Read the controller UID and the current PS4 MAC address.",
    )
    group.add_argument(
        "-w",
        dest="write",
        metavar="ADDR",
        help="Set the PS4's BDADDR (MAC address).",
    )
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse the command line.

    Raises:
        UsageError: If the arguments do not select exactly one operation.
    """
    if not argv:
        raise UsageError("No arguments provided.")

    args = build_parser().parse_args(argv)

    # argparse lets an option repeat itself
    if len(argv) > (2 if args.write is not None else 1):
        raise UsageError("Only one option is allowed.")
    return args


async def run(
    config: DeviceConfig, read: bool = False, wire_address: bytes | None = None
) -> None:
    """Open the controller and perform the requested operations in order.

    A failure aborts the remaining steps. The connection is closed on every
    exit path.
    """
    with USBConnection(config) as conn:
        if read:
            info = await read_paired_address(conn)
            print(f"UID: {info.controller_uid}")
            print(f"Paired address: {info.paired_address}")

        if wire_address is not None:
            await write_paired_address(conn, wire_address)
            print(
                f"Paired address updated to {format_address(from_wire(wire_address))}."
            )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    try:
        args = parse_args(argv)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1

    if args.help:
        parser.print_help()
        return 0

    try:
        logging.basicConfig(level=log_level_from_env())
        config = DeviceConfig.from_env()
        wire_address = parse_address(args.write) if args.write is not None else None
        asyncio.run(run(config, read=args.read, wire_address=wire_address))
    except BDAddrError as e:
        logger.debug("Aborted: %r", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
