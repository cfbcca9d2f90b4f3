#!/usr/bin/env python3
"""
owon-dge - Command Line Interface

Entry point for the owon-dge package.
"""

import argparse
import logging
import sys
import time

from .__version__ import __version__
from .channel import configure_channel, set_channel_state
from .constants import CHANNELS, EXIT_NO_DEVICE
from .device_detector import scan
from .errors import (
    ConnectError,
    DeviceUnresponsive,
    DiscoveryEmpty,
    IdentificationMismatch,
    OwonError,
    TransportError,
)
from .generator import find_generator

log = logging.getLogger(__name__)


def _setup_logging(verbose=0):
    """Configure logging from the -v count (0=warnings, 1=info, 2+=debug)."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
        logging.getLogger('usb').setLevel(logging.WARNING)
    else:
        logging.basicConfig(level=logging.WARNING, format='[%(levelname)s] %(message)s')


def _non_negative_float(value):
    """argparse type: a float >= 0."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="owon-dge",
        description="Control an OWON DGE2035/DGE2070 signal generator over USB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    owon-dge detect             List matching USB devices
    owon-dge identify           Connect and print the model
    owon-dge run                CH1 sine + CH2 square, 500 kHz, on for 4 s
    owon-dge run -f 1000 -t 10  Same at 1 kHz for 10 s
    owon-dge output 1 off       Turn CH1 output off
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("detect", help="List matching USB devices")
    subparsers.add_parser("identify", help="Connect and identify the generator")

    run_parser = subparsers.add_parser("run", help="Configure both channels, run, then turn off")
    run_parser.add_argument("--shape1", default="SINE", help="CH1 waveform (default: SINE)")
    run_parser.add_argument("--shape2", default="SQUARE", help="CH2 waveform (default: SQUARE)")
    run_parser.add_argument("--frequency", "-f", type=float, default=500000.0,
                            help="Frequency in Hz (default: 500000)")
    run_parser.add_argument("--amplitude", "-a", type=float, default=1.0,
                            help="Amplitude in Vpp (default: 1.0)")
    run_parser.add_argument("--offset", "-o", type=float, default=0.0,
                            help="Offset in V (default: 0.0)")
    run_parser.add_argument("--duration", "-t", type=_non_negative_float, default=4.0,
                            help="Seconds to leave outputs on (default: 4)")

    output_parser = subparsers.add_parser("output", help="Turn one channel's output on or off")
    output_parser.add_argument("channel", type=int, choices=CHANNELS, help="Channel (1 or 2)")
    output_parser.add_argument("state", choices=["on", "off"], help="Output state")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    if args.command == "detect":
        return detect()
    elif args.command == "identify":
        return identify_device()
    elif args.command == "run":
        return run(shapes=(args.shape1, args.shape2), frequency=args.frequency,
                   amplitude=args.amplitude, offset=args.offset, duration=args.duration)
    elif args.command == "output":
        return set_output(args.channel, args.state == "on")

    return 0


def _connect():
    """Find the generator, or print why not.  Returns a session or None."""
    try:
        return find_generator()
    except DiscoveryEmpty:
        print("No Owon device found")
    except ConnectError as e:
        print(f"Owon device found but could not be opened ({e})")
    except DeviceUnresponsive as e:
        print(f"Owon device found but not responding ({e})")
    except IdentificationMismatch as e:
        print(f"No DGE20xx device found ({e})")
    return None


def detect():
    """List matching USB devices without claiming them."""
    candidates = scan()
    if not candidates:
        print("No Owon device found")
        return EXIT_NO_DEVICE
    for i, candidate in enumerate(candidates):
        print(f"[{i}] {candidate}")
    return 0


def identify_device():
    """Connect and print the generator model."""
    session = _connect()
    if session is None:
        return EXIT_NO_DEVICE
    with session:
        print(f"OWON {session.model.name} found")
    return 0


def _set_all(session, on):
    """Set every channel's output; True if all succeeded."""
    ok = True
    for channel in CHANNELS:
        try:
            set_channel_state(session, channel, on)
        except TransportError as e:
            log.error("CH%d output %s failed: %s", channel, "on" if on else "off", e)
            ok = False
    return ok


def run(shapes=("SINE", "SQUARE"), frequency=500000.0, amplitude=1.0,
        offset=0.0, duration=4.0):
    """Outputs off, configure both channels, on for ``duration`` s, off."""
    session = _connect()
    if session is None:
        return EXIT_NO_DEVICE

    ok = True
    with session:
        print("Turning channels off")
        ok &= _set_all(session, False)

        print("Configuring both channels")
        for channel, waveform in zip(CHANNELS, shapes):
            try:
                if not configure_channel(session, channel, waveform, frequency, amplitude, offset):
                    ok = False
            except OwonError as e:
                print(f"Error: CH{channel}: {e}")
                ok = False

        print("Turning both channels on")
        ok &= _set_all(session, True)

        try:
            time.sleep(duration)
        finally:
            # Also on Ctrl-C: outputs go off before the session is released
            print("Turning both channels off")
            ok &= _set_all(session, False)

    return 0 if ok else 1


def set_output(channel, on):
    """Turn one channel's output on or off."""
    session = _connect()
    if session is None:
        return EXIT_NO_DEVICE
    with session:
        try:
            set_channel_state(session, channel, on)
        except OwonError as e:
            print(f"Error: {e}")
            return 1
    print(f"CH{channel} output {'ON' if on else 'OFF'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
