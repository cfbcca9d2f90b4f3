"""
owon-dge - OWON DGE20xx signal generator control over raw USB

Drives the DGE2035/DGE2070 SCPI text protocol over USB bulk transfers
(VID 0x5345, PID 0x1234) using pyusb.

Usage:
    # As a library
    from owon_dge import find_generator, configure_channel, set_channel_state

    with find_generator() as session:
        configure_channel(session, 1, "SINE", 1000.0, 1.0, 0.0)
        set_channel_state(session, 1, True)

    # Command line
    owon-dge detect       # List matching devices
    owon-dge run          # Configure, run 4 s, turn off
"""

from owon_dge.__version__ import __version__

from owon_dge.bulk_transport import exchange
from owon_dge.channel import configure_channel, set_channel_state
from owon_dge.device_detector import scan
from owon_dge.device_session import DeviceSession
from owon_dge.errors import (
    CommandTooLong,
    ConnectError,
    DeviceUnresponsive,
    DiscoveryEmpty,
    IdentificationMismatch,
    OwonError,
    PreconditionViolation,
    TransportError,
)
from owon_dge.generator import connect_first, find_generator
from owon_dge.identify import identify
from owon_dge.models import CandidateDevice, ModelIdentity, TransportResult

__all__ = [
    # Version
    "__version__",
    # Core
    "scan",
    "DeviceSession",
    "exchange",
    "identify",
    "configure_channel",
    "set_channel_state",
    "connect_first",
    "find_generator",
    # Models
    "CandidateDevice",
    "ModelIdentity",
    "TransportResult",
    # Errors
    "OwonError",
    "DiscoveryEmpty",
    "ConnectError",
    "TransportError",
    "IdentificationMismatch",
    "DeviceUnresponsive",
    "PreconditionViolation",
    "CommandTooLong",
]
