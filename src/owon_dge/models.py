"""
owon-dge models - pure data classes shared by the protocol layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import TransferKind, TransportError


@dataclass(frozen=True)
class CandidateDevice:
    """A bus-enumerated device whose VID:PID matched.

    ``device`` is the opaque backend object (a ``usb.core.Device`` for the
    pyusb backend).  Consumed once by ``DeviceSession.open``.
    """
    device: Any = field(repr=False, compare=False)
    vendor_id: int
    product_id: int
    bus: Optional[int] = None
    address: Optional[int] = None

    @property
    def location(self) -> str:
        """Human-readable bus position, e.g. ``bus 001 device 004``."""
        if not isinstance(self.bus, int) or not isinstance(self.address, int):
            return "unknown location"
        return f"bus {self.bus:03d} device {self.address:03d}"

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x} ({self.location})"


class ModelIdentity(Enum):
    """Generator model, derived from the ``*IDN?`` response."""
    UNKNOWN = 0
    DGE2035 = 2035
    DGE2070 = 2070


@dataclass(frozen=True)
class TransportResult:
    """Outcome of one bulk exchange.

    Either successful (``error`` is None, ``count`` bytes read, ``data``
    holding them or None when no response was requested) or failed
    (``error`` set, ``count`` 0, ``data`` None).
    """
    count: int = 0
    data: Optional[bytes] = None
    error: Optional[TransportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, kind: TransferKind, errno: Optional[int] = None,
               message: str = "") -> 'TransportResult':
        return cls(error=TransportError(kind, errno, message))

    def raise_for_error(self) -> None:
        """Raise the carried ``TransportError``, if any."""
        if self.error is not None:
            raise self.error
