"""Exception types for owon-dge.

Every error the package reports derives from ``OwonError`` so the CLI can
map failures to exit codes in one place.  USB-level failures from pyusb
(``usb.core.USBError``) are caught where they happen and re-raised or
returned as one of these, keeping the ``errno`` the OS reported.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class OwonError(Exception):
    """Base class for all owon-dge errors."""


class DiscoveryEmpty(OwonError):
    """No USB device with the generator's vendor/product ID is attached."""


class ConnectStage(str, Enum):
    """Step of the session open sequence that failed."""
    IDENTITY = "identity"
    OPEN = "open"
    CONFIGURE = "configure"
    CLAIM = "claim"
    CLEAR_HALT = "clear_halt"
    DESCRIPTOR = "descriptor"


class ConnectError(OwonError):
    """Opening a session failed; the handle has already been reset and closed."""

    def __init__(self, stage: ConnectStage, errno: Optional[int] = None,
                 message: str = ""):
        self.stage = stage
        self.errno = errno
        self.message = message
        super().__init__(f"connect failed at {stage.value}: {message or 'error'}"
                         + (f" (errno {errno})" if errno is not None else ""))


class TransferKind(str, Enum):
    """Which half of a bulk exchange failed."""
    WRITE_FAILED = "write_failed"
    READ_FAILED = "read_failed"


class TransportError(OwonError):
    """A single bulk write or read failed.  Never retried automatically."""

    def __init__(self, kind: TransferKind, errno: Optional[int] = None,
                 message: str = ""):
        self.kind = kind
        self.errno = errno
        self.message = message
        super().__init__(f"{kind.value}: {message or 'error'}"
                         + (f" (errno {errno})" if errno is not None else ""))


class IdentificationMismatch(OwonError):
    """Devices answered, but none identified as a known DGE20xx model."""

    def __init__(self, raw_response: Optional[bytes] = None):
        self.raw_response = raw_response
        shown = raw_response.decode("ascii", "replace").rstrip("\x00\r\n") \
            if raw_response else ""
        super().__init__(f"unknown device {shown!r}" if shown
                         else "no identifiable device")


class DeviceUnresponsive(OwonError):
    """Devices opened, but none answered the identity query."""

    def __init__(self, tried: int = 0):
        self.tried = tried
        super().__init__(f"{tried} device(s) did not answer *IDN?" if tried
                         else "device did not answer *IDN?")


class PreconditionViolation(OwonError, ValueError):
    """Bad channel number or unusable session; detected before any I/O."""


class CommandTooLong(OwonError, ValueError):
    """SCPI command text exceeds the protocol's maximum length."""


def describe_usb_error(exc: Exception) -> tuple[Optional[int], str]:
    """Return ``(errno, message)`` for a pyusb exception.

    ``usb.core.USBError`` only sets ``strerror`` when an errno is known,
    so fall back to ``str(exc)``.
    """
    errno = getattr(exc, "errno", None)
    message = getattr(exc, "strerror", None) or str(exc)
    return errno, message
