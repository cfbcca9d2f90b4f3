"""
Device session: the lifecycle of one opened, claimed DGE20xx handle.

Open sequence (each step must succeed)::

    1. re-check VID:PID
    2. open handle
    3. SetConfiguration(1)
    4. ClaimInterface(0)
    5. clear halt on bulk IN
    6. GET_DESCRIPTOR(DEVICE) as liveness check

A failure after step 2 resets and closes the handle before raising
``ConnectError``.  ``release()`` resets then closes; whoever opened a
session must release it on every exit path, most simply by using the
session as a context manager::

    with DeviceSession.open(candidate) as session:
        identify(session)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import usb.core

from .constants import (
    DEVICE_DESCRIPTOR_SIZE,
    EP_BULK_IN,
    USB_CONFIGURATION,
    USB_INTERFACE,
)
from .device_detector import matches_identity
from .errors import (
    ConnectError,
    ConnectStage,
    PreconditionViolation,
    describe_usb_error,
)
from .models import CandidateDevice, ModelIdentity
from .usb_transport import PyUsbBackend, UsbBackend

log = logging.getLogger(__name__)

BackendFactory = Callable[[object], UsbBackend]


class DeviceSession:
    """An open, claimed handle to one generator.  Exclusively owned."""

    def __init__(self, backend: UsbBackend, candidate: Optional[CandidateDevice] = None):
        self.backend = backend
        self.candidate = candidate
        self.claimed_interface: Optional[int] = None
        self.model = ModelIdentity.UNKNOWN
        self.identity_response: Optional[bytes] = None
        self._is_open = False

    # -- Lifecycle -------------------------------------------------------

    @classmethod
    def open(cls, candidate: CandidateDevice,
             backend_factory: Optional[BackendFactory] = None) -> 'DeviceSession':
        """Open, configure and claim ``candidate``.

        Raises:
            ConnectError: with the failing stage and OS errno.
        """
        if not matches_identity(candidate.vendor_id, candidate.product_id):
            raise ConnectError(
                ConnectStage.IDENTITY,
                message=f"not a DGE20xx: {candidate.vendor_id:04x}:{candidate.product_id:04x}",
            )

        backend = (backend_factory or PyUsbBackend)(candidate.device)
        try:
            backend.open()
        except usb.core.USBError as e:
            errno, message = describe_usb_error(e)
            log.warning("Failed to open %s: %s", candidate, message)
            raise ConnectError(ConnectStage.OPEN, errno, message) from e

        session = cls(backend, candidate)
        session._is_open = True

        stage = ConnectStage.CONFIGURE
        try:
            backend.set_configuration(USB_CONFIGURATION)
            stage = ConnectStage.CLAIM
            backend.claim_interface(USB_INTERFACE)
            session.claimed_interface = USB_INTERFACE
            stage = ConnectStage.CLEAR_HALT
            backend.clear_halt(EP_BULK_IN)
            stage = ConnectStage.DESCRIPTOR
            descriptor = backend.get_device_descriptor()
        except usb.core.USBError as e:
            errno, message = describe_usb_error(e)
            log.warning("Connect to %s failed at %s: %s", candidate, stage.value, message)
            session._shutdown()
            raise ConnectError(stage, errno, message) from e
        except Exception:
            # e.g. ValueError from pyusb on a bad configuration value
            log.warning("Connect to %s aborted at %s", candidate, stage.value)
            session._shutdown()
            raise

        if len(descriptor) < DEVICE_DESCRIPTOR_SIZE:
            log.warning("Short device descriptor from %s (%d bytes)", candidate, len(descriptor))
            session._shutdown()
            raise ConnectError(ConnectStage.DESCRIPTOR,
                               message=f"short device descriptor ({len(descriptor)} bytes)")

        log.info("Session opened on %s (interface %d claimed)", candidate, USB_INTERFACE)
        return session

    def release(self) -> None:
        """Reset and close the handle.  A second call does nothing."""
        if not self._is_open:
            return
        self._shutdown()
        log.info("Session released on %s", self.candidate)

    def _shutdown(self) -> None:
        """Best-effort reset then close; leaves the session closed."""
        self._is_open = False
        try:
            self.backend.reset()
        except usb.core.USBError as e:
            log.warning("Reset during release failed: %s", e)
        try:
            self.backend.close()
        except usb.core.USBError as e:
            log.warning("Close during release failed: %s", e)
        self.claimed_interface = None

    # -- State -----------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_usable(self) -> bool:
        """Open with an interface claimed - bulk transfers are allowed."""
        return self._is_open and self.claimed_interface is not None

    def require_usable(self) -> None:
        """Raise ``PreconditionViolation`` unless bulk transfers are allowed."""
        if not self.is_usable:
            raise PreconditionViolation("session is not open or interface not claimed")

    def __enter__(self) -> 'DeviceSession':
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "open" if self._is_open else "closed"
        return f"<DeviceSession {self.candidate} {state} model={self.model.name}>"
