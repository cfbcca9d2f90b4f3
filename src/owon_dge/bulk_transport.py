"""
Bulk command/response exchange with the DGE20xx.

One exchange is::

    clear halt OUT  →  bulk write command  →  [clear halt IN → bulk read]

The write happens exactly once; the read at most once and only when a
response is expected.  A failed read resets the IN endpoint so the next
exchange starts clean.  Failures come back as a ``TransportResult``
carrying a ``TransportError``; nothing here retries.
"""

from __future__ import annotations

import logging
from typing import Optional

import usb.core

from .conf import settings
from .constants import EP_BULK_IN, EP_BULK_OUT
from .errors import PreconditionViolation, TransferKind, describe_usb_error
from .models import TransportResult

log = logging.getLogger(__name__)


def _clear_halt(session, endpoint: int) -> None:
    """Clear a halt on ``endpoint``; "no halt present" errors are not fatal."""
    try:
        session.backend.clear_halt(endpoint)
    except usb.core.USBError as e:
        log.debug("clear_halt(0x%02x) ignored: %s", endpoint, e)


def exchange(session, command: bytes, response_capacity: int = 0,
             timeout: Optional[int] = None) -> TransportResult:
    """Write ``command`` and, if ``response_capacity`` > 0, read the answer.

    Args:
        session: A usable ``DeviceSession``.
        command: Raw command bytes, sent as-is (length is explicit).
        response_capacity: Max bytes to read back; 0 for no response.
        timeout: Per-transfer timeout in ms (default from settings).

    Raises:
        PreconditionViolation: If the session is missing, closed or unclaimed.
    """
    if session is None:
        raise PreconditionViolation("no session")
    session.require_usable()
    if response_capacity < 0:
        raise PreconditionViolation(f"negative response capacity {response_capacity}")
    if timeout is None:
        timeout = settings.timeout_ms

    backend = session.backend

    _clear_halt(session, EP_BULK_OUT)
    log.debug("Bulk write %r (%d bytes)", command, len(command))
    try:
        written = backend.write(EP_BULK_OUT, command, timeout)
    except usb.core.USBError as e:
        errno, message = describe_usb_error(e)
        log.warning("Bulk write of %r failed: %s", command, message)
        return TransportResult.failed(TransferKind.WRITE_FAILED, errno, message)
    log.debug("Bulk write OK (%d bytes)", written)

    if response_capacity == 0:
        return TransportResult(count=0, data=None)

    _clear_halt(session, EP_BULK_IN)
    log.debug("Bulk read up to %d bytes", response_capacity)
    try:
        data = backend.read(EP_BULK_IN, response_capacity, timeout)
    except usb.core.USBError as e:
        errno, message = describe_usb_error(e)
        log.warning("Bulk read of %d bytes failed: %s", response_capacity, message)
        try:
            backend.reset_endpoint(EP_BULK_IN)
        except usb.core.USBError as reset_err:
            log.warning("Endpoint reset after failed read also failed: %s", reset_err)
        return TransportResult.failed(TransferKind.READ_FAILED, errno, message)

    log.debug("Bulk read OK (%d bytes): %s", len(data), data[:64].hex(' '))
    return TransportResult(count=len(data), data=bytes(data))
