#!/usr/bin/env python3
"""
USB bus scanner for OWON DGE20xx signal generators.

Supported devices:
- Owon Technologies: VID=0x5345, PID=0x1234  (DGE2035, DGE2070)

The same VID:PID is used by OWON oscilloscopes, so a match here is only a
candidate; the ``*IDN?`` handshake (``identify``) decides the model.

Every scan re-enumerates the live bus; nothing is cached between calls.
"""

import logging
from typing import Iterator, List, Optional

import usb.core

from .conf import settings
from .constants import USB_PRODUCT_ID, USB_VENDOR_ID
from .models import CandidateDevice

log = logging.getLogger(__name__)


def matches_identity(vendor_id: int, product_id: int) -> bool:
    """Whether a VID:PID pair is the generator's."""
    return vendor_id == USB_VENDOR_ID and product_id == USB_PRODUCT_ID


def iter_matching_devices() -> Iterator[CandidateDevice]:
    """Lazily enumerate the bus and yield matching devices.

    Each match is reset before it is yielded: the DGE20xx does not
    reliably accept a configuration/claim until it has been reset once.
    A failed reset is logged and the device is still reported; the open
    sequence will surface any real problem.
    """
    try:
        devices = usb.core.find(find_all=True)
        for dev in devices:
            if not matches_identity(dev.idVendor, dev.idProduct):
                continue

            candidate = CandidateDevice(
                device=dev,
                vendor_id=dev.idVendor,
                product_id=dev.idProduct,
                bus=getattr(dev, 'bus', None),
                address=getattr(dev, 'address', None),
            )
            log.info("Found Owon device %04x:%04x on %s",
                     candidate.vendor_id, candidate.product_id, candidate.location)
            try:
                dev.reset()
            except usb.core.USBError as e:
                log.warning("Initial reset of %s failed: %s", candidate, e)
            yield candidate
    except usb.core.NoBackendError as e:
        log.warning("No libusb backend available, cannot scan: %s", e)
    except usb.core.USBError as e:
        log.warning("USB enumeration failed: %s", e)


def scan(max_devices: Optional[int] = None) -> List[CandidateDevice]:
    """Return up to ``max_devices`` matching devices (default from settings).

    Never raises; an empty list means "no device".
    """
    limit = settings.max_devices if max_devices is None else max_devices
    found: List[CandidateDevice] = []
    if limit <= 0:
        return found

    log.debug("Scanning USB bus for %04x:%04x (max %d)...",
              USB_VENDOR_ID, USB_PRODUCT_ID, limit)
    for candidate in iter_matching_devices():
        found.append(candidate)
        if len(found) >= limit:
            log.debug("Device limit (%d) reached, stopping scan", limit)
            break

    log.info("Scan found %d device(s)", len(found))
    return found
