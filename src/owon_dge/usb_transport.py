#!/usr/bin/env python3
"""
USB handle layer for the DGE20xx generator.

The ``UsbBackend`` ABC abstracts the raw USB control and bulk operations
on one opened device so that:
  • Tests can inject a mock or simulated backend (no real hardware needed).
  • ``PyUsbBackend`` provides real USB via pyusb (libusb backend).

Every method raises ``usb.core.USBError`` on failure; callers translate
that into the package's own errors.

Linux dependencies:
  • pyusb:  ``pip install pyusb``  (needs libusb1 - ``apt install libusb-1.0-0``)
"""

import logging
from abc import ABC, abstractmethod

import usb.control
import usb.core
import usb.util

from .constants import DEFAULT_TIMEOUT_MS, DEVICE_DESCRIPTOR_SIZE, USB_INTERFACE

log = logging.getLogger(__name__)


# =========================================================================
# Abstract USB backend
# =========================================================================

class UsbBackend(ABC):
    """Abstract handle to one USB device - mockable for testing."""

    @abstractmethod
    def open(self) -> None:
        """Open a handle to the device."""

    @abstractmethod
    def close(self) -> None:
        """Release the claimed interface and close the handle."""

    @abstractmethod
    def reset(self) -> None:
        """Full USB port reset of the device."""

    @abstractmethod
    def set_configuration(self, value: int) -> None:
        """SET_CONFIGURATION to ``value``."""

    @abstractmethod
    def claim_interface(self, interface: int) -> None:
        """Take exclusive host-side ownership of ``interface``."""

    @abstractmethod
    def clear_halt(self, endpoint: int) -> None:
        """Clear a halt/stall condition on ``endpoint``."""

    @abstractmethod
    def reset_endpoint(self, endpoint: int) -> None:
        """Reset one endpoint's stall state (not the whole device)."""

    @abstractmethod
    def write(self, endpoint: int, data: bytes, timeout: int = DEFAULT_TIMEOUT_MS) -> int:
        """Bulk write to endpoint.  Returns bytes transferred."""

    @abstractmethod
    def read(self, endpoint: int, length: int, timeout: int = DEFAULT_TIMEOUT_MS) -> bytes:
        """Bulk read from endpoint.  Returns data read."""

    @abstractmethod
    def get_device_descriptor(self) -> bytes:
        """GET_DESCRIPTOR(DEVICE) - the raw 18-byte device descriptor."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the device handle is currently open."""


# =========================================================================
# Real backend: PyUSB  (libusb backend)
# =========================================================================

class PyUsbBackend(UsbBackend):
    """Real USB backend using pyusb (libusb backend).

    Wraps a ``usb.core.Device`` handed over by the scanner.  pyusb opens
    handles lazily; ``open()`` forces it by querying the kernel driver
    state of the interface we are about to claim.

    Requires: ``pip install pyusb`` + ``apt install libusb-1.0-0``
    """

    def __init__(self, device: usb.core.Device):
        self._device = device
        self._claimed = None
        self._is_open = False

    def open(self) -> None:
        try:
            active = self._device.is_kernel_driver_active(USB_INTERFACE)
        except NotImplementedError:
            # Not supported by the backend (e.g. Windows); handle opens on first use
            log.debug("Kernel driver query not supported on this backend")
            active = False
        if active:
            try:
                self._device.detach_kernel_driver(USB_INTERFACE)
            except usb.core.USBError:
                # The driver query above already opened the handle
                self.close()
                raise
            log.debug("Detached kernel driver from interface %d", USB_INTERFACE)
        self._is_open = True

    def close(self) -> None:
        if self._claimed is not None:
            try:
                usb.util.release_interface(self._device, self._claimed)
            except usb.core.USBError as e:
                log.debug("release_interface(%d) failed: %s", self._claimed, e)
            self._claimed = None
        try:
            usb.util.dispose_resources(self._device)
        except usb.core.USBError as e:
            log.debug("dispose_resources failed: %s", e)
        self._is_open = False

    def reset(self) -> None:
        self._device.reset()

    def set_configuration(self, value: int) -> None:
        self._device.set_configuration(value)

    def claim_interface(self, interface: int) -> None:
        usb.util.claim_interface(self._device, interface)
        self._claimed = interface

    def clear_halt(self, endpoint: int) -> None:
        self._device.clear_halt(endpoint)

    def reset_endpoint(self, endpoint: int) -> None:
        """Reset ``endpoint`` via CLEAR_FEATURE(ENDPOINT_HALT).

        libusb-1.0 has no separate endpoint-reset request (libusb-0.1's
        ``usb_resetep`` is deprecated); clearing the halt also resets the
        endpoint's data toggle, which is the state a failed read leaves
        behind.
        """
        self._device.clear_halt(endpoint)

    def write(self, endpoint: int, data: bytes, timeout: int = DEFAULT_TIMEOUT_MS) -> int:
        return self._device.write(endpoint, data, timeout=timeout)

    def read(self, endpoint: int, length: int, timeout: int = DEFAULT_TIMEOUT_MS) -> bytes:
        return bytes(self._device.read(endpoint, length, timeout=timeout))

    def get_device_descriptor(self) -> bytes:
        return bytes(usb.control.get_descriptor(
            self._device, DEVICE_DESCRIPTOR_SIZE, usb.util.DESC_TYPE_DEVICE, 0,
        ))

    @property
    def is_open(self) -> bool:
        return self._is_open
