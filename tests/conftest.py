"""Shared fixtures for the owon-dge tests."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from owon_dge.constants import USB_PRODUCT_ID, USB_VENDOR_ID
from owon_dge.device_session import DeviceSession
from usb_sim import BackendRecorder, SimulatedDevice, make_candidate


@pytest.fixture
def sim_device():
    return SimulatedDevice()


@pytest.fixture
def recorder():
    return BackendRecorder()


@pytest.fixture
def session(sim_device, recorder):
    """An open, claimed session on a simulated DGE2070 (calls cleared)."""
    s = DeviceSession.open(make_candidate(sim_device), recorder)
    recorder.backends[0].calls.clear()
    yield s
    s.release()


@pytest.fixture
def bus_device():
    """Factory for pyusb-like enumerated devices with a mock reset()."""
    def _make(vid=USB_VENDOR_ID, pid=USB_PRODUCT_ID, bus=1, address=2):
        return SimpleNamespace(idVendor=vid, idProduct=pid, bus=bus,
                               address=address, reset=MagicMock())
    return _make
