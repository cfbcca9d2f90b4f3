"""
Find and connect to the first usable DGE20xx generator.

Candidates are tried in bus order.  The first one that both opens and
identifies as a known model is returned as a live session; every session
that fails identification is released before moving on.

Usage::

    from owon_dge.generator import find_generator

    with find_generator() as session:
        set_channel_state(session, 1, True)
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .device_detector import scan
from .device_session import BackendFactory, DeviceSession
from .errors import ConnectError, DeviceUnresponsive, DiscoveryEmpty, IdentificationMismatch
from .identify import identify
from .models import CandidateDevice, ModelIdentity

log = logging.getLogger(__name__)


def connect_first(candidates: Iterable[CandidateDevice],
                  backend_factory: Optional[BackendFactory] = None) -> DeviceSession:
    """Return a session on the first candidate that connects and identifies.

    Raises:
        DiscoveryEmpty: ``candidates`` is empty.
        ConnectError: No candidate could be opened (the last error).
        DeviceUnresponsive: Some opened, none answered ``*IDN?``.
        IdentificationMismatch: Some answered, none with a known model.
    """
    tried = 0
    connected = 0
    answered = 0
    last_connect_error: Optional[ConnectError] = None
    last_response: Optional[bytes] = None

    for candidate in candidates:
        tried += 1
        try:
            session = DeviceSession.open(candidate, backend_factory)
        except ConnectError as e:
            log.warning("Skipping %s: %s", candidate, e)
            last_connect_error = e
            continue

        connected += 1
        keep = False
        try:
            model = identify(session)
            if model is not ModelIdentity.UNKNOWN:
                keep = True
                return session
            # None means the *IDN? exchange itself failed
            if session.identity_response is not None:
                answered += 1
                last_response = session.identity_response
        finally:
            if not keep:
                session.release()

    if tried == 0:
        raise DiscoveryEmpty("no Owon device found")
    if connected == 0 and last_connect_error is not None:
        raise last_connect_error
    if answered == 0:
        raise DeviceUnresponsive(connected)
    raise IdentificationMismatch(last_response)


def find_generator(max_devices: Optional[int] = None,
                   backend_factory: Optional[BackendFactory] = None) -> DeviceSession:
    """Scan the bus and connect to the first identified generator."""
    candidates = scan(max_devices)
    if not candidates:
        raise DiscoveryEmpty("no Owon device found")
    return connect_first(candidates, backend_factory)
