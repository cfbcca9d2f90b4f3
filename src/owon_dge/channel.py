"""
Channel control: waveform setup and output on/off for CH1/CH2.

All commands are fire-and-forget (no response read).  ``configure_channel``
sends shape, frequency, amplitude and offset in that order and stops at
the first failed write; commands already sent stay applied on the
instrument.
"""

from __future__ import annotations

import logging

from . import scpi
from .bulk_transport import exchange
from .errors import PreconditionViolation
from .scpi import ChannelVerb

log = logging.getLogger(__name__)


def _check_session(session) -> None:
    if session is None:
        raise PreconditionViolation("no session")
    session.require_usable()


def configure_channel(session, channel: int, waveform: str, frequency_hz: float,
                      amplitude_vpp: float, offset_v: float) -> bool:
    """Set waveform, frequency, amplitude and offset of ``channel``.

    Returns:
        True if all four commands were written.

    Raises:
        PreconditionViolation: Bad channel or unusable session (no I/O done).
        CommandTooLong: If the waveform name makes the command too long.
    """
    _check_session(session)
    commands = [
        scpi.build(channel, verb, value)
        for verb, value in (
            (ChannelVerb.SHAPE, waveform),
            (ChannelVerb.FREQUENCY, frequency_hz),
            (ChannelVerb.AMPLITUDE, amplitude_vpp),
            (ChannelVerb.OFFSET, offset_v),
        )
    ]
    for command in commands:
        result = exchange(session, command.payload)
        if not result.ok:
            log.warning("CH%d setup stopped at %r: %s", channel, command.text, result.error)
            return False

    log.info("CH%d configured: %s %s Hz %s Vpp offset %s V",
             channel, waveform, frequency_hz, amplitude_vpp, offset_v)
    return True


def set_channel_state(session, channel: int, on: bool) -> None:
    """Turn the output of ``channel`` on or off.

    Raises:
        PreconditionViolation: Bad channel or unusable session (no I/O done).
        TransportError: If the command could not be written.
    """
    _check_session(session)
    command = scpi.build(channel, ChannelVerb.OUTPUT_STATE, on)
    exchange(session, command.payload).raise_for_error()
    log.info("CH%d output %s", channel, "ON" if on else "OFF")
