"""SCPI command builder for the DGE20xx.

Command grammar from the OWON DGE2000/3000 SCPI protocol document.
Numbers are sent fixed-point with six decimals and a unit suffix
(``500000.000000Hz``); range checking is left to the instrument.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .constants import CHANNELS, IDN_QUERY, MAX_COMMAND_LENGTH
from .errors import CommandTooLong, PreconditionViolation


class ChannelVerb(Enum):
    SHAPE = "shape"
    FREQUENCY = "frequency"
    AMPLITUDE = "amplitude"
    OFFSET = "offset"
    OUTPUT_STATE = "output_state"


@dataclass(frozen=True)
class ScpiCommand:
    """One command, validated at construction.

    ``nul_terminated`` appends a NUL byte to the payload; only the
    identity query is sent that way.
    """
    text: str
    nul_terminated: bool = False

    def __post_init__(self):
        try:
            self.text.encode('ascii')
        except UnicodeEncodeError:
            raise PreconditionViolation(f"non-ASCII command text: {self.text!r}") from None
        if len(self.text) > MAX_COMMAND_LENGTH:
            raise CommandTooLong(
                f"command is {len(self.text)} bytes, max {MAX_COMMAND_LENGTH}")

    @property
    def payload(self) -> bytes:
        data = self.text.encode('ascii')
        return data + b'\x00' if self.nul_terminated else data

    def __str__(self) -> str:
        return self.text


def check_channel(channel: int) -> None:
    """Raise ``PreconditionViolation`` unless ``channel`` is 1 or 2."""
    if isinstance(channel, bool) or channel not in CHANNELS:
        raise PreconditionViolation(f"invalid channel {channel!r}, expected 1 or 2")


def _fixed(value: float) -> str:
    return f"{value:f}"


def shape(channel: int, waveform: str) -> ScpiCommand:
    check_channel(channel)
    return ScpiCommand(f"SOURce{channel}:FUNCtion:SHAPe {waveform}")


def frequency(channel: int, hz: float) -> ScpiCommand:
    check_channel(channel)
    return ScpiCommand(f"SOURce{channel}:FREQuency:FIXed {_fixed(hz)}Hz")


def amplitude(channel: int, vpp: float) -> ScpiCommand:
    check_channel(channel)
    return ScpiCommand(f"SOURce{channel}:VOLTage:LEVel:IMMediate:AMPLitude {_fixed(vpp)}Vpp")


def offset(channel: int, volts: float) -> ScpiCommand:
    # Offset carries the same "Vpp" suffix as amplitude; the generator accepts it
    check_channel(channel)
    return ScpiCommand(f"SOURce{channel}:VOLTage:LEVel:IMMediate:OFFset {_fixed(volts)}Vpp")


def output_state(channel: int, on: bool) -> ScpiCommand:
    check_channel(channel)
    return ScpiCommand(f"OUTPut{channel}:STATe {'ON' if on else 'OFF'}")


def identity_query() -> ScpiCommand:
    return ScpiCommand(IDN_QUERY, nul_terminated=True)


BUILDERS = {
    ChannelVerb.SHAPE: shape,
    ChannelVerb.FREQUENCY: frequency,
    ChannelVerb.AMPLITUDE: amplitude,
    ChannelVerb.OFFSET: offset,
    ChannelVerb.OUTPUT_STATE: output_state,
}


def build(channel: int, verb: ChannelVerb, payload) -> ScpiCommand:
    """Build the command for ``verb`` on ``channel`` with ``payload``."""
    return BUILDERS[verb](channel, payload)
