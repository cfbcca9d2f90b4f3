"""Tests for channel - configure_channel() and set_channel_state()."""

from unittest.mock import MagicMock, patch

import pytest

from owon_dge import scpi
from owon_dge.channel import configure_channel, set_channel_state
from owon_dge.errors import PreconditionViolation, TransferKind, TransportError
from owon_dge.models import TransportResult
from owon_dge.scpi import ChannelVerb
from usb_sim import usb_error

_OK = TransportResult()
_WRITE_FAILED = TransportResult.failed(TransferKind.WRITE_FAILED, 110, "Operation timed out")


class TestConfigureChannel:

    def test_four_commands_in_order(self, session, sim_device):
        assert configure_channel(session, 1, "SINE", 500000.0, 1.0, 0.0) is True
        assert sim_device.written == [
            b"SOURce1:FUNCtion:SHAPe SINE",
            b"SOURce1:FREQuency:FIXed 500000.000000Hz",
            b"SOURce1:VOLTage:LEVel:IMMediate:AMPLitude 1.000000Vpp",
            b"SOURce1:VOLTage:LEVel:IMMediate:OFFset 0.000000Vpp",
        ]

    def test_no_reads(self, session, recorder):
        configure_channel(session, 2, "SQUARE", 1000.0, 2.0, 0.5)
        assert 'read' not in recorder.backends[0].names()

    def test_exchanges_are_zero_response(self, session):
        with patch("owon_dge.channel.exchange", return_value=_OK) as ex:
            assert configure_channel(session, 1, "SINE", 500000.0, 1.0, 0.0)
        assert ex.call_count == 4
        for c in ex.call_args_list:
            assert c.args[0] is session
            assert len(c.args) == 2  # no response capacity
        assert [c.args[1].split(b":")[1] for c in ex.call_args_list] == [
            b"FUNCtion", b"FREQuency", b"VOLTage", b"VOLTage",
        ]

    def test_commands_built_per_verb(self, session):
        with patch("owon_dge.scpi.build", wraps=scpi.build) as build:
            configure_channel(session, 2, "SINE", 1.0, 1.0, 0.0)
        assert [c.args[:2] for c in build.call_args_list] == [
            (2, ChannelVerb.SHAPE),
            (2, ChannelVerb.FREQUENCY),
            (2, ChannelVerb.AMPLITUDE),
            (2, ChannelVerb.OFFSET),
        ]

    @pytest.mark.parametrize("fail_at", [0, 1, 2, 3])
    def test_short_circuit(self, session, fail_at):
        results = [_OK] * fail_at + [_WRITE_FAILED] + [_OK] * 3
        with patch("owon_dge.channel.exchange", side_effect=results) as ex:
            assert configure_channel(session, 1, "SINE", 500000.0, 1.0, 0.0) is False
        assert ex.call_count == fail_at + 1

    def test_no_rollback(self, session, sim_device, recorder):
        backend = recorder.backends[0]
        real_write = backend.write

        def flaky_write(endpoint, data, timeout=500):
            if b"FREQuency" in data:
                raise usb_error()
            return real_write(endpoint, data, timeout)

        backend.write = flaky_write
        assert configure_channel(session, 2, "RAMP", 10.0, 1.0, 0.0) is False
        # The shape command stays applied; nothing is sent to undo it
        assert sim_device.written == [b"SOURce2:FUNCtion:SHAPe RAMP"]

    @pytest.mark.parametrize("channel", [0, 3, -2])
    def test_bad_channel_no_io(self, session, channel):
        with patch("owon_dge.channel.exchange") as ex:
            with pytest.raises(PreconditionViolation):
                configure_channel(session, channel, "SINE", 1.0, 1.0, 0.0)
        ex.assert_not_called()

    def test_no_session(self):
        with pytest.raises(PreconditionViolation):
            configure_channel(None, 1, "SINE", 1.0, 1.0, 0.0)

    def test_released_session(self, session, sim_device):
        session.release()
        with pytest.raises(PreconditionViolation):
            configure_channel(session, 1, "SINE", 1.0, 1.0, 0.0)
        assert sim_device.written == []

    def test_real_write_failure(self, session, sim_device):
        sim_device.fail['write'] = usb_error()
        assert configure_channel(session, 1, "SINE", 1.0, 1.0, 0.0) is False
        assert sim_device.written == []


class TestSetChannelState:

    def test_on(self, session, sim_device):
        set_channel_state(session, 1, True)
        assert sim_device.written == [b"OUTPut1:STATe ON"]

    def test_off(self, session, sim_device):
        set_channel_state(session, 2, False)
        assert sim_device.written == [b"OUTPut2:STATe OFF"]

    def test_built_as_output_state(self, session):
        with patch("owon_dge.scpi.build", wraps=scpi.build) as build:
            set_channel_state(session, 1, False)
        build.assert_called_once_with(1, ChannelVerb.OUTPUT_STATE, False)

    def test_single_exchange(self, session):
        with patch("owon_dge.channel.exchange", return_value=_OK) as ex:
            set_channel_state(session, 1, True)
        ex.assert_called_once_with(session, b"OUTPut1:STATe ON")

    def test_transport_failure_raises(self, session, sim_device):
        sim_device.fail['write'] = usb_error("Pipe error", errno=32)
        with pytest.raises(TransportError) as excinfo:
            set_channel_state(session, 1, True)
        assert excinfo.value.kind is TransferKind.WRITE_FAILED
        assert excinfo.value.errno == 32

    @pytest.mark.parametrize("channel", [0, 3])
    def test_bad_channel_no_io(self, session, channel):
        with patch("owon_dge.channel.exchange") as ex:
            with pytest.raises(PreconditionViolation):
                set_channel_state(session, channel, True)
        ex.assert_not_called()

    def test_no_session(self):
        with patch("owon_dge.channel.exchange") as ex:
            with pytest.raises(PreconditionViolation):
                set_channel_state(None, 1, True)
        ex.assert_not_called()

    def test_unclaimed_session(self):
        session = MagicMock()
        session.require_usable.side_effect = PreconditionViolation("not claimed")
        with pytest.raises(PreconditionViolation):
            set_channel_state(session, 1, False)
