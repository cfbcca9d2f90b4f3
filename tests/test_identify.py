"""Tests for identify - *IDN? handshake and model classification."""

from unittest.mock import patch

import pytest

from owon_dge.constants import EP_BULK_IN, EP_BULK_OUT, IDN_RESPONSE_SIZE
from owon_dge.errors import TransferKind
from owon_dge.identify import MODEL_SIGNATURES, classify_response, identify
from owon_dge.models import ModelIdentity, TransportResult
from usb_sim import DGE2035_IDN, DGE2070_IDN, usb_error


class TestClassifyResponse:

    def test_dge2070(self):
        assert classify_response(b"OWON,DGE2070,...") is ModelIdentity.DGE2070

    def test_dge2035(self):
        assert classify_response(b"OWON,DGE2035,2250456,V1.0") is ModelIdentity.DGE2035

    def test_models_are_distinct(self):
        assert classify_response(DGE2035_IDN) is not classify_response(DGE2070_IDN)

    @pytest.mark.parametrize("response", [
        b"OWON,XDM1041,123,1.0",
        b"OWON,DGE3062,1,2",
        b"OWON,DGE2070",          # no trailing comma
        b"owon,dge2070,1,2",      # case matters
        b" OWON,DGE2070,1,2",
        b"RIGOL TECHNOLOGIES,DG812,1,2",
        b"",
        None,
    ])
    def test_unknown(self, response):
        assert classify_response(response) is ModelIdentity.UNKNOWN

    def test_signature_order(self):
        assert [m for _, m in MODEL_SIGNATURES] == [ModelIdentity.DGE2035, ModelIdentity.DGE2070]


class TestIdentify:

    def test_identifies_dge2070(self, session):
        assert identify(session) is ModelIdentity.DGE2070
        assert session.model is ModelIdentity.DGE2070
        assert session.identity_response == DGE2070_IDN

    def test_identifies_dge2035(self, session, sim_device):
        sim_device.idn = DGE2035_IDN
        assert identify(session) is ModelIdentity.DGE2035

    def test_sends_idn_query(self, session, sim_device, recorder):
        identify(session)
        assert sim_device.written == [b"*IDN?\x00"]
        backend = recorder.backends[0]
        assert ('read', EP_BULK_IN, IDN_RESPONSE_SIZE, 500) in backend.calls
        assert backend.calls[1][:2] == ('write', EP_BULK_OUT)

    def test_unknown_response(self, session, sim_device, caplog):
        sim_device.idn = b"OWON,XDS3102,1,2\n"
        with caplog.at_level("WARNING"):
            assert identify(session) is ModelIdentity.UNKNOWN
        assert "XDS3102" in caplog.text
        assert session.identity_response == b"OWON,XDS3102,1,2\n"
        assert session.model is ModelIdentity.UNKNOWN

    def test_write_failure_is_unknown(self, session, sim_device):
        sim_device.fail['write'] = usb_error()
        assert identify(session) is ModelIdentity.UNKNOWN
        assert session.identity_response is None

    def test_read_failure_is_unknown(self, session):
        failed = TransportResult.failed(TransferKind.READ_FAILED, 110, "timeout")
        with patch("owon_dge.identify.exchange", return_value=failed):
            assert identify(session) is ModelIdentity.UNKNOWN

    def test_model_fixed_once_known(self, session, sim_device):
        identify(session)
        sim_device.idn = DGE2035_IDN
        identify(session)
        assert session.model is ModelIdentity.DGE2070
