"""
Identification handshake: ``*IDN?`` and model classification.

Response format (ASCII)::

    OWON,DGE2070,<serial>,<firmware>

Only the ``manufacturer,model,`` prefix is compared.  Signatures are
checked in a fixed order; the first match wins.
"""

from __future__ import annotations

import logging
from typing import Optional

from .bulk_transport import exchange
from .constants import IDN_RESPONSE_SIZE, IDN_SIGNATURE_DGE2035, IDN_SIGNATURE_DGE2070
from .models import ModelIdentity
from .scpi import identity_query

log = logging.getLogger(__name__)

MODEL_SIGNATURES: tuple[tuple[bytes, ModelIdentity], ...] = (
    (IDN_SIGNATURE_DGE2035, ModelIdentity.DGE2035),
    (IDN_SIGNATURE_DGE2070, ModelIdentity.DGE2070),
)


def classify_response(data: Optional[bytes]) -> ModelIdentity:
    """Map an ``*IDN?`` response to a model by prefix."""
    if not data:
        return ModelIdentity.UNKNOWN
    for signature, model in MODEL_SIGNATURES:
        if data.startswith(signature):
            return model
    return ModelIdentity.UNKNOWN


def identify(session) -> ModelIdentity:
    """Query the identity of the device behind ``session``.

    A transport failure means "this candidate is not usable" and yields
    ``UNKNOWN`` rather than raising.  The raw response is kept on
    ``session.identity_response`` and the model on ``session.model``.
    """
    result = exchange(session, identity_query().payload, IDN_RESPONSE_SIZE)
    if not result.ok:
        log.warning("Identity query failed: %s", result.error)
        return ModelIdentity.UNKNOWN

    data = result.data or b""
    session.identity_response = data
    model = classify_response(data)
    if model is ModelIdentity.UNKNOWN:
        log.warning("Unknown device %r",
                    data.decode('ascii', 'replace').rstrip('\x00\r\n'))
        return model

    log.info("OWON %s found", model.name)
    if session.model is ModelIdentity.UNKNOWN:
        session.model = model
    return model
