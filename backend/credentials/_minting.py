# credentials/_minting.py
"""
Package-private credential minting.

Imported only by credentials.handoff (from a verified external identity)
and credentials.session (re-minting a signed token that verifies).
"""

import time
from typing import Optional, Tuple

from django.conf import settings
from rest_framework_simplejwt.backends import TokenBackend

from credentials.credential import SessionCredential


def credential_backend() -> TokenBackend:
    return TokenBackend(
        settings.SESSION_CREDENTIAL_ALGORITHM,
        signing_key=settings.SESSION_CREDENTIAL_SECRET,
    )


def now_ms() -> int:
    return int(time.time() * 1000)


def lifetime_ms() -> int:
    return int(settings.SESSION_CREDENTIAL_LIFETIME.total_seconds() * 1000)


def mint_credential(
    sovereign_id,
    external_id: Optional[str],
    fields: dict,
    issued_at: Optional[int] = None,
) -> Tuple[str, SessionCredential]:
    """
    Sign a credential for sovereign_id carrying `fields`.

    Returns:
        (token, credential)
    """
    issued_at = now_ms() if issued_at is None else issued_at
    credential = SessionCredential(
        sovereign_id=str(sovereign_id),
        external_id=external_id,
        issued_at=issued_at,
        expires_at=issued_at + lifetime_ms(),
        **fields,
    )
    token = credential_backend().encode(credential.to_claims())
    return token, credential
