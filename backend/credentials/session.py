# credentials/session.py
"""
Reading, verifying and refreshing existing session credentials.

Nothing here creates a credential from a bare identity.
refresh_credential takes the raw signed token and verifies it before
re-minting, so a hand-built SessionCredential can never be signed.
"""

import logging
from typing import Optional, Tuple

from django.conf import settings
from django.http import HttpResponseRedirect
from rest_framework_simplejwt.exceptions import TokenBackendError

from credentials import _minting
from credentials.credential import SessionCredential

logger = logging.getLogger(__name__)


class CredentialRejected(ValueError):
    """A token handed in for refresh did not verify."""


def verify_token(token: str, now: Optional[int] = None) -> Optional[SessionCredential]:
    """
    Decode and validate a credential token.

    Args:
        token: the signed token
        now: current time in epoch milliseconds (defaults to the clock)

    Returns:
        The credential, or None if the token is malformed, tampered
        with or expired
    """
    if not token or not isinstance(token, str):
        return None
    try:
        claims = _minting.credential_backend().decode(token, verify=True)
        credential = SessionCredential.from_claims(claims)
    except (TokenBackendError, KeyError, TypeError, ValueError) as exc:
        logger.debug("Rejected session credential: %s", exc)
        return None

    now = _minting.now_ms() if now is None else now
    if credential.is_expired(now):
        return None
    return credential


def read_token(request) -> Optional[str]:
    return request.COOKIES.get(settings.SESSION_CREDENTIAL_COOKIE)


def read_credential(request) -> Optional[SessionCredential]:
    """The caller's credential from its cookie, or None. Never raises."""
    return verify_token(read_token(request))


def write_credential(response, token: str) -> None:
    response.set_cookie(
        settings.SESSION_CREDENTIAL_COOKIE,
        token,
        max_age=int(settings.SESSION_CREDENTIAL_LIFETIME.total_seconds()),
        path="/",
        samesite="Lax",
        secure=settings.SESSION_CREDENTIAL_SECURE,
        httponly=settings.SESSION_CREDENTIAL_HTTPONLY,
    )


def clear_credential(response) -> None:
    response.delete_cookie(settings.SESSION_CREDENTIAL_COOKIE, path="/", samesite="Lax")


def profile_fields(user) -> dict:
    """Cached credential fields as they currently stand on the user record."""
    return {
        "rank": user.rank,
        "email": user.email,
        "secondary_email": user.secondary_email,
        "email_verified": user.email_verified,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "avatar_url": user.avatar_url,
        "brand_logo_url": user.brand_logo_url,
        "setup_status": user.setup_status,
        "subscription_status": user.subscription_status,
        "business_country": user.business_country,
        "entity_name": user.entity_name,
        "social_name": user.social_name,
        "phone_number": user.phone_number,
        "org_id": user.org_id,
        "theme_name": user.theme_name,
        "theme_mode": "dark" if user.theme_dark else "light",
        "miror_enchantment_enabled": user.miror_enchantment_enabled,
        "miror_enchantment_timing": user.miror_enchantment_timing,
        "dashboard_layout": user.dashboard_layout,
        "dashboard_widgets": tuple(user.dashboard_widgets or ()),
        "login_count": user.login_count,
    }


def is_stale(credential: SessionCredential, user) -> bool:
    return credential.cached_fields() != profile_fields(user)


def refresh_credential(
    token: str,
    user,
    force: bool = False,
) -> Optional[Tuple[str, SessionCredential]]:
    """
    Re-mint the credential in `token` from the user's current record.

    Returns None when nothing changed (unless force), otherwise
    (token, credential). The external id is carried over unchanged.

    Raises:
        CredentialRejected: token is malformed, tampered with or expired
        ValueError: token belongs to a different sovereign user
    """
    credential = verify_token(token)
    if credential is None:
        raise CredentialRejected("Session credential did not verify")
    if str(user.public_id) != credential.sovereign_id:
        raise ValueError("Credential and user disagree on sovereign id")
    if not force and not is_stale(credential, user):
        return None
    return _minting.mint_credential(
        user.public_id,
        credential.external_id,
        profile_fields(user),
    )


def invalidation_response():
    """
    Self-healing response for a credential whose user no longer exists.

    Clears the credential and the provider's cookies and sends the
    browser to sign-in with session=expired.
    """
    response = HttpResponseRedirect(f"{settings.SIGN_IN_URL}?session=expired")
    response.status_code = 303
    clear_credential(response)
    for name in settings.IDENTITY_PROVIDER_COOKIES:
        response.delete_cookie(name, path="/")
    return response
