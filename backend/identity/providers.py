# identity/providers.py
"""
External identity provider boundary.

The core needs exactly three things from a provider:
1. Verify a login and hand back a verified external identity
2. Issue one-time sign-in / invitation tickets (admin flows)
3. Delete the external account (account-deletion cascade)

SignedAssertionProvider is the default: an upstream auth service signs a
short-lived HS256 assertion (sub = external id) with a shared secret and
the browser presents it to /api/session. Sign-in tickets it issues are
assertions of the same shape, so a recovery ticket is redeemed through
the normal handoff.

Swap providers with settings.IDENTITY_PROVIDER (dotted path).
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError

from identity.exceptions import IdentityVerificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalIdentity:
    """What a provider vouches for after a successful login."""

    external_id: str
    provider: str
    email: Optional[str] = None
    email_verified: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ExternalIdentityProvider:
    """Interface every provider implements."""

    tag = "external"

    def verify_request(self, request) -> ExternalIdentity:
        """
        Return the verified identity carried by the request.

        Raises:
            IdentityVerificationError: nothing presented, or not verifiable
        """
        raise NotImplementedError

    def issue_sign_in_token(self, external_id: str) -> str:
        raise NotImplementedError

    def create_invitation(self, email: str, rank: str) -> str:
        raise NotImplementedError

    def delete_user(self, external_id: str) -> bool:
        """Delete the external account. Returns False if the provider keeps none."""
        raise NotImplementedError


class SignedAssertionProvider(ExternalIdentityProvider):
    QUERY_PARAM = "assertion"

    def __init__(self):
        self.tag = settings.IDENTITY_PROVIDER_TAG
        self.backend = TokenBackend(
            "HS256",
            signing_key=settings.IDENTITY_ASSERTION_SECRET,
            audience=settings.IDENTITY_ASSERTION_AUDIENCE,
            issuer=settings.IDENTITY_ASSERTION_ISSUER,
        )

    def _raw_assertion(self, request) -> Optional[str]:
        header = request.META.get(settings.IDENTITY_ASSERTION_HEADER)
        if header:
            return header.removeprefix("Bearer ").strip()
        return (
            request.GET.get(self.QUERY_PARAM)
            or request.COOKIES.get(settings.IDENTITY_ASSERTION_COOKIE)
        )

    def verify_request(self, request) -> ExternalIdentity:
        raw = self._raw_assertion(request)
        if not raw:
            raise IdentityVerificationError("No identity assertion presented.")
        return self.verify_assertion(raw)

    def verify_assertion(self, raw: str) -> ExternalIdentity:
        try:
            claims = self.backend.decode(raw, verify=True)
        except TokenBackendError as exc:
            raise IdentityVerificationError(str(exc)) from exc

        if not claims.get("sub"):
            raise IdentityVerificationError("Assertion has no subject.")
        if "exp" not in claims:
            raise IdentityVerificationError("Assertion has no expiry.")
        if claims.get("purpose") == "invitation":
            raise IdentityVerificationError("Invitation tickets are not sign-in assertions.")

        return ExternalIdentity(
            external_id=str(claims["sub"]),
            provider=self.tag,
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            first_name=claims.get("given_name"),
            last_name=claims.get("family_name"),
            avatar_url=claims.get("picture"),
        )

    def _ticket(self, claims: dict) -> str:
        now = timezone.now()
        payload = {
            **claims,
            "iat": int(now.timestamp()),
            "exp": int((now + settings.IDENTITY_TICKET_LIFETIME).timestamp()),
        }
        return self.backend.encode(payload)

    def issue_sign_in_token(self, external_id: str) -> str:
        return self._ticket({"sub": external_id, "purpose": "sign-in"})

    def create_invitation(self, email: str, rank: str) -> str:
        return self._ticket({"email": email, "rank": str(rank), "purpose": "invitation"})

    def delete_user(self, external_id: str) -> bool:
        # Assertions are stateless; there is no remote account to remove.
        logger.info("Provider holds no account store; nothing to delete")
        return False


def get_identity_provider() -> ExternalIdentityProvider:
    return import_string(settings.IDENTITY_PROVIDER)()
