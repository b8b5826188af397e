# credentials/authentication.py
"""
DRF authentication from the session credential cookie.

The credential only names the caller. The user is loaded fresh on every
request and rank decisions go through accounts.authz.
"""

from django.contrib.auth import get_user_model
from rest_framework.authentication import SessionAuthentication

from accounts.authz import SovereignUserNotFound
from credentials.session import read_credential

User = get_user_model()


class SessionCredentialAuthentication(SessionAuthentication):
    """
    Authenticate with the signed credential cookie.

    Cookie based, so unsafe methods are CSRF-checked exactly like DRF's
    SessionAuthentication.
    """

    def authenticate(self, request):
        credential = read_credential(request._request)
        if credential is None:
            return None

        try:
            user = User.objects.get(public_id=credential.sovereign_id, is_active=True)
        except User.DoesNotExist:
            raise SovereignUserNotFound()

        self.enforce_csrf(request)
        return (user, credential)

    def authenticate_header(self, request):
        return "Session"
