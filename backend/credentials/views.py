# credentials/views.py
"""
/api/session endpoints.

GET    /api/session            - handoff after provider redirect, 303 to app root
POST   /api/session            - same ceremony, explicit trigger
DELETE /api/session            - sign out (clear cookie)
GET    /api/session/invalidate - self-healing: clear cookies, 303 to sign-in
GET|POST /api/session/refresh  - re-mint from current user record

Handoff failures never expose their reason to the client.
"""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.http import HttpResponseRedirect
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from credentials.handoff import HandoffError, perform_identity_handoff
from credentials.session import (
    CredentialRejected,
    clear_credential,
    invalidation_response,
    read_credential,
    read_token,
    refresh_credential,
    write_credential,
)
from credentials.throttles import SessionHandoffThrottle
from ops.metrics import record_refresh

logger = logging.getLogger(__name__)

User = get_user_model()


def _see_other(location: str) -> HttpResponseRedirect:
    response = HttpResponseRedirect(location)
    response.status_code = 303
    return response


class SessionView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    throttle_classes = [SessionHandoffThrottle]

    def get(self, request, *args, **kwargs):
        try:
            result = perform_identity_handoff(request._request)
        except HandoffError:
            return _see_other(f"{settings.SIGN_IN_URL}?error=session_failed")

        response = _see_other("/")
        write_credential(response, result.token)
        return response

    def post(self, request, *args, **kwargs):
        try:
            result = perform_identity_handoff(request._request)
        except HandoffError:
            return Response(
                {"detail": "Session failed, please sign in again.", "code": "session_failed"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        response = _see_other("/")
        write_credential(response, result.token)
        return response

    def delete(self, request, *args, **kwargs):
        response = Response(status=status.HTTP_204_NO_CONTENT)
        clear_credential(response)
        return response

    def get_throttles(self):
        # Only the ceremony is throttled.
        if self.request.method == "DELETE":
            return []
        return super().get_throttles()


class SessionInvalidateView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        logger.info("Session invalidation requested")
        return invalidation_response()


class SessionRefreshView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        credential = read_credential(request._request)
        if credential is None:
            return Response(
                {"detail": "No session.", "code": "not_authenticated"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        user = User.objects.filter(public_id=credential.sovereign_id, is_active=True).first()
        if user is None:
            record_refresh("user_missing")
            return Response(
                {"detail": "Sovereign user not found.", "code": "sovereign_user_not_found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        try:
            token, credential = refresh_credential(read_token(request._request), user, force=True)
        except CredentialRejected:
            return Response(
                {"detail": "No session.", "code": "not_authenticated"},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        record_refresh("reminted")
        response = Response({"credential": credential.as_public_dict()})
        write_credential(response, token)
        return response

    def post(self, request, *args, **kwargs):
        return self.get(request, *args, **kwargs)
