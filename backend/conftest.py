# conftest.py
"""
Shared pytest fixtures.

Users are created directly; sessions are obtained through the real
identity handoff (GET /api/session with a signed assertion) so tests
exercise the same path a browser does.
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework_simplejwt.backends import TokenBackend

from identity import registry
from ranks.hierarchy import Rank

User = get_user_model()


# =============================================================================
# Assertions (what the upstream identity provider would sign)
# =============================================================================

@pytest.fixture
def make_assertion():
    """Sign an identity assertion the default provider accepts."""

    def _make(external_id=None, email=None, lifetime=timedelta(minutes=5), **claims):
        backend = TokenBackend(
            "HS256",
            signing_key=settings.IDENTITY_ASSERTION_SECRET,
            audience=settings.IDENTITY_ASSERTION_AUDIENCE,
            issuer=settings.IDENTITY_ASSERTION_ISSUER,
        )
        now = timezone.now()
        payload = {
            "sub": external_id or f"ext_{uuid4().hex[:12]}",
            "iat": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
            **claims,
        }
        if email is not None:
            payload["email"] = email
        return backend.encode(payload)

    return _make


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(rank=Rank.CREW, email=None, **fields):
        counter["n"] += 1
        email = email or f"user{counter['n']}_{uuid4().hex[:6]}@fleet.test"
        return User.objects.create_user(
            email=email,
            rank=rank.value if isinstance(rank, Rank) else rank,
            **fields,
        )

    return _make


@pytest.fixture
def crew_user(make_user):
    return make_user(Rank.CREW, first_name="Casey")


@pytest.fixture
def captain_user(make_user):
    return make_user(Rank.CAPTAIN, first_name="Cora")


@pytest.fixture
def commodore_user(make_user):
    return make_user(Rank.COMMODORE, first_name="Cole")


@pytest.fixture
def admiral_user(make_user):
    return make_user(Rank.ADMIRAL, first_name="Ada")


@pytest.fixture
def unranked_user(make_user):
    return make_user(rank=None)


# =============================================================================
# Sessions
# =============================================================================

@pytest.fixture
def sign_in(make_assertion):
    """
    Map the user to a fresh external id and run the handoff on `client`.

    Returns the external id.
    """

    def _sign_in(client, user):
        external_id = f"ext_{user.public_id.hex[:12]}"
        registry.register(external_id, user.public_id)
        response = client.get(
            "/api/session",
            HTTP_X_IDENTITY_ASSERTION=make_assertion(external_id),
        )
        assert response.status_code == 303, response
        assert settings.SESSION_CREDENTIAL_COOKIE in response.cookies
        return external_id

    return _sign_in


@pytest.fixture
def crew_client(client, crew_user, sign_in):
    sign_in(client, crew_user)
    return client


@pytest.fixture
def captain_client(client, captain_user, sign_in):
    sign_in(client, captain_user)
    return client


@pytest.fixture
def admiral_client(client, admiral_user, sign_in):
    sign_in(client, admiral_user)
    return client
