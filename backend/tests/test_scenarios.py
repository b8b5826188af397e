# tests/test_scenarios.py
"""
End-to-end flows through the real HTTP stack.

Browser-style clients sign in with a signed assertion, then load pages
through the Entry Gate and call the API with the credential cookie.
"""

import logging

import pytest
from django.conf import settings as django_settings
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import Client

from credentials.session import verify_token
from identity.models import IdentityMapping

User = get_user_model()

COOKIE = django_settings.SESSION_CREDENTIAL_COOKIE


@pytest.mark.django_db
def test_first_login_creates_one_user_and_one_mapping(make_assertion):
    client = Client()

    first = client.get(
        "/api/session",
        HTTP_X_IDENTITY_ASSERTION=make_assertion("ext_first", email="first@fleet.test"),
    )
    assert first.status_code == 303
    credential = verify_token(first.cookies[COOKIE].value)
    assert credential.rank == "crew"

    user = User.objects.get(email="first@fleet.test")
    assert credential.sovereign_id == str(user.public_id)
    assert IdentityMapping.objects.filter(external_id="ext_first").count() == 1

    second = client.get(
        "/api/session",
        HTTP_X_IDENTITY_ASSERTION=make_assertion("ext_first", email="first@fleet.test"),
    )
    assert second.status_code == 303
    assert verify_token(second.cookies[COOKIE].value).sovereign_id == credential.sovereign_id
    assert User.objects.count() == 1
    assert IdentityMapping.objects.count() == 1

    # The landing page renders for the new crew member.
    home = client.get("/")
    assert home.status_code == 200
    assert home["X-Effective-Rank"] == "crew"


@pytest.mark.django_db
def test_promotion_is_picked_up_by_the_gate(settings, crew_user, sign_in):
    settings.RANK_GATE_ENFORCEMENT = "hard"
    client = Client()
    sign_in(client, crew_user)
    old_token = client.cookies[COOKIE].value

    assert client.get("/finance/invoices").status_code == 302

    User.objects.filter(pk=crew_user.pk).update(rank="captain")

    response = client.get("/finance/invoices")
    assert response.status_code == 200
    assert response["X-Effective-Rank"] == "captain"

    new_token = response.cookies[COOKIE].value
    assert new_token != old_token
    assert verify_token(new_token).rank == "captain"

    # The refreshed cookie is kept by the browser; the next load is quiet.
    again = client.get("/finance/payments")
    assert again.status_code == 200
    assert COOKIE not in again.cookies


@pytest.mark.django_db
def test_deleted_user_self_heals_instead_of_erroring(crew_client, crew_user):
    stale_token = crew_client.cookies[COOKIE].value
    IdentityMapping.objects.filter(user=crew_user).delete()
    User.objects.filter(pk=crew_user.pk).delete()

    response = crew_client.get("/settings/account")
    assert response.status_code == 303
    assert response["Location"] == "/sign-in?session=expired"
    assert response.cookies[COOKIE].value == ""

    # API calls with the same stale cookie report the distinct not-found code.
    stale = Client()
    stale.cookies[COOKIE] = stale_token
    api = stale.get("/api/users/me")
    assert api.status_code == 401
    assert api.json()["detail"] == "Sovereign user not found."


@pytest.mark.django_db
def test_soft_mode_logs_but_serves_admiral_route(settings, crew_user, sign_in, caplog):
    settings.RANK_GATE_ENFORCEMENT = "soft"
    client = Client()
    sign_in(client, crew_user)

    with caplog.at_level(logging.INFO, logger="credentials.middleware"):
        response = client.get("/system/ranks")

    assert response.status_code == 200
    assert "Entry gate would block" in caplog.text

    # The data layer still refuses.
    assert client.get("/api/admin/users").status_code == 403


@pytest.mark.django_db
def test_invited_admiral_takes_the_helm(make_assertion):
    call_command("invite", "founder@fleet.test", rank="admiral")

    client = Client()
    response = client.get(
        "/api/session",
        HTTP_X_IDENTITY_ASSERTION=make_assertion("ext_founder", email="founder@fleet.test"),
    )
    assert response.status_code == 303
    assert verify_token(response.cookies[COOKIE].value).rank == "admiral"
    assert client.get("/api/admin/users").status_code == 200
