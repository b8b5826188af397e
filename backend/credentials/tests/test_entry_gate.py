# credentials/tests/test_entry_gate.py
"""
Tests for the Entry Gate middleware.

The gate reads its configuration when the middleware chain is built, so
every test that changes it builds a fresh client afterwards.
"""

import logging
from types import SimpleNamespace

import pytest
from django.conf import settings as django_settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.test import Client

from credentials.middleware import GateConfig
from identity.models import IdentityMapping

COOKIE = django_settings.SESSION_CREDENTIAL_COOKIE


@pytest.fixture
def gate_client(settings, sign_in):
    """Fresh client built under the given gate mode, signed in as user."""

    def _make(user=None, mode="soft", admin_realm=False):
        settings.RANK_GATE_ENFORCEMENT = mode
        settings.ENABLE_ADMIN_REALM = admin_realm
        client = Client()
        if user is not None:
            sign_in(client, user)
        return client

    return _make


class TestGateConfig:
    def test_rejects_unknown_mode(self, settings):
        settings.RANK_GATE_ENFORCEMENT = "strict"
        with pytest.raises(ImproperlyConfigured):
            GateConfig.from_settings()

    def test_reads_settings(self, settings):
        settings.RANK_GATE_ENFORCEMENT = "hard"
        settings.ENABLE_ADMIN_REALM = True
        config = GateConfig.from_settings()
        assert config.hard
        assert config.admin_realm_enabled
        assert config.sign_in_url == "/sign-in"


@pytest.mark.django_db
class TestAnonymous:
    def test_gated_page_redirects_to_sign_in(self, gate_client):
        response = gate_client().get("/settings/account")
        assert response.status_code == 302
        assert response["Location"] == "/sign-in"

    def test_public_page_is_served_with_default_theme(self, gate_client):
        response = gate_client().get("/sign-in")
        assert response.status_code == 200
        assert response["X-Theme-Name"] == "transtheme"
        assert response["X-Theme-Mode"] == "light"
        assert "Cookie" in response["Vary"]

    def test_public_prefix_matches_whole_segment(self, gate_client):
        assert gate_client().get("/invite/abc123").status_code == 200
        assert gate_client().get("/invitees").status_code == 302

    def test_api_and_ops_pass_through(self, gate_client):
        client = gate_client()
        assert client.get("/_health/live").status_code == 200
        # API auth is the API's business, not the gate's.
        assert client.get("/api/ranks/navigation").status_code == 401

    def test_assets_pass_through(self, gate_client):
        response = gate_client().get("/images/rank/crew.png")
        assert response.status_code == 200
        assert "X-Effective-Rank" not in response


@pytest.mark.django_db
class TestAllowed:
    def test_allowed_route_is_served_and_stamped(self, gate_client, crew_user):
        response = gate_client(crew_user).get("/settings/account")
        assert response.status_code == 200
        assert response["X-Effective-Rank"] == "crew"
        assert response["X-Actual-Rank"] == "crew"
        assert response["X-Org-Id"] == ""
        assert response["X-Theme-Name"] == "transtheme"
        assert response["X-Theme-Mode"] == "light"

    def test_matching_is_exact(self, gate_client, crew_user):
        client = gate_client(crew_user, mode="hard")
        assert client.get("/settings/account").status_code == 200
        assert client.get("/settings/account/extra").status_code == 302


@pytest.mark.django_db
class TestDenied:
    def test_hard_mode_redirects_to_rank_home(self, gate_client, crew_user):
        response = gate_client(crew_user, mode="hard").get("/finance/invoices")
        assert response.status_code == 302
        assert response["Location"] == "/"

    def test_soft_mode_serves_and_logs(self, gate_client, crew_user, caplog):
        client = gate_client(crew_user, mode="soft")
        with caplog.at_level(logging.INFO, logger="credentials.middleware"):
            response = client.get("/finance/invoices")
        assert response.status_code == 200
        record = next(r for r in caplog.records if r.getMessage() == "Entry gate would block")
        assert record.rank == "crew"
        assert record.path == "/finance/invoices"

    def test_hard_mode_without_rank_goes_to_sign_in(self, gate_client, unranked_user):
        response = gate_client(unranked_user, mode="hard").get("/")
        assert response.status_code == 302
        assert response["Location"] == "/sign-in?error=rank_not_assigned"


@pytest.mark.django_db
class TestAdminRealm:
    def test_disabled_realm_redirects_everyone(self, gate_client, admiral_user):
        response = gate_client(admiral_user, mode="hard").get("/admin/users")
        assert response.status_code == 302
        assert response["Location"] == "/"

    def test_enabled_realm_follows_manifests(self, gate_client, admiral_user, crew_user):
        admiral = gate_client(admiral_user, mode="hard", admin_realm=True)
        assert admiral.get("/admin/users").status_code == 200

        crew = gate_client(crew_user, mode="hard", admin_realm=True)
        response = crew.get("/admin/users")
        assert response.status_code == 302
        assert response["Location"] == "/"


@pytest.mark.django_db
class TestRefresh:
    def test_fresh_credential_is_not_reissued(self, gate_client, crew_user):
        response = gate_client(crew_user).get("/")
        assert COOKIE not in response.cookies

    def test_stale_credential_is_reminted(self, gate_client, crew_user):
        client = gate_client(crew_user)
        crew_user.theme_dark = True
        crew_user.org_id = "org-9"
        crew_user.save()

        response = client.get("/")
        assert response.status_code == 200
        assert response["X-Theme-Mode"] == "dark"
        assert response["X-Org-Id"] == "org-9"
        assert response.cookies[COOKIE].value

    def test_promotion_takes_effect_on_next_page_load(self, gate_client, crew_user):
        client = gate_client(crew_user, mode="hard")
        assert client.get("/clients/contacts").status_code == 302

        crew_user.rank = "captain"
        crew_user.save()

        response = client.get("/clients/contacts")
        assert response.status_code == 200
        assert response["X-Effective-Rank"] == "captain"

    def test_missing_user_invalidates_session(self, gate_client, crew_user):
        client = gate_client(crew_user)
        IdentityMapping.objects.filter(user=crew_user).delete()
        crew_user.delete()

        response = client.get("/settings/account")
        assert response.status_code == 303
        assert response["Location"] == "/sign-in?session=expired"
        assert response.cookies[COOKIE].value == ""
        assert response.cookies["__session"].value == ""

    def test_inactive_user_invalidates_session(self, gate_client, crew_user):
        client = gate_client(crew_user)
        crew_user.is_active = False
        crew_user.save()
        assert client.get("/").status_code == 303

    def test_database_error_keeps_existing_credential(self, gate_client, crew_user, monkeypatch):
        client = gate_client(crew_user, mode="hard")

        def unavailable(**kwargs):
            raise DatabaseError("connection refused")

        fake_user = SimpleNamespace(objects=SimpleNamespace(filter=unavailable))
        monkeypatch.setattr("credentials.middleware.User", fake_user)

        response = client.get("/settings/account")
        assert response.status_code == 200
        assert response["X-Effective-Rank"] == "crew"
        assert COOKIE not in response.cookies
