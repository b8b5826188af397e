# credentials/tests/test_handoff.py
"""
Tests for the identity handoff ceremony.

verify -> resolve-or-create -> register mapping -> mint
"""

from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.test import RequestFactory

from accounts.models import Invitation
from credentials import _minting
from credentials.handoff import HandoffError, HandoffFailure, perform_identity_handoff
from identity import registry
from identity.exceptions import IdentityConflict

User = get_user_model()


@pytest.fixture
def assertion_request(make_assertion):
    rf = RequestFactory()

    def _request(*args, **kwargs):
        return rf.get("/api/session", HTTP_X_IDENTITY_ASSERTION=make_assertion(*args, **kwargs))

    return _request


@pytest.mark.django_db
class TestNewUser:
    def test_creates_user_with_default_rank(self, assertion_request):
        result = perform_identity_handoff(
            assertion_request("ext_new", email="New@Fleet.test", given_name="Nia", email_verified=True)
        )

        assert result.created is True
        user = User.objects.get(public_id=result.credential.sovereign_id)
        assert user.email == "New@fleet.test"
        assert user.rank == "crew"
        assert user.first_name == "Nia"
        assert user.email_verified is True
        assert user.login_count == 1
        assert not user.has_usable_password()
        assert registry.lookup_by_external_id("ext_new") == user.public_id

        assert result.credential.rank == "crew"
        assert result.credential.external_id == "ext_new"
        assert result.credential.login_count == 1

    def test_pending_invitation_sets_rank(self, assertion_request):
        invitation = Invitation.objects.create(email="invited@fleet.test", rank="captain")

        result = perform_identity_handoff(assertion_request("ext_inv", email="invited@fleet.test"))

        assert result.credential.rank == "captain"
        invitation.refresh_from_db()
        assert invitation.status == Invitation.Status.ACCEPTED
        assert invitation.accepted_at is not None

    def test_revoked_invitation_is_ignored(self, assertion_request):
        Invitation.objects.create(
            email="revoked@fleet.test", rank="commodore", status=Invitation.Status.REVOKED
        )
        result = perform_identity_handoff(assertion_request("ext_rev", email="revoked@fleet.test"))
        assert result.credential.rank == "crew"

    def test_new_identity_without_email_fails(self, assertion_request):
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(assertion_request("ext_anon"))
        assert excinfo.value.reason == HandoffFailure.USER_RESOLUTION_FAILED
        assert User.objects.count() == 0

    def test_email_of_unmapped_user_is_not_adopted(self, assertion_request, crew_user):
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(assertion_request("ext_squat", email=crew_user.email.upper()))
        assert excinfo.value.reason == HandoffFailure.USER_RESOLUTION_FAILED
        assert registry.lookup_by_external_id("ext_squat") is None


@pytest.mark.django_db
class TestReturningUser:
    def test_resumes_mapped_user(self, assertion_request, captain_user):
        registry.register("ext_cora", captain_user.public_id)

        result = perform_identity_handoff(assertion_request("ext_cora", email="other@fleet.test"))

        assert result.created is False
        assert result.credential.sovereign_id == str(captain_user.public_id)
        assert result.credential.rank == "captain"
        captain_user.refresh_from_db()
        assert captain_user.login_count == 1
        assert captain_user.last_login is not None
        # The assertion's email never overwrites the stored one.
        assert captain_user.email != "other@fleet.test"

    def test_same_sovereign_id_on_every_sign_in(self, assertion_request):
        first = perform_identity_handoff(assertion_request("ext_twice", email="twice@fleet.test"))
        second = perform_identity_handoff(assertion_request("ext_twice", email="twice@fleet.test"))
        assert first.credential.sovereign_id == second.credential.sovereign_id
        assert second.created is False
        assert User.objects.filter(email="twice@fleet.test").count() == 1

    def test_inactive_user_fails(self, assertion_request, crew_user):
        registry.register("ext_gone", crew_user.public_id)
        crew_user.is_active = False
        crew_user.save()
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(assertion_request("ext_gone"))
        assert excinfo.value.reason == HandoffFailure.USER_RESOLUTION_FAILED


@pytest.mark.django_db
class TestFailures:
    def test_missing_assertion(self):
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(RequestFactory().get("/api/session"))
        assert excinfo.value.reason == HandoffFailure.IDENTITY_UNVERIFIED

    def test_expired_assertion(self, assertion_request):
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(
                assertion_request("ext_old", email="old@fleet.test", lifetime=timedelta(minutes=-1))
            )
        assert excinfo.value.reason == HandoffFailure.IDENTITY_UNVERIFIED
        assert User.objects.count() == 0

    def test_mapping_failure_rolls_back_new_user(self, assertion_request, monkeypatch):
        def conflict(*args, **kwargs):
            raise IdentityConflict("taken", external_id="ext_x")

        monkeypatch.setattr(registry, "register", conflict)
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(assertion_request("ext_x", email="x@fleet.test"))

        assert excinfo.value.reason == HandoffFailure.MAPPING_WRITE_FAILED
        assert not User.objects.filter(email="x@fleet.test").exists()

    def test_mint_failure(self, assertion_request, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("no signing key")

        monkeypatch.setattr(_minting, "mint_credential", broken)
        with pytest.raises(HandoffError) as excinfo:
            perform_identity_handoff(assertion_request("ext_m", email="m@fleet.test"))
        assert excinfo.value.reason == HandoffFailure.SESSION_MINT_FAILED

    def test_failure_is_logged_with_reason(self, caplog):
        with caplog.at_level("WARNING", logger="credentials.handoff"):
            with pytest.raises(HandoffError):
                perform_identity_handoff(RequestFactory().get("/api/session"))
        record = next(r for r in caplog.records if r.getMessage() == "Identity handoff failed")
        assert record.reason == HandoffFailure.IDENTITY_UNVERIFIED
