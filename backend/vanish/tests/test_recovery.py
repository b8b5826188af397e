# vanish/tests/test_recovery.py
"""
Tests for admin account recovery tickets.
"""

from uuid import uuid4

import pytest
from django.test import Client

from accounts.authz import ActorContext, InsufficientRank
from identity.providers import SignedAssertionProvider
from identity.registry import register
from ranks.hierarchy import parse_rank
from vanish.recovery import issue_recovery_ticket


def actor_for(user):
    return ActorContext(user=user, rank=parse_rank(user.rank))


@pytest.mark.django_db
class TestRecoveryTicket:
    def test_ticket_signs_in_as_the_same_identity(self, admiral_user, crew_user):
        register("ext_casey", crew_user.public_id)

        result = issue_recovery_ticket(actor_for(admiral_user), crew_user.public_id)

        assert result.success
        identity = SignedAssertionProvider().verify_assertion(result.data["ticket"])
        assert identity.external_id == "ext_casey"

    def test_unmapped_user(self, admiral_user, crew_user):
        result = issue_recovery_ticket(actor_for(admiral_user), crew_user.public_id)
        assert result.error == "User has no linked identity."

    def test_unknown_user(self, admiral_user):
        result = issue_recovery_ticket(actor_for(admiral_user), uuid4())
        assert result.error == "User not found."

    def test_admiral_only(self, commodore_user, crew_user):
        with pytest.raises(InsufficientRank):
            issue_recovery_ticket(actor_for(commodore_user), crew_user.public_id)


@pytest.mark.django_db
def test_recovery_ticket_redeems_through_handoff(admiral_client, crew_user):
    register("ext_casey", crew_user.public_id)
    response = admiral_client.post(f"/api/admin/users/{crew_user.public_id}/recovery")
    assert response.status_code == 200
    ticket = response.json()["ticket"]

    redeem = Client().get("/api/session", HTTP_X_IDENTITY_ASSERTION=ticket)
    assert redeem.status_code == 303
