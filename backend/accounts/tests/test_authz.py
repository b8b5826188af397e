# accounts/tests/test_authz.py
"""
Tests for rank guards.

Guards take a sovereign id and re-read the rank from the database; a
rank carried anywhere else is never consulted.
"""

from dataclasses import FrozenInstanceError
from uuid import uuid4

import pytest
from rest_framework.exceptions import NotAuthenticated
from rest_framework.test import APIRequestFactory

from accounts.authz import (
    ActorContext,
    InsufficientRank,
    IsAdmiral,
    IsCaptainOrHigher,
    RankNotAssigned,
    SovereignUserNotFound,
    get_user_rank,
    get_users_by_rank,
    is_admiral,
    require_admiral_rank,
    require_minimum_rank,
    resolve_actor,
)
from ranks.hierarchy import Rank


@pytest.mark.django_db
class TestRequireMinimumRank:
    def test_returns_user_when_granted(self, captain_user):
        user = require_minimum_rank(captain_user.public_id, Rank.CREW)
        assert user.pk == captain_user.pk
        assert require_minimum_rank(str(captain_user.public_id), Rank.CAPTAIN).pk == captain_user.pk

    def test_insufficient_rank(self, crew_user):
        with pytest.raises(InsufficientRank) as excinfo:
            require_minimum_rank(crew_user.public_id, Rank.CAPTAIN)
        assert excinfo.value.get_codes() == "insufficient_rank"
        assert "captain" in str(excinfo.value.detail)

    def test_no_rank_is_distinct_from_insufficient(self, unranked_user):
        with pytest.raises(RankNotAssigned) as excinfo:
            require_minimum_rank(unranked_user.public_id, Rank.CREW)
        assert excinfo.value.get_codes() == "rank_not_assigned"

    def test_unrecognised_stored_rank_is_no_rank(self, make_user):
        user = make_user(rank="pirate")
        with pytest.raises(RankNotAssigned):
            require_minimum_rank(user.public_id, Rank.CREW)

    @pytest.mark.parametrize("sovereign_id", [lambda: uuid4(), lambda: "not-a-uuid"])
    def test_unknown_user(self, sovereign_id):
        with pytest.raises(SovereignUserNotFound) as excinfo:
            require_minimum_rank(sovereign_id(), Rank.CREW)
        assert excinfo.value.get_codes() == "sovereign_user_not_found"

    def test_inactive_user_is_not_found(self, crew_user):
        crew_user.is_active = False
        crew_user.save()
        with pytest.raises(SovereignUserNotFound):
            require_minimum_rank(crew_user.public_id, Rank.CREW)

    def test_rank_is_read_fresh(self, crew_user):
        with pytest.raises(InsufficientRank):
            require_admiral_rank(crew_user.public_id)
        crew_user.rank = Rank.ADMIRAL
        crew_user.save()
        assert require_admiral_rank(crew_user.public_id).pk == crew_user.pk

    def test_commodore_is_not_admiral(self, commodore_user):
        with pytest.raises(InsufficientRank):
            require_admiral_rank(commodore_user.public_id)


@pytest.mark.django_db
class TestNonThrowingHelpers:
    def test_get_user_rank(self, captain_user, unranked_user):
        assert get_user_rank(captain_user.public_id) == Rank.CAPTAIN
        assert get_user_rank(unranked_user.public_id) is None
        assert get_user_rank(uuid4()) is None

    def test_is_admiral(self, admiral_user, commodore_user):
        assert is_admiral(admiral_user.public_id)
        assert not is_admiral(commodore_user.public_id)
        assert not is_admiral(uuid4())

    def test_get_users_by_rank(self, make_user):
        b = make_user(Rank.CAPTAIN, email="b@fleet.test")
        a = make_user(Rank.CAPTAIN, email="a@fleet.test")
        make_user(Rank.CREW)
        make_user(Rank.CAPTAIN, email="gone@fleet.test", is_active=False)

        assert list(get_users_by_rank("captain")) == [a, b]
        assert list(get_users_by_rank("pirate")) == []


@pytest.mark.django_db
class TestActor:
    def test_resolve_actor_reloads_rank(self, crew_user):
        request = APIRequestFactory().get("/")
        request.user = crew_user
        crew_user.rank = Rank.ADMIRAL  # in memory only

        actor = resolve_actor(request)
        assert actor.rank == Rank.CREW
        assert actor.sovereign_id == crew_user.public_id
        assert not actor.is_admiral
        assert actor.has_minimum(Rank.CREW)
        assert not actor.has_minimum(Rank.CAPTAIN)

    def test_resolve_actor_requires_user(self):
        request = APIRequestFactory().get("/")
        with pytest.raises(NotAuthenticated):
            resolve_actor(request)

    def test_context_is_immutable(self, crew_user):
        actor = ActorContext(user=crew_user, rank=Rank.CREW)
        with pytest.raises(FrozenInstanceError):
            actor.rank = Rank.ADMIRAL


@pytest.mark.django_db
class TestPermissionClasses:
    def _request(self, user):
        request = APIRequestFactory().get("/")
        request.user = user
        return request

    def test_grants(self, captain_user, admiral_user):
        assert IsCaptainOrHigher().has_permission(self._request(captain_user), None)
        assert IsAdmiral().has_permission(self._request(admiral_user), None)

    def test_denies_with_guard_exception(self, captain_user, unranked_user):
        with pytest.raises(InsufficientRank):
            IsAdmiral().has_permission(self._request(captain_user), None)
        with pytest.raises(RankNotAssigned):
            IsCaptainOrHigher().has_permission(self._request(unranked_user), None)
