"""
Test suite for Session and SessionManager.

Covers:
- Session creation defaults, pack checks and id assignment
- Deletion and lookups
- Join/leave rules with owner reassignment
- Player registry integration
- Per-session locks

Run with: pytest test_session.py -v
"""

import asyncio

import pytest

from catalog import CardCatalog
from conftest import pack_data
from errors import (
    AlreadyMemberError,
    InsufficientCardsError,
    NoPromptCardsError,
    NotMemberError,
    NotOwnerError,
    PlayerInGameError,
    PlayerNotFoundError,
    SessionNotFoundError,
    SessionRunningError,
)
from game import GamePhase
from session import SessionManager


# =============================================================================
# Creation
# =============================================================================

class TestCreate:

    def test_defaults(self, manager, make_players, catalog):
        owner, = make_players(1)
        session = manager.create(owner)

        assert session.goal == 10
        assert [p.id for p in session.packs] == [p.id for p in catalog.get_all_packs()]
        assert session.owner is owner
        assert session.players == [owner]
        assert session.running is False
        assert session.winner is None
        assert session.state is None
        assert session.phase == GamePhase.WAITING

    def test_custom_packs_and_goal(self, manager, make_players, catalog):
        owner, = make_players(1)
        session = manager.create(owner, [catalog.get_pack(1)], goal=3)
        assert [p.id for p in session.packs] == [1]
        assert session.goal == 3

    def test_ids_increase(self, manager, make_players):
        a, b, c = make_players(3)
        ids = [manager.create(p).id for p in (a, b, c)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_no_prompt_cards(self, registry):
        catalog = CardCatalog()
        catalog.load_packs([pack_data("White only", white=30, black=0)])
        manager = SessionManager(catalog, registry)
        owner = registry.create("Alice")

        with pytest.raises(NoPromptCardsError):
            manager.create(owner)
        assert manager.get_all() == []

    def test_empty_pack_selection(self, manager, make_players):
        owner, = make_players(1)
        with pytest.raises(NoPromptCardsError):
            manager.create(owner, [])

    def test_owner_needs_a_full_hand(self, registry):
        catalog = CardCatalog()
        catalog.load_packs([pack_data("Tiny", white=9, black=2)])
        manager = SessionManager(catalog, registry)

        with pytest.raises(InsufficientCardsError):
            manager.create(registry.create("Alice"))
        assert manager.get_all() == []


# =============================================================================
# Deletion and lookups
# =============================================================================

class TestDeleteAndLookup:

    def test_get_and_get_all(self, manager, make_players):
        a, b = make_players(2)
        s1 = manager.create(a)
        s2 = manager.create(b)
        assert manager.get(s1.id) is s1
        assert manager.get_all() == [s1, s2]
        assert manager.get(999) is None

    def test_delete(self, manager, make_players):
        owner, = make_players(1)
        session = manager.create(owner)
        manager.delete(session.id)
        assert manager.get(session.id) is None

    def test_delete_unknown(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.delete(42)

    def test_delete_running(self, manager, make_players):
        owner, = make_players(1)
        session = manager.create(owner)
        manager.start(session)
        with pytest.raises(SessionRunningError):
            manager.delete(session.id)
        assert manager.get(session.id) is session

    def test_require(self, manager, make_players):
        owner, = make_players(1)
        session = manager.create(owner)
        assert manager.require(session.id) is session
        with pytest.raises(SessionNotFoundError):
            manager.require(session.id + 1)


# =============================================================================
# Membership
# =============================================================================

class TestJoin:

    def test_join_appends_in_order(self, manager, make_players):
        a, b, c = make_players(3)
        session = manager.create(a)
        manager.join(session, b)
        manager.join(session, c)
        assert [p.id for p in session.players] == [a.id, b.id, c.id]

    def test_join_running(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        manager.start(session)
        with pytest.raises(SessionRunningError):
            manager.join(session, b)
        assert len(session.players) == 1

    def test_join_twice(self, manager, make_players):
        a, = make_players(1)
        session = manager.create(a)
        with pytest.raises(AlreadyMemberError):
            manager.join(session, a)

    def test_capacity_check(self, manager, make_players, catalog):
        players = make_players(3)
        # Pack 1 has 20 white cards: two hands fit, three do not
        session = manager.create(players[0], [catalog.get_pack(1)])
        manager.join(session, players[1])
        with pytest.raises(InsufficientCardsError):
            manager.join(session, players[2])
        assert len(session.players) == 2


class TestLeave:

    def test_last_member_leaving_deletes(self, manager, make_players):
        owner, = make_players(1)
        session = manager.create(owner)
        before = len(manager.get_all())

        manager.leave(session, owner)

        assert len(manager.get_all()) == before - 1
        assert manager.get(session.id) is None

    def test_owner_leaving_transfers_ownership(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        manager.join(session, b)

        manager.leave(session, a)

        assert session.owner is b
        assert len(session.players) == 1

    def test_owner_passes_to_first_in_join_order(self, manager, make_players):
        a, b, c = make_players(3)
        session = manager.create(a)
        manager.join(session, b)
        manager.join(session, c)
        manager.leave(session, a)
        assert session.owner is b

    def test_non_owner_leaving_keeps_owner(self, manager, make_players):
        a, b, c = make_players(3)
        session = manager.create(a)
        manager.join(session, b)
        manager.join(session, c)
        manager.leave(session, b)
        assert session.owner is a
        assert [p.id for p in session.players] == [a.id, c.id]

    def test_leaving_ends_running_game_for_everyone(self, manager, make_players):
        a, b, c = make_players(3)
        session = manager.create(a)
        manager.join(session, b)
        manager.join(session, c)
        manager.start(session)

        manager.leave(session, c)

        assert session.running is False
        assert session.state is None
        assert session.winner is None
        assert manager.get(session.id) is session

    def test_not_a_member(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        with pytest.raises(NotMemberError):
            manager.leave(session, b)


class TestEnd:

    def test_end_clears_state(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        manager.join(session, b)
        manager.start(session)

        manager.end(session)

        assert session.running is False
        assert session.state is None
        assert session.phase == GamePhase.WAITING

    def test_end_with_winner(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        manager.join(session, b)
        manager.start(session)
        manager.end(session, b)
        assert session.winner is b
        assert session.phase == GamePhase.FINISHED

    def test_require_owner(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        manager.join(session, b)
        manager.require_owner(session, a)
        with pytest.raises(NotOwnerError):
            manager.require_owner(session, b)


# =============================================================================
# Players
# =============================================================================

class TestPlayers:

    def test_is_player_in_game(self, manager, make_players):
        a, b = make_players(2)
        session = manager.create(a)
        assert manager.is_player_in_game(a) is False

        manager.start(session)
        assert manager.is_player_in_game(a) is True
        assert manager.is_player_in_game(a, session) is True
        assert manager.is_player_in_game(b) is False

    def test_resolve_player(self, manager, make_players):
        a, = make_players(1)
        assert manager.resolve_player(a.id) is a
        with pytest.raises(PlayerNotFoundError):
            manager.resolve_player(999)

    def test_delete_player_in_running_game(self, manager, make_players, registry):
        a, = make_players(1)
        session = manager.create(a)
        manager.start(session)
        with pytest.raises(PlayerInGameError):
            manager.delete_player(a.id)
        assert registry.get(a.id) is a

    def test_delete_idle_player(self, manager, make_players, registry):
        a, = make_players(1)
        manager.delete_player(a.id)
        assert registry.get(a.id) is None

    def test_deleted_owner_leaves_waiting_session(self, manager, make_players, registry):
        a, b = make_players(2)
        session = manager.create(a)
        manager.join(session, b)

        manager.delete_player(a.id)

        assert registry.get(a.id) is None
        assert session.owner is b
        assert [p.id for p in session.players] == [b.id]
        manager.require_owner(session, b)
        manager.start(session)
        assert session.running is True

    def test_deleted_sole_member_removes_session(self, manager, make_players):
        a, b = make_players(2)
        solo = manager.create(a)
        shared = manager.create(b)
        manager.join(shared, a)

        manager.delete_player(a.id)

        assert manager.get(solo.id) is None
        assert manager.get(shared.id) is shared
        assert [p.id for p in shared.players] == [b.id]

    def test_registry_ids_monotonic(self, registry):
        first = registry.create("A")
        registry.delete(first.id)
        second = registry.create("B")
        assert second.id > first.id


# =============================================================================
# Locks
# =============================================================================

class TestLocks:

    def test_each_session_has_own_lock(self, manager, make_players):
        a, b = make_players(2)
        s1 = manager.create(a)
        s2 = manager.create(b)
        assert s1.lock is not s2.lock

    @pytest.mark.asyncio
    async def test_other_sessions_not_blocked(self, manager, make_players):
        a, b = make_players(2)
        s1 = manager.create(a)
        s2 = manager.create(b)

        async with s1.lock:
            await asyncio.wait_for(s2.lock.acquire(), timeout=1)
            manager.start(s2)
            s2.lock.release()
        assert s2.running is True
