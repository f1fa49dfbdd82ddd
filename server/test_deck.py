"""
Test suite for draw piles.

Covers:
- Stack semantics (draw from the end)
- Rebuild with exclusion
- Prompt pile reshuffle on exhaustion
- Hand refill and response pile reshuffle without duplicates

Run with: pytest test_deck.py -v
"""

import random

from deck import Deck, DeckManager


class TestDeck:

    def test_draw_from_end(self, catalog):
        deck = Deck(random.Random(1))
        cards = list(catalog.get_pack(0).white[:3])
        deck.cards = list(cards)
        assert deck.draw() is cards[2]
        assert deck.cards_remaining() == 2

    def test_draw_empty_returns_none(self):
        assert Deck().draw() is None

    def test_rebuild_excludes_by_id(self, catalog):
        deck = Deck(random.Random(1))
        white = catalog.get_pack(0).white
        deck.rebuild(white, exclude=white[:5])
        assert deck.cards_remaining() == 35
        assert {c.id for c in deck.cards} == {c.id for c in white[5:]}

    def test_rebuild_shuffles(self, catalog):
        deck = Deck(random.Random(7))
        white = catalog.get_pack(0).white
        deck.rebuild(white)
        assert sorted(c.id for c in deck.cards) == [c.id for c in white]
        assert [c.id for c in deck.cards] != [c.id for c in white]


class TestDrawBlack:

    def test_rebuilds_when_empty(self, catalog):
        manager = DeckManager(catalog.get_all_packs(), random.Random(3))
        card = manager.draw_black()
        assert card is not None
        assert manager.black.cards_remaining() == 8

    def test_cycles_through_every_prompt(self, catalog):
        manager = DeckManager(catalog.get_all_packs(), random.Random(3))
        seen = [manager.draw_black().id for _ in range(9)]
        assert sorted(seen) == list(range(40, 46)) + list(range(66, 69))
        # Next draw triggers a fresh reshuffle
        assert manager.draw_black() is not None
        assert manager.black.cards_remaining() == 8


class TestRefillHands:

    def test_fills_every_hand(self, catalog):
        manager = DeckManager(catalog.get_all_packs(), random.Random(5))
        hands = [[], [], []]
        manager.refill_hands(hands, 10)
        assert [len(h) for h in hands] == [10, 10, 10]
        assert manager.white.cards_remaining() == 30

    def test_no_card_in_two_places(self, catalog):
        manager = DeckManager(catalog.get_all_packs(), random.Random(5))
        hands = [[], [], [], []]
        manager.refill_hands(hands, 10)
        held = [c.id for h in hands for c in h]
        assert len(held) == len(set(held))
        assert {c.id for c in manager.white.cards}.isdisjoint(held)

    def test_reshuffle_excludes_held_cards(self, catalog):
        manager = DeckManager(catalog.get_all_packs(), random.Random(5))
        hands = [[], []]
        manager.refill_hands(hands, 10)
        # Drain the pile so the next refill must rebuild it
        manager.white.cards = manager.white.cards[:1]
        hands[0] = hands[0][:7]
        manager.refill_hands(hands, 10)

        held = [c.id for h in hands for c in h]
        assert [len(h) for h in hands] == [10, 10]
        assert len(held) == len(set(held))
        assert {c.id for c in manager.white.cards}.isdisjoint(held)
        assert manager.white.cards_remaining() == 60 - 20

    def test_no_reshuffle_when_pile_covers_shortfall(self, catalog):
        manager = DeckManager(catalog.get_all_packs(), random.Random(5))
        hands = [[], []]
        manager.refill_hands(hands, 10)
        pile_before = list(manager.white.cards)
        hands[1] = hands[1][:9]
        manager.refill_hands(hands, 10)
        assert manager.white.cards == pile_before[:-1]

    def test_stops_when_packs_exhausted(self, catalog):
        manager = DeckManager([catalog.get_pack(1)], random.Random(5))
        hands = [[], [], []]
        manager.refill_hands(hands, 10)
        assert sum(len(h) for h in hands) == 20
        assert manager.white.is_empty()
