"""
Deck - Per-player movement cards.

Each player owns a fixed 18-card deck:
4x1, 4x2, 3x3, 3x4, 2x5, 2x6

All operations return a new PlayerHand. Randomness is injected as a
random.Random so the reducer stays deterministic.
"""

from __future__ import annotations
import random

from .state import Card, PlayerHand


DECK_COMPOSITION: dict[int, int] = {
    1: 4,
    2: 4,
    3: 3,
    4: 3,
    5: 2,
    6: 2,
}

DECK_SIZE = sum(DECK_COMPOSITION.values())

HAND_SIZE = 3


def shuffle(cards: tuple[Card, ...] | list[Card], rng: random.Random) -> tuple[Card, ...]:
    """Return the cards in a uniformly random order."""
    result = list(cards)
    rng.shuffle(result)
    return tuple(result)


def create_deck(owner_id: str, rng: random.Random) -> tuple[Card, ...]:
    """Create a shuffled deck with ids unique to the owner."""
    cards = []
    serial = 0
    for value, count in DECK_COMPOSITION.items():
        for _ in range(count):
            serial += 1
            cards.append(Card(card_id=f"{owner_id}-card-{serial}", value=value))
    return shuffle(cards, rng)


def draw_card(hand: PlayerHand, rng: random.Random) -> PlayerHand:
    """
    Move the top card of the deck into the hand.

    An empty deck is refilled by shuffling the discard pile first.
    With both empty, nothing happens.
    """
    deck = hand.deck
    discard = hand.discard
    if not deck and discard:
        deck = shuffle(discard, rng)
        discard = ()

    if not deck:
        return hand

    return PlayerHand(
        player_id=hand.player_id,
        cards=hand.cards + (deck[0],),
        deck=deck[1:],
        discard=discard,
    )


def play_card(hand: PlayerHand, card_id: str) -> PlayerHand:
    """Move a held card to the discard pile. Unknown ids leave the hand as is."""
    card = get_card_by_id(hand, card_id)
    if card is None:
        return hand

    return PlayerHand(
        player_id=hand.player_id,
        cards=tuple(c for c in hand.cards if c.card_id != card_id),
        deck=hand.deck,
        discard=hand.discard + (card,),
    )


def get_card_by_id(hand: PlayerHand, card_id: str) -> Card | None:
    for card in hand.cards:
        if card.card_id == card_id:
            return card
    return None


def refresh_hand(hand: PlayerHand, rng: random.Random, hand_size: int = HAND_SIZE) -> PlayerHand:
    """Discard the whole hand, then draw back up to hand_size."""
    new_hand = PlayerHand(
        player_id=hand.player_id,
        cards=(),
        deck=hand.deck,
        discard=hand.discard + hand.cards,
    )
    for _ in range(hand_size):
        new_hand = draw_card(new_hand, rng)
    return new_hand


def create_player_hand(
    player_id: str,
    rng: random.Random,
    hand_size: int = HAND_SIZE,
) -> PlayerHand:
    """Create a fresh deck and deal the opening hand."""
    deck = create_deck(player_id, rng)
    return PlayerHand(
        player_id=player_id,
        cards=deck[:hand_size],
        deck=deck[hand_size:],
        discard=(),
    )
