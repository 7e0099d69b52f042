"""Card and Deck classes for hold'em."""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass

from holdem_engine.core.errors import InsufficientCards, InvalidInput
from holdem_engine.utils.constants import (
    CHAR_RANKS,
    RANK_CHARS,
    SUIT_SYMBOLS,
    Rank,
    Suit,
)


@dataclass(frozen=True)
class Card:
    """Represents a single playing card.

    Cards order by rank only; suit matters for equality, hashing and
    flush detection.
    """

    rank: Rank
    suit: Suit

    @classmethod
    def from_str(cls, s: str) -> Card:
        """Create a Card from a string like 'Ah', 'Td' or '10♠'.

        Args:
            s: Rank character(s) followed by one suit character. The suit
               may be a letter (h, d, c, s) or a symbol (♥, ♦, ♣, ♠).

        Returns:
            A new Card instance.

        Raises:
            InvalidInput: If the string does not name a card.
        """
        if len(s) not in (2, 3):
            raise InvalidInput(f"Card string must be 2 characters, got '{s}'")
        rank_part, suit_part = s[:-1], s[-1]
        if rank_part == "10":
            rank_part = "T"
        rank = CHAR_RANKS.get(rank_part.upper())
        if rank is None:
            raise InvalidInput(f"Invalid rank character: '{rank_part}'")
        suit = SUIT_SYMBOLS.get(suit_part)
        if suit is None:
            try:
                suit = Suit(suit_part.lower())
            except ValueError:
                raise InvalidInput(f"Invalid suit character: '{suit_part}'")
        return cls(rank=rank, suit=suit)

    @property
    def value(self) -> int:
        """Numeric value of the card's rank (2-14)."""
        return int(self.rank)

    def __str__(self) -> str:
        return f"{RANK_CHARS[self.rank]}{self.suit.value}"

    def __repr__(self) -> str:
        return f"Card('{self}')"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.value >= other.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank == other.rank and self.suit == other.suit

    def __hash__(self) -> int:
        return hash((self.rank, self.suit))


def full_deck() -> list[Card]:
    """Return all 52 cards in a fixed order."""
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


def parse_cards(cards: str | Iterable[str]) -> list[Card]:
    """Parse 'As Kd 2c' (or an iterable of card strings) into Cards."""
    tokens = cards.split() if isinstance(cards, str) else list(cards)
    return [Card.from_str(token) for token in tokens]


def ensure_distinct(cards: Iterable[Card]) -> None:
    """Raise InvalidInput if any card appears more than once."""
    seen: set[Card] = set()
    for card in cards:
        if card in seen:
            raise InvalidInput(f"Duplicate card: {card}")
        seen.add(card)


class Deck:
    """Standard 52-card deck with shuffle and deal operations.

    Built fresh for each hand; dealt cards never come back, so a deck
    cannot yield the same card twice.
    """

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._cards: list[Card] = []
        self._dealt: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Restore all 52 cards and shuffle."""
        self._cards = full_deck()
        self._dealt = []
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle the remaining cards in the deck."""
        self._rng.shuffle(self._cards)

    def deal(self, n: int = 1) -> list[Card]:
        """Deal n cards from the top of the deck.

        Raises:
            InvalidInput: If n is negative.
            InsufficientCards: If not enough cards remain.
        """
        if n < 0:
            raise InvalidInput(f"Cannot deal a negative number of cards: {n}")
        if n > len(self._cards):
            raise InsufficientCards(
                f"Cannot deal {n} cards, only {len(self._cards)} remaining"
            )
        dealt = self._cards[:n]
        self._cards = self._cards[n:]
        self._dealt.extend(dealt)
        return dealt

    def deal_one(self) -> Card:
        """Deal a single card from the top of the deck."""
        return self.deal(1)[0]

    def burn(self) -> None:
        """Discard the top card."""
        self.deal(1)

    @property
    def remaining(self) -> int:
        """Number of cards remaining in the deck."""
        return len(self._cards)

    @property
    def dealt(self) -> tuple[Card, ...]:
        """Cards that have left the deck this hand."""
        return tuple(self._dealt)

    def remove(self, cards: Iterable[Card]) -> None:
        """Remove specific cards from the deck (for setting up known boards).

        Raises:
            InvalidInput: If a card is not in the deck.
        """
        for card in cards:
            if card not in self._cards:
                raise InvalidInput(f"Card {card} not in deck")
            self._cards.remove(card)
            self._dealt.append(card)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards
