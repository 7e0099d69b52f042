"""Texas Hold'em hand evaluation engine."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from holdem_engine.core.errors import InvalidInput
from holdem_engine.utils.card import Card, ensure_distinct
from holdem_engine.utils.constants import (
    MAX_HAND_CARDS,
    MIN_HAND_CARDS,
    RANK_NAMES,
    HandCategory,
)

_WHEEL = [14, 5, 4, 3, 2]


def _plural(value: int) -> str:
    name = RANK_NAMES[value]
    return f"{name}es" if name == "Six" else f"{name}s"


@dataclass(frozen=True, order=True)
class HandRank:
    """Comparable strength of a five-card poker hand.

    Ordering is by category first, then by ``tiebreak``: rank values,
    most significant first. Two hands with equal HandRank split the pot.
    ``cards`` records the five cards that made the hand and takes no part
    in comparisons.
    """

    category: HandCategory
    tiebreak: tuple[int, ...]
    cards: tuple[Card, ...] = field(default=(), compare=False)

    def describe(self) -> str:
        """Human-readable label, e.g. 'Two Pair, Aces and Kings'."""
        top = self.tiebreak[0]
        match self.category:
            case HandCategory.STRAIGHT_FLUSH:
                if top == 14:
                    return "Royal Flush"
                return f"Straight Flush, {RANK_NAMES[top]} high"
            case HandCategory.FOUR_OF_A_KIND:
                return f"Four of a Kind, {_plural(top)}"
            case HandCategory.FULL_HOUSE:
                return f"Full House, {_plural(top)} over {_plural(self.tiebreak[1])}"
            case HandCategory.FLUSH:
                return f"Flush, {RANK_NAMES[top]} high"
            case HandCategory.STRAIGHT:
                return f"Straight, {RANK_NAMES[top]} high"
            case HandCategory.THREE_OF_A_KIND:
                return f"Three of a Kind, {_plural(top)}"
            case HandCategory.TWO_PAIR:
                return f"Two Pair, {_plural(top)} and {_plural(self.tiebreak[1])}"
            case HandCategory.PAIR:
                return f"Pair of {_plural(top)}"
        return f"High Card, {RANK_NAMES[top]}"

    def __str__(self) -> str:
        return self.describe()


class HandEvaluator:
    """Evaluates poker hands and determines the best 5-card combination."""

    @staticmethod
    def evaluate(cards: Sequence[Card]) -> HandRank:
        """Evaluate the best 5-card hand from a list of cards.

        Args:
            cards: 5 to 7 distinct cards (hole cards + community cards).

        Returns:
            HandRank of the strongest 5-card subset.

        Raises:
            InvalidInput: On fewer than 5 or more than 7 cards, or duplicates.
        """
        if len(cards) < MIN_HAND_CARDS:
            raise InvalidInput(f"Need at least 5 cards, got {len(cards)}")
        if len(cards) > MAX_HAND_CARDS:
            raise InvalidInput(f"Need at most 7 cards, got {len(cards)}")
        ensure_distinct(cards)
        return HandEvaluator.evaluate_unchecked(cards)

    @staticmethod
    def evaluate_unchecked(cards: Sequence[Card]) -> HandRank:
        """Evaluate without validating the input.

        Used on hot paths (equity sampling) where the caller has already
        guaranteed 5-7 distinct cards.
        """
        if len(cards) == MIN_HAND_CARDS:
            return _rank_five(cards)
        return max(_rank_five(combo) for combo in combinations(cards, 5))


def _rank_five(cards: Sequence[Card]) -> HandRank:
    """Classify exactly five cards."""
    values = sorted((c.rank.value for c in cards), reverse=True)
    is_flush = len({c.suit for c in cards}) == 1
    counts = Counter(values)
    # Groups ordered by (count, rank) descending: quads/trips/pairs first
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    straight_high = _straight_high(values) if len(counts) == 5 else None
    hand = tuple(cards)

    if is_flush and straight_high is not None:
        return HandRank(HandCategory.STRAIGHT_FLUSH, (straight_high,), hand)

    shape = [count for _, count in groups]
    ranks = tuple(rank for rank, _ in groups)

    if shape == [4, 1]:
        return HandRank(HandCategory.FOUR_OF_A_KIND, ranks, hand)
    if shape == [3, 2]:
        return HandRank(HandCategory.FULL_HOUSE, ranks, hand)
    if is_flush:
        return HandRank(HandCategory.FLUSH, tuple(values), hand)
    if straight_high is not None:
        return HandRank(HandCategory.STRAIGHT, (straight_high,), hand)
    if shape == [3, 1, 1]:
        return HandRank(HandCategory.THREE_OF_A_KIND, ranks, hand)
    if shape == [2, 2, 1]:
        return HandRank(HandCategory.TWO_PAIR, ranks, hand)
    if shape == [2, 1, 1, 1]:
        return HandRank(HandCategory.PAIR, ranks, hand)
    return HandRank(HandCategory.HIGH_CARD, tuple(values), hand)


def _straight_high(values: list[int]) -> int | None:
    """Return the high card of a straight, or None.

    ``values`` must be five distinct ranks sorted descending. The wheel
    (A-2-3-4-5) plays the ace low and is five-high.
    """
    if values[0] - values[4] == 4:
        return values[0]
    if values == _WHEEL:
        return 5
    return None


def compare_hands(hand_a: Sequence[Card], hand_b: Sequence[Card]) -> int:
    """Compare two 5-7 card hands: 1 if a wins, -1 if b wins, 0 on a tie."""
    rank_a = HandEvaluator.evaluate(hand_a)
    rank_b = HandEvaluator.evaluate(hand_b)
    return (rank_a > rank_b) - (rank_a < rank_b)
