"""Showdown resolution: who holds the best hand and how the pot is split."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from holdem_engine.core.errors import InvalidInput
from holdem_engine.core.hand_evaluator import HandEvaluator, HandRank
from holdem_engine.utils.card import Card, ensure_distinct
from holdem_engine.utils.constants import HOLE_CARD_COUNT


@dataclass(frozen=True)
class ShowdownResult:
    """Evaluated hands for every seat plus the winning seat(s)."""

    hand_ranks: dict[int, HandRank]
    winners: tuple[int, ...]

    @property
    def is_split(self) -> bool:
        return len(self.winners) > 1

    @property
    def winning_rank(self) -> HandRank:
        return self.hand_ranks[self.winners[0]]


def determine_winners(
    hands: Mapping[int, Sequence[Card]],
    board: Sequence[Card],
) -> ShowdownResult:
    """Evaluate each seat's hole cards against the shared board.

    Args:
        hands: Seat number -> two hole cards, for every player still in.
        board: The five community cards.

    Returns:
        ShowdownResult; more than one winner means a split pot.

    Raises:
        InvalidInput: On an empty table, a malformed hand or board,
            or a card that appears twice.
    """
    if not hands:
        raise InvalidInput("Showdown needs at least one player")
    if len(board) != 5:
        raise InvalidInput(f"Showdown needs a full board, got {len(board)} cards")
    for seat, hole in hands.items():
        if len(hole) != HOLE_CARD_COUNT:
            raise InvalidInput(f"Seat {seat} must hold 2 cards, got {len(hole)}")
    ensure_distinct([*board, *(c for hole in hands.values() for c in hole)])

    hand_ranks = {
        seat: HandEvaluator.evaluate_unchecked([*hole, *board])
        for seat, hole in hands.items()
    }
    best = max(hand_ranks.values())
    winners = tuple(sorted(seat for seat, rank in hand_ranks.items() if rank == best))
    return ShowdownResult(hand_ranks=hand_ranks, winners=winners)


def split_pot(
    pot: int,
    winners: Sequence[int],
    odd_chip_seat: int | None = None,
) -> dict[int, int]:
    """Divide an integer pot among the winning seats.

    Leftover chips from an uneven split go to ``odd_chip_seat`` (the
    dealer, heads-up) when it is among the winners, otherwise one each to
    the lowest winning seats.
    """
    if not winners:
        raise InvalidInput("Cannot split a pot with no winners")
    if pot < 0:
        raise InvalidInput(f"Pot cannot be negative: {pot}")

    seats = sorted(set(winners))
    share, remainder = divmod(pot, len(seats))
    payouts = {seat: share for seat in seats}
    if remainder and odd_chip_seat in payouts:
        payouts[odd_chip_seat] += remainder
    else:
        for seat in seats[:remainder]:
            payouts[seat] += 1
    return payouts
