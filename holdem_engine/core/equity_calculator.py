"""Equity calculator for Texas Hold'em.

Estimates the win / tie / loss probability of a hand against one or more
unknown opponent hands. Small spots (typically the river, or the turn
heads-up with a generous budget) are enumerated exactly; everything else
is sampled by Monte Carlo, drawing the rest of the board and every
opponent's hole cards without replacement on each trial.

Includes a parallel variant (parallel_estimate) that splits Monte Carlo
trials across worker processes, each with its own independent random
stream.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterator, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import combinations

import numpy as np

from holdem_engine.core.errors import InsufficientCards, InvalidInput
from holdem_engine.core.hand_evaluator import HandEvaluator, HandRank
from holdem_engine.utils.card import Card, ensure_distinct, full_deck
from holdem_engine.utils.constants import DECK_SIZE, HOLE_CARD_COUNT

logger = logging.getLogger("holdem_engine.equity")

# Defaults to CPU count minus 1, capped at 4 (diminishing returns beyond that).
_MAX_WORKERS = max(1, min(4, (os.cpu_count() or 2) - 1))

# Below this many trials process start-up costs more than it saves.
_PARALLEL_MIN_TRIALS = 500

SeedLike = int | np.random.Generator | None

_WIN, _TIE, _LOSS = 0, 1, 2


@dataclass(frozen=True)
class EquityEstimate:
    """Win / tie / loss frequencies for one hand at one decision point."""

    win: float
    tie: float
    loss: float
    samples: int
    method: str  # "exact" or "monte_carlo"

    def __post_init__(self) -> None:
        for name in ("win", "tie", "loss"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidInput(f"{name} probability out of range: {value}")
        if abs(self.win + self.tie + self.loss - 1.0) > 1e-6:
            raise InvalidInput(
                f"Probabilities must sum to 1, got {self.win + self.tie + self.loss}"
            )

    @classmethod
    def from_counts(cls, counts: Sequence[int], method: str) -> EquityEstimate:
        """Normalise (wins, ties, losses) tallies."""
        wins, ties, losses = (int(c) for c in counts)
        total = wins + ties + losses
        if total == 0:
            raise InvalidInput("Cannot build an estimate from zero samples")
        return cls(
            win=wins / total,
            tie=ties / total,
            loss=losses / total,
            samples=total,
            method=method,
        )

    @property
    def equity(self) -> float:
        """Share of the pot expected: wins plus half of ties."""
        return self.win + self.tie * 0.5

    def __str__(self) -> str:
        return (
            f"Equity: {self.equity:.1%} "
            f"(W: {self.win:.1%}, T: {self.tie:.1%}, L: {self.loss:.1%}, "
            f"{self.method}, n={self.samples})"
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _unseen_cards(
    hole_cards: Sequence[Card],
    board: Sequence[Card],
    opponents: int,
) -> tuple[list[Card], int]:
    """Validate a spot and return (cards not yet seen, board cards missing)."""
    if len(hole_cards) != HOLE_CARD_COUNT:
        raise InvalidInput(f"Need exactly 2 hole cards, got {len(hole_cards)}")
    if len(board) > 5:
        raise InvalidInput(f"Board has at most 5 cards, got {len(board)}")
    if opponents < 1:
        raise InvalidInput(f"Need at least one opponent, got {opponents}")
    ensure_distinct([*hole_cards, *board])

    known = set(hole_cards) | set(board)
    unseen = [c for c in full_deck() if c not in known]
    missing = 5 - len(board)
    needed = missing + HOLE_CARD_COUNT * opponents
    if needed > len(unseen):
        raise InsufficientCards(
            f"{opponents} opponents need {needed} unseen cards, "
            f"only {len(unseen)} of {DECK_SIZE} remain"
        )
    return unseen, missing


def _outcome_count(unseen: int, missing: int, opponents: int) -> int:
    """Number of (board completion, ordered opponent hands) outcomes."""
    total = math.comb(unseen, missing)
    remaining = unseen - missing
    for _ in range(opponents):
        total *= math.comb(remaining, 2)
        remaining -= 2
    return total


def _outcome(hero: HandRank, opponents: Sequence[HandRank]) -> int:
    """Score the hero against the best opposing hand."""
    best = max(opponents)
    if hero > best:
        return _WIN
    if hero == best:
        return _TIE
    return _LOSS


def _opponent_deals(
    cards: Sequence[Card], opponents: int
) -> Iterator[tuple[tuple[Card, Card], ...]]:
    """Yield every ordered assignment of two-card hands to the opponents."""
    if opponents == 0:
        yield ()
        return
    for hand in combinations(cards, 2):
        rest = [c for c in cards if c not in hand]
        for others in _opponent_deals(rest, opponents - 1):
            yield (hand, *others)


def _enumerate(
    hole_cards: Sequence[Card],
    board: Sequence[Card],
    unseen: Sequence[Card],
    missing: int,
    opponents: int,
) -> np.ndarray:
    """Tally every possible outcome exactly."""
    counts = np.zeros(3, dtype=np.int64)
    for runout in combinations(unseen, missing):
        full_board = [*board, *runout]
        hero = HandEvaluator.evaluate_unchecked([*hole_cards, *full_board])
        rest = [c for c in unseen if c not in runout]
        # Each opponent holding is ranked once per board
        ranked: dict[tuple[Card, Card], HandRank] = {}
        for deal in _opponent_deals(rest, opponents):
            opp_ranks = []
            for hand in deal:
                rank = ranked.get(hand)
                if rank is None:
                    rank = HandEvaluator.evaluate_unchecked([*hand, *full_board])
                    ranked[hand] = rank
                opp_ranks.append(rank)
            counts[_outcome(hero, opp_ranks)] += 1
    return counts


def _simulate(
    hole_cards: Sequence[Card],
    board: Sequence[Card],
    unseen: Sequence[Card],
    missing: int,
    opponents: int,
    trials: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Run Monte Carlo trials, each drawing without replacement."""
    counts = np.zeros(3, dtype=np.int64)
    needed = missing + HOLE_CARD_COUNT * opponents
    for _ in range(trials):
        drawn = [unseen[i] for i in rng.choice(len(unseen), size=needed, replace=False)]
        full_board = [*board, *drawn[:missing]]
        hero = HandEvaluator.evaluate_unchecked([*hole_cards, *full_board])
        opp_ranks = [
            HandEvaluator.evaluate_unchecked(
                [*drawn[missing + 2 * i : missing + 2 * i + 2], *full_board]
            )
            for i in range(opponents)
        ]
        counts[_outcome(hero, opp_ranks)] += 1
    return counts


def _simulate_chunk(
    hole_cards: list[str],
    board: list[str],
    opponents: int,
    trials: int,
    seed: np.random.SeedSequence,
) -> tuple[int, int, int]:
    """Worker function for parallel Monte Carlo. Runs a chunk of trials.

    Cards travel as strings so the arguments pickle cleanly for
    ProcessPoolExecutor.

    Returns:
        (wins, ties, losses) tuple.
    """
    hole = [Card.from_str(c) for c in hole_cards]
    known_board = [Card.from_str(c) for c in board]
    unseen, missing = _unseen_cards(hole, known_board, opponents)
    counts = _simulate(
        hole, known_board, unseen, missing, opponents, trials,
        np.random.default_rng(seed),
    )
    wins, ties, losses = (int(c) for c in counts)
    return wins, ties, losses


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class EquityCalculator:
    """Exact / Monte Carlo equity calculator."""

    @staticmethod
    def estimate(
        hole_cards: Sequence[Card],
        board: Sequence[Card] | None = None,
        opponents: int = 1,
        sample_budget: int = 10_000,
        seed: SeedLike = None,
    ) -> EquityEstimate:
        """Estimate hero equity against random opponent hands.

        Args:
            hole_cards: Hero's 2 hole cards.
            board: Community cards already dealt (0-5 cards).
            opponents: Number of live opponents, each holding unknown cards.
            sample_budget: Upper bound on evaluated outcomes. Spots with at
                most this many outcomes are enumerated exactly; others get
                exactly this many Monte Carlo trials.
            seed: Integer seed or numpy Generator for the sampling stream.

        Returns:
            EquityEstimate for the hero.

        Raises:
            InvalidInput: On a malformed card set or non-positive budget.
            InsufficientCards: If the deck cannot supply every opponent.
        """
        board = list(board or [])
        if sample_budget < 1:
            raise InvalidInput(f"sample_budget must be positive, got {sample_budget}")
        unseen, missing = _unseen_cards(hole_cards, board, opponents)

        outcomes = _outcome_count(len(unseen), missing, opponents)
        if outcomes <= sample_budget:
            logger.debug("Exact enumeration over %d outcomes", outcomes)
            counts = _enumerate(hole_cards, board, unseen, missing, opponents)
            return EquityEstimate.from_counts(counts, "exact")

        logger.debug(
            "Monte Carlo: %d trials (%d outcomes, %d opponents)",
            sample_budget, outcomes, opponents,
        )
        rng = np.random.default_rng(seed)
        counts = _simulate(
            hole_cards, board, unseen, missing, opponents, sample_budget, rng,
        )
        return EquityEstimate.from_counts(counts, "monte_carlo")

    @staticmethod
    def hand_vs_hand(
        hand1: Sequence[Card],
        hand2: Sequence[Card],
        board: Sequence[Card] | None = None,
        sample_budget: int = 10_000,
        seed: SeedLike = None,
    ) -> EquityEstimate:
        """Equity of hand1 against a known hand2.

        Every board completion is enumerated when there are no more than
        ``sample_budget`` of them (flop onwards); preflop is sampled.

        Returns:
            EquityEstimate for hand1.
        """
        board = list(board or [])
        if len(hand2) != HOLE_CARD_COUNT:
            raise InvalidInput(f"Need exactly 2 hole cards, got {len(hand2)}")
        if sample_budget < 1:
            raise InvalidInput(f"sample_budget must be positive, got {sample_budget}")
        ensure_distinct([*hand1, *hand2, *board])
        unseen, missing = _unseen_cards(hand1, board, 1)
        unseen = [c for c in unseen if c not in hand2]

        def score(runout: Sequence[Card]) -> int:
            full_board = [*board, *runout]
            r1 = HandEvaluator.evaluate_unchecked([*hand1, *full_board])
            r2 = HandEvaluator.evaluate_unchecked([*hand2, *full_board])
            return _outcome(r1, [r2])

        counts = np.zeros(3, dtype=np.int64)
        if math.comb(len(unseen), missing) <= sample_budget:
            for runout in combinations(unseen, missing):
                counts[score(runout)] += 1
            return EquityEstimate.from_counts(counts, "exact")

        rng = np.random.default_rng(seed)
        for _ in range(sample_budget):
            idx = rng.choice(len(unseen), size=missing, replace=False)
            counts[score([unseen[i] for i in idx])] += 1
        return EquityEstimate.from_counts(counts, "monte_carlo")

    @staticmethod
    def parallel_estimate(
        hole_cards: Sequence[Card],
        board: Sequence[Card] | None = None,
        opponents: int = 1,
        sample_budget: int = 10_000,
        seed: SeedLike = None,
        max_workers: int | None = None,
    ) -> EquityEstimate:
        """Estimate equity with Monte Carlo trials split across processes.

        Each worker draws from its own stream spawned from one
        SeedSequence, so chunks are independent and the combined result
        is reproducible for a fixed seed and worker count. Spots that
        enumerate exactly, or budgets under 500 trials, run sequentially.

        Returns:
            EquityEstimate for the hero.
        """
        board = list(board or [])
        if sample_budget < 1:
            raise InvalidInput(f"sample_budget must be positive, got {sample_budget}")
        unseen, missing = _unseen_cards(hole_cards, board, opponents)
        outcomes = _outcome_count(len(unseen), missing, opponents)
        if outcomes <= sample_budget or sample_budget < _PARALLEL_MIN_TRIALS:
            return EquityCalculator.estimate(
                hole_cards, board, opponents, sample_budget, seed,
            )

        workers = max_workers or _MAX_WORKERS
        chunk_size, remainder = divmod(sample_budget, workers)
        chunks = [chunk_size + (1 if i < remainder else 0) for i in range(workers)]

        root = np.random.default_rng(seed)
        streams = np.random.SeedSequence(int(root.integers(0, 2**62))).spawn(workers)

        hole_strs = [str(c) for c in hole_cards]
        board_strs = [str(c) for c in board]
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    _simulate_chunk,
                    hole_strs, board_strs, opponents, trials, stream,
                )
                for trials, stream in zip(chunks, streams)
                if trials > 0
            ]
            results = [f.result() for f in futures]

        counts = np.sum(np.array(results, dtype=np.int64), axis=0)
        logger.debug(
            "Parallel Monte Carlo: %d trials over %d workers", sample_budget, workers,
        )
        return EquityEstimate.from_counts(counts, "monte_carlo")
