"""Tests for the equity calculator.

Monte Carlo results are seeded; range assertions leave several standard
errors of slack.
"""

import pytest

from holdem_engine.core.equity_calculator import EquityCalculator, EquityEstimate
from holdem_engine.core.errors import InsufficientCards, InvalidInput
from holdem_engine.utils.card import Card


def _cards(s: str) -> list[Card]:
    return [Card.from_str(c) for c in s.split()]


def _total(result: EquityEstimate) -> float:
    return result.win + result.tie + result.loss


class TestExactEnumeration:
    def test_river_is_exact(self) -> None:
        result = EquityCalculator.estimate(
            _cards("As Ks"), _cards("Ah Kh 2c 7d 9c"), opponents=1, sample_budget=2_000
        )
        assert result.method == "exact"
        assert result.samples == 990  # C(45, 2) opponent holdings
        assert _total(result) == pytest.approx(1.0, abs=1e-6)
        assert result.win > 0.9

    def test_board_royal_flush_always_ties(self) -> None:
        result = EquityCalculator.estimate(
            _cards("2c 3d"), _cards("Ah Kh Qh Jh Th"), sample_budget=2_000
        )
        assert result.tie == 1.0
        assert result.equity == 0.5

    def test_nuts_always_win(self) -> None:
        result = EquityCalculator.estimate(
            _cards("Ah Kh"), _cards("Qh Jh Th 2c 3d"), sample_budget=2_000
        )
        assert result.win == 1.0
        assert result.loss == 0.0

    def test_multiway_river_exact(self) -> None:
        result = EquityCalculator.estimate(
            _cards("Ah Kh"), _cards("Qh Jh Th 2c 3d"), opponents=2, sample_budget=1_000_000
        )
        assert result.method == "exact"
        assert result.samples == 990 * 903
        assert result.win == 1.0

    def test_budget_below_outcomes_samples(self) -> None:
        result = EquityCalculator.estimate(
            _cards("As Ks"), _cards("Ah Kh 2c 7d 9c"), sample_budget=500, seed=1
        )
        assert result.method == "monte_carlo"
        assert result.samples == 500


class TestMonteCarlo:
    def test_aces_vs_one_random_hand(self) -> None:
        result = EquityCalculator.estimate(
            _cards("Ah As"), opponents=1, sample_budget=2_000, seed=11
        )
        # AA vs a random hand is ~85%
        assert result.method == "monte_carlo"
        assert 0.80 < result.equity < 0.90

    def test_more_opponents_lower_equity(self) -> None:
        heads_up = EquityCalculator.estimate(
            _cards("Ah As"), opponents=1, sample_budget=1_500, seed=5
        )
        three_way = EquityCalculator.estimate(
            _cards("Ah As"), opponents=3, sample_budget=1_500, seed=5
        )
        # AA vs three random hands is ~64%
        assert 0.55 < three_way.equity < 0.73
        assert three_way.equity < heads_up.equity

    def test_sums_to_one(self) -> None:
        result = EquityCalculator.estimate(
            _cards("7c 2d"), _cards("Kh 9s 4d"), opponents=2, sample_budget=800, seed=3
        )
        assert _total(result) == pytest.approx(1.0, abs=1e-6)

    def test_seeded_is_deterministic(self) -> None:
        args = (_cards("Jh Ts"), _cards("9h 8c 2d"))
        first = EquityCalculator.estimate(*args, opponents=2, sample_budget=400, seed=42)
        second = EquityCalculator.estimate(*args, opponents=2, sample_budget=400, seed=42)
        assert first == second

    def test_monte_carlo_close_to_exact(self) -> None:
        hole, board = _cards("Ah Qd"), _cards("Qs 8h 3c 2d")
        exact = EquityCalculator.estimate(hole, board, sample_budget=50_000)
        sampled = EquityCalculator.estimate(hole, board, sample_budget=10_000, seed=8)
        assert exact.method == "exact"
        assert sampled.method == "monte_carlo"
        assert sampled.equity == pytest.approx(exact.equity, abs=0.02)


class TestHandVsHand:
    def test_made_hand_on_river(self) -> None:
        result = EquityCalculator.hand_vs_hand(
            _cards("Ah Kh"), _cards("Qs Qd"), board=_cards("Ac 7d 2s 8c 3h")
        )
        assert result.win == 1.0
        assert result.samples == 1

    def test_flop_enumerates_runouts(self) -> None:
        result = EquityCalculator.hand_vs_hand(
            _cards("Ah As"), _cards("Kh Qs"), board=_cards("Kc 7d 2s")
        )
        assert result.method == "exact"
        assert result.samples == 990  # C(45, 2) turn and river cards
        assert result.equity > 0.70

    def test_identical_strength_hands_tie(self) -> None:
        result = EquityCalculator.hand_vs_hand(
            _cards("Ah Kd"), _cards("As Kc"), board=_cards("2c 7d 9h")
        )
        assert result.tie == 1.0

    def test_preflop_samples(self) -> None:
        result = EquityCalculator.hand_vs_hand(
            _cards("Ah As"), _cards("Kh Ks"), sample_budget=2_000, seed=4
        )
        # AA vs KK is ~82%
        assert result.method == "monte_carlo"
        assert 0.75 < result.equity < 0.90

    def test_overlapping_hands_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="Duplicate card"):
            EquityCalculator.hand_vs_hand(_cards("Ah Kh"), _cards("Ah Qd"))


class TestParallelEstimate:
    def test_small_budget_runs_sequentially(self) -> None:
        hole, board = _cards("9s 9d"), _cards("Ts 4c 2h")
        sequential = EquityCalculator.estimate(hole, board, 2, 200, seed=5)
        parallel = EquityCalculator.parallel_estimate(hole, board, 2, 200, seed=5)
        assert parallel == sequential

    def test_workers_sum_to_budget(self) -> None:
        hole = _cards("Kd Kc")
        first = EquityCalculator.parallel_estimate(
            hole, opponents=2, sample_budget=1_000, seed=9, max_workers=2
        )
        second = EquityCalculator.parallel_estimate(
            hole, opponents=2, sample_budget=1_000, seed=9, max_workers=2
        )
        assert first.samples == 1_000
        assert _total(first) == pytest.approx(1.0, abs=1e-6)
        assert first == second


class TestInvalidSpots:
    def test_wrong_hole_card_count(self) -> None:
        with pytest.raises(InvalidInput, match="exactly 2 hole cards"):
            EquityCalculator.estimate(_cards("Ah Kh Qh"))

    def test_duplicate_between_hole_and_board(self) -> None:
        with pytest.raises(InvalidInput, match="Duplicate card"):
            EquityCalculator.estimate(_cards("Ah Kh"), _cards("Ah 7c 2d"))

    def test_oversized_board(self) -> None:
        with pytest.raises(InvalidInput, match="at most 5"):
            EquityCalculator.estimate(_cards("Ah Kh"), _cards("2c 3c 4c 5c 6c 7c"))

    def test_no_opponents(self) -> None:
        with pytest.raises(InvalidInput, match="at least one opponent"):
            EquityCalculator.estimate(_cards("Ah Kh"), opponents=0)

    def test_zero_budget(self) -> None:
        with pytest.raises(InvalidInput, match="sample_budget"):
            EquityCalculator.estimate(_cards("Ah Kh"), sample_budget=0)

    def test_too_many_opponents(self) -> None:
        with pytest.raises(InsufficientCards):
            EquityCalculator.estimate(_cards("Ah Kh"), opponents=24)

    def test_estimate_must_sum_to_one(self) -> None:
        with pytest.raises(InvalidInput, match="sum to 1"):
            EquityEstimate(win=0.5, tie=0.1, loss=0.1, samples=10, method="exact")
