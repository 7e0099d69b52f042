"""Decision engine for the automated hold'em opponent.

Turns an equity estimate and a betting snapshot into one action. The
policy is a rational equity-vs-pot-odds comparison perturbed by a seeded
mixed strategy, so the AI bluffs and varies its value bets without
solving the full game tree.

Architecture:
  hole cards + board + BettingState
    → EquityCalculator (exact or Monte Carlo)
    → rational action (fold / call / raise from equity vs pot odds)
    → mixed-strategy perturbation (bluff, value raise, flat call)
    → normalisation (all-in collapse, check instead of free fold, sizing)
    → Action(action, amount, reasoning)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from holdem_engine.core.config import EngineConfig
from holdem_engine.core.equity_calculator import EquityCalculator, EquityEstimate
from holdem_engine.core.errors import IllegalAction, InvalidInput
from holdem_engine.utils.card import Card
from holdem_engine.utils.constants import BOARD_SIZE, ActionType, Street

logger = logging.getLogger("holdem_engine.decision")


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BettingState:
    """Decision-relevant snapshot of the current betting round.

    Owned by the game loop; the engine only reads it.
    """

    pot: float
    to_call: float
    effective_stack: float
    opponents: int = 1
    street: Street = Street.PREFLOP
    in_position: bool = False  # Acting last (the dealer, heads-up)
    min_raise: float = 0.0  # Smallest legal raise increment

    def __post_init__(self) -> None:
        for name in ("pot", "to_call", "effective_stack", "min_raise"):
            if getattr(self, name) < 0:
                raise InvalidInput(f"{name} cannot be negative: {getattr(self, name)}")
        if self.opponents < 1:
            raise InvalidInput(f"Need at least one opponent, got {self.opponents}")

    @property
    def pot_odds(self) -> float:
        """Price of calling, capped at what the stack can put in."""
        return _calculate_pot_odds(min(self.to_call, self.effective_stack), self.pot)

    @property
    def call_is_all_in(self) -> bool:
        """Calling would commit the whole effective stack."""
        return self.to_call >= self.effective_stack


@dataclass(frozen=True)
class Action:
    """The engine's chosen action.

    ``amount`` is 0 for a fold, the chips put in for a call (0 is a
    check) and the total chips committed for a raise.
    """

    action: ActionType
    amount: float = 0.0
    reasoning: str = ""
    equity: float = 0.0  # Hero's estimated equity [0, 1]
    pot_odds: float = 0.0  # Required equity to call [0, 1]

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise IllegalAction(f"Action amount cannot be negative: {self.amount}")
        if self.action == ActionType.FOLD and self.amount != 0:
            raise IllegalAction("A fold commits no chips")
        if self.action == ActionType.RAISE and self.amount <= 0:
            raise IllegalAction("A raise must commit chips")

    @property
    def is_check(self) -> bool:
        return self.action == ActionType.CALL and self.amount == 0

    def __str__(self) -> str:
        if self.action == ActionType.FOLD:
            return "Fold"
        if self.is_check:
            return "Check"
        return f"{self.action.value.title()} {self.amount:g}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _calculate_pot_odds(call_amount: float, pot: float) -> float:
    """Calculate pot odds: the equity needed to make calling profitable.

    pot_odds = call / (pot + call)
    """
    total = pot + call_amount
    if total <= 0 or call_amount <= 0:
        return 0.0
    return call_amount / total


def effective_equity(
    estimate: EquityEstimate,
    state: BettingState,
    config: EngineConfig,
) -> float:
    """Pot share from the estimate, plus a small credit for acting last."""
    equity = estimate.equity
    if state.in_position:
        equity += config.position_bonus
    return min(equity, 1.0)


def mix_probability(equity: float, config: EngineConfig) -> float:
    """Chance of deviating from the rational action.

    Flat at ``mix_frequency`` up to the strong-hand threshold, then decays
    linearly to zero as equity approaches 1.
    """
    if equity <= config.strong_threshold:
        return config.mix_frequency
    span = 1.0 - config.strong_threshold
    if span <= 0:
        return 0.0
    return config.mix_frequency * max(0.0, (1.0 - equity) / span)


def rational_action(equity: float, pot_odds: float, config: EngineConfig) -> ActionType:
    """Pure equity-vs-pot-odds choice, before any mixing."""
    if equity < pot_odds + config.call_margin:
        return ActionType.FOLD
    if equity >= config.strong_threshold:
        return ActionType.RAISE
    return ActionType.CALL


def compute_raise_size(state: BettingState, config: EngineConfig) -> float:
    """Total chips to commit for a raise.

    Call first, then raise by a pot fraction scaled by aggression, at
    least the minimum legal raise and never more than the effective stack.
    """
    raise_by = config.aggression * config.pot_fraction * (state.pot + state.to_call)
    raise_by = max(raise_by, state.min_raise)
    return min(state.to_call + raise_by, state.effective_stack)


# ---------------------------------------------------------------------------
# Decision engine
# ---------------------------------------------------------------------------


_DEVIATIONS: dict[ActionType, tuple[ActionType, str]] = {
    ActionType.FOLD: (ActionType.RAISE, "Bluff raise"),
    ActionType.CALL: (ActionType.RAISE, "Value raise"),
    ActionType.RAISE: (ActionType.CALL, "Flat call"),
}


class DecisionEngine:
    """Chooses fold / call / raise for the AI player.

    Stateless across calls apart from its random generator, so the same
    seed and the same inputs always give the same sequence of actions.

    Usage:
        engine = DecisionEngine(seed=7)
        action = engine.decide(estimate, state)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        seed: int | np.random.Generator | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._rng = np.random.default_rng(seed)

    def decide(self, estimate: EquityEstimate, state: BettingState) -> Action:
        """Map an equity estimate and betting snapshot to an Action.

        Args:
            estimate: Hero's win / tie / loss estimate for this spot.
            state: Current betting snapshot.

        Returns:
            FOLD, CALL or RAISE, always within the effective stack.
        """
        pot_odds = state.pot_odds
        equity = effective_equity(estimate, state, self.config)
        rational = rational_action(equity, pot_odds, self.config)

        chosen = rational
        label = {
            ActionType.FOLD: "Fold",
            ActionType.CALL: "Call",
            ActionType.RAISE: "Raise for value",
        }[rational]

        # One draw per decision keeps the stream aligned across calls
        draw = float(self._rng.random())
        bluff_impossible = rational == ActionType.FOLD and state.call_is_all_in
        if draw < mix_probability(equity, self.config) and not bluff_impossible:
            chosen, label = _DEVIATIONS[rational]

        reasoning = f"{label}: {equity:.0%} equity vs {pot_odds:.0%} pot odds"
        action = _normalise_action(chosen, state, self.config, reasoning, equity, pot_odds)
        logger.debug(
            "%s %s → %s (rational=%s, draw=%.3f)",
            state.street, estimate, action, rational, draw,
        )
        return action

    def decide_for_hand(
        self,
        hole_cards: Sequence[Card],
        board: Sequence[Card],
        state: BettingState,
    ) -> Action:
        """Estimate equity for the hand, then decide.

        Raises:
            InvalidInput: If the board size does not match the street, or
                the cards are malformed.
        """
        expected = BOARD_SIZE[state.street]
        if len(board) != expected:
            raise InvalidInput(
                f"{state.street} expects {expected} board cards, got {len(board)}"
            )

        if self.config.parallel_workers:
            estimate = EquityCalculator.parallel_estimate(
                hole_cards, board, state.opponents,
                self.config.sample_budget, seed=self._rng,
                max_workers=self.config.parallel_workers,
            )
        else:
            estimate = EquityCalculator.estimate(
                hole_cards, board, state.opponents,
                self.config.sample_budget, seed=self._rng,
            )
        return self.decide(estimate, state)


def _normalise_action(
    action: ActionType,
    state: BettingState,
    config: EngineConfig,
    reasoning: str,
    equity: float,
    pot_odds: float,
) -> Action:
    """Turn an intended action into a legal one.

    - Nothing to call: a fold becomes a check
    - Call would be all-in: any continue collapses to an all-in call
    - Raise no bigger than the call: becomes a call
    - Every amount stays within the effective stack
    """
    if action == ActionType.FOLD:
        if state.to_call <= 0:
            return Action(ActionType.CALL, 0.0, reasoning + " (check)", equity, pot_odds)
        return Action(ActionType.FOLD, 0.0, reasoning, equity, pot_odds)

    if state.call_is_all_in:
        return Action(
            ActionType.CALL, state.effective_stack,
            reasoning + " (all-in)", equity, pot_odds,
        )

    if action == ActionType.RAISE:
        amount = compute_raise_size(state, config)
        if amount > state.to_call:
            if amount >= state.effective_stack:
                reasoning += " (all-in)"
            return Action(ActionType.RAISE, amount, reasoning, equity, pot_odds)

    return Action(ActionType.CALL, state.to_call, reasoning, equity, pot_odds)
