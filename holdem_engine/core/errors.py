"""Exception taxonomy for the hold'em engine.

Every error here is a caller-side bug: bad card sets, impossible deals or
malformed actions. None of them is retried internally.
"""

from __future__ import annotations


class PokerEngineError(Exception):
    """Base class for all engine errors."""


class InvalidInput(PokerEngineError, ValueError):
    """Malformed card set: wrong count, duplicates or unparsable cards."""


class InsufficientCards(PokerEngineError, ValueError):
    """More cards requested than the deck can supply."""


class IllegalAction(PokerEngineError):
    """An Action value that no betting rule could accept."""
