"""Tunable parameters for equity estimation and the decision engine."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from holdem_engine.core.errors import InvalidInput

logger = logging.getLogger("holdem_engine.config")

DEFAULT_CONFIG_PATH = Path.home() / ".holdem_engine" / "config.json"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the equity estimator and AI policy."""

    sample_budget: int = 2_000  # Max enumerations / Monte Carlo trials per estimate
    call_margin: float = 0.0  # Equity above pot odds required to continue
    strong_threshold: float = 0.70  # Equity at which raising is the rational play
    mix_frequency: float = 0.10  # Chance of deviating from the rational action
    aggression: float = 1.0  # Multiplier on raise size
    pot_fraction: float = 0.75  # Base raise size as a fraction of the pot
    position_bonus: float = 0.03  # Equity credit for acting last
    parallel_workers: int | None = None  # Worker processes for Monte Carlo, None = sequential

    def __post_init__(self) -> None:
        for name in ("sample_budget", "parallel_workers"):
            value = getattr(self, name)
            if value is None and name == "parallel_workers":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidInput(f"{name} must be an integer, got {value!r}")
        if self.sample_budget < 1:
            raise InvalidInput(f"sample_budget must be positive, got {self.sample_budget}")
        for name in ("call_margin", "strong_threshold", "mix_frequency", "position_bonus"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidInput(f"{name} must be in [0, 1], got {value}")
        if self.aggression <= 0 or self.pot_fraction <= 0:
            raise InvalidInput("aggression and pot_fraction must be positive")
        if self.parallel_workers is not None and self.parallel_workers < 1:
            raise InvalidInput(
                f"parallel_workers must be positive, got {self.parallel_workers}"
            )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def load_engine_config(config_path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a JSON file.

    Default path: ~/.holdem_engine/config.json

    A missing file yields the defaults. An unreadable file, unknown keys or
    out-of-range values are logged and also yield the defaults, so a bad
    config never stops the AI from acting.

    Expected JSON format (all keys optional):
        {
            "sample_budget": 5000,
            "strong_threshold": 0.72,
            "mix_frequency": 0.08,
            "aggression": 1.5
        }
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        logger.debug("No engine config at %s, using defaults", path)
        return EngineConfig()

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read engine config at %s: %s", path, e)
        return EngineConfig()

    if not isinstance(data, dict):
        logger.warning("Engine config at %s is not a JSON object", path)
        return EngineConfig()

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Engine config has unknown keys: %s", ", ".join(unknown))
        return EngineConfig()

    try:
        config = EngineConfig(**data)
    except (InvalidInput, TypeError) as e:
        logger.warning("Invalid engine config at %s: %s", path, e)
        return EngineConfig()

    logger.info("Loaded engine config from %s", path)
    return config
