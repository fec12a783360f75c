"""
Pheromone Module for the ACO Load Balancing Simulator

The pheromone table is the colony's memory: one scalar per server reflecting
how attractive that server has been historically.

Two forces act on it:
- Decay (evaporation): every value is multiplied by a rate once per batch and
  clamped at a floor so no server ever becomes unreachable
- Deposit: the server that received a task is reinforced by an additive amount

Values are held in a float64 numpy array. Only copies ever leave the table.

Author: Student
Date: December 2024
"""

import logging
from typing import List, Sequence

import numpy as np

from config import ACOConfig, DEFAULT_ACO_CONFIG
from validators import (
    ConfigValidator,
    ValidationError,
    raise_if_invalid,
    require_index,
    ConfigurationError
)

logger = logging.getLogger(__name__)


class PheromoneTable:
    """
    Per-server pheromone levels with decay and deposit.

    There is no upper clamp: repeated deposits let a server's pheromone grow
    without bound, the floor applies only to decay.
    """

    def __init__(self, size: int, initial: float = None, minimum: float = None,
                 config: ACOConfig = None):
        """
        Initialize the table.

        Args:
            size: Number of servers
            initial: Starting pheromone for each server (config default if None)
            minimum: Floor used by decay (config default if None)
            config: Configuration supplying defaults
        """
        self.config = config or DEFAULT_ACO_CONFIG
        self.initial = self.config.initial_pheromone if initial is None else initial
        self.minimum = self.config.min_pheromone if minimum is None else minimum
        self._values = np.full(size, self.initial, dtype=np.float64)

    @classmethod
    def from_values(cls, values: Sequence[float], minimum: float = None,
                    config: ACOConfig = None) -> 'PheromoneTable':
        """Build a table holding explicit values (used when replaying a state)."""
        table = cls(len(values), minimum=minimum, config=config)
        table._values = np.array(values, dtype=np.float64)
        return table

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> float:
        return float(self._values[require_index(index, len(self._values))])

    def __repr__(self) -> str:
        levels = ", ".join(f"{v:.3f}" for v in self._values)
        return f"PheromoneTable([{levels}])"

    @property
    def values(self) -> np.ndarray:
        """Copy of the underlying array."""
        return self._values.copy()

    def snapshot(self) -> List[float]:
        """Return pheromone levels as a plain list of floats."""
        return self._values.tolist()

    def reset(self, size: int = None) -> None:
        """Reinitialize every server (optionally a new count) to the initial level."""
        if size is None:
            size = len(self._values)
        self._values = np.full(size, self.initial, dtype=np.float64)

    def decay(self, rate: float) -> None:
        """
        Evaporate every pheromone: p = max(p * rate, minimum).

        Args:
            rate: Multiplier in (0, 1]; 1 leaves the table unchanged

        Raises:
            ConfigurationError: If rate is outside (0, 1]
        """
        raise_if_invalid(ConfigValidator.validate_decay(rate), ConfigurationError,
                         "pheromone decay", "pheromone_decay")
        np.maximum(self._values * rate, self.minimum, out=self._values)
        logger.debug(f"Pheromone decay x{rate}: {self!r}")

    def deposit(self, index: int, amount: float) -> float:
        """
        Reinforce one server.

        Args:
            index: Server index
            amount: Non-negative pheromone to add

        Returns:
            The server's new pheromone level

        Raises:
            InvalidStateError: If index is out of range
            ValidationError: If amount is negative or not finite
        """
        index = require_index(index, len(self._values), "server")
        if not np.isfinite(amount) or amount < 0:
            raise ValidationError("Deposit must be a non-negative finite number", "amount", amount)
        self._values[index] += amount
        return float(self._values[index])


# =============================================================================
# MODULE TEST
# =============================================================================

if __name__ == "__main__":
    table = PheromoneTable(3)
    print(f"Initial:  {table}")
    table.decay(0.8)
    print(f"Decayed:  {table}")
    table.deposit(0, 10 / 11)
    print(f"Deposit:  {table}")
    for _ in range(20):
        table.decay(0.8)
    print(f"Floored:  {table}")
