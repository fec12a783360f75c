"""
Selector Module for the ACO Load Balancing Simulator

Roulette wheel selection: walk the distribution in index order, accumulating
a running sum, and pick the first server whose cumulative probability reaches
the random draw.

The draw itself is always passed in. Where it comes from (a seeded
random.Random, or a DrawSequence replaying a recorded trace) is the caller's
choice, which keeps selection deterministic under test.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from validators import ValidationError, InvalidStateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionResult:
    """Chosen server and the cumulative probability at which it was chosen."""
    index: int
    cumulative: float
    draw: float


class RouletteSelector:
    """Cumulative-sum roulette selection."""

    @staticmethod
    def select_with_cumulative(probabilities: Sequence[float], draw: float) -> SelectionResult:
        """
        Select a server and report the cumulative sum at the hit.

        Args:
            probabilities: Normalized distribution, one entry per server
            draw: Uniform random number in [0, 1)

        Returns:
            SelectionResult

        Raises:
            ValidationError: If the distribution is empty or draw is outside [0, 1)
        """
        if len(probabilities) == 0:
            raise ValidationError("Cannot select from an empty distribution", "probabilities")
        if not (0.0 <= draw < 1.0):
            raise ValidationError("Random draw must be in [0, 1)", "draw", draw)

        cumulative = 0.0
        for index, probability in enumerate(probabilities):
            cumulative += probability
            if cumulative >= draw:
                return SelectionResult(index=index, cumulative=cumulative, draw=draw)

        # Rounding left the total just under the draw
        logger.debug(f"Cumulative {cumulative!r} < draw {draw!r}, falling back to last server")
        return SelectionResult(index=len(probabilities) - 1, cumulative=cumulative, draw=draw)

    @classmethod
    def select(cls, probabilities: Sequence[float], draw: float) -> int:
        """Return only the selected index."""
        return cls.select_with_cumulative(probabilities, draw).index


class DrawSequence:
    """
    Random source that replays a fixed list of draws.

    Callable with no arguments, like ``random.Random().random``, so it can be
    handed to the scheduler in place of a live generator.
    """

    def __init__(self, draws: Iterable[float]):
        self._draws: List[float] = [float(d) for d in draws]
        self._position = 0

    @classmethod
    def from_steps(cls, steps) -> 'DrawSequence':
        """Collect the random values recorded by the selection steps of a trace."""
        return cls(step.random_value for step in steps if step.random_value is not None)

    def __call__(self) -> float:
        if self._position >= len(self._draws):
            raise InvalidStateError(
                f"Draw sequence exhausted after {len(self._draws)} draws", "draws"
            )
        draw = self._draws[self._position]
        self._position += 1
        return draw

    def __len__(self) -> int:
        return len(self._draws)

    @property
    def remaining(self) -> int:
        return len(self._draws) - self._position

    def rewind(self) -> None:
        self._position = 0
