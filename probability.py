"""
Probability Module for the ACO Load Balancing Simulator

Turns the current pheromone and load vectors into a selection distribution
for a single task:

    raw_i = pheromone_i ** alpha * (1 / loadFactor_i) ** beta
    p_i   = raw_i / sum(raw)

Servers with more pheromone and less load are more likely to be picked.
Everything here is pure; computing a distribution never changes state, so the
same calls back both scheduling and on-demand inspection.

Author: Student
Date: December 2024
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Dict, Any

import numpy as np

from config import ACOConfig, LoadFactorMode, DEFAULT_ACO_CONFIG
from validators import StateValidator, InvalidStateError, raise_if_invalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbabilityBreakdown:
    """
    Every intermediate value of one distribution computation.

    Kept so a decision step can show how each probability came about.
    """
    load_factors: Tuple[float, ...]
    pheromone_powers: Tuple[float, ...]
    raw_probabilities: Tuple[float, ...]
    probabilities: Tuple[float, ...]
    uniform_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'load_factors': list(self.load_factors),
            'pheromone_powers': list(self.pheromone_powers),
            'raw_probabilities': list(self.raw_probabilities),
            'probabilities': list(self.probabilities),
            'uniform_fallback': self.uniform_fallback
        }


def load_factors(loads: Sequence[float],
                 mode: LoadFactorMode = LoadFactorMode.POSITIVE_OR_ONE) -> np.ndarray:
    """
    Convert loads into load-term denominators.

    POSITIVE_OR_ONE keeps idle servers at a neutral factor of 1 instead of
    dividing by zero; OFFSET adds one to every load.
    """
    loads = np.asarray(loads, dtype=np.float64)
    if mode == LoadFactorMode.OFFSET:
        return loads + 1.0
    return np.where(loads > 0, loads, 1.0)


class ProbabilityModel:
    """
    Computes per-task selection distributions.

    Usage:
        model = ProbabilityModel(config)
        probs = model.compute(pheromones, loads)
    """

    def __init__(self, config: ACOConfig = None, load_factor_mode: LoadFactorMode = None):
        """
        Initialize the model.

        Args:
            config: Scheduler configuration (alpha, beta, load factor mode)
            load_factor_mode: Overrides config.load_factor_mode when given
        """
        self.config = config or DEFAULT_ACO_CONFIG
        self.load_factor_mode = load_factor_mode or self.config.load_factor_mode

    def breakdown(self, pheromones: Sequence[float], loads: Sequence[float],
                  alpha: float = None, beta: float = None) -> ProbabilityBreakdown:
        """
        Compute a distribution along with its intermediate values.

        Args:
            pheromones: Current pheromone per server
            loads: Current load per server
            alpha: Pheromone exponent (config default if None)
            beta: Load exponent (config default if None)

        Returns:
            ProbabilityBreakdown

        Raises:
            InvalidStateError: If there are no servers or the vectors differ in length
        """
        raise_if_invalid(StateValidator.validate_vectors(pheromones, loads),
                         InvalidStateError, "probability")

        alpha = self.config.alpha if alpha is None else alpha
        beta = self.config.beta if beta is None else beta

        factors = load_factors(loads, self.load_factor_mode)
        powers = np.power(np.asarray(pheromones, dtype=np.float64), alpha)
        raw = powers * np.power(1.0 / factors, beta)
        total = float(np.sum(raw))

        fallback = total == 0 or not np.isfinite(total)
        if fallback:
            logger.warning(f"Degenerate weights (sum={total}), using uniform distribution")
            probabilities = np.full(len(raw), 1.0 / len(raw))
        else:
            probabilities = raw / total

        return ProbabilityBreakdown(
            load_factors=tuple(factors.tolist()),
            pheromone_powers=tuple(powers.tolist()),
            raw_probabilities=tuple(raw.tolist()),
            probabilities=tuple(probabilities.tolist()),
            uniform_fallback=fallback
        )

    def compute(self, pheromones: Sequence[float], loads: Sequence[float],
                alpha: float = None, beta: float = None) -> List[float]:
        """Return only the normalized distribution."""
        return list(self.breakdown(pheromones, loads, alpha, beta).probabilities)


def compute_probabilities(pheromones: Sequence[float], loads: Sequence[float],
                          alpha: float, beta: float,
                          mode: LoadFactorMode = LoadFactorMode.POSITIVE_OR_ONE) -> List[float]:
    """Functional shortcut around ProbabilityModel.compute."""
    return ProbabilityModel(load_factor_mode=mode).compute(pheromones, loads, alpha, beta)
