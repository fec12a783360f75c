"""
Configuration Module for the ACO Load Balancing Simulator

This module contains all configuration constants and parameters used by the
Ant Colony Optimization scheduler. Centralizing configuration makes it easy to
adjust the pheromone model without modifying core logic.

The scheduler is driven by a handful of tunable constants:
- Pheromone decay (evaporation) applied once per batch
- Alpha / Beta exponents weighting pheromone against load
- Q, the deposit constant used when reinforcing a chosen server
- Minimum and initial pheromone levels

Author: Student
Date: December 2024
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any, Optional


# =============================================================================
# ENUMERATIONS - Define categorical constants
# =============================================================================

class StepType(Enum):
    """
    Kinds of decision steps recorded during a distribution pass.

    A pass always produces, in order:
    - INITIAL: state after pheromone decay, before any assignment
    - PROBABILITY / SELECTION / UPDATE: one triple per task
    - FINAL: terminal snapshot with all assignments
    """
    INITIAL = "initial"
    PROBABILITY = "probability"
    SELECTION = "selection"
    UPDATE = "update"
    FINAL = "final"


class LoadFactorMode(Enum):
    """
    How a server's load is turned into the denominator of the load term.

    - POSITIVE_OR_ONE: load if load > 0, otherwise a neutral factor of 1
    - OFFSET: load + 1 for every server
    """
    POSITIVE_OR_ONE = "positive_or_one"
    OFFSET = "offset"


class DepositMode(Enum):
    """
    How much pheromone a server receives after it is chosen.

    - INVERSE_LOAD: Q / (new_load + 1), lightly loaded servers are rewarded more
    - INVERSE_TASK: Q / task_size, small tasks leave a stronger trail
    """
    INVERSE_LOAD = "inverse_load"
    INVERSE_TASK = "inverse_task"


# =============================================================================
# SCHEDULER CONFIGURATION
# =============================================================================

@dataclass
class ACOConfig:
    """
    Main configuration class for the ACO scheduler.

    Attributes:
        num_servers: Number of servers in a fresh simulation
        pheromone_decay: Multiplier applied to every pheromone once per batch
        alpha: Exponent on pheromone (how much history matters)
        beta: Exponent on inverse load (how much current load matters)
        q: Pheromone deposit constant
        min_pheromone: Floor that decay can never go below
        initial_pheromone: Pheromone assigned to every server on reset
        max_batch_size: Hard cap on tasks accepted in a single pass
        seed: Optional seed for the default random source
    """
    # Server Configuration
    num_servers: int = 3
    min_servers: int = 1
    max_servers: int = 10

    # Pheromone Model
    pheromone_decay: float = 0.8
    alpha: float = 1.0
    beta: float = 2.0
    q: float = 10.0
    min_pheromone: float = 0.1
    initial_pheromone: float = 1.0

    # Batch Generation Parameters
    min_tasks_per_batch: int = 3
    max_tasks_per_batch: int = 5
    min_task_size: int = 5
    max_task_size: int = 24
    max_batch_size: int = 100

    # Formula variants
    load_factor_mode: LoadFactorMode = LoadFactorMode.POSITIVE_OR_ONE
    deposit_mode: DepositMode = DepositMode.INVERSE_LOAD

    # Randomness
    seed: Optional[int] = None

    def validate(self) -> bool:
        """
        Validate configuration parameters.

        Returns:
            bool: True if configuration is valid

        Raises:
            ConfigurationError: If any parameter is invalid
        """
        # Imported here because validators depends on this module
        from validators import ConfigValidator, ConfigurationError

        result = ConfigValidator.validate_config(self)
        if not result.is_valid:
            raise ConfigurationError("; ".join(result.errors))
        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary for serialization.

        Returns:
            Dict containing all configuration parameters
        """
        return {
            'num_servers': self.num_servers,
            'min_servers': self.min_servers,
            'max_servers': self.max_servers,
            'pheromone_decay': self.pheromone_decay,
            'alpha': self.alpha,
            'beta': self.beta,
            'q': self.q,
            'min_pheromone': self.min_pheromone,
            'initial_pheromone': self.initial_pheromone,
            'min_tasks_per_batch': self.min_tasks_per_batch,
            'max_tasks_per_batch': self.max_tasks_per_batch,
            'min_task_size': self.min_task_size,
            'max_task_size': self.max_task_size,
            'max_batch_size': self.max_batch_size,
            'load_factor_mode': self.load_factor_mode.value,
            'deposit_mode': self.deposit_mode.value,
            'seed': self.seed
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ACOConfig':
        """
        Create configuration from dictionary.

        Unknown keys are ignored so older exports can still be loaded.

        Args:
            data: Dictionary containing configuration parameters

        Returns:
            ACOConfig instance
        """
        config = cls()
        for key, value in data.items():
            if key == 'load_factor_mode':
                value = LoadFactorMode(value)
            elif key == 'deposit_mode':
                value = DepositMode(value)
            if hasattr(config, key):
                setattr(config, key, value)
        return config


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

@dataclass
class LoggingConfig:
    """
    Configuration for the logging system.

    Logging is essential for:
    - Debugging scheduler decisions
    - Tracking pheromone evolution across batches
    """
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "aco_simulation.log"

    # Log format
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # Detail level
    verbose: bool = False  # If True, per-assignment DEBUG records are shown


# =============================================================================
# DEFAULT INSTANCES
# =============================================================================

DEFAULT_ACO_CONFIG = ACOConfig()
DEFAULT_LOGGING_CONFIG = LoggingConfig()


# =============================================================================
# CONSTANTS
# =============================================================================

VERSION = "1.0.0"
APP_NAME = "ACO Load Balancing Simulator"

FORMULA_DESCRIPTIONS = {
    LoadFactorMode.POSITIVE_OR_ONE: """
P(S_i) = P_i^alpha * (1 / L_i)^beta / sum_j(P_j^alpha * (1 / L_j)^beta)
- L_i is the server load, or 1 when the server is idle
- Idle servers are treated as if they carried one unit of load
    """.strip(),

    LoadFactorMode.OFFSET: """
P(S_i) = P_i^alpha * (1 / (L_i + 1))^beta / sum_j(...)
- Every load is shifted by one, so light loads are separated from idle ones
    """.strip(),

    DepositMode.INVERSE_LOAD: """
P_i += Q / (L_i + 1), evaluated after the task is added to L_i
    """.strip(),

    DepositMode.INVERSE_TASK: """
P_i += Q / task
    """.strip()
}
