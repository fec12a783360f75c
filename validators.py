"""
Validators Module for the ACO Load Balancing Simulator

This module provides input validation, error handling and boundary checking
for scheduler configuration, task batches and simulation state.

Validation Categories:
1. Configuration Validation: ACOConfig parameters
2. Batch Validation: task sizes and batch length
3. State Validation: server count and vector consistency

Design Philosophy:
- Fail fast with clear error messages
- Validate everything before mutating anything
- Log validation failures for debugging

Author: Student
Date: December 2024
"""

import logging
import math
import numbers
from typing import Optional, Any, List, Sequence
from dataclasses import dataclass

from config import ACOConfig


# Configure logger
logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.field and self.value is not None:
            return f"Validation error for '{self.field}' (value={self.value}): {self.message}"
        elif self.field:
            return f"Validation error for '{self.field}': {self.message}"
        return f"Validation error: {self.message}"


class ConfigurationError(ValidationError):
    """Server count, batch bounds or model constants are out of range."""
    pass


class InvalidBatchError(ValidationError):
    """Task batch is empty or malformed."""
    pass


class InvalidStateError(ValidationError):
    """Operation attempted on a state that cannot support it."""
    pass


# =============================================================================
# VALIDATION RESULT
# =============================================================================

@dataclass
class ValidationResult:
    """
    Result of a validation operation.

    Provides detailed information about validation success/failure.
    """
    is_valid: bool
    errors: List[str]
    warnings: List[str]
    field: Optional[str] = None

    def __bool__(self) -> bool:
        """Allow using ValidationResult in boolean context."""
        return self.is_valid

    @staticmethod
    def success() -> 'ValidationResult':
        """Create a successful validation result."""
        return ValidationResult(is_valid=True, errors=[], warnings=[])

    @staticmethod
    def failure(error: str, field: str = None) -> 'ValidationResult':
        """Create a failed validation result."""
        return ValidationResult(
            is_valid=False,
            errors=[error],
            warnings=[],
            field=field
        )

    def add_error(self, error: str):
        """Add an error to the result."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        """Add a warning to the result."""
        self.warnings.append(warning)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Merge another validation result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.is_valid = self.is_valid and other.is_valid
        return self


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a meaningful size or rate
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


# =============================================================================
# CONFIGURATION VALIDATORS
# =============================================================================

class ConfigValidator:
    """Validator for scheduler configuration parameters."""

    # Absolute bounds for configuration values
    MIN_SERVERS = 1
    MAX_SERVERS = 64
    MAX_BATCH_SIZE = 10000

    @classmethod
    def validate_config(cls, config: ACOConfig) -> ValidationResult:
        """
        Validate entire scheduler configuration.

        Args:
            config: ACOConfig to validate

        Returns:
            ValidationResult with all errors and warnings
        """
        result = ValidationResult.success()

        result.merge(cls.validate_server_bounds(
            config.min_servers, config.max_servers
        ))
        if result.is_valid:
            result.merge(cls.validate_num_servers(
                config.num_servers, config.min_servers, config.max_servers
            ))
        result.merge(cls.validate_decay(config.pheromone_decay))
        result.merge(cls.validate_exponent(config.alpha, "alpha"))
        result.merge(cls.validate_exponent(config.beta, "beta"))
        result.merge(cls.validate_positive(config.q, "q"))
        result.merge(cls.validate_positive(config.min_pheromone, "min_pheromone"))
        result.merge(cls.validate_positive(config.initial_pheromone, "initial_pheromone"))
        result.merge(cls.validate_batch_bounds(
            config.min_tasks_per_batch,
            config.max_tasks_per_batch,
            config.max_batch_size
        ))
        result.merge(cls.validate_task_size_range(
            config.min_task_size, config.max_task_size
        ))

        # Cross-field validation
        if (result.is_valid and
                config.initial_pheromone < config.min_pheromone):
            result.add_error(
                f"initial_pheromone ({config.initial_pheromone}) cannot be below "
                f"min_pheromone ({config.min_pheromone})"
            )
        if config.alpha == 0 and config.beta == 0:
            result.add_warning(
                "alpha and beta are both 0 - every server will be equally likely"
            )

        return result

    @classmethod
    def validate_server_bounds(cls, min_servers: int, max_servers: int) -> ValidationResult:
        """Validate the allowed server count range."""
        result = ValidationResult.success()

        if not _is_int(min_servers) or not _is_int(max_servers):
            result.add_error("Server bounds must be integers")
            return result

        if min_servers < cls.MIN_SERVERS:
            result.add_error(f"min_servers must be at least {cls.MIN_SERVERS}")
        if max_servers > cls.MAX_SERVERS:
            result.add_error(f"max_servers must be at most {cls.MAX_SERVERS}")
        if min_servers > max_servers:
            result.add_error(f"min_servers ({min_servers}) cannot exceed max_servers ({max_servers})")

        return result

    @classmethod
    def validate_num_servers(cls, value: int, min_servers: int = MIN_SERVERS,
                             max_servers: int = MAX_SERVERS) -> ValidationResult:
        """Validate number of servers."""
        if not _is_int(value):
            return ValidationResult.failure(
                f"num_servers must be an integer, got {type(value).__name__}",
                "num_servers"
            )
        if value < min_servers or value > max_servers:
            return ValidationResult.failure(
                f"num_servers must be between {min_servers} and {max_servers}, got {value}",
                "num_servers"
            )
        return ValidationResult.success()

    @classmethod
    def validate_decay(cls, value: float) -> ValidationResult:
        """Validate pheromone decay rate, which must lie in (0, 1]."""
        if not _is_number(value):
            return ValidationResult.failure(
                f"pheromone_decay must be a number, got {type(value).__name__}",
                "pheromone_decay"
            )
        if not (0 < value <= 1):
            return ValidationResult.failure(
                f"pheromone_decay must be in (0, 1], got {value}",
                "pheromone_decay"
            )
        return ValidationResult.success()

    @classmethod
    def validate_exponent(cls, value: float, name: str) -> ValidationResult:
        """Validate alpha or beta."""
        if not _is_number(value) or not math.isfinite(value):
            return ValidationResult.failure(f"{name} must be a finite number", name)
        if value < 0:
            return ValidationResult.failure(f"{name} cannot be negative, got {value}", name)
        return ValidationResult.success()

    @classmethod
    def validate_positive(cls, value: float, name: str) -> ValidationResult:
        """Validate a strictly positive finite constant."""
        if not _is_number(value) or not math.isfinite(value):
            return ValidationResult.failure(f"{name} must be a finite number", name)
        if value <= 0:
            return ValidationResult.failure(f"{name} must be positive, got {value}", name)
        return ValidationResult.success()

    @classmethod
    def validate_batch_bounds(cls, min_tasks: int, max_tasks: int,
                              max_batch_size: int) -> ValidationResult:
        """Validate tasks-per-batch range and the hard batch cap."""
        result = ValidationResult.success()

        if not all(_is_int(v) for v in (min_tasks, max_tasks, max_batch_size)):
            result.add_error("Batch bounds must be integers")
            return result

        if min_tasks < 1:
            result.add_error("min_tasks_per_batch must be at least 1")
        if min_tasks > max_tasks:
            result.add_error(
                f"min_tasks_per_batch ({min_tasks}) cannot exceed max_tasks_per_batch ({max_tasks})"
            )
        if max_batch_size > cls.MAX_BATCH_SIZE:
            result.add_error(f"max_batch_size must be at most {cls.MAX_BATCH_SIZE}")
        if max_tasks > max_batch_size:
            result.add_error(
                f"max_tasks_per_batch ({max_tasks}) cannot exceed max_batch_size ({max_batch_size})"
            )

        return result

    @classmethod
    def validate_task_size_range(cls, min_size: int, max_size: int) -> ValidationResult:
        """Validate the generated task size range."""
        result = ValidationResult.success()

        if not _is_int(min_size) or not _is_int(max_size):
            result.add_error("Task sizes must be integers")
            return result

        if min_size <= 0:
            result.add_error(f"min_task_size must be positive, got {min_size}")
        if min_size > max_size:
            result.add_error(f"min_task_size ({min_size}) cannot exceed max_task_size ({max_size})")

        return result


# =============================================================================
# BATCH VALIDATORS
# =============================================================================

class BatchValidator:
    """Validator for task batches handed to the scheduler."""

    @classmethod
    def validate_batch(cls, batch: Sequence[float],
                       max_batch_size: int = ConfigValidator.MAX_BATCH_SIZE) -> ValidationResult:
        """
        Validate a task batch.

        Args:
            batch: Sequence of task sizes
            max_batch_size: Largest batch accepted in one pass

        Returns:
            ValidationResult
        """
        result = ValidationResult.success()

        if batch is None or isinstance(batch, (str, bytes)):
            result.add_error("Batch must be a sequence of task sizes")
            return result

        try:
            size = len(batch)
        except TypeError:
            result.add_error(f"Batch must be a sequence, got {type(batch).__name__}")
            return result

        if size == 0:
            result.add_error("Batch is empty")
            return result

        if size > max_batch_size:
            result.add_error(f"Batch has {size} tasks, at most {max_batch_size} allowed")

        for position, task in enumerate(batch):
            if not _is_number(task):
                result.add_error(
                    f"Task at position {position} must be a number, got {type(task).__name__}"
                )
            elif not math.isfinite(task) or task <= 0:
                result.add_error(f"Task at position {position} must be positive and finite, got {task}")

        return result


# =============================================================================
# STATE VALIDATORS
# =============================================================================

class StateValidator:
    """Validator for pheromone/load vectors before a computation."""

    @classmethod
    def validate_vectors(cls, pheromones: Sequence[float],
                         loads: Sequence[float]) -> ValidationResult:
        """Check the pheromone and load vectors describe the same servers."""
        result = ValidationResult.success()

        if len(pheromones) == 0:
            result.add_error("No servers to choose from")
        if len(pheromones) != len(loads):
            result.add_error(
                f"Pheromone vector has {len(pheromones)} entries but load vector has {len(loads)}"
            )
        return result


# =============================================================================
# INPUT SANITIZERS
# =============================================================================

class InputSanitizer:
    """Sanitize and normalize input values coming from a UI or CLI."""

    @staticmethod
    def sanitize_int(
        value: Any,
        min_val: int = None,
        max_val: int = None,
        default: int = 0
    ) -> int:
        """
        Sanitize input to valid integer.

        Args:
            value: Input value to sanitize
            min_val: Minimum allowed value
            max_val: Maximum allowed value
            default: Default value if conversion fails

        Returns:
            Sanitized integer value
        """
        try:
            result = int(value)
        except (ValueError, TypeError):
            logger.warning(f"Could not convert {value} to int, using default {default}")
            return default

        if min_val is not None and result < min_val:
            logger.warning(f"Value {result} below minimum {min_val}, clamping")
            result = min_val
        if max_val is not None and result > max_val:
            logger.warning(f"Value {result} above maximum {max_val}, clamping")
            result = max_val

        return result

    @staticmethod
    def parse_task_list(text: str) -> List[float]:
        """
        Parse a comma separated list of task sizes, e.g. "5, 20, 9".

        Raises:
            InvalidBatchError: If any entry is not a number
        """
        tasks = []
        for chunk in text.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            try:
                tasks.append(float(chunk))
            except ValueError:
                raise InvalidBatchError("Task sizes must be numbers", "tasks", chunk)
        return tasks


# =============================================================================
# GUARD FUNCTIONS
# =============================================================================

def require_index(index: int, size: int, name: str = "index") -> int:
    """Guard that requires a valid server index."""
    if not _is_int(index) or index < 0 or index >= size:
        raise InvalidStateError(
            f"{name} must be between 0 and {size - 1}",
            name,
            index
        )
    return int(index)


# =============================================================================
# LOGGING UTILITIES
# =============================================================================

def log_validation_result(result: ValidationResult, context: str = ""):
    """Log validation result with appropriate level."""
    prefix = f"[{context}] " if context else ""

    if result.is_valid:
        for warning in result.warnings:
            logger.warning(f"{prefix}{warning}")
        logger.debug(f"{prefix}Validation passed")
    else:
        for error in result.errors:
            logger.error(f"{prefix}Validation error: {error}")
        for warning in result.warnings:
            logger.warning(f"{prefix}Validation warning: {warning}")


def raise_if_invalid(result: ValidationResult, error_class=ValidationError,
                     context: str = "", field: str = None):
    """Log a result and raise ``error_class`` if it carries errors."""
    log_validation_result(result, context)
    if not result.is_valid:
        raise error_class("; ".join(result.errors), field or result.field)
