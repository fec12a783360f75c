"""
Workload Module for the ACO Load Balancing Simulator

This module defines the TaskBatch, the unit of work handed to the scheduler,
and a generator producing random batches within the configured bounds.

A task has no identity beyond its size and its position in the batch: it
exists only for the single distribution pass that consumes it.

Author: Student
Date: December 2024
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from config import ACOConfig, DEFAULT_ACO_CONFIG
from validators import BatchValidator, InvalidBatchError, raise_if_invalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskBatch:
    """
    An ordered, immutable sequence of task sizes.

    Attributes:
        tasks: Task sizes in generation order
        batch_id: Sequence number assigned by the generator (0 if built by hand)
    """
    tasks: Tuple[float, ...]
    batch_id: int = 0

    @classmethod
    def of(cls, tasks: Sequence[float], batch_id: int = 0,
           config: ACOConfig = None) -> 'TaskBatch':
        """
        Build a validated batch.

        Raises:
            InvalidBatchError: If the batch is empty or holds a non-positive size
        """
        config = config or DEFAULT_ACO_CONFIG
        raise_if_invalid(BatchValidator.validate_batch(tasks, config.max_batch_size),
                         InvalidBatchError, "task batch", "batch")
        return cls(tasks=tuple(tasks), batch_id=batch_id)

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[float]:
        return iter(self.tasks)

    def __getitem__(self, index: int) -> float:
        return self.tasks[index]

    @property
    def total_size(self) -> float:
        return float(sum(self.tasks))

    def sorted_for_processing(self) -> List[float]:
        """Largest task first; equal sizes keep their relative order."""
        return sorted(self.tasks, key=lambda t: -t)

    def to_dict(self):
        return {'batch_id': self.batch_id, 'tasks': list(self.tasks)}


class TaskBatchGenerator:
    """
    Factory for random task batches.

    Each batch holds a random number of tasks in
    [min_tasks_per_batch, max_tasks_per_batch], each an integer size in
    [min_task_size, max_task_size].
    """

    def __init__(self, config: ACOConfig = None, rng: Optional[random.Random] = None):
        """
        Initialize the generator.

        Args:
            config: ACOConfig instance (uses default if None)
            rng: Random generator; a new one seeded from config.seed if None
        """
        self.config = config or DEFAULT_ACO_CONFIG
        self.rng = rng or random.Random(self.config.seed)
        self._next_batch_id = 1

    def reset(self) -> None:
        """Reset the batch counter for a new simulation run."""
        self._next_batch_id = 1

    def generate_batch(self, count: Optional[int] = None) -> TaskBatch:
        """
        Generate a single batch.

        Args:
            count: Number of tasks (random within config bounds if None)

        Returns:
            New TaskBatch
        """
        if count is None:
            count = self.rng.randint(
                self.config.min_tasks_per_batch,
                self.config.max_tasks_per_batch
            )
        if count < 1 or count > self.config.max_batch_size:
            raise InvalidBatchError(
                f"Batch must hold between 1 and {self.config.max_batch_size} tasks",
                "count", count
            )

        tasks = tuple(
            float(self.rng.randint(self.config.min_task_size, self.config.max_task_size))
            for _ in range(count)
        )
        batch = TaskBatch(tasks=tasks, batch_id=self._next_batch_id)
        self._next_batch_id += 1

        logger.debug(f"Generated batch {batch.batch_id}: {list(tasks)}")
        return batch

    def generate_batches(self, count: int) -> List[TaskBatch]:
        """Generate several batches in order."""
        return [self.generate_batch() for _ in range(count)]
