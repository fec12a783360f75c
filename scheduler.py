"""
Batch Scheduler Module for the ACO Load Balancing Simulator

This module runs one full distribution pass of the Ant Colony Optimization
scheduler over a task batch and records every decision it makes.

Pass order:
1. Decay all pheromones once, record an INITIAL step
2. Sort tasks largest first (stable), so big tasks are placed while loads
   are still low
3. For each task:
   - compute the distribution from current pheromones and loads (PROBABILITY)
   - draw a random number and pick a server by roulette (SELECTION)
   - add the task to the server's load and deposit pheromone (UPDATE)
4. Record a FINAL step with the terminal vectors and all assignments

The pass works on copies of the state vectors and commits them in one go at
the end, so a call that fails leaves the state exactly as it was.

Author: Student
Date: December 2024
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Dict, Any, Union

import numpy as np

from config import ACOConfig, DepositMode, StepType, DEFAULT_ACO_CONFIG
from pheromone import PheromoneTable
from probability import ProbabilityModel
from selector import RouletteSelector
from validators import (
    BatchValidator,
    InvalidBatchError,
    InvalidStateError,
    raise_if_invalid
)
from workload import TaskBatch

logger = logging.getLogger(__name__)

RandomSource = Callable[[], float]


def _fmt(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# TRACE RECORDS
# =============================================================================

@dataclass(frozen=True)
class Assignment:
    """One task placed on one server."""
    server: int
    task: float

    def to_dict(self) -> Dict[str, Any]:
        return {'server': self.server, 'task': self.task}


@dataclass(frozen=True)
class DecisionStep:
    """
    Immutable record of one unit of scheduler work.

    Which optional fields are filled depends on step_type:
    - PROBABILITY: task, task_index, load_factors, pheromone_powers,
      raw_probabilities, probabilities
    - SELECTION: task, task_index, random_value, cumulative,
      selected_server, probabilities
    - UPDATE: task, task_index, selected_server, old_pheromone,
      pheromone_contribution, new_pheromone
    - FINAL: assignments
    Every step carries the pheromone and load vectors at that point.
    """
    index: int
    step_type: StepType
    message: str
    pheromones: Tuple[float, ...]
    loads: Tuple[float, ...]
    task: Optional[float] = None
    task_index: Optional[int] = None
    load_factors: Optional[Tuple[float, ...]] = None
    pheromone_powers: Optional[Tuple[float, ...]] = None
    raw_probabilities: Optional[Tuple[float, ...]] = None
    probabilities: Optional[Tuple[float, ...]] = None
    random_value: Optional[float] = None
    cumulative: Optional[float] = None
    selected_server: Optional[int] = None
    old_pheromone: Optional[float] = None
    pheromone_contribution: Optional[float] = None
    new_pheromone: Optional[float] = None
    assignments: Optional[Tuple[Assignment, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export, dropping unset fields."""
        data = {
            'index': self.index,
            'type': self.step_type.value,
            'message': self.message,
            'pheromones': list(self.pheromones),
            'loads': list(self.loads),
        }
        optional = {
            'task': self.task,
            'task_index': self.task_index,
            'load_factors': self.load_factors,
            'pheromone_powers': self.pheromone_powers,
            'raw_probabilities': self.raw_probabilities,
            'probabilities': self.probabilities,
            'random': self.random_value,
            'cumulative': self.cumulative,
            'selected_server': self.selected_server,
            'old_pheromone': self.old_pheromone,
            'pheromone_contribution': self.pheromone_contribution,
            'new_pheromone': self.new_pheromone,
        }
        for key, value in optional.items():
            if value is not None:
                data[key] = list(value) if isinstance(value, tuple) else value
        if self.assignments is not None:
            data['assignments'] = [a.to_dict() for a in self.assignments]
        return data


@dataclass
class DistributionResult:
    """Everything one pass produced."""
    assignments: List[Assignment]
    steps: List[DecisionStep]
    loads: List[float]
    pheromones: List[float]
    processing_order: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assignments': [a.to_dict() for a in self.assignments],
            'loads': self.loads,
            'pheromones': self.pheromones,
            'processing_order': self.processing_order,
            'steps': [s.to_dict() for s in self.steps]
        }


# =============================================================================
# SCHEDULER
# =============================================================================

class BatchScheduler:
    """
    Assigns each task of a batch to a server using the ACO pheromone model.

    Usage:
        scheduler = BatchScheduler(config, random_source=random.Random(7).random)
        result = scheduler.distribute(state, [12, 5, 20])
    """

    def __init__(self, config: ACOConfig = None,
                 random_source: Optional[RandomSource] = None,
                 probability_model: ProbabilityModel = None,
                 selector: RouletteSelector = None):
        """
        Initialize the scheduler.

        Args:
            config: Scheduler configuration (validated here)
            random_source: Zero-argument callable returning floats in [0, 1);
                a random.Random seeded from config.seed if None
            probability_model: Distribution model (built from config if None)
            selector: Roulette selector
        """
        self.config = config or DEFAULT_ACO_CONFIG
        self.config.validate()
        self.random_source = random_source or random.Random(self.config.seed).random
        self.probability_model = probability_model or ProbabilityModel(self.config)
        self.selector = selector or RouletteSelector()
        self.pass_count = 0

    def deposit_amount(self, new_load: float, task: float) -> float:
        """Pheromone added to the server that just received ``task``."""
        if self.config.deposit_mode == DepositMode.INVERSE_TASK:
            return self.config.q / task
        return self.config.q / (new_load + 1)

    def _validate(self, state, batch: Sequence[float]) -> None:
        """Check everything a pass needs before anything is touched."""
        if state.server_count == 0:
            raise InvalidStateError("Cannot distribute tasks with zero servers", "server_count", 0)
        raise_if_invalid(
            BatchValidator.validate_batch(batch, self.config.max_batch_size),
            InvalidBatchError, "distribute", "batch"
        )

    def distribute(self, state, batch: Union[TaskBatch, Sequence[float]],
                   random_source: Optional[RandomSource] = None) -> DistributionResult:
        """
        Run one distribution pass and commit it to ``state``.

        Args:
            state: SimulationState to read and mutate
            batch: Task sizes (TaskBatch or any sequence of positive numbers)
            random_source: Overrides the scheduler's random source for this pass

        Returns:
            DistributionResult with assignments, steps and terminal vectors

        Raises:
            InvalidStateError: If the state has no servers
            InvalidBatchError: If the batch is empty or malformed
        """
        draw = random_source or self.random_source
        tasks = batch.tasks if isinstance(batch, TaskBatch) else batch

        with state.lock:
            self._validate(state, tasks)
            tasks = list(tasks)

            table = PheromoneTable.from_values(
                state.pheromones, minimum=self.config.min_pheromone, config=self.config
            )
            loads = np.array(state.loads, dtype=np.float64)
            assignments: List[Assignment] = []
            steps: List[DecisionStep] = []

            def record(step_type: StepType, message: str, **fields) -> None:
                steps.append(DecisionStep(
                    index=len(steps),
                    step_type=step_type,
                    message=message,
                    pheromones=tuple(table.snapshot()),
                    loads=tuple(loads.tolist()),
                    **fields
                ))

            table.decay(self.config.pheromone_decay)
            record(StepType.INITIAL, "Initial state with pheromone decay applied")

            order = sorted(tasks, key=lambda t: -t)
            for task_index, task in enumerate(order):
                task = float(task)

                breakdown = self.probability_model.breakdown(table.snapshot(), loads.tolist())
                record(
                    StepType.PROBABILITY, f"Calculating probabilities for task {_fmt(task)}",
                    task=task, task_index=task_index,
                    load_factors=breakdown.load_factors,
                    pheromone_powers=breakdown.pheromone_powers,
                    raw_probabilities=breakdown.raw_probabilities,
                    probabilities=breakdown.probabilities
                )

                selection = self.selector.select_with_cumulative(breakdown.probabilities, draw())
                server = selection.index
                record(
                    StepType.SELECTION, f"Selected server {server + 1} for task {_fmt(task)}",
                    task=task, task_index=task_index,
                    random_value=selection.draw, cumulative=selection.cumulative,
                    selected_server=server, probabilities=breakdown.probabilities
                )

                loads[server] += task
                old_pheromone = table[server]
                contribution = self.deposit_amount(float(loads[server]), task)
                new_pheromone = table.deposit(server, contribution)
                record(
                    StepType.UPDATE, f"Updated pheromone for server {server + 1}",
                    task=task, task_index=task_index, selected_server=server,
                    old_pheromone=old_pheromone, pheromone_contribution=contribution,
                    new_pheromone=new_pheromone
                )

                assignments.append(Assignment(server=server, task=task))
                logger.debug(
                    f"Task {_fmt(task)} -> server {server} "
                    f"(p={breakdown.probabilities[server]:.4f}, draw={selection.draw:.4f}, "
                    f"load={loads[server]:g}, pheromone={new_pheromone:.4f})"
                )

            record(StepType.FINAL, "Final state after all tasks distributed",
                   assignments=tuple(assignments))

            state.commit_pass(table.snapshot(), loads.tolist(), assignments, steps)
            self.pass_count += 1

        logger.info(
            f"Distributed {len(order)} tasks over {state.server_count} servers "
            f"(pass {self.pass_count}); loads={[round(l, 2) for l in loads.tolist()]}"
        )

        return DistributionResult(
            assignments=list(assignments),
            steps=list(steps),
            loads=loads.tolist(),
            pheromones=table.snapshot(),
            processing_order=[float(t) for t in order]
        )

    def preview(self, state) -> List[float]:
        """Distribution the next task would see, without decay or mutation."""
        with state.lock:
            if state.server_count == 0:
                raise InvalidStateError("Cannot preview with zero servers", "server_count", 0)
            return self.probability_model.compute(state.pheromones, state.loads)
