"""
Simulation Module for the ACO Load Balancing Simulator

This module owns the model the scheduler works on:

- SimulationState: server count, loads, pheromones, the last pass's
  assignments and decision steps, and their lifecycle (resize / reset)
- StepView: what the model looked like at one step of the decision trace
- LoadBalancerSimulation: a facade tying state, batch generation and
  scheduling together the way a front end drives them

State is never exposed by reference. Every accessor returns a copy, so
callers rendering the model cannot break its invariants.

Thread Safety:
    SimulationState carries a re-entrant lock. The scheduler holds it for a
    whole pass and resize/reset take it too, so a half-finished pass is
    never visible.

Author: Student
Date: December 2024
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Sequence

import numpy as np

from config import ACOConfig, StepType, DEFAULT_ACO_CONFIG
from pheromone import PheromoneTable
from probability import ProbabilityModel
from scheduler import BatchScheduler, Assignment, DecisionStep, DistributionResult
from validators import (
    ConfigValidator,
    ConfigurationError,
    InvalidBatchError,
    InvalidStateError,
    ValidationError,
    raise_if_invalid
)
from workload import TaskBatch, TaskBatchGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepView:
    """
    The model as seen at one point of a decision trace.

    active_server / active_task are -1 when the step does not refer to one.
    """
    step_index: Optional[int]
    pheromones: List[float]
    loads: List[float]
    active_server: int = -1
    active_task: int = -1
    message: str = ""


class SimulationState:
    """
    Lifecycle owner for servers, loads, pheromones and the decision log.

    Usage:
        state = SimulationState(num_servers=3)
        scheduler.distribute(state, batch)
        state.loads, state.pheromones, state.steps
        state.resize(5)
    """

    def __init__(self, num_servers: int = None, config: ACOConfig = None):
        """
        Initialize the state.

        Args:
            num_servers: Server count (config.num_servers if None). 0 creates
                an unconfigured state that must be resized before use.
            config: Configuration supplying bounds and initial pheromone
        """
        self.config = config or DEFAULT_ACO_CONFIG
        self.lock = threading.RLock()

        self._pheromones = PheromoneTable(0, config=self.config)
        self._loads = np.zeros(0, dtype=np.float64)
        self._assignments: List[Assignment] = []
        self._steps: List[DecisionStep] = []

        if num_servers is None:
            num_servers = self.config.num_servers
        if num_servers != 0:
            self.resize(num_servers)

    def __repr__(self) -> str:
        return (f"SimulationState(servers={self.server_count}, "
                f"loads={self.loads}, pheromones={[round(p, 3) for p in self.pheromones]})")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def resize(self, num_servers: int) -> None:
        """
        Set the server count and reinitialize everything.

        Raises:
            ConfigurationError: If num_servers is outside [min_servers, max_servers]
        """
        raise_if_invalid(
            ConfigValidator.validate_num_servers(
                num_servers, self.config.min_servers, self.config.max_servers
            ),
            ConfigurationError, "resize", "num_servers"
        )
        with self.lock:
            self._pheromones.reset(num_servers)
            self._loads = np.zeros(num_servers, dtype=np.float64)
            self._assignments = []
            self._steps = []
        logger.info(f"State reset with {num_servers} servers")

    def reset(self) -> None:
        """Reinitialize with the current server count."""
        if self.server_count == 0:
            raise InvalidStateError("Cannot reset a state with zero servers", "server_count", 0)
        self.resize(self.server_count)

    def commit_pass(self, pheromones: Sequence[float], loads: Sequence[float],
                    assignments: Sequence[Assignment], steps: Sequence[DecisionStep]) -> None:
        """
        Replace the model with the outcome of a distribution pass.

        Called by BatchScheduler while it holds the lock.
        """
        with self.lock:
            if len(pheromones) != self.server_count or len(loads) != self.server_count:
                raise InvalidStateError(
                    "Pass result does not match server count", "server_count", self.server_count
                )
            self._pheromones = PheromoneTable.from_values(
                pheromones, minimum=self._pheromones.minimum, config=self.config
            )
            self._loads = np.array(loads, dtype=np.float64)
            self._assignments = list(assignments)
            self._steps = list(steps)

    # -------------------------------------------------------------------------
    # Read accessors (copies only)
    # -------------------------------------------------------------------------

    @property
    def server_count(self) -> int:
        return len(self._loads)

    @property
    def loads(self) -> List[float]:
        return self._loads.tolist()

    @property
    def pheromones(self) -> List[float]:
        return self._pheromones.snapshot()

    @property
    def assignments(self) -> List[Assignment]:
        return list(self._assignments)

    @property
    def steps(self) -> List[DecisionStep]:
        return list(self._steps)

    def view(self, step_index: Optional[int] = None) -> StepView:
        """
        Show the model as it was at one step of the last trace.

        Args:
            step_index: Index into steps; None or -1 for the committed state

        Raises:
            ValidationError: If step_index is out of range
        """
        with self.lock:
            if step_index is None or step_index == -1:
                return StepView(step_index=None, pheromones=self.pheromones, loads=self.loads)

            if not (0 <= step_index < len(self._steps)):
                raise ValidationError(
                    f"step_index must be between 0 and {len(self._steps) - 1}",
                    "step_index", step_index
                )

            step = self._steps[step_index]
            active_server = -1
            active_task = -1
            if step.step_type in (StepType.SELECTION, StepType.UPDATE):
                active_server = step.selected_server
                active_task = step.task_index
            elif step.step_type == StepType.PROBABILITY:
                active_task = step.task_index

            return StepView(
                step_index=step_index,
                pheromones=list(step.pheromones),
                loads=list(step.loads),
                active_server=active_server,
                active_task=active_task,
                message=step.message
            )

    def probability_preview(self, model: ProbabilityModel = None) -> List[float]:
        """Distribution a task would see against the committed state."""
        with self.lock:
            if self.server_count == 0:
                raise InvalidStateError("No servers configured", "server_count", 0)
            model = model or ProbabilityModel(self.config)
            return model.compute(self.pheromones, self.loads)

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot for display or export."""
        with self.lock:
            return {
                'server_count': self.server_count,
                'loads': self.loads,
                'pheromones': self.pheromones,
                'assignments': [a.to_dict() for a in self._assignments],
                'steps': [s.to_dict() for s in self._steps]
            }


class LoadBalancerSimulation:
    """
    Facade driving the scheduler the way an interactive front end does:
    generate a batch, distribute it, inspect the trace, resize or reset.

    Usage:
        sim = LoadBalancerSimulation(ACOConfig(seed=42))
        sim.generate_batch()
        result = sim.distribute_current_batch()
    """

    def __init__(self, config: ACOConfig = None, random_source=None,
                 generator: TaskBatchGenerator = None):
        """
        Initialize the simulation.

        Args:
            config: Scheduler configuration
            random_source: Draw source for the scheduler (seeded from config if None)
            generator: Batch generator (seeded from config if None)
        """
        self.config = config or DEFAULT_ACO_CONFIG
        self.config.validate()
        self.state = SimulationState(config=self.config)
        self.scheduler = BatchScheduler(self.config, random_source=random_source)
        self.generator = generator or TaskBatchGenerator(self.config)
        self.current_batch: Optional[TaskBatch] = None
        self.history: List[DistributionResult] = []

    def generate_batch(self, count: int = None) -> TaskBatch:
        """Generate a new pending batch, replacing any undistributed one."""
        self.current_batch = self.generator.generate_batch(count)
        return self.current_batch

    def set_batch(self, tasks: Sequence[float]) -> TaskBatch:
        """Use an explicit list of task sizes as the pending batch."""
        self.current_batch = TaskBatch.of(tasks, config=self.config)
        return self.current_batch

    def distribute_current_batch(self) -> DistributionResult:
        """
        Distribute the pending batch. The batch is consumed.

        Raises:
            InvalidBatchError: If no batch is pending
        """
        if self.current_batch is None:
            raise InvalidBatchError("No batch pending - generate one first", "batch")
        result = self.scheduler.distribute(self.state, self.current_batch)
        self.current_batch = None
        self.history.append(result)
        return result

    def run_batches(self, count: int) -> List[DistributionResult]:
        """Generate and distribute ``count`` batches back to back."""
        results = []
        for _ in range(count):
            self.generate_batch()
            results.append(self.distribute_current_batch())
        return results

    def set_server_count(self, num_servers: int) -> None:
        """Resize the pool; pending work and history are dropped."""
        self.state.resize(num_servers)
        self.current_batch = None
        self.history.clear()

    def reset(self) -> None:
        """Reset loads and pheromones, keeping the server count."""
        self.state.reset()
        self.current_batch = None
        self.history.clear()
        self.generator.reset()

    def get_current_state(self) -> Dict[str, Any]:
        """Current state for display."""
        data = self.state.to_dict()
        data['pending_batch'] = list(self.current_batch.tasks) if self.current_batch else []
        data['batches_distributed'] = len(self.history)
        data['probabilities'] = self.state.probability_preview(self.scheduler.probability_model)
        return data
