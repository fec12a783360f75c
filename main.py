#!/usr/bin/env python3
"""
ACO Load Balancing Simulator - Main Entry Point

Runs task batches through the Ant Colony Optimization scheduler from the
command line and prints the decision trace step by step.

Usage:
    python main.py                          # 3 servers, one random batch
    python main.py -s 5 -b 4 --seed 42      # 5 servers, 4 batches, reproducible
    python main.py --tasks 5,20,9           # distribute an explicit batch
    python main.py --export trace.json      # save the last trace as JSON

Author: Student
Date: December 2024
"""

import sys
import argparse
import logging
from typing import List, Optional

from config import (
    ACOConfig,
    LoggingConfig,
    LoadFactorMode,
    DepositMode,
    StepType,
    VERSION,
    APP_NAME,
    FORMULA_DESCRIPTIONS
)
from scheduler import DecisionStep, DistributionResult
from simulation import LoadBalancerSimulation
from utils import setup_logging, load_summary, DataExporter
from validators import ValidationError, InputSanitizer


def print_banner():
    """Print application banner."""
    print("=" * 70)
    print(f"  {APP_NAME} v{VERSION}")
    print("=" * 70)


def print_formulas(config: ACOConfig):
    """Print the probability and deposit rules in effect."""
    print("\n[Model]")
    print(FORMULA_DESCRIPTIONS[config.load_factor_mode])
    print(FORMULA_DESCRIPTIONS[config.deposit_mode])
    print(f"alpha={config.alpha:g}  beta={config.beta:g}  Q={config.q:g}  "
          f"decay={config.pheromone_decay:g}  min pheromone={config.min_pheromone:g}")


def _vector(values: List[float], digits: int = 4) -> str:
    return "[" + ", ".join(f"{v:.{digits}f}" for v in values) + "]"


def format_step(step: DecisionStep) -> str:
    """Render one decision step as plain text."""
    lines = [f"[{step.index:02d}] {step.step_type.value.upper():<11} {step.message}"]

    if step.step_type == StepType.PROBABILITY:
        lines.append(f"     load factors : {_vector(step.load_factors, 2)}")
        lines.append(f"     P^alpha      : {_vector(step.pheromone_powers)}")
        lines.append(f"     raw weights  : {_vector(step.raw_probabilities)}")
        lines.append(f"     probabilities: {_vector(step.probabilities)}")
    elif step.step_type == StepType.SELECTION:
        lines.append(f"     random {step.random_value:.4f} <= cumulative {step.cumulative:.4f}")
    elif step.step_type == StepType.UPDATE:
        lines.append(
            f"     pheromone {step.old_pheromone:.4f} + {step.pheromone_contribution:.4f}"
            f" = {step.new_pheromone:.4f}"
        )
    else:
        lines.append(f"     pheromones   : {_vector(step.pheromones)}")
        lines.append(f"     loads        : {_vector(step.loads, 1)}")
        if step.assignments:
            placed = ", ".join(f"{a.task:g}->S{a.server + 1}" for a in step.assignments)
            lines.append(f"     assignments  : {placed}")

    return "\n".join(lines)


def print_result(batch_number: int, result: DistributionResult, show_steps: bool = True):
    """Print one pass: its trace and the resulting vectors."""
    print(f"\n[Batch {batch_number}] processing order: "
          f"{', '.join(f'{t:g}' for t in result.processing_order)}")
    print("-" * 70)
    if show_steps:
        for step in result.steps:
            print(format_step(step))
    print(f"  Loads:      {_vector(result.loads, 1)}")
    print(f"  Pheromones: {_vector(result.pheromones)}")


def build_config(args: argparse.Namespace) -> ACOConfig:
    """Translate parsed arguments into a validated ACOConfig."""
    config = ACOConfig(
        num_servers=InputSanitizer.sanitize_int(args.servers, 1, 10, default=3),
        pheromone_decay=args.decay,
        alpha=args.alpha,
        beta=args.beta,
        q=args.q,
        load_factor_mode=LoadFactorMode(args.load_factor),
        deposit_mode=DepositMode(args.deposit),
        seed=args.seed
    )
    config.validate()
    return config


def run(args: argparse.Namespace) -> int:
    """Run the requested batches and report."""
    config = build_config(args)
    simulation = LoadBalancerSimulation(config)
    if args.show_formulas:
        print_formulas(config)

    explicit = InputSanitizer.parse_task_list(args.tasks) if args.tasks else None
    results = []
    rows = []

    for number in range(1, args.batches + 1):
        if explicit is not None:
            simulation.set_batch(explicit)
        else:
            simulation.generate_batch()
        result = simulation.distribute_current_batch()
        results.append(result)
        rows.extend(
            {'batch': number, 'order': order, 'server': a.server, 'task': a.task}
            for order, a in enumerate(result.assignments)
        )
        if not args.quiet:
            print_result(number, result, show_steps=not args.summary_only)

    summary = load_summary(simulation.state.loads)
    print("\n[Summary]")
    print("-" * 70)
    print(f"  Servers: {simulation.state.server_count}   Batches: {len(results)}   "
          f"Tasks: {len(rows)}")
    print(f"  Loads:      {_vector(simulation.state.loads, 1)}")
    print(f"  Pheromones: {_vector(simulation.state.pheromones)}")
    print(f"  Next-task probabilities: {_vector(simulation.state.probability_preview())}")
    print(f"  Load std: {summary['std']:.2f}   Balance index: {summary['load_balance_index']:.4f}   "
          f"Jain's fairness: {summary['jains_fairness']:.4f}")

    exporter = DataExporter()
    if args.export:
        data = simulation.state.to_dict()
        data['config'] = config.to_dict()
        exporter.export_json(data, args.export)
        print(f"\n  Trace written to {args.export}")
    if args.csv:
        exporter.export_assignments_csv(rows, args.csv)
        print(f"  Assignments written to {args.csv}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} v{VERSION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py -s 4 -b 3 --seed 1     Three random batches over four servers
  python main.py --tasks 5,20,9         Distribute a fixed batch
  python main.py --deposit inverse_task Use Q / task as the deposit
        """
    )
    parser.add_argument('--servers', '-s', type=int, default=3,
                        help='Number of servers, 1-10 (default: 3)')
    parser.add_argument('--batches', '-b', type=int, default=1,
                        help='Number of batches to distribute (default: 1)')
    parser.add_argument('--tasks', '-t', type=str, default=None,
                        help='Comma separated task sizes used for every batch')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for batch generation and selection draws')
    parser.add_argument('--decay', type=float, default=0.8, help='Pheromone decay (default: 0.8)')
    parser.add_argument('--alpha', type=float, default=1.0, help='Pheromone weight (default: 1.0)')
    parser.add_argument('--beta', type=float, default=2.0, help='Load weight (default: 2.0)')
    parser.add_argument('--q', type=float, default=10.0, help='Deposit constant (default: 10)')
    parser.add_argument('--load-factor', choices=[m.value for m in LoadFactorMode],
                        default=LoadFactorMode.POSITIVE_OR_ONE.value,
                        help='Load term denominator variant')
    parser.add_argument('--deposit', choices=[m.value for m in DepositMode],
                        default=DepositMode.INVERSE_LOAD.value,
                        help='Pheromone deposit variant')
    parser.add_argument('--export', type=str, default=None, help='Write the final state and trace as JSON')
    parser.add_argument('--csv', type=str, default=None, help='Write all assignments as CSV')
    parser.add_argument('--show-formulas', action='store_true',
                        help='Print the probability and deposit formulas in use')
    parser.add_argument('--summary-only', action='store_true', help='Skip per-step trace output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only print the summary')
    parser.add_argument('--verbose', action='store_true', help='Enable DEBUG logging')
    parser.add_argument('--version', '-v', action='version', version=f'{APP_NAME} v{VERSION}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    setup_logging(LoggingConfig(verbose=args.verbose, log_to_console=args.verbose))

    if args.batches < 1:
        print("Error: --batches must be at least 1", file=sys.stderr)
        return 2

    if not args.quiet:
        print_banner()

    try:
        return run(args)
    except ValidationError as e:
        logging.getLogger(__name__).error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
