from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from solvers.constructive import construct
from solvers.model import Assignment, Formula, Incumbent, SearchStats, flip, to_bits
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TabuConfig:
    iterations: int = 100
    tenure: Optional[int] = None
    jitter: int = 5

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")
        if self.tenure is not None and self.tenure < 0:
            raise ValueError("tenure must be non-negative")
        if self.jitter < 0:
            raise ValueError("jitter must be non-negative")

    def base_tenure(self, num_vars: int) -> int:
        if self.tenure is None:
            return 7 + num_vars // 10
        return self.tenure


def select_move(
    formula: Formula,
    assignment: Assignment,
    cost: int,
    best_cost: int,
    tabu_until: List[int],
    iteration: int,
    stats: Optional[SearchStats] = None,
) -> Tuple[Optional[int], int]:
    """Pick the admissible flip with the smallest delta.

    A move is admissible when the variable is not tabu at ``iteration`` or
    when it would beat ``best_cost`` (aspiration). Returns ``(None, 0)`` when
    every move is tabu and none aspirates.
    """
    best_index: Optional[int] = None
    best_delta = 0
    for index in range(formula.num_vars):
        delta = formula.flip_delta(assignment, index)
        if stats is not None:
            stats.evaluations += 1
        is_tabu = iteration < tabu_until[index]
        aspires = cost + delta < best_cost
        if is_tabu and not aspires:
            continue
        if best_index is None or delta < best_delta:
            best_index = index
            best_delta = delta
    return best_index, best_delta


def tabu_search(
    formula: Formula,
    assignment: Assignment,
    config: TabuConfig,
    rng: random.Random,
    stats: Optional[SearchStats] = None,
) -> Tuple[Assignment, int]:
    current = list(assignment)
    cost = formula.cost(current)
    incumbent = Incumbent()
    incumbent.offer(current, cost)
    tenure = config.base_tenure(formula.num_vars)
    tabu_until = [0] * formula.num_vars
    for iteration in range(1, config.iterations + 1):
        if incumbent.cost == 0:
            break
        index, delta = select_move(formula, current, cost, incumbent.cost, tabu_until, iteration, stats)
        if stats is not None:
            stats.iterations += 1
        if index is None:
            continue
        flip(current, index)
        cost += delta
        tabu_until[index] = iteration + tenure + rng.randint(0, config.jitter)
        if stats is not None:
            stats.flips += 1
        incumbent.offer(current, cost)
    logger.debug("tabu search finished with best cost %d", incumbent.cost)
    return incumbent.assignment, incumbent.cost


def run_solver(path: Path, iterations: int, tenure: int | None, jitter: int, seed: int | None) -> Dict[str, object]:
    formula = Formula.from_cnf(parse_dimacs(path))
    start = construct(formula, formula.frequencies())
    stats = SearchStats()
    assignment, cost = tabu_search(
        formula, start, TabuConfig(iterations, tenure, jitter), random.Random(seed), stats
    )
    return {
        "solver": "tabu",
        "initial_cost": formula.cost(start),
        "cost": cost,
        **stats.as_dict(),
        "num_vars": formula.num_vars,
        "num_clauses": len(formula),
        "assignment": to_bits(assignment),
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--cnf", required=True)
    parser.add_argument("--iterations", type=int, default=100)
    parser.add_argument("--tenure", type=int, default=None)
    parser.add_argument("--jitter", type=int, default=5)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=args.log_level)
    start = time.perf_counter()
    result = run_solver(Path(args.cnf), args.iterations, args.tenure, args.jitter, args.seed)
    result["wall_time"] = time.perf_counter() - start
    print(json.dumps(result))


if __name__ == "__main__":
    main()
